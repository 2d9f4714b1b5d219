"""Sliding-window cache of recently seen messages used for gossip."""

from __future__ import annotations

from collections import Counter, deque
from dataclasses import dataclass
from typing import Callable, Optional

from gossipmesh.messages import Message


@dataclass(frozen=True)
class CacheEntry:
    """A cached message ID and the topic it was published on."""

    mid: str
    topic: str


class MessageCache:
    """Remembers messages for ``history`` windows and gossips those of the last ``gossip``.

    The slack between ``gossip`` and ``history`` covers the time between a
    message being advertised in IHAVE gossip and the peer asking for it with IWANT.
    """

    def __init__(self, gossip: int, history: int, msg_id: Callable[[Message], str]) -> None:
        if gossip > history:
            raise ValueError(
                f"invalid parameters for message cache; gossip slots ({gossip}) "
                f"cannot be larger than history slots ({history})"
            )
        if history < 1:
            raise ValueError(f"message cache needs at least one history slot, got {history}")
        self.msg_id = msg_id
        self._gossip = gossip
        self._msgs: dict[str, Message] = {}
        self._peertx: dict[str, Counter[str]] = {}
        self._history: deque[list[CacheEntry]] = deque(
            ([] for _ in range(history)), maxlen=history
        )

    def __len__(self) -> int:
        return len(self._msgs)

    def put(self, msg: Message) -> None:
        """Add a message to the newest window."""
        mid = self.msg_id(msg)
        self._msgs[mid] = msg
        self._history[0].append(CacheEntry(mid=mid, topic=msg.topic or ""))

    def get(self, mid: str) -> Optional[Message]:
        """Return the cached message with this ID, or None."""
        return self._msgs.get(mid)

    def get_for_peer(self, mid: str, peer: str) -> Optional[tuple[Message, int]]:
        """Return the message and how many times ``peer`` has now asked for it, or None."""
        msg = self._msgs.get(mid)
        if msg is None:
            return None
        counts = self._peertx.setdefault(mid, Counter())
        counts[peer] += 1
        return msg, counts[peer]

    def get_gossip_ids(self, topic: str) -> list[str]:
        """Return the IDs of messages on ``topic`` in the gossip windows, newest window first."""
        return [
            entry.mid
            for window in list(self._history)[: self._gossip]
            for entry in window
            if entry.topic == topic
        ]

    def shift(self) -> None:
        """Advance the window, forgetting the messages of the oldest one."""
        for entry in self._history[-1]:
            self._msgs.pop(entry.mid, None)
            self._peertx.pop(entry.mid, None)
        self._history.appendleft([])