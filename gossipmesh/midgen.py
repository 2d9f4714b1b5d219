"""Message ID computation with per-topic overrides."""

from __future__ import annotations

import threading
from typing import Callable

from gossipmesh.messages import Message

MsgIdFunction = Callable[[Message], str]


class MsgIdGenerator:
    """Computes message IDs, using a per-topic function where one is set."""

    def __init__(self, default: MsgIdFunction) -> None:
        self.default = default
        self._lock = threading.Lock()
        self._topic_gens: dict[str, MsgIdFunction] = {}

    def set(self, topic: str, gen: MsgIdFunction) -> None:
        """Use ``gen`` to compute IDs of messages on ``topic``."""
        with self._lock:
            self._topic_gens[topic] = gen

    def id(self, msg: Message) -> str:
        """Return the message ID, computing and caching it on the message if needed."""
        if msg.id:
            return msg.id
        msg.id = self.raw_id(msg)
        return msg.id

    def raw_id(self, msg: Message) -> str:
        """Compute the message ID without consulting or updating the cached value."""
        with self._lock:
            gen = self._topic_gens.get(msg.topic or "", self.default)
        return gen(msg)