"""Wire messages exchanged between pubsub peers, with their protobuf encoding."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional, Union

_VARINT = 0
_LENGTH_DELIMITED = 2


def _varint(value: int) -> bytes:
    out = bytearray()
    while value > 0x7F:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def _varint_len(value: int) -> int:
    return max(1, (value.bit_length() + 6) // 7)


class _Wire:
    """Shared encoding for messages that list their fields through ``_entries``."""

    def to_bytes(self) -> bytes:
        """Encode the message in protobuf wire format."""
        return b"".join(_encode_entry(number, value) for number, value in self._entries())  # type: ignore[attr-defined]


_Value = Union[bool, int, bytes, str, _Wire]


def _optional(*pairs: tuple[int, Optional[_Value]]) -> Iterator[tuple[int, _Value]]:
    for number, value in pairs:
        if value is not None:
            yield number, value


def _repeated(number: int, values: Iterable[_Value]) -> Iterator[tuple[int, _Value]]:
    for value in values:
        yield number, value


def _payload_len(value: _Value) -> int:
    if isinstance(value, _Wire):
        return value.size()  # type: ignore[attr-defined]
    if isinstance(value, str):
        return len(value.encode("utf-8"))
    return len(value)  # type: ignore[arg-type]


def _entry_size(number: int, value: _Value) -> int:
    if isinstance(value, (bool, int)):
        return _varint_len(number << 3 | _VARINT) + _varint_len(int(value))
    length = _payload_len(value)
    return _varint_len(number << 3 | _LENGTH_DELIMITED) + _varint_len(length) + length


def _encode_entry(number: int, value: _Value) -> bytes:
    if isinstance(value, (bool, int)):
        return _varint(number << 3 | _VARINT) + _varint(int(value))
    if isinstance(value, _Wire):
        payload = value.to_bytes()
    elif isinstance(value, str):
        payload = value.encode("utf-8")
    else:
        payload = bytes(value)
    return _varint(number << 3 | _LENGTH_DELIMITED) + _varint(len(payload)) + payload


def _size_of(entries: Iterable[tuple[int, _Value]]) -> int:
    return sum(_entry_size(number, value) for number, value in entries)


@dataclass
class Message(_Wire):
    """A published message; ``id`` and ``received_from`` are local and never encoded."""

    from_peer: Optional[bytes] = None
    data: Optional[bytes] = None
    seqno: Optional[bytes] = None
    topic: Optional[str] = None
    signature: Optional[bytes] = None
    key: Optional[bytes] = None
    id: str = field(default="", compare=False)
    received_from: str = field(default="", compare=False)

    def _entries(self) -> Iterator[tuple[int, _Value]]:
        return _optional(
            (1, self.from_peer),
            (2, self.data),
            (3, self.seqno),
            (4, self.topic),
            (5, self.signature),
            (6, self.key),
        )

    def size(self) -> int:
        """Return the encoded size in bytes."""
        return _size_of(self._entries())


@dataclass
class PeerInfo(_Wire):
    """A peer offered through peer exchange, optionally with its signed record."""

    peer_id: Optional[bytes] = None
    signed_peer_record: Optional[bytes] = None

    def _entries(self) -> Iterator[tuple[int, _Value]]:
        return _optional((1, self.peer_id), (2, self.signed_peer_record))

    def size(self) -> int:
        """Return the encoded size in bytes."""
        return _size_of(self._entries())


@dataclass
class SubOpts(_Wire):
    """A subscription change for one topic."""

    subscribe: Optional[bool] = None
    topic_id: Optional[str] = None

    def _entries(self) -> Iterator[tuple[int, _Value]]:
        return _optional((1, self.subscribe), (2, self.topic_id))

    def size(self) -> int:
        """Return the encoded size in bytes."""
        return _size_of(self._entries())


@dataclass
class ControlGraft(_Wire):
    """Request to be added to the sender's mesh for a topic."""

    topic_id: Optional[str] = None

    def _entries(self) -> Iterator[tuple[int, _Value]]:
        return _optional((1, self.topic_id))

    def size(self) -> int:
        """Return the encoded size in bytes."""
        return _size_of(self._entries())


@dataclass
class ControlPrune(_Wire):
    """Notice of removal from a topic mesh, with optional peer exchange and backoff seconds."""

    topic_id: Optional[str] = None
    peers: list[PeerInfo] = field(default_factory=list)
    backoff: Optional[int] = None

    def _entries(self) -> Iterator[tuple[int, _Value]]:
        yield from _optional((1, self.topic_id))
        yield from _repeated(2, self.peers)
        yield from _optional((3, self.backoff))

    def size(self) -> int:
        """Return the encoded size in bytes."""
        return _size_of(self._entries())


@dataclass
class ControlIHave(_Wire):
    """Advertisement of message IDs held for a topic."""

    topic_id: Optional[str] = None
    message_ids: list[str] = field(default_factory=list)

    def _entries(self) -> Iterator[tuple[int, _Value]]:
        yield from _optional((1, self.topic_id))
        yield from _repeated(2, self.message_ids)

    def size(self) -> int:
        """Return the encoded size in bytes."""
        return _size_of(self._entries())


@dataclass
class ControlIWant(_Wire):
    """Request for the messages with the given IDs."""

    message_ids: list[str] = field(default_factory=list)

    def _entries(self) -> Iterator[tuple[int, _Value]]:
        return _repeated(1, self.message_ids)

    def size(self) -> int:
        """Return the encoded size in bytes."""
        return _size_of(self._entries())


@dataclass
class ControlMessage(_Wire):
    """The control part of an RPC: gossip and mesh maintenance."""

    ihave: list[ControlIHave] = field(default_factory=list)
    iwant: list[ControlIWant] = field(default_factory=list)
    graft: list[ControlGraft] = field(default_factory=list)
    prune: list[ControlPrune] = field(default_factory=list)

    def _entries(self) -> Iterator[tuple[int, _Value]]:
        yield from _repeated(1, self.ihave)
        yield from _repeated(2, self.iwant)
        yield from _repeated(3, self.graft)
        yield from _repeated(4, self.prune)

    def size(self) -> int:
        """Return the encoded size in bytes."""
        return _size_of(self._entries())


@dataclass
class RPC(_Wire):
    """One unit of exchange with a peer; ``sender`` is local and never encoded."""

    subscriptions: list[SubOpts] = field(default_factory=list)
    publish: list[Message] = field(default_factory=list)
    control: Optional[ControlMessage] = None
    sender: str = field(default="", compare=False)

    def _entries(self) -> Iterator[tuple[int, _Value]]:
        yield from _repeated(1, self.subscriptions)
        yield from _repeated(2, self.publish)
        yield from _optional((3, self.control))

    def size(self) -> int:
        """Return the encoded size in bytes."""
        return _size_of(self._entries())

    def copy(self) -> RPC:
        """Return a copy whose lists, including the control lists, can be changed independently."""
        control = None
        if self.control is not None:
            control = ControlMessage(
                ihave=list(self.control.ihave),
                iwant=list(self.control.iwant),
                graft=list(self.control.graft),
                prune=list(self.control.prune),
            )
        return RPC(
            subscriptions=list(self.subscriptions),
            publish=list(self.publish),
            control=control,
            sender=self.sender,
        )


def rpc_with_messages(*messages: Message) -> RPC:
    """Build an RPC that publishes the given messages."""
    return RPC(publish=list(messages))


def rpc_with_control(
    messages: Optional[Iterable[Message]],
    ihave: Optional[Iterable[ControlIHave]],
    iwant: Optional[Iterable[ControlIWant]],
    graft: Optional[Iterable[ControlGraft]],
    prune: Optional[Iterable[ControlPrune]],
) -> RPC:
    """Build an RPC carrying messages and a control message made of the given parts."""
    out = rpc_with_messages(*(messages or ()))
    out.control = ControlMessage(
        ihave=list(ihave or ()),
        iwant=list(iwant or ()),
        graft=list(graft or ()),
        prune=list(prune or ()),
    )
    return out