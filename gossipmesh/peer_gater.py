"""Reactive validation queue management: random early drop of peers with poor goodput."""

from __future__ import annotations

import random
import threading
import time
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Callable, Optional

from gossipmesh.messages import Message

DEFAULT_DECAY_INTERVAL = 1.0
"""Default interval, in seconds, between counter decays."""

DEFAULT_DECAY_TO_ZERO = 0.01
"""Default value below which a decayed counter is reset to zero."""

REJECT_VALIDATION_QUEUE_FULL = "validation queue full"
REJECT_VALIDATION_THROTTLED = "validation throttled"
REJECT_VALIDATION_FAILED = "validation failed"
REJECT_VALIDATION_IGNORED = "validation ignored"

UNKNOWN_IP = "<unknown>"


def decay_for(
    duration: float,
    interval: float = DEFAULT_DECAY_INTERVAL,
    to_zero: float = DEFAULT_DECAY_TO_ZERO,
) -> float:
    """Return the per-interval decay factor that brings a counter to ``to_zero`` after ``duration``."""
    ticks = duration / interval
    return to_zero ** (1 / ticks)


DEFAULT_PEER_GATER_RETAIN_STATS = 6 * 3600.0
DEFAULT_PEER_GATER_QUIET = 60.0
DEFAULT_PEER_GATER_DUPLICATE_WEIGHT = 0.125
DEFAULT_PEER_GATER_IGNORE_WEIGHT = 1.0
DEFAULT_PEER_GATER_REJECT_WEIGHT = 16.0
DEFAULT_PEER_GATER_THRESHOLD = 0.33
DEFAULT_PEER_GATER_GLOBAL_DECAY = decay_for(2 * 60.0)
DEFAULT_PEER_GATER_SOURCE_DECAY = decay_for(3600.0)


class AcceptStatus(IntEnum):
    """How much of an incoming RPC from a peer is processed."""

    NONE = 0
    """Drop the RPC entirely."""

    CONTROL = 1
    """Process only the control part of the RPC."""

    ALL = 2
    """Process the whole RPC."""


@dataclass
class PeerGaterParams:
    """Parameters of the peer gater; durations are in seconds."""

    threshold: float
    global_decay: float
    source_decay: float
    decay_interval: float = DEFAULT_DECAY_INTERVAL
    decay_to_zero: float = DEFAULT_DECAY_TO_ZERO
    retain_stats: float = DEFAULT_PEER_GATER_RETAIN_STATS
    quiet: float = DEFAULT_PEER_GATER_QUIET
    duplicate_weight: float = DEFAULT_PEER_GATER_DUPLICATE_WEIGHT
    ignore_weight: float = DEFAULT_PEER_GATER_IGNORE_WEIGHT
    reject_weight: float = DEFAULT_PEER_GATER_REJECT_WEIGHT
    topic_delivery_weights: dict[str, float] = field(default_factory=dict)

    def validate(self) -> None:
        """Raise ValueError if any parameter is out of range."""
        if self.threshold <= 0:
            raise ValueError("invalid threshold; must be > 0")
        if not 0 < self.global_decay < 1:
            raise ValueError("invalid global_decay; must be between 0 and 1")
        if not 0 < self.source_decay < 1:
            raise ValueError("invalid source_decay; must be between 0 and 1")
        if self.decay_interval < 1:
            raise ValueError("invalid decay_interval; must be at least 1s")
        if not 0 < self.decay_to_zero < 1:
            raise ValueError("invalid decay_to_zero; must be between 0 and 1")
        # a retain_stats of 0 means stats are not retained, so it needs no check
        if self.quiet < 1:
            raise ValueError("invalid quiet interval; must be at least 1s")
        if self.duplicate_weight <= 0:
            raise ValueError("invalid duplicate_weight; must be > 0")
        if self.ignore_weight < 1:
            raise ValueError("invalid ignore_weight; must be >= 1")
        if self.reject_weight < 1:
            raise ValueError("invalid reject_weight; must be >= 1")

    def with_topic_delivery_weights(self, weights: dict[str, float]) -> PeerGaterParams:
        """Set the priority topic delivery weights and return these parameters."""
        self.topic_delivery_weights = weights
        return self


def new_peer_gater_params(threshold: float, global_decay: float, source_decay: float) -> PeerGaterParams:
    """Return parameters with the given threshold and decays and defaults for the rest."""
    return PeerGaterParams(threshold=threshold, global_decay=global_decay, source_decay=source_decay)


def default_peer_gater_params() -> PeerGaterParams:
    """Return the default peer gater parameters."""
    return new_peer_gater_params(
        DEFAULT_PEER_GATER_THRESHOLD,
        DEFAULT_PEER_GATER_GLOBAL_DECAY,
        DEFAULT_PEER_GATER_SOURCE_DECAY,
    )


@dataclass
class _PeerGaterStats:
    connected: int = 0
    expire: float = float("-inf")  # only meaningful while connected == 0
    deliver: float = 0.0
    duplicate: float = 0.0
    ignore: float = 0.0
    reject: float = 0.0


class PeerGater:
    """Throttles peers before validation once the validation queue starts throttling.

    The gater turns on when the ratio of throttled to validated messages exceeds
    the threshold, and then admits a peer's RPCs at random with a probability
    that follows the goodput of all peers sharing its IP address. It turns off
    when no throttling has happened for the quiet interval.
    """

    def __init__(self, params: PeerGaterParams, get_ip: Optional[Callable[[str], str]] = None) -> None:
        self.params = params
        self._get_ip = get_ip
        self._lock = threading.Lock()
        self._validate = 0.0
        self._throttle = 0.0
        self._last_throttle: Optional[float] = None
        # several peer IDs may share one stats object when they are on the same IP
        self._peer_stats: dict[str, _PeerGaterStats] = {}
        self._ip_stats: dict[str, _PeerGaterStats] = {}
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def __enter__(self) -> PeerGater:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def start(self) -> None:
        """Start decaying the counters every decay interval in a background thread."""
        if self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._background, name="peer-gater", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Stop the background decay and wait for it to finish."""
        thread = self._thread
        if thread is None:
            return
        self._stop.set()
        thread.join()
        self._thread = None

    def _background(self) -> None:
        while not self._stop.wait(self.params.decay_interval):
            self.decay_stats()

    def _decayed(self, value: float, decay: float) -> float:
        value *= decay
        return 0.0 if value < self.params.decay_to_zero else value

    def decay_stats(self) -> None:
        """Decay all counters once and drop expired stats of disconnected IPs."""
        params = self.params
        with self._lock:
            self._validate = self._decayed(self._validate, params.global_decay)
            self._throttle = self._decayed(self._throttle, params.global_decay)

            now = time.monotonic()
            for ip, st in list(self._ip_stats.items()):
                if st.connected > 0:
                    st.deliver = self._decayed(st.deliver, params.source_decay)
                    st.duplicate = self._decayed(st.duplicate, params.source_decay)
                    st.ignore = self._decayed(st.ignore, params.source_decay)
                    st.reject = self._decayed(st.reject, params.source_decay)
                elif st.expire < now:
                    del self._ip_stats[ip]

    def _stats_for(self, peer: str) -> _PeerGaterStats:
        st = self._peer_stats.get(peer)
        if st is None:
            ip = self._get_ip(peer) if self._get_ip is not None else UNKNOWN_IP
            st = self._ip_stats.setdefault(ip, _PeerGaterStats())
            self._peer_stats[peer] = st
        return st

    def accept_from(self, peer: str) -> AcceptStatus:
        """Decide how much of an RPC from ``peer`` to accept."""
        params = self.params
        with self._lock:
            # circuit breaker off once the queue has been quiet long enough
            if self._last_throttle is None or time.monotonic() - self._last_throttle > params.quiet:
                return AcceptStatus.ALL
            if self._throttle == 0:
                return AcceptStatus.ALL
            if self._validate != 0 and self._throttle / self._validate < params.threshold:
                return AcceptStatus.ALL

            st = self._stats_for(peer)
            total = (
                st.deliver
                + params.duplicate_weight * st.duplicate
                + params.ignore_weight * st.ignore
                + params.reject_weight * st.reject
            )
            if total == 0:
                return AcceptStatus.ALL

            # biased by one so a peer is never throttled unconditionally
            threshold = (1 + st.deliver) / (1 + total)
            if random.random() < threshold:
                return AcceptStatus.ALL
            return AcceptStatus.CONTROL

    def add_peer(self, peer: str, protocol: str) -> None:
        """Record that ``peer`` connected."""
        with self._lock:
            self._stats_for(peer).connected += 1

    def remove_peer(self, peer: str) -> None:
        """Record that ``peer`` disconnected; its IP stats are retained for a while."""
        with self._lock:
            st = self._stats_for(peer)
            st.connected -= 1
            st.expire = time.monotonic() + self.params.retain_stats
            del self._peer_stats[peer]

    def validate_message(self, msg: Message) -> None:
        """Count a message entering validation."""
        with self._lock:
            self._validate += 1

    def deliver_message(self, msg: Message) -> None:
        """Credit the sender with a delivery, weighted by the message topic."""
        with self._lock:
            st = self._stats_for(msg.received_from)
            weight = self.params.topic_delivery_weights.get(msg.topic or "", 0)
            st.deliver += weight if weight != 0 else 1

    def reject_message(self, msg: Message, reason: str) -> None:
        """Count a throttle event or charge the sender with an ignored or rejected message."""
        with self._lock:
            if reason in (REJECT_VALIDATION_QUEUE_FULL, REJECT_VALIDATION_THROTTLED):
                self._last_throttle = time.monotonic()
                self._throttle += 1
            elif reason == REJECT_VALIDATION_IGNORED:
                self._stats_for(msg.received_from).ignore += 1
            else:
                self._stats_for(msg.received_from).reject += 1

    def duplicate_message(self, msg: Message) -> None:
        """Charge the sender with a duplicate delivery."""
        with self._lock:
            self._stats_for(msg.received_from).duplicate += 1