"""Tunable parameters of the GossipSub router, with their defaults; durations are in seconds."""

from __future__ import annotations

from dataclasses import dataclass

GOSSIPSUB_D = 6
GOSSIPSUB_DLO = 5
GOSSIPSUB_DHI = 12
GOSSIPSUB_DSCORE = 4
GOSSIPSUB_DOUT = 2
GOSSIPSUB_HISTORY_LENGTH = 5
GOSSIPSUB_HISTORY_GOSSIP = 3
GOSSIPSUB_DLAZY = 6
GOSSIPSUB_GOSSIP_FACTOR = 0.25
GOSSIPSUB_GOSSIP_RETRANSMISSION = 3
GOSSIPSUB_HEARTBEAT_INITIAL_DELAY = 0.1
GOSSIPSUB_HEARTBEAT_INTERVAL = 1.0
GOSSIPSUB_FANOUT_TTL = 60.0
GOSSIPSUB_PRUNE_PEERS = 16
GOSSIPSUB_PRUNE_BACKOFF = 60.0
GOSSIPSUB_UNSUBSCRIBE_BACKOFF = 10.0
GOSSIPSUB_CONNECTORS = 8
GOSSIPSUB_MAX_PENDING_CONNECTIONS = 128
GOSSIPSUB_CONNECTION_TIMEOUT = 30.0
GOSSIPSUB_DIRECT_CONNECT_TICKS = 300
GOSSIPSUB_DIRECT_CONNECT_INITIAL_DELAY = 1.0
GOSSIPSUB_OPPORTUNISTIC_GRAFT_TICKS = 60
GOSSIPSUB_OPPORTUNISTIC_GRAFT_PEERS = 2
GOSSIPSUB_GRAFT_FLOOD_THRESHOLD = 10.0
GOSSIPSUB_MAX_IHAVE_LENGTH = 5000
GOSSIPSUB_MAX_IHAVE_MESSAGES = 10
GOSSIPSUB_IWANT_FOLLOWUP_TIME = 3.0
GOSSIPSUB_SLOW_HEARTBEAT_WARNING = 0.1


@dataclass
class GossipSubParams:
    """All GossipSub overlay, gossip and timing parameters.

    ``d`` is the target mesh degree, kept between ``dlo`` and ``dhi``. When a
    mesh is pruned, ``dscore`` of the survivors are the best scoring and at
    least ``dout`` have outbound connections; ``dout`` must stay below ``dlo``
    and not exceed ``d / 2``. ``history_gossip`` must not exceed
    ``history_length``. Durations are in seconds; ``slow_heartbeat_warning`` is
    a fraction of ``heartbeat_interval``.
    """

    d: int = GOSSIPSUB_D
    dlo: int = GOSSIPSUB_DLO
    dhi: int = GOSSIPSUB_DHI
    dscore: int = GOSSIPSUB_DSCORE
    dout: int = GOSSIPSUB_DOUT
    history_length: int = GOSSIPSUB_HISTORY_LENGTH
    history_gossip: int = GOSSIPSUB_HISTORY_GOSSIP
    dlazy: int = GOSSIPSUB_DLAZY
    gossip_factor: float = GOSSIPSUB_GOSSIP_FACTOR
    gossip_retransmission: int = GOSSIPSUB_GOSSIP_RETRANSMISSION
    heartbeat_initial_delay: float = GOSSIPSUB_HEARTBEAT_INITIAL_DELAY
    heartbeat_interval: float = GOSSIPSUB_HEARTBEAT_INTERVAL
    slow_heartbeat_warning: float = GOSSIPSUB_SLOW_HEARTBEAT_WARNING
    fanout_ttl: float = GOSSIPSUB_FANOUT_TTL
    prune_peers: int = GOSSIPSUB_PRUNE_PEERS
    prune_backoff: float = GOSSIPSUB_PRUNE_BACKOFF
    unsubscribe_backoff: float = GOSSIPSUB_UNSUBSCRIBE_BACKOFF
    connectors: int = GOSSIPSUB_CONNECTORS
    max_pending_connections: int = GOSSIPSUB_MAX_PENDING_CONNECTIONS
    connection_timeout: float = GOSSIPSUB_CONNECTION_TIMEOUT
    direct_connect_ticks: int = GOSSIPSUB_DIRECT_CONNECT_TICKS
    direct_connect_initial_delay: float = GOSSIPSUB_DIRECT_CONNECT_INITIAL_DELAY
    opportunistic_graft_ticks: int = GOSSIPSUB_OPPORTUNISTIC_GRAFT_TICKS
    opportunistic_graft_peers: int = GOSSIPSUB_OPPORTUNISTIC_GRAFT_PEERS
    graft_flood_threshold: float = GOSSIPSUB_GRAFT_FLOOD_THRESHOLD
    max_ihave_length: int = GOSSIPSUB_MAX_IHAVE_LENGTH
    max_ihave_messages: int = GOSSIPSUB_MAX_IHAVE_MESSAGES
    iwant_followup_time: float = GOSSIPSUB_IWANT_FOLLOWUP_TIME


def default_gossipsub_params() -> GossipSubParams:
    """Return parameters built from the current module-level defaults."""
    return GossipSubParams(
        d=GOSSIPSUB_D,
        dlo=GOSSIPSUB_DLO,
        dhi=GOSSIPSUB_DHI,
        dscore=GOSSIPSUB_DSCORE,
        dout=GOSSIPSUB_DOUT,
        history_length=GOSSIPSUB_HISTORY_LENGTH,
        history_gossip=GOSSIPSUB_HISTORY_GOSSIP,
        dlazy=GOSSIPSUB_DLAZY,
        gossip_factor=GOSSIPSUB_GOSSIP_FACTOR,
        gossip_retransmission=GOSSIPSUB_GOSSIP_RETRANSMISSION,
        heartbeat_initial_delay=GOSSIPSUB_HEARTBEAT_INITIAL_DELAY,
        heartbeat_interval=GOSSIPSUB_HEARTBEAT_INTERVAL,
        slow_heartbeat_warning=GOSSIPSUB_SLOW_HEARTBEAT_WARNING,
        fanout_ttl=GOSSIPSUB_FANOUT_TTL,
        prune_peers=GOSSIPSUB_PRUNE_PEERS,
        prune_backoff=GOSSIPSUB_PRUNE_BACKOFF,
        unsubscribe_backoff=GOSSIPSUB_UNSUBSCRIBE_BACKOFF,
        connectors=GOSSIPSUB_CONNECTORS,
        max_pending_connections=GOSSIPSUB_MAX_PENDING_CONNECTIONS,
        connection_timeout=GOSSIPSUB_CONNECTION_TIMEOUT,
        direct_connect_ticks=GOSSIPSUB_DIRECT_CONNECT_TICKS,
        direct_connect_initial_delay=GOSSIPSUB_DIRECT_CONNECT_INITIAL_DELAY,
        opportunistic_graft_ticks=GOSSIPSUB_OPPORTUNISTIC_GRAFT_TICKS,
        opportunistic_graft_peers=GOSSIPSUB_OPPORTUNISTIC_GRAFT_PEERS,
        graft_flood_threshold=GOSSIPSUB_GRAFT_FLOOD_THRESHOLD,
        max_ihave_length=GOSSIPSUB_MAX_IHAVE_LENGTH,
        max_ihave_messages=GOSSIPSUB_MAX_IHAVE_MESSAGES,
        iwant_followup_time=GOSSIPSUB_IWANT_FOLLOWUP_TIME,
    )