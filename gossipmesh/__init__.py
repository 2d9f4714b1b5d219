"""Building blocks for gossip-based publish/subscribe: wire messages, message cache, IDs, fragmentation and peer gating."""

__version__ = "0.1.0"
__all__ = [
    "features",
    "messages",
    "mcache",
    "midgen",
    "peer_gater",
    "params",
    "fragment",
]