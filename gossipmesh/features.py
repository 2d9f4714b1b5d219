"""Protocol identifiers and the feature tests that tell what each protocol supports."""

from __future__ import annotations

from enum import IntEnum
from typing import Callable

GOSSIPSUB_ID_V10 = "/meshsub/1.0.0"
"""Protocol ID of GossipSub v1.0.0; advertised alongside v1.1.0 for compatibility."""

GOSSIPSUB_ID_V11 = "/meshsub/1.1.0"
"""Protocol ID of GossipSub v1.1.0."""

FLOODSUB_ID = "/floodsub/1.0.0"
"""Protocol ID of the plain flooding router."""


class Feature(IntEnum):
    """Router features that a protocol may or may not support."""

    MESH = 0
    """Basic GossipSub mesh, compatible with gossipsub v1.0."""

    PX = 1
    """Peer exchange on PRUNE, compatible with gossipsub v1.1."""


FeatureTest = Callable[[Feature, str], bool]
"""Tells whether a feature is supported by a protocol ID."""

DEFAULT_PROTOCOLS: tuple[str, ...] = (GOSSIPSUB_ID_V11, GOSSIPSUB_ID_V10, FLOODSUB_ID)
"""Protocols spoken by the router by default, in order of preference."""


def default_features(feature: Feature | int, protocol: str) -> bool:
    """Return True if the default protocols give ``protocol`` the ``feature``."""
    if feature == Feature.MESH:
        return protocol in (GOSSIPSUB_ID_V11, GOSSIPSUB_ID_V10)
    if feature == Feature.PX:
        return protocol == GOSSIPSUB_ID_V11
    return False