import pytest

from gossipmesh.features import (
    FLOODSUB_ID,
    GOSSIPSUB_ID_V10,
    GOSSIPSUB_ID_V11,
    Feature,
    default_features,
)


@pytest.mark.parametrize(
    ("feature", "protocol", "expected"),
    [
        (Feature.MESH, FLOODSUB_ID, False),
        (Feature.MESH, GOSSIPSUB_ID_V10, True),
        (Feature.MESH, GOSSIPSUB_ID_V11, True),
        (Feature.PX, FLOODSUB_ID, False),
        (Feature.PX, GOSSIPSUB_ID_V10, False),
        (Feature.PX, GOSSIPSUB_ID_V11, True),
    ],
)
def test_default_features(feature, protocol, expected):
    assert default_features(feature, protocol) is expected


def test_custom_protocol_has_no_default_features():
    assert default_features(Feature.MESH, "customsub/1.0.0") is False
    assert default_features(Feature.PX, "customsub/1.0.0") is False


def test_unknown_feature_is_unsupported():
    assert default_features(99, GOSSIPSUB_ID_V11) is False


def test_feature_values_match_plain_integers():
    assert default_features(0, GOSSIPSUB_ID_V10) is True
    assert default_features(1, GOSSIPSUB_ID_V10) is False