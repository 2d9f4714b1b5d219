import pytest

from gossipmesh.messages import (
    RPC,
    ControlGraft,
    ControlIHave,
    ControlIWant,
    ControlMessage,
    ControlPrune,
    Message,
    PeerInfo,
    SubOpts,
    rpc_with_control,
    rpc_with_messages,
)


def test_size_matches_encoding():
    samples = [
        Message(),
        Message(from_peer=b"test", data=b"payload", seqno=b"\x00" * 8, topic="test"),
        Message(data=b"x" * 300, signature=b"sig", key=b"k"),
        PeerInfo(peer_id=b"peer", signed_peer_record=b"record"),
        SubOpts(subscribe=True, topic_id="test"),
        SubOpts(subscribe=False),
        ControlGraft(topic_id="test"),
        ControlPrune(topic_id="test", peers=[PeerInfo(peer_id=b"a")], backoff=60),
        ControlPrune(topic_id="test", backoff=100000),
        ControlIHave(topic_id="test", message_ids=["a", "bb", "ccc"]),
        ControlIWant(message_ids=["m" * 200]),
        ControlMessage(
            ihave=[ControlIHave(topic_id="t", message_ids=["x"])],
            iwant=[ControlIWant(message_ids=["y"])],
            graft=[ControlGraft(topic_id="t")],
            prune=[ControlPrune(topic_id="t", backoff=10)],
        ),
        RPC(
            subscriptions=[SubOpts(subscribe=True, topic_id="test")],
            publish=[Message(data=b"d", topic="test")],
            control=ControlMessage(graft=[ControlGraft(topic_id="test")]),
        ),
        RPC(control=ControlMessage()),
    ]
    for sample in samples:
        assert sample.size() == len(sample.to_bytes()), sample


def test_graft_wire_bytes():
    assert ControlGraft(topic_id="a").to_bytes() == b"\n\x01a"


def test_subopts_wire_bytes():
    assert SubOpts(subscribe=True, topic_id="t").to_bytes() == b"\x08\x01\x12\x01t"


def test_empty_rpc_encodes_to_nothing():
    assert RPC().to_bytes() == b""
    assert RPC().size() == 0


def test_present_empty_field_differs_from_absent():
    assert Message(data=b"").size() > Message().size()
    assert RPC(control=ControlMessage()).size() > RPC().size()


def test_local_fields_are_not_encoded():
    plain = Message(data=b"x", topic="t")
    tagged = Message(data=b"x", topic="t", id="abc", received_from="peer")
    assert tagged.to_bytes() == plain.to_bytes()
    assert tagged == plain


def test_rpc_size_grows_by_nested_size():
    msg = Message(data=b"y" * 50, topic="t")
    base = RPC()
    with_msg = RPC(publish=[msg])
    assert with_msg.size() - base.size() > msg.size()


def test_rpc_with_messages_keeps_order():
    first = Message(data=b"1")
    second = Message(data=b"2")
    rpc = rpc_with_messages(first, second)
    assert rpc.publish == [first, second]
    assert rpc.control is None


def test_rpc_with_control_fills_parts():
    graft = ControlGraft(topic_id="g")
    prune = ControlPrune(topic_id="p")
    iwant = ControlIWant(message_ids=["w"])
    rpc = rpc_with_control(None, None, [iwant], [graft], [prune])
    assert rpc.publish == []
    assert rpc.control == ControlMessage(iwant=[iwant], graft=[graft], prune=[prune])
    assert rpc.control.ihave == []


def test_rpc_with_control_always_has_control():
    rpc = rpc_with_control(None, None, None, None, None)
    assert rpc.control == ControlMessage()


def test_copy_is_equal_but_independent():
    original = rpc_with_control(
        [Message(data=b"m")], None, None, [ControlGraft(topic_id="a")], None
    )
    original.sender = "peer-a"
    dup = original.copy()
    assert dup == original
    assert dup.sender == "peer-a"

    dup.control.graft.append(ControlGraft(topic_id="b"))
    dup.publish.append(Message(data=b"n"))
    assert [g.topic_id for g in original.control.graft] == ["a"]
    assert len(original.publish) == 1


def test_copy_without_control():
    original = rpc_with_messages(Message(data=b"m"))
    dup = original.copy()
    assert dup.control is None
    assert dup.publish == original.publish
    assert dup.publish is not original.publish