import os
import random
import string

import pytest

from gossipmesh.fragment import fragment_message_ids, fragment_rpc
from gossipmesh.messages import (
    RPC,
    ControlGraft,
    ControlIHave,
    ControlIWant,
    ControlMessage,
    ControlPrune,
    Message,
    SubOpts,
)

LIMIT = 1024
TOPIC = "test"


def make_msg(size):
    return Message(data=os.urandom(size - 4))


def random_id(length):
    return "".join(random.choice(string.ascii_letters) for _ in range(length))


def ensure_below_limit(rpcs):
    for r in rpcs:
        assert r.size() <= LIMIT


def test_no_fragmentation_when_it_fits():
    rpc = RPC(sender="some-peer", publish=[make_msg(10), make_msg(10)])
    results = fragment_rpc(rpc, LIMIT)
    assert len(results) == 1
    assert results[0] is rpc


def test_oversized_message_fails():
    rpc = RPC(sender="some-peer", publish=[make_msg(10), make_msg(LIMIT * 2)])
    with pytest.raises(ValueError):
        fragment_rpc(rpc, LIMIT)


def _large_rpc():
    return RPC(
        sender="some-peer",
        subscriptions=[SubOpts(subscribe=True, topic_id=TOPIC)],
        publish=[make_msg(200) for _ in range(100)],
    )


def test_fragments_messages():
    rpc = _large_rpc()
    results = fragment_rpc(rpc, LIMIT)
    ensure_below_limit(results)
    msgs_per_rpc = LIMIT // 200
    assert len(results) == 100 // msgs_per_rpc
    assert sum(len(r.publish) for r in results) == 100
    assert sum(len(r.subscriptions) for r in results) == 1
    assert all(r.sender == "some-peer" for r in results)


def test_small_control_goes_last_unaltered():
    rpc = _large_rpc()
    rpc.control = ControlMessage(
        graft=[ControlGraft(topic_id=TOPIC)],
        prune=[ControlPrune(topic_id=TOPIC)],
        ihave=[ControlIHave(message_ids=["foo"])],
        iwant=[ControlIWant(message_ids=["bar"])],
    )
    results = fragment_rpc(rpc, LIMIT)
    ensure_below_limit(results)
    assert len(results) == 100 // (LIMIT // 200) + 1
    ctl = results[-1].control
    assert ctl is not None
    assert ctl.to_bytes() == rpc.control.to_bytes()


def test_large_control_is_split():
    rpc = _large_rpc()
    ids_per_topic = [[random_id(32) for _ in range(100)] for _ in range(5)]
    rpc.control = ControlMessage(
        graft=[ControlGraft(topic_id=TOPIC)],
        prune=[ControlPrune(topic_id=TOPIC)],
        ihave=[ControlIHave(message_ids=ids) for ids in ids_per_topic],
        iwant=[ControlIWant(message_ids=ids) for ids in ids_per_topic],
    )
    results = fragment_rpc(rpc, LIMIT)
    ensure_below_limit(results)
    min_expected = 100 // (LIMIT // 200) + rpc.control.size() // LIMIT
    assert len(results) >= min_expected

    sent_iwant = [mid for r in results if r.control for w in r.control.iwant for mid in w.message_ids]
    sent_ihave = [mid for r in results if r.control for h in r.control.ihave for mid in h.message_ids]
    all_ids = [mid for ids in ids_per_topic for mid in ids]
    assert sent_iwant == all_ids
    assert sent_ihave == all_ids
    assert sum(len(r.control.graft) for r in results if r.control) == 1
    assert sum(len(r.control.prune) for r in results if r.control) == 1


def test_giant_message_id_dropped():
    giant = random_id(LIMIT * 2)
    rpc = RPC(sender="some-peer", control=ControlMessage(iwant=[ControlIWant(message_ids=["hello", giant])]))
    results = fragment_rpc(rpc, LIMIT)
    assert len(results) == 1
    assert len(results[0].control.iwant) == 1
    assert results[0].control.iwant[0].message_ids[0] == "hello"
    assert giant not in results[0].control.iwant[0].message_ids


def test_fragment_message_ids_splits_buckets():
    buckets = fragment_message_ids(["abc", "def", "ghi"], 10)
    assert buckets == [["abc", "def"], ["ghi"]]


def test_fragment_message_ids_all_dropped():
    assert fragment_message_ids(["x" * 20], 10) == [[]]


def test_fragment_message_ids_preserves_order_and_limits():
    ids = [random_id(random.randint(1, 40)) for _ in range(200)]
    buckets = fragment_message_ids(ids, 100)
    assert [mid for bucket in buckets for mid in bucket] == ids
    for bucket in buckets:
        assert sum(len(mid) + 2 for mid in bucket) <= 100
        assert bucket


def test_fragment_message_ids_empty():
    assert fragment_message_ids([], 100) == [[]]