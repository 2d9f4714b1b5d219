from gossipmesh.messages import Message
from gossipmesh.midgen import MsgIdGenerator


def by_data(msg):
    return (msg.data or b"").decode()


def by_topic(msg):
    return "topic-" + (msg.topic or "")


def test_default_generator_is_used_without_override():
    gen = MsgIdGenerator(by_data)
    msg = Message(data=b"hello", topic="news")
    assert gen.raw_id(msg) == "hello"


def test_topic_override_takes_precedence():
    gen = MsgIdGenerator(by_data)
    gen.set("news", by_topic)
    on_news = Message(data=b"hello", topic="news")
    elsewhere = Message(data=b"hello", topic="sports")
    assert gen.raw_id(on_news) == by_topic(on_news)
    assert gen.raw_id(elsewhere) == "hello"


def test_message_without_topic_uses_empty_topic_override():
    gen = MsgIdGenerator(by_data)
    gen.set("", lambda m: "untitled")
    assert gen.raw_id(Message(data=b"x")) == "untitled"


def test_id_is_cached_on_message():
    calls = []

    def counting(msg):
        calls.append(msg)
        return by_data(msg)

    gen = MsgIdGenerator(counting)
    msg = Message(data=b"abc", topic="t")
    assert gen.id(msg) == "abc"
    assert msg.id == "abc"
    assert gen.id(msg) == "abc"
    assert len(calls) == 1


def test_preset_id_short_circuits():
    calls = []
    gen = MsgIdGenerator(lambda m: calls.append(m) or "computed")
    msg = Message(data=b"abc", id="preset")
    assert gen.id(msg) == "preset"
    assert calls == []


def test_raw_id_ignores_cached_value():
    gen = MsgIdGenerator(by_data)
    msg = Message(data=b"real", id="stale")
    assert gen.raw_id(msg) == "real"
    assert msg.id == "stale"


def test_override_can_be_replaced():
    gen = MsgIdGenerator(by_data)
    gen.set("t", lambda m: "first")
    gen.set("t", lambda m: "second")
    assert gen.raw_id(Message(topic="t")) == "second"