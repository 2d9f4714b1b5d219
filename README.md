# gossipmesh

`gossipmesh` provides the building blocks of a gossip-based publish/subscribe
overlay. It covers the wire records peers exchange and their protobuf
encoding. It has a sliding-window cache of recent messages, which is used to
advertise message ids (IHAVE) and answer requests for them (IWANT). It also
computes message ids, with an id function per topic if needed. Two more
pieces handle protection: one splits RPCs that are too large, and one gates
peers when the validation queue starts throttling.

The package has no runtime dependencies.

## Installation

```
pip install .
```

To run the test suite:

```
pip install .[test]
pytest
```

## Modules

- `gossipmesh.features`
  - Protocol ids: `GOSSIPSUB_ID_V10`, `GOSSIPSUB_ID_V11`, `FLOODSUB_ID`.
  - `DEFAULT_PROTOCOLS`.
  - The `Feature` enum (`MESH`, `PX`).
  - `default_features(feature, protocol)`, which tells whether a protocol supports the mesh or peer exchange.
- `gossipmesh.messages`
  - The wire records: `Message`, `PeerInfo`, `SubOpts`, `ControlGraft`, `ControlPrune`, `ControlIHave`, `ControlIWant`, `ControlMessage` and `RPC`.
  - Every record has `size()` and `to_bytes()`, which give its protobuf encoding.
  - `RPC.copy()` returns a copy whose lists can be changed on their own.
  - `rpc_with_messages(*messages)` and `rpc_with_control(messages, ihave, iwant, graft, prune)` build RPCs.
- `gossipmesh.mcache`
  - `MessageCache(gossip, history, msg_id)` keeps messages for `history` windows and gossips the ids from the last `gossip` windows.
  - `put`, `get`, `get_for_peer`, `get_gossip_ids` and `shift` are its methods.
  - `get_for_peer` counts how many times each peer has asked for a message.
  - It raises `ValueError` if `gossip > history` or if `history < 1`.
- `gossipmesh.midgen`
  - `MsgIdGenerator(default)` computes message ids.
  - `set(topic, gen)` sets an id function for one topic.
  - `id(msg)` computes the id and caches it on the message.
  - `raw_id(msg)` computes the id without the cache.
- `gossipmesh.peer_gater`
  - `PeerGater` does random early drop of peers whose goodput is poor. Its counters are kept per IP address.
  - Its parameters are set with `PeerGaterParams`, `new_peer_gater_params`, `default_peer_gater_params` and `decay_for`.
  - The decisions it returns are `AcceptStatus` values (`NONE`, `CONTROL`, `ALL`).
- `gossipmesh.params`
  - `GossipSubParams` holds the mesh degrees, gossip and timing settings, with durations in seconds.
  - `default_gossipsub_params()` builds one from the module-level defaults.
- `gossipmesh.fragment`
  - `fragment_rpc(rpc, limit)` splits an RPC into RPCs that are each below `limit` bytes.
  - `fragment_message_ids(msg_ids, limit)` groups message ids into buckets that fit the limit.

## Example: the message cache

```python
from gossipmesh.mcache import MessageCache
from gossipmesh.messages import Message

cache = MessageCache(3, 5, lambda msg: msg.seqno.hex())
cache.put(Message(data=b"hello", topic="news", seqno=b"\x00\x01"))

cache.get_gossip_ids("news")   # ['0001']
cache.shift()                  # advance the history window by one slot
```

## Example: fragmenting an RPC

```python
from gossipmesh.fragment import fragment_rpc
from gossipmesh.messages import Message, rpc_with_messages

rpc = rpc_with_messages(*(Message(data=bytes(200)) for _ in range(100)))
parts = fragment_rpc(rpc, 1024)
assert all(part.size() <= 1024 for part in parts)
```

If a single published message is larger than the limit, `fragment_rpc` raises
`ValueError`. If the control messages fit in one RPC, they are added whole as
the last RPC. If they do not fit, they are spread over several RPCs, and long
IHAVE or IWANT id lists are split. A message id that is larger than the limit
on its own is dropped, and a warning is logged.

## Example: the peer gater

```python
from gossipmesh.peer_gater import PeerGater, new_peer_gater_params, AcceptStatus

params = new_peer_gater_params(0.1, 0.9, 0.999)
params.validate()
gater = PeerGater(params, lambda peer: "192.0.2.1")
gater.add_peer("peer-a", "")
assert gater.accept_from("peer-a") is AcceptStatus.ALL
```

Call `validate_message`, `deliver_message`, `reject_message` and
`duplicate_message` to feed the gater what validation observed. It counts as
throttling only the rejections `REJECT_VALIDATION_QUEUE_FULL` and
`REJECT_VALIDATION_THROTTLED`.

`PeerGater.start()` runs the periodic decay in a background thread, and
`PeerGater.stop()` ends it. A `PeerGater` can also be used as a context
manager. If you prefer to drive the decay yourself, call `decay_stats()`
directly.

## What this package does not do

- There is no router. Nothing here maintains topic meshes or fanout sets.
- There is no heartbeat that grafts or prunes peers, or emits IHAVE gossip.
- Nothing here handles incoming GRAFT, PRUNE, IHAVE or IWANT messages.
- It opens no connections and sends nothing over a network.
- It has no built-in message id function. `MessageCache` and `MsgIdGenerator` both need one supplied by the caller.

`GossipSubParams` holds the settings such a router would use, but nothing in
the package acts on them.