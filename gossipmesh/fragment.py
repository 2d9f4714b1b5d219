"""Splitting of RPCs that exceed the maximum message size into several smaller ones."""

from __future__ import annotations

import logging

from gossipmesh.messages import RPC, ControlIHave, ControlIWant, ControlMessage

log = logging.getLogger(__name__)

_CONTROL_OVERHEAD = 6
_ID_OVERHEAD = 2


def fragment_rpc(rpc: RPC, limit: int) -> list[RPC]:
    """Split ``rpc`` into RPCs that each stay below ``limit`` bytes.

    Raises ValueError if a single published message is larger than the limit.
    Control messages that fit in one RPC are appended whole as the last RPC.
    """
    if rpc.size() < limit:
        return [rpc]

    rpcs = [RPC(sender=rpc.sender)]

    def out_rpc(size_to_add: int, with_ctl: bool) -> RPC:
        current = rpcs[-1]
        # one extra byte for the protobuf field tag
        if current.size() + size_to_add + 1 < limit:
            if with_ctl and current.control is None:
                current.control = ControlMessage()
            return current
        following = RPC(control=ControlMessage() if with_ctl else None, sender=rpc.sender)
        rpcs.append(following)
        return following

    for msg in rpc.publish:
        size = msg.size()
        if size > limit:
            raise ValueError(f"message with len={size} exceeds limit {limit}")
        out_rpc(size, False).publish.append(msg)

    for sub in rpc.subscriptions:
        out_rpc(sub.size(), False).subscriptions.append(sub)

    ctl = rpc.control
    if ctl is None:
        return rpcs

    ctl_out = RPC(control=ctl, sender=rpc.sender)
    if ctl_out.size() < limit:
        rpcs.append(ctl_out)
        return rpcs

    for graft in ctl.graft:
        target = out_rpc(graft.size(), True)
        assert target.control is not None
        target.control.graft.append(graft)
    for prune in ctl.prune:
        target = out_rpc(prune.size(), True)
        assert target.control is not None
        target.control.prune.append(prune)

    # a single IWANT or IHAVE may itself exceed the limit, so its IDs are split
    for iwant in ctl.iwant:
        for ids in fragment_message_ids(iwant.message_ids, limit - _CONTROL_OVERHEAD):
            part = ControlIWant(message_ids=ids)
            target = out_rpc(part.size(), True)
            assert target.control is not None
            target.control.iwant.append(part)
    for ihave in ctl.ihave:
        for ids in fragment_message_ids(ihave.message_ids, limit - _CONTROL_OVERHEAD):
            part = ControlIHave(message_ids=ids)
            target = out_rpc(part.size(), True)
            assert target.control is not None
            target.control.ihave.append(part)

    return rpcs


def fragment_message_ids(msg_ids: list[str], limit: int) -> list[list[str]]:
    """Group message IDs into buckets whose encoded size stays within ``limit``.

    IDs that alone exceed the limit are dropped with a warning. At least one
    bucket, possibly empty, is always returned.
    """
    buckets: list[list[str]] = [[]]
    bucket_len = 0
    for mid in msg_ids:
        size = len(mid.encode("utf-8")) + _ID_OVERHEAD
        if size > limit:
            log.warning("message ID length %d exceeds limit %d, removing from outgoing gossip", size, limit)
            continue
        bucket_len += size
        if bucket_len > limit:
            buckets.append([])
            bucket_len = size
        buckets[-1].append(mid)
    return buckets