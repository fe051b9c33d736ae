"""
Ledger snapshot encoding.

Goals:
- Deterministic JSON serialization for hashing / persistence by a collaborator.
- Round-trippable into a `ReserveLedger` (pool state, positions, swap
  counters and event history).
- Explicit versioning.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from ..core.ledger import ReserveLedger
from ..kernels.python.lp_math import MINIMUM_LIQUIDITY
from ..state.canonical import canonical_json_bytes, domain_sep_bytes, sha256_hex
from ..state.events import DEFAULT_EVENT_CAPACITY, EventLog, PoolEvent, PoolStats
from ..state.pools import PoolState, PoolStatus, compute_pool_id

logger = logging.getLogger(__name__)

POOL_SNAPSHOT_VERSION = 1


def _require_str(value: Any, *, name: str, max_len: int = 256) -> str:
    if not isinstance(value, str) or not value:
        raise TypeError(f"{name} must be a non-empty string")
    if len(value) > max_len:
        raise ValueError(f"{name} too large")
    return value


def _require_int(value: Any, *, name: str, minimum: int = 0) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}: {value}")
    return value


@dataclass(frozen=True)
class PoolSnapshot:
    """
    Versioned snapshot of one ledger.

    The commitment is not stored inside `data` to avoid self-reference.
    """

    version: int
    data: Dict[str, Any]

    def canonical_bytes(self) -> bytes:
        return canonical_json_bytes(self.data)

    def commitment_hex(self) -> str:
        return sha256_hex(domain_sep_bytes("pool_snapshot", version=self.version) + self.canonical_bytes())

    def commitment_bytes(self) -> bytes:
        return hashlib.sha256(domain_sep_bytes("pool_snapshot", version=self.version) + self.canonical_bytes()).digest()


def snapshot_from_ledger(ledger: ReserveLedger) -> PoolSnapshot:
    pool, positions, stats, events = ledger.export_state()

    pool_obj: Optional[Dict[str, Any]] = None
    if pool is not None:
        pool_obj = {
            "pool_id": pool.pool_id,
            "reserve_in": pool.reserve_in,
            "reserve_out": pool.reserve_out,
            "fee_bps": pool.fee_bps,
            "total_shares": pool.total_shares,
            "status": pool.status.value,
        }

    data: Dict[str, Any] = {
        "version": POOL_SNAPSHOT_VERSION,
        "chain_id": ledger.chain_id,
        "token_in": ledger.token_in,
        "token_out": ledger.token_out,
        "fee_bps": ledger.fee_bps,
        "min_initial_shares": ledger.min_initial_shares,
        "pool": pool_obj,
        "positions": [{"handle": h, "shares": s} for h, s in sorted(positions.items())],
        "stats": stats.to_dict(),
        "events": {
            "capacity": events.capacity,
            "next_seq": events.next_seq,
            "items": [e.to_dict() for e in events.recent()],
        },
    }
    return PoolSnapshot(version=POOL_SNAPSHOT_VERSION, data=data)


def _events_from_snapshot(obj: Any) -> EventLog:
    if obj is None:
        return EventLog()
    if not isinstance(obj, Mapping):
        raise TypeError("snapshot.events must be an object")
    capacity = _require_int(obj.get("capacity", DEFAULT_EVENT_CAPACITY), name="events.capacity", minimum=1)
    next_seq = _require_int(obj.get("next_seq", 0), name="events.next_seq")
    items = obj.get("items") or []
    if not isinstance(items, list):
        raise TypeError("snapshot.events.items must be a list")
    if len(items) > capacity:
        raise ValueError(f"{len(items)} events exceed capacity {capacity}")
    return EventLog(capacity, [PoolEvent.from_dict(item) for item in items], next_seq)


def ledger_from_snapshot(snapshot: Mapping[str, Any]) -> ReserveLedger:
    """Rebuild a ledger; fails closed on any inconsistency (ids, share totals, types)."""
    if not isinstance(snapshot, Mapping):
        raise TypeError("snapshot must be a mapping")

    version = snapshot.get("version")
    if version != POOL_SNAPSHOT_VERSION:
        raise ValueError(f"unsupported snapshot version: {version!r}")

    chain_id = _require_int(snapshot.get("chain_id"), name="chain_id", minimum=1)
    token_in = _require_str(snapshot.get("token_in"), name="token_in")
    token_out = _require_str(snapshot.get("token_out"), name="token_out")
    fee_bps = snapshot.get("fee_bps")
    if fee_bps is not None:
        fee_bps = _require_int(fee_bps, name="fee_bps")
    min_initial_shares = _require_int(
        snapshot.get("min_initial_shares", MINIMUM_LIQUIDITY), name="min_initial_shares", minimum=1
    )
    events = _events_from_snapshot(snapshot.get("events"))

    ledger = ReserveLedger(
        token_in,
        token_out,
        chain_id,
        fee_bps=fee_bps,
        min_initial_shares=min_initial_shares,
        event_capacity=events.capacity,
    )

    pool: Optional[PoolState] = None
    pool_obj = snapshot.get("pool")
    if pool_obj is not None:
        if not isinstance(pool_obj, Mapping):
            raise TypeError("snapshot.pool must be an object")
        pool_fee = _require_int(pool_obj.get("fee_bps"), name="pool.fee_bps")
        if fee_bps is not None and pool_fee != fee_bps:
            raise ValueError("pool.fee_bps does not match the ledger fee")
        pool_id = _require_str(pool_obj.get("pool_id"), name="pool.pool_id")
        if pool_id != compute_pool_id(chain_id, token_in, token_out, pool_fee):
            raise ValueError("pool.pool_id does not match its parameters")
        pool = PoolState(
            pool_id=pool_id,
            chain_id=chain_id,
            token_in=token_in,
            token_out=token_out,
            reserve_in=_require_int(pool_obj.get("reserve_in"), name="pool.reserve_in"),
            reserve_out=_require_int(pool_obj.get("reserve_out"), name="pool.reserve_out"),
            fee_bps=pool_fee,
            total_shares=_require_int(pool_obj.get("total_shares"), name="pool.total_shares"),
            status=PoolStatus(pool_obj.get("status")),
        )

    entries = snapshot.get("positions") or []
    if not isinstance(entries, list):
        raise TypeError("snapshot.positions must be a list")
    positions: Dict[str, int] = {}
    for entry in entries:
        if not isinstance(entry, Mapping):
            raise TypeError("snapshot.positions entries must be objects")
        handle = _require_str(entry.get("handle"), name="position.handle")
        if handle in positions:
            raise ValueError(f"duplicate position handle: {handle}")
        positions[handle] = _require_int(entry.get("shares"), name="position.shares")

    stats_obj = snapshot.get("stats") or {}
    if not isinstance(stats_obj, Mapping):
        raise TypeError("snapshot.stats must be an object")
    stats = PoolStats(**{k: stats_obj[k] for k in PoolStats().to_dict() if k in stats_obj})

    ledger.restore(pool, positions, stats, events)
    logger.debug("restored ledger from snapshot: %r", ledger)
    return ledger
