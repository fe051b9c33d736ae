"""
Integration helpers for collaborators (UI/CLI, persistence).

- `registry`: one ledger per (chain, token pair, fee)
- `pool_snapshot`: deterministic ledger snapshots and restore
"""

from .pool_snapshot import POOL_SNAPSHOT_VERSION, PoolSnapshot, ledger_from_snapshot, snapshot_from_ledger
from .registry import PoolKey, PoolRegistry, UnsupportedChain, canonical_pair

__all__ = [
    "POOL_SNAPSHOT_VERSION",
    "PoolSnapshot",
    "ledger_from_snapshot",
    "snapshot_from_ledger",
    "PoolKey",
    "PoolRegistry",
    "UnsupportedChain",
    "canonical_pair",
]
