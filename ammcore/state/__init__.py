"""
State types for ammcore pools
"""

from .events import EventLog, PoolEvent, PoolEventKind, PoolStats
from .pools import PoolId, PoolState, PoolStatus, compute_pool_id
from .positions import PositionHandle, PositionTable

__all__ = [
    "EventLog",
    "PoolEvent",
    "PoolEventKind",
    "PoolStats",
    "PoolId",
    "PoolState",
    "PoolStatus",
    "compute_pool_id",
    "PositionHandle",
    "PositionTable",
]
