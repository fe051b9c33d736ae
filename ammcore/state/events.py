"""
Committed pool activity: an append-only, capped event history and cumulative
trade counters.

Events are written by the ledger under its lock, in commit order, and carry a
sequence number that keeps increasing after older entries are evicted.
"""

from __future__ import annotations

from collections import deque
from dataclasses import asdict, dataclass, replace
from enum import Enum
from typing import Any, Deque, Dict, Iterable, List, Mapping, Optional

from .pools import Amount
from .positions import PositionHandle


DEFAULT_EVENT_CAPACITY = 1000


class PoolEventKind(Enum):
    INITIALIZED = "Initialized"
    LIQUIDITY_ADDED = "LiquidityAdded"
    LIQUIDITY_REMOVED = "LiquidityRemoved"
    SWAP = "Swap"


@dataclass(frozen=True)
class PoolEvent:
    """
    One committed operation.

    For liquidity events `amount_in` / `amount_out` are the `token_in` /
    `token_out` amounts moved and `shares` the shares minted or burned.
    For swaps they are what the trader paid and received, oriented by
    `in_to_out`, and `fee` is the part of `amount_in` kept as fee.
    """
    seq: int
    kind: PoolEventKind
    amount_in: Amount
    amount_out: Amount
    shares: Amount = 0
    fee: Amount = 0
    in_to_out: bool = True
    position: Optional[PositionHandle] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["kind"] = self.kind.value
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PoolEvent":
        if not isinstance(data, Mapping):
            raise TypeError("event must be an object")
        ints = {}
        for name in ("seq", "amount_in", "amount_out", "shares", "fee"):
            v = data.get(name, 0)
            if not isinstance(v, int) or isinstance(v, bool) or v < 0:
                raise ValueError(f"event.{name} must be a non-negative int: {v!r}")
            ints[name] = v
        in_to_out = data.get("in_to_out", True)
        if not isinstance(in_to_out, bool):
            raise TypeError("event.in_to_out must be a bool")
        position = data.get("position")
        if position is not None and not isinstance(position, str):
            raise TypeError("event.position must be a string or null")
        return cls(kind=PoolEventKind(data.get("kind")), in_to_out=in_to_out, position=position, **ints)


@dataclass(frozen=True)
class PoolStats:
    """
    Cumulative swap counters since the pool was created.

    `volume_in` / `fees_in` count `token_in` sold into the pool,
    `volume_out` / `fees_out` count `token_out` sold into the pool.
    """
    swap_count: int = 0
    volume_in: Amount = 0
    volume_out: Amount = 0
    fees_in: Amount = 0
    fees_out: Amount = 0

    def __post_init__(self) -> None:
        for name, v in asdict(self).items():
            if not isinstance(v, int) or isinstance(v, bool) or v < 0:
                raise ValueError(f"{name} must be a non-negative int: {v!r}")

    def with_swap(self, in_to_out: bool, amount_in: Amount, fee: Amount) -> "PoolStats":
        if in_to_out:
            return replace(
                self,
                swap_count=self.swap_count + 1,
                volume_in=self.volume_in + amount_in,
                fees_in=self.fees_in + fee,
            )
        return replace(
            self,
            swap_count=self.swap_count + 1,
            volume_out=self.volume_out + amount_in,
            fees_out=self.fees_out + fee,
        )

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


class EventLog:
    """Bounded history; the oldest events are dropped once `capacity` is reached."""

    def __init__(
        self,
        capacity: int = DEFAULT_EVENT_CAPACITY,
        events: Iterable[PoolEvent] = (),
        next_seq: Optional[int] = None,
    ) -> None:
        if not isinstance(capacity, int) or isinstance(capacity, bool) or capacity <= 0:
            raise ValueError(f"capacity must be a positive int: {capacity!r}")
        self.capacity = capacity
        self._events: Deque[PoolEvent] = deque(maxlen=capacity)
        self._next_seq = 0
        for event in events:
            if event.seq < self._next_seq:
                raise ValueError(f"event seq {event.seq} is out of order")
            self._events.append(event)
            self._next_seq = event.seq + 1
        if next_seq is not None and next_seq < self._next_seq:
            raise ValueError(f"next_seq {next_seq} precedes recorded events")
        if next_seq is not None:
            self._next_seq = next_seq

    def record(self, event: PoolEvent) -> PoolEvent:
        """Append `event` under the next sequence number and return the stored copy."""
        stored = replace(event, seq=self._next_seq)
        self._events.append(stored)
        self._next_seq += 1
        return stored

    def recent(self, limit: Optional[int] = None) -> List[PoolEvent]:
        """Events oldest first; with `limit`, only the newest `limit` of them."""
        events = list(self._events)
        if limit is not None:
            if limit < 0:
                raise ValueError("limit must be non-negative")
            events = events[-limit:] if limit else []
        return events

    @property
    def next_seq(self) -> int:
        return self._next_seq

    def __len__(self) -> int:
        return len(self._events)
