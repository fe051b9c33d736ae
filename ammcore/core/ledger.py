"""
Reserve ledger: the single source of truth for one pool.

Imperative shell around the pure kernels. Each mutating operation:
- takes the pool's own lock,
- computes the complete post-state from the current snapshot (pure),
- checks the pool invariants on that post-state,
- commits the new `PoolState`, the position changes and one `PoolEvent` together.

Any `AmmError` raised before the commit is returned as a failed
`LedgerResult` and leaves the pool untouched. Reads never lock: they return
the current frozen `PoolState`.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from fractions import Fraction
from typing import Callable, Dict, Generic, List, Optional, Tuple, TypeVar

from ..errors import (
    AmmError,
    ErrorKind,
    InsufficientLiquidity,
    InsufficientShares,
    InvalidAmount,
    InvalidFeeRate,
    InvalidInitialDeposit,
    SlippageExceeded,
)
from ..kernels.python.cpmm_swap import swap_exact_in as _kernel_swap_exact_in
from ..kernels.python.cpmm_swap import swap_exact_out as _kernel_swap_exact_out
from ..kernels.python.lp_math import MINIMUM_LIQUIDITY, burn_liquidity, mint_liquidity, mint_liquidity_initial
from ..state.events import DEFAULT_EVENT_CAPACITY, EventLog, PoolEvent, PoolEventKind, PoolStats
from ..state.pools import Amount, PoolId, PoolState, PoolStatus, TokenId, compute_pool_id
from ..state.positions import PositionHandle, PositionTable
from .quote import Quote, build_exact_in_quote, build_exact_out_quote, quote_redemption, spot_price

logger = logging.getLogger(__name__)

T = TypeVar("T")

# (handle, signed share delta) applied to the position table on commit.
_PositionDelta = Tuple[PositionHandle, int]


def _event(kind: PoolEventKind, **fields: object) -> PoolEvent:
    # seq is assigned by the event log at commit
    return PoolEvent(seq=0, kind=kind, **fields)  # type: ignore[arg-type]


@dataclass(frozen=True)
class LedgerResult(Generic[T]):
    """
    Discriminated result of a ledger operation.

    On success `value` holds the operation's output and `pool` the committed
    state. On failure `code`/`error` describe why and `pool` is the unchanged
    current state, so a caller can show both and decide whether to retry.
    """
    ok: bool
    value: Optional[T] = None
    pool: Optional[PoolState] = None
    error: Optional[str] = None
    code: Optional[ErrorKind] = None


@dataclass(frozen=True)
class AddLiquidityResult:
    amount_in: Amount
    amount_out: Amount
    shares_minted: Amount


@dataclass(frozen=True)
class RemoveLiquidityResult:
    amount_in: Amount
    amount_out: Amount


@dataclass(frozen=True)
class SwapResult:
    amount_in: Amount
    amount_out: Amount
    fee_total: Amount
    in_to_out: bool


def _swap_event(value: SwapResult) -> PoolEvent:
    return _event(
        PoolEventKind.SWAP,
        amount_in=value.amount_in,
        amount_out=value.amount_out,
        fee=value.fee_total,
        in_to_out=value.in_to_out,
    )


def _require_bound(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise InvalidAmount(f"{name} must be a non-negative int, got {value!r}")


class ReserveLedger:
    """
    Reserves and share accounting for one pool.

    The pool is created by `initialize`; until then `snapshot()` returns None.
    A ledger constructed with `fee_bps` only accepts that fee at initialization.
    """

    def __init__(
        self,
        token_in: TokenId = "TKA",
        token_out: TokenId = "TKB",
        chain_id: int = 31337,
        *,
        fee_bps: Optional[int] = None,
        min_initial_shares: int = MINIMUM_LIQUIDITY,
        event_capacity: int = DEFAULT_EVENT_CAPACITY,
    ) -> None:
        if not isinstance(token_in, str) or not isinstance(token_out, str) or not token_in or not token_out:
            raise ValueError("token ids must be non-empty strings")
        if token_in >= token_out:
            raise ValueError(f"tokens must be in canonical order: {token_in} < {token_out}")
        if not isinstance(chain_id, int) or isinstance(chain_id, bool) or chain_id <= 0:
            raise ValueError(f"chain_id must be a positive int: {chain_id!r}")
        if fee_bps is not None:
            if not isinstance(fee_bps, int) or isinstance(fee_bps, bool) or not (0 <= fee_bps < 10_000):
                raise ValueError(f"fee_bps must be in [0, 10000): {fee_bps!r}")
        if not isinstance(min_initial_shares, int) or isinstance(min_initial_shares, bool) or min_initial_shares <= 0:
            raise ValueError(f"min_initial_shares must be a positive int: {min_initial_shares!r}")
        self.token_in = token_in
        self.token_out = token_out
        self.chain_id = chain_id
        self.fee_bps = fee_bps
        self.min_initial_shares = min_initial_shares
        self._lock = threading.Lock()
        self._pool: Optional[PoolState] = None
        self._positions = PositionTable()
        self._events = EventLog(event_capacity)
        self._stats = PoolStats()

    # ------------------------------------------------------------------
    # Read side (lock-free snapshots)
    # ------------------------------------------------------------------

    def snapshot(self) -> Optional[PoolState]:
        return self._pool

    @property
    def pool_id(self) -> Optional[PoolId]:
        pool = self._pool
        return pool.pool_id if pool is not None else None

    def shares_of(self, position: PositionHandle) -> Amount:
        return self._positions.get(position)

    def positions(self) -> Dict[PositionHandle, Amount]:
        with self._lock:
            return self._positions.get_all()

    def export_state(self) -> Tuple[Optional[PoolState], Dict[PositionHandle, Amount], PoolStats, EventLog]:
        """Pool state, positions, counters and a copy of the event log, read together under the lock."""
        with self._lock:
            events = EventLog(self._events.capacity, self._events.recent(), self._events.next_seq)
            return self._pool, self._positions.get_all(), self._stats, events

    def events(self, limit: Optional[int] = None) -> List[PoolEvent]:
        """Committed events, oldest first (the newest `limit` when given)."""
        with self._lock:
            return self._events.recent(limit)

    def stats(self) -> PoolStats:
        return self._stats

    def prices(self) -> Tuple[Fraction, Fraction]:
        """Spot price of `token_in` in `token_out` and of `token_out` in `token_in`."""
        pool = self._live_snapshot()
        return spot_price(pool.reserve_in, pool.reserve_out), spot_price(pool.reserve_out, pool.reserve_in)

    def position_value(self, position: PositionHandle) -> Tuple[Amount, Amount]:
        """Withdrawable (amount_in, amount_out) for the whole position right now."""
        with self._lock:
            pool = self._pool
            shares = self._positions.get(position)
        if pool is None or shares == 0:
            return 0, 0
        return quote_redemption(shares, pool.reserve_in, pool.reserve_out, pool.total_shares)

    def pool_share_bps(self, position: PositionHandle) -> int:
        """Position's share of the pool in basis points, rounded down."""
        with self._lock:
            pool = self._pool
            shares = self._positions.get(position)
        if pool is None or pool.total_shares == 0:
            return 0
        return (shares * 10_000) // pool.total_shares

    def quote(self, amount_in: Amount, tolerance_bps: int, in_to_out: bool = True) -> Quote:
        """
        Advisory exact-in quote against the current snapshot.

        The quote is re-validated at commit time: pass its `minimum_amount_out`
        to `swap`.
        """
        pool = self._live_snapshot()
        reserve_in, reserve_out = pool.oriented(in_to_out)
        return build_exact_in_quote(reserve_in, reserve_out, pool.fee_bps, amount_in, tolerance_bps)

    def quote_exact_out(self, amount_out: Amount, tolerance_bps: int, in_to_out: bool = True) -> Quote:
        pool = self._live_snapshot()
        reserve_in, reserve_out = pool.oriented(in_to_out)
        return build_exact_out_quote(reserve_in, reserve_out, pool.fee_bps, amount_out, tolerance_bps)

    def _live_snapshot(self) -> PoolState:
        pool = self._pool
        if pool is None or pool.total_shares == 0:
            raise InsufficientLiquidity("pool has no reserves")
        return pool

    # ------------------------------------------------------------------
    # Write side
    # ------------------------------------------------------------------

    def _run(
        self,
        op: str,
        compute: Callable[[Optional[PoolState]], Tuple[T, PoolState, List[_PositionDelta], PoolEvent]],
    ) -> LedgerResult[T]:
        with self._lock:
            current = self._pool
            try:
                value, next_pool, deltas, event = compute(current)
            except AmmError as exc:
                logger.info("%s rejected (%s): %s", op, exc.kind.value, exc)
                return LedgerResult(ok=False, pool=current, error=str(exc), code=exc.kind)

            # Every check happens before the first write.
            if self._positions.total() + sum(d for _, d in deltas) != next_pool.total_shares:
                raise AssertionError("position balances would diverge from total_shares")
            for handle, delta in deltas:
                if delta < 0 and self._positions.get(handle) < -delta:
                    raise AssertionError(f"position {handle} would go negative")

            for handle, delta in deltas:
                if delta >= 0:
                    self._positions.credit(handle, delta)
                else:
                    self._positions.debit(handle, -delta)
            self._pool = next_pool
            if event.kind is PoolEventKind.SWAP:
                self._stats = self._stats.with_swap(event.in_to_out, event.amount_in, event.fee)
            event = self._events.record(event)

        logger.debug("%s committed as event %d: %r -> %r", op, event.seq, value, next_pool)
        return LedgerResult(ok=True, value=value, pool=next_pool)

    def initialize(
        self,
        amount_in: Amount,
        amount_out: Amount,
        fee_bps: int,
        position: PositionHandle,
    ) -> LedgerResult[PoolId]:
        """
        Create the pool with its first deposit; the deposited ratio sets the price.

        Shares minted = isqrt(amount_in * amount_out), which must reach the
        minimum-liquidity floor.
        """

        def compute(current: Optional[PoolState]) -> Tuple[PoolId, PoolState, List[_PositionDelta], PoolEvent]:
            if current is not None:
                raise InvalidInitialDeposit("pool already initialized; add liquidity instead")
            if not isinstance(fee_bps, int) or isinstance(fee_bps, bool) or not (0 <= fee_bps < 10_000):
                raise InvalidFeeRate(f"fee_bps must be in [0, 10000): {fee_bps!r}")
            if self.fee_bps is not None and fee_bps != self.fee_bps:
                raise InvalidFeeRate(f"pool is registered with fee_bps={self.fee_bps}, got {fee_bps}")
            shares = mint_liquidity_initial(
                amount_in=amount_in, amount_out=amount_out, min_shares=self.min_initial_shares
            )
            pool_id = compute_pool_id(self.chain_id, self.token_in, self.token_out, fee_bps)
            pool = PoolState(
                pool_id=pool_id,
                chain_id=self.chain_id,
                token_in=self.token_in,
                token_out=self.token_out,
                reserve_in=amount_in,
                reserve_out=amount_out,
                fee_bps=fee_bps,
                total_shares=shares,
                status=PoolStatus.ACTIVE,
            )
            event = _event(
                PoolEventKind.INITIALIZED,
                amount_in=amount_in,
                amount_out=amount_out,
                shares=shares,
                position=position,
            )
            return pool_id, pool, [(position, shares)], event

        res = self._run("initialize", compute)
        if res.ok:
            logger.info("pool %s initialized: %r", res.value, res.pool)
        return res

    def add_liquidity(
        self,
        amount_in_desired: Amount,
        amount_out_desired: Amount,
        amount_in_min: Amount,
        amount_out_min: Amount,
        position: PositionHandle,
    ) -> LedgerResult[AddLiquidityResult]:
        """
        Deposit at the current reserve ratio. On an EMPTY pool the deposit
        re-anchors the price, exactly like the first deposit.
        """

        def compute(current: Optional[PoolState]) -> Tuple[AddLiquidityResult, PoolState, List[_PositionDelta], PoolEvent]:
            if current is None:
                raise InsufficientLiquidity("pool is not initialized")
            _require_bound("amount_in_min", amount_in_min)
            _require_bound("amount_out_min", amount_out_min)
            minted = mint_liquidity(
                reserve_in=current.reserve_in,
                reserve_out=current.reserve_out,
                total_shares=current.total_shares,
                amount_in_desired=amount_in_desired,
                amount_out_desired=amount_out_desired,
                min_shares=self.min_initial_shares,
            )
            if minted.amount_in_used < amount_in_min:
                raise SlippageExceeded(f"amount_in ({minted.amount_in_used}) < amount_in_min ({amount_in_min})")
            if minted.amount_out_used < amount_out_min:
                raise SlippageExceeded(f"amount_out ({minted.amount_out_used}) < amount_out_min ({amount_out_min})")

            pool = PoolState(
                pool_id=current.pool_id,
                chain_id=current.chain_id,
                token_in=current.token_in,
                token_out=current.token_out,
                reserve_in=minted.new_reserve_in,
                reserve_out=minted.new_reserve_out,
                fee_bps=current.fee_bps,
                total_shares=minted.new_total_shares,
                status=PoolStatus.ACTIVE,
            )
            value = AddLiquidityResult(
                amount_in=minted.amount_in_used,
                amount_out=minted.amount_out_used,
                shares_minted=minted.shares_minted,
            )
            event = _event(
                PoolEventKind.LIQUIDITY_ADDED,
                amount_in=value.amount_in,
                amount_out=value.amount_out,
                shares=value.shares_minted,
                position=position,
            )
            return value, pool, [(position, minted.shares_minted)], event

        return self._run("add_liquidity", compute)

    def remove_liquidity(
        self,
        shares: Amount,
        amount_in_min: Amount,
        amount_out_min: Amount,
        position: PositionHandle,
    ) -> LedgerResult[RemoveLiquidityResult]:
        """
        Burn `shares` from `position` for a proportional slice of both reserves.

        Burning the last outstanding share empties the pool; the next deposit
        re-anchors the price.
        """

        def compute(current: Optional[PoolState]) -> Tuple[RemoveLiquidityResult, PoolState, List[_PositionDelta], PoolEvent]:
            if not isinstance(shares, int) or isinstance(shares, bool) or shares <= 0:
                raise InvalidAmount(f"shares must be a positive int, got {shares!r}")
            _require_bound("amount_in_min", amount_in_min)
            _require_bound("amount_out_min", amount_out_min)
            held = self._positions.get(position)
            if shares > held:
                raise InsufficientShares(f"position holds {held} shares, requested {shares}")
            if current is None:
                raise InsufficientLiquidity("pool is not initialized")

            burned = burn_liquidity(
                shares=shares,
                reserve_in=current.reserve_in,
                reserve_out=current.reserve_out,
                total_shares=current.total_shares,
            )
            if burned.amount_in_out < amount_in_min:
                raise SlippageExceeded(f"amount_in ({burned.amount_in_out}) < amount_in_min ({amount_in_min})")
            if burned.amount_out_out < amount_out_min:
                raise SlippageExceeded(f"amount_out ({burned.amount_out_out}) < amount_out_min ({amount_out_min})")

            pool = PoolState(
                pool_id=current.pool_id,
                chain_id=current.chain_id,
                token_in=current.token_in,
                token_out=current.token_out,
                reserve_in=burned.new_reserve_in,
                reserve_out=burned.new_reserve_out,
                fee_bps=current.fee_bps,
                total_shares=burned.new_total_shares,
                status=PoolStatus.ACTIVE if burned.new_total_shares > 0 else PoolStatus.EMPTY,
            )
            value = RemoveLiquidityResult(amount_in=burned.amount_in_out, amount_out=burned.amount_out_out)
            event = _event(
                PoolEventKind.LIQUIDITY_REMOVED,
                amount_in=value.amount_in,
                amount_out=value.amount_out,
                shares=shares,
                position=position,
            )
            return value, pool, [(position, -shares)], event

        res = self._run("remove_liquidity", compute)
        if res.ok and res.pool is not None and res.pool.status is PoolStatus.EMPTY:
            logger.info("pool %s emptied by last withdrawal", res.pool.pool_id)
        return res

    def swap(self, amount_in: Amount, min_amount_out: Amount, in_to_out: bool = True) -> LedgerResult[SwapResult]:
        """
        Exact-in swap. `in_to_out=True` sells `token_in` for `token_out`.

        The output is re-priced against live reserves under the lock; a stale
        quote only matters through `min_amount_out`.
        """

        def compute(current: Optional[PoolState]) -> Tuple[SwapResult, PoolState, List[_PositionDelta], PoolEvent]:
            _require_bound("min_amount_out", min_amount_out)
            if current is None or current.total_shares == 0:
                raise InsufficientLiquidity("pool has no reserves")
            reserve_in, reserve_out = current.oriented(in_to_out)
            res = _kernel_swap_exact_in(
                reserve_in=reserve_in,
                reserve_out=reserve_out,
                amount_in=amount_in,
                fee_bps=current.fee_bps,
            )
            if res.amount_out == 0:
                raise InvalidAmount(f"amount_in ({amount_in}) too small to produce any output")
            if res.amount_out < min_amount_out:
                raise SlippageExceeded(f"amount_out ({res.amount_out}) < min_amount_out ({min_amount_out})")
            pool = self._after_swap(current, in_to_out, res.new_reserve_in, res.new_reserve_out)
            value = SwapResult(
                amount_in=amount_in,
                amount_out=res.amount_out,
                fee_total=res.fee_total,
                in_to_out=in_to_out,
            )
            return value, pool, [], _swap_event(value)

        return self._run("swap", compute)

    def swap_exact_out(
        self,
        amount_out: Amount,
        max_amount_in: Amount,
        in_to_out: bool = True,
    ) -> LedgerResult[SwapResult]:
        """Exact-out swap; the required input is rounded up and bounded by `max_amount_in`."""

        def compute(current: Optional[PoolState]) -> Tuple[SwapResult, PoolState, List[_PositionDelta], PoolEvent]:
            _require_bound("max_amount_in", max_amount_in)
            if current is None or current.total_shares == 0:
                raise InsufficientLiquidity("pool has no reserves")
            reserve_in, reserve_out = current.oriented(in_to_out)
            res = _kernel_swap_exact_out(
                reserve_in=reserve_in,
                reserve_out=reserve_out,
                amount_out=amount_out,
                fee_bps=current.fee_bps,
            )
            if res.amount_in > max_amount_in:
                raise SlippageExceeded(f"amount_in ({res.amount_in}) > max_amount_in ({max_amount_in})")
            pool = self._after_swap(current, in_to_out, res.new_reserve_in, res.new_reserve_out)
            value = SwapResult(
                amount_in=res.amount_in,
                amount_out=amount_out,
                fee_total=res.fee_total,
                in_to_out=in_to_out,
            )
            return value, pool, [], _swap_event(value)

        return self._run("swap_exact_out", compute)

    @staticmethod
    def _after_swap(current: PoolState, in_to_out: bool, new_sold: Amount, new_bought: Amount) -> PoolState:
        if new_sold <= 0 or new_bought <= 0:
            raise InsufficientLiquidity("swap would drain a reserve")
        if in_to_out:
            reserve_in, reserve_out = new_sold, new_bought
        else:
            reserve_in, reserve_out = new_bought, new_sold
        if reserve_in * reserve_out < current.get_constant_product():
            raise AssertionError(
                f"invariant violation: k decreased ({current.get_constant_product()} -> {reserve_in * reserve_out})"
            )
        return PoolState(
            pool_id=current.pool_id,
            chain_id=current.chain_id,
            token_in=current.token_in,
            token_out=current.token_out,
            reserve_in=reserve_in,
            reserve_out=reserve_out,
            fee_bps=current.fee_bps,
            total_shares=current.total_shares,
            status=current.status,
        )

    def restore(
        self,
        pool: Optional[PoolState],
        positions: Dict[PositionHandle, Amount],
        stats: Optional[PoolStats] = None,
        events: Optional[EventLog] = None,
    ) -> None:
        """Replace the ledger contents wholesale (used when loading a snapshot)."""
        table = PositionTable()
        for handle, shares in positions.items():
            table.set(handle, shares)
        expected = pool.total_shares if pool is not None else 0
        if table.total() != expected:
            raise ValueError(f"positions sum to {table.total()}, pool has {expected} shares")
        if pool is not None and (pool.token_in, pool.token_out, pool.chain_id) != (
            self.token_in,
            self.token_out,
            self.chain_id,
        ):
            raise ValueError("snapshot pool does not belong to this ledger")
        with self._lock:
            self._pool = pool
            self._positions = table
            self._stats = stats if stats is not None else PoolStats()
            if events is not None:
                self._events = events

    def __repr__(self) -> str:
        return f"ReserveLedger({self._pool!r}, {self._positions!r})"
