"""
Quote engine: pure pricing functions over a reserve snapshot.

Nothing here touches a ledger. Every function takes reserves and amounts as
base-unit integers and returns integers (or an immutable `Quote`), so the same
inputs always give the same answer and quotes can run concurrently with pool
mutations.

Rounding always favors the pool:
- exact-in outputs and minimum-out bounds round down,
- exact-out inputs and maximum-in bounds round up.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from fractions import Fraction
from typing import Tuple

from ..errors import InsufficientLiquidity, InvalidAmount, InvalidTolerance
from ..kernels.python.cpmm_swap import BPS_DENOM, ceil_div
from ..kernels.python.cpmm_swap import swap_exact_in as _kernel_swap_exact_in
from ..kernels.python.cpmm_swap import swap_exact_out as _kernel_swap_exact_out
from ..kernels.python.lp_math import burn_liquidity as _kernel_burn_liquidity
from ..state.pools import Amount


class Rounding(Enum):
    """Direction for slippage bounds."""
    DOWN = "DOWN"  # minimum amount out
    UP = "UP"  # maximum amount in


@dataclass(frozen=True)
class Quote:
    """
    Ephemeral swap quote. Never persisted and never mutates pool state.

    `effective_price` is `amount_out / amount_in` as an exact fraction, for
    display only.
    """
    amount_in: Amount
    amount_out: Amount
    price_impact_bps: int
    minimum_amount_out: Amount
    maximum_amount_in: Amount
    effective_price: Fraction
    fee_bps: int
    tolerance_bps: int


def _require_amount(name: str, value: int, *, positive: bool = True) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidAmount(f"{name} must be an int, got {value!r}")
    if positive and value <= 0:
        raise InvalidAmount(f"{name} must be positive: {value}")
    if value < 0:
        raise InvalidAmount(f"{name} must be non-negative: {value}")


def _require_live_reserves(reserve_in: int, reserve_out: int) -> None:
    _require_amount("reserve_in", reserve_in, positive=False)
    _require_amount("reserve_out", reserve_out, positive=False)
    if reserve_in == 0 or reserve_out == 0:
        raise InsufficientLiquidity("pool has no reserves")


def quote_swap_exact_in(reserve_in: Amount, reserve_out: Amount, fee_bps: int, amount_in: Amount) -> Amount:
    """
    Output for an exact input under the fee-adjusted constant-product formula.

        amount_in_after_fee = floor(amount_in * (10_000 - fee_bps) / 10_000)
        amount_out = floor(reserve_out * amount_in_after_fee / (reserve_in + amount_in_after_fee))

    Args:
        reserve_in: Reserve of the asset being sold into the pool
        reserve_out: Reserve of the asset being bought
        fee_bps: Pool fee in basis points
        amount_in: Exact input amount

    Returns:
        Output amount, rounded down (may be 0 for dust inputs)

    Raises:
        InvalidAmount: If amount_in <= 0
        InsufficientLiquidity: If either reserve is zero
    """
    res = _kernel_swap_exact_in(
        reserve_in=reserve_in,
        reserve_out=reserve_out,
        amount_in=amount_in,
        fee_bps=fee_bps,
    )
    return res.amount_out


def quote_swap_exact_out(reserve_in: Amount, reserve_out: Amount, fee_bps: int, amount_out: Amount) -> Amount:
    """
    Input required for an exact output (inverse formula, rounded up).

        net_in = ceil(reserve_in * amount_out / (reserve_out - amount_out))
        amount_in = ceil(net_in * 10_000 / (10_000 - fee_bps))

    Raises:
        InvalidAmount: If amount_out <= 0
        InsufficientLiquidity: If a reserve is zero or amount_out >= reserve_out
    """
    res = _kernel_swap_exact_out(
        reserve_in=reserve_in,
        reserve_out=reserve_out,
        amount_out=amount_out,
        fee_bps=fee_bps,
    )
    return res.amount_in


def spot_price(reserve_in: Amount, reserve_out: Amount) -> Fraction:
    """Marginal price of the input asset in units of the output asset, before fees."""
    _require_live_reserves(reserve_in, reserve_out)
    return Fraction(reserve_out, reserve_in)


def price_impact_bps(reserve_in: Amount, reserve_out: Amount, amount_in: Amount, amount_out: Amount) -> int:
    """
    Degradation of the realized price `amount_out / amount_in` against the
    pre-trade spot price `reserve_out / reserve_in`, in basis points.

        impact = ceil((amount_in * reserve_out - amount_out * reserve_in) * 10_000 / (amount_in * reserve_out))

    Rounded up and clamped at zero; the fee is part of the degradation.
    """
    _require_live_reserves(reserve_in, reserve_out)
    _require_amount("amount_in", amount_in)
    _require_amount("amount_out", amount_out, positive=False)

    spot_value = amount_in * reserve_out
    realized_value = amount_out * reserve_in
    if realized_value >= spot_value:
        return 0
    return ceil_div((spot_value - realized_value) * BPS_DENOM, spot_value)


def _require_tolerance(tolerance_bps: int) -> None:
    if not isinstance(tolerance_bps, int) or isinstance(tolerance_bps, bool):
        raise InvalidTolerance(f"tolerance_bps must be an int, got {tolerance_bps!r}")
    if not (0 <= tolerance_bps < BPS_DENOM):
        raise InvalidTolerance(f"tolerance_bps must be in [0, {BPS_DENOM}): {tolerance_bps}")


def apply_slippage_tolerance(amount: Amount, tolerance_bps: int, rounding: Rounding) -> Amount:
    """
    Derive a slippage bound from a quoted amount.

    `Rounding.DOWN` gives a minimum amount out, `Rounding.UP` a maximum amount in:

        DOWN: floor(amount * (10_000 - tolerance_bps) / 10_000)
        UP:   ceil(amount * (10_000 + tolerance_bps) / 10_000)

    Raises:
        InvalidTolerance: If tolerance_bps is outside [0, 10_000)
        InvalidAmount: If amount is negative or not an int
    """
    _require_tolerance(tolerance_bps)
    _require_amount("amount", amount, positive=False)
    if rounding is Rounding.DOWN:
        return (amount * (BPS_DENOM - tolerance_bps)) // BPS_DENOM
    if rounding is Rounding.UP:
        return ceil_div(amount * (BPS_DENOM + tolerance_bps), BPS_DENOM)
    raise ValueError(f"unknown rounding direction: {rounding!r}")


def quote_proportional_deposit(reserve_in: Amount, reserve_out: Amount, amount_in_desired: Amount) -> Amount:
    """
    Paired `reserve_out` amount that keeps the current ratio for a deposit of
    `amount_in_desired` (rounded down).

    Raises:
        InsufficientLiquidity: If the pool has no reserves (use initialize instead)
    """
    _require_live_reserves(reserve_in, reserve_out)
    _require_amount("amount_in_desired", amount_in_desired)
    return (amount_in_desired * reserve_out) // reserve_in


def quote_redemption(shares: Amount, reserve_in: Amount, reserve_out: Amount, total_shares: Amount) -> Tuple[Amount, Amount]:
    """Withdrawable (amount_in, amount_out) for `shares`, rounded down."""
    res = _kernel_burn_liquidity(
        shares=shares,
        reserve_in=reserve_in,
        reserve_out=reserve_out,
        total_shares=total_shares,
    )
    return res.amount_in_out, res.amount_out_out


def build_exact_in_quote(
    reserve_in: Amount,
    reserve_out: Amount,
    fee_bps: int,
    amount_in: Amount,
    tolerance_bps: int,
) -> Quote:
    """Full exact-in quote: output, price impact and minimum-out bound."""
    _require_tolerance(tolerance_bps)
    amount_out = quote_swap_exact_in(reserve_in, reserve_out, fee_bps, amount_in)
    return Quote(
        amount_in=amount_in,
        amount_out=amount_out,
        price_impact_bps=price_impact_bps(reserve_in, reserve_out, amount_in, amount_out),
        minimum_amount_out=apply_slippage_tolerance(amount_out, tolerance_bps, Rounding.DOWN),
        maximum_amount_in=amount_in,
        effective_price=Fraction(amount_out, amount_in),
        fee_bps=fee_bps,
        tolerance_bps=tolerance_bps,
    )


def build_exact_out_quote(
    reserve_in: Amount,
    reserve_out: Amount,
    fee_bps: int,
    amount_out: Amount,
    tolerance_bps: int,
) -> Quote:
    """Full exact-out quote: required input, price impact and maximum-in bound."""
    _require_tolerance(tolerance_bps)
    amount_in = quote_swap_exact_out(reserve_in, reserve_out, fee_bps, amount_out)
    return Quote(
        amount_in=amount_in,
        amount_out=amount_out,
        price_impact_bps=price_impact_bps(reserve_in, reserve_out, amount_in, amount_out),
        minimum_amount_out=amount_out,
        maximum_amount_in=apply_slippage_tolerance(amount_in, tolerance_bps, Rounding.UP),
        effective_price=Fraction(amount_out, amount_in),
        fee_bps=fee_bps,
        tolerance_bps=tolerance_bps,
    )
