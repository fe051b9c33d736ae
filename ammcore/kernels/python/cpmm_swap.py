"""
Constant-product swap kernel.

- The fee is taken from the gross input: `net_in = floor(gross_in * (10_000 - fee_bps) / 10_000)`.
- Pricing uses `net_in` (Uniswap-v2 style); the whole gross input stays in the pool.
- Exact-in output is rounded down, exact-out input is rounded up, so the pool
  never pays out more than the curve allows.

Integer-only and side-effect free; the ledger and the quote engine both price
through this module.
"""

from __future__ import annotations

from dataclasses import dataclass

from ...errors import InsufficientLiquidity, InvalidAmount, InvalidFeeRate


BPS_DENOM = 10_000


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidAmount(f"{name} must be an int, got {value!r}")


def _require_positive(name: str, value: int) -> None:
    _require_int(name, value)
    if value <= 0:
        raise InvalidAmount(f"{name} must be positive: {value}")


def _require_fee_bps(fee_bps: int) -> None:
    if not isinstance(fee_bps, int) or isinstance(fee_bps, bool):
        raise InvalidFeeRate(f"fee_bps must be an int, got {fee_bps!r}")
    if not (0 <= fee_bps < BPS_DENOM):
        raise InvalidFeeRate(f"fee_bps must be in [0, {BPS_DENOM}): {fee_bps}")


def _require_reserves(reserve_in: int, reserve_out: int) -> None:
    _require_int("reserve_in", reserve_in)
    _require_int("reserve_out", reserve_out)
    if min(reserve_in, reserve_out) < 0:
        raise InvalidAmount(f"reserves must be non-negative: ({reserve_in}, {reserve_out})")
    if 0 in (reserve_in, reserve_out):
        raise InsufficientLiquidity("cannot swap against an empty reserve")


def ceil_div(numerator: int, denominator: int) -> int:
    """Integer ceiling of numerator / denominator for numerator >= 0, denominator > 0."""
    if denominator <= 0 or numerator < 0:
        raise ValueError(f"ceil_div needs numerator >= 0 and denominator > 0: {numerator}/{denominator}")
    return -(-numerator // denominator)


@dataclass(frozen=True)
class SwapOutcome:
    """
    Priced trade and the reserves it leaves behind.

    Reserves are oriented by trade direction: `reserve_in` is the side being
    sold into, `reserve_out` the side being bought from.
    """
    amount_in: int
    amount_out: int
    net_in: int
    fee_total: int
    new_reserve_in: int
    new_reserve_out: int
    k_before: int
    k_after: int


def _settle(reserve_in: int, reserve_out: int, amount_in: int, amount_out: int, net_in: int) -> SwapOutcome:
    moved_in = reserve_in + amount_in
    moved_out = reserve_out - amount_out
    return SwapOutcome(
        amount_in=amount_in,
        amount_out=amount_out,
        net_in=net_in,
        fee_total=amount_in - net_in,
        new_reserve_in=moved_in,
        new_reserve_out=moved_out,
        k_before=reserve_in * reserve_out,
        k_after=moved_in * moved_out,
    )


def compute_net_in(*, gross_in: int, fee_bps: int) -> int:
    """
    Compute `net_in = floor(gross_in * (10_000 - fee_bps) / 10_000)`.

    Equivalently the fee is `ceil(gross_in * fee_bps / 10_000)`.
    """
    _require_int("gross_in", gross_in)
    _require_fee_bps(fee_bps)
    if gross_in < 0:
        raise InvalidAmount(f"gross_in must be non-negative: {gross_in}")
    return gross_in * (BPS_DENOM - fee_bps) // BPS_DENOM


def _curve_out(reserve_in: int, reserve_out: int, net_in: int) -> int:
    return reserve_out * net_in // (reserve_in + net_in)


def swap_exact_in(*, reserve_in: int, reserve_out: int, amount_in: int, fee_bps: int) -> SwapOutcome:
    """
    Price an exact input.

    A dust input may yield `amount_out == 0`; callers that commit trades decide
    whether that is acceptable.
    """
    _require_positive("amount_in", amount_in)
    _require_fee_bps(fee_bps)
    _require_reserves(reserve_in, reserve_out)

    net_in = compute_net_in(gross_in=amount_in, fee_bps=fee_bps)
    amount_out = _curve_out(reserve_in, reserve_out, net_in)
    if amount_out >= reserve_out:
        raise InsufficientLiquidity(f"amount_out ({amount_out}) would drain reserve_out ({reserve_out})")
    return _settle(reserve_in, reserve_out, amount_in, amount_out, net_in)


def swap_exact_out(*, reserve_in: int, reserve_out: int, amount_out: int, fee_bps: int) -> SwapOutcome:
    """
    Price an exact output: the smallest gross input whose exact-in output
    reaches `amount_out`. Reserves move by exactly `amount_out`.
    """
    _require_positive("amount_out", amount_out)
    _require_fee_bps(fee_bps)
    _require_reserves(reserve_in, reserve_out)
    if amount_out >= reserve_out:
        raise InsufficientLiquidity(
            f"cannot drain full reserve: amount_out ({amount_out}) >= reserve_out ({reserve_out})"
        )

    # Smallest net input on the curve, then smallest gross input whose fee
    # deduction still leaves that much.
    net_needed = ceil_div(reserve_in * amount_out, reserve_out - amount_out)
    amount_in = ceil_div(net_needed * BPS_DENOM, BPS_DENOM - fee_bps)

    net_in = compute_net_in(gross_in=amount_in, fee_bps=fee_bps)
    if _curve_out(reserve_in, reserve_out, net_in) < amount_out:
        raise AssertionError("computed amount_in insufficient for desired amount_out")
    return _settle(reserve_in, reserve_out, amount_in, amount_out, net_in)
