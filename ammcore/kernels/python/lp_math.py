"""
Liquidity share math.

Pure functions with explicit rounding rules:
- initial shares are `isqrt(amount_in * amount_out)` with a minimum-liquidity floor,
- later deposits mint `min(a_in * T / R_in, a_out * T / R_out)` rounded down and
  are charged the rounded-up cost of exactly the minted shares,
- burns pay out `floor(shares * R / T)` per side.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from ...errors import InsufficientLiquidity, InsufficientShares, InvalidAmount, InvalidInitialDeposit
from .cpmm_swap import ceil_div


MINIMUM_LIQUIDITY = 1000


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidAmount(f"{name} must be an int, got {value!r}")


@dataclass(frozen=True)
class OptimalLiquidityResult:
    amount_in_used: int
    amount_out_used: int
    amount_in_refund: int
    amount_out_refund: int


@dataclass(frozen=True)
class MintLiquidityResult:
    shares_minted: int
    amount_in_used: int
    amount_out_used: int
    amount_in_refund: int
    amount_out_refund: int
    new_reserve_in: int
    new_reserve_out: int
    new_total_shares: int


@dataclass(frozen=True)
class BurnLiquidityResult:
    amount_in_out: int
    amount_out_out: int
    new_reserve_in: int
    new_reserve_out: int
    new_total_shares: int


def optimal_liquidity(
    *,
    reserve_in: int,
    reserve_out: int,
    amount_in_desired: int,
    amount_out_desired: int,
) -> OptimalLiquidityResult:
    """
    Compute the ratio-preserving deposit pair and refunds.

    Takes the smaller of `amount_in_desired` scaled to the reserve ratio and
    `amount_out_desired` scaled back.
    """
    for name, v in (
        ("reserve_in", reserve_in),
        ("reserve_out", reserve_out),
        ("amount_in_desired", amount_in_desired),
        ("amount_out_desired", amount_out_desired),
    ):
        _require_int(name, v)

    if reserve_in < 0 or reserve_out < 0:
        raise InvalidAmount("reserves must be non-negative")
    if reserve_in == 0 or reserve_out == 0:
        raise InsufficientLiquidity("pool has no reserves; initialize it instead")
    if amount_in_desired <= 0 or amount_out_desired <= 0:
        raise InvalidAmount(
            f"desired amounts must be positive: ({amount_in_desired}, {amount_out_desired})"
        )

    amount_out_from_in = (amount_in_desired * reserve_out) // reserve_in
    if amount_out_from_in <= amount_out_desired:
        amount_in_used = amount_in_desired
        amount_out_used = amount_out_from_in
    else:
        amount_in_used = (amount_out_desired * reserve_in) // reserve_out
        amount_out_used = amount_out_desired

    if amount_in_used <= 0 or amount_out_used <= 0:
        raise InvalidAmount("deposit too small for the current reserve ratio")
    if amount_in_used > amount_in_desired or amount_out_used > amount_out_desired:
        raise AssertionError("used amounts exceed desired amounts")

    return OptimalLiquidityResult(
        amount_in_used=amount_in_used,
        amount_out_used=amount_out_used,
        amount_in_refund=amount_in_desired - amount_in_used,
        amount_out_refund=amount_out_desired - amount_out_used,
    )


def mint_liquidity_initial(*, amount_in: int, amount_out: int, min_shares: int = MINIMUM_LIQUIDITY) -> int:
    """
    Shares for the first deposit into an empty pool.

    The geometric mean must reach `min_shares`; otherwise a near-zero first
    deposit could set an arbitrarily expensive share price.
    """
    _require_int("amount_in", amount_in)
    _require_int("amount_out", amount_out)
    if not isinstance(min_shares, int) or isinstance(min_shares, bool) or min_shares <= 0:
        raise ValueError("min_shares must be a positive int")
    if amount_in <= 0 or amount_out <= 0:
        raise InvalidInitialDeposit(f"initial amounts must be positive: ({amount_in}, {amount_out})")

    shares = math.isqrt(amount_in * amount_out)
    if shares < min_shares:
        raise InvalidInitialDeposit(
            f"insufficient initial liquidity: isqrt(amount_in*amount_out) = {shares} < {min_shares}"
        )
    return shares


def mint_liquidity(
    *,
    reserve_in: int,
    reserve_out: int,
    total_shares: int,
    amount_in_desired: int,
    amount_out_desired: int,
    min_shares: int = MINIMUM_LIQUIDITY,
) -> MintLiquidityResult:
    """
    Mint shares for a ratio-preserving deposit.

    An empty pool (`total_shares == 0`) is re-anchored at the deposited ratio.
    """
    for name, v in (
        ("reserve_in", reserve_in),
        ("reserve_out", reserve_out),
        ("total_shares", total_shares),
        ("amount_in_desired", amount_in_desired),
        ("amount_out_desired", amount_out_desired),
    ):
        _require_int(name, v)

    if reserve_in < 0 or reserve_out < 0:
        raise InvalidAmount("reserves must be non-negative")
    if total_shares < 0:
        raise InvalidAmount("total_shares must be non-negative")

    if total_shares == 0:
        if reserve_in != 0 or reserve_out != 0:
            raise AssertionError("empty pool must have zero reserves")
        shares = mint_liquidity_initial(
            amount_in=amount_in_desired, amount_out=amount_out_desired, min_shares=min_shares
        )
        return MintLiquidityResult(
            shares_minted=shares,
            amount_in_used=amount_in_desired,
            amount_out_used=amount_out_desired,
            amount_in_refund=0,
            amount_out_refund=0,
            new_reserve_in=amount_in_desired,
            new_reserve_out=amount_out_desired,
            new_total_shares=shares,
        )

    opt = optimal_liquidity(
        reserve_in=reserve_in,
        reserve_out=reserve_out,
        amount_in_desired=amount_in_desired,
        amount_out_desired=amount_out_desired,
    )

    shares_in = (opt.amount_in_used * total_shares) // reserve_in
    shares_out = (opt.amount_out_used * total_shares) // reserve_out
    minted = min(shares_in, shares_out)
    if minted <= 0:
        raise InvalidAmount("shares minted is zero (deposit too small)")

    # Charge the rounded-up cost of exactly `minted` shares.
    amount_in_used = ceil_div(minted * reserve_in, total_shares)
    amount_out_used = ceil_div(minted * reserve_out, total_shares)
    if amount_in_used > opt.amount_in_used or amount_out_used > opt.amount_out_used:
        raise AssertionError("share cost exceeds the ratio-preserving deposit")

    return MintLiquidityResult(
        shares_minted=minted,
        amount_in_used=amount_in_used,
        amount_out_used=amount_out_used,
        amount_in_refund=amount_in_desired - amount_in_used,
        amount_out_refund=amount_out_desired - amount_out_used,
        new_reserve_in=reserve_in + amount_in_used,
        new_reserve_out=reserve_out + amount_out_used,
        new_total_shares=total_shares + minted,
    )


def burn_liquidity(*, shares: int, reserve_in: int, reserve_out: int, total_shares: int) -> BurnLiquidityResult:
    """
    Burn shares for the underlying reserves (floor rounding).
    """
    for name, v in (
        ("shares", shares),
        ("reserve_in", reserve_in),
        ("reserve_out", reserve_out),
        ("total_shares", total_shares),
    ):
        _require_int(name, v)

    if shares <= 0:
        raise InvalidAmount(f"shares must be positive: {shares}")
    if reserve_in < 0 or reserve_out < 0:
        raise InvalidAmount("reserves must be non-negative")
    if total_shares <= 0:
        raise InsufficientLiquidity("pool has no outstanding shares")
    if shares > total_shares:
        raise InsufficientShares(f"cannot burn more than total_shares: {shares} > {total_shares}")

    amount_in_out = (shares * reserve_in) // total_shares
    amount_out_out = (shares * reserve_out) // total_shares
    return BurnLiquidityResult(
        amount_in_out=amount_in_out,
        amount_out_out=amount_out_out,
        new_reserve_in=reserve_in - amount_in_out,
        new_reserve_out=reserve_out - amount_out_out,
        new_total_shares=total_shares - shares,
    )
