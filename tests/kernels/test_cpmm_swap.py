# [TESTER] v1

from __future__ import annotations

import pytest

from ammcore.errors import InsufficientLiquidity, InvalidAmount, InvalidFeeRate
from ammcore.kernels.python.cpmm_swap import compute_net_in, swap_exact_in, swap_exact_out


def test_swap_exact_in_matches_fee_adjusted_formula() -> None:
    res = swap_exact_in(reserve_in=1_000_000, reserve_out=2_000_000, amount_in=1_000, fee_bps=30)

    assert res.net_in == 997
    assert res.fee_total == 3
    assert res.amount_out == (2_000_000 * 997) // (1_000_000 + 997)
    assert res.amount_out == 1992
    assert (res.new_reserve_in, res.new_reserve_out) == (1_001_000, 1_998_008)
    assert res.k_after > res.k_before


def test_compute_net_in_floors() -> None:
    assert compute_net_in(gross_in=1_000, fee_bps=30) == 997
    assert compute_net_in(gross_in=1, fee_bps=30) == 0
    assert compute_net_in(gross_in=12_345, fee_bps=0) == 12_345


def test_swap_exact_in_dust_input_yields_zero_output() -> None:
    res = swap_exact_in(reserve_in=1_000_000, reserve_out=10, amount_in=1, fee_bps=30)
    assert res.amount_out == 0
    assert res.new_reserve_out == 10


def test_swap_exact_out_updates_reserves_for_requested_amount_out() -> None:
    # The minimal amount_in can yield *more* than the requested amount_out under
    # exact-in floor rounding; reserves must still move by the requested amount.
    res = swap_exact_out(reserve_in=1, reserve_out=4, amount_out=1, fee_bps=0)

    assert res.new_reserve_in == 1 + res.amount_in
    assert res.new_reserve_out == 4 - 1

    check = swap_exact_in(reserve_in=1, reserve_out=4, amount_in=res.amount_in, fee_bps=0)
    assert check.amount_out >= 1


def test_swap_exact_out_rejects_draining_the_pool() -> None:
    with pytest.raises(InsufficientLiquidity):
        swap_exact_out(reserve_in=100, reserve_out=100, amount_out=100, fee_bps=30)
    with pytest.raises(InsufficientLiquidity):
        swap_exact_out(reserve_in=100, reserve_out=100, amount_out=101, fee_bps=30)


def test_swaps_reject_empty_reserves() -> None:
    with pytest.raises(InsufficientLiquidity):
        swap_exact_in(reserve_in=0, reserve_out=100, amount_in=10, fee_bps=30)
    with pytest.raises(InsufficientLiquidity):
        swap_exact_out(reserve_in=100, reserve_out=0, amount_out=1, fee_bps=30)


@pytest.mark.parametrize("amount_in", [0, -5, 1.5, float("nan"), True])
def test_swap_exact_in_rejects_invalid_amounts(amount_in: object) -> None:
    with pytest.raises(InvalidAmount):
        swap_exact_in(reserve_in=100, reserve_out=100, amount_in=amount_in, fee_bps=30)  # type: ignore[arg-type]


@pytest.mark.parametrize("fee_bps", [-1, 10_000, 20_000])
def test_swap_rejects_fee_outside_range(fee_bps: int) -> None:
    with pytest.raises(InvalidFeeRate):
        swap_exact_in(reserve_in=100, reserve_out=100, amount_in=10, fee_bps=fee_bps)
