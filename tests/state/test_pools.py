# [TESTER] v1

from __future__ import annotations

import dataclasses

import pytest

from ammcore.state.canonical import canonical_json_bytes, domain_sep_bytes
from ammcore.state.pools import PoolState, PoolStatus, compute_pool_id


def _pool(**overrides: object) -> PoolState:
    fields = dict(
        pool_id=compute_pool_id(31337, "TKA", "TKB", 30),
        chain_id=31337,
        token_in="TKA",
        token_out="TKB",
        reserve_in=1_000,
        reserve_out=2_000,
        fee_bps=30,
        total_shares=1_414,
        status=PoolStatus.ACTIVE,
    )
    fields.update(overrides)
    return PoolState(**fields)  # type: ignore[arg-type]


def test_pool_id_is_deterministic_and_parameter_bound() -> None:
    pid = compute_pool_id(31337, "TKA", "TKB", 30)
    assert pid == compute_pool_id(31337, "TKA", "TKB", 30)
    assert pid.startswith("0x") and len(pid) == 66
    assert pid != compute_pool_id(31337, "TKA", "TKB", 5)
    assert pid != compute_pool_id(1337, "TKA", "TKB", 30)


@pytest.mark.parametrize(
    "args",
    [
        (31337, "TKB", "TKA", 30),
        (31337, "TKA", "TKA", 30),
        (0, "TKA", "TKB", 30),
        (31337, "", "TKB", 30),
        (31337, "TKA", "TKB", 10_000),
    ],
)
def test_pool_id_rejects_bad_parameters(args: tuple) -> None:
    with pytest.raises(ValueError):
        compute_pool_id(*args)


def test_pool_state_invariants() -> None:
    pool = _pool()
    assert pool.get_constant_product() == 2_000_000
    assert pool.oriented(True) == (1_000, 2_000)
    assert pool.oriented(False) == (2_000, 1_000)

    with pytest.raises(ValueError, match="reserves must be positive"):
        _pool(reserve_out=0)
    with pytest.raises(ValueError, match="must be ACTIVE"):
        _pool(status=PoolStatus.EMPTY)
    with pytest.raises(ValueError, match="zero reserves"):
        _pool(total_shares=0, status=PoolStatus.EMPTY)
    with pytest.raises(ValueError, match="fee_bps"):
        _pool(fee_bps=10_000)
    with pytest.raises(TypeError):
        _pool(reserve_in=1.0)

    empty = _pool(reserve_in=0, reserve_out=0, total_shares=0, status=PoolStatus.EMPTY)
    assert empty.get_constant_product() == 0


def test_pool_state_is_frozen() -> None:
    pool = _pool()
    with pytest.raises(dataclasses.FrozenInstanceError):
        pool.reserve_in = 5  # type: ignore[misc]


def test_canonical_encoding_rules() -> None:
    assert canonical_json_bytes({"b": 1, "a": [2, 3]}) == b'{"a":[2,3],"b":1}'
    with pytest.raises(TypeError, match=r"float at \$\.a"):
        canonical_json_bytes({"a": 1.5})
    with pytest.raises(TypeError):
        canonical_json_bytes({1: 2})

    assert domain_sep_bytes("pool") == b"ammcore:pool:v1\x00"
    with pytest.raises(ValueError):
        domain_sep_bytes("po\x00ol")
