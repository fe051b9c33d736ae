"""
Pool state for a two-asset constant-product pool.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .canonical import canonical_json_bytes, domain_sep_bytes, sha256_hex


# Type aliases
PoolId = str  # 0x-prefixed sha256 hex
TokenId = str
Amount = int  # Non-negative integer in the token's smallest unit


class PoolStatus(Enum):
    """Pool status enumeration."""
    ACTIVE = "ACTIVE"
    EMPTY = "EMPTY"


def compute_pool_id(chain_id: int, token_in: TokenId, token_out: TokenId, fee_bps: int) -> PoolId:
    """
    Deterministically compute a pool_id:

        pool_id = sha256("ammcore:pool:v1\\0" || canonical_json({chain_id, token_in, token_out, fee_bps}))
    """
    if not isinstance(chain_id, int) or isinstance(chain_id, bool) or chain_id <= 0:
        raise ValueError(f"chain_id must be a positive int: {chain_id!r}")
    if not isinstance(token_in, str) or not isinstance(token_out, str) or not token_in or not token_out:
        raise ValueError("token ids must be non-empty strings")
    if token_in >= token_out:
        raise ValueError(f"tokens must be in canonical order: {token_in} < {token_out}")
    if not isinstance(fee_bps, int) or isinstance(fee_bps, bool) or not (0 <= fee_bps < 10000):
        raise ValueError(f"fee_bps must be in [0, 10000): {fee_bps}")

    payload = {"chain_id": chain_id, "token_in": token_in, "token_out": token_out, "fee_bps": fee_bps}
    return sha256_hex(domain_sep_bytes("pool") + canonical_json_bytes(payload))


@dataclass(frozen=True)
class PoolState:
    """
    Immutable view of one pool.

    The ledger replaces the whole object on every commit, so a reference held
    by a reader is always an internally consistent snapshot.

    Attributes:
        pool_id: Deterministic pool identifier (see `compute_pool_id`)
        chain_id: Network the pool is addressed on
        token_in: Token held in `reserve_in`
        token_out: Token held in `reserve_out`
        reserve_in: Reserve of `token_in`, base units
        reserve_out: Reserve of `token_out`, base units
        fee_bps: Swap fee in basis points, immutable per pool
        total_shares: Outstanding liquidity shares
        status: ACTIVE while shares exist, EMPTY after the last withdrawal
    """
    pool_id: PoolId
    chain_id: int
    token_in: TokenId
    token_out: TokenId
    reserve_in: Amount
    reserve_out: Amount
    fee_bps: int
    total_shares: Amount
    status: PoolStatus

    def __post_init__(self) -> None:
        for name in ("reserve_in", "reserve_out", "fee_bps", "total_shares"):
            v = getattr(self, name)
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")

        if not (0 <= self.fee_bps < 10000):
            raise ValueError(f"fee_bps must be in [0, 10000): {self.fee_bps}")
        if self.reserve_in < 0 or self.reserve_out < 0:
            raise ValueError(f"Reserves must be non-negative: ({self.reserve_in}, {self.reserve_out})")
        if self.total_shares < 0:
            raise ValueError(f"total_shares must be non-negative: {self.total_shares}")

        if self.total_shares > 0:
            if self.reserve_in == 0 or self.reserve_out == 0:
                raise ValueError("reserves must be positive while shares are outstanding")
            if self.status is not PoolStatus.ACTIVE:
                raise ValueError(f"pool with outstanding shares must be ACTIVE, got {self.status}")
        else:
            if self.reserve_in != 0 or self.reserve_out != 0:
                raise ValueError("pool without shares must have zero reserves")
            if self.status is not PoolStatus.EMPTY:
                raise ValueError(f"pool without shares must be EMPTY, got {self.status}")

    def get_constant_product(self) -> int:
        """k = reserve_in * reserve_out."""
        return self.reserve_in * self.reserve_out

    def oriented(self, in_to_out: bool) -> tuple[Amount, Amount]:
        """Return (reserve_sold_into, reserve_bought_from) for a trade direction."""
        if in_to_out:
            return self.reserve_in, self.reserve_out
        return self.reserve_out, self.reserve_in

    def __repr__(self) -> str:
        return (
            f"PoolState(pool_id={self.pool_id[:16]}..., "
            f"tokens=({self.token_in}, {self.token_out}), "
            f"reserves=({self.reserve_in}, {self.reserve_out}), "
            f"fee_bps={self.fee_bps}, total_shares={self.total_shares}, status={self.status.value})"
        )
