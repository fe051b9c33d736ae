"""
Liquidity positions for one pool.

Positions are keyed by an opaque handle supplied by the caller (typically
derived from a wallet account outside this package); the table never
interprets it.
"""

from __future__ import annotations

from typing import Dict

from ..errors import InsufficientShares
from .pools import Amount

# Type alias
PositionHandle = str


class PositionTable:
    """
    Share balances mapping handle -> shares.

    Notes:
    - Balances are always non-negative.
    - Zero balances are omitted to keep the table sparse.
    - Not thread-safe on its own; the owning ledger serializes writes.
    """

    def __init__(self) -> None:
        self._shares: Dict[PositionHandle, Amount] = {}

    def get(self, handle: PositionHandle) -> Amount:
        """Shares held by `handle`. Returns 0 if not found."""
        return self._shares.get(handle, 0)

    def set(self, handle: PositionHandle, shares: Amount) -> None:
        if shares < 0:
            raise ValueError(f"share balance cannot be negative: {shares}")
        if shares == 0:
            self._shares.pop(handle, None)
        else:
            self._shares[handle] = shares

    def credit(self, handle: PositionHandle, shares: Amount) -> None:
        if shares < 0:
            raise ValueError(f"credit must be non-negative: {shares}")
        self.set(handle, self.get(handle) + shares)

    def debit(self, handle: PositionHandle, shares: Amount) -> None:
        """Remove shares from a position; fails without change if the position is short."""
        if shares < 0:
            raise ValueError(f"debit must be non-negative: {shares}")
        current = self.get(handle)
        if shares > current:
            raise InsufficientShares(f"position holds {current} shares, requested {shares}")
        self.set(handle, current - shares)

    def total(self) -> Amount:
        return sum(self._shares.values())

    def get_all(self) -> Dict[PositionHandle, Amount]:
        """Return a copy of all non-zero positions."""
        return dict(self._shares)

    def __len__(self) -> int:
        return len(self._shares)

    def __repr__(self) -> str:
        return f"PositionTable({len(self._shares)} positions)"
