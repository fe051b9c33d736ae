"""Error kinds for the AMM core.

Pure quote/kernel functions raise these; `ReserveLedger` operations catch them
and return a failed ``LedgerResult`` carrying the matching ``ErrorKind``.
"""

from __future__ import annotations

from enum import Enum, unique


@unique
class ErrorKind(Enum):
    """One member per caller-recoverable failure."""
    INVALID_AMOUNT = "InvalidAmount"
    INVALID_INITIAL_DEPOSIT = "InvalidInitialDeposit"
    INSUFFICIENT_LIQUIDITY = "InsufficientLiquidity"
    SLIPPAGE_EXCEEDED = "SlippageExceeded"
    INSUFFICIENT_SHARES = "InsufficientShares"
    INVALID_TOLERANCE = "InvalidTolerance"
    INVALID_FEE_RATE = "InvalidFeeRate"


class AmmError(ValueError):
    """Base class for recoverable AMM failures."""

    kind: ErrorKind


class InvalidAmount(AmmError):
    """Non-positive, non-integer or non-finite quantity."""

    kind = ErrorKind.INVALID_AMOUNT


class InvalidInitialDeposit(AmmError):
    """Pool bootstrap with a zero side, too few shares, or on an initialized pool."""

    kind = ErrorKind.INVALID_INITIAL_DEPOSIT


class InsufficientLiquidity(AmmError):
    """Empty reserves, or a requested output that would drain a reserve."""

    kind = ErrorKind.INSUFFICIENT_LIQUIDITY


class SlippageExceeded(AmmError):
    """Realized amounts violate the caller's minimum-out / maximum-in bound."""

    kind = ErrorKind.SLIPPAGE_EXCEEDED


class InsufficientShares(AmmError):
    """Withdrawal requests more shares than the position holds."""

    kind = ErrorKind.INSUFFICIENT_SHARES


class InvalidTolerance(AmmError):
    """Slippage tolerance outside [0, 10000) basis points."""

    kind = ErrorKind.INVALID_TOLERANCE


class InvalidFeeRate(AmmError):
    """Fee rate outside [0, 10000) basis points, or an attempt to change it."""

    kind = ErrorKind.INVALID_FEE_RATE
