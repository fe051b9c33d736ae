"""
Decimal scaling at the UI boundary.

Core arithmetic uses integer base units. Decimal here only converts user
input into base units and base units back into display strings; nothing
produced here is fed back into pool state except through `parse_units`.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_DOWN, localcontext

from ..errors import InvalidAmount


MAX_DECIMALS = 36

# Enough digits for any uint256 amount at MAX_DECIMALS.
_PRECISION = 120


def _require_decimals(decimals: int) -> None:
    if not isinstance(decimals, int) or isinstance(decimals, bool) or not (0 <= decimals <= MAX_DECIMALS):
        raise ValueError(f"decimals must be an int in [0, {MAX_DECIMALS}]: {decimals!r}")


def parse_units(text: str, decimals: int = 18) -> int:
    """
    Parse a human decimal string into base units.

        parse_units("1.5", 6) == 1_500_000

    Rejects negatives, NaN/inf, exponents beyond the token precision, and
    more fractional digits than `decimals` (no silent truncation of input).
    """
    _require_decimals(decimals)
    if not isinstance(text, str):
        raise InvalidAmount(f"amount must be a string, got {type(text).__name__}")
    try:
        value = Decimal(text.strip().replace(",", ""))
    except InvalidOperation as exc:
        raise InvalidAmount(f"not a decimal amount: {text!r}") from exc
    if not value.is_finite():
        raise InvalidAmount(f"amount must be finite: {text!r}")
    if value < 0:
        raise InvalidAmount(f"amount must be non-negative: {text!r}")

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        scaled = value.scaleb(decimals)
        if scaled != scaled.to_integral_value():
            raise InvalidAmount(f"{text!r} has more than {decimals} fractional digits")
        return int(scaled)


def format_units(amount: int, decimals: int = 18, places: int = 6) -> str:
    """
    Format base units for display, truncated (never rounded up) to `places`
    fractional digits, with thousands separators.

        format_units(1_234_567_891, 6, 2) == "1,234.56"
    """
    _require_decimals(decimals)
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise InvalidAmount(f"amount must be an int, got {amount!r}")
    if not isinstance(places, int) or places < 0:
        raise ValueError("places must be a non-negative int")

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        value = Decimal(amount).scaleb(-decimals)
        shown = value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_DOWN)
    return f"{shown:,.{places}f}"


def format_bps(bps: int, places: int = 2) -> str:
    """Basis points as a percentage string: format_bps(30) == "0.30%"."""
    if not isinstance(bps, int) or isinstance(bps, bool):
        raise InvalidAmount(f"bps must be an int, got {bps!r}")
    pct = Decimal(bps).scaleb(-2)
    return f"{pct:.{places}f}%"
