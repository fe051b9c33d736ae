"""
Core AMM components: the reserve ledger and the quote engine
"""

from .ledger import (
    AddLiquidityResult,
    LedgerResult,
    RemoveLiquidityResult,
    ReserveLedger,
    SwapResult,
)
from .quote import (
    Quote,
    Rounding,
    apply_slippage_tolerance,
    build_exact_in_quote,
    build_exact_out_quote,
    price_impact_bps,
    quote_proportional_deposit,
    quote_redemption,
    quote_swap_exact_in,
    quote_swap_exact_out,
    spot_price,
)
from .units import format_bps, format_units, parse_units

__all__ = [
    "AddLiquidityResult",
    "LedgerResult",
    "RemoveLiquidityResult",
    "ReserveLedger",
    "SwapResult",
    "Quote",
    "Rounding",
    "apply_slippage_tolerance",
    "build_exact_in_quote",
    "build_exact_out_quote",
    "price_impact_bps",
    "quote_proportional_deposit",
    "quote_redemption",
    "quote_swap_exact_in",
    "quote_swap_exact_out",
    "spot_price",
    "format_bps",
    "format_units",
    "parse_units",
]
