#!/usr/bin/env python3
"""
Offline demo: create a pool, quote a swap, execute it, then withdraw.

    python tools/amm_quote_demo.py --reserve-in 1000000 --reserve-out 2000000 --amount-in 1000
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from ammcore.config import load_config
from ammcore.core.units import format_bps, format_units
from ammcore.errors import AmmError
from ammcore.integration.registry import PoolRegistry


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Quote and execute a swap against an in-memory pool.")
    ap.add_argument("--config", default=None, help="YAML config path (default: $AMMCORE_CONFIG or built-ins)")
    ap.add_argument("--chain-id", type=int, default=31337)
    ap.add_argument("--token-a", default="TKA")
    ap.add_argument("--token-b", default="TKB")
    ap.add_argument("--reserve-in", type=int, default=1_000_000)
    ap.add_argument("--reserve-out", type=int, default=2_000_000)
    ap.add_argument("--fee-bps", type=int, default=None)
    ap.add_argument("--amount-in", type=int, default=1_000)
    ap.add_argument("--slippage-bps", type=int, default=None)
    ap.add_argument("--decimals", type=int, default=None, help="token decimals for display")
    ap.add_argument("--verbose", action="store_true")
    return ap.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    config = load_config(args.config)
    fee_bps = config.default_fee_bps if args.fee_bps is None else args.fee_bps
    slippage_bps = config.default_slippage_bps if args.slippage_bps is None else args.slippage_bps
    decimals = config.token_decimals if args.decimals is None else args.decimals

    registry = PoolRegistry(config)
    ledger = registry.get_or_create(args.chain_id, args.token_a, args.token_b, fee_bps)
    lp = "demo-lp"

    init = ledger.initialize(args.reserve_in, args.reserve_out, fee_bps, lp)
    if not init.ok:
        print(f"[amm-demo] FAIL (initialize): {init.code.value}: {init.error}")
        return 1
    print(f"[amm-demo] pool_id={init.value}")
    print(f"[amm-demo] reserves: in={init.pool.reserve_in} out={init.pool.reserve_out} fee={format_bps(fee_bps)}")

    try:
        quote = ledger.quote(args.amount_in, slippage_bps)
    except AmmError as exc:
        print(f"[amm-demo] FAIL (quote): {exc.kind.value}: {exc}")
        return 1
    print(
        f"[amm-demo] quote: amount_out={quote.amount_out} "
        f"({format_units(quote.amount_out, decimals)}) "
        f"impact={format_bps(quote.price_impact_bps)} min_out={quote.minimum_amount_out}"
    )

    swap = ledger.swap(args.amount_in, quote.minimum_amount_out)
    if not swap.ok:
        print(f"[amm-demo] FAIL (swap): {swap.code.value}: {swap.error}")
        return 1
    print(f"[amm-demo] swapped: in={swap.value.amount_in} out={swap.value.amount_out} fee={swap.value.fee_total}")
    print(f"[amm-demo] reserves after swap: in={swap.pool.reserve_in} out={swap.pool.reserve_out}")
    price_in, price_out = ledger.prices()
    stats = ledger.stats()
    print(f"[amm-demo] prices: {ledger.token_in}->{ledger.token_out}={price_in} {ledger.token_out}->{ledger.token_in}={price_out}")
    print(f"[amm-demo] volume: in={stats.volume_in} out={stats.volume_out} fees_in={stats.fees_in} fees_out={stats.fees_out}")

    shares = ledger.shares_of(lp)
    withdraw = ledger.remove_liquidity(shares, 0, 0, lp)
    if not withdraw.ok:
        print(f"[amm-demo] FAIL (remove_liquidity): {withdraw.code.value}: {withdraw.error}")
        return 1
    print(f"[amm-demo] withdrew {shares} shares: in={withdraw.value.amount_in} out={withdraw.value.amount_out}")
    print(f"[amm-demo] pool status: {withdraw.pool.status.value}")
    print("[amm-demo] events: " + ", ".join(e.kind.value for e in ledger.events()))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
