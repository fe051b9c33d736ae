# [TESTER] v1

from __future__ import annotations

import importlib.util
from pathlib import Path
from types import ModuleType

import pytest

from ammcore.config import CONFIG_ENV_VAR

ROOT = Path(__file__).resolve().parents[2]


def _load_demo() -> ModuleType:
    path = ROOT / "tools" / "amm_quote_demo.py"
    spec = importlib.util.spec_from_file_location("amm_quote_demo", path)
    assert spec is not None and spec.loader is not None
    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)
    return mod


def test_demo_quotes_swaps_and_withdraws(capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    demo = _load_demo()

    assert demo.main(["--decimals", "0", "--slippage-bps", "50"]) == 0
    out = capsys.readouterr().out
    assert "[amm-demo] quote: amount_out=1992" in out
    assert "min_out=1982" in out
    assert "[amm-demo] swapped: in=1000 out=1992 fee=3" in out
    assert "[amm-demo] volume: in=1000 out=0 fees_in=3 fees_out=0" in out
    assert "[amm-demo] pool status: EMPTY" in out
    assert "[amm-demo] events: Initialized, Swap, LiquidityRemoved" in out


def test_demo_reports_rejected_initialization(
    capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    demo = _load_demo()

    assert demo.main(["--reserve-in", "10", "--reserve-out", "10"]) == 1
    assert "FAIL (initialize): InvalidInitialDeposit" in capsys.readouterr().out


def test_demo_reports_rejected_quote(capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    demo = _load_demo()

    assert demo.main(["--amount-in", "0"]) == 1
    out = capsys.readouterr().out
    assert "[amm-demo] FAIL (quote): InvalidAmount" in out
    assert "swapped" not in out
