# [TESTER] v1

from __future__ import annotations

from pathlib import Path

import pytest

from ammcore.config import CONFIG_ENV_VAR, DEFAULT_CHAIN_IDS, AmmConfig, load_config

ROOT = Path(__file__).resolve().parents[2]


def test_defaults_without_path_or_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    config = load_config()
    assert config == AmmConfig()
    assert config.default_fee_bps == 30
    assert config.min_initial_shares == 1000
    assert config.supported_chain_ids == DEFAULT_CHAIN_IDS


def test_example_config_matches_defaults() -> None:
    assert load_config(ROOT / "config" / "ammcore.example.yaml") == AmmConfig()


def test_load_from_yaml_file(tmp_path: Path) -> None:
    path = tmp_path / "amm.yaml"
    path.write_text("default_fee_bps: 5\nsupported_chain_ids: [1337]\n", encoding="utf-8")
    config = load_config(path)
    assert config.default_fee_bps == 5
    assert config.supported_chain_ids == (1337,)
    assert config.default_slippage_bps == 50


def test_env_var_selects_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "amm.yaml"
    path.write_text("token_decimals: 6\n", encoding="utf-8")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
    assert load_config().token_decimals == 6


def test_empty_file_gives_defaults(tmp_path: Path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == AmmConfig()


@pytest.mark.parametrize(
    "text",
    [
        "- 1\n- 2\n",
        "fee: 30\n",
        "default_fee_bps: 10000\n",
        "default_slippage_bps: -1\n",
        "min_initial_shares: 0\n",
        "supported_chain_ids: []\n",
        "supported_chain_ids: 1337\n",
        "token_decimals: 40\n",
    ],
)
def test_invalid_config_rejected(tmp_path: Path, text: str) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text(text, encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)
