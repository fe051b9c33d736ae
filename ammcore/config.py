"""
Runtime configuration.

Values come from a YAML mapping (PyYAML `safe_load`). The path is taken from
the caller, then from the `AMMCORE_CONFIG` environment variable; with neither
set the defaults below apply.

Example:

    default_fee_bps: 30
    min_initial_shares: 1000
    default_slippage_bps: 50
    supported_chain_ids: [1337, 31337, 5, 11155111]
    token_decimals: 18
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple, Union

import yaml

from .kernels.python.lp_math import MINIMUM_LIQUIDITY


CONFIG_ENV_VAR = "AMMCORE_CONFIG"

# Local dev networks (1337, Hardhat 31337) and testnets (Goerli 5, Sepolia 11155111).
DEFAULT_CHAIN_IDS: Tuple[int, ...] = (1337, 31337, 5, 11155111)


def _require_int(value: Any, *, name: str, lo: int, hi: Optional[int] = None) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"{name} must be an int, got {value!r}")
    if value < lo or (hi is not None and value >= hi):
        bound = f"[{lo}, {hi})" if hi is not None else f">= {lo}"
        raise ValueError(f"{name} must be {bound}: {value}")
    return value


@dataclass(frozen=True)
class AmmConfig:
    default_fee_bps: int = 30
    min_initial_shares: int = MINIMUM_LIQUIDITY
    default_slippage_bps: int = 50
    supported_chain_ids: Tuple[int, ...] = DEFAULT_CHAIN_IDS
    token_decimals: int = 18

    def __post_init__(self) -> None:
        _require_int(self.default_fee_bps, name="default_fee_bps", lo=0, hi=10_000)
        _require_int(self.min_initial_shares, name="min_initial_shares", lo=1)
        _require_int(self.default_slippage_bps, name="default_slippage_bps", lo=0, hi=10_000)
        _require_int(self.token_decimals, name="token_decimals", lo=0, hi=37)
        if not isinstance(self.supported_chain_ids, tuple) or not self.supported_chain_ids:
            raise ValueError("supported_chain_ids must be a non-empty tuple")
        for chain_id in self.supported_chain_ids:
            _require_int(chain_id, name="supported_chain_ids[]", lo=1)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AmmConfig":
        if not isinstance(data, Mapping):
            raise ValueError("config must be a mapping")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"unknown config keys: {', '.join(map(str, unknown))}")
        kwargs = dict(data)
        if "supported_chain_ids" in kwargs:
            chain_ids = kwargs["supported_chain_ids"]
            if not isinstance(chain_ids, (list, tuple)):
                raise ValueError("supported_chain_ids must be a list")
            kwargs["supported_chain_ids"] = tuple(chain_ids)
        return cls(**kwargs)


def load_config(path: Optional[Union[str, Path]] = None) -> AmmConfig:
    """Load config from `path`, else `$AMMCORE_CONFIG`, else defaults."""
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR) or None
    if path is None:
        return AmmConfig()

    obj = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    if obj is None:
        return AmmConfig()
    if not isinstance(obj, Mapping):
        raise ValueError(f"config file {path} must contain a YAML mapping")
    return AmmConfig.from_mapping(obj)
