"""
Pool registry: addresses one `ReserveLedger` per (chain, token pair, fee).

The registry's lock only guards its own dictionary. Each ledger carries its
own lock, so operations on different pools never contend.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..config import AmmConfig
from ..core.ledger import ReserveLedger
from ..state.pools import TokenId

logger = logging.getLogger(__name__)


class UnsupportedChain(KeyError):
    """Chain id not listed in `AmmConfig.supported_chain_ids`."""


@dataclass(frozen=True)
class PoolKey:
    chain_id: int
    token_in: TokenId
    token_out: TokenId
    fee_bps: int


def canonical_pair(token_a: TokenId, token_b: TokenId) -> Tuple[TokenId, TokenId, bool]:
    """
    Order a token pair canonically.

    Returns (token_in, token_out, a_is_in): `a_is_in` tells the caller which
    `in_to_out` direction sells `token_a`.
    """
    if not isinstance(token_a, str) or not isinstance(token_b, str) or not token_a or not token_b:
        raise ValueError("token ids must be non-empty strings")
    if token_a == token_b:
        raise ValueError(f"a pool needs two distinct tokens: {token_a}")
    if token_a < token_b:
        return token_a, token_b, True
    return token_b, token_a, False


class PoolRegistry:
    def __init__(self, config: Optional[AmmConfig] = None) -> None:
        self.config = config if config is not None else AmmConfig()
        self._lock = threading.Lock()
        self._ledgers: Dict[PoolKey, ReserveLedger] = {}

    def key_for(self, chain_id: int, token_a: TokenId, token_b: TokenId, fee_bps: Optional[int] = None) -> PoolKey:
        if chain_id not in self.config.supported_chain_ids:
            raise UnsupportedChain(chain_id)
        token_in, token_out, _ = canonical_pair(token_a, token_b)
        fee = self.config.default_fee_bps if fee_bps is None else fee_bps
        if not isinstance(fee, int) or isinstance(fee, bool) or not (0 <= fee < 10_000):
            raise ValueError(f"fee_bps must be in [0, 10000): {fee!r}")
        return PoolKey(chain_id=chain_id, token_in=token_in, token_out=token_out, fee_bps=fee)

    def get_or_create(
        self,
        chain_id: int,
        token_a: TokenId,
        token_b: TokenId,
        fee_bps: Optional[int] = None,
    ) -> ReserveLedger:
        """Return the ledger for the pair, creating an uninitialized one on first use."""
        key = self.key_for(chain_id, token_a, token_b, fee_bps)
        with self._lock:
            ledger = self._ledgers.get(key)
            if ledger is None:
                ledger = ReserveLedger(
                    key.token_in,
                    key.token_out,
                    key.chain_id,
                    fee_bps=key.fee_bps,
                    min_initial_shares=self.config.min_initial_shares,
                )
                self._ledgers[key] = ledger
                logger.info("registered pool %s/%s fee_bps=%d on chain %d", key.token_in, key.token_out, key.fee_bps, key.chain_id)
        return ledger

    def get(self, chain_id: int, token_a: TokenId, token_b: TokenId, fee_bps: Optional[int] = None) -> Optional[ReserveLedger]:
        key = self.key_for(chain_id, token_a, token_b, fee_bps)
        with self._lock:
            return self._ledgers.get(key)

    def pools(self, chain_id: Optional[int] = None) -> List[Tuple[PoolKey, ReserveLedger]]:
        """Registered pools, optionally filtered by chain, in deterministic order."""
        with self._lock:
            items = list(self._ledgers.items())
        if chain_id is not None:
            items = [(k, v) for k, v in items if k.chain_id == chain_id]
        items.sort(key=lambda kv: (kv[0].chain_id, kv[0].token_in, kv[0].token_out, kv[0].fee_bps))
        return items

    def __len__(self) -> int:
        with self._lock:
            return len(self._ledgers)
