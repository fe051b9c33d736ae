"""
ammcore: integer constant-product AMM pricing and liquidity accounting.

Subpackages:
- `ammcore.kernels.python`: integer swap and share math
- `ammcore.core`: quote engine and reserve ledger
- `ammcore.state`: pool state, positions, canonical encoding
- `ammcore.integration`: pool registry and snapshots
"""

__version__ = "0.1.0"
