"""
Kernel layer.

`ammcore/kernels/python/` holds the integer arithmetic the ledger and the
quote engine are built on: the constant-product swap and the liquidity share
mint/burn rules.
"""
