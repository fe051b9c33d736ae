"""
Integer-only pricing kernels: `cpmm_swap` and `lp_math`.
"""
