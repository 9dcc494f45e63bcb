# startup_proj/numerics.py
from __future__ import annotations

import math
from decimal import Context, Decimal, ROUND_HALF_UP, localcontext

import numpy as np

# Enough digits for any finite float (max ~1.8e308) plus the requested decimals.
_DECIMAL_PREC = 400


def round_half_away(x: float, ndigits: int = 0) -> float:
    """
    Round half away from zero at `ndigits` decimals.

    Works on the exact binary value of the float (Decimal(x) is exact), so
    1187.5 -> 1188 and -2.5 -> -3. Non-finite values pass through unchanged.
    """
    x = float(x)
    if not math.isfinite(x):
        return x
    quantum = Decimal(1).scaleb(-ndigits)
    with localcontext(Context(prec=_DECIMAL_PREC)):
        return float(Decimal(x).quantize(quantum, rounding=ROUND_HALF_UP))


def ieee_div(numerator: float, denominator: float) -> float:
    """Float division with IEEE semantics: x/0 -> +/-inf, 0/0 -> nan."""
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.float64(numerator) / np.float64(denominator))


def compound(start: float, rate: float, periods: int) -> float:
    """start * (1 + rate) ** periods, overflowing to inf instead of raising."""
    with np.errstate(over="ignore", invalid="ignore"):
        return float(np.float64(start) * np.power(np.float64(1 + rate), periods))
