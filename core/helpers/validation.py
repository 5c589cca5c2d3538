"""Validation helpers to keep derived values finite and bounded."""

import math
from typing import Any


def finite_float(value: Any, default: float = 0.0) -> float:
    """Return a finite float or a default fallback."""
    try:
        fval = float(value)
        if math.isfinite(fval):
            return fval
    except (TypeError, ValueError):
        pass
    return default


def clamp(value: float, low: float, high: float) -> float:
    """Clamp into [low, high]; non-finite input is treated as 0."""
    return max(low, min(high, finite_float(value)))


def safe_div(numerator: float, denominator: float, default: float = 0.0) -> float:
    if not denominator:
        return default
    return finite_float(numerator / denominator, default)
