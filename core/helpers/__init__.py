"""Shared helper utilities."""

from .validation import clamp, finite_float, safe_div
from .reasons import GateReason

__all__ = [
    "clamp",
    "finite_float",
    "safe_div",
    "GateReason",
]
