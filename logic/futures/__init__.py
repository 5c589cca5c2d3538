"""
Futures-market evidence.

Indicator calculators for funding, open interest, liquidations and the
long/short ratio, plus the composite confidence scorer built on them.
"""

from .confidence import calculate_futures_confidence, score_signal_futures
from .funding_rate import calculate_funding_rate_indicators
from .liquidation import calculate_liquidation_indicators
from .long_short_ratio import calculate_long_short_ratio_indicators
from .open_interest import calculate_open_interest_indicators

__all__ = [
    "calculate_futures_confidence",
    "score_signal_futures",
    "calculate_funding_rate_indicators",
    "calculate_liquidation_indicators",
    "calculate_long_short_ratio_indicators",
    "calculate_open_interest_indicators",
]
