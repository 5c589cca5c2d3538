"""Candle primitive used for volatility context."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class Candle:
    """OHLCV candle data."""
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0
    timestamp: Optional[datetime] = None

    @property
    def range(self) -> float:
        return self.high - self.low

    @property
    def is_green(self) -> bool:
        return self.close >= self.open

    def range_pct(self, reference_price: float) -> float:
        """High-low range as a fraction of a reference price."""
        if not reference_price:
            return 0.0
        return self.range / reference_price
