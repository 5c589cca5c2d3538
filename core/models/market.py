"""Per-asset market snapshot consumed by exits, penalties and rewards."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from core.models.candle import Candle
from core.models.futures import FuturesMarketData


@dataclass
class MACDValues:
    macd: float = 0.0
    signal: float = 0.0
    histogram: Optional[float] = None

    @property
    def hist(self) -> float:
        if self.histogram is None:
            return self.macd - self.signal
        return self.histogram


@dataclass
class IndicatorSnapshot:
    """Already-computed indicator values; any field may be missing."""
    rsi14: Optional[float] = None
    macd: Optional[MACDValues] = None
    ema20: Optional[float] = None
    ema50: Optional[float] = None
    atr: Optional[float] = None
    adx: Optional[float] = None
    aroon_up: Optional[float] = None
    aroon_down: Optional[float] = None
    bb_upper: Optional[float] = None
    bb_middle: Optional[float] = None
    bb_lower: Optional[float] = None

    @property
    def bb_width(self) -> float:
        if self.bb_middle is None or self.bb_middle <= 0:
            return 0.0
        if self.bb_upper is None or self.bb_lower is None:
            return 0.0
        return (self.bb_upper - self.bb_lower) / self.bb_middle

    def price_structure(self, price: Optional[float]) -> str:
        """'up' for price > ema20 > ema50, 'down' for the mirror, else ''."""
        if price is None or self.ema20 is None or self.ema50 is None:
            return ""
        if price > self.ema20 > self.ema50:
            return "up"
        if price < self.ema20 < self.ema50:
            return "down"
        return ""

    def aroon_dominance(self, margin: float = 30.0) -> str:
        if self.aroon_up is None or self.aroon_down is None:
            return ""
        if self.aroon_up - self.aroon_down > margin:
            return "up"
        if self.aroon_down - self.aroon_up > margin:
            return "down"
        return ""


@dataclass
class VolumeConfirmation:
    is_valid: bool
    strength: str = "moderate"  # strong | moderate | weak


@dataclass
class MarketSnapshot:
    """Read-only market view of one asset for one evaluation cycle."""
    symbol: str
    price: Optional[float] = None
    indicators: Optional[IndicatorSnapshot] = None
    candles: List[Candle] = field(default_factory=list)
    change_of_character: Optional[str] = None  # bullish | bearish
    trend: Optional[str] = None                # uptrend | downtrend | sideways
    volume_confirmation: Optional[VolumeConfirmation] = None
    net_delta: Optional[float] = None
    futures: Optional[FuturesMarketData] = None
    price_change_24h: float = 0.0
    volume_change_24h: float = 0.0
