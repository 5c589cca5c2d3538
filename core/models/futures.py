"""Futures-market evidence types and the composite score they produce."""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

PriceZone = Tuple[float, float]  # (price_low, price_high)


@dataclass
class FundingRateData:
    current: float = 0.0  # per 8h period, fraction (0.001 = 0.1%)
    rate_24h: float = 0.0
    rate_7d: float = 0.0
    trend: str = "neutral"
    momentum: float = 0.0
    extreme: bool = False


@dataclass
class OpenInterestData:
    current: float = 0.0
    change_24h: float = 0.0  # %
    change_24h_value: float = 0.0
    trend: str = "neutral"
    momentum: float = 0.0
    concentration: float = 0.5  # 0-1


@dataclass
class LongShortRatioData:
    long_pct: float = 50.0
    short_pct: float = 50.0
    retail_long_pct: float = 50.0
    retail_short_pct: float = 50.0
    pro_long_pct: float = 50.0
    pro_short_pct: float = 50.0
    extreme: bool = False
    sentiment: str = "balanced"


@dataclass
class LiquidationCluster:
    price: float
    size: float  # USD
    side: str    # long | short
    confidence: float = 0.5


@dataclass
class LiquidationData:
    long_liquidations_24h: float = 0.0
    short_liquidations_24h: float = 0.0
    clusters: List[LiquidationCluster] = field(default_factory=list)
    safe_entry_zones: List[PriceZone] = field(default_factory=list)
    liquidation_distance: Optional[float] = None  # % to nearest cluster

    @property
    def total_liquidations_24h(self) -> float:
        return self.long_liquidations_24h + self.short_liquidations_24h


@dataclass
class PremiumIndexData:
    premium_pct: float = 0.0
    premium_24h: float = 0.0
    premium_7d: float = 0.0
    trend: str = "neutral"
    divergence: Optional[float] = None
    arbitrage_opportunity: bool = False


@dataclass
class BTCCorrelationData:
    correlation_24h: float = 0.0
    correlation_7d: float = 0.0
    correlation_30d: float = 0.0
    strength: str = "weak"  # strong | moderate | weak
    impact_multiplier: float = 1.0


@dataclass
class WhaleActivity:
    smart_money_flow: float = 0.0  # -1..1, positive = accumulation
    whale_score: float = 0.0       # 0-1
    spoofing_detected: bool = False
    wash_trading_detected: bool = False


@dataclass
class FuturesMarketData:
    asset: str
    price: float
    funding_rate: FundingRateData = field(default_factory=FundingRateData)
    open_interest: OpenInterestData = field(default_factory=OpenInterestData)
    long_short_ratio: LongShortRatioData = field(default_factory=LongShortRatioData)
    liquidation: LiquidationData = field(default_factory=LiquidationData)
    premium_index: Optional[PremiumIndexData] = None
    btc_correlation: Optional[BTCCorrelationData] = None
    whale_activity: Optional[WhaleActivity] = None


@dataclass
class FuturesSignalScores:
    """Bounded futures evidence score for one signal direction."""
    funding_rate_score: float = 0.0      # 0-20
    open_interest_score: float = 0.0     # 0-20
    liquidation_zone_score: float = 0.0  # 0-15
    long_short_ratio_score: float = 0.0  # 0-15
    btc_correlation_score: float = 0.0   # 0-15
    whale_activity_score: float = 0.0    # 0-15
    total_score: float = 0.0             # 0-100
    confidence: float = 0.0              # total / 100
    strengths: List[str] = field(default_factory=list)
    weaknesses: List[str] = field(default_factory=list)
