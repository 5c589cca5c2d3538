"""Long/short ratio indicators (retail vs pro positioning)."""

from dataclasses import dataclass

from core.helpers import clamp, finite_float
from core.models import LongShortRatioData

EXTREME_HIGH = 70.0
EXTREME_LOW = 30.0


@dataclass
class RatioSentiment:
    overall: str = "balanced"
    retail: str = "balanced"
    pro: str = "balanced"


@dataclass
class ContrarianSignal:
    signal: bool = False
    direction: str = "neutral"
    strength: float = 0.0


@dataclass
class RatioExtreme:
    detected: bool = False
    level: str = "normal"


@dataclass
class RatioDivergence:
    retail_vs_pro: float = 0.0
    signal: str = "neutral"  # fade_retail | follow_pro | neutral


@dataclass
class LongShortRatioIndicators:
    sentiment: RatioSentiment
    contrarian: ContrarianSignal
    extreme: RatioExtreme
    divergence: RatioDivergence


def _lean(long_pct: float) -> str:
    if long_pct > 55:
        return "long"
    if long_pct < 45:
        return "short"
    return "balanced"


def analyze_sentiment(data: LongShortRatioData) -> RatioSentiment:
    overall = "balanced"
    if data.long_pct > EXTREME_HIGH:
        overall = "extreme_long"
    elif data.long_pct > 55:
        overall = "moderate_long"
    elif data.long_pct < EXTREME_LOW:
        overall = "extreme_short"
    elif data.long_pct < 45:
        overall = "moderate_short"
    return RatioSentiment(overall=overall, retail=_lean(data.retail_long_pct), pro=_lean(data.pro_long_pct))


def detect_contrarian(data: LongShortRatioData) -> ContrarianSignal:
    retail = data.retail_long_pct
    if retail > EXTREME_HIGH:
        return ContrarianSignal(True, "short", finite_float(min(1.0, (retail - EXTREME_HIGH) / 20)))
    if retail < EXTREME_LOW:
        return ContrarianSignal(True, "long", finite_float(min(1.0, (EXTREME_LOW - retail) / 20)))
    return ContrarianSignal()


def detect_extreme(data: LongShortRatioData) -> RatioExtreme:
    if data.long_pct > EXTREME_HIGH:
        return RatioExtreme(True, "extreme_long")
    if data.long_pct < EXTREME_LOW:
        return RatioExtreme(True, "extreme_short")
    return RatioExtreme()


def calculate_divergence(data: LongShortRatioData) -> RatioDivergence:
    divergence = clamp((data.retail_long_pct - data.pro_long_pct) / 100, -1.0, 1.0)
    signal = "neutral"
    if abs(divergence) > 0.1:
        signal = "fade_retail"
    elif abs(divergence) < 0.05:
        signal = "follow_pro"
    return RatioDivergence(retail_vs_pro=divergence, signal=signal)


def calculate_long_short_ratio_indicators(data: LongShortRatioData) -> LongShortRatioIndicators:
    return LongShortRatioIndicators(
        sentiment=analyze_sentiment(data),
        contrarian=detect_contrarian(data),
        extreme=detect_extreme(data),
        divergence=calculate_divergence(data),
    )
