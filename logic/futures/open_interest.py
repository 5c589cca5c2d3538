"""Open interest indicators."""

from dataclasses import dataclass

from core.helpers import clamp, finite_float
from core.models import OpenInterestData

TREND_CHANGE_PCT = 2.0
DIVERGENCE_OI_PCT = 3.0
BREAKOUT_MOMENTUM = 50.0


@dataclass
class OITrend:
    direction: str = "neutral"
    strength: float = 0.0
    momentum: float = 0.0


@dataclass
class OIDivergence:
    detected: bool = False
    type: str = "none"  # bullish | bearish | none
    strength: float = 0.0


@dataclass
class OIMomentum:
    score: float = 0.0
    breakout: bool = False


@dataclass
class OIConcentration:
    level: float = 0.5
    risk: str = "low"


@dataclass
class OIVolumeCorrelation:
    vs_volume: float = 0.0
    signal: str = "neutral"


@dataclass
class OpenInterestIndicators:
    trend: OITrend
    price_divergence: OIDivergence
    volume_divergence: OIDivergence
    momentum: OIMomentum
    concentration: OIConcentration
    correlation: OIVolumeCorrelation


def calculate_trend(data: OpenInterestData) -> OITrend:
    direction = "neutral"
    if data.change_24h > TREND_CHANGE_PCT:
        direction = "rising"
    elif data.change_24h < -TREND_CHANGE_PCT:
        direction = "falling"
    return OITrend(
        direction=direction,
        strength=finite_float(min(1.0, abs(data.change_24h) / 10)),
        momentum=finite_float(min(1.0, abs(data.momentum) / 100)),
    )


def detect_price_divergence(data: OpenInterestData, price_change_24h: float) -> OIDivergence:
    oi = data.change_24h
    strength = finite_float(min(1.0, abs(oi) / 10))
    if price_change_24h > 0 and oi < -DIVERGENCE_OI_PCT:
        return OIDivergence(True, "bearish", strength)
    if price_change_24h < 0 and oi > DIVERGENCE_OI_PCT:
        return OIDivergence(True, "bullish", strength)
    return OIDivergence()


def detect_volume_divergence(data: OpenInterestData, volume_change_24h: float) -> OIDivergence:
    oi = data.change_24h
    strength = finite_float(min(1.0, abs(oi) / 10))
    if oi > DIVERGENCE_OI_PCT and volume_change_24h < -10:
        return OIDivergence(True, "bullish", strength)
    if oi < -DIVERGENCE_OI_PCT and volume_change_24h > 10:
        return OIDivergence(True, "bearish", strength)
    return OIDivergence()


def calculate_momentum(data: OpenInterestData) -> OIMomentum:
    return OIMomentum(
        score=finite_float(min(1.0, abs(data.momentum) / 100)),
        breakout=abs(data.momentum) > BREAKOUT_MOMENTUM,
    )


def calculate_concentration(data: OpenInterestData) -> OIConcentration:
    level = clamp(finite_float(data.concentration, 0.5), 0.0, 1.0)
    risk = "low"
    if level > 0.7:
        risk = "high"
    elif level > 0.5:
        risk = "medium"
    return OIConcentration(level=level, risk=risk)


def calculate_volume_correlation(data: OpenInterestData, volume_change_24h: float) -> OIVolumeCorrelation:
    oi = data.change_24h
    correlation = 0.0
    if oi and volume_change_24h:
        norm_oi = oi / 10
        norm_vol = volume_change_24h / 100
        magnitude = min(1.0, (abs(norm_oi) + abs(norm_vol)) / 2)
        same_direction = (norm_oi > 0 and norm_vol > 0) or (norm_oi < 0 and norm_vol < 0)
        correlation = magnitude if same_direction else -magnitude

    signal = "neutral"
    if correlation > 0.3 and oi > 0:
        signal = "bullish"
    elif correlation < -0.3 and oi < 0:
        signal = "bearish"
    return OIVolumeCorrelation(vs_volume=clamp(correlation, -1.0, 1.0), signal=signal)


def calculate_open_interest_indicators(
    data: OpenInterestData,
    price_change_24h: float = 0.0,
    volume_change_24h: float = 0.0,
) -> OpenInterestIndicators:
    price_change_24h = price_change_24h or 0.0
    volume_change_24h = volume_change_24h or 0.0
    return OpenInterestIndicators(
        trend=calculate_trend(data),
        price_divergence=detect_price_divergence(data, price_change_24h),
        volume_divergence=detect_volume_divergence(data, volume_change_24h),
        momentum=calculate_momentum(data),
        concentration=calculate_concentration(data),
        correlation=calculate_volume_correlation(data, volume_change_24h),
    )
