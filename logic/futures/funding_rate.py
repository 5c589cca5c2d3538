"""Funding rate indicators: momentum, extremes, divergence, mean reversion, squeeze."""

from dataclasses import dataclass

from core.helpers import clamp, finite_float
from core.models import FundingRateData

EXTREME_RATE = 0.001          # 0.1% per 8h
MEAN_REVERSION_MIN_RATE = 0.0005
MIN_BASE_RATE = 0.0001
SQUEEZE_PHASE_RATE = 0.0003


@dataclass
class FundingMomentum:
    score_3h: float = 0.0
    score_8h: float = 0.0
    score_24h: float = 0.0
    overall: float = 0.0
    trend: str = "neutral"


@dataclass
class FundingExtreme:
    is_extreme: bool = False
    level: str = "normal"  # extreme_high | extreme_low | normal
    reversal_signal: bool = False


@dataclass
class FundingDivergence:
    vs_oi: float = 0.0
    vs_price: float = 0.0
    signal: str = "neutral"


@dataclass
class FundingMeanReversion:
    signal: bool = False
    strength: float = 0.0
    direction: str = "neutral"


@dataclass
class FundingSqueeze:
    detected: bool = False
    phase: str = "none"


@dataclass
class FundingRateIndicators:
    momentum: FundingMomentum
    extreme: FundingExtreme
    divergence: FundingDivergence
    mean_reversion: FundingMeanReversion
    squeeze: FundingSqueeze


def _relative_change(a: float, b: float) -> float:
    return abs(a - b) / max(MIN_BASE_RATE, abs(b) or MIN_BASE_RATE)


def calculate_momentum(data: FundingRateData) -> FundingMomentum:
    score_3h = finite_float(min(1.0, _relative_change(data.current, data.rate_24h) * 10))
    score_8h = finite_float(min(1.0, _relative_change(data.rate_24h, data.rate_7d) * 5))
    score_24h = finite_float(min(1.0, _relative_change(data.current, data.rate_7d) * 3))

    trend = "neutral"
    if data.current > data.rate_24h * 1.05:
        trend = "rising"
    elif data.current < data.rate_24h * 0.95:
        trend = "falling"

    return FundingMomentum(
        score_3h=score_3h,
        score_8h=score_8h,
        score_24h=score_24h,
        overall=score_3h * 0.5 + score_8h * 0.3 + score_24h * 0.2,
        trend=trend,
    )


def detect_extreme(data: FundingRateData) -> FundingExtreme:
    is_extreme = abs(data.current) > EXTREME_RATE
    level = "normal"
    if data.current > EXTREME_RATE:
        level = "extreme_high"
    elif data.current < -EXTREME_RATE:
        level = "extreme_low"
    reversal = is_extreme and abs(data.current - data.rate_7d) > abs(data.rate_7d) * 0.5
    return FundingExtreme(is_extreme=is_extreme, level=level, reversal_signal=reversal)


def _divergence_value(funding_change: float, other_change: float) -> float:
    if not other_change:
        return 0.0
    return clamp((funding_change * 10000 - other_change) / 10, -1.0, 1.0)


def calculate_divergence(data: FundingRateData, oi_change: float, price_change: float) -> FundingDivergence:
    funding_change = data.current - data.rate_24h
    vs_oi = _divergence_value(funding_change, finite_float(oi_change))
    vs_price = _divergence_value(funding_change, finite_float(price_change))

    signal = "neutral"
    if vs_oi < -0.3 or vs_price < -0.3:
        signal = "bearish"
    elif vs_oi > 0.3 or vs_price > 0.3:
        signal = "bullish"
    return FundingDivergence(vs_oi=vs_oi, vs_price=vs_price, signal=signal)


def detect_mean_reversion(data: FundingRateData) -> FundingMeanReversion:
    strength = finite_float(min(1.0, _relative_change(data.current, data.rate_7d)))
    signal = strength > 0.5 and abs(data.current) > MEAN_REVERSION_MIN_RATE

    direction = "neutral"
    if signal:
        if data.current > EXTREME_RATE:
            direction = "short"
        elif data.current < -EXTREME_RATE:
            direction = "long"
    return FundingMeanReversion(signal=signal, strength=strength, direction=direction)


def detect_squeeze(data: FundingRateData) -> FundingSqueeze:
    squeezed = abs(data.current - data.rate_24h) < abs(data.rate_7d) * 0.3
    phase = "none"
    if squeezed:
        if data.current < -SQUEEZE_PHASE_RATE:
            phase = "accumulation"
        elif data.current > SQUEEZE_PHASE_RATE:
            phase = "distribution"
    return FundingSqueeze(detected=squeezed, phase=phase)


def calculate_funding_rate_indicators(
    data: FundingRateData,
    oi_change: float = 0.0,
    price_change: float = 0.0,
) -> FundingRateIndicators:
    return FundingRateIndicators(
        momentum=calculate_momentum(data),
        extreme=detect_extreme(data),
        divergence=calculate_divergence(data, oi_change or 0.0, price_change or 0.0),
        mean_reversion=detect_mean_reversion(data),
        squeeze=detect_squeeze(data),
    )
