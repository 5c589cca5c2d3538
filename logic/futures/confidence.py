"""Futures confidence scoring.

Scores one trade direction against funding, open interest, liquidation
zones, long/short positioning, BTC correlation and whale flow. Each
component is clamped to its own band and the total to 0-100. Reasons that
start with ``Warning:`` are reported as weaknesses, the rest as strengths.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from core.helpers import clamp
from core.logging_utils import get_logger
from core.models import (
    BTCCorrelationData,
    FuturesMarketData,
    FuturesSignalScores,
    Side,
    Signal,
    WhaleActivity,
)
from logic.futures.funding_rate import calculate_funding_rate_indicators
from logic.futures.liquidation import calculate_liquidation_indicators
from logic.futures.long_short_ratio import calculate_long_short_ratio_indicators
from logic.futures.open_interest import calculate_open_interest_indicators

logger = get_logger(__name__)

WARNING_PREFIX = "Warning:"

Scored = Tuple[float, List[str]]


@dataclass
class ScoringContext:
    side: Side
    current_price: float
    price_change_24h: float = 0.0
    volume_change_24h: float = 0.0

    @property
    def label(self) -> str:
        return self.side.value


def score_funding_rate(futures: FuturesMarketData, ctx: ScoringContext) -> Scored:
    data = futures.funding_rate
    ind = calculate_funding_rate_indicators(data, futures.open_interest.change_24h, ctx.price_change_24h)
    score = 0.0
    reasons: List[str] = []
    long_side = ctx.side == Side.LONG

    if ind.extreme.is_extreme:
        if (ind.extreme.level == "extreme_high" and not long_side) or (
            ind.extreme.level == "extreme_low" and long_side
        ):
            score += 10
            reasons.append(f"Extreme funding ({data.current * 10000:.2f}bps) favors {ctx.label} signal")
        else:
            score -= 5
            reasons.append(f"{WARNING_PREFIX} Extreme funding contradicts {ctx.label} signal")

    if ind.momentum.trend == "rising" and not long_side:
        score += 5
        reasons.append("Funding momentum rising (favor SHORT)")
    elif ind.momentum.trend == "falling" and long_side:
        score += 5
        reasons.append("Funding momentum falling (favor LONG)")

    mr = ind.mean_reversion
    if mr.signal and ((mr.direction == "long" and long_side) or (mr.direction == "short" and not long_side)):
        score += 5
        reasons.append("Mean reversion signal aligns with entry")

    if ind.divergence.signal == "bearish" and long_side:
        score -= 3
        reasons.append("Funding divergence bearish (warning for LONG)")
    elif ind.divergence.signal == "bullish" and not long_side:
        score -= 3
        reasons.append("Funding divergence bullish (warning for SHORT)")

    return clamp(score, 0, 20), reasons


def score_open_interest(futures: FuturesMarketData, ctx: ScoringContext) -> Scored:
    ind = calculate_open_interest_indicators(futures.open_interest, ctx.price_change_24h, ctx.volume_change_24h)
    score = 0.0
    reasons: List[str] = []
    long_side = ctx.side == Side.LONG
    direction = ind.trend.direction

    if direction == "rising" and long_side:
        score += 8
        reasons.append("OI rising (favor LONG)")
    elif direction == "falling" and not long_side:
        score += 8
        reasons.append("OI falling (favor SHORT)")
    elif direction != "neutral":
        score -= 4
        reasons.append(f"OI trend ({direction}) contradicts {ctx.label} signal")

    div = ind.price_divergence
    if div.detected:
        if (div.type == "bullish" and long_side) or (div.type == "bearish" and not long_side):
            score += 7
            reasons.append(f"OI divergence {div.type} (favor {ctx.label})")
        else:
            score -= 3
            reasons.append(f"OI divergence {div.type} (warning)")

    if ind.momentum.breakout:
        if direction == "rising" and long_side:
            score += 5
            reasons.append("OI momentum breakout (bullish)")
        elif direction == "falling" and not long_side:
            score += 5
            reasons.append("OI momentum breakout (bearish)")

    return clamp(score, 0, 20), reasons


def score_liquidation_zones(futures: FuturesMarketData, ctx: ScoringContext) -> Scored:
    price = ctx.current_price
    ind = calculate_liquidation_indicators(futures.liquidation, price)
    score = 0.0
    reasons: List[str] = []

    if ind.safe_entry.zones:
        if any(low <= price <= high for low, high in ind.safe_entry.zones):
            score += 8
            reasons.append("Price in safe entry zone (low liquidation density)")
        else:
            score += 4
            reasons.append("Safe entry zones identified (not at current price)")

    distance = ind.clusters.distance
    if distance > 5:
        score += 4
        reasons.append(f"Good liquidation distance ({distance:.1f}%)")
    elif distance > 3:
        score += 2
        reasons.append(f"Moderate liquidation distance ({distance:.1f}%)")
    else:
        score -= 3
        reasons.append(f"{WARNING_PREFIX} Low liquidation distance ({distance:.1f}%)")

    if ind.stop_hunt.predicted and price:
        target = ind.stop_hunt.target_price or 0.0
        to_target = abs(target - price) / price * 100
        if to_target > 2:
            score += 3
            reasons.append(f"Stop hunt predicted but far ({to_target:.1f}% away)")
        else:
            score -= 5
            reasons.append(f"{WARNING_PREFIX} Stop hunt likely nearby ({to_target:.1f}% away)")

    return clamp(score, 0, 15), reasons


def score_long_short_ratio(futures: FuturesMarketData, ctx: ScoringContext) -> Scored:
    data = futures.long_short_ratio
    ind = calculate_long_short_ratio_indicators(data)
    score = 0.0
    reasons: List[str] = []
    long_side = ctx.side == Side.LONG

    contra = ind.contrarian
    if contra.signal:
        if (contra.direction == "long" and long_side) or (contra.direction == "short" and not long_side):
            score += 8 * contra.strength
            reasons.append(f"Contrarian signal: fade retail ({contra.direction.upper()})")
        else:
            score -= 4
            reasons.append(f"{WARNING_PREFIX} Contrarian signal contradicts {ctx.label} entry")

    if ind.extreme.detected:
        if (ind.extreme.level == "extreme_short" and long_side) or (
            ind.extreme.level == "extreme_long" and not long_side
        ):
            score += 4
            reasons.append(f"Extreme ratio favors {ctx.label} (reversal likely)")

    if ind.divergence.signal == "fade_retail":
        if (data.retail_long_pct > 60 and not long_side) or (data.retail_long_pct < 40 and long_side):
            score += 3
            reasons.append("Follow pro, fade retail (aligns with entry)")

    return clamp(score, 0, 15), reasons


def score_btc_correlation(btc: BTCCorrelationData, ctx: ScoringContext) -> Scored:
    score = 0.0
    reasons: List[str] = []

    if btc.strength == "strong":
        score += 5
        reasons.append("Strong BTC correlation (predictable moves)")
    elif btc.strength == "moderate":
        score += 3
        reasons.append("Moderate BTC correlation")

    corr = btc.correlation_7d
    if ctx.side == Side.LONG and corr > 0.5:
        score += 7
        reasons.append(f"Strong positive BTC correlation ({corr:.2f}) favors LONG")
    elif ctx.side == Side.SHORT and corr < -0.5:
        score += 7
        reasons.append(f"Strong negative BTC correlation ({corr:.2f}) favors SHORT")
    elif abs(corr) > 0.5:
        score -= 3
        reasons.append(f"{WARNING_PREFIX} BTC correlation ({corr:.2f}) may oppose {ctx.label} signal")

    if btc.impact_multiplier > 1.5:
        score += 3
        reasons.append(f"High BTC impact multiplier ({btc.impact_multiplier:.2f}x)")

    return clamp(score, 0, 15), reasons


def score_whale_activity(whale: WhaleActivity, ctx: ScoringContext) -> Scored:
    flow = whale.smart_money_flow
    score = whale.whale_score * 5
    reasons: List[str] = []

    if ctx.side == Side.LONG and flow > 0.3:
        score += 10
        reasons.append(f"Strong smart money accumulation (flow: {flow:.2f})")
    elif ctx.side == Side.SHORT and flow < -0.3:
        score += 10
        reasons.append(f"Strong smart money distribution (flow: {flow:.2f})")
    elif abs(flow) > 0.2:
        aligned = (ctx.side == Side.LONG and flow > 0) or (ctx.side == Side.SHORT and flow < 0)
        if aligned:
            score += 5
            reasons.append(f"Smart money flow aligns with {ctx.label} signal")
        else:
            score -= 3
            reasons.append(f"{WARNING_PREFIX} Smart money flow opposes {ctx.label} signal")

    return clamp(score, 0, 15), reasons


def calculate_futures_confidence(
    futures: FuturesMarketData,
    side: Side = Side.LONG,
    current_price: Optional[float] = None,
    price_change_24h: float = 0.0,
    volume_change_24h: float = 0.0,
) -> FuturesSignalScores:
    ctx = ScoringContext(
        side=Side.from_value(side),
        current_price=current_price if current_price is not None else futures.price,
        price_change_24h=price_change_24h,
        volume_change_24h=volume_change_24h,
    )

    funding, funding_reasons = score_funding_rate(futures, ctx)
    oi, oi_reasons = score_open_interest(futures, ctx)
    liq, liq_reasons = score_liquidation_zones(futures, ctx)
    ratio, ratio_reasons = score_long_short_ratio(futures, ctx)
    btc, btc_reasons = (
        score_btc_correlation(futures.btc_correlation, ctx) if futures.btc_correlation else (0.0, [])
    )
    whale, whale_reasons = (
        score_whale_activity(futures.whale_activity, ctx) if futures.whale_activity else (0.0, [])
    )

    total = clamp(funding + oi + liq + ratio + btc + whale, 0, 100)
    strengths: List[str] = []
    weaknesses: List[str] = []
    for reason in funding_reasons + oi_reasons + liq_reasons + ratio_reasons + btc_reasons + whale_reasons:
        (weaknesses if reason.startswith(WARNING_PREFIX) else strengths).append(reason)

    logger.debug(
        "[FUTURES] %s %s total=%.1f (funding=%.1f oi=%.1f liq=%.1f ratio=%.1f btc=%.1f whale=%.1f)",
        futures.asset, ctx.label, total, funding, oi, liq, ratio, btc, whale,
    )
    return FuturesSignalScores(
        funding_rate_score=funding,
        open_interest_score=oi,
        liquidation_zone_score=liq,
        long_short_ratio_score=ratio,
        btc_correlation_score=btc,
        whale_activity_score=whale,
        total_score=total,
        confidence=clamp(total / 100, 0, 1),
        strengths=strengths,
        weaknesses=weaknesses,
    )


def score_signal_futures(
    signal: Signal,
    futures: Optional[FuturesMarketData],
    price_change_24h: float = 0.0,
    volume_change_24h: float = 0.0,
) -> Optional[FuturesSignalScores]:
    """Score a signal's direction and store it under ``metadata['futures_scores']``."""
    if futures is None:
        return None
    side = signal.direction or Side.LONG
    scores = calculate_futures_confidence(
        futures,
        side=side,
        current_price=signal.entry_price or futures.price,
        price_change_24h=price_change_24h,
        volume_change_24h=volume_change_24h,
    )
    signal.metadata["futures_scores"] = scores
    return scores
