"""Indicator-based exit: collect independent exit votes from the snapshot.

Votes come from RSI extremity, a confirmed MACD cross, EMA20/EMA50 breaks,
a market-structure change of character and ATR expansion. A MACD cross on
its own lags price, so it only votes when backed by RSI extremity, an EMA20
break or a strong histogram.
"""

from typing import List, Optional, Tuple

import numpy as np

from core.exit_configs import IndicatorExitConfig
from core.helpers import safe_div
from core.logging_utils import get_logger
from core.models import ExitConditionResult, ExitReason, MarketSnapshot, Position, Side

logger = get_logger(__name__)

ATR_LOOKBACK = 14
MACD_CONFIRM_RSI_HIGH = 70.0
MACD_CONFIRM_RSI_LOW = 30.0
HISTOGRAM_STRENGTH_RATIO = 0.3

Vote = Tuple[str, str]


def _rsi_vote(position: Position, rsi: Optional[float], threshold: float) -> Optional[Vote]:
    if rsi is None:
        return None
    if position.side == Side.LONG and rsi >= threshold:
        return "RSI", f"RSI ({rsi:.2f}) >= {threshold} (overbought)"
    if position.side == Side.SHORT and rsi <= 100 - threshold:
        return "RSI", f"RSI ({rsi:.2f}) <= {100 - threshold} (oversold)"
    return None


def _macd_vote(position: Position, market: MarketSnapshot) -> Optional[Vote]:
    ind = market.indicators
    if ind.macd is None:
        return None
    macd_line = ind.macd.macd
    signal_line = ind.macd.signal
    histogram = ind.macd.hist

    if position.side == Side.LONG:
        crossed = macd_line < signal_line
    else:
        crossed = macd_line > signal_line
    if not crossed:
        return None

    confirmations: List[str] = []
    if ind.rsi14 is not None:
        if position.side == Side.LONG and ind.rsi14 >= MACD_CONFIRM_RSI_HIGH:
            confirmations.append(f"RSI {ind.rsi14:.1f} (overbought)")
        elif position.side == Side.SHORT and ind.rsi14 <= MACD_CONFIRM_RSI_LOW:
            confirmations.append(f"RSI {ind.rsi14:.1f} (oversold)")
    if market.price and ind.ema20 is not None:
        if (position.side == Side.LONG and market.price < ind.ema20) or (
            position.side == Side.SHORT and market.price > ind.ema20
        ):
            confirmations.append("Price broke EMA20")
    if abs(histogram) > abs(macd_line) * HISTOGRAM_STRENGTH_RATIO:
        confirmations.append("Strong histogram divergence")

    direction = "bearish" if position.side == Side.LONG else "bullish"
    if not confirmations:
        logger.info(
            "[INDICATOR] MACD %s cross detected for %s, but no confirmation - ignoring (lagging indicator)",
            direction, position.symbol,
        )
        return None

    crossed_dir = "below" if position.side == Side.LONG else "above"
    return "MACD", (
        f"MACD ({macd_line:.4f}) crossed {crossed_dir} signal ({signal_line:.4f}) "
        f"+ {', '.join(confirmations)} - reversal confirmed"
    )


def _ema_votes(position: Position, market: MarketSnapshot) -> List[Vote]:
    ind = market.indicators
    price = market.price
    votes: List[Vote] = []
    for name, ema, label in (
        ("EMA20", ind.ema20, "trend reversal"),
        ("EMA50", ind.ema50, "major trend reversal"),
    ):
        if ema is None:
            continue
        if position.side == Side.LONG and price < ema:
            votes.append((name, f"Price ({price:.4f}) broke below {name} ({ema:.4f}) - {label}"))
        elif position.side == Side.SHORT and price > ema:
            votes.append((name, f"Price ({price:.4f}) broke above {name} ({ema:.4f}) - {label}"))
    return votes


def _structure_vote(position: Position, market: MarketSnapshot) -> Optional[Vote]:
    coc = market.change_of_character
    if position.side == Side.LONG and coc == "bearish":
        return "SUPPORT_RESISTANCE", "Support level broken (bearish structure change)"
    if position.side == Side.SHORT and coc == "bullish":
        return "SUPPORT_RESISTANCE", "Resistance level broken (bullish structure change)"
    return None


def atr_expansion_ratio(market: MarketSnapshot) -> Optional[float]:
    """Current ATR% over the average candle range% of the recent window."""
    ind = market.indicators
    price = market.price
    if ind is None or ind.atr is None or not price:
        return None
    if len(market.candles) < ATR_LOOKBACK:
        return None
    # Mean over the 13 most recent candles, latest included
    window = market.candles[-(ATR_LOOKBACK - 1):]
    ranges = np.array([c.range for c in window], dtype=float) / price
    avg_range_pct = float(np.mean(ranges)) * 100
    atr_pct = ind.atr / price * 100
    return safe_div(atr_pct, avg_range_pct)


def check_indicator_exit(
    position: Position,
    market: Optional[MarketSnapshot],
    config: IndicatorExitConfig,
) -> Optional[ExitConditionResult]:
    if not config.enabled or market is None or market.indicators is None:
        return None

    votes: List[Vote] = []
    rsi_vote = _rsi_vote(position, market.indicators.rsi14, config.rsi_threshold)
    if rsi_vote:
        votes.append(rsi_vote)

    if config.macd_crossover:
        macd_vote = _macd_vote(position, market)
        if macd_vote:
            votes.append(macd_vote)

    if config.ema_break and market.price:
        votes.extend(_ema_votes(position, market))

    if config.support_resistance_break:
        structure_vote = _structure_vote(position, market)
        if structure_vote:
            votes.append(structure_vote)

    if config.atr_expansion:
        ratio = atr_expansion_ratio(market)
        if ratio is not None and ratio >= config.atr_expansion_threshold:
            votes.append(("ATR", f"Extreme ATR expansion ({ratio:.2f}x average)"))

    required = 2 if config.require_confirmation else 1
    if len(votes) < required:
        return None

    names = ", ".join(name for name, _ in votes)
    reasons = "; ".join(reason for _, reason in votes)
    logger.info("[INDICATOR] %s exit: %s - %s", position.symbol, names, reasons)
    return ExitConditionResult.for_reason(
        ExitReason.INDICATOR_BASED,
        exit_size=100.0,
        exit_price=market.price or position.current_price,
        metadata={
            "indicators": names,
            "exit_conditions": [name for name, _ in votes],
            "require_confirmation": config.require_confirmation,
        },
        description=f"Indicator-based exit: {reasons}",
    )
