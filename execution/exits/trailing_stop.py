"""Trailing stop exit with a persisted high-water mark."""

from typing import Optional

from core.exit_configs import TrailingStopConfig
from core.logging_utils import get_logger
from core.models import ExitConditionResult, ExitReason, Position, Side

logger = get_logger(__name__)


def update_trailing_stop(position: Position, current_price: float, config: TrailingStopConfig) -> bool:
    """Advance the high-water mark and trailing level.

    Activation happens the first time the side-aware gain reaches the
    configured threshold and then sticks, so a retrace below the activation
    gain can still trip the stop. Returns whether trailing is active.
    """
    if not position.trailing_stop_active:
        gain_pct = position.gain_pct(current_price)
        if gain_pct < config.activation_pct:
            return False
        position.trailing_stop_active = True
        logger.info("[TRAIL] %s: activated at %.2f%% gain", position.symbol, gain_pct)

    if position.side == Side.LONG:
        if position.highest_price is None or current_price > position.highest_price:
            position.highest_price = current_price
        level = position.highest_price * (1 - config.distance_pct / 100)
    else:
        if position.lowest_price is None or current_price < position.lowest_price:
            position.lowest_price = current_price
        level = position.lowest_price * (1 + config.distance_pct / 100)

    position.trailing_stop = level
    logger.debug(
        "[TRAIL] %s: extreme=%s level=%.4f",
        position.symbol,
        position.highest_price if position.side == Side.LONG else position.lowest_price,
        level,
    )
    return True


def check_trailing_stop(
    position: Position,
    current_price: float,
    config: TrailingStopConfig,
) -> Optional[ExitConditionResult]:
    if not config.enabled:
        return None
    if not update_trailing_stop(position, current_price, config):
        return None

    level = position.trailing_stop
    if position.side == Side.LONG:
        hit = current_price <= level
    else:
        hit = current_price >= level
    if not hit:
        return None

    anchor = "high" if position.side == Side.LONG else "low"
    logger.info("[TRAIL] %s: stop hit at %.4f (current %.4f)", position.symbol, level, current_price)
    return ExitConditionResult.for_reason(
        ExitReason.TRAILING_STOP,
        exit_size=100.0,
        exit_price=level,
        metadata={
            "trailing_stop_level": level,
            "current_price": current_price,
            "highest_price": position.highest_price if position.side == Side.LONG else None,
            "lowest_price": position.lowest_price if position.side == Side.SHORT else None,
            "distance_pct": config.distance_pct,
            "gain_pct": position.gain_pct(current_price),
            "side": position.side.value,
        },
        description=(
            f"Trailing stop hit at {level:.4f} (current: {current_price:.4f}, "
            f"{config.distance_pct}% from {anchor})"
        ),
    )
