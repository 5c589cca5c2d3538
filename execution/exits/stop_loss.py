"""Stop loss exit: full close once price crosses the stop against the position."""

from typing import Optional

from core.exit_configs import StopLossConfig
from core.logging_utils import get_logger
from core.models import ExitConditionResult, ExitReason, Position, Side

logger = get_logger(__name__)


def check_stop_loss(
    position: Position,
    current_price: float,
    config: StopLossConfig,
) -> Optional[ExitConditionResult]:
    if not config.enabled or not position.stop_loss:
        return None

    sl = position.stop_loss
    if position.side == Side.LONG:
        hit = current_price <= sl
    else:
        hit = current_price >= sl
    if not hit:
        return None

    if position.side == Side.LONG:
        distance = (current_price - sl) / position.entry_price * 100
    else:
        distance = (sl - current_price) / position.entry_price * 100

    logger.info("[SL] %s %s stop hit: %.4f (current %.4f)", position.symbol, position.side.value, sl, current_price)
    return ExitConditionResult.for_reason(
        ExitReason.STOP_LOSS,
        exit_size=100.0,
        exit_price=sl,
        metadata={
            "stop_loss_level": sl,
            "current_price": current_price,
            "distance_from_sl": distance,
            "side": position.side.value,
        },
        description=f"Stop loss hit at {sl:.4f} (current: {current_price:.4f})",
    )


def calculate_stop_loss(
    entry_price: float,
    side: Side,
    stop_loss_pct: Optional[float] = None,
    default_pct: float = 2.0,
) -> float:
    """Stop price ``pct`` percent against the entry."""
    pct = default_pct if stop_loss_pct is None else stop_loss_pct
    if Side.from_value(side) == Side.LONG:
        return entry_price * (1 - pct / 100)
    return entry_price * (1 + pct / 100)
