"""Take profit exit: single level or a ladder with cumulative sizing.

A ladder rung's ``cumulative_size_pct`` is the running total closed through
that rung. The incremental close is the rung's cumulative size minus what
earlier take-profit exits on the position already closed, so firing the top
rung after the lower ones were skipped closes everything owed at once, and a
rung that is already covered never fires again.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from core.exit_configs import TakeProfitConfig
from core.logging_utils import get_logger
from core.models import ExitConditionResult, ExitReason, Position, Side, TakeProfitTarget

logger = get_logger(__name__)


@dataclass
class TakeProfitLevel:
    level: float
    price: float
    size_pct: float
    cumulative_size_pct: float
    hit: bool = False


def _reached(side: Side, current_price: float, target_price: float) -> bool:
    # Rung prices carry float error from entry * (1 +/- pct / 100)
    if math.isclose(current_price, target_price, rel_tol=1e-9):
        return True
    if side == Side.LONG:
        return current_price >= target_price
    return current_price <= target_price


def calculate_take_profit_levels(
    position: Position,
    levels: Sequence[float],
    sizes: Sequence[float],
) -> List[TakeProfitLevel]:
    hit_levels = {
        ec.metadata.get("tp_level")
        for ec in position.exit_conditions
        if ec.reason == ExitReason.TAKE_PROFIT
    }
    ladder: List[TakeProfitLevel] = []
    cumulative = 0.0
    for i, level_pct in enumerate(levels):
        size_pct = sizes[i] if i < len(sizes) else 0.0
        cumulative += size_pct
        if position.side == Side.LONG:
            price = position.entry_price * (1 + level_pct / 100)
        else:
            price = position.entry_price * (1 - level_pct / 100)
        ladder.append(TakeProfitLevel(
            level=level_pct,
            price=price,
            size_pct=size_pct,
            cumulative_size_pct=cumulative,
            hit=level_pct in hit_levels,
        ))
    return ladder


def _ladder_for(position: Position, config: TakeProfitConfig):
    targets: List[TakeProfitTarget] = position.take_profit_targets
    if targets:
        return [t.level for t in targets], [t.size for t in targets]
    if position.take_profit_price and config.levels:
        return list(config.levels), list(config.sizes)
    return None


def check_take_profit(
    position: Position,
    current_price: float,
    config: TakeProfitConfig,
) -> Optional[ExitConditionResult]:
    if not config.enabled or not position.take_profit:
        return None

    configured = _ladder_for(position, config)
    if configured is None:
        return _check_single_level(position, current_price)

    levels, sizes = configured
    ladder = calculate_take_profit_levels(position, levels, sizes)

    # Highest reached rung that has not fired yet
    exit_level = None
    for rung in reversed(ladder):
        if not rung.hit and _reached(position.side, current_price, rung.price):
            exit_level = rung
            break
    if exit_level is None:
        return None

    already_closed = position.take_profit_closed_pct
    new_exit_size = exit_level.cumulative_size_pct - already_closed
    # Never close more than what is left of the position
    exit_size = min(new_exit_size, 100.0 - already_closed)
    if exit_size <= 0:
        logger.debug(
            "[TP] %s level %.2f%% already covered (%.1f%% closed)",
            position.symbol, exit_level.level, already_closed,
        )
        return None

    first_size = sizes[0] if sizes else 0.0
    logger.info(
        "[TP] %s level %.2f%% hit at %.4f, closing %.1f%%",
        position.symbol, exit_level.level, exit_level.price, exit_size,
    )
    return ExitConditionResult.for_reason(
        ExitReason.TAKE_PROFIT,
        exit_size=exit_size,
        exit_price=exit_level.price,
        metadata={
            "tp_level": exit_level.level,
            "tp_price": exit_level.price,
            "current_price": current_price,
            "exit_size": new_exit_size,
            "cumulative_size": exit_level.cumulative_size_pct,
            "already_closed": already_closed,
            "side": position.side.value,
            "should_move_stop_loss": (
                config.auto_move_stop_loss_to_breakeven
                and exit_level.cumulative_size_pct >= first_size
            ),
        },
        description=(
            f"Take profit level {exit_level.level}% hit at {exit_level.price:.4f} "
            f"(close {exit_size:.1f}%)"
        ),
    )


def _check_single_level(position: Position, current_price: float) -> Optional[ExitConditionResult]:
    tp = position.take_profit_price
    if tp is None or not _reached(position.side, current_price, tp):
        return None
    logger.info("[TP] %s single target hit at %.4f", position.symbol, tp)
    return ExitConditionResult.for_reason(
        ExitReason.TAKE_PROFIT,
        exit_size=100.0,
        exit_price=tp,
        metadata={"tp_level": tp, "current_price": current_price, "side": position.side.value},
        description=f"Take profit hit at {tp:.4f} (current: {current_price:.4f})",
    )


def calculate_take_profit(
    entry_price: float,
    side: Side,
    take_profit_pct: Optional[float] = None,
    default_pct: float = 5.0,
) -> float:
    pct = default_pct if take_profit_pct is None else take_profit_pct
    if Side.from_value(side) == Side.LONG:
        return entry_price * (1 + pct / 100)
    return entry_price * (1 - pct / 100)
