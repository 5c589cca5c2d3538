"""Exit management for open positions.

Runs every exit checker for a position and picks one winning result per
cycle by priority. Checkers run in a fixed order (stop loss, take profit,
indicator, trailing stop, signal reversal, ranking drop) and the sort is
stable, so take profit wins a priority tie with the indicator exit.
"""

import asyncio
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional

from core.config import Settings, settings
from core.exit_configs import ExitEngineConfig
from core.logging_utils import get_logger
from core.models import ExitAction, ExitConditionResult, MarketSnapshot, Position, Signal
from execution.exits import (
    check_indicator_exit,
    check_ranking_drop,
    check_signal_reversal,
    check_stop_loss,
    check_take_profit,
    check_trailing_stop,
)

logger = get_logger(__name__)


@dataclass
class ExitContext:
    """Per-cycle inputs for one position."""
    current_price: Optional[float] = None
    new_signal: Optional[Signal] = None
    current_rank: Optional[int] = None
    market: Optional[MarketSnapshot] = None


class ExitConditionEngine:
    """Evaluates all exit conditions for positions."""

    def __init__(self, config: Optional[ExitEngineConfig] = None, app_settings: Optional[Settings] = None):
        self.config = config or ExitEngineConfig.from_settings(app_settings or settings)

    def check_all(self, position: Position, context: Optional[ExitContext] = None) -> List[ExitConditionResult]:
        """Every result that fired this cycle, most urgent first."""
        if not self.config.enabled:
            return []
        ctx = context or ExitContext()
        price = ctx.current_price if ctx.current_price is not None else position.current_price
        cfg = self.config

        candidates = [
            check_stop_loss(position, price, cfg.stop_loss),
            check_take_profit(position, price, cfg.take_profit),
            check_indicator_exit(position, ctx.market, cfg.indicator_based),
            check_trailing_stop(position, price, cfg.trailing_stop),
            check_signal_reversal(position, ctx.new_signal, cfg.signal_reversal),
            check_ranking_drop(position, ctx.current_rank, cfg.ranking_drop),
        ]
        fired = [result for result in candidates if result is not None]
        fired.sort(key=lambda r: r.priority)
        return fired

    @staticmethod
    def highest_priority(results: List[ExitConditionResult]) -> Optional[ExitConditionResult]:
        return results[0] if results else None

    def evaluate(self, position: Position, context: Optional[ExitContext] = None) -> Optional[ExitConditionResult]:
        """The single result to act on this cycle, or None."""
        fired = self.check_all(position, context)
        winner = self.highest_priority(fired)
        if winner is not None:
            logger.info(
                "[EXIT] %s: %s (priority %s, size %.1f%%) - %s",
                position.symbol, winner.reason.value, winner.priority, winner.exit_size, winner.description,
            )
            if len(fired) > 1:
                logger.debug(
                    "[EXIT] %s: also fired %s",
                    position.symbol, ", ".join(r.reason.value for r in fired[1:]),
                )
        return winner

    def evaluate_positions(
        self,
        positions: Iterable[Position],
        contexts: Optional[Mapping[str, ExitContext]] = None,
    ) -> Dict[str, ExitConditionResult]:
        """Evaluate a batch; returns winners keyed by symbol."""
        contexts = contexts or {}
        decisions: Dict[str, ExitConditionResult] = {}
        for position in positions:
            winner = self.evaluate(position, contexts.get(position.symbol))
            if winner is not None:
                decisions[position.symbol] = winner
        return decisions

    async def evaluate_positions_async(
        self,
        positions: Iterable[Position],
        contexts: Optional[Mapping[str, ExitContext]] = None,
    ) -> Dict[str, ExitConditionResult]:
        """Concurrent batch evaluation, one worker per position.

        A position object may appear only once per batch since checkers
        mutate it.
        """
        positions = list(positions)
        seen = set()
        for position in positions:
            if id(position) in seen:
                raise ValueError(f"Position {position.symbol} appears twice in one batch")
            seen.add(id(position))

        contexts = contexts or {}
        results = await asyncio.gather(*(
            asyncio.to_thread(self.evaluate, position, contexts.get(position.symbol))
            for position in positions
        ))
        return {
            position.symbol: winner
            for position, winner in zip(positions, results)
            if winner is not None
        }


def determine_exit_action(result: ExitConditionResult, position: Position) -> ExitAction:
    """Turn a winning result into an executable action."""
    if not result.should_exit:
        return ExitAction(
            should_exit=False,
            exit_size=0.0,
            exit_price=position.current_price,
            reason=result.reason,
            description=result.description,
        )
    exit_size = min(max(result.exit_size, 0.0), 100.0)
    exit_price = result.exit_price if result.exit_price is not None else position.current_price
    return ExitAction(
        should_exit=True,
        exit_size=exit_size,
        exit_price=exit_price,
        reason=result.reason,
        description=result.description,
    )


def apply_exit(position: Position, result: ExitConditionResult) -> bool:
    """Record the applied result on the position; True when fully closed."""
    closed = position.apply_exit(result)
    logger.info(
        "[EXIT] %s: applied %s %.1f%% (closed %.1f%% total)",
        position.symbol, result.reason.value, result.exit_size, position.closed_pct,
    )
    return closed
