"""Ranking drop exit with a confirmation window.

The asset must sit outside the top N (plus buffer) for
``confirmation_cycles`` consecutive observations. Any observation back
inside the threshold resets the history to that single observation.
"""

from typing import Optional

from core.exit_configs import RankingDropConfig
from core.logging_utils import get_logger
from core.models import ExitConditionResult, ExitReason, Position

logger = get_logger(__name__)


def record_ranking(position: Position, current_rank: int, config: RankingDropConfig) -> None:
    position.ranking_history.append(current_rank)
    max_len = config.confirmation_cycles + 1
    if len(position.ranking_history) > max_len:
        del position.ranking_history[:-max_len]


def check_ranking_drop(
    position: Position,
    current_rank: Optional[int],
    config: RankingDropConfig,
) -> Optional[ExitConditionResult]:
    if not config.enabled or current_rank is None:
        return None

    threshold = config.threshold
    if current_rank <= threshold:
        position.ranking_history = [current_rank]
        return None

    record_ranking(position, current_rank, config)
    history = position.ranking_history
    logger.debug("[RANK] %s rank %s outside %s, history=%s", position.symbol, current_rank, threshold, history)

    if len(history) < config.confirmation_cycles:
        return None
    window = history[-config.confirmation_cycles:]
    if not all(rank > threshold for rank in window):
        return None

    logger.info(
        "[RANK] %s out of top %s for %s cycles (rank %s, threshold %s)",
        position.symbol, config.top_n, config.confirmation_cycles, current_rank, threshold,
    )
    return ExitConditionResult.for_reason(
        ExitReason.RANKING_DROP,
        exit_size=100.0,
        metadata={
            "current_ranking": current_rank,
            "threshold": threshold,
            "top_n": config.top_n,
            "confirmation_cycles": config.confirmation_cycles,
            "ranking_history": list(window),
            "use_buffer": config.use_buffer,
        },
        description=(
            f"Asset dropped out of top {config.top_n} for {config.confirmation_cycles} cycles "
            f"(current rank: {current_rank}, threshold: {threshold})"
        ),
    )
