"""
Exit condition checkers.

Each checker is a function ``(position, context, config) -> ExitConditionResult | None``.
None means nothing to report this cycle. Trailing stop and ranking drop
persist small bits of state on the position they are given.
"""

from .stop_loss import calculate_stop_loss, check_stop_loss
from .take_profit import TakeProfitLevel, calculate_take_profit, calculate_take_profit_levels, check_take_profit
from .trailing_stop import check_trailing_stop, update_trailing_stop
from .signal_reversal import check_signal_reversal
from .indicator_based import atr_expansion_ratio, check_indicator_exit
from .ranking_drop import check_ranking_drop

__all__ = [
    "TakeProfitLevel",
    "atr_expansion_ratio",
    "calculate_stop_loss",
    "calculate_take_profit",
    "calculate_take_profit_levels",
    "check_indicator_exit",
    "check_ranking_drop",
    "check_signal_reversal",
    "check_stop_loss",
    "check_take_profit",
    "check_trailing_stop",
    "update_trailing_stop",
]
