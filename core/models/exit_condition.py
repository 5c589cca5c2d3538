"""Exit condition results and the action derived from them."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class ExitReason(Enum):
    EMERGENCY = "EMERGENCY"
    STOP_LOSS = "STOP_LOSS"
    TAKE_PROFIT = "TAKE_PROFIT"
    TRAILING_STOP = "TRAILING_STOP"
    SIGNAL_REVERSAL = "SIGNAL_REVERSAL"
    RANKING_DROP = "RANKING_DROP"
    INDICATOR_BASED = "INDICATOR_BASED"
    MANUAL_CLOSE = "MANUAL_CLOSE"


# Lower = more urgent. Take profit and indicator exits share a slot.
EXIT_PRIORITY = {
    ExitReason.EMERGENCY: 1,
    ExitReason.STOP_LOSS: 2,
    ExitReason.TAKE_PROFIT: 3,
    ExitReason.INDICATOR_BASED: 3,
    ExitReason.TRAILING_STOP: 4,
    ExitReason.SIGNAL_REVERSAL: 5,
    ExitReason.RANKING_DROP: 6,
    ExitReason.MANUAL_CLOSE: 6,
}


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ExitConditionResult:
    """Output of a single exit checker."""
    reason: ExitReason
    priority: int
    should_exit: bool = True
    exit_size: float = 100.0  # % of the original position
    exit_price: Optional[float] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    description: str = ""
    timestamp: datetime = field(default_factory=_utc_now)

    @classmethod
    def for_reason(cls, reason: ExitReason, **kwargs) -> "ExitConditionResult":
        return cls(reason=reason, priority=EXIT_PRIORITY[reason], **kwargs)


@dataclass
class ExitAction:
    """What the caller should execute for the winning result."""
    should_exit: bool
    exit_size: float
    exit_price: Optional[float]
    reason: ExitReason
    description: str = ""
