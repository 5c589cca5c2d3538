"""Position and side enums."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Sequence, Union

from core.models.exit_condition import ExitConditionResult, ExitReason


class Side(Enum):
    LONG = "LONG"
    SHORT = "SHORT"

    @classmethod
    def from_value(cls, value: Union[str, "Side"]) -> "Side":
        if isinstance(value, Side):
            return value
        normalized = str(value).strip().upper()
        if normalized in ("BUY", "LONG"):
            return Side.LONG
        if normalized in ("SELL", "SHORT"):
            return Side.SHORT
        raise ValueError(f"Unknown side: {value!r}")

    @property
    def opposite(self) -> "Side":
        return Side.SHORT if self is Side.LONG else Side.LONG


@dataclass(frozen=True)
class TakeProfitTarget:
    """One rung of a take-profit ladder carried on a position."""
    level: float  # % distance from entry
    size: float   # % of position closed at this rung


@dataclass
class Position:
    """Open position plus the state the exit checkers carry between cycles."""
    symbol: str
    side: Side
    entry_price: float
    current_price: float
    quantity: float = 0.0
    leverage: float = 1.0
    unrealized_pnl: float = 0.0
    stop_loss: Optional[float] = None
    take_profit: Optional[Union[float, Sequence[TakeProfitTarget]]] = None
    entry_time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # Trailing stop
    highest_price: Optional[float] = None
    lowest_price: Optional[float] = None
    trailing_stop: Optional[float] = None
    trailing_stop_active: bool = False

    # Ranking drop history, most recent last
    ranking_history: List[int] = field(default_factory=list)

    # Applied exits, oldest first
    exit_conditions: List[ExitConditionResult] = field(default_factory=list)
    initial_quantity: float = 0.0

    def __post_init__(self):
        self.side = Side.from_value(self.side)
        if self.initial_quantity <= 0:
            self.initial_quantity = self.quantity

    @property
    def take_profit_targets(self) -> List[TakeProfitTarget]:
        """Ladder carried on the position itself, empty for a single TP price."""
        if self.take_profit is None or isinstance(self.take_profit, (int, float)):
            return []
        return list(self.take_profit)

    @property
    def take_profit_price(self) -> Optional[float]:
        if isinstance(self.take_profit, (int, float)) and not isinstance(self.take_profit, bool):
            return float(self.take_profit)
        return None

    @property
    def closed_pct(self) -> float:
        """Cumulative % of the original position already closed."""
        return min(100.0, sum(ec.exit_size for ec in self.exit_conditions if ec.should_exit))

    @property
    def take_profit_closed_pct(self) -> float:
        return sum(
            ec.exit_size for ec in self.exit_conditions
            if ec.reason == ExitReason.TAKE_PROFIT
        )

    @property
    def is_closed(self) -> bool:
        return self.closed_pct >= 100.0

    def gain_pct(self, current_price: Optional[float] = None) -> float:
        """Side-aware unrealized gain as a % of entry."""
        price = self.current_price if current_price is None else current_price
        if not self.entry_price:
            return 0.0
        if self.side == Side.LONG:
            return (price - self.entry_price) / self.entry_price * 100
        return (self.entry_price - price) / self.entry_price * 100

    def unrealized_pnl_at(self, current_price: float) -> float:
        if self.side == Side.LONG:
            return (current_price - self.entry_price) * self.quantity
        return (self.entry_price - current_price) * self.quantity

    def mark(self, current_price: float) -> None:
        """Update the mark price and derived PnL."""
        self.current_price = current_price
        self.unrealized_pnl = self.unrealized_pnl_at(current_price)

    def apply_exit(self, result: ExitConditionResult) -> bool:
        """Record an applied exit and shrink the position.

        Returns True once the cumulative closed size reaches 100%.
        """
        if not result.should_exit:
            return self.is_closed
        remaining_pct = 100.0 - self.closed_pct
        size = max(0.0, min(result.exit_size, remaining_pct))
        if size != result.exit_size:
            result.exit_size = size
        self.exit_conditions.append(result)
        self.quantity = self.initial_quantity * (100.0 - self.closed_pct) / 100.0
        self.unrealized_pnl = self.unrealized_pnl_at(self.current_price)
        return self.is_closed
