"""Signal definitions and the annotations written onto them."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from core.models.position import Side


class SignalType(Enum):
    BUY_TO_ENTER = "buy_to_enter"
    SELL_TO_ENTER = "sell_to_enter"
    ADD = "add"
    REDUCE = "reduce"
    CLOSE_ALL = "close_all"
    HOLD = "hold"

    @classmethod
    def from_value(cls, value: Union[str, "SignalType"]) -> "SignalType":
        if isinstance(value, SignalType):
            return value
        return cls(str(value).strip().lower())


ACTIONABLE_TYPES = frozenset({
    SignalType.BUY_TO_ENTER,
    SignalType.SELL_TO_ENTER,
    SignalType.ADD,
    SignalType.REDUCE,
    SignalType.CLOSE_ALL,
})


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Signal:
    """Trading signal from the upstream generator."""
    symbol: str
    type: SignalType
    confidence: float  # 0-1; percent input is normalized on construction
    entry_price: Optional[float] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    reject_reason: Optional[str] = None
    timestamp: datetime = field(default_factory=_utc_now)

    def __post_init__(self):
        self.type = SignalType.from_value(self.type)
        if self.confidence is not None and self.confidence > 1.0:
            self.confidence = self.confidence / 100

    @property
    def is_actionable(self) -> bool:
        return self.type in ACTIONABLE_TYPES

    @property
    def direction(self) -> Optional[Side]:
        """Side an entry signal opens, None for management signals."""
        if self.type == SignalType.BUY_TO_ENTER:
            return Side.LONG
        if self.type == SignalType.SELL_TO_ENTER:
            return Side.SHORT
        return None

    @property
    def confidence_pct(self) -> float:
        return (self.confidence or 0.0) * 100


@dataclass
class ContradictionReport:
    """What the contradiction detector found for one signal."""
    score: float = 0.0
    contradictions: List[str] = field(default_factory=list)
    severity: str = "low"  # low | medium | high | critical
    indicator_pair_conflict: bool = False
    dual_overbought: bool = False

    @property
    def has_critical_volume(self) -> bool:
        return any(
            "CRITICAL:" in c and ("volume spike" in c or "volume drop" in c)
            for c in self.contradictions
        )

    @property
    def has_volume_contradiction(self) -> bool:
        return any(
            ("volume spike" in c or "volume drop" in c) and "CRITICAL:" not in c
            for c in self.contradictions
        )

    @property
    def is_high_conflict(self) -> bool:
        return (
            self.severity in ("high", "critical")
            or (self.indicator_pair_conflict and self.dual_overbought)
        )


@dataclass
class SignalWarning:
    """Display-only note about a filtered signal."""
    asset: str
    message: str
    details: List[str] = field(default_factory=list)
    timestamp: datetime = field(default_factory=_utc_now)
