"""Per-checker exit configuration structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from core.config import Settings


@dataclass
class StopLossConfig:
    enabled: bool = True
    default_stop_loss_pct: float = 2.0


@dataclass
class TakeProfitConfig:
    enabled: bool = True
    default_take_profit_pct: float = 5.0
    levels: List[float] = field(default_factory=list)  # % from entry, ascending
    sizes: List[float] = field(default_factory=list)   # % of position closed at each level
    auto_move_stop_loss_to_breakeven: bool = True


@dataclass
class TrailingStopConfig:
    enabled: bool = True
    distance_pct: float = 1.0
    activate_after_gain_pct: Optional[float] = None  # None -> 1%

    @property
    def activation_pct(self) -> float:
        return 1.0 if self.activate_after_gain_pct is None else self.activate_after_gain_pct


@dataclass
class SignalReversalConfig:
    enabled: bool = True
    confidence_threshold: float = 50.0  # percent


@dataclass
class IndicatorExitConfig:
    enabled: bool = True
    rsi_threshold: float = 70.0
    macd_crossover: bool = True
    ema_break: bool = True
    support_resistance_break: bool = True
    atr_expansion: bool = True
    atr_expansion_threshold: float = 2.5
    require_confirmation: bool = False  # strict mode: 2+ votes


@dataclass
class RankingDropConfig:
    enabled: bool = True
    top_n: int = 10
    confirmation_cycles: int = 2
    use_buffer: bool = True
    buffer_size: int = 2

    @property
    def threshold(self) -> int:
        return self.top_n + self.buffer_size if self.use_buffer else self.top_n


@dataclass
class ExitEngineConfig:
    """All exit checker configs plus the master switch."""

    enabled: bool = True
    stop_loss: StopLossConfig = field(default_factory=StopLossConfig)
    take_profit: TakeProfitConfig = field(default_factory=TakeProfitConfig)
    trailing_stop: TrailingStopConfig = field(default_factory=TrailingStopConfig)
    signal_reversal: SignalReversalConfig = field(default_factory=SignalReversalConfig)
    indicator_based: IndicatorExitConfig = field(default_factory=IndicatorExitConfig)
    ranking_drop: RankingDropConfig = field(default_factory=RankingDropConfig)

    @classmethod
    def from_settings(cls, s: "Settings") -> "ExitEngineConfig":
        return cls(
            enabled=s.exit_engine_enabled,
            stop_loss=StopLossConfig(
                enabled=s.stop_loss_enabled,
                default_stop_loss_pct=s.default_stop_loss_pct,
            ),
            take_profit=TakeProfitConfig(
                enabled=s.take_profit_enabled,
                default_take_profit_pct=s.default_take_profit_pct,
                levels=s.take_profit_level_list,
                sizes=s.take_profit_size_list,
                auto_move_stop_loss_to_breakeven=s.auto_move_sl_to_breakeven,
            ),
            trailing_stop=TrailingStopConfig(
                enabled=s.trailing_stop_enabled,
                distance_pct=s.trailing_distance_pct,
                activate_after_gain_pct=s.trailing_activate_after_gain_pct,
            ),
            signal_reversal=SignalReversalConfig(
                enabled=s.signal_reversal_enabled,
                confidence_threshold=s.reversal_confidence_threshold,
            ),
            indicator_based=IndicatorExitConfig(
                enabled=s.indicator_exit_enabled,
                rsi_threshold=s.exit_rsi_threshold,
                atr_expansion_threshold=s.exit_atr_expansion_threshold,
                require_confirmation=s.exit_require_confirmation,
            ),
            ranking_drop=RankingDropConfig(
                enabled=s.ranking_drop_enabled,
                top_n=s.ranking_top_n,
                confirmation_cycles=s.ranking_confirmation_cycles,
                use_buffer=s.ranking_use_buffer,
                buffer_size=s.ranking_buffer_size,
            ),
        )
