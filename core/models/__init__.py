"""Typed data models for the exit engine and signal qualification."""

from core.models.candle import Candle
from core.models.exit_condition import EXIT_PRIORITY, ExitAction, ExitConditionResult, ExitReason
from core.models.futures import (
    BTCCorrelationData,
    FundingRateData,
    FuturesMarketData,
    FuturesSignalScores,
    LiquidationCluster,
    LiquidationData,
    LongShortRatioData,
    OpenInterestData,
    PremiumIndexData,
    WhaleActivity,
)
from core.models.market import IndicatorSnapshot, MACDValues, MarketSnapshot, VolumeConfirmation
from core.models.position import Position, Side, TakeProfitTarget
from core.models.signal import ContradictionReport, Signal, SignalType, SignalWarning

__all__ = [
    "BTCCorrelationData",
    "Candle",
    "ContradictionReport",
    "EXIT_PRIORITY",
    "ExitAction",
    "ExitConditionResult",
    "ExitReason",
    "FundingRateData",
    "FuturesMarketData",
    "FuturesSignalScores",
    "IndicatorSnapshot",
    "LiquidationCluster",
    "LiquidationData",
    "LongShortRatioData",
    "MACDValues",
    "MarketSnapshot",
    "OpenInterestData",
    "Position",
    "PremiumIndexData",
    "Side",
    "Signal",
    "SignalType",
    "SignalWarning",
    "TakeProfitTarget",
    "VolumeConfirmation",
    "WhaleActivity",
]
