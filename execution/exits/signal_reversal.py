"""Signal reversal exit: a confident opposing signal closes the position."""

from typing import Optional

from core.exit_configs import SignalReversalConfig
from core.logging_utils import get_logger
from core.models import ExitConditionResult, ExitReason, Position, Side, Signal, SignalType

logger = get_logger(__name__)

# Above this raw confidence (percent) the threshold is capped at 50
ADAPTIVE_CONFIDENCE_PCT = 40.0
ADAPTIVE_THRESHOLD_CAP = 50.0

_OPPOSING = {
    Side.LONG: SignalType.SELL_TO_ENTER,
    Side.SHORT: SignalType.BUY_TO_ENTER,
}


def effective_threshold(confidence_pct: float, threshold: float) -> float:
    if confidence_pct > ADAPTIVE_CONFIDENCE_PCT:
        return min(threshold, ADAPTIVE_THRESHOLD_CAP)
    return threshold


def check_signal_reversal(
    position: Position,
    new_signal: Optional[Signal],
    config: SignalReversalConfig,
) -> Optional[ExitConditionResult]:
    if not config.enabled or new_signal is None:
        return None
    if new_signal.type != _OPPOSING[position.side]:
        return None

    confidence = new_signal.confidence_pct
    threshold = effective_threshold(confidence, config.confidence_threshold)
    if confidence < threshold:
        logger.info(
            "[REVERSAL] %s: reversal potential, %s position + %s signal but confidence %.1f%% < %.1f%%",
            position.symbol, position.side.value, new_signal.type.value, confidence, threshold,
        )
        return None

    logger.info(
        "[REVERSAL] %s: %s position but %s signal (confidence %.1f%% >= %.1f%%)",
        position.symbol, position.side.value, new_signal.type.value, confidence, threshold,
    )
    return ExitConditionResult.for_reason(
        ExitReason.SIGNAL_REVERSAL,
        exit_size=100.0,
        metadata={
            "new_signal_type": new_signal.type.value,
            "new_signal_confidence": confidence,
            "old_position_side": position.side.value,
            "threshold": config.confidence_threshold,
            "effective_threshold": threshold,
        },
        description=(
            f"Signal reversal detected: Position {position.side.value} but new signal "
            f"{new_signal.type.value} with confidence {confidence:.1f}% "
            f"(threshold: {config.confidence_threshold}%)"
        ),
    )
