"""Standardized gate reasons for consistency across logging and results."""

from enum import Enum


class GateReason(str, Enum):
    NOT_ACTIONABLE = "not_actionable"
    DETECTOR_ERROR = "detector_error"
    CRITICAL_VOLUME = "critical_volume"
    VOLUME_CONTRADICTION = "volume_contradiction"
    CONFIDENCE = "confidence"
    CONTRADICTION_SCORE = "contradiction_score"
    NO_INDICATORS = "no_indicators"
    HIGH_CONFLICT = "high_conflict"
    VOLUME_CONFIDENCE = "volume_confidence"
    EC_GAP = "ec_gap"
    AUTOBAN = "autoban"
    PASSED = "passed"
