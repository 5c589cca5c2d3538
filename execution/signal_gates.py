"""Hard rejection gates for signal qualification.

Gates run in a fixed order and the first failure rejects the signal, so each
rejected signal carries exactly one reason. The contradiction score is kept
in two forms: ``original`` (as reported by the detector) and ``adjusted``
(after the high-confidence reward). The volume gate reads both.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from core.config import Settings, settings
from core.helpers import GateReason
from core.logging_utils import get_logger
from core.models import ContradictionReport, Signal

logger = get_logger(__name__)

NO_INDICATORS_SCORE = 4.0


@dataclass
class GateResult:
    """Result of gate check."""
    passed: bool
    reason: str = ""
    gate: GateReason = GateReason.PASSED
    details: dict = None
    notes: List[str] = field(default_factory=list)

    def __post_init__(self):
        if self.details is None:
            self.details = {}


def tier_confidence_floor(quality_score: float) -> float:
    """Higher-quality assets demand more confidence, not less."""
    if quality_score >= 100:
        return 0.9
    if quality_score >= 80:
        return 0.8
    return 0.75


def apply_confidence_reward(confidence: float, score: float, cfg: Optional[Settings] = None) -> float:
    """Adjusted contradiction score: high-confidence signals tolerate more contradiction."""
    cfg = cfg or settings
    if confidence > cfg.high_confidence_reward_threshold:
        return max(0.0, score - cfg.contradiction_reward)
    return score


def _fmt_score(value: float) -> str:
    return f"{value:g}"


class QualificationGateChecker:
    """Validates a contradiction-annotated signal against gates a-g."""

    def __init__(self, cfg: Optional[Settings] = None):
        self.cfg = cfg or settings

    def confidence_floor(self, quality_score: float) -> float:
        floor = max(self.cfg.base_confidence_floor, tier_confidence_floor(quality_score))
        if self.cfg.extra_conf_threshold > 0:
            floor = max(floor, self.cfg.extra_conf_threshold)
        return floor

    def check_all_gates(
        self,
        signal: Signal,
        report: ContradictionReport,
        original: float,
        adjusted: float,
        quality_score: float = 0.0,
        expected: Optional[float] = None,
        major_mismatches: int = 0,
    ) -> GateResult:
        """
        Run gates a-g on one signal.

        Returns:
            GateResult; ``passed`` is True only when every gate passed.
        """
        cfg = self.cfg
        confidence = signal.confidence or 0.0
        conf_pct = confidence * 100
        scores = {"original": original, "adjusted": adjusted, "confidence": confidence}

        # Gate a: Critical volume contradiction, no exceptions
        if report.has_critical_volume:
            return GateResult(
                False,
                "CRITICAL volume contradiction detected (volume spike/drop contradicting signal direction)",
                GateReason.CRITICAL_VOLUME,
                scores,
                [
                    f"Confidence: {conf_pct:.2f}%, Original Contradiction Score: {_fmt_score(original)}",
                    "Rule: critical volume contradictions are rejected regardless of confidence",
                ],
            )

        # Gate b: Volume contradiction compounding other contradictions
        if report.has_volume_contradiction:
            if original >= 3 and adjusted >= 2:
                return GateResult(
                    False,
                    f"Volume contradiction with high contradiction score "
                    f"({_fmt_score(original)} → {_fmt_score(adjusted)} after reward)",
                    GateReason.VOLUME_CONTRADICTION,
                    scores,
                    ["Rule: volume contradictions with score >= 3 (adjusted >= 2) are rejected"],
                )
            if original >= 2 and adjusted >= 1:
                return GateResult(
                    False,
                    f"Volume contradiction combined with other contradictions "
                    f"({_fmt_score(original)} → {_fmt_score(adjusted)} after reward)",
                    GateReason.VOLUME_CONTRADICTION,
                    scores,
                    ["Rule: volume contradictions with score >= 2 (adjusted >= 1) are rejected"],
                )

        # Gate c: Confidence floor and contradiction score range
        floor = self.confidence_floor(quality_score)
        meets_conf = confidence >= floor
        valid_score = 0 <= adjusted < cfg.max_contradiction_score
        if not meets_conf or not valid_score:
            score_info = _fmt_score(adjusted)
            if original != adjusted:
                score_info = f"{_fmt_score(original)} (adjusted: {_fmt_score(adjusted)})"
            if adjusted == NO_INDICATORS_SCORE:
                reason, gate = f"No indicators available (score: {score_info})", GateReason.NO_INDICATORS
            elif not meets_conf:
                reason, gate = f"Confidence too low ({conf_pct:.2f}% < {floor * 100:.0f}%)", GateReason.CONFIDENCE
            else:
                reason, gate = (
                    f"Contradiction score out of range ({score_info}, must be 0-3 after adjustment)",
                    GateReason.CONTRADICTION_SCORE,
                )
            return GateResult(
                False, reason, gate,
                {**scores, "floor": floor, "quality": quality_score},
                [f"Requirements: Confidence >= {floor * 100:.0f}%, Contradiction Score 0-3"],
            )

        # Gate d: High conflict needs a stricter floor
        if report.is_high_conflict and confidence < cfg.conflict_high_min_conf:
            flags = ""
            if report.indicator_pair_conflict:
                flags += " + Aroon vs EMA"
            if report.dual_overbought:
                flags += " + Dual Overbought"
            return GateResult(
                False,
                f"High conflict requires ≥ {cfg.conflict_high_min_conf * 100:.0f}% confidence (got {conf_pct:.2f}%)",
                GateReason.HIGH_CONFLICT,
                {**scores, "severity": report.severity},
                [f"Reason: High conflict ({report.severity}){flags}"],
            )

        # Gate e: Residual volume contradiction needs an even higher floor
        if report.has_volume_contradiction and confidence < cfg.min_conf_vol_spike:
            return GateResult(
                False,
                f"Volume contradiction requires ≥ {cfg.min_conf_vol_spike * 100:.0f}% confidence (got {conf_pct:.2f}%)",
                GateReason.VOLUME_CONFIDENCE,
                scores,
                ["Reason: Significant volume contradiction present"],
            )

        # Gate f: Expected-confidence consistency
        if expected is not None:
            gap = abs(expected - conf_pct)
            if gap > cfg.gate_ec_gap_max:
                return GateResult(
                    False,
                    f"EC Gap {gap:.1f} > {cfg.gate_ec_gap_max:g}: Expected {expected:.0f} vs Model {conf_pct:.0f}",
                    GateReason.EC_GAP,
                    {**scores, "expected": expected, "gap": gap},
                    ["Reason: Model confidence inconsistent with pre-AI expected confidence"],
                )

        # Gate g: Autoban on influence-graph mismatches
        if major_mismatches >= cfg.gate_major_mismatch_autoban:
            return GateResult(
                False,
                f"Major Mismatches: {major_mismatches} ≥ {cfg.gate_major_mismatch_autoban}",
                GateReason.AUTOBAN,
                {**scores, "major_mismatches": major_mismatches},
                ["Reason: Influence graph detected excessive incoherence"],
            )

        # All gates passed
        return GateResult(True, gate=GateReason.PASSED, details=scores)
