"""Signal qualification pipeline.

Per signal: consume the contradiction report, apply the high-confidence
reward, run the hard rejection gates, then score survivors (futures
evidence, conflict penalties, reward bonuses) and sort them by rank.
Display warnings are returned with the result, never kept globally.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Protocol

from core.config import Settings, settings
from core.helpers import GateReason
from core.logging_utils import get_logger
from core.models import ContradictionReport, MarketSnapshot, Signal, SignalWarning
from execution.signal_batch import compute_ranking_score, rank_signals
from execution.signal_gates import (
    NO_INDICATORS_SCORE,
    GateResult,
    QualificationGateChecker,
    apply_confidence_reward,
)
from logic.futures import score_signal_futures
from logic.scoring import ExpectedConfidence, QualityScore

logger = get_logger(__name__)


class IContradictionDetector(Protocol):
    """Finds indicators that disagree with a signal's direction."""

    def detect(self, signal: Signal, market: Optional[MarketSnapshot]) -> ContradictionReport:
        ...


class IQualityRanker(Protocol):
    """Indicator-quality score and weaknesses for one asset."""

    def score(self, asset: str, market: Optional[MarketSnapshot]) -> QualityScore:
        ...


class IExpectedConfidenceEstimator(Protocol):
    """Pre-AI expected confidence and major-mismatch count for one asset."""

    def estimate(self, asset: str, market: Optional[MarketSnapshot]) -> ExpectedConfidence:
        ...


@dataclass
class QualificationResult:
    accepted: List[Signal] = field(default_factory=list)
    rejected: List[Signal] = field(default_factory=list)
    warnings: List[SignalWarning] = field(default_factory=list)


class SignalQualificationPipeline:
    """Filters and orders one batch of candidate signals."""

    def __init__(
        self,
        detector: IContradictionDetector,
        cfg: Optional[Settings] = None,
        quality_ranker: Optional[IQualityRanker] = None,
        expected_estimator: Optional[IExpectedConfidenceEstimator] = None,
    ):
        self.detector = detector
        self.cfg = cfg or settings
        self.quality_ranker = quality_ranker
        self.expected_estimator = expected_estimator
        self.gates = QualificationGateChecker(self.cfg)

    def _detect(self, signal: Signal, market: Optional[MarketSnapshot]) -> Optional[ContradictionReport]:
        try:
            return self.detector.detect(signal, market)
        except Exception as e:
            logger.warning("[QUALIFY] %s contradiction detector failed: %s", signal.symbol, e)
            return None

    def _collect_quality(
        self,
        assets: Iterable[str],
        market_data: Mapping[str, MarketSnapshot],
        quality_scores: Optional[Mapping[str, QualityScore]],
    ) -> Mapping[str, QualityScore]:
        if quality_scores is not None or self.quality_ranker is None:
            return quality_scores or {}
        collected: Dict[str, QualityScore] = {}
        for asset in assets:
            try:
                collected[asset] = self.quality_ranker.score(asset, market_data.get(asset))
            except Exception as e:
                logger.warning("[QUALIFY] %s quality ranker failed: %s", asset, e)
        return collected

    def _collect_expected(
        self,
        assets: Iterable[str],
        market_data: Mapping[str, MarketSnapshot],
        expected: Optional[Mapping[str, ExpectedConfidence]],
    ) -> Mapping[str, ExpectedConfidence]:
        if expected is not None or self.expected_estimator is None:
            return expected or {}
        collected: Dict[str, ExpectedConfidence] = {}
        for asset in assets:
            try:
                collected[asset] = self.expected_estimator.estimate(asset, market_data.get(asset))
            except Exception as e:
                # Unknown expected confidence skips the EC gap gate
                logger.warning("[QUALIFY] %s expected-confidence estimator failed: %s", asset, e)
        return collected

    def _reject(
        self,
        result: QualificationResult,
        signal: Signal,
        gate: GateResult,
        warn: bool = True,
    ):
        signal.reject_reason = gate.reason
        signal.metadata["rejected_gate"] = gate.gate.value
        result.rejected.append(signal)
        if warn:
            result.warnings.append(SignalWarning(
                asset=signal.symbol,
                message=f"REJECTED: {signal.type.value} signal: {gate.reason}",
                details=list(gate.notes),
            ))
            logger.info(
                "[GATE] %s %s rejected (%s): %s",
                signal.symbol, signal.type.value.upper(), gate.gate.value, gate.reason,
            )

    def qualify(
        self,
        signal: Signal,
        market: Optional[MarketSnapshot],
        quality: Optional[QualityScore],
        expected: Optional[ExpectedConfidence],
    ) -> GateResult:
        """Annotate one signal with contradiction data and run the gates."""
        report = self._detect(signal, market)
        if report is None:
            signal.metadata["contradiction_score"] = NO_INDICATORS_SCORE
            return GateResult(
                False,
                f"No indicators available (score: {NO_INDICATORS_SCORE:g}, contradiction detector failed)",
                GateReason.DETECTOR_ERROR,
                notes=["Contradiction detector raised; signal treated as having no indicator data"],
            )

        confidence = signal.confidence or 0.0
        original = report.score
        adjusted = apply_confidence_reward(confidence, original, self.cfg)
        if adjusted != original:
            logger.debug(
                "[QUALIFY] %s reward applied (confidence %.2f%%): %s -> %s",
                signal.symbol, confidence * 100, original, adjusted,
            )

        signal.metadata.update({
            "contradiction_score": original,
            "original_contradiction_score": original,
            "adjusted_contradiction_score": adjusted,
            "contradictions": list(report.contradictions),
            "contradiction_severity": report.severity,
            "aroon_vs_ema_contradiction": report.indicator_pair_conflict,
            "dual_overbought": report.dual_overbought,
        })

        return self.gates.check_all_gates(
            signal,
            report,
            original=original,
            adjusted=adjusted,
            quality_score=quality.score if quality is not None else 0.0,
            expected=expected.expected if expected is not None else None,
            major_mismatches=expected.major_mismatches if expected is not None else 0,
        )

    def run(
        self,
        signals: Iterable[Signal],
        market_data: Optional[Mapping[str, MarketSnapshot]] = None,
        quality_scores: Optional[Mapping[str, QualityScore]] = None,
        expected: Optional[Mapping[str, ExpectedConfidence]] = None,
    ) -> QualificationResult:
        signals = list(signals)
        market_data = market_data or {}
        assets = sorted({s.symbol for s in signals})
        quality_scores = self._collect_quality(assets, market_data, quality_scores)
        expected = self._collect_expected(assets, market_data, expected)

        result = QualificationResult()
        survivors: List[Signal] = []
        for signal in signals:
            if not signal.is_actionable:
                self._reject(
                    result, signal,
                    GateResult(False, f"Non-actionable signal ({signal.type.value})", GateReason.NOT_ACTIONABLE),
                    warn=False,
                )
                continue

            market = market_data.get(signal.symbol)
            quality = quality_scores.get(signal.symbol)
            ec = expected.get(signal.symbol)
            gate = self.qualify(signal, market, quality, ec)
            if not gate.passed:
                self._reject(result, signal, gate)
                continue
            survivors.append(signal)

        for signal in survivors:
            market = market_data.get(signal.symbol)
            if market is not None:
                score_signal_futures(signal, market.futures, market.price_change_24h, market.volume_change_24h)
            quality = quality_scores.get(signal.symbol)
            ec = expected.get(signal.symbol)
            score = compute_ranking_score(
                signal,
                quality_score=quality.score if quality is not None else 0.0,
                expected=ec.expected if ec is not None else 0.0,
                market=market,
                cfg=self.cfg,
            )
            signal.metadata["rank_score"] = score
            signal.metadata["rank_info"] = score.info

        result.accepted = rank_signals(survivors)
        logger.info(
            "[QUALIFY] %d/%d signals qualified (%d rejected)",
            len(result.accepted), len(signals), len(result.rejected),
        )
        for i, signal in enumerate(result.accepted, 1):
            logger.info("[RANK] #%d %s %s", i, signal.symbol, signal.metadata["rank_info"])
        return result
