"""Combined ranking of qualified signals.

rank = base - penalty + reward, where base is a weighted sum of indicator
quality, model confidence, futures score and expected confidence. Penalties
and rewards come from market conflict/coherence checks and from how well
the model's confidence agrees with the indicator-only estimates.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from core.config import Settings, settings
from core.helpers import finite_float
from core.logging_utils import get_logger
from core.models import FuturesSignalScores, MarketSnapshot, Signal
from logic.conflict_penalties import ConflictPenaltyResult, compute_conflict_penalties
from logic.reward_bonuses import RewardBonusResult, compute_reward_bonuses

logger = get_logger(__name__)


@dataclass
class RankingScore:
    """Ranking breakdown for one signal; recomputed every cycle."""
    base: float
    penalty: float
    reward: float
    rank: float
    gap: float = 0.0
    ec_gap: float = 0.0
    major_mismatches: int = 0
    penalty_reasons: List[str] = field(default_factory=list)
    reward_reasons: List[str] = field(default_factory=list)
    info: str = ""


def futures_total(signal: Signal) -> float:
    scores = signal.metadata.get("futures_scores")
    if isinstance(scores, FuturesSignalScores):
        return finite_float(scores.total_score)
    return 0.0


def compute_ranking_score(
    signal: Signal,
    quality_score: float = 0.0,
    expected: float = 0.0,
    market: Optional[MarketSnapshot] = None,
    cfg: Optional[Settings] = None,
    conflict: Optional[ConflictPenaltyResult] = None,
    bonuses: Optional[RewardBonusResult] = None,
) -> RankingScore:
    cfg = cfg or settings
    confidence = signal.confidence or 0.0
    conf_pct = confidence * 100
    quality = finite_float(quality_score)
    expected = finite_float(expected)
    futures = futures_total(signal)

    conflict = conflict if conflict is not None else compute_conflict_penalties(market, cfg)
    bonuses = bonuses if bonuses is not None else compute_reward_bonuses(market, cfg)
    penalty = conflict.penalty
    reward = bonuses.reward
    penalty_reasons = list(conflict.reasons)
    reward_reasons = list(bonuses.reasons)

    # Confidence floors: disqualify without dropping from the list
    if confidence < cfg.conf_floor:
        penalty += cfg.disqualify_penalty
        penalty_reasons.append(f"Confidence below floor ({conf_pct:.1f}%)")
    elif confidence < cfg.conf_demote:
        penalty += cfg.demote_penalty
        penalty_reasons.append(f"Confidence demoted ({conf_pct:.1f}%)")

    gap = abs(quality - conf_pct)
    ec_gap = abs(expected - conf_pct)
    if gap > cfg.gap_max:
        penalty += gap - cfg.gap_max
    else:
        reward += min(cfg.gap_bonus_max, max(0.0, cfg.gap_max - gap))
    if ec_gap > cfg.rank_ec_gap_max:
        penalty += ec_gap - cfg.rank_ec_gap_max
    else:
        reward += min(cfg.ec_bonus_max, max(0.0, cfg.rank_ec_gap_max - ec_gap))

    if conflict.major_mismatches >= cfg.rank_major_mismatch_autoban:
        penalty += cfg.disqualify_penalty
        penalty_reasons.append(f"Major mismatches ({conflict.major_mismatches})")

    reward = min(reward, cfg.reward_cap)

    base = (
        cfg.rank_w_indicators * quality
        + cfg.rank_w_confidence * conf_pct
        + cfg.rank_w_futures * futures
        + cfg.rank_w_expected * expected
    )
    base = finite_float(base)
    penalty = finite_float(penalty)
    reward = finite_float(reward)
    rank = base - penalty + reward
    info = (
        f"rank={rank:.2f} base={base:.2f} penalty={penalty:.2f} reward={reward:.2f} "
        f"(quality={quality:.1f}, conf={conf_pct:.1f}%, futures={futures:.1f}, "
        f"expected={expected:.1f}, gap={gap:.1f}, ecGap={ec_gap:.1f}, major={conflict.major_mismatches})"
    )
    logger.debug("[RANK] %s %s", signal.symbol, info)
    return RankingScore(
        base=base,
        penalty=penalty,
        reward=reward,
        rank=rank,
        gap=gap,
        ec_gap=ec_gap,
        major_mismatches=conflict.major_mismatches,
        penalty_reasons=penalty_reasons,
        reward_reasons=reward_reasons,
        info=info,
    )


def _rank_of(signal: Signal) -> float:
    score = signal.metadata.get("rank_score")
    return score.rank if isinstance(score, RankingScore) else float("-inf")


def rank_signals(signals: Iterable[Signal]) -> List[Signal]:
    """Sort by rank descending; ties go to the higher raw confidence."""
    return sorted(signals, key=lambda s: (_rank_of(s), s.confidence or 0.0), reverse=True)
