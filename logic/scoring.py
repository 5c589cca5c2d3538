"""Asset scores from the external collaborators and the pre-AI asset ranking.

The indicator-quality ranker and the expected-confidence estimator produce
one value per asset. Pre-ranking blends both so the signal generator only
spends model calls on assets whose indicators already look coherent.
"""

from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from core.config import Settings, settings
from core.logging_utils import get_logger

logger = get_logger(__name__)


@dataclass
class QualityScore:
    """Indicator-quality score (0-100+) and per-asset weaknesses."""
    score: float = 0.0
    weaknesses: List[str] = field(default_factory=list)


@dataclass
class ExpectedConfidence:
    """Pre-AI confidence estimate (percent) and influence-graph mismatch count."""
    expected: float = 0.0
    major_mismatches: int = 0


@dataclass
class PreRankedAsset:
    asset: str
    pre_rank: float
    indicator: float
    expected: float
    weaknesses: int


def pre_rank_score(
    quality: QualityScore,
    expected: Optional[ExpectedConfidence],
    cfg: Optional[Settings] = None,
) -> float:
    cfg = cfg or settings
    ec = expected.expected if expected is not None else 0.0
    score = cfg.pre_w_indicators * quality.score + cfg.pre_w_expected * ec
    score -= cfg.weakness_penalty * len(quality.weaknesses)
    # Hard demote when the indicators alone don't justify confidence
    if ec < cfg.expected_conf_floor:
        score -= cfg.disqualify_penalty
    return score


def pre_rank_assets(
    quality_scores: Mapping[str, QualityScore],
    expected: Mapping[str, ExpectedConfidence],
    cfg: Optional[Settings] = None,
    top_n: Optional[int] = None,
) -> List[PreRankedAsset]:
    """Rank assets before signal generation, best first."""
    ranked = []
    for asset, quality in quality_scores.items():
        ec = expected.get(asset)
        ranked.append(PreRankedAsset(
            asset=asset,
            pre_rank=pre_rank_score(quality, ec, cfg),
            indicator=quality.score,
            expected=ec.expected if ec is not None else 0.0,
            weaknesses=len(quality.weaknesses),
        ))
    ranked.sort(key=lambda a: a.pre_rank, reverse=True)
    if top_n is not None:
        ranked = ranked[:top_n]
    logger.debug("[RANK] pre-ranked: %s", ", ".join(f"{a.asset}={a.pre_rank:.1f}" for a in ranked))
    return ranked
