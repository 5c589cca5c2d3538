"""Combined ranking score and pre-ranking tests."""

import pytest

from core.models import FuturesSignalScores
from execution.signal_batch import RankingScore, compute_ranking_score, rank_signals
from logic.conflict_penalties import ConflictPenaltyResult
from logic.reward_bonuses import RewardBonusResult
from logic.scoring import ExpectedConfidence, QualityScore, pre_rank_assets, pre_rank_score


def score(signal, cfg, quality=80.0, expected=80.0, conflict=None, bonuses=None):
    return compute_ranking_score(
        signal,
        quality_score=quality,
        expected=expected,
        cfg=cfg,
        conflict=conflict or ConflictPenaltyResult(),
        bonuses=bonuses or RewardBonusResult(),
    )


class TestRankingScore:

    def test_aligned_signal(self, cfg, make_signal):
        result = score(make_signal(confidence=0.8), cfg)
        assert result.base == pytest.approx(88.0)
        assert result.penalty == pytest.approx(0.0)
        assert result.reward == pytest.approx(20.0)
        assert result.rank == pytest.approx(108.0)
        assert result.info.startswith("rank=108.00 base=88.00")

    def test_demotion_below_soft_floor(self, cfg, make_signal):
        result = score(make_signal(confidence=0.65), cfg, quality=65.0, expected=65.0)
        assert result.penalty == pytest.approx(30.0)
        assert result.rank == pytest.approx(71.5 - 30.0 + 20.0)

    def test_disqualified_below_hard_floor(self, cfg, make_signal):
        result = score(make_signal(confidence=0.4), cfg, quality=40.0, expected=40.0)
        assert result.penalty >= 1e6

    def test_quality_gap_penalty(self, cfg, make_signal):
        result = score(make_signal(confidence=0.8), cfg, quality=30.0)
        assert result.gap == pytest.approx(50.0)
        assert result.penalty == pytest.approx(30.0)
        assert result.reward == pytest.approx(10.0)
        assert result.rank == pytest.approx(78.0 - 30.0 + 10.0)

    def test_major_mismatches_disqualify(self, cfg, make_signal):
        conflict = ConflictPenaltyResult(penalty=0.0, major_mismatches=2)
        result = score(make_signal(confidence=0.8), cfg, conflict=conflict)
        assert result.penalty >= 1e6
        assert result.major_mismatches == 2

    def test_reward_cap(self, cfg, make_signal):
        result = score(make_signal(confidence=0.8), cfg, bonuses=RewardBonusResult(reward=60.0))
        assert result.reward == pytest.approx(60.0)

    def test_futures_score_from_metadata(self, cfg, make_signal):
        signal = make_signal(confidence=0.8)
        signal.metadata["futures_scores"] = FuturesSignalScores(total_score=50.0)
        assert score(signal, cfg).base == pytest.approx(93.0)

    def test_base_monotonic_in_every_input(self, cfg, make_signal):
        def base(conf=0.8, quality=80.0, expected=80.0, futures=0.0):
            signal = make_signal(confidence=conf)
            signal.metadata["futures_scores"] = FuturesSignalScores(total_score=futures)
            return score(signal, cfg, quality=quality, expected=expected).base

        for key, values in {
            "conf": [0.5, 0.7, 0.9, 1.0],
            "quality": [0, 40, 80, 120],
            "expected": [0, 50, 100],
            "futures": [0, 25, 100],
        }.items():
            bases = [base(**{key: v}) for v in values]
            assert bases == sorted(bases), key

    def test_rank_monotonic_in_futures(self, cfg, make_signal):
        ranks = []
        for futures in [0.0, 10.0, 60.0, 100.0]:
            signal = make_signal(confidence=0.8)
            signal.metadata["futures_scores"] = FuturesSignalScores(total_score=futures)
            ranks.append(score(signal, cfg).rank)
        assert ranks == sorted(ranks)

    def test_uses_market_checks_without_overrides(self, cfg, make_signal):
        result = compute_ranking_score(make_signal(confidence=0.8), 80.0, 80.0, market=None, cfg=cfg)
        assert result.rank == pytest.approx(108.0)


class TestRankSignals:

    def test_sorted_by_rank_then_confidence(self, make_signal):
        low = make_signal(symbol="A", confidence=0.9)
        high = make_signal(symbol="B", confidence=0.8)
        tie = make_signal(symbol="C", confidence=0.95)
        low.metadata["rank_score"] = RankingScore(base=0, penalty=0, reward=0, rank=50.0)
        high.metadata["rank_score"] = RankingScore(base=0, penalty=0, reward=0, rank=90.0)
        tie.metadata["rank_score"] = RankingScore(base=0, penalty=0, reward=0, rank=50.0)
        assert [s.symbol for s in rank_signals([low, high, tie])] == ["B", "C", "A"]

    def test_unscored_signals_sink(self, make_signal):
        scored = make_signal(symbol="A")
        scored.metadata["rank_score"] = RankingScore(base=0, penalty=0, reward=0, rank=-5.0)
        assert [s.symbol for s in rank_signals([make_signal(symbol="B"), scored])] == ["A", "B"]


class TestPreRanking:

    def test_formula(self, cfg):
        quality = QualityScore(score=80.0, weaknesses=["low volume"])
        assert pre_rank_score(quality, ExpectedConfidence(expected=70.0), cfg) == pytest.approx(48 + 28 - 5)

    def test_low_expected_confidence_is_demoted(self, cfg):
        quality = QualityScore(score=100.0)
        assert pre_rank_score(quality, ExpectedConfidence(expected=49.0), cfg) < -1e5
        assert pre_rank_score(quality, None, cfg) < -1e5

    def test_sorted_best_first(self, cfg):
        ranked = pre_rank_assets(
            {
                "BTC": QualityScore(score=90.0),
                "ETH": QualityScore(score=70.0, weaknesses=["a", "b"]),
                "DOGE": QualityScore(score=120.0),
            },
            {
                "BTC": ExpectedConfidence(expected=80.0),
                "ETH": ExpectedConfidence(expected=75.0),
                "DOGE": ExpectedConfidence(expected=30.0),
            },
            cfg,
        )
        assert [a.asset for a in ranked] == ["BTC", "ETH", "DOGE"]
        assert ranked[1].weaknesses == 2
        assert len(pre_rank_assets({"BTC": QualityScore(90.0)}, {}, cfg, top_n=0)) == 0
