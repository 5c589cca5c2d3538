"""Settings and exit-config wiring tests."""

import pytest
from pydantic import ValidationError

from core.config import Settings, settings
from core.exit_configs import ExitEngineConfig


def fresh(**env):
    return Settings(_env_file=None, **env)


class TestSettings:

    def test_defaults(self, monkeypatch):
        for name in ("EC_GAP_MAX", "MIN_CONF_OVERALL", "TAKE_PROFIT_LEVELS", "RANK_EC_GAP_MAX"):
            monkeypatch.delenv(name, raising=False)
        s = fresh()
        assert s.gate_ec_gap_max == 30.0
        assert s.rank_ec_gap_max == 20.0
        assert s.gate_major_mismatch_autoban == 3
        assert s.rank_major_mismatch_autoban == 2
        assert s.max_contradiction_score == 4.0
        assert s.take_profit_level_list == [2.0, 4.0, 6.0]

    def test_env_override_by_alias(self, monkeypatch):
        monkeypatch.setenv("EC_GAP_MAX", "25")
        monkeypatch.setenv("EXIT_TRAILING_STOP_ENABLED", "false")
        s = fresh()
        assert s.gate_ec_gap_max == 25.0
        assert s.trailing_stop_enabled is False

    def test_out_of_range_fraction_rejected(self, monkeypatch):
        monkeypatch.setenv("MIN_CONF_OVERALL", "1.5")
        with pytest.raises(ValidationError):
            fresh()

    def test_list_parsing_skips_junk(self, monkeypatch):
        monkeypatch.setenv("TAKE_PROFIT_LEVELS", "1.5, x,3,, 5")
        assert fresh().take_profit_level_list == [1.5, 3.0, 5.0]

    def test_base_confidence_floor(self):
        s = settings.model_copy(update={"high_confidence_threshold": 0.6, "min_conf_overall": 0.8})
        assert s.base_confidence_floor == 0.8


class TestExitEngineConfig:

    def test_from_settings(self):
        s = settings.model_copy(update={
            "ranking_top_n": 5,
            "ranking_buffer_size": 3,
            "trailing_activate_after_gain_pct": 2.0,
            "reversal_confidence_threshold": 65.0,
            "take_profit_levels": "2,4",
            "take_profit_sizes": "60,40",
        })
        cfg = ExitEngineConfig.from_settings(s)
        assert cfg.ranking_drop.threshold == 8
        assert cfg.trailing_stop.activation_pct == 2.0
        assert cfg.signal_reversal.confidence_threshold == 65.0
        assert cfg.take_profit.levels == [2.0, 4.0]
        assert cfg.take_profit.sizes == [60.0, 40.0]

    def test_defaults(self):
        cfg = ExitEngineConfig()
        assert cfg.trailing_stop.activation_pct == 1.0
        assert cfg.ranking_drop.threshold == 12
        assert cfg.take_profit.levels == []
