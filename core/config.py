"""Engine configuration."""

import logging

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)
load_dotenv()


def _parse_float_list(raw: str) -> list[float]:
    values = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            values.append(float(part))
        except ValueError:
            logger.warning("[CONFIG] Ignoring non-numeric list entry: %r", part)
    return values


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Exit engine switches
    exit_engine_enabled: bool = Field(default=True, alias="EXIT_ENGINE_ENABLED")
    stop_loss_enabled: bool = Field(default=True, alias="EXIT_STOP_LOSS_ENABLED")
    take_profit_enabled: bool = Field(default=True, alias="EXIT_TAKE_PROFIT_ENABLED")
    trailing_stop_enabled: bool = Field(default=True, alias="EXIT_TRAILING_STOP_ENABLED")
    signal_reversal_enabled: bool = Field(default=True, alias="EXIT_SIGNAL_REVERSAL_ENABLED")
    indicator_exit_enabled: bool = Field(default=True, alias="EXIT_INDICATOR_ENABLED")
    ranking_drop_enabled: bool = Field(default=True, alias="EXIT_RANKING_DROP_ENABLED")

    # Stops/TPs (percent of entry)
    default_stop_loss_pct: float = Field(default=2.0, gt=0, alias="DEFAULT_STOP_LOSS_PCT")
    default_take_profit_pct: float = Field(default=5.0, gt=0, alias="DEFAULT_TAKE_PROFIT_PCT")
    take_profit_levels: str = Field(default="2,4,6", alias="TAKE_PROFIT_LEVELS")
    take_profit_sizes: str = Field(default="50,30,20", alias="TAKE_PROFIT_SIZES")
    auto_move_sl_to_breakeven: bool = Field(default=True, alias="AUTO_MOVE_SL_TO_BREAKEVEN")

    # Trailing stop
    trailing_distance_pct: float = Field(default=1.0, gt=0, alias="TRAILING_STOP_DISTANCE_PCT")
    trailing_activate_after_gain_pct: float = Field(default=1.0, ge=0, alias="TRAILING_ACTIVATE_AFTER_GAIN_PCT")

    # Signal reversal (percent scale, 0-100)
    reversal_confidence_threshold: float = Field(default=50.0, ge=0, le=100, alias="REVERSAL_CONFIDENCE_THRESHOLD")

    # Ranking drop
    ranking_top_n: int = Field(default=10, ge=1, alias="RANKING_TOP_N")
    ranking_confirmation_cycles: int = Field(default=2, ge=1, alias="RANKING_CONFIRMATION_CYCLES")
    ranking_use_buffer: bool = Field(default=True, alias="RANKING_USE_BUFFER")
    ranking_buffer_size: int = Field(default=2, ge=0, alias="RANKING_BUFFER_SIZE")

    # Indicator-based exit
    exit_rsi_threshold: float = Field(default=70.0, ge=50, le=100, alias="EXIT_RSI_THRESHOLD")
    exit_atr_expansion_threshold: float = Field(default=2.5, gt=0, alias="EXIT_ATR_EXPANSION_THRESHOLD")
    exit_require_confirmation: bool = Field(default=False, alias="EXIT_REQUIRE_CONFIRMATION")

    # Qualification: confidence thresholds (fractions 0-1)
    high_confidence_threshold: float = Field(default=0.60, ge=0, le=1, alias="HIGH_CONFIDENCE_THRESHOLD")
    high_confidence_reward_threshold: float = Field(default=0.60, ge=0, le=1, alias="HIGH_CONFIDENCE_REWARD_THRESHOLD")
    contradiction_reward: float = Field(default=2.0, ge=0, alias="CONTRADICTION_REWARD")
    min_conf_overall: float = Field(default=0.75, ge=0, le=1, alias="MIN_CONF_OVERALL")
    extra_conf_threshold: float = Field(default=0.0, ge=0, le=1, alias="EXTRA_CONF_THRESHOLD")
    conflict_high_min_conf: float = Field(default=0.80, ge=0, le=1, alias="CONFLICT_HIGH_MIN_CONF")
    min_conf_vol_spike: float = Field(default=0.85, ge=0, le=1, alias="MIN_CONF_VOL_SPIKE")
    max_contradiction_score: float = 4.0  # 4 = no indicators available

    # Qualification: consistency gates
    gate_ec_gap_max: float = Field(default=30.0, ge=0, alias="EC_GAP_MAX")
    gate_major_mismatch_autoban: int = Field(default=3, ge=1, alias="MAJOR_MISMATCH_AUTOBAN")

    # Ranking formula
    rank_w_indicators: float = Field(default=0.2, ge=0, alias="RANK_W_INDICATORS")
    rank_w_confidence: float = Field(default=0.7, ge=0, alias="RANK_W_CONFIDENCE")
    rank_w_futures: float = Field(default=0.1, ge=0, alias="RANK_W_FUTURES")
    rank_w_expected: float = Field(default=0.2, ge=0, alias="RANK_W_EXPECTED")
    demote_penalty: float = Field(default=30.0, ge=0, alias="DEMOTE_PENALTY")
    conf_floor: float = Field(default=0.5, ge=0, le=1, alias="CONF_FLOOR")
    conf_demote: float = Field(default=0.7, ge=0, le=1, alias="CONF_DEMOTE")
    gap_max: float = Field(default=20.0, ge=0, alias="GAP_MAX")
    rank_ec_gap_max: float = Field(default=20.0, ge=0, alias="RANK_EC_GAP_MAX")
    gap_bonus_max: float = Field(default=10.0, ge=0, alias="GAP_BONUS_MAX")
    ec_bonus_max: float = Field(default=10.0, ge=0, alias="EC_BONUS_MAX")
    reward_cap: float = Field(default=60.0, ge=0, alias="REWARD_CAP")
    rank_major_mismatch_autoban: int = Field(default=2, ge=1, alias="RANK_MAJOR_MISMATCH_AUTOBAN")
    disqualify_penalty: float = Field(default=1e6, gt=0, alias="DISQUALIFY_PENALTY")

    # Asset pre-ranking
    pre_w_indicators: float = Field(default=0.6, ge=0, alias="PRE_W_INDICATORS")
    pre_w_expected: float = Field(default=0.4, ge=0, alias="PRE_W_EXPECTED")
    weakness_penalty: float = Field(default=5.0, ge=0, alias="WEAKNESS_PENALTY")
    expected_conf_floor: float = Field(default=50.0, ge=0, alias="EXPECTED_CONF_FLOOR")

    # Conflict penalties
    pen_trend_ema_aroon: float = Field(default=40.0, alias="PEN_TREND_EMA_AROON")
    pen_vol_delta: float = Field(default=25.0, alias="PEN_VOL_DELTA")
    pen_delta_contra: float = Field(default=20.0, alias="PEN_DELTA_CONTRA")
    pen_regime_choppy: float = Field(default=20.0, alias="PEN_REGIME_CHOPPY")
    pen_sideways_novol: float = Field(default=15.0, alias="PEN_SIDEWAYS_NOVOL")
    pen_liq_bounce: float = Field(default=15.0, alias="PEN_LIQ_BOUNCE")
    pen_liq_trap: float = Field(default=25.0, alias="PEN_LIQ_TRAP")
    pen_rsi_no_momo: float = Field(default=10.0, alias="PEN_RSI_NO_MOMO")
    pen_btc_mismatch: float = Field(default=20.0, alias="PEN_BTC_MISMATCH")
    pen_btc_shock: float = Field(default=25.0, alias="PEN_BTC_SHOCK")

    # Reward bonuses
    rew_trend_ema_aroon: float = Field(default=40.0, alias="REW_TREND_EMA_AROON")
    rew_vol_delta: float = Field(default=25.0, alias="REW_VOL_DELTA")
    rew_vol_delta_partial: float = Field(default=10.0, alias="REW_VOL_DELTA_PARTIAL")
    rew_regime_strong: float = Field(default=20.0, alias="REW_REGIME_STRONG")
    rew_regime_mod: float = Field(default=10.0, alias="REW_REGIME_MOD")
    rew_liq_safe_7: float = Field(default=25.0, alias="REW_LIQ_SAFE_7")
    rew_liq_safe_5: float = Field(default=15.0, alias="REW_LIQ_SAFE_5")
    rew_rsi_momo: float = Field(default=10.0, alias="REW_RSI_MOMO")
    rew_btc_align: float = Field(default=20.0, alias="REW_BTC_ALIGN")
    rew_btc_mod: float = Field(default=10.0, alias="REW_BTC_MOD")
    rew_premium_tight: float = Field(default=10.0, alias="REW_PREMIUM_TIGHT")
    rew_div_low: float = Field(default=10.0, alias="REW_DIV_LOW")
    rew_futures_coh: float = Field(default=10.0, alias="REW_FUTURES_COH")

    @property
    def take_profit_level_list(self) -> list[float]:
        return _parse_float_list(self.take_profit_levels)

    @property
    def take_profit_size_list(self) -> list[float]:
        return _parse_float_list(self.take_profit_sizes)

    @property
    def base_confidence_floor(self) -> float:
        """Global part of the acceptance floor (before the per-asset tier)."""
        return max(self.high_confidence_threshold, self.min_conf_overall)


settings = Settings()
