"""Reward bonuses for coherent, low-risk conditions.

Mirror of the conflict penalties: evidence sources that agree earn a bonus.
The total is capped at ``REWARD_CAP`` so rewards cannot dominate the base score.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from core.config import Settings, settings
from core.models import IndicatorSnapshot, MarketSnapshot


@dataclass
class RewardBonusResult:
    reward: float = 0.0
    reasons: List[str] = field(default_factory=list)
    flags: int = 0

    def add(self, amount: float, reason: str):
        self.reward += amount
        self.reasons.append(reason)
        self.flags += 1


def compute_reward_bonuses(
    market: Optional[MarketSnapshot],
    cfg: Optional[Settings] = None,
) -> RewardBonusResult:
    cfg = cfg or settings
    result = RewardBonusResult()
    if market is None:
        return result

    ind = market.indicators or IndicatorSnapshot()
    futures = market.futures

    # Trend/EMA/Aroon coherence
    structure = ind.price_structure(market.price)
    aroon = ind.aroon_dominance()
    if (market.trend == "uptrend" and structure == "up" and aroon == "up") or (
        market.trend == "downtrend" and structure == "down" and aroon == "down"
    ):
        result.add(cfg.rew_trend_ema_aroon, "Trend×EMA×Aroon coherence")

    vc = market.volume_confirmation
    if vc is not None and vc.is_valid:
        amount = cfg.rew_vol_delta if vc.strength == "strong" else cfg.rew_vol_delta_partial
        result.add(amount, f"Volume confirms ({vc.strength})")

    adx = ind.adx or 0.0
    bb_width = ind.bb_width
    if adx >= 25 and 0.02 <= bb_width <= 0.06:
        result.add(cfg.rew_regime_strong, "Strong regime (ADX≥25 & BB width 2-6%)")
    elif adx >= 20 and 0.015 <= bb_width <= 0.08:
        result.add(cfg.rew_regime_mod, "Moderate regime")

    liq_dist = futures.liquidation.liquidation_distance if futures else None
    if liq_dist is not None:
        if liq_dist >= 7:
            result.add(cfg.rew_liq_safe_7, "Liquidation distance ≥7% (safe)")
        elif liq_dist >= 5:
            result.add(cfg.rew_liq_safe_5, "Liquidation distance ≥5% (safer)")

    rsi = ind.rsi14
    hist = ind.macd.hist if ind.macd is not None else None
    if rsi is not None and hist is not None:
        if (rsi > 55 and hist > 0) or (rsi < 45 and hist < 0):
            result.add(cfg.rew_rsi_momo, "RSI confirms momentum")

    if futures is None:
        result.reward = min(result.reward, cfg.reward_cap)
        return result

    btc = futures.btc_correlation
    if btc is not None:
        abs_corr = abs(btc.correlation_7d)
        if abs_corr >= 0.6:
            result.add(cfg.rew_btc_align, "BTC alignment strong")
        elif abs_corr >= 0.5:
            result.add(cfg.rew_btc_mod, "BTC alignment moderate")

    prem = futures.premium_index
    if prem is not None:
        if abs(prem.premium_pct) < 0.0005:
            result.add(cfg.rew_premium_tight, "Premium tight")
        if prem.divergence is not None and abs(prem.divergence) < 0.5:
            result.add(cfg.rew_div_low, "Divergence low")

    if abs(futures.funding_rate.current) < 0.0006 and futures.open_interest.trend == "rising":
        result.add(cfg.rew_futures_coh, "Futures coherence (neutral funding + OI rising)")

    result.reward = min(result.reward, cfg.reward_cap)
    return result
