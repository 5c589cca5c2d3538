"""Conflict penalties for the ranking formula.

Each rule looks at one pair of evidence sources that should agree and adds a
penalty when they do not. The two most severe disagreements also count as
major mismatches, which the ranking uses for its own autoban.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from core.config import Settings, settings
from core.logging_utils import get_logger
from core.models import IndicatorSnapshot, MarketSnapshot

logger = get_logger(__name__)


@dataclass
class ConflictPenaltyResult:
    penalty: float = 0.0
    reasons: List[str] = field(default_factory=list)
    major_mismatches: int = 0

    def add(self, amount: float, reason: str, major: bool = False):
        self.penalty += amount
        self.reasons.append(reason)
        if major:
            self.major_mismatches += 1


def _macd_histogram(ind: IndicatorSnapshot) -> Optional[float]:
    return ind.macd.hist if ind.macd is not None else None


def compute_conflict_penalties(
    market: Optional[MarketSnapshot],
    cfg: Optional[Settings] = None,
) -> ConflictPenaltyResult:
    cfg = cfg or settings
    result = ConflictPenaltyResult()
    if market is None:
        return result

    ind = market.indicators or IndicatorSnapshot()
    futures = market.futures
    hist = _macd_histogram(ind)

    # 1) Trend x EMA x Aroon
    structure = ind.price_structure(market.price)
    aroon = ind.aroon_dominance()
    if (market.trend == "uptrend" and (structure == "down" or aroon == "down")) or (
        market.trend == "downtrend" and (structure == "up" or aroon == "up")
    ):
        result.add(cfg.pen_trend_ema_aroon, "Trend×EMA×Aroon conflict", major=True)

    # 2) Volume x Delta
    if market.volume_confirmation is not None and not market.volume_confirmation.is_valid:
        result.add(cfg.pen_vol_delta, "Volume does not confirm move")
    if market.net_delta is not None and hist is not None:
        if (hist > 0 and market.net_delta < 0) or (hist < 0 and market.net_delta > 0):
            result.add(cfg.pen_delta_contra, "Delta contra-direction to momentum")

    # 3) Regime
    adx = ind.adx or 0.0
    bb_width = ind.bb_width
    if 0 < adx < 20:
        result.add(cfg.pen_regime_choppy, "Regime choppy (ADX<20)")
    elif adx >= 20 and bb_width < 0.01:
        result.add(cfg.pen_sideways_novol, "Sideways no volume")

    # 4) Liquidation danger zone
    liq_dist = futures.liquidation.liquidation_distance if futures else None
    if liq_dist is not None:
        if liq_dist < 2:
            result.add(cfg.pen_liq_trap, "Liquidity trap (<2%)", major=True)
        elif liq_dist < 3.5:
            result.add(cfg.pen_liq_bounce, "High-bounce liquidity zone")

    # 5) RSI without momentum
    rsi = ind.rsi14
    if rsi is not None and 40 < rsi < 60 and abs(hist or 0.0) < 0.001:
        result.add(cfg.pen_rsi_no_momo, "RSI neutral with no MACD momentum")

    # 6) BTC impact
    btc = futures.btc_correlation if futures else None
    if btc is not None:
        if abs(btc.correlation_7d) >= 0.6 and hist is not None:
            result.add(round(cfg.pen_btc_mismatch * 0.5), "BTC correlation strong but context mismatch")
        if bb_width > 0.08:
            result.add(cfg.pen_btc_shock, "Volatility shock regime")

    if result.reasons:
        logger.debug(
            "[RANK] %s conflict penalty %.1f (major=%d): %s",
            market.symbol, result.penalty, result.major_mismatches, "; ".join(result.reasons),
        )
    return result
