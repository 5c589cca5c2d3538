"""Exit condition checker tests."""

import pytest

from core.exit_configs import (
    IndicatorExitConfig,
    RankingDropConfig,
    SignalReversalConfig,
    StopLossConfig,
    TakeProfitConfig,
    TrailingStopConfig,
)
from core.models import (
    Candle,
    ExitReason,
    IndicatorSnapshot,
    MACDValues,
    MarketSnapshot,
    Side,
    SignalType,
    TakeProfitTarget,
)
from execution.exits import (
    atr_expansion_ratio,
    calculate_stop_loss,
    calculate_take_profit,
    calculate_take_profit_levels,
    check_indicator_exit,
    check_ranking_drop,
    check_signal_reversal,
    check_stop_loss,
    check_take_profit,
    check_trailing_stop,
)


LADDER = TakeProfitConfig(levels=[2.0, 4.0, 6.0], sizes=[50.0, 30.0, 20.0])


class TestStopLoss:

    def test_long_stop_fires_at_stop_price(self, make_position):
        pos = make_position(side=Side.LONG, stop_loss=98.0)
        result = check_stop_loss(pos, 97.0, StopLossConfig())
        assert result is not None
        assert result.reason == ExitReason.STOP_LOSS
        assert result.priority == 2
        assert result.exit_size == 100.0
        assert result.exit_price == 98.0
        assert result.metadata["distance_from_sl"] == pytest.approx(-1.0)

    def test_long_stop_touch_fires(self, make_position):
        pos = make_position(side=Side.LONG, stop_loss=98.0)
        assert check_stop_loss(pos, 98.0, StopLossConfig()) is not None

    def test_long_above_stop_is_quiet(self, make_position):
        pos = make_position(side=Side.LONG, stop_loss=98.0)
        assert check_stop_loss(pos, 99.0, StopLossConfig()) is None

    def test_short_stop_fires_above(self, make_position):
        pos = make_position(side=Side.SHORT, stop_loss=102.0)
        result = check_stop_loss(pos, 103.0, StopLossConfig())
        assert result is not None
        assert result.exit_price == 102.0
        assert check_stop_loss(pos, 101.0, StopLossConfig()) is None

    def test_missing_stop_or_disabled(self, make_position):
        assert check_stop_loss(make_position(), 50.0, StopLossConfig()) is None
        pos = make_position(stop_loss=98.0)
        assert check_stop_loss(pos, 50.0, StopLossConfig(enabled=False)) is None

    def test_calculate_stop_loss(self):
        assert calculate_stop_loss(100.0, Side.LONG) == pytest.approx(98.0)
        assert calculate_stop_loss(100.0, "short") == pytest.approx(102.0)
        assert calculate_stop_loss(100.0, Side.LONG, 5.0) == pytest.approx(95.0)


class TestTakeProfit:

    def test_single_level(self, make_position):
        pos = make_position(take_profit=105.0)
        result = check_take_profit(pos, 106.0, TakeProfitConfig())
        assert result.reason == ExitReason.TAKE_PROFIT
        assert result.exit_size == 100.0
        assert result.exit_price == 105.0
        assert check_take_profit(pos, 104.0, TakeProfitConfig()) is None

    def test_top_rung_closes_everything_owed(self, make_position):
        pos = make_position(take_profit=[TakeProfitTarget(5, 50), TakeProfitTarget(10, 50)])
        result = check_take_profit(pos, 110.0, TakeProfitConfig())
        assert result is not None
        assert result.metadata["tp_level"] == 10
        assert result.exit_size == pytest.approx(100.0)
        assert result.exit_price == pytest.approx(110.0)

    @pytest.mark.parametrize("side, level, price", [
        (Side.LONG, 10, 110.0),
        (Side.LONG, 7, 107.0),
        (Side.SHORT, 7, 93.0),
        (Side.SHORT, 3, 97.0),
    ])
    def test_rung_reached_at_exact_boundary(self, make_position, side, level, price):
        pos = make_position(side=side, take_profit=[TakeProfitTarget(1, 40), TakeProfitTarget(level, 60)])
        result = check_take_profit(pos, price, TakeProfitConfig())
        assert result.metadata["tp_level"] == level
        assert result.exit_size == pytest.approx(100.0)

    def test_short_ladder(self, make_position):
        pos = make_position(side=Side.SHORT, take_profit=[TakeProfitTarget(5, 50), TakeProfitTarget(10, 50)])
        result = check_take_profit(pos, 94.0, TakeProfitConfig())
        assert result.metadata["tp_level"] == 5
        assert result.exit_size == pytest.approx(50.0)
        assert result.exit_price == pytest.approx(95.0)

    def test_covered_rung_never_refires(self, make_position):
        pos = make_position(take_profit=106.0)
        first = check_take_profit(pos, 104.5, LADDER)
        assert first.metadata["tp_level"] == 4.0
        assert first.exit_size == pytest.approx(80.0)
        pos.apply_exit(first)

        assert check_take_profit(pos, 104.5, LADDER) is None

        last = check_take_profit(pos, 106.5, LADDER)
        assert last.metadata["tp_level"] == 6.0
        assert last.exit_size == pytest.approx(20.0)

    def test_cumulative_exits_never_exceed_full_position(self, make_position):
        pos = make_position(take_profit=106.0)
        sizes = []
        for price in [101.0, 102.5, 103.0, 104.2, 105.0, 107.0, 110.0, 104.0]:
            result = check_take_profit(pos, price, LADDER)
            if result is not None:
                sizes.append(result.exit_size)
                pos.apply_exit(result)
            assert pos.take_profit_closed_pct <= 100.0
        assert sizes == pytest.approx([50.0, 30.0, 20.0])
        assert pos.is_closed

    def test_breakeven_flag(self, make_position):
        pos = make_position(take_profit=106.0)
        result = check_take_profit(pos, 102.0, LADDER)
        assert result.metadata["should_move_stop_loss"] is True
        off = TakeProfitConfig(levels=[2.0], sizes=[50.0], auto_move_stop_loss_to_breakeven=False)
        assert check_take_profit(pos, 102.0, off).metadata["should_move_stop_loss"] is False

    def test_levels_missing_sizes_count_as_zero(self, make_position):
        pos = make_position()
        ladder = calculate_take_profit_levels(pos, [2.0, 4.0, 6.0], [50.0])
        assert [lvl.cumulative_size_pct for lvl in ladder] == [50.0, 50.0, 50.0]
        assert ladder[1].price == pytest.approx(104.0)
        assert not any(lvl.hit for lvl in ladder)

    def test_calculate_take_profit(self):
        assert calculate_take_profit(100.0, Side.LONG) == pytest.approx(105.0)
        assert calculate_take_profit(100.0, Side.SHORT, 3.0) == pytest.approx(97.0)


class TestTrailingStop:

    def test_inactive_until_gain_threshold(self, make_position):
        pos = make_position()
        assert check_trailing_stop(pos, 100.5, TrailingStopConfig()) is None
        assert pos.trailing_stop_active is False
        assert pos.highest_price is None

    def test_long_trails_and_fires(self, make_position):
        pos = make_position()
        cfg = TrailingStopConfig()
        assert check_trailing_stop(pos, 102.0, cfg) is None
        assert pos.trailing_stop_active
        assert check_trailing_stop(pos, 103.0, cfg) is None
        assert pos.trailing_stop == pytest.approx(101.97)

        result = check_trailing_stop(pos, 101.5, cfg)
        assert result.reason == ExitReason.TRAILING_STOP
        assert result.exit_price == pytest.approx(101.97)
        assert pos.highest_price == 103.0

    def test_short_trails_and_fires(self, make_position):
        pos = make_position(side=Side.SHORT)
        cfg = TrailingStopConfig()
        assert check_trailing_stop(pos, 98.0, cfg) is None
        assert check_trailing_stop(pos, 97.0, cfg) is None
        result = check_trailing_stop(pos, 98.5, cfg)
        assert result is not None
        assert result.exit_price == pytest.approx(97.97)
        assert pos.lowest_price == 97.0

    def test_high_water_mark_is_monotonic(self, make_position):
        long_pos = make_position()
        short_pos = make_position(side=Side.SHORT)
        cfg = TrailingStopConfig(distance_pct=5.0)
        highs, lows = [], []
        for move in [2.0, 4.0, 3.0, 6.0, 5.5, 1.5, 7.0]:
            check_trailing_stop(long_pos, 100.0 + move, cfg)
            check_trailing_stop(short_pos, 100.0 - move, cfg)
            highs.append(long_pos.highest_price)
            lows.append(short_pos.lowest_price)
        assert highs == sorted(highs)
        assert lows == sorted(lows, reverse=True)

    def test_activation_is_sticky(self, make_position):
        pos = make_position()
        cfg = TrailingStopConfig()
        check_trailing_stop(pos, 102.0, cfg)
        result = check_trailing_stop(pos, 100.5, cfg)
        assert result is not None
        assert result.exit_price == pytest.approx(100.98)


class TestSignalReversal:

    def test_opposing_confident_signal_fires(self, make_position, make_signal):
        pos = make_position(side=Side.LONG)
        sig = make_signal(type=SignalType.SELL_TO_ENTER, confidence=0.55)
        result = check_signal_reversal(pos, sig, SignalReversalConfig())
        assert result.reason == ExitReason.SIGNAL_REVERSAL
        assert result.priority == 5
        assert result.metadata["new_signal_confidence"] == pytest.approx(55.0)
        assert result.metadata["old_position_side"] == "LONG"

    @pytest.mark.parametrize("confidence", [0.3, 0.6, 0.99, 1.0])
    def test_same_direction_never_fires(self, make_position, make_signal, confidence):
        long_pos = make_position(side=Side.LONG)
        short_pos = make_position(side=Side.SHORT)
        cfg = SignalReversalConfig(confidence_threshold=0.0)
        assert check_signal_reversal(long_pos, make_signal(confidence=confidence), cfg) is None
        sell = make_signal(type=SignalType.SELL_TO_ENTER, confidence=confidence)
        assert check_signal_reversal(short_pos, sell, cfg) is None

    def test_below_threshold(self, make_position, make_signal):
        pos = make_position()
        sig = make_signal(type=SignalType.SELL_TO_ENTER, confidence=0.45)
        assert check_signal_reversal(pos, sig, SignalReversalConfig()) is None

    def test_threshold_lowered_for_moderate_confidence(self, make_position, make_signal):
        pos = make_position()
        sig = make_signal(type=SignalType.SELL_TO_ENTER, confidence=0.55)
        result = check_signal_reversal(pos, sig, SignalReversalConfig(confidence_threshold=70.0))
        assert result is not None
        assert result.metadata["effective_threshold"] == 50.0
        assert result.metadata["threshold"] == 70.0

    def test_threshold_never_raised(self, make_position, make_signal):
        pos = make_position(side=Side.SHORT)
        sig = make_signal(type=SignalType.BUY_TO_ENTER, confidence=0.35)
        assert check_signal_reversal(pos, sig, SignalReversalConfig(confidence_threshold=30.0)) is not None
        assert check_signal_reversal(pos, sig, SignalReversalConfig(confidence_threshold=70.0)) is None

    def test_percent_confidence_and_management_signals(self, make_position, make_signal):
        pos = make_position()
        assert check_signal_reversal(
            pos, make_signal(type=SignalType.SELL_TO_ENTER, confidence=65), SignalReversalConfig()
        ) is not None
        for kind in (SignalType.HOLD, SignalType.CLOSE_ALL, SignalType.REDUCE):
            assert check_signal_reversal(pos, make_signal(type=kind, confidence=1.0), SignalReversalConfig()) is None
        assert check_signal_reversal(pos, None, SignalReversalConfig()) is None


def _market(price=100.0, **indicators):
    return MarketSnapshot(symbol="ETH-USD", price=price, indicators=IndicatorSnapshot(**indicators))


class TestIndicatorExit:

    def test_rsi_overbought_long(self, make_position):
        result = check_indicator_exit(make_position(), _market(rsi14=75.0), IndicatorExitConfig())
        assert result.reason == ExitReason.INDICATOR_BASED
        assert result.priority == 3
        assert result.metadata["exit_conditions"] == ["RSI"]

    def test_rsi_oversold_short(self, make_position):
        pos = make_position(side=Side.SHORT)
        assert check_indicator_exit(pos, _market(rsi14=25.0), IndicatorExitConfig()) is not None
        assert check_indicator_exit(pos, _market(rsi14=75.0), IndicatorExitConfig()) is None

    def test_bare_macd_cross_is_ignored(self, make_position):
        market = _market(macd=MACDValues(macd=0.5, signal=0.6, histogram=-0.1))
        assert check_indicator_exit(make_position(), market, IndicatorExitConfig()) is None

    def test_macd_cross_with_strong_histogram(self, make_position):
        market = _market(macd=MACDValues(macd=0.1, signal=0.5, histogram=-0.4))
        result = check_indicator_exit(make_position(), market, IndicatorExitConfig())
        assert result.metadata["exit_conditions"] == ["MACD"]

    def test_confirmation_mode_needs_two_votes(self, make_position):
        strict = IndicatorExitConfig(require_confirmation=True)
        assert check_indicator_exit(make_position(), _market(rsi14=75.0), strict) is None
        result = check_indicator_exit(make_position(), _market(rsi14=75.0, ema20=101.0), strict)
        assert result.metadata["exit_conditions"] == ["RSI", "EMA20"]
        assert result.metadata["require_confirmation"] is True

    def test_structure_change(self, make_position):
        market = _market()
        market.change_of_character = "bearish"
        result = check_indicator_exit(make_position(), market, IndicatorExitConfig())
        assert result.metadata["exit_conditions"] == ["SUPPORT_RESISTANCE"]

    def test_atr_expansion(self, make_position):
        candles = [Candle(open=100.0, high=100.5, low=99.5, close=100.0) for _ in range(14)]
        market = _market(atr=3.0)
        market.candles = candles
        assert atr_expansion_ratio(market) == pytest.approx(3.0)
        result = check_indicator_exit(make_position(), market, IndicatorExitConfig())
        assert result.metadata["exit_conditions"] == ["ATR"]

        market.candles = candles[:13]
        assert atr_expansion_ratio(market) is None

    def test_atr_average_covers_latest_thirteen_candles(self):
        oldest = Candle(open=100.0, high=105.0, low=95.0, close=100.0)
        middle = [Candle(open=100.0, high=100.5, low=99.5, close=100.0) for _ in range(12)]
        latest = Candle(open=100.0, high=101.15, low=98.85, close=100.0)
        market = _market(atr=3.0)
        market.candles = [oldest] + middle + [latest]
        # (12 * 1.0 + 2.3) / 13 = 1.1% average range
        assert atr_expansion_ratio(market) == pytest.approx(3.0 / 1.1)

    def test_missing_data_is_quiet(self, make_position):
        assert check_indicator_exit(make_position(), None, IndicatorExitConfig()) is None
        assert check_indicator_exit(make_position(), _market(), IndicatorExitConfig()) is None


class TestRankingDrop:

    def test_needs_consecutive_cycles(self, make_position):
        pos = make_position()
        cfg = RankingDropConfig()
        assert check_ranking_drop(pos, 13, cfg) is None
        result = check_ranking_drop(pos, 14, cfg)
        assert result.reason == ExitReason.RANKING_DROP
        assert result.metadata["ranking_history"] == [13, 14]
        assert result.metadata["threshold"] == 12

    def test_reentry_resets_window(self, make_position):
        pos = make_position()
        cfg = RankingDropConfig()
        assert check_ranking_drop(pos, 13, cfg) is None
        assert check_ranking_drop(pos, 5, cfg) is None
        assert pos.ranking_history == [5]
        assert check_ranking_drop(pos, 13, cfg) is None
        assert check_ranking_drop(pos, 14, cfg) is not None

    def test_buffer(self, make_position):
        pos = make_position()
        assert check_ranking_drop(pos, 12, RankingDropConfig()) is None
        assert check_ranking_drop(pos, 12, RankingDropConfig()) is None

        no_buffer = RankingDropConfig(use_buffer=False)
        pos = make_position()
        check_ranking_drop(pos, 11, no_buffer)
        assert check_ranking_drop(pos, 11, no_buffer) is not None

    def test_exact_confirmation_count(self, make_position):
        pos = make_position()
        cfg = RankingDropConfig(confirmation_cycles=3)
        assert check_ranking_drop(pos, 13, cfg) is None
        assert check_ranking_drop(pos, 14, cfg) is None
        assert check_ranking_drop(pos, 15, cfg) is not None

    def test_no_rank_is_quiet(self, make_position):
        assert check_ranking_drop(make_position(), None, RankingDropConfig()) is None
