import os
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from core.config import settings  # noqa: E402
from core.exit_configs import ExitEngineConfig  # noqa: E402
from core.models import ContradictionReport, Position, Side, Signal, SignalType  # noqa: E402


class StubDetector:
    """Contradiction detector returning canned reports per symbol."""

    def __init__(self, reports=None, default=None, fail_for=()):
        self.reports = reports or {}
        self.default = default or ContradictionReport()
        self.fail_for = set(fail_for)
        self.calls = []

    def detect(self, signal, market):
        self.calls.append(signal.symbol)
        if signal.symbol in self.fail_for:
            raise RuntimeError("detector offline")
        return self.reports.get(signal.symbol, self.default)


def build_position(symbol="ETH-USD", side=Side.LONG, entry=100.0, price=None, **kwargs) -> Position:
    return Position(
        symbol=symbol,
        side=side,
        entry_price=entry,
        current_price=entry if price is None else price,
        quantity=kwargs.pop("quantity", 1.0),
        **kwargs,
    )


def build_signal(symbol="ETH-USD", type=SignalType.BUY_TO_ENTER, confidence=0.8, **kwargs) -> Signal:
    return Signal(symbol=symbol, type=type, confidence=confidence, **kwargs)


@pytest.fixture
def long_position():
    return build_position(side=Side.LONG)


@pytest.fixture
def short_position():
    return build_position(side=Side.SHORT)


@pytest.fixture
def make_signal():
    return build_signal


@pytest.fixture
def make_position():
    return build_position


@pytest.fixture
def exit_config():
    """Engine config with a bare TP ladder so single-price TPs stay single."""
    return ExitEngineConfig()


@pytest.fixture
def cfg():
    """Deterministic settings independent of the local .env."""
    return settings.model_copy(update={
        "high_confidence_threshold": 0.60,
        "high_confidence_reward_threshold": 0.60,
        "contradiction_reward": 2.0,
        "min_conf_overall": 0.75,
        "extra_conf_threshold": 0.0,
        "conflict_high_min_conf": 0.80,
        "min_conf_vol_spike": 0.85,
        "gate_ec_gap_max": 30.0,
        "gate_major_mismatch_autoban": 3,
    })


@pytest.fixture
def stub_detector():
    """Factory for contradiction detectors with canned reports."""
    return StubDetector
