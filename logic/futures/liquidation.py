"""Liquidation-zone indicators."""

from dataclasses import dataclass, field
from typing import List, Optional

from core.helpers import finite_float
from core.models import LiquidationCluster, LiquidationData
from core.models.futures import PriceZone

NO_CLUSTER_DISTANCE = 100.0
DEFAULT_LIQUIDATION_DISTANCE = 10.0
STOP_HUNT_RANGE_PCT = 5.0
STOP_HUNT_MIN_SHARE = 0.03
GRAB_RANGE_PCT = 2.0
GRAB_MIN_SHARE = 0.05
CASCADE_RANGE_PCT = 3.0


@dataclass
class ClusterSummary:
    long: List[LiquidationCluster] = field(default_factory=list)
    short: List[LiquidationCluster] = field(default_factory=list)
    nearest: Optional[LiquidationCluster] = None
    distance: float = NO_CLUSTER_DISTANCE


@dataclass
class LiquidityGrab:
    detected: bool = False
    zone: Optional[PriceZone] = None
    side: str = "none"


@dataclass
class StopHunt:
    predicted: bool = False
    target_price: Optional[float] = None
    side: str = "none"


@dataclass
class CascadeRisk:
    risk: str = "low"
    trigger_price: Optional[float] = None


@dataclass
class SafeEntry:
    zones: List[PriceZone] = field(default_factory=list)
    confidence: float = 0.0


@dataclass
class LiquidationIndicators:
    clusters: ClusterSummary
    liquidity_grab: LiquidityGrab
    stop_hunt: StopHunt
    cascade: CascadeRisk
    safe_entry: SafeEntry


def _distance_pct(price: float, current_price: float) -> float:
    if not current_price:
        return NO_CLUSTER_DISTANCE
    return abs(price - current_price) / current_price * 100


def find_clusters(data: LiquidationData, current_price: float) -> ClusterSummary:
    summary = ClusterSummary(
        long=[c for c in data.clusters if c.side == "long"],
        short=[c for c in data.clusters if c.side == "short"],
    )
    if data.clusters and current_price:
        nearest = min(data.clusters, key=lambda c: _distance_pct(c.price, current_price))
        summary.nearest = nearest
        summary.distance = finite_float(_distance_pct(nearest.price, current_price), NO_CLUSTER_DISTANCE)
    return summary


def detect_liquidity_grab(data: LiquidationData, current_price: float) -> LiquidityGrab:
    total = data.total_liquidations_24h
    for cluster in data.clusters:
        if _distance_pct(cluster.price, current_price) < GRAB_RANGE_PCT and cluster.size > total * GRAB_MIN_SHARE:
            return LiquidityGrab(True, (cluster.price * 0.995, cluster.price * 1.005), cluster.side)
    return LiquidityGrab()


def predict_stop_hunt(data: LiquidationData, current_price: float) -> StopHunt:
    nearby = [c for c in data.clusters if _distance_pct(c.price, current_price) < STOP_HUNT_RANGE_PCT]
    if not nearby:
        return StopHunt()
    largest = max(nearby, key=lambda c: c.size)
    if largest.size > 0 and largest.size > data.total_liquidations_24h * STOP_HUNT_MIN_SHARE:
        return StopHunt(True, largest.price, largest.side)
    return StopHunt()


def assess_cascade_risk(data: LiquidationData, current_price: float) -> CascadeRisk:
    nearby = [c for c in data.clusters if _distance_pct(c.price, current_price) < CASCADE_RANGE_PCT]
    if not nearby:
        return CascadeRisk()
    total_nearby = sum(c.size for c in nearby)
    # 24h liquidations are roughly 5% of open interest
    oi_estimate = data.total_liquidations_24h * 20
    nearest = min(nearby, key=lambda c: abs(c.price - current_price))
    if total_nearby > oi_estimate * 0.05:
        return CascadeRisk("high", nearest.price)
    if total_nearby > oi_estimate * 0.02:
        return CascadeRisk("medium", nearest.price)
    return CascadeRisk()


def identify_safe_entry_zones(data: LiquidationData, current_price: float) -> SafeEntry:
    nearest_distance = data.liquidation_distance or DEFAULT_LIQUIDATION_DISTANCE
    zones = list(data.safe_entry_zones)
    if not zones and nearest_distance > 3:
        zones = [(current_price * 0.99, current_price * 1.01)]
    return SafeEntry(zones=zones, confidence=finite_float(min(1.0, nearest_distance / 10)))


def calculate_liquidation_indicators(data: LiquidationData, current_price: float) -> LiquidationIndicators:
    return LiquidationIndicators(
        clusters=find_clusters(data, current_price),
        liquidity_grab=detect_liquidity_grab(data, current_price),
        stop_hunt=predict_stop_hunt(data, current_price),
        cascade=assess_cascade_risk(data, current_price),
        safe_entry=identify_safe_entry_zones(data, current_price),
    )
