"""Gas pricing strategies and the congestion-driven selector."""

from dataclasses import dataclass
from enum import Enum

from dexroute.gas.snapshot import NetworkGasSnapshot
from dexroute.models.types import Speed


class GasStrategyName(str, Enum):
    CONGESTION_AWARE = "congestion_aware"
    EIP1559_OPTIMIZED = "eip1559_optimized"
    LOW_CONGESTION = "low_congestion"
    FAST_CONFIRMATION = "fast_confirmation"


@dataclass(frozen=True)
class GasStrategy:
    """Adjustments a strategy applies to the gas limit and priority fee."""

    name: GasStrategyName
    description: str
    gas_multiplier: float
    priority_fee_multiplier: float


STRATEGIES: dict[GasStrategyName, GasStrategy] = {
    GasStrategyName.CONGESTION_AWARE: GasStrategy(
        GasStrategyName.CONGESTION_AWARE, "Adjusts gas to network congestion", 1.0, 1.0
    ),
    GasStrategyName.EIP1559_OPTIMIZED: GasStrategy(
        GasStrategyName.EIP1559_OPTIMIZED, "Fee-market pricing around the base fee", 0.95, 1.1
    ),
    GasStrategyName.LOW_CONGESTION: GasStrategy(
        GasStrategyName.LOW_CONGESTION, "Reduced gas for quiet periods", 0.9, 0.8
    ),
    GasStrategyName.FAST_CONFIRMATION: GasStrategy(
        GasStrategyName.FAST_CONFIRMATION, "Higher gas for fast inclusion", 1.2, 1.5
    ),
}

SPEED_MULTIPLIERS: dict[Speed, float] = {
    Speed.SLOW: 0.8,
    Speed.STANDARD: 1.0,
    Speed.FAST: 1.2,
    Speed.INSTANT: 1.5,
}

# Blocks to wait for inclusion at each speed
SPEED_BLOCKS: dict[Speed, float] = {
    Speed.SLOW: 3,
    Speed.STANDARD: 2,
    Speed.FAST: 1,
    Speed.INSTANT: 0.5,
}

HIGH_CONGESTION = 80
LOW_CONGESTION = 30


def select_strategy(snapshot: NetworkGasSnapshot) -> GasStrategy:
    """Pick the pricing strategy for the current network conditions.

    - congestion > 80: fast_confirmation
    - congestion < 30: low_congestion
    - otherwise eip1559_optimized on fee-market networks, congestion_aware
      on legacy-priced ones
    """
    if snapshot.network_congestion > HIGH_CONGESTION:
        return STRATEGIES[GasStrategyName.FAST_CONFIRMATION]
    if snapshot.network_congestion < LOW_CONGESTION:
        return STRATEGIES[GasStrategyName.LOW_CONGESTION]
    if snapshot.has_fee_market:
        return STRATEGIES[GasStrategyName.EIP1559_OPTIMIZED]
    return STRATEGIES[GasStrategyName.CONGESTION_AWARE]


def gas_confidence(snapshot: NetworkGasSnapshot, strategy: GasStrategy) -> float:
    """Confidence (60-99) that the estimate will hold until inclusion."""
    confidence = 90
    if snapshot.network_congestion > 70:
        confidence -= 15
    elif snapshot.network_congestion < 30:
        confidence += 5
    if snapshot.block_utilization > 90:
        confidence -= 10
    if strategy.name is GasStrategyName.EIP1559_OPTIMIZED:
        confidence += 5
    return max(60, min(99, confidence))
