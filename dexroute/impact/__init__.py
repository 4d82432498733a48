"""Price impact estimation.

Module structure:
- pools.py: ConstantProductPool and StableSwapPool pricing curves
- stable_math.py: StableSwap invariant solved by Newton-Raphson
- estimator.py: PriceImpactEstimator for single and parallel pools
- store.py: PoolStore holding pool snapshots per network
- result.py: PriceImpactResult and related result types
- errors.py: Pricing error hierarchy
"""

from dexroute.impact.errors import (
    InvalidPoolError,
    NoPoolsError,
    PriceImpactError,
    StableGetBalanceDidNotConverge,
    StableInvariantDidNotConverge,
    ZeroBalanceError,
)
from dexroute.impact.estimator import PriceImpactEstimator
from dexroute.impact.pools import ConstantProductPool, Pool, PoolKind, StableSwapPool
from dexroute.impact.result import (
    AggregatedImpact,
    CostBreakdown,
    DistributionStrategy,
    ImpactRiskLevel,
    MevRisk,
    PoolAllocation,
    PriceImpactResult,
    SlippageScenario,
)
from dexroute.impact.store import PoolStore

__all__ = [
    "AggregatedImpact",
    "ConstantProductPool",
    "CostBreakdown",
    "DistributionStrategy",
    "ImpactRiskLevel",
    "InvalidPoolError",
    "MevRisk",
    "NoPoolsError",
    "Pool",
    "PoolAllocation",
    "PoolKind",
    "PoolStore",
    "PriceImpactError",
    "PriceImpactEstimator",
    "PriceImpactResult",
    "SlippageScenario",
    "StableGetBalanceDidNotConverge",
    "StableInvariantDidNotConverge",
    "StableSwapPool",
    "ZeroBalanceError",
]
