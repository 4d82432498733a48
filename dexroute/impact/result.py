"""Price impact result types."""

from dataclasses import dataclass, field
from enum import Enum


class DistributionStrategy(str, Enum):
    """How an order is spread across pools for the same pair."""

    BEST_PRICE = "best_price"
    MIN_IMPACT = "min_impact"
    BALANCED = "balanced"


class ImpactRiskLevel(str, Enum):
    """Coarse risk bucket for price impact and MEV exposure."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    EXTREME = "extreme"


@dataclass(frozen=True)
class CostBreakdown:
    """Costs of a trade expressed in input token units."""

    swap_fees: float
    protocol_fees: float
    price_movement: float
    total_cost: float


@dataclass(frozen=True)
class PoolAllocation:
    """Portion of an order filled by one pool."""

    venue: str
    amount_in: float
    amount_out: float
    share: float
    price_impact: float
    address: str | None = None


@dataclass(frozen=True)
class PriceImpactResult:
    """Result of pricing a trade against one or more pools.

    A trade whose impact exceeds the caller's max_slippage is not an error:
    the result is returned with ``slippage_exceeded`` set so callers can
    compare candidates uniformly.

    Attributes:
        amount_out: Expected output in token_out units
        spot_price: Marginal price before the trade, excluding fees
        effective_price: amount_out / amount_in
        price_impact: (spot - effective) / spot, in percent
        minimum_amount_out: Output floor implied by max_slippage
        liquidity_utilization: amount_in as a percentage of input-side depth
        allocations: Per-pool fills (single entry for one pool)
    """

    token_in: str
    token_out: str
    amount_in: float
    amount_out: float
    spot_price: float
    effective_price: float
    price_impact: float
    minimum_amount_out: float
    max_slippage: float
    slippage_exceeded: bool
    liquidity_utilization: float
    breakdown: CostBreakdown
    warnings: tuple[str, ...] = ()
    allocations: tuple[PoolAllocation, ...] = ()

    @property
    def is_acceptable(self) -> bool:
        """True if the impact is within the caller's slippage limit."""
        return not self.slippage_exceeded


@dataclass(frozen=True)
class RiskSummary:
    """Risk assessment over a set of pools for one order."""

    level: ImpactRiskLevel
    factors: tuple[str, ...]
    recommendation: str


@dataclass(frozen=True)
class AggregatedImpact:
    """Outcome of spreading an order across pools with a fixed strategy."""

    strategy: DistributionStrategy
    total_amount_out: float
    weighted_average_impact: float
    best_single_pool: PriceImpactResult
    worst_single_pool: PriceImpactResult
    allocations: tuple[PoolAllocation, ...]
    risk: RiskSummary


@dataclass(frozen=True)
class SlippageScenario:
    """Expected outcome of a trade at one slippage tolerance."""

    slippage_tolerance: float
    expected_amount_out: float
    minimum_amount_out: float
    probability: float
    risk_level: ImpactRiskLevel


@dataclass(frozen=True)
class MevRisk:
    """Exposure of an order to sandwiching and other extraction."""

    level: ImpactRiskLevel
    potential_loss: float
    sandwich_attack_risk: float
    recommendations: tuple[str, ...] = field(default_factory=tuple)
