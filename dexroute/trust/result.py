"""Trust model result types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from dexroute.models.types import RiskLevel, Trend


class Recommendation(str, Enum):
    """Action suggested by a trade risk assessment."""

    PROCEED = "proceed"
    CAUTION = "caution"
    AVOID = "avoid"


class RiskSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class VenueCategory(str, Enum):
    """Maturity tier combining score and time in operation."""

    TIER_1 = "tier_1"
    TIER_2 = "tier_2"
    TIER_3 = "tier_3"
    EXPERIMENTAL = "experimental"


@dataclass(frozen=True)
class TrustBreakdown:
    """Category sub-scores, each 0-100."""

    reliability: float
    security: float
    liquidity: float
    cost: float
    user_experience: float


@dataclass(frozen=True)
class TrustScore:
    """Composite trust rating for a venue on a network.

    Attributes:
        overall: Weighted composite, 0-100
        breakdown: Category sub-scores
        trend: Direction of the score over the history window
        risk_level: Tier derived from the overall score
        is_default: True when the venue had no usable metrics and the
            conservative default profile was returned
    """

    venue: str
    network: str
    overall: float
    breakdown: TrustBreakdown
    trend: Trend
    risk_level: RiskLevel
    recommendations: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    is_default: bool = False


@dataclass(frozen=True)
class DexRanking:
    venue: str
    network: str
    rank: int
    score: TrustScore
    category: VenueCategory
    specialties: tuple[str, ...] = ()


@dataclass(frozen=True)
class RankingFilters:
    """Optional constraints for ranking venues.

    Attributes:
        min_liquidity: Minimum liquidity depth (fiat)
        max_risk: Riskiest acceptable tier
        specialty: Only venues with this specialty
    """

    min_liquidity: float | None = None
    max_risk: RiskLevel | None = None
    specialty: str | None = None


@dataclass(frozen=True)
class RiskFinding:
    """One risk identified for a trade."""

    type: str
    severity: RiskSeverity
    description: str
    mitigation: str


@dataclass(frozen=True)
class RiskAssessment:
    """Risks of a specific trade through a venue."""

    venue: str
    network: str
    trade_size: float
    risks: tuple[RiskFinding, ...]
    risk_score: float
    recommendation: Recommendation
    notes: tuple[str, ...] = field(default_factory=tuple)
