"""Venue trust model.

Module structure:
- metrics.py: VenueMetrics and its operational, security, fee and UX parts
- store.py: VenueMetricsStore with history, incidents, feedback and refresh
- model.py: VenueTrustModel scoring, ranking and risk assessment
- result.py: TrustScore, DexRanking, RiskAssessment and related types
"""

from dexroute.trust.metrics import (
    FeeSchedule,
    OperationalMetrics,
    SecurityMetrics,
    UXMetrics,
    VenueMetrics,
    known_venue_metrics,
    venue_key,
)
from dexroute.trust.model import (
    DEFAULT_TRUST_SCORE,
    VenueTrustModel,
    composite_score,
    compute_breakdown,
    risk_level_for,
)
from dexroute.trust.result import (
    DexRanking,
    RankingFilters,
    Recommendation,
    RiskAssessment,
    RiskFinding,
    RiskSeverity,
    TrustBreakdown,
    TrustScore,
    VenueCategory,
)
from dexroute.trust.store import (
    FeedbackEntry,
    Incident,
    MetricsProvider,
    SyntheticMetricsProvider,
    VenueMetricsStore,
)

__all__ = [
    "DEFAULT_TRUST_SCORE",
    "DexRanking",
    "FeeSchedule",
    "FeedbackEntry",
    "Incident",
    "MetricsProvider",
    "OperationalMetrics",
    "RankingFilters",
    "Recommendation",
    "RiskAssessment",
    "RiskFinding",
    "RiskSeverity",
    "SecurityMetrics",
    "SyntheticMetricsProvider",
    "TrustBreakdown",
    "TrustScore",
    "UXMetrics",
    "VenueCategory",
    "VenueMetrics",
    "VenueMetricsStore",
    "VenueTrustModel",
    "composite_score",
    "compute_breakdown",
    "known_venue_metrics",
    "risk_level_for",
    "venue_key",
]
