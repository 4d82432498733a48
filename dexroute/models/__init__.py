"""Pydantic models and shared types for the routing engine."""

from dexroute.models.feedback import ExecutionOutcome
from dexroute.models.quote import FeeBreakdown, Quote, QuoteMetadata
from dexroute.models.route import OptimalRoute, RouteStep, RoutingOptions
from dexroute.models.types import (
    Amount,
    Network,
    PathStrategy,
    Percentage,
    RiskLevel,
    RiskTolerance,
    Speed,
    TokenSymbol,
    Trend,
    normalize_network,
    normalize_symbol,
)

__all__ = [
    "Amount",
    "ExecutionOutcome",
    "FeeBreakdown",
    "Network",
    "OptimalRoute",
    "PathStrategy",
    "Percentage",
    "Quote",
    "QuoteMetadata",
    "RiskLevel",
    "RiskTolerance",
    "RouteStep",
    "RoutingOptions",
    "Speed",
    "TokenSymbol",
    "Trend",
    "normalize_network",
    "normalize_symbol",
]
