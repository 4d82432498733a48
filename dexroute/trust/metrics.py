"""Per-venue metrics consumed by the trust model.

Metrics are immutable snapshots; stores replace them rather than mutating
fields, so a snapshot handed to a reader never changes underneath it.
"""

from __future__ import annotations

import math
from dataclasses import astuple, dataclass, field
from datetime import UTC, datetime


@dataclass(frozen=True)
class OperationalMetrics:
    """Observed behaviour of a venue's contracts and API.

    Attributes:
        uptime: Percent of time the venue was available
        response_time: Mean quote latency in milliseconds
        success_rate: Percent of submitted trades that succeeded
        liquidity_depth: Fiat depth available near the mid price
        volume_24h: Fiat volume over the last day
        total_value_locked: Fiat TVL
        slippage_accuracy: Percent agreement of quoted vs realised slippage
        api_reliability: Percent of API calls that succeeded
    """

    uptime: float
    response_time: float
    success_rate: float
    liquidity_depth: float
    volume_24h: float
    total_value_locked: float
    slippage_accuracy: float
    api_reliability: float


@dataclass(frozen=True)
class SecurityMetrics:
    audit_score: float
    bug_bounty: bool
    months_in_operation: float
    incident_count: int
    insurance_coverage: float


@dataclass(frozen=True)
class FeeSchedule:
    """Fees as fractions (0.003 = 0.3%), gas relative to a reference swap."""

    trading_fee: float
    protocol_fee: float
    gas_cost_multiplier: float


@dataclass(frozen=True)
class UXMetrics:
    """Ratings on a 0-10 scale plus community size."""

    interface_rating: float
    support_quality: float
    documentation_quality: float
    community_size: float


@dataclass(frozen=True)
class VenueMetrics:
    """Complete metrics snapshot for one (venue, network) pair."""

    venue: str
    network: str
    base_score: float
    operational: OperationalMetrics
    security: SecurityMetrics
    fees: FeeSchedule
    ux: UXMetrics
    last_updated: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def key(self) -> tuple[str, str]:
        return venue_key(self.venue, self.network)

    def is_well_formed(self) -> bool:
        """True if every numeric metric is finite and non-negative."""
        values = (
            self.base_score,
            *astuple(self.operational),
            *astuple(self.security),
            *astuple(self.fees),
            *astuple(self.ux),
        )
        for value in values:
            if isinstance(value, bool):
                continue
            if not isinstance(value, int | float) or not math.isfinite(value) or value < 0:
                return False
        return True


def venue_key(venue: str, network: str) -> tuple[str, str]:
    """Store key for a venue: upper-case venue id, lower-case network."""
    return venue.strip().upper(), network.strip().lower()


def known_venue_metrics() -> list[VenueMetrics]:
    """Metrics for venues with an established track record."""
    return [
        VenueMetrics(
            venue="UNISWAP_V3",
            network="ethereum",
            base_score=92,
            operational=OperationalMetrics(
                uptime=99.5,
                response_time=800,
                success_rate=98.5,
                liquidity_depth=500_000_000,
                volume_24h=1_200_000_000,
                total_value_locked=3_500_000_000,
                slippage_accuracy=95,
                api_reliability=99,
            ),
            security=SecurityMetrics(
                audit_score=95,
                bug_bounty=True,
                months_in_operation=36,
                incident_count=1,
                insurance_coverage=50_000_000,
            ),
            fees=FeeSchedule(trading_fee=0.003, protocol_fee=0.0, gas_cost_multiplier=1.0),
            ux=UXMetrics(
                interface_rating=9,
                support_quality=8,
                documentation_quality=9,
                community_size=2_000_000,
            ),
        ),
        VenueMetrics(
            venue="SUSHISWAP",
            network="ethereum",
            base_score=85,
            operational=OperationalMetrics(
                uptime=98.5,
                response_time=1200,
                success_rate=97,
                liquidity_depth=200_000_000,
                volume_24h=300_000_000,
                total_value_locked=800_000_000,
                slippage_accuracy=92,
                api_reliability=96,
            ),
            security=SecurityMetrics(
                audit_score=88,
                bug_bounty=True,
                months_in_operation=30,
                incident_count=2,
                insurance_coverage=20_000_000,
            ),
            fees=FeeSchedule(trading_fee=0.003, protocol_fee=0.0005, gas_cost_multiplier=0.95),
            ux=UXMetrics(
                interface_rating=8,
                support_quality=7,
                documentation_quality=8,
                community_size=800_000,
            ),
        ),
        VenueMetrics(
            venue="JUPITER",
            network="solana",
            base_score=88,
            operational=OperationalMetrics(
                uptime=98,
                response_time=600,
                success_rate=96,
                liquidity_depth=150_000_000,
                volume_24h=400_000_000,
                total_value_locked=600_000_000,
                slippage_accuracy=90,
                api_reliability=97,
            ),
            security=SecurityMetrics(
                audit_score=85,
                bug_bounty=True,
                months_in_operation=18,
                incident_count=0,
                insurance_coverage=10_000_000,
            ),
            fees=FeeSchedule(trading_fee=0.001, protocol_fee=0.0001, gas_cost_multiplier=0.01),
            ux=UXMetrics(
                interface_rating=9,
                support_quality=8,
                documentation_quality=8,
                community_size=500_000,
            ),
        ),
    ]
