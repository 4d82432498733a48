"""Venue trust model.

Derives a composite 0-100 trust score for a (venue, network) pair from its
VenueMetrics, using fixed category formulas:

    reliability = mean(uptime, max(0, 100 - response_ms / 100), success_rate, api_reliability)
    security    = 0.4 audit + 0.2 min(100, months / 12 * 20) + 0.2 max(0, 100 - 20 incidents)
                  + 0.1 (20 if bounty) + 0.1 (15 if insured)
    liquidity   = min(100, depth / 10M * 50) + min(100, volume / 50M * 30) + min(100, tvl / 100M * 20)
    cost        = mean(100 - trading_fee * 1e4, 100 - protocol_fee * 1e4, 100 - (gas_mult - 1) * 50)
    ux          = mean(interface * 10, support * 10, docs * 10, min(100, community / 100k * 25))

    overall = 0.25 reliability + 0.25 security + 0.20 liquidity + 0.15 cost + 0.15 ux

Unknown venues and venues with malformed metrics get a fixed conservative
profile (overall 30, risk tier very_high) instead of failing.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime, timedelta

import structlog

from dexroute.config import TrustConfig
from dexroute.models.feedback import ExecutionOutcome
from dexroute.models.types import RISK_LEVEL_ORDER, RiskLevel, Trend
from dexroute.trust.metrics import VenueMetrics
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
from dexroute.trust.store import FeedbackEntry, Incident, VenueMetricsStore

logger = structlog.get_logger()

CATEGORY_WEIGHTS = {
    "reliability": 0.25,
    "security": 0.25,
    "liquidity": 0.20,
    "cost": 0.15,
    "user_experience": 0.15,
}

DEFAULT_TRUST_SCORE = 30.0
DEFAULT_BREAKDOWN = TrustBreakdown(
    reliability=30, security=20, liquidity=30, cost=40, user_experience=30
)

# Points added to a trade's risk score per finding
SEVERITY_POINTS = {
    RiskSeverity.CRITICAL: 25,
    RiskSeverity.HIGH: 15,
    RiskSeverity.MEDIUM: 10,
    RiskSeverity.LOW: 5,
}


def reliability_score(metrics: VenueMetrics) -> float:
    op = metrics.operational
    response_score = max(0.0, 100 - op.response_time / 100)
    return round((op.uptime + response_score + op.success_rate + op.api_reliability) / 4)


def security_score(metrics: VenueMetrics) -> float:
    sec = metrics.security
    return round(
        sec.audit_score * 0.4
        + min(100.0, sec.months_in_operation / 12 * 20) * 0.2
        + max(0.0, 100 - sec.incident_count * 20) * 0.2
        + (20 if sec.bug_bounty else 0) * 0.1
        + (15 if sec.insurance_coverage > 0 else 0) * 0.1
    )


def liquidity_score(metrics: VenueMetrics) -> float:
    op = metrics.operational
    score = (
        min(100.0, op.liquidity_depth / 10_000_000 * 50)
        + min(100.0, op.volume_24h / 50_000_000 * 30)
        + min(100.0, op.total_value_locked / 100_000_000 * 20)
    )
    return round(min(100.0, score))


def cost_score(metrics: VenueMetrics) -> float:
    fees = metrics.fees
    trading = max(0.0, 100 - fees.trading_fee * 10_000)
    protocol = max(0.0, 100 - fees.protocol_fee * 10_000)
    gas = max(0.0, 100 - (fees.gas_cost_multiplier - 1) * 50)
    return round(min(100.0, (trading + protocol + gas) / 3))


def ux_score(metrics: VenueMetrics) -> float:
    ux = metrics.ux
    community = min(100.0, ux.community_size / 100_000 * 25)
    return round(
        (ux.interface_rating * 10 + ux.support_quality * 10 + ux.documentation_quality * 10 + community) / 4
    )


def compute_breakdown(metrics: VenueMetrics) -> TrustBreakdown:
    return TrustBreakdown(
        reliability=reliability_score(metrics),
        security=security_score(metrics),
        liquidity=liquidity_score(metrics),
        cost=cost_score(metrics),
        user_experience=ux_score(metrics),
    )


def composite_score(breakdown: TrustBreakdown) -> float:
    return round(
        breakdown.reliability * CATEGORY_WEIGHTS["reliability"]
        + breakdown.security * CATEGORY_WEIGHTS["security"]
        + breakdown.liquidity * CATEGORY_WEIGHTS["liquidity"]
        + breakdown.cost * CATEGORY_WEIGHTS["cost"]
        + breakdown.user_experience * CATEGORY_WEIGHTS["user_experience"]
    )


def risk_level_for(score: float) -> RiskLevel:
    if score >= 90:
        return RiskLevel.VERY_LOW
    if score >= 75:
        return RiskLevel.LOW
    if score >= 60:
        return RiskLevel.MEDIUM
    if score >= 40:
        return RiskLevel.HIGH
    return RiskLevel.VERY_HIGH


def categorize(score: float, metrics: VenueMetrics) -> VenueCategory:
    months = metrics.security.months_in_operation
    if score >= 80 and months >= 24:
        return VenueCategory.TIER_1
    if score >= 60 and months >= 12:
        return VenueCategory.TIER_2
    if score >= 40 and months >= 6:
        return VenueCategory.TIER_3
    return VenueCategory.EXPERIMENTAL


def specialties_of(metrics: VenueMetrics) -> tuple[str, ...]:
    specialties = []
    if metrics.fees.gas_cost_multiplier < 0.8:
        specialties.append("gas_efficiency")
    if metrics.operational.liquidity_depth > 50_000_000:
        specialties.append("large_trades")
    if metrics.fees.trading_fee < 0.001:
        specialties.append("low_fees")
    if metrics.operational.response_time < 1000:
        specialties.append("fast_execution")
    return tuple(specialties)


def _clamp_step(current: float, target: float, weight: float, max_step: float) -> float:
    step = weight * (target - current)
    return current + max(-max_step, min(max_step, step))


class VenueTrustModel:
    """Scores, ranks and risk-assesses venues from a VenueMetricsStore.

    Scoring only reads the store, so routing requests can call ``score``
    concurrently with each other. Feedback ingestion and incident recording
    write to the store.
    """

    def __init__(self, store: VenueMetricsStore | None = None, config: TrustConfig | None = None) -> None:
        self.store = store if store is not None else VenueMetricsStore.with_known_venues()
        self.config = config or TrustConfig()

    def knows(self, venue: str, network: str) -> bool:
        """True if the venue has usable metrics on the network."""
        metrics = self.store.get(venue, network)
        return metrics is not None and metrics.is_well_formed()

    def score(self, venue: str, network: str) -> TrustScore:
        """Composite trust score for a venue on a network."""
        metrics = self.store.get(venue, network)
        if metrics is None:
            return self.default_score(venue, network)
        if not metrics.is_well_formed():
            logger.warning("malformed_venue_metrics", venue=venue, network=network)
            return self.default_score(venue, network)

        breakdown = compute_breakdown(metrics)
        overall = composite_score(breakdown)
        recommendations, warnings = self._insights(metrics, overall)
        return TrustScore(
            venue=metrics.venue,
            network=metrics.network,
            overall=overall,
            breakdown=breakdown,
            trend=self._trend(venue, network),
            risk_level=risk_level_for(overall),
            recommendations=recommendations,
            warnings=warnings,
        )

    def default_score(self, venue: str, network: str) -> TrustScore:
        """Conservative profile for venues without usable metrics."""
        return TrustScore(
            venue=venue,
            network=network,
            overall=DEFAULT_TRUST_SCORE,
            breakdown=DEFAULT_BREAKDOWN,
            trend=Trend.STABLE,
            risk_level=RiskLevel.VERY_HIGH,
            recommendations=("Unverified venue, use with extreme caution",),
            warnings=(
                "Insufficient data for a complete assessment",
                "Consider established venues",
            ),
            is_default=True,
        )

    def _trend(self, venue: str, network: str) -> Trend:
        history = self.store.history(venue, network)
        if len(history) < 2:
            return Trend.STABLE
        window = self.config.trend_window
        recent = history[-window:]
        older = history[-2 * window : -window]
        if not older:
            return Trend.STABLE

        def mean_score(snapshots: list[VenueMetrics]) -> float:
            return sum(composite_score(compute_breakdown(m)) for m in snapshots) / len(snapshots)

        older_avg = mean_score(older)
        if older_avg <= 0:
            return Trend.STABLE
        change = (mean_score(recent) - older_avg) / older_avg
        if change > self.config.trend_threshold:
            return Trend.IMPROVING
        if change < -self.config.trend_threshold:
            return Trend.DECLINING
        return Trend.STABLE

    @staticmethod
    def _insights(metrics: VenueMetrics, overall: float) -> tuple[tuple[str, ...], tuple[str, ...]]:
        recommendations: list[str] = []
        warnings: list[str] = []
        if overall >= 80:
            recommendations.append("Highly trusted venue, suitable for large volumes")
        elif overall >= 60:
            recommendations.append("Trusted venue, suitable for general use")
        elif overall >= 40:
            recommendations.append("Moderate risk venue, use with caution")
            warnings.append("Monitor transactions closely")
        else:
            warnings.append("High risk venue, consider alternatives")
            warnings.append("Not recommended for large volumes")

        if metrics.operational.uptime < 95:
            warnings.append("Unstable uptime in recent periods")
        if metrics.operational.response_time > 5000:
            warnings.append("High response times")
        if metrics.security.audit_score < 70:
            warnings.append("Low audit score")
        if metrics.operational.liquidity_depth < 1_000_000:
            warnings.append("Limited liquidity, high slippage risk")
        return tuple(recommendations), tuple(warnings)

    def rank(self, network: str, filters: RankingFilters | None = None) -> list[DexRanking]:
        """Rank the venues known on a network by trust score.

        Malformed entries are ranked with the default profile rather than
        failing the ranking. Ties are broken by venue name.
        """
        filters = filters or RankingFilters()
        candidates = self.store.venues_on(network)
        if filters.min_liquidity is not None:
            candidates = [
                m for m in candidates if m.operational.liquidity_depth >= filters.min_liquidity
            ]

        entries = []
        for metrics in candidates:
            score = self.score(metrics.venue, metrics.network)
            specialties = specialties_of(metrics) if not score.is_default else ()
            if filters.max_risk is not None and RISK_LEVEL_ORDER.index(
                score.risk_level
            ) > RISK_LEVEL_ORDER.index(filters.max_risk):
                continue
            if filters.specialty is not None and filters.specialty not in specialties:
                continue
            entries.append((score, categorize(score.overall, metrics), specialties))

        entries.sort(key=lambda e: (-e[0].overall, e[0].venue))
        return [
            DexRanking(
                venue=score.venue,
                network=score.network,
                rank=index + 1,
                score=score,
                category=category,
                specialties=specialties,
            )
            for index, (score, category, specialties) in enumerate(entries)
        ]

    def assess_risk(
        self,
        venue: str,
        network: str,
        trade_size: float,
        now: datetime | None = None,
    ) -> RiskAssessment:
        """Assess the risks of a specific trade through a venue.

        Args:
            venue: Venue identifier
            network: Network name
            trade_size: Trade value in the same fiat unit as liquidity depth
            now: Reference time for the incident window (default: now)
        """
        now = now or datetime.now(UTC)
        metrics = self.store.get(venue, network)
        if metrics is None or not metrics.is_well_formed():
            return RiskAssessment(
                venue=venue,
                network=network,
                trade_size=trade_size,
                risks=(
                    RiskFinding(
                        type="smart_contract",
                        severity=RiskSeverity.HIGH,
                        description="Unrecognised venue or insufficient data",
                        mitigation="Use established, audited venues only",
                    ),
                ),
                risk_score=80,
                recommendation=Recommendation.AVOID,
            )

        risks = []
        depth = metrics.operational.liquidity_depth
        if trade_size > depth * 0.1:
            risks.append(
                RiskFinding(
                    type="liquidity",
                    severity=RiskSeverity.CRITICAL if trade_size > depth * 0.3 else RiskSeverity.HIGH,
                    description="Trade is a significant share of available liquidity",
                    mitigation="Split the trade into several smaller transactions",
                )
            )

        audit = metrics.security.audit_score
        if audit < 70:
            risks.append(
                RiskFinding(
                    type="smart_contract",
                    severity=RiskSeverity.CRITICAL if audit < 50 else RiskSeverity.HIGH,
                    description="Low audit score",
                    mitigation="Check recent audits and consider an alternative venue",
                )
            )

        window_start = now - timedelta(days=self.config.incident_window_days)
        recent = [i for i in self.store.incidents(venue, network) if i.occurred_at >= window_start]
        if recent:
            risks.append(
                RiskFinding(
                    type="smart_contract",
                    severity=RiskSeverity.MEDIUM,
                    description=f"{len(recent)} incident(s) in the last {self.config.incident_window_days} days",
                    mitigation="Monitor the situation and consider waiting for it to stabilise",
                )
            )

        risk_score = sum(SEVERITY_POINTS[r.severity] for r in risks)
        if audit < 50:
            risk_score += 20
        if metrics.operational.uptime < 90:
            risk_score += 15
        if metrics.security.incident_count > 2:
            risk_score += 10
        risk_score = min(100, risk_score)

        if risk_score > 70:
            recommendation = Recommendation.AVOID
        elif risk_score > 40:
            recommendation = Recommendation.CAUTION
        else:
            recommendation = Recommendation.PROCEED

        return RiskAssessment(
            venue=metrics.venue,
            network=metrics.network,
            trade_size=trade_size,
            risks=tuple(risks),
            risk_score=risk_score,
            recommendation=recommendation,
        )

    def record_incident(
        self, venue: str, network: str, description: str = "", occurred_at: datetime | None = None
    ) -> None:
        self.store.record_incident(
            Incident(
                venue=venue,
                network=network,
                occurred_at=occurred_at or datetime.now(UTC),
                description=description,
            )
        )
        logger.info("venue_incident_recorded", venue=venue, network=network)

    def ingest_feedback(
        self,
        venue: str,
        network: str,
        outcome: ExecutionOutcome,
        now: datetime | None = None,
    ) -> VenueMetrics | None:
        """Blend a user-reported outcome into the venue's metrics.

        Success rate and interface rating move toward the averages of the
        feedback window by ``feedback_decay``, and each move is capped at
        ``max_feedback_step`` points (scaled to the 0-10 rating range for
        the interface rating).

        Returns:
            The updated metrics, or None if the venue is unknown
        """
        now = now or datetime.now(UTC)
        metrics = self.store.get(venue, network)
        if metrics is None or not metrics.is_well_formed():
            logger.info("feedback_for_unknown_venue", venue=venue, network=network)
            return None

        # Never later than ingestion time
        received_at = now
        if outcome.reported_at is not None:
            reported_at = outcome.reported_at
            if reported_at.tzinfo is None:
                reported_at = reported_at.replace(tzinfo=UTC)
            received_at = min(reported_at, now)
        self.store.add_feedback(venue, network, FeedbackEntry(outcome=outcome, received_at=received_at))

        since = now - timedelta(seconds=self.config.feedback_window_seconds)
        window = self.store.feedback_since(venue, network, since)
        if not window:
            return metrics

        avg_rating = sum(e.outcome.rating for e in window) / len(window)
        window_success = sum(1 for e in window if e.outcome.successful) / len(window) * 100

        decay = self.config.feedback_decay
        max_step = self.config.max_feedback_step
        success_rate = _clamp_step(metrics.operational.success_rate, window_success, decay, max_step)
        interface_rating = _clamp_step(
            metrics.ux.interface_rating, min(10.0, avg_rating * 2), decay, max_step / 10
        )

        updated = replace(
            metrics,
            operational=replace(metrics.operational, success_rate=success_rate),
            ux=replace(metrics.ux, interface_rating=interface_rating),
            last_updated=now,
        )
        self.store.update(updated)
        logger.info(
            "venue_feedback_ingested",
            venue=venue,
            network=network,
            window_size=len(window),
            success_rate=round(success_rate, 2),
            interface_rating=round(interface_rating, 2),
        )
        return updated
