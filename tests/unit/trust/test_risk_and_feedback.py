"""Tests for trade risk assessment, incidents and feedback ingestion."""

import asyncio
import random
from datetime import UTC, datetime, timedelta

from dexroute.models.feedback import ExecutionOutcome
from dexroute.trust.model import VenueTrustModel
from dexroute.trust.result import Recommendation, RiskSeverity
from dexroute.trust.store import SyntheticMetricsProvider, VenueMetricsStore
from tests.helpers import UNISWAP_V3, make_metrics


class TestAssessRisk:
    """Tests for VenueTrustModel.assess_risk."""

    def test_small_trade_on_deep_venue_proceeds(self, trust_model):
        assessment = trust_model.assess_risk(UNISWAP_V3, "ethereum", 1_000_000)
        assert assessment.risks == ()
        assert assessment.risk_score == 0
        assert assessment.recommendation is Recommendation.PROCEED

    def test_trade_above_ten_percent_of_depth_is_high(self, trust_model):
        """Seeded depth is 500M: 100M is 20% of it."""
        assessment = trust_model.assess_risk(UNISWAP_V3, "ethereum", 100_000_000)
        assert [r.type for r in assessment.risks] == ["liquidity"]
        assert assessment.risks[0].severity is RiskSeverity.HIGH

    def test_trade_above_thirty_percent_of_depth_is_critical(self, trust_model):
        assessment = trust_model.assess_risk(UNISWAP_V3, "ethereum", 200_000_000)
        assert assessment.risks[0].severity is RiskSeverity.CRITICAL
        assert assessment.risk_score == 25

    def test_unknown_venue_is_avoided(self, trust_model):
        assessment = trust_model.assess_risk("NEW_DEX", "ethereum", 1_000)
        assert assessment.recommendation is Recommendation.AVOID
        assert assessment.risk_score == 80

    def test_low_audit_score_calls_for_caution(self):
        model = VenueTrustModel(VenueMetricsStore([make_metrics("RISKY", audit_score=40)]))
        assessment = model.assess_risk("RISKY", "ethereum", 1_000)
        assert assessment.risks[0].severity is RiskSeverity.CRITICAL
        # 25 for the critical finding plus 20 for an audit score below 50
        assert assessment.risk_score == 45
        assert assessment.recommendation is Recommendation.CAUTION

    def test_compounding_risks_recommend_avoiding(self):
        model = VenueTrustModel(VenueMetricsStore([make_metrics("RISKY", audit_score=40, uptime=85)]))
        # Depth is 20M, so 10M is over 30% of it
        assessment = model.assess_risk("RISKY", "ethereum", 10_000_000)
        assert assessment.risk_score == 85
        assert assessment.recommendation is Recommendation.AVOID

    def test_risk_score_capped_at_100(self):
        metrics = make_metrics("RISKY", audit_score=10, uptime=50, incident_count=5)
        model = VenueTrustModel(VenueMetricsStore([metrics]))
        model.record_incident("RISKY", "ethereum", "exploit")
        assert model.assess_risk("RISKY", "ethereum", 50_000_000).risk_score == 100


class TestIncidents:
    """Recorded incidents feed the security score and the risk assessment."""

    def test_incident_increments_count(self, trust_model):
        before = trust_model.store.get(UNISWAP_V3, "ethereum").security.incident_count
        trust_model.record_incident(UNISWAP_V3, "ethereum", "oracle outage")
        after = trust_model.store.get(UNISWAP_V3, "ethereum").security.incident_count
        assert after == before + 1

    def test_recent_incident_is_reported(self, trust_model):
        trust_model.record_incident(UNISWAP_V3, "ethereum", "oracle outage")
        assessment = trust_model.assess_risk(UNISWAP_V3, "ethereum", 1_000)
        assert [r.severity for r in assessment.risks] == [RiskSeverity.MEDIUM]

    def test_old_incident_outside_window_is_ignored(self, trust_model):
        now = datetime.now(UTC)
        trust_model.record_incident(UNISWAP_V3, "ethereum", "old", occurred_at=now - timedelta(days=200))
        assessment = trust_model.assess_risk(UNISWAP_V3, "ethereum", 1_000, now=now)
        assert assessment.risks == ()


class TestFeedback:
    """Tests for VenueTrustModel.ingest_feedback."""

    def test_failed_trade_moves_metrics_by_capped_step(self, trust_model):
        """Success rate and rating move toward the window average, at most one step."""
        outcome = ExecutionOutcome(successful=False, rating=1)
        updated = trust_model.ingest_feedback(UNISWAP_V3, "ethereum", outcome)

        assert updated is not None
        assert updated.operational.success_rate == 98.5 - 10
        assert updated.ux.interface_rating == 9 - 1
        assert trust_model.store.get(UNISWAP_V3, "ethereum") == updated

    def test_good_feedback_does_not_exceed_target(self, trust_model):
        outcome = ExecutionOutcome(successful=True, rating=5)
        updated = trust_model.ingest_feedback(UNISWAP_V3, "ethereum", outcome)
        # Halfway from 98.5 toward 100
        assert updated.operational.success_rate == 99.25
        assert updated.ux.interface_rating == 9.5

    def test_unknown_venue_returns_none(self, trust_model):
        outcome = ExecutionOutcome(successful=True, rating=4)
        assert trust_model.ingest_feedback("NEW_DEX", "ethereum", outcome) is None

    def test_unknown_venue_feedback_is_not_stored(self, trust_model):
        outcome = ExecutionOutcome(successful=False, rating=1)
        for _ in range(50):
            trust_model.ingest_feedback("NEW_DEX", "ethereum", outcome)
        epoch = datetime(1970, 1, 1, tzinfo=UTC)
        assert trust_model.store.feedback_since("NEW_DEX", "ethereum", epoch) == []

    def test_future_dated_feedback_is_clamped_to_now(self, trust_model):
        """A report dated ahead of ingestion ages out like one received now."""
        now = datetime.now(UTC)
        outcome = ExecutionOutcome(successful=False, rating=1, reported_at=now + timedelta(days=365))
        trust_model.ingest_feedback(UNISWAP_V3, "ethereum", outcome, now=now)

        window = trust_model.store.feedback_since(UNISWAP_V3, "ethereum", now - timedelta(days=7))
        assert [e.received_at for e in window] == [now]
        assert trust_model.store.feedback_since(UNISWAP_V3, "ethereum", now + timedelta(days=1)) == []

    def test_stale_feedback_is_dropped(self, trust_model):
        now = datetime.now(UTC)
        outcome = ExecutionOutcome(successful=False, rating=1, reported_at=now - timedelta(days=8))
        before = trust_model.store.get(UNISWAP_V3, "ethereum")
        assert trust_model.ingest_feedback(UNISWAP_V3, "ethereum", outcome, now=now) == before

    def test_outcome_accepts_camel_case(self):
        outcome = ExecutionOutcome.model_validate(
            {"successful": True, "rating": 4, "actualSlippage": 0.3, "executionTime": 9000}
        )
        assert outcome.actual_slippage == 0.3
        assert outcome.execution_time == 9000


class FailingProvider:
    async def fetch(self, current):
        raise RuntimeError("monitoring feed down")


class TestMetricsStore:
    """Tests for VenueMetricsStore history and refresh."""

    def test_history_is_bounded(self):
        store = VenueMetricsStore([make_metrics("DEX")] * 15, history_size=10)
        assert len(store.history("DEX", "ethereum")) == 10

    def test_refresh_with_synthetic_provider(self):
        store = VenueMetricsStore.with_known_venues()
        provider = SyntheticMetricsProvider(random.Random(3))

        updated = asyncio.run(store.refresh(provider))

        assert updated == 3
        assert len(store.history(UNISWAP_V3, "ethereum")) == 2
        uptime = store.get(UNISWAP_V3, "ethereum").operational.uptime
        assert 85 <= uptime <= 100

    def test_failed_fetch_keeps_previous_snapshot(self):
        store = VenueMetricsStore.with_known_venues()
        before = store.get(UNISWAP_V3, "ethereum")

        updated = asyncio.run(store.refresh(FailingProvider()))

        assert updated == 0
        assert store.get(UNISWAP_V3, "ethereum") is before
