"""Injectable venue metrics store and metrics providers.

The store is a process-local map from (venue, network) to the latest
VenueMetrics snapshot, plus a bounded history of earlier snapshots, the
incident log and the user feedback log. A single background task refreshes
it through a MetricsProvider; readers take snapshots and never block on a
refresh in flight.
"""

from __future__ import annotations

import asyncio
import random
from collections import deque
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Protocol

import structlog

from dexroute.models.feedback import ExecutionOutcome
from dexroute.trust.metrics import VenueMetrics, known_venue_metrics, venue_key

logger = structlog.get_logger()


@dataclass(frozen=True)
class Incident:
    """A recorded security or availability incident."""

    venue: str
    network: str
    occurred_at: datetime
    description: str = ""


@dataclass(frozen=True)
class FeedbackEntry:
    outcome: ExecutionOutcome
    received_at: datetime


class MetricsProvider(Protocol):
    """Source of fresh metrics for a venue already in the store.

    Returns None when the provider has nothing newer. Raising signals a
    failed fetch; the store keeps the previous snapshot.
    """

    async def fetch(self, current: VenueMetrics) -> VenueMetrics | None: ...


class SyntheticMetricsProvider:
    """Random-walk metrics for environments without a monitoring feed.

    Uptime and success rate drift by up to one point per refresh, response
    time by up to 500 ms, daily volume by up to 10%. The random generator is
    injectable so tests can pin the walk.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    async def fetch(self, current: VenueMetrics) -> VenueMetrics | None:
        op = current.operational
        operational = replace(
            op,
            uptime=max(85.0, min(100.0, op.uptime + (self.rng.random() - 0.5) * 2)),
            response_time=max(500.0, op.response_time + (self.rng.random() - 0.5) * 1000),
            success_rate=max(85.0, min(100.0, op.success_rate + (self.rng.random() - 0.5) * 2)),
            volume_24h=op.volume_24h * (1 + (self.rng.random() - 0.5) * 0.2),
        )
        return replace(current, operational=operational, last_updated=datetime.now(UTC))


class VenueMetricsStore:
    """Process-local venue metrics with history, incidents and feedback.

    Usage:
        store = VenueMetricsStore.with_known_venues()
        metrics = store.get("UNISWAP_V3", "ethereum")
        await store.refresh(SyntheticMetricsProvider())
    """

    def __init__(self, metrics: list[VenueMetrics] | None = None, history_size: int = 10) -> None:
        self.history_size = history_size
        self._metrics: dict[tuple[str, str], VenueMetrics] = {}
        self._history: dict[tuple[str, str], deque[VenueMetrics]] = {}
        self._incidents: dict[tuple[str, str], list[Incident]] = {}
        self._feedback: dict[tuple[str, str], list[FeedbackEntry]] = {}
        for entry in metrics or []:
            self.update(entry)

    @classmethod
    def with_known_venues(cls, history_size: int = 10) -> VenueMetricsStore:
        return cls(known_venue_metrics(), history_size=history_size)

    def get(self, venue: str, network: str) -> VenueMetrics | None:
        return self._metrics.get(venue_key(venue, network))

    def history(self, venue: str, network: str) -> list[VenueMetrics]:
        """Snapshots oldest first, including the current one."""
        return list(self._history.get(venue_key(venue, network), ()))

    def venues_on(self, network: str) -> list[VenueMetrics]:
        network_norm = network.strip().lower()
        return [m for (_, net), m in sorted(self._metrics.items()) if net == network_norm]

    def update(self, metrics: VenueMetrics) -> None:
        """Install a new snapshot and append it to the history window."""
        key = metrics.key
        self._metrics[key] = metrics
        history = self._history.setdefault(key, deque(maxlen=self.history_size))
        history.append(metrics)

    def record_incident(self, incident: Incident) -> None:
        key = venue_key(incident.venue, incident.network)
        self._incidents.setdefault(key, []).append(incident)
        current = self._metrics.get(key)
        if current is not None:
            security = replace(current.security, incident_count=current.security.incident_count + 1)
            self.update(replace(current, security=security, last_updated=datetime.now(UTC)))

    def incidents(self, venue: str, network: str) -> list[Incident]:
        return list(self._incidents.get(venue_key(venue, network), ()))

    def add_feedback(self, venue: str, network: str, entry: FeedbackEntry) -> None:
        self._feedback.setdefault(venue_key(venue, network), []).append(entry)

    def feedback_since(self, venue: str, network: str, since: datetime) -> list[FeedbackEntry]:
        """Feedback received at or after ``since``; older entries are dropped."""
        key = venue_key(venue, network)
        recent = [e for e in self._feedback.get(key, ()) if e.received_at >= since]
        self._feedback[key] = recent
        return list(recent)

    async def refresh(self, provider: MetricsProvider) -> int:
        """Poll the provider for every known venue.

        A failed fetch keeps the venue's previous snapshot.

        Returns:
            Number of venues updated
        """
        updated = 0
        for key, current in list(self._metrics.items()):
            try:
                fresh = await provider.fetch(current)
            except Exception as exc:
                logger.warning("venue_metrics_fetch_failed", venue=key[0], network=key[1], error=str(exc))
                continue
            if fresh is not None:
                self.update(fresh)
                updated += 1
        logger.debug("venue_metrics_refreshed", updated=updated, total=len(self._metrics))
        return updated

    async def run_forever(self, provider: MetricsProvider, interval: float) -> None:
        """Refresh on a fixed timer until cancelled."""
        while True:
            await self.refresh(provider)
            await asyncio.sleep(interval)
