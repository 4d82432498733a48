"""Routing service facade.

Wires the trust model, impact estimator, gas estimator and routing engine
together and owns the background refresh tasks for gas snapshots and venue
metrics.
"""

from __future__ import annotations

import asyncio

import structlog

from dexroute.config import EngineConfig
from dexroute.gas.estimator import FeeGasEstimator
from dexroute.gas.price_feed import CoinGeckoPriceSource, NativePriceFeed
from dexroute.gas.providers import default_providers
from dexroute.gas.result import GasEstimate, GasEstimateRequest
from dexroute.gas.store import GasSnapshotStore, NetworkStatus
from dexroute.impact.estimator import PriceImpactEstimator
from dexroute.impact.store import PoolStore
from dexroute.models.feedback import ExecutionOutcome
from dexroute.models.quote import Quote
from dexroute.models.route import OptimalRoute, RoutingOptions
from dexroute.models.types import Speed
from dexroute.routing.engine import RoutingEngine
from dexroute.routing.types import CandidateRanking
from dexroute.trust.metrics import VenueMetrics
from dexroute.trust.model import VenueTrustModel
from dexroute.trust.result import DexRanking, RankingFilters, RiskAssessment, TrustScore
from dexroute.trust.store import MetricsProvider, SyntheticMetricsProvider, VenueMetricsStore
from dexroute.venues.feed import PoolQuoteFeed, QuoteFeed
from dexroute.venues.registry import VenueRegistry

logger = structlog.get_logger()


class RoutingService:
    """Entry point for routing, gas estimation and venue assessment.

    Every collaborator can be injected; anything omitted is built from the
    configuration. Reads never wait on a refresh in flight.

    Usage:
        service = RoutingService()
        await service.start()
        route = await service.find_optimal_route("USDC", "ETH", 50_000)
        await service.stop()
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        trust_model: VenueTrustModel | None = None,
        pools: PoolStore | None = None,
        gas_store: GasSnapshotStore | None = None,
        prices: NativePriceFeed | None = None,
        registry: VenueRegistry | None = None,
        quote_feed: QuoteFeed | None = None,
        metrics_provider: MetricsProvider | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        cfg = self.config

        self.registry = registry or VenueRegistry()
        self.trust = trust_model or VenueTrustModel(
            VenueMetricsStore.with_known_venues(cfg.trust.history_size), cfg.trust
        )
        self.pools = pools if pools is not None else PoolStore.with_reference_pools()
        self.impact = PriceImpactEstimator(self.pools)
        self.gas_store = gas_store or GasSnapshotStore(
            default_providers(
                cfg.networks,
                etherscan_api_key=cfg.etherscan_api_key,
                rpc_urls=cfg.rpc_urls,
                timeout=cfg.gas.request_timeout,
            ),
            config=cfg.gas,
            networks=cfg.networks,
        )
        self.prices = prices or NativePriceFeed(
            CoinGeckoPriceSource(timeout=cfg.gas.request_timeout), ttl=cfg.gas.native_price_ttl
        )
        self.gas = FeeGasEstimator(
            self.gas_store, self.prices, profiles=lambda venue: self.registry.resolve(venue).gas_profile
        )
        self.engine = RoutingEngine(cfg.routing, self.trust)
        self.quote_feed = quote_feed or PoolQuoteFeed(
            self.impact, self.gas, self.trust, self.registry, cfg.routing.hub_tokens
        )
        self.metrics_provider = metrics_provider or SyntheticMetricsProvider()
        self._tasks: list[asyncio.Task[None]] = []

    # Routing

    async def find_optimal_route(
        self,
        token_in: str,
        token_out: str,
        amount: float,
        network: str = "ethereum",
        options: RoutingOptions | None = None,
        quotes: list[Quote] | None = None,
    ) -> OptimalRoute:
        """Best route for a swap, over the given quotes or the quote feed's.

        Raises:
            NoViableRouteError: If no candidate satisfies the options
        """
        if quotes is None:
            quotes = await self.quote_feed.get_quotes(token_in, token_out, amount, network)
        return self.engine.find_optimal_route(quotes, token_in, token_out, amount, options)

    async def rank_routes(
        self,
        token_in: str,
        token_out: str,
        amount: float,
        network: str = "ethereum",
        options: RoutingOptions | None = None,
    ) -> CandidateRanking:
        quotes = await self.quote_feed.get_quotes(token_in, token_out, amount, network)
        return self.engine.rank_candidates(quotes, token_in, token_out, amount, options)

    # Gas

    async def estimate_gas(
        self,
        venue: str,
        route: list[str] | tuple[str, ...],
        network: str,
        speed: Speed = Speed.STANDARD,
    ) -> GasEstimate:
        return await self.gas.estimate_gas(venue, route, network, speed)

    async def batch_estimate_gas(self, requests: list[GasEstimateRequest]) -> list[GasEstimate]:
        return await self.gas.batch_estimate(requests)

    def network_status(self, network: str) -> NetworkStatus:
        return self.gas.network_status(network)

    def all_network_statuses(self) -> list[NetworkStatus]:
        return self.gas.all_network_statuses()

    # Venues

    def score_venue(self, venue: str, network: str) -> TrustScore:
        return self.trust.score(venue, network)

    def rank_venues(self, network: str, filters: RankingFilters | None = None) -> list[DexRanking]:
        return self.trust.rank(network, filters)

    def assess_risk(self, venue: str, network: str, trade_amount: float) -> RiskAssessment:
        return self.trust.assess_risk(venue, network, trade_amount)

    def report_outcome(self, venue: str, network: str, outcome: ExecutionOutcome) -> VenueMetrics | None:
        return self.trust.ingest_feedback(venue, network, outcome)

    # Background refresh

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    async def start(self) -> None:
        """Start one refresh task for gas snapshots and one for venue metrics."""
        if self.running:
            return
        self._tasks = [
            asyncio.create_task(
                self.gas_store.run_forever(self.config.gas.refresh_interval), name="gas_refresh"
            ),
            asyncio.create_task(
                self.trust.store.run_forever(self.metrics_provider, self.config.trust.refresh_interval),
                name="venue_metrics_refresh",
            ),
        ]
        logger.info("refresh_tasks_started", networks=list(self.config.networks))

    async def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        logger.info("refresh_tasks_stopped")


_default_service: RoutingService | None = None


def get_default_service() -> RoutingService:
    """Process-wide service configured from DEXROUTE_* environment variables."""
    global _default_service
    if _default_service is None:
        _default_service = RoutingService(EngineConfig.from_env())
    return _default_service
