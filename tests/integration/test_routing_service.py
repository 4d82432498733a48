"""Integration tests for the routing service over reference pools.

Quotes come from the pool quote feed: price impact from pool math, gas from
the fee estimator and trust from the seeded venue metrics.
"""

import asyncio

import pytest

from dexroute.errors import NoViableRouteError
from dexroute.gas.result import GasEstimateRequest
from dexroute.models.feedback import ExecutionOutcome
from dexroute.models.route import RoutingOptions
from dexroute.routing.types import MarketConditions
from dexroute.service import RoutingService
from tests.helpers import ETH, SUSHISWAP, TRADE_AMOUNT, UNISWAP_V3, USDC, WBTC

pytestmark = pytest.mark.integration


class TestRouteOverReferencePools:
    def test_cheapest_route_by_default(self, service: RoutingService):
        route = asyncio.run(service.find_optimal_route(USDC, ETH, TRADE_AMOUNT))

        assert route.strategy == "single"
        assert route.venues == [SUSHISWAP]
        assert route.total_gas_cost > 0
        assert 0 < route.total_price_impact < 1
        assert route.reliability_score == service.score_venue(SUSHISWAP, "ethereum").overall

    def test_best_score_without_cost_priority(self, service: RoutingService):
        options = RoutingOptions(prioritize_cost=False)
        route = asyncio.run(service.find_optimal_route(USDC, ETH, TRADE_AMOUNT, options=options))
        assert route.venues == [UNISWAP_V3]

    def test_both_venues_considered(self, service: RoutingService):
        ranking = asyncio.run(service.rank_routes(USDC, ETH, TRADE_AMOUNT))
        assert {c.path.venues for c in ranking.accepted} == {(UNISWAP_V3,), (SUSHISWAP,)}
        assert ranking.rejected == []

    def test_deeper_pool_has_less_impact(self, service: RoutingService):
        ranking = asyncio.run(service.rank_routes(USDC, ETH, TRADE_AMOUNT))
        impact = {c.path.venues[0]: c.path.total_price_impact for c in ranking.accepted}
        assert impact[UNISWAP_V3] < impact[SUSHISWAP]

    def test_unquoted_pair(self, service: RoutingService):
        with pytest.raises(NoViableRouteError):
            asyncio.run(service.find_optimal_route(WBTC, ETH, 10))

    def test_reoptimize_with_feed_quotes(self, service: RoutingService):
        async def run():
            quotes = await service.quote_feed.get_quotes(USDC, ETH, TRADE_AMOUNT, "ethereum")
            options = RoutingOptions()
            route = service.engine.find_optimal_route(quotes, USDC, ETH, TRADE_AMOUNT, options)
            congested = service.engine.reoptimize(
                route, quotes, USDC, ETH, TRADE_AMOUNT, options, MarketConditions(congestion=0.9)
            )
            return route, congested

        route, congested = asyncio.run(run())
        assert route.venues == [SUSHISWAP]
        # Cost no longer prioritized: the best-scoring venue wins
        assert congested.venues == [UNISWAP_V3]


class TestGasThroughService:
    def test_batch_skips_unsupported_networks(self, service: RoutingService):
        requests = [
            GasEstimateRequest(UNISWAP_V3, (USDC, ETH), "ethereum"),
            GasEstimateRequest("JUPITER", (USDC, "SOL"), "solana"),
            GasEstimateRequest(SUSHISWAP, (USDC, "WETH", ETH), "ethereum"),
        ]
        estimates = asyncio.run(service.batch_estimate_gas(requests))
        assert len(estimates) == 2
        assert estimates[1].gas_limit > estimates[0].gas_limit


class TestFeedbackLoop:
    def test_failures_lower_trust(self, service: RoutingService):
        before = service.score_venue(SUSHISWAP, "ethereum").overall
        failure = ExecutionOutcome(successful=False, rating=1)
        for _ in range(5):
            service.report_outcome(SUSHISWAP, "ethereum", failure)
        after = service.score_venue(SUSHISWAP, "ethereum").overall
        assert after < before


class TestBackgroundRefresh:
    def test_start_and_stop(self, service: RoutingService):
        async def run():
            await service.start()
            started = service.running
            await service.start()
            task_count = len(service._tasks)
            await service.stop()
            return started, task_count

        started, task_count = asyncio.run(run())
        assert started is True
        assert task_count == 2
        assert service.running is False
