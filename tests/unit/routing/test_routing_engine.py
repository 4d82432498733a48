"""Tests for the routing engine: candidate filtering, selection, splitting
and re-optimization under market conditions."""

import math
import random

import pytest

from dexroute.errors import NoViableRouteError
from dexroute.models.route import RoutingOptions
from dexroute.models.types import RiskTolerance
from dexroute.routing.engine import RoutingEngine
from dexroute.routing.types import MarketConditions
from dexroute.trust.model import VenueTrustModel
from tests.helpers import ETH, TRADE_AMOUNT, UNISWAP_V3, USDC, WETH, make_quote


class TestDirectRouting:
    """Single-hop routes from direct quotes."""

    def test_low_trust_venue_filtered(self, engine: RoutingEngine):
        quotes = [
            make_quote("VENUE_A", price_impact=0.1, trust_score=95),
            make_quote("VENUE_B", price_impact=0.5, trust_score=60),
        ]
        route = engine.find_optimal_route(quotes, USDC, ETH, TRADE_AMOUNT)

        assert route.strategy == "single"
        assert route.venues == ["VENUE_A"]
        assert route.steps[0].percentage == 100.0
        assert route.total_amount_out == pytest.approx(TRADE_AMOUNT * 0.999 * 0.997)
        assert route.total_price_impact == pytest.approx(0.1)
        assert route.reliability_score == 95

    def test_output_fold(self, engine: RoutingEngine):
        route = engine.find_optimal_route([make_quote(price_impact=0.1)], USDC, ETH, 1000)
        assert route.total_amount_out == pytest.approx(996.003)

    def test_lowercase_symbols(self, engine: RoutingEngine):
        route = engine.find_optimal_route([make_quote()], "usdc", "eth", 1000)
        assert route.steps[0].token_in == USDC
        assert route.steps[0].token_out == ETH

    def test_cheapest_wins_by_default(self, engine: RoutingEngine):
        quotes = [
            make_quote("EXPENSIVE", price_impact=0.1, gas_cost_usd=30),
            make_quote("CHEAP", price_impact=0.2, gas_cost_usd=2),
        ]
        route = engine.find_optimal_route(quotes, USDC, ETH, 500)
        assert route.venues == ["CHEAP"]

    def test_fastest_wins_when_speed_prioritized(self, engine: RoutingEngine):
        quotes = [
            make_quote("SLOW", execution_time=12_000),
            make_quote("FAST", execution_time=400, gas_cost_usd=20),
        ]
        options = RoutingOptions(prioritize_speed=True)
        route = engine.find_optimal_route(quotes, USDC, ETH, 500, options)
        assert route.venues == ["FAST"]
        assert route.execution_time == 400


class TestConstraints:
    def test_shallow_liquidity_rejected(self, engine: RoutingEngine):
        quotes = [make_quote(liquidity_usd=500)]
        options = RoutingOptions(risk_tolerance=RiskTolerance.LOW)

        with pytest.raises(NoViableRouteError) as exc_info:
            engine.find_optimal_route(quotes, USDC, ETH, 1000, options)

        assert "liquidity" in exc_info.value.reason
        assert len(exc_info.value.rejected) == 1

    def test_trade_value_used_for_liquidity(self, engine: RoutingEngine):
        """A small token amount can still be a large fiat trade."""
        quotes = [make_quote(liquidity_usd=100_000)]
        options = RoutingOptions(trade_value_usd=50_000)
        with pytest.raises(NoViableRouteError):
            engine.find_optimal_route(quotes, USDC, ETH, 20, options)

    def test_gas_over_budget_rejected(self, engine: RoutingEngine):
        with pytest.raises(NoViableRouteError) as exc_info:
            engine.find_optimal_route([make_quote(gas_cost_usd=150)], USDC, ETH, 500)
        assert "gas cost" in exc_info.value.reason

    def test_trust_floor_follows_risk_tolerance(self, engine: RoutingEngine):
        quotes = [make_quote(trust_score=80)]
        with pytest.raises(NoViableRouteError):
            engine.find_optimal_route(quotes, USDC, ETH, 500, RoutingOptions(risk_tolerance=RiskTolerance.LOW))

        route = engine.find_optimal_route(quotes, USDC, ETH, 500, RoutingOptions(risk_tolerance=RiskTolerance.HIGH))
        assert route.reliability_score == 80

    def test_no_quotes_for_pair(self, engine: RoutingEngine):
        with pytest.raises(NoViableRouteError, match="No quotes connect USDC to ETH"):
            engine.find_optimal_route([], USDC, ETH, 500)

    def test_rejected_reasons_reported(self, engine: RoutingEngine):
        quotes = [make_quote("VENUE_A", price_impact=3.0), make_quote("VENUE_B", trust_score=10)]
        with pytest.raises(NoViableRouteError) as exc_info:
            engine.find_optimal_route(quotes, USDC, ETH, 500)

        reasons = {r.path.venues: r.reasons for r in exc_info.value.rejected}
        assert "max slippage" in reasons[("VENUE_A",)][0]
        assert "risk floor" in reasons[("VENUE_B",)][0]

    @pytest.mark.parametrize("amount", [0, -5, math.nan, math.inf])
    def test_invalid_amount(self, engine: RoutingEngine, amount):
        with pytest.raises(ValueError):
            engine.find_optimal_route([make_quote()], USDC, ETH, amount)

    def test_monotonic_in_slippage(self, engine: RoutingEngine):
        """Loosening max slippage never removes a viable candidate."""
        quotes = [make_quote(f"V{i}", price_impact=impact) for i, impact in enumerate((0.2, 0.6, 1.2, 2.5))]
        counts = [
            len(engine.rank_candidates(quotes, USDC, ETH, 500, RoutingOptions(max_slippage=s)).accepted)
            for s in (0.1, 0.5, 1.0, 2.0, 3.0)
        ]
        assert counts == sorted(counts)
        assert counts[0] == 0
        assert counts[-1] == 4


class TestDeterminism:
    def test_quote_order_does_not_matter(self, engine: RoutingEngine):
        quotes = [
            make_quote("ALPHA", price_impact=0.3, gas_cost_usd=4),
            make_quote("BETA", price_impact=0.3, gas_cost_usd=4),
            make_quote("GAMMA", price_impact=0.6, gas_cost_usd=3),
            make_quote("ALPHA", token_out=WETH, price_impact=0.1),
            make_quote("BETA", token_in=WETH, price_impact=0.1),
        ]
        expected = engine.find_optimal_route(quotes, USDC, ETH, TRADE_AMOUNT).model_dump()

        rng = random.Random(3)
        for _ in range(5):
            shuffled = list(quotes)
            rng.shuffle(shuffled)
            assert engine.find_optimal_route(shuffled, USDC, ETH, TRADE_AMOUNT).model_dump() == expected

    def test_ties_broken_by_venue(self, engine: RoutingEngine):
        quotes = [make_quote("ZETA"), make_quote("ALPHA")]
        route = engine.find_optimal_route(quotes, USDC, ETH, 500)
        assert route.venues == ["ALPHA"]


class TestSplitRouting:
    def split_quotes(self):
        return [
            make_quote("ALPHA", price_impact=0.8, trust_score=95, gas_cost_usd=5),
            make_quote("BETA", price_impact=0.8, trust_score=95, gas_cost_usd=5),
        ]

    def test_large_order_split(self, engine: RoutingEngine):
        route = engine.find_optimal_route(self.split_quotes(), USDC, ETH, TRADE_AMOUNT)

        assert route.strategy == "split"
        assert len(route.steps) == 2
        assert [s.percentage for s in route.steps] == [50.0, 50.0]
        assert [s.amount_in for s in route.steps] == [25_000, 25_000]
        assert route.total_gas_cost == 10
        assert route.total_price_impact == pytest.approx(0.4)
        assert route.total_amount_out > TRADE_AMOUNT * 0.992 * 0.997

    def test_split_over_gas_budget_falls_back(self, engine: RoutingEngine):
        options = RoutingOptions(max_gas_cost=8)
        route = engine.find_optimal_route(self.split_quotes(), USDC, ETH, TRADE_AMOUNT, options)
        assert route.strategy == "single"
        assert route.venues == ["ALPHA"]

    def test_small_order_not_split(self, engine: RoutingEngine):
        route = engine.find_optimal_route(self.split_quotes(), USDC, ETH, 500)
        assert route.strategy == "single"


class TestMultiHopRouting:
    def hub_quotes(self):
        return [
            make_quote("ALPHA", token_in=USDC, token_out=WETH, price_impact=0.1, gas_cost_usd=4),
            make_quote("BETA", token_in=WETH, token_out=ETH, price_impact=0.05, gas_cost_usd=1),
        ]

    def test_route_through_hub(self, engine: RoutingEngine):
        route = engine.find_optimal_route(self.hub_quotes(), USDC, ETH, 500)

        assert route.strategy == "multi-hop"
        assert route.venues == ["ALPHA", "BETA"]
        first, second = route.steps
        assert (first.token_in, first.token_out) == (USDC, WETH)
        assert (second.token_in, second.token_out) == (WETH, ETH)
        assert second.amount_in == first.amount_out
        assert route.total_gas_cost == 5
        assert route.total_price_impact == pytest.approx((1 - 0.999 * 0.9995) * 100)

    def test_hub_leg_skips_untrusted_venue(self, engine: RoutingEngine):
        """A cheaper hub leg below the trust floor does not shadow a trusted one."""
        quotes = [
            *self.hub_quotes(),
            make_quote(
                "SHADY", token_in=USDC, token_out=WETH, price_impact=0.01, gas_cost_usd=0.5, trust_score=40
            ),
        ]
        route = engine.find_optimal_route(quotes, USDC, ETH, 500)
        assert route.venues == ["ALPHA", "BETA"]

    def test_hub_leg_skips_shallow_venue(self, engine: RoutingEngine):
        quotes = [
            *self.hub_quotes(),
            make_quote(
                "THIN", token_in=USDC, token_out=WETH, price_impact=0.01, gas_cost_usd=0.5, liquidity_usd=100
            ),
        ]
        route = engine.find_optimal_route(quotes, USDC, ETH, 500)
        assert route.venues == ["ALPHA", "BETA"]

    def test_max_hops_disables_hubs(self, engine: RoutingEngine):
        with pytest.raises(NoViableRouteError, match="No quotes connect USDC to ETH"):
            engine.find_optimal_route(self.hub_quotes(), USDC, ETH, 500, RoutingOptions(max_hops=1))

    def test_direct_beats_hub_when_cheaper(self, engine: RoutingEngine):
        quotes = [*self.hub_quotes(), make_quote("GAMMA", price_impact=0.05, gas_cost_usd=2)]
        route = engine.find_optimal_route(quotes, USDC, ETH, 500)
        assert route.venues == ["GAMMA"]


class TestTrustModelIntegration:
    def test_known_venue_uses_live_score(self, trust_model: VenueTrustModel):
        engine = RoutingEngine(trust_model=trust_model)
        route = engine.find_optimal_route([make_quote(UNISWAP_V3, trust_score=10)], USDC, ETH, 500)
        assert route.reliability_score == trust_model.score(UNISWAP_V3, "ethereum").overall

    def test_unknown_unscored_venue_gets_default(self, trust_model: VenueTrustModel):
        engine = RoutingEngine(trust_model=trust_model)
        with pytest.raises(NoViableRouteError) as exc_info:
            engine.find_optimal_route([make_quote("SHADY_DEX", trust_score=0)], USDC, ETH, 500)
        assert "trust 30 below medium risk floor 75" in exc_info.value.reason

    def test_unknown_venue_keeps_quote_score(self, trust_model: VenueTrustModel):
        engine = RoutingEngine(trust_model=trust_model)
        route = engine.find_optimal_route([make_quote("NEW_DEX", trust_score=92)], USDC, ETH, 500)
        assert route.reliability_score == 92


class TestReoptimize:
    def quotes(self):
        return [
            make_quote("STEADY", price_impact=0.8, execution_time=12_000),
            make_quote("QUICK", price_impact=1.1, execution_time=800),
        ]

    def test_volatility_widens_slippage_and_prefers_speed(self, engine: RoutingEngine):
        options = RoutingOptions(max_slippage=1.0)
        route = engine.find_optimal_route(self.quotes(), USDC, ETH, 500, options)
        assert route.venues == ["STEADY"]

        updated = engine.reoptimize(
            route, self.quotes(), USDC, ETH, 500, options, MarketConditions(volatility=0.1)
        )
        assert updated.venues == ["QUICK"]

    def test_calm_market_returns_same_route(self, engine: RoutingEngine):
        options = RoutingOptions()
        route = engine.find_optimal_route(self.quotes(), USDC, ETH, 500, options)
        conditions = MarketConditions(volatility=0.01, congestion=0.2)
        assert engine.reoptimize(route, self.quotes(), USDC, ETH, 500, options, conditions) is route

    def test_no_viable_adjusted_route_keeps_current(self, engine: RoutingEngine):
        options = RoutingOptions()
        route = engine.find_optimal_route(self.quotes(), USDC, ETH, 500, options)
        conditions = MarketConditions(congestion=0.9)
        assert engine.reoptimize(route, [], USDC, ETH, 500, options, conditions) is route

    def test_adjust_options_for_congestion(self, engine: RoutingEngine):
        route = engine.find_optimal_route([make_quote(gas_cost_usd=80)], USDC, ETH, 500)
        adjusted = engine.adjust_options(route, RoutingOptions(), MarketConditions(congestion=0.9))
        assert adjusted.max_gas_cost == 160
        assert adjusted.prioritize_cost is False
        assert adjusted.prioritize_speed is False

    def test_adjust_options_caps_slippage(self, engine: RoutingEngine):
        route = engine.find_optimal_route(
            [make_quote(price_impact=1.8)], USDC, ETH, 500, RoutingOptions(max_slippage=1.9)
        )
        adjusted = engine.adjust_options(route, RoutingOptions(max_slippage=1.9), MarketConditions(volatility=0.2))
        assert adjusted.max_slippage == 2.0
        assert adjusted.prioritize_speed is True
