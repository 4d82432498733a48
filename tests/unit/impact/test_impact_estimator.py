"""Tests for the price impact estimator."""

import pytest

from dexroute.impact.errors import NoPoolsError, ZeroBalanceError
from dexroute.impact.estimator import PriceImpactEstimator
from dexroute.impact.pools import ConstantProductPool
from dexroute.impact.result import DistributionStrategy, ImpactRiskLevel
from tests.helpers import DAI, ETH, SUSHISWAP, UNISWAP_V3, USDC


def make_pool(venue: str, reserve_usdc: float, reserve_eth: float, fee: float = 0.003) -> ConstantProductPool:
    return ConstantProductPool(
        venue=venue,
        token0=USDC,
        token1=ETH,
        reserve0=reserve_usdc,
        reserve1=reserve_eth,
        fee=fee,
        total_liquidity_usd=reserve_usdc * 2,
        volume_24h=reserve_usdc,
    )


@pytest.fixture
def deep_pool() -> ConstantProductPool:
    return make_pool("DEEP", 50_000_000, 20_000)


@pytest.fixture
def shallow_pool() -> ConstantProductPool:
    return make_pool("SHALLOW", 5_000_000, 2_000)


class TestEstimate:
    """Tests for single-pool estimates."""

    def test_small_trade_impact_is_about_the_fee(self, deep_pool):
        result = PriceImpactEstimator().estimate(deep_pool, USDC, ETH, 1_000)
        assert result.price_impact == pytest.approx(0.3, abs=0.01)
        assert result.slippage_exceeded is False
        assert result.is_acceptable

    def test_impact_grows_with_size(self, deep_pool):
        estimator = PriceImpactEstimator()
        impacts = [estimator.estimate(deep_pool, USDC, ETH, a).price_impact for a in (1e3, 1e5, 1e6, 1e7)]
        assert impacts == sorted(impacts)
        assert impacts[-1] > impacts[0]

    def test_exceeding_slippage_is_flagged_not_raised(self, shallow_pool):
        result = PriceImpactEstimator().estimate(shallow_pool, USDC, ETH, 1_000_000, max_slippage=0.5)
        assert result.slippage_exceeded is True
        assert result.amount_out > 0
        assert "Very high price impact, check trade parameters" in result.warnings

    def test_minimum_amount_out(self, deep_pool):
        result = PriceImpactEstimator().estimate(deep_pool, USDC, ETH, 10_000, max_slippage=1.0)
        assert result.minimum_amount_out == pytest.approx(result.amount_out * 0.99)

    def test_effective_price(self, deep_pool):
        result = PriceImpactEstimator().estimate(deep_pool, USDC, ETH, 10_000)
        assert result.effective_price == pytest.approx(result.amount_out / 10_000)
        assert result.spot_price == pytest.approx(20_000 / 50_000_000)

    def test_cost_breakdown(self, deep_pool):
        result = PriceImpactEstimator().estimate(deep_pool, USDC, ETH, 10_000)
        assert result.breakdown.swap_fees == pytest.approx(30)
        assert result.breakdown.total_cost == pytest.approx(
            result.breakdown.swap_fees + result.breakdown.price_movement
        )

    def test_liquidity_utilization(self, shallow_pool):
        result = PriceImpactEstimator().estimate(shallow_pool, USDC, ETH, 500_000)
        assert result.liquidity_utilization == pytest.approx(10.0)

    def test_pure_function_of_pool_state(self, deep_pool):
        estimator = PriceImpactEstimator()
        first = estimator.estimate(deep_pool, USDC, ETH, 250_000)
        second = estimator.estimate(deep_pool, USDC, ETH, 250_000)
        assert first == second
        assert deep_pool.reserve0 == 50_000_000

    def test_drained_pool_raises(self):
        drained = make_pool("DRAINED", 1_000_000, 0.0)
        with pytest.raises(ZeroBalanceError):
            PriceImpactEstimator().estimate(drained, USDC, ETH, 50_000, max_slippage=0.5)


class TestAvailablePools:
    def test_deepest_first(self, pool_store):
        pools = PriceImpactEstimator(pool_store).available_pools(USDC, ETH, "ethereum")
        assert [p.venue for p in pools] == [UNISWAP_V3, SUSHISWAP]

    def test_no_store(self):
        assert PriceImpactEstimator().available_pools(USDC, ETH, "ethereum") == []

    def test_other_network(self, pool_store):
        assert PriceImpactEstimator(pool_store).available_pools(USDC, ETH, "polygon") == []


class TestAggregated:
    """Tests for parallel-liquidity aggregation."""

    def test_beats_best_single_pool(self, deep_pool, shallow_pool):
        estimator = PriceImpactEstimator()
        amount = 2_000_000
        aggregated = estimator.estimate_aggregated([shallow_pool, deep_pool], USDC, ETH, amount)
        best_single = estimator.estimate(deep_pool, USDC, ETH, amount)
        assert aggregated.amount_out > best_single.amount_out
        assert aggregated.price_impact < best_single.price_impact

    def test_allocation_shares_sum_to_one(self, deep_pool, shallow_pool):
        result = PriceImpactEstimator().estimate_aggregated([deep_pool, shallow_pool], USDC, ETH, 2_000_000)
        assert sum(a.share for a in result.allocations) == pytest.approx(1.0)
        assert sum(a.amount_in for a in result.allocations) == pytest.approx(2_000_000)

    def test_deeper_pool_gets_more_flow(self, deep_pool, shallow_pool):
        result = PriceImpactEstimator().estimate_aggregated([deep_pool, shallow_pool], USDC, ETH, 2_000_000)
        shares = {a.venue: a.share for a in result.allocations}
        assert shares["DEEP"] > shares["SHALLOW"]

    def test_single_pool_matches_estimate(self, deep_pool):
        estimator = PriceImpactEstimator()
        aggregated = estimator.estimate_aggregated([deep_pool], USDC, ETH, 100_000)
        single = estimator.estimate(deep_pool, USDC, ETH, 100_000)
        assert aggregated.amount_out == pytest.approx(single.amount_out)

    def test_no_pools_raise(self, deep_pool):
        with pytest.raises(NoPoolsError):
            PriceImpactEstimator().estimate_aggregated([deep_pool], USDC, DAI, 100)

    def test_drained_pools_skipped(self, deep_pool):
        estimator = PriceImpactEstimator()
        drained = make_pool("DRAINED", 1_000_000, 0.0)
        aggregated = estimator.estimate_aggregated([drained, deep_pool], USDC, ETH, 100_000)
        assert [a.venue for a in aggregated.allocations] == ["DEEP"]
        assert aggregated.amount_out == pytest.approx(estimator.estimate(deep_pool, USDC, ETH, 100_000).amount_out)

    def test_all_pools_drained_raise(self):
        pools = [make_pool("DRAINED_A", 1_000_000, 0.0), make_pool("DRAINED_B", 2_000_000, 0.0)]
        with pytest.raises(ZeroBalanceError):
            PriceImpactEstimator().estimate_aggregated(pools, USDC, ETH, 1000)

    def test_distribute_skips_drained_pools(self, deep_pool, shallow_pool):
        drained = make_pool("DRAINED", 1_000_000, 0.0)
        result = PriceImpactEstimator().distribute([drained, deep_pool, shallow_pool], USDC, ETH, 100_000)
        assert "DRAINED" not in {a.venue for a in result.allocations}


class TestDistribute:
    """Tests for fixed-heuristic distribution strategies."""

    def test_best_price_uses_one_pool(self, deep_pool, shallow_pool):
        result = PriceImpactEstimator().distribute(
            [deep_pool, shallow_pool], USDC, ETH, 1_000_000, DistributionStrategy.BEST_PRICE
        )
        assert [a.venue for a in result.allocations] == ["DEEP"]

    def test_min_impact_is_depth_weighted(self, deep_pool, shallow_pool):
        result = PriceImpactEstimator().distribute(
            [deep_pool, shallow_pool], USDC, ETH, 1_000_000, DistributionStrategy.MIN_IMPACT
        )
        shares = {a.venue: a.share for a in result.allocations}
        assert shares["DEEP"] == pytest.approx(10 / 11)

    def test_balanced_reports_best_and_worst(self, deep_pool, shallow_pool):
        result = PriceImpactEstimator().distribute([deep_pool, shallow_pool], USDC, ETH, 1_000_000)
        assert result.strategy is DistributionStrategy.BALANCED
        assert result.best_single_pool.price_impact < result.worst_single_pool.price_impact
        assert sum(a.share for a in result.allocations) == pytest.approx(1.0)

    def test_extreme_impact_risk(self, shallow_pool):
        result = PriceImpactEstimator().distribute([shallow_pool], USDC, ETH, 3_000_000)
        assert result.risk.level is ImpactRiskLevel.EXTREME


class TestScenariosAndMev:
    def test_slippage_scenarios(self, deep_pool):
        scenarios = PriceImpactEstimator().simulate_slippage_scenarios(deep_pool, USDC, ETH, 10_000)
        assert [s.slippage_tolerance for s in scenarios] == [0.1, 0.5, 1.0, 2.0, 5.0]
        # Impact is about 0.32%, so a 0.1% tolerance cannot execute
        assert scenarios[0].probability == 0.0
        # 4.7% of headroom against 5% volatility
        assert scenarios[-1].probability == 60.0
        assert scenarios[-1].minimum_amount_out < scenarios[0].minimum_amount_out

    def test_mev_risk_levels(self, shallow_pool):
        estimator = PriceImpactEstimator()
        assert estimator.mev_risk([shallow_pool], USDC, 1_000).level is ImpactRiskLevel.LOW
        assert estimator.mev_risk([shallow_pool], USDC, 100_000).level is ImpactRiskLevel.HIGH
        assert estimator.mev_risk([shallow_pool], USDC, 1_000_000).level is ImpactRiskLevel.EXTREME
