"""Price impact estimation for single pools and parallel liquidity.

The estimator is a pure function of pool state: it never mutates pools and
holds no per-request state. Pools for a pair are looked up through an
injected PoolStore.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from dexroute.impact.errors import NoPoolsError, ZeroBalanceError
from dexroute.impact.pools import Pool, pool_trades
from dexroute.impact.result import (
    AggregatedImpact,
    CostBreakdown,
    DistributionStrategy,
    ImpactRiskLevel,
    MevRisk,
    PoolAllocation,
    PriceImpactResult,
    RiskSummary,
    SlippageScenario,
)
from dexroute.models.types import normalize_symbol

if TYPE_CHECKING:
    from dexroute.impact.store import PoolStore

logger = structlog.get_logger()

# Bisection rounds for the parallel-liquidity fill
_BISECTION_ROUNDS = 60

# Share of input-side reserves above which a trade is flagged as large
LARGE_TRADE_SHARE = 0.3

DEFAULT_SLIPPAGE_SCENARIOS = (0.1, 0.5, 1.0, 2.0, 5.0)


def _impact_percent(spot_price: float, effective_price: float) -> float:
    if spot_price <= 0:
        return 0.0
    return max(0.0, (spot_price - effective_price) / spot_price * 100)


def _tradable_pools(pools: list[Pool], token_in: str, token_out: str) -> list[Pool]:
    """Pools for the pair that hold liquidity on both sides.

    Raises:
        NoPoolsError: If no pool trades the pair
        ZeroBalanceError: If every pool for the pair is drained
    """
    candidates = [p for p in pools if pool_trades(p, token_in, token_out)]
    if not candidates:
        raise NoPoolsError(f"No pool trades {token_in}/{token_out}")
    liquid = [p for p in candidates if p.has_liquidity(token_in, token_out)]
    if not liquid:
        raise ZeroBalanceError(f"Every {token_in}/{token_out} pool is drained")
    if len(liquid) < len(candidates):
        logger.debug(
            "drained_pools_skipped",
            token_in=token_in,
            token_out=token_out,
            skipped=len(candidates) - len(liquid),
        )
    return liquid


def _amount_to_price(pool: Pool, token_in: str, token_out: str, target_price: float) -> float:
    """Input needed to push the pool's marginal price down to target_price."""
    if pool.spot_price(token_in, token_out) <= target_price:
        return 0.0

    def reached(amount: float) -> bool:
        return pool.after_swap(token_in, token_out, amount).spot_price(token_in, token_out) <= target_price

    low, high = 0.0, pool.depth(token_in)
    for _ in range(64):
        if reached(high):
            break
        low, high = high, high * 2
    for _ in range(_BISECTION_ROUNDS):
        mid = (low + high) / 2
        if reached(mid):
            high = mid
        else:
            low = mid
    return high


class PriceImpactEstimator:
    """Prices trades against constant-product and stable pools.

    Usage:
        estimator = PriceImpactEstimator(pool_store)
        result = estimator.estimate(pool, "USDC", "ETH", 50_000, max_slippage=0.5)
        if result.slippage_exceeded:
            ...
    """

    def __init__(self, pool_store: PoolStore | None = None) -> None:
        self.pool_store = pool_store

    def available_pools(self, token_in: str, token_out: str, network: str) -> list[Pool]:
        """Pools able to trade the pair on a network, deepest first."""
        if self.pool_store is None:
            return []
        pools = self.pool_store.pools_for(token_in, token_out, network)
        return sorted(pools, key=lambda p: (-p.depth(token_in), p.venue))

    def estimate(
        self,
        pool: Pool,
        token_in: str,
        token_out: str,
        amount: float,
        max_slippage: float = 0.5,
    ) -> PriceImpactResult:
        """Price a trade against a single pool.

        Args:
            pool: Pool to trade against
            token_in: Token being sold
            token_out: Token being bought
            amount: Input amount in token_in units
            max_slippage: Largest acceptable impact, in percent

        Returns:
            PriceImpactResult; ``slippage_exceeded`` is set when the impact
            is above max_slippage

        Raises:
            InvalidPoolError: If the pool does not trade the pair
            ZeroBalanceError: If either side of the pair has no liquidity
        """
        amount_out = pool.get_amount_out(token_in, token_out, amount)
        spot_price = pool.spot_price(token_in, token_out)
        depth = pool.depth(token_in)
        allocation = PoolAllocation(
            venue=pool.venue,
            address=pool.address,
            amount_in=amount,
            amount_out=amount_out,
            share=1.0,
            price_impact=_impact_percent(spot_price, amount_out / amount if amount > 0 else spot_price),
        )
        swap_fees = amount * pool.fee
        return self._build_result(
            token_in,
            token_out,
            amount,
            amount_out,
            spot_price,
            max_slippage,
            depth=depth,
            swap_fees=swap_fees,
            volume_24h=pool.volume_24h,
            allocations=(allocation,),
        )

    def estimate_aggregated(
        self,
        pools: list[Pool],
        token_in: str,
        token_out: str,
        amount: float,
        max_slippage: float = 0.5,
    ) -> PriceImpactResult:
        """Price a trade against parallel pools for the same pair.

        Pools are consumed deepest first. A shallower pool only receives flow
        once the marginal price of the pools already in use has fallen to its
        own quoted price, so the fill ends with every used pool at the same
        marginal price. The spot price reference is the best quoted price
        among the pools.

        Raises:
            NoPoolsError: If no pool trades the pair
            ZeroBalanceError: If every pool for the pair is drained
        """
        candidates = _tradable_pools(pools, token_in, token_out)
        ordered = sorted(candidates, key=lambda p: (-p.depth(token_in), p.venue))

        if len(ordered) == 1 or amount <= 0:
            fills = [(ordered[0], amount)] + [(p, 0.0) for p in ordered[1:]]
        else:
            fills = self._fill_deepest_first(ordered, token_in, token_out, amount)

        allocations = []
        amount_out = 0.0
        swap_fees = 0.0
        for pool, pool_amount in fills:
            if pool_amount <= 0:
                continue
            pool_out = pool.get_amount_out(token_in, token_out, pool_amount)
            amount_out += pool_out
            swap_fees += pool_amount * pool.fee
            allocations.append(
                PoolAllocation(
                    venue=pool.venue,
                    address=pool.address,
                    amount_in=pool_amount,
                    amount_out=pool_out,
                    share=pool_amount / amount,
                    price_impact=_impact_percent(
                        pool.spot_price(token_in, token_out), pool_out / pool_amount
                    ),
                )
            )

        spot_price = max(p.spot_price(token_in, token_out) for p in ordered)
        logger.debug(
            "aggregated_impact",
            token_in=token_in,
            token_out=token_out,
            pools=len(ordered),
            pools_used=len(allocations),
        )
        return self._build_result(
            token_in,
            token_out,
            amount,
            amount_out,
            spot_price,
            max_slippage,
            depth=sum(p.depth(token_in) for p in ordered),
            swap_fees=swap_fees,
            volume_24h=sum(p.volume_24h for p in ordered),
            allocations=tuple(allocations),
        )

    def _fill_deepest_first(
        self,
        ordered: list[Pool],
        token_in: str,
        token_out: str,
        amount: float,
    ) -> list[tuple[Pool, float]]:
        """Find the common marginal price at which the pools absorb amount."""

        def absorbed(price: float) -> list[float]:
            return [_amount_to_price(p, token_in, token_out, price) for p in ordered]

        high = max(p.spot_price(token_in, token_out) for p in ordered)
        low = high
        for _ in range(200):
            low /= 2
            if sum(absorbed(low)) >= amount:
                break
        for _ in range(_BISECTION_ROUNDS):
            mid = (low + high) / 2
            if sum(absorbed(mid)) >= amount:
                low = mid
            else:
                high = mid

        fills = absorbed(low)
        total = sum(fills)
        if total <= 0:
            raise ZeroBalanceError(f"Pools for {token_in}/{token_out} cannot absorb the trade")
        return [(pool, fill * amount / total) for pool, fill in zip(ordered, fills, strict=True)]

    def _build_result(
        self,
        token_in: str,
        token_out: str,
        amount: float,
        amount_out: float,
        spot_price: float,
        max_slippage: float,
        *,
        depth: float,
        swap_fees: float,
        volume_24h: float,
        allocations: tuple[PoolAllocation, ...],
    ) -> PriceImpactResult:
        effective_price = amount_out / amount if amount > 0 else spot_price
        price_impact = _impact_percent(spot_price, effective_price)
        utilization = amount / depth * 100 if depth > 0 else 100.0

        warnings = []
        if depth > 0 and amount >= depth * LARGE_TRADE_SHARE:
            warnings.append("Trade uses more than 30% of pool liquidity")
        if utilization > 50:
            warnings.append("High liquidity utilization, consider splitting the trade")
        if price_impact > 5:
            warnings.append("Very high price impact, check trade parameters")
        if volume_24h and volume_24h < amount * 10:
            warnings.append("Low daily volume, liquidity may be thin")

        slippage_exceeded = price_impact > max_slippage
        if slippage_exceeded:
            logger.debug(
                "slippage_exceeded",
                token_in=token_in,
                token_out=token_out,
                price_impact=price_impact,
                max_slippage=max_slippage,
            )

        return PriceImpactResult(
            token_in=token_in,
            token_out=token_out,
            amount_in=amount,
            amount_out=amount_out,
            spot_price=spot_price,
            effective_price=effective_price,
            price_impact=price_impact,
            minimum_amount_out=amount_out * (1 - max_slippage / 100),
            max_slippage=max_slippage,
            slippage_exceeded=slippage_exceeded,
            liquidity_utilization=utilization,
            breakdown=CostBreakdown(
                swap_fees=swap_fees,
                protocol_fees=0.0,
                price_movement=amount * price_impact / 100,
                total_cost=swap_fees + amount * price_impact / 100,
            ),
            warnings=tuple(warnings),
            allocations=allocations,
        )

    def distribute(
        self,
        pools: list[Pool],
        token_in: str,
        token_out: str,
        amount: float,
        strategy: DistributionStrategy = DistributionStrategy.BALANCED,
    ) -> AggregatedImpact:
        """Spread an order across pools with a fixed heuristic.

        - best_price: everything through the pool with the best effective price
        - min_impact: proportional to input-side depth
        - balanced: top three pools weighted by 1 / (1 + impact)
        """
        candidates = _tradable_pools(pools, token_in, token_out)

        singles = [(pool, self.estimate(pool, token_in, token_out, amount)) for pool in candidates]
        if strategy is DistributionStrategy.BEST_PRICE:
            singles.sort(key=lambda s: (-s[1].effective_price, s[0].venue))
            weights = [1.0]
            chosen = singles[:1]
        elif strategy is DistributionStrategy.MIN_IMPACT:
            singles.sort(key=lambda s: (s[1].price_impact, s[0].venue))
            chosen = singles
            weights = [pool.depth(token_in) for pool, _ in chosen]
        else:
            singles.sort(key=lambda s: (-self._balanced_score(s[0], s[1], token_in), s[0].venue))
            chosen = singles[:3]
            weights = [1 / (1 + result.price_impact) for _, result in chosen]

        total_weight = sum(weights)
        allocations = []
        total_out = 0.0
        weighted_impact = 0.0
        for (pool, _), weight in zip(chosen, weights, strict=True):
            share = weight / total_weight
            fill = self.estimate(pool, token_in, token_out, amount * share)
            total_out += fill.amount_out
            weighted_impact += fill.price_impact * share
            allocations.append(
                PoolAllocation(
                    venue=pool.venue,
                    address=pool.address,
                    amount_in=amount * share,
                    amount_out=fill.amount_out,
                    share=share,
                    price_impact=fill.price_impact,
                )
            )

        results = [result for _, result in singles]
        return AggregatedImpact(
            strategy=strategy,
            total_amount_out=total_out,
            weighted_average_impact=weighted_impact,
            best_single_pool=min(results, key=lambda r: r.price_impact),
            worst_single_pool=max(results, key=lambda r: r.price_impact),
            allocations=tuple(allocations),
            risk=self._assess_risk(candidates, results, weighted_impact),
        )

    @staticmethod
    def _balanced_score(pool: Pool, result: PriceImpactResult, token_in: str) -> float:
        return result.effective_price * 0.5 - result.price_impact * 0.3 + pool.depth(token_in) / 1e6 * 0.2

    @staticmethod
    def _assess_risk(
        pools: list[Pool], results: list[PriceImpactResult], average_impact: float
    ) -> RiskSummary:
        factors = []
        level = ImpactRiskLevel.LOW
        if average_impact > 5:
            level = ImpactRiskLevel.EXTREME
            factors.append("Extremely high price impact")
        elif average_impact > 2:
            level = ImpactRiskLevel.HIGH
            factors.append("High price impact")
        elif average_impact > 0.5:
            level = ImpactRiskLevel.MEDIUM
            factors.append("Moderate price impact")

        impacts = [r.price_impact for r in results]
        if max(impacts) - min(impacts) > 3:
            factors.append("Large impact spread between venues")
            if level is ImpactRiskLevel.LOW:
                level = ImpactRiskLevel.MEDIUM

        total_liquidity = sum(p.total_liquidity_usd for p in pools)
        if 0 < total_liquidity < 100_000:
            factors.append("Low total liquidity")
            if level is ImpactRiskLevel.LOW:
                level = ImpactRiskLevel.MEDIUM

        recommendation = {
            ImpactRiskLevel.LOW: "Safe to execute",
            ImpactRiskLevel.MEDIUM: "Moderate risk, monitor prices before executing",
            ImpactRiskLevel.HIGH: "High risk, reduce the amount or wait for better conditions",
            ImpactRiskLevel.EXTREME: "Extreme risk, avoid executing under these conditions",
        }[level]
        return RiskSummary(level=level, factors=tuple(factors), recommendation=recommendation)

    def simulate_slippage_scenarios(
        self,
        pool: Pool,
        token_in: str,
        token_out: str,
        amount: float,
        tolerances: tuple[float, ...] = DEFAULT_SLIPPAGE_SCENARIOS,
        volatility: float = 0.05,
    ) -> list[SlippageScenario]:
        """Expected outcome of the trade at several slippage tolerances.

        Args:
            volatility: Daily volatility of the pair as a fraction (0.05 = 5%)
        """
        scenarios = []
        for tolerance in tolerances:
            result = self.estimate(pool, token_in, token_out, amount, max_slippage=tolerance)
            scenarios.append(
                SlippageScenario(
                    slippage_tolerance=tolerance,
                    expected_amount_out=result.amount_out,
                    minimum_amount_out=result.minimum_amount_out,
                    probability=_execution_probability(result.price_impact, tolerance, volatility),
                    risk_level=_tolerance_risk(result.price_impact, tolerance),
                )
            )
        return scenarios

    def mev_risk(self, pools: list[Pool], token_in: str, amount: float) -> MevRisk:
        """Estimate sandwich exposure from the order's share of liquidity."""
        liquidity = sum(p.depth(token_in) for p in pools if normalize_symbol(token_in) in p.tokens)
        ratio = amount / liquidity if liquidity > 0 else 1.0

        if ratio > 0.05:
            return MevRisk(
                level=ImpactRiskLevel.EXTREME,
                potential_loss=amount * 0.05,
                sandwich_attack_risk=min(100.0, ratio * 2000),
                recommendations=(
                    "Very large trade, high MEV risk",
                    "Split into several smaller transactions",
                    "Use a private relay or MEV protection",
                ),
            )
        if ratio > 0.01:
            return MevRisk(
                level=ImpactRiskLevel.HIGH,
                potential_loss=amount * 0.02,
                sandwich_attack_risk=min(100.0, ratio * 2000),
                recommendations=("Large trade, moderate MEV risk", "Consider a private mempool"),
            )
        if ratio > 0.005:
            return MevRisk(
                level=ImpactRiskLevel.MEDIUM,
                potential_loss=amount * 0.01,
                sandwich_attack_risk=ratio * 2000,
                recommendations=("Monitor the price before execution",),
            )
        return MevRisk(level=ImpactRiskLevel.LOW, potential_loss=0.0, sandwich_attack_risk=ratio * 2000)


def _execution_probability(price_impact: float, tolerance: float, volatility: float) -> float:
    if price_impact > tolerance:
        return 0.0
    buffer = tolerance - price_impact
    volatility_risk = volatility * 100
    if buffer > volatility_risk * 2:
        return 95.0
    if buffer > volatility_risk:
        return 80.0
    if buffer > volatility_risk * 0.5:
        return 60.0
    return 30.0


def _tolerance_risk(price_impact: float, tolerance: float) -> ImpactRiskLevel:
    ratio = price_impact / tolerance if tolerance > 0 else float("inf")
    if ratio < 0.3:
        return ImpactRiskLevel.LOW
    if ratio < 0.7:
        return ImpactRiskLevel.MEDIUM
    return ImpactRiskLevel.HIGH


__all__ = ["DEFAULT_SLIPPAGE_SCENARIOS", "PriceImpactEstimator"]
