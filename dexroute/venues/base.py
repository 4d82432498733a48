"""Venue variants behind a single capability interface.

Every venue the engine knows is one Venue value tagged with a VenueKind.
Per-venue differences (gas profile, latency, router) are data on the
variant rather than separate adapter classes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Protocol

from dexroute.gas.profiles import VenueGasProfile
from dexroute.gas.result import GasEstimate
from dexroute.impact.estimator import PriceImpactEstimator
from dexroute.impact.pools import Pool
from dexroute.models.quote import FeeBreakdown, Quote, QuoteMetadata
from dexroute.trust.metrics import venue_key


class VenueKind(str, Enum):
    UNISWAP_V2 = "uniswap_v2"
    UNISWAP_V3 = "uniswap_v3"
    SUSHISWAP = "sushiswap"
    CURVE = "curve"
    BALANCER = "balancer"
    ONEINCH = "1inch"
    JUPITER = "jupiter"
    DEFAULT = "default"


class VenueAdapter(Protocol):
    """What the engine needs from a venue."""

    name: str
    kind: VenueKind
    gas_profile: VenueGasProfile

    def trust_key(self, network: str) -> tuple[str, str]: ...

    def quote(
        self,
        pool: Pool,
        token_in: str,
        token_out: str,
        amount: float,
        estimator: PriceImpactEstimator,
        gas: GasEstimate | None = None,
        trust_score: float = 0.0,
    ) -> Quote: ...


@dataclass(frozen=True)
class Venue:
    """One venue variant.

    Attributes:
        name: Venue identifier used in quotes and the trust model
        latency_ms: Typical time from submission to execution
        router_address: Router contract the venue's swaps go through
    """

    kind: VenueKind
    name: str
    gas_profile: VenueGasProfile
    latency_ms: float
    router_address: str | None = None

    def trust_key(self, network: str) -> tuple[str, str]:
        return venue_key(self.name, network)

    def quote(
        self,
        pool: Pool,
        token_in: str,
        token_out: str,
        amount: float,
        estimator: PriceImpactEstimator,
        gas: GasEstimate | None = None,
        trust_score: float = 0.0,
    ) -> Quote:
        """Quote a trade against one of this venue's pools.

        Args:
            pool: Pool to price against
            token_in: Token being sold
            token_out: Token being bought
            amount: Input amount
            estimator: Prices the trade against the pool curve
            gas: Gas estimate for the swap, if known
            trust_score: Venue trust score to snapshot on the quote

        Raises:
            InvalidPoolError: If the pool does not trade the pair
            ZeroBalanceError: If the pool is drained on either side
        """
        result = estimator.estimate(pool, token_in, token_out, amount, max_slippage=100.0)
        return Quote(
            venue=self.name,
            network=pool.network,
            token_in=token_in,
            token_out=token_out,
            price=result.effective_price,
            amount_out=result.amount_out,
            price_impact=min(100.0, result.price_impact),
            liquidity_usd=pool.total_liquidity_usd,
            gas_estimate=gas.gas_limit if gas else self.gas_profile.gas_limit(1),
            gas_cost_usd=gas.total_cost_usd if gas else 0.0,
            execution_time=self.latency_ms,
            trust_score=min(100.0, trust_score),
            route=(token_in, token_out),
            confidence_level=max(0.0, 100 - result.price_impact * 10),
            fees=FeeBreakdown(
                protocol_fee=result.breakdown.protocol_fees,
                liquidity_provider_fee=result.breakdown.swap_fees,
                gas_price=gas.gas_price if gas else 0.0,
            ),
            metadata=QuoteMetadata(
                pool_address=pool.address,
                router_address=self.router_address,
                last_updated=datetime.now(UTC),
                data_source="pool_store",
            ),
        )
