"""Pydantic models for routing requests and results."""

from typing import Literal

from pydantic import BaseModel, Field

from dexroute.models.types import Amount, RiskTolerance, TokenSymbol


class RoutingOptions(BaseModel):
    """Caller constraints and priorities for a routing request.

    Attributes:
        max_slippage: Largest acceptable aggregate price impact, in percent
        max_gas_cost: Largest acceptable aggregate gas cost, in USD
        prioritize_speed: Prefer the lowest-latency path
        prioritize_cost: Prefer the cheapest path (gas + impact)
        max_hops: Longest path considered
        split_threshold: Smallest order amount for which splitting is tried
        risk_tolerance: Selects the venue trust floor
        trade_value_usd: Fiat value of the order, compared against venue
            liquidity. Defaults to the order amount.
    """

    max_slippage: Amount = Field(default=1.0, alias="maxSlippage")
    max_gas_cost: Amount = Field(default=100.0, alias="maxGasCost")
    prioritize_speed: bool = Field(default=False, alias="prioritizeSpeed")
    prioritize_cost: bool = Field(default=True, alias="prioritizeCost")
    max_hops: int = Field(default=3, alias="maxHops", ge=1)
    split_threshold: Amount = Field(default=1000.0, alias="splitThreshold")
    risk_tolerance: RiskTolerance = Field(default=RiskTolerance.MEDIUM, alias="riskTolerance")
    trade_value_usd: Amount | None = Field(default=None, alias="tradeValueUSD")

    model_config = {"populate_by_name": True, "frozen": True}


class RouteStep(BaseModel):
    """One venue-mediated conversion in an optimal route."""

    venue: str = Field(alias="dex")
    token_in: TokenSymbol = Field(alias="tokenIn")
    token_out: TokenSymbol = Field(alias="tokenOut")
    amount_in: float = Field(alias="amountIn")
    amount_out: float = Field(alias="amountOut")
    percentage: float = Field(description="Share of the total order routed through this step")

    model_config = {"populate_by_name": True, "frozen": True}


class OptimalRoute(BaseModel):
    """The routing recommendation returned to callers."""

    steps: list[RouteStep]
    total_amount_out: float = Field(alias="totalAmountOut")
    total_gas_cost: float = Field(alias="totalGasCost")
    total_price_impact: float = Field(alias="totalPriceImpact")
    execution_time: float = Field(alias="executionTime")
    reliability_score: float = Field(alias="reliabilityScore")
    strategy: Literal["single", "split", "multi-hop"]

    model_config = {"populate_by_name": True, "frozen": True}

    @property
    def venues(self) -> list[str]:
        """Distinct venues used, in step order."""
        seen: dict[str, None] = {}
        for step in self.steps:
            seen.setdefault(step.venue, None)
        return list(seen)
