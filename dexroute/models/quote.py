"""Pydantic models for venue quotes.

A quote is a venue's offer for a token pair at a point in time. Quotes are
supplied by external feed adapters and are never mutated by the engine.
"""

from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from dexroute.models.types import Amount, Network, Percentage, TokenSymbol


class FeeBreakdown(BaseModel):
    """Fees attached to a quote, as reported by the venue."""

    protocol_fee: Amount = Field(default=0.0, alias="protocolFee")
    liquidity_provider_fee: Amount = Field(default=0.0, alias="liquidityProviderFee")
    gas_price: Amount = Field(default=0.0, alias="gasPrice", description="Gas price in gwei")

    model_config = {"populate_by_name": True, "frozen": True}


class QuoteMetadata(BaseModel):
    """Provenance of a quote."""

    pool_address: str | None = Field(default=None, alias="poolAddress")
    router_address: str | None = Field(default=None, alias="routerAddress")
    last_updated: datetime | None = Field(default=None, alias="lastUpdated")
    data_source: str | None = Field(default=None, alias="dataSource")

    model_config = {"populate_by_name": True, "frozen": True}


class Quote(BaseModel):
    """A venue's offer for swapping token_in into token_out.

    When token_in/token_out are omitted they are taken from the first and
    last entries of ``route``. Quotes without either are attributed to the
    pair of the routing request they were fetched for.
    """

    venue: str = Field(alias="dex", min_length=1)
    network: Network = "ethereum"
    token_in: TokenSymbol | None = Field(default=None, alias="tokenIn")
    token_out: TokenSymbol | None = Field(default=None, alias="tokenOut")
    price: Amount = 0.0
    amount_out: Amount = Field(default=0.0, alias="amountOut")
    price_impact: Amount = Field(default=0.0, alias="priceImpact", description="Percent")
    liquidity_usd: Amount = Field(default=0.0, alias="liquidityUSD")
    gas_estimate: Amount = Field(default=0.0, alias="gasEstimate", description="Gas units")
    gas_cost_usd: Amount = Field(default=0.0, alias="gasCostUSD")
    execution_time: Amount = Field(default=0.0, alias="executionTime", description="Milliseconds")
    trust_score: Percentage = Field(default=0.0, alias="trustScore")
    route: tuple[TokenSymbol, ...] = ()
    confidence_level: Percentage = Field(default=0.0, alias="confidenceLevel")
    fees: FeeBreakdown = Field(default_factory=FeeBreakdown)
    metadata: QuoteMetadata = Field(default_factory=QuoteMetadata)

    model_config = {"populate_by_name": True, "frozen": True}

    @model_validator(mode="after")
    def _tokens_from_route(self) -> "Quote":
        # Model is frozen, so fill through __dict__ during validation
        if len(self.route) >= 2:
            if self.token_in is None:
                self.__dict__["token_in"] = self.route[0]
            if self.token_out is None:
                self.__dict__["token_out"] = self.route[-1]
        return self
