"""Request and response schemas for the HTTP API.

Response models are read straight off the engine's result dataclasses.
"""

from pydantic import BaseModel, Field

from dexroute.gas.strategies import GasStrategyName
from dexroute.models.quote import Quote
from dexroute.models.route import RoutingOptions
from dexroute.models.types import Amount, Network, RiskLevel, Speed, TokenSymbol, Trend
from dexroute.trust.result import Recommendation, RiskSeverity, VenueCategory

_RESPONSE_CONFIG = {"populate_by_name": True, "from_attributes": True}


class RouteRequest(BaseModel):
    """Body of POST /route.

    When ``quotes`` is omitted the service's quote feed is used.
    """

    token_in: TokenSymbol = Field(alias="tokenIn")
    token_out: TokenSymbol = Field(alias="tokenOut")
    amount: Amount = Field(gt=0)
    network: Network = "ethereum"
    options: RoutingOptions = Field(default_factory=RoutingOptions)
    quotes: list[Quote] | None = None

    model_config = {"populate_by_name": True}


class GasRequest(BaseModel):
    """Body of POST /gas."""

    venue: str = Field(alias="dex", min_length=1)
    route: list[TokenSymbol] = Field(default_factory=list)
    network: Network = "ethereum"
    speed: Speed = Speed.STANDARD

    model_config = {"populate_by_name": True}


class GasEstimateResponse(BaseModel):
    network: str
    gas_limit: int = Field(alias="gasLimit")
    gas_price: float = Field(alias="gasPrice")
    max_fee_per_gas: float | None = Field(alias="maxFeePerGas")
    max_priority_fee_per_gas: float | None = Field(alias="maxPriorityFeePerGas")
    total_cost_wei: int = Field(alias="totalCostWei")
    total_cost_usd: float = Field(alias="totalCostUSD")
    confidence: float
    speed: Speed
    estimated_confirmation_time: int = Field(alias="estimatedConfirmationTime")
    strategy: GasStrategyName

    model_config = _RESPONSE_CONFIG


class NetworkStatusResponse(BaseModel):
    network: str
    chain_id: int = Field(alias="chainId")
    gas_price: float = Field(alias="gasPrice")
    base_fee: float = Field(alias="baseFee")
    congestion: float
    block_number: int = Field(alias="blockNumber")
    source: str
    age_seconds: float = Field(alias="ageSeconds")
    healthy: bool

    model_config = _RESPONSE_CONFIG


class TrustBreakdownResponse(BaseModel):
    reliability: float
    security: float
    liquidity: float
    cost: float
    user_experience: float = Field(alias="userExperience")

    model_config = _RESPONSE_CONFIG


class TrustScoreResponse(BaseModel):
    venue: str
    network: str
    overall: float
    breakdown: TrustBreakdownResponse
    trend: Trend
    risk_level: RiskLevel = Field(alias="riskLevel")
    recommendations: list[str]
    warnings: list[str]
    is_default: bool = Field(alias="isDefault")

    model_config = _RESPONSE_CONFIG


class DexRankingResponse(BaseModel):
    venue: str
    network: str
    rank: int
    score: TrustScoreResponse
    category: VenueCategory
    specialties: list[str]

    model_config = _RESPONSE_CONFIG


class RiskFindingResponse(BaseModel):
    type: str
    severity: RiskSeverity
    description: str
    mitigation: str

    model_config = _RESPONSE_CONFIG


class RiskAssessmentResponse(BaseModel):
    venue: str
    network: str
    trade_size: float = Field(alias="tradeSize")
    risks: list[RiskFindingResponse]
    risk_score: float = Field(alias="riskScore")
    recommendation: Recommendation

    model_config = _RESPONSE_CONFIG


class FeedbackResponse(BaseModel):
    venue: str
    network: str
    applied: bool = Field(description="False when the venue has no metrics to update")

    model_config = _RESPONSE_CONFIG
