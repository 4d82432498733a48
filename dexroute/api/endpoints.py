"""API endpoints for the routing service."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query

from dexroute.api.schemas import (
    DexRankingResponse,
    FeedbackResponse,
    GasEstimateResponse,
    GasRequest,
    NetworkStatusResponse,
    RiskAssessmentResponse,
    RouteRequest,
    TrustScoreResponse,
)
from dexroute.errors import NoViableRouteError, UnsupportedNetworkError
from dexroute.models.feedback import ExecutionOutcome
from dexroute.models.route import OptimalRoute
from dexroute.models.types import RiskLevel, normalize_network
from dexroute.service import RoutingService, get_default_service
from dexroute.trust.result import RankingFilters

logger = structlog.get_logger()

router = APIRouter()


def get_service() -> RoutingService:
    """Dependency provider for the routing service.

    Override this in tests to inject a service with fixed data:
        app.dependency_overrides[get_service] = lambda: service
    """
    return get_default_service()


@router.post("/route")
async def find_route(request: RouteRequest, service: RoutingService = Depends(get_service)) -> OptimalRoute:
    """Best route for a swap.

    Error Handling:
        - Invalid request schema: 422 (Pydantic)
        - No viable route: 422 with the reason and rejected candidates
    """
    logger.info(
        "route_requested",
        token_in=request.token_in,
        token_out=request.token_out,
        amount=request.amount,
        network=request.network,
        quote_count=len(request.quotes) if request.quotes is not None else None,
    )
    try:
        return await service.find_optimal_route(
            request.token_in,
            request.token_out,
            request.amount,
            network=request.network,
            options=request.options,
            quotes=request.quotes,
        )
    except NoViableRouteError as err:
        raise HTTPException(
            status_code=422,
            detail={
                "reason": err.reason,
                "rejected": [
                    {"venues": list(r.path.venues), "tokens": list(r.path.tokens), "reasons": list(r.reasons)}
                    for r in err.rejected
                ],
            },
        ) from err


@router.post("/gas")
async def estimate_gas(request: GasRequest, service: RoutingService = Depends(get_service)) -> GasEstimateResponse:
    try:
        estimate = await service.estimate_gas(request.venue, request.route, request.network, request.speed)
    except UnsupportedNetworkError as err:
        raise HTTPException(status_code=400, detail=str(err)) from err
    return GasEstimateResponse.model_validate(estimate)


@router.get("/gas/status")
async def gas_status(service: RoutingService = Depends(get_service)) -> list[NetworkStatusResponse]:
    return [NetworkStatusResponse.model_validate(s) for s in service.all_network_statuses()]


@router.get("/gas/status/{network}")
async def network_gas_status(network: str, service: RoutingService = Depends(get_service)) -> NetworkStatusResponse:
    try:
        status = service.network_status(normalize_network(network))
    except UnsupportedNetworkError as err:
        raise HTTPException(status_code=404, detail=str(err)) from err
    return NetworkStatusResponse.model_validate(status)


@router.get("/venues/{network}")
async def rank_venues(
    network: str,
    min_liquidity: float | None = Query(default=None, alias="minLiquidity", ge=0),
    max_risk: RiskLevel | None = Query(default=None, alias="maxRisk"),
    specialty: str | None = None,
    service: RoutingService = Depends(get_service),
) -> list[DexRankingResponse]:
    filters = RankingFilters(min_liquidity=min_liquidity, max_risk=max_risk, specialty=specialty)
    rankings = service.rank_venues(normalize_network(network), filters)
    return [DexRankingResponse.model_validate(r) for r in rankings]


@router.get("/venues/{network}/{venue}")
async def score_venue(network: str, venue: str, service: RoutingService = Depends(get_service)) -> TrustScoreResponse:
    return TrustScoreResponse.model_validate(service.score_venue(venue, normalize_network(network)))


@router.get("/risk/{network}/{venue}")
async def assess_risk(
    network: str,
    venue: str,
    trade_size: float = Query(alias="tradeSize", ge=0),
    service: RoutingService = Depends(get_service),
) -> RiskAssessmentResponse:
    assessment = service.assess_risk(venue, normalize_network(network), trade_size)
    return RiskAssessmentResponse.model_validate(assessment)


@router.post("/feedback/{network}/{venue}")
async def report_outcome(
    network: str,
    venue: str,
    outcome: ExecutionOutcome,
    service: RoutingService = Depends(get_service),
) -> FeedbackResponse:
    network = normalize_network(network)
    updated = service.report_outcome(venue, network, outcome)
    return FeedbackResponse(venue=venue, network=network, applied=updated is not None)
