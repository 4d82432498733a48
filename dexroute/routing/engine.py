"""Routing engine.

Turns a set of venue quotes into one costed, trust-filtered OptimalRoute:

1. Build a fresh token graph from the quotes
2. Generate direct paths and two-hop paths through hub tokens
3. Cost each path by folding its segments
4. Reject paths breaking slippage, gas, hop, trust or liquidity constraints
5. Score and select per the caller's priority
6. Try splitting large orders across the best distinct paths
7. Convert the winner to an OptimalRoute

The engine holds no per-request state; concurrent calls do not interfere.
"""

from __future__ import annotations

import math

import structlog

from dexroute.config import RoutingConfig
from dexroute.errors import NoViableRouteError
from dexroute.models.quote import Quote
from dexroute.models.route import OptimalRoute, RouteStep, RoutingOptions
from dexroute.models.types import PathStrategy, normalize_symbol
from dexroute.routing.graph import TokenGraph
from dexroute.routing.scoring import (
    best_segment,
    constraint_violations,
    path_score,
    segment_violations,
    select_path,
)
from dexroute.routing.splitting import find_best_split
from dexroute.routing.types import (
    CandidateRanking,
    MarketConditions,
    PathSegment,
    RejectedCandidate,
    RoutingPath,
    ScoredPath,
    SplitRoute,
)
from dexroute.trust.model import VenueTrustModel

logger = structlog.get_logger()

# Volatility above which slippage tolerance widens and speed is preferred
HIGH_VOLATILITY = 0.05
# Congestion (0-1) above which the gas budget widens
HIGH_CONGESTION = 0.7
MAX_VOLATILE_SLIPPAGE = 2.0


class RoutingEngine:
    """Finds the best route for a swap across venue quotes.

    Args:
        config: Routing tunables (hub tokens, hop fee, floors, split factors)
        trust_model: When given, venues it knows are filtered on their live
            trust score instead of the quote's snapshot, and venues with no
            score anywhere get its conservative default

    Usage:
        engine = RoutingEngine(trust_model=VenueTrustModel())
        route = engine.find_optimal_route(quotes, "USDC", "ETH", 50_000, RoutingOptions())
    """

    def __init__(
        self,
        config: RoutingConfig | None = None,
        trust_model: VenueTrustModel | None = None,
    ) -> None:
        self.config = config or RoutingConfig()
        self.trust_model = trust_model

    def build_graph(self, quotes: list[Quote], token_in: str, token_out: str) -> TokenGraph:
        cache: dict[tuple[str, str], float] = {}

        def trust_of(quote: Quote) -> float:
            key = (quote.venue, quote.network)
            if key not in cache:
                cache[key] = self._segment_trust(quote)
            return cache[key]

        return TokenGraph.from_quotes(quotes, token_in, token_out, trust_of)

    def _segment_trust(self, quote: Quote) -> float:
        model = self.trust_model
        if model is not None and model.knows(quote.venue, quote.network):
            return model.score(quote.venue, quote.network).overall
        if quote.trust_score > 0:
            return quote.trust_score
        if model is not None:
            return model.default_score(quote.venue, quote.network).overall
        return quote.trust_score

    def candidate_paths(
        self,
        graph: TokenGraph,
        token_in: str,
        token_out: str,
        amount: float,
        options: RoutingOptions,
        trade_value: float | None = None,
    ) -> list[RoutingPath]:
        """Direct paths plus, when max_hops allows, two-hop paths via hubs.

        Each hub leg is the best scoring segment among those that clear the
        trust floor and liquidity cap; if none do, among all of them, so the
        rejection still surfaces.
        """
        trade_value = amount if trade_value is None else trade_value
        paths = [
            RoutingPath(segments=(segment,), amount_in=amount, hop_fee=self.config.hop_fee)
            for segment in graph.segments(token_in, token_out)
        ]
        if options.max_hops < 2:
            return paths

        def leg(segments: list[PathSegment]) -> PathSegment | None:
            viable = [s for s in segments if not segment_violations(s, options, self.config, trade_value)]
            return best_segment(viable or segments, options)

        for hub in self.config.hub_tokens:
            hub = normalize_symbol(hub)
            if hub in (token_in, token_out):
                continue
            first = leg(graph.segments(token_in, hub))
            second = leg(graph.segments(hub, token_out))
            if first is None or second is None:
                continue
            paths.append(
                RoutingPath(
                    segments=(first, second),
                    amount_in=amount,
                    strategy=PathStrategy.MULTI_HOP,
                    hop_fee=self.config.hop_fee,
                )
            )
        return paths

    def rank_candidates(
        self,
        quotes: list[Quote],
        token_in: str,
        token_out: str,
        amount: float,
        options: RoutingOptions | None = None,
    ) -> CandidateRanking:
        """Evaluate every candidate path; accepted ones best score first.

        Raises:
            ValueError: If amount is not a positive finite number
        """
        if not math.isfinite(amount) or amount <= 0:
            raise ValueError(f"Amount must be positive and finite: {amount!r}")
        options = options or RoutingOptions()
        token_in = normalize_symbol(token_in)
        token_out = normalize_symbol(token_out)

        graph = self.build_graph(quotes, token_in, token_out)
        trade_value = options.trade_value_usd if options.trade_value_usd is not None else amount

        ranking = CandidateRanking()
        for path in self.candidate_paths(graph, token_in, token_out, amount, options, trade_value):
            reasons = constraint_violations(path, options, self.config, trade_value)
            if reasons:
                ranking.rejected.append(RejectedCandidate(path=path, reasons=tuple(reasons)))
            else:
                ranking.accepted.append(ScoredPath(path=path, score=path_score(path, amount, options)))

        ranking.accepted.sort(key=lambda c: (-c.score, c.path.sort_key))
        logger.debug(
            "route_candidates_ranked",
            token_in=token_in,
            token_out=token_out,
            segments=graph.segment_count,
            accepted=len(ranking.accepted),
            rejected=len(ranking.rejected),
        )
        return ranking

    def find_optimal_route(
        self,
        quotes: list[Quote],
        token_in: str,
        token_out: str,
        amount: float,
        options: RoutingOptions | None = None,
    ) -> OptimalRoute:
        """Best route for swapping ``amount`` of token_in into token_out.

        Raises:
            NoViableRouteError: If there are no quotes for the pair, or every
                candidate breaks a constraint
            ValueError: If amount is not a positive finite number
        """
        options = options or RoutingOptions()
        ranking = self.rank_candidates(quotes, token_in, token_out, amount, options)

        if ranking.best is None:
            if not ranking.rejected:
                reason = f"No quotes connect {normalize_symbol(token_in)} to {normalize_symbol(token_out)}"
            else:
                reason = "No viable route: " + "; ".join(
                    f"{'/'.join(r.path.venues)}: {', '.join(r.reasons)}" for r in ranking.rejected
                )
            logger.info("no_viable_route", token_in=token_in, token_out=token_out, rejected=len(ranking.rejected))
            raise NoViableRouteError(reason, ranking.rejected)

        selected = select_path(ranking.accepted, options)
        split = find_best_split(ranking.accepted, amount, options, self.config.split_factors)

        if split is not None:
            route = self._split_route(split, amount)
        else:
            route = self._single_route(selected.path)

        logger.info(
            "route_selected",
            token_in=token_in,
            token_out=token_out,
            strategy=route.strategy,
            venues=route.venues,
            amount_out=route.total_amount_out,
            gas_cost=route.total_gas_cost,
        )
        return route

    @staticmethod
    def _path_steps(path: RoutingPath, percentage: float) -> list[RouteStep]:
        steps = []
        amount_in = path.amount_in
        for segment, amount_out in zip(path.segments, path.step_amounts, strict=True):
            steps.append(
                RouteStep(
                    venue=segment.venue,
                    token_in=segment.token_in,
                    token_out=segment.token_out,
                    amount_in=amount_in,
                    amount_out=amount_out,
                    percentage=percentage,
                )
            )
            amount_in = amount_out
        return steps

    def _single_route(self, path: RoutingPath) -> OptimalRoute:
        return OptimalRoute(
            steps=self._path_steps(path, 100.0),
            total_amount_out=path.total_output,
            total_gas_cost=path.total_gas_cost,
            total_price_impact=path.total_price_impact,
            execution_time=path.total_latency,
            reliability_score=path.reliability_score,
            strategy="single" if path.hop_count == 1 else "multi-hop",
        )

    def _split_route(self, split: SplitRoute, amount: float) -> OptimalRoute:
        steps = []
        for part in split.parts:
            steps.extend(self._path_steps(part, part.amount_in / amount * 100))
        return OptimalRoute(
            steps=steps,
            total_amount_out=split.total_output,
            total_gas_cost=split.total_gas_cost,
            total_price_impact=split.total_price_impact,
            execution_time=split.total_latency,
            reliability_score=split.reliability_score,
            strategy="split",
        )

    @staticmethod
    def adjust_options(
        route: OptimalRoute, options: RoutingOptions, conditions: MarketConditions
    ) -> RoutingOptions:
        """Re-tune options for live market conditions.

        High volatility widens slippage tolerance to 1.5x the route's impact
        (at most 2%) and prefers speed. High congestion allows up to twice
        the route's gas and stops prioritizing cost.
        """
        updates: dict[str, object] = {}
        if conditions.volatility > HIGH_VOLATILITY:
            widened = min(MAX_VOLATILE_SLIPPAGE, route.total_price_impact * 1.5)
            updates["max_slippage"] = max(options.max_slippage, widened)
            updates["prioritize_speed"] = True
        if conditions.congestion > HIGH_CONGESTION:
            updates["max_gas_cost"] = max(options.max_gas_cost, route.total_gas_cost * 2)
            updates["prioritize_cost"] = False
        return options.model_copy(update=updates) if updates else options

    def reoptimize(
        self,
        route: OptimalRoute,
        quotes: list[Quote],
        token_in: str,
        token_out: str,
        amount: float,
        options: RoutingOptions,
        conditions: MarketConditions,
    ) -> OptimalRoute:
        """Recompute a route under options adjusted for market conditions.

        Returns the current route unchanged when conditions call for no
        adjustment, or when the adjusted search finds nothing viable.
        """
        adjusted = self.adjust_options(route, options, conditions)
        if adjusted == options:
            return route
        try:
            return self.find_optimal_route(quotes, token_in, token_out, amount, adjusted)
        except NoViableRouteError as err:
            logger.warning("reoptimize_kept_current_route", reason=err.reason)
            return route


__all__ = ["RoutingEngine"]
