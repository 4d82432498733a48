"""Type definitions for the routing module.

RoutingPath totals are never stored: every aggregate is a fold over the
path's segments, so a path cannot disagree with itself.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from functools import cached_property

from dexroute.constants import HOP_FEE
from dexroute.models.quote import Quote
from dexroute.models.types import PathStrategy


@dataclass(frozen=True)
class PathSegment:
    """One venue-mediated edge of the token graph.

    Attributes:
        price_impact: Percent, for the amount the segment is traded at
        gas_cost: USD cost of gas for the hop
        trust_score: Venue trust score (0-100) used for filtering
        latency: Expected execution time in milliseconds
    """

    token_in: str
    token_out: str
    venue: str
    liquidity_usd: float
    price_impact: float
    gas_cost: float
    trust_score: float
    latency: float
    network: str = "ethereum"
    quote: Quote | None = field(default=None, compare=False, repr=False)

    @classmethod
    def from_quote(cls, quote: Quote, token_in: str, token_out: str, trust_score: float) -> PathSegment:
        return cls(
            token_in=token_in,
            token_out=token_out,
            venue=quote.venue,
            liquidity_usd=quote.liquidity_usd,
            price_impact=quote.price_impact,
            gas_cost=quote.gas_cost_usd,
            trust_score=trust_score,
            latency=quote.execution_time,
            network=quote.network,
            quote=quote,
        )

    def scaled(self, factor: float) -> PathSegment:
        """Segment traded at ``factor`` times its quoted size.

        Price impact is proportional to size for trades small relative to
        depth, so it is rescaled linearly and capped at 100%.
        """
        return replace(self, price_impact=min(100.0, self.price_impact * factor))


@dataclass(frozen=True)
class RoutingPath:
    """An ordered sequence of segments carrying ``amount_in`` end to end."""

    segments: tuple[PathSegment, ...]
    amount_in: float
    strategy: PathStrategy = PathStrategy.DIRECT
    hop_fee: float = HOP_FEE

    @property
    def hop_count(self) -> int:
        return len(self.segments)

    @property
    def tokens(self) -> tuple[str, ...]:
        return (self.segments[0].token_in,) + tuple(s.token_out for s in self.segments)

    @property
    def venues(self) -> tuple[str, ...]:
        return tuple(s.venue for s in self.segments)

    @cached_property
    def step_amounts(self) -> tuple[float, ...]:
        """Amount leaving each hop: impact then the flat hop fee."""
        amounts = []
        current = self.amount_in
        for segment in self.segments:
            current = current * (1 - segment.price_impact / 100) * (1 - self.hop_fee)
            amounts.append(current)
        return tuple(amounts)

    @property
    def total_output(self) -> float:
        return self.step_amounts[-1] if self.segments else 0.0

    @property
    def total_gas_cost(self) -> float:
        return sum(s.gas_cost for s in self.segments)

    @property
    def total_price_impact(self) -> float:
        """Compounded impact in percent: 1 - prod(1 - impact_i)."""
        remaining = 1.0
        for segment in self.segments:
            remaining *= 1 - segment.price_impact / 100
        return (1 - remaining) * 100

    @property
    def total_latency(self) -> float:
        return max((s.latency for s in self.segments), default=0.0)

    @property
    def reliability_score(self) -> float:
        """Mean trust score of the segments."""
        if not self.segments:
            return 0.0
        return sum(s.trust_score for s in self.segments) / len(self.segments)

    @property
    def min_trust_score(self) -> float:
        return min((s.trust_score for s in self.segments), default=0.0)

    @property
    def sort_key(self) -> tuple[tuple[str, ...], tuple[str, ...]]:
        """Deterministic identity used to break ties."""
        return (self.tokens, self.venues)

    def with_amount(self, amount: float) -> RoutingPath:
        """The same path carrying a different amount, impact rescaled by size."""
        factor = amount / self.amount_in if self.amount_in > 0 else 1.0
        return RoutingPath(
            segments=tuple(s.scaled(factor) for s in self.segments),
            amount_in=amount,
            strategy=self.strategy,
            hop_fee=self.hop_fee,
        )


@dataclass(frozen=True)
class SplitRoute:
    """An order divided into equal sub-orders over distinct paths."""

    parts: tuple[RoutingPath, ...]

    @property
    def split_count(self) -> int:
        return len(self.parts)

    @property
    def amount_in(self) -> float:
        return sum(p.amount_in for p in self.parts)

    @property
    def total_output(self) -> float:
        return sum(p.total_output for p in self.parts)

    @property
    def total_gas_cost(self) -> float:
        return sum(p.total_gas_cost for p in self.parts)

    @property
    def total_price_impact(self) -> float:
        """Amount-weighted mean of the sub-orders' impacts."""
        total = self.amount_in
        if total <= 0:
            return 0.0
        return sum(p.total_price_impact * p.amount_in for p in self.parts) / total

    @property
    def total_latency(self) -> float:
        return max((p.total_latency for p in self.parts), default=0.0)

    @property
    def reliability_score(self) -> float:
        total = self.amount_in
        if total <= 0:
            return 0.0
        return sum(p.reliability_score * p.amount_in for p in self.parts) / total


@dataclass(frozen=True)
class RejectedCandidate:
    """A candidate path and every constraint it violated."""

    path: RoutingPath
    reasons: tuple[str, ...]


@dataclass(frozen=True)
class ScoredPath:
    """A surviving candidate and its composite score."""

    path: RoutingPath
    score: float


@dataclass
class CandidateRanking:
    """Every candidate evaluated for a request, best first."""

    accepted: list[ScoredPath] = field(default_factory=list)
    rejected: list[RejectedCandidate] = field(default_factory=list)

    @property
    def best(self) -> ScoredPath | None:
        return self.accepted[0] if self.accepted else None


@dataclass(frozen=True)
class MarketConditions:
    """Live conditions used to re-tune routing options.

    Attributes:
        volatility: Recent relative price volatility (0.05 = 5%)
        congestion: Network congestion as a 0-1 fraction
    """

    volatility: float = 0.0
    congestion: float = 0.0


__all__ = [
    "CandidateRanking",
    "MarketConditions",
    "PathSegment",
    "RejectedCandidate",
    "RoutingPath",
    "ScoredPath",
    "SplitRoute",
]
