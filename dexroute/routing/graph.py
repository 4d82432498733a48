"""Per-request token graph built from venue quotes.

The graph is a pure data structure created fresh for each routing request,
so concurrent requests never share or mutate adjacency state.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from dexroute.models.quote import Quote
from dexroute.models.types import normalize_symbol
from dexroute.routing.types import PathSegment

# Resolves the trust score used for a quote's venue
TrustLookup = Callable[[Quote], float]


def quote_trust(quote: Quote) -> float:
    """Trust score as snapshotted on the quote itself."""
    return quote.trust_score


class TokenGraph:
    """Directed multigraph of tokens; each edge is a PathSegment.

    Usage:
        graph = TokenGraph.from_quotes(quotes, "USDC", "ETH")
        direct = graph.segments("USDC", "ETH")
    """

    def __init__(self) -> None:
        self._adjacency: dict[str, dict[str, list[PathSegment]]] = {}

    @classmethod
    def from_quotes(
        cls,
        quotes: Iterable[Quote],
        token_in: str,
        token_out: str,
        trust_of: TrustLookup = quote_trust,
    ) -> TokenGraph:
        """Build a graph from quotes.

        Quotes that do not name their pair are attributed to the pair being
        routed (token_in -> token_out).

        Args:
            quotes: Venue quotes for the request
            token_in: Token being sold
            token_out: Token being bought
            trust_of: Trust score lookup per quote
        """
        graph = cls()
        default_in = normalize_symbol(token_in)
        default_out = normalize_symbol(token_out)
        for quote in quotes:
            source = quote.token_in or default_in
            target = quote.token_out or default_out
            if source == target:
                continue
            graph.add_segment(PathSegment.from_quote(quote, source, target, trust_of(quote)))
        return graph

    def add_segment(self, segment: PathSegment) -> None:
        targets = self._adjacency.setdefault(segment.token_in, {})
        targets.setdefault(segment.token_out, []).append(segment)
        self._adjacency.setdefault(segment.token_out, {})

    def segments(self, token_in: str, token_out: str) -> list[PathSegment]:
        """Edges from token_in to token_out, ordered by venue for determinism."""
        found = self._adjacency.get(token_in, {}).get(token_out, [])
        return sorted(found, key=lambda s: (s.venue, s.price_impact, s.gas_cost))

    def neighbors(self, token: str) -> set[str]:
        return set(self._adjacency.get(token, {}))

    def has_token(self, token: str) -> bool:
        return token in self._adjacency

    @property
    def token_count(self) -> int:
        return len(self._adjacency)

    @property
    def segment_count(self) -> int:
        return sum(len(s) for targets in self._adjacency.values() for s in targets.values())


__all__ = ["TokenGraph", "TrustLookup", "quote_trust"]
