"""Route splitting for large orders.

The order amount itself is divided: k equal sub-orders are each carried by
one of the k best distinct surviving paths, with every sub-order's price
impact rescaled to its own size. A split is only kept when its combined
output strictly beats the best single path and its combined gas fits the
caller's budget.
"""

from __future__ import annotations

import structlog

from dexroute.models.route import RoutingOptions
from dexroute.routing.types import RoutingPath, ScoredPath, SplitRoute

logger = structlog.get_logger()


def _distinct_paths(ranked: list[ScoredPath]) -> list[RoutingPath]:
    seen: set[tuple] = set()
    paths = []
    for candidate in ranked:
        key = candidate.path.sort_key
        if key in seen:
            continue
        seen.add(key)
        paths.append(candidate.path)
    return paths


def build_split(paths: list[RoutingPath], amount: float) -> SplitRoute:
    """Divide ``amount`` equally across ``paths``."""
    share = amount / len(paths)
    return SplitRoute(parts=tuple(path.with_amount(share) for path in paths))


def find_best_split(
    ranked: list[ScoredPath],
    amount: float,
    options: RoutingOptions,
    split_factors: tuple[int, ...] = (2, 3, 4),
) -> SplitRoute | None:
    """Best split of ``amount`` over the ranked candidates, if any beats a single path.

    Args:
        ranked: Surviving candidates, best score first
        amount: Full order amount
        options: Caller constraints (split threshold, gas budget)
        split_factors: Sub-order counts to try

    Returns:
        The split with the highest combined output, or None when the order
        is below the threshold or no split strictly improves on the best
        single path
    """
    if amount < options.split_threshold or not ranked:
        return None

    paths = _distinct_paths(ranked)
    best_single_output = max(p.total_output for p in paths)
    best: SplitRoute | None = None
    best_output = best_single_output

    for k in split_factors:
        if k < 2 or len(paths) < k:
            continue
        split = build_split(paths[:k], amount)
        output = split.total_output
        if output > best_output and split.total_gas_cost <= options.max_gas_cost:
            best, best_output = split, output
        logger.debug(
            "split_evaluated",
            split_count=k,
            output=output,
            gas_cost=split.total_gas_cost,
            best_single_output=best_single_output,
        )
    return best


__all__ = ["build_split", "find_best_split"]
