"""Segment and path scoring, constraint checks and selection."""

from __future__ import annotations

from dexroute.config import RoutingConfig
from dexroute.models.route import RoutingOptions
from dexroute.routing.types import PathSegment, RoutingPath, ScoredPath

# Segment score weights
SEGMENT_GAS_WEIGHT = 30
SEGMENT_IMPACT_WEIGHT = 20
SEGMENT_SPEED_WEIGHT = 25
SEGMENT_TRUST_WEIGHT = 15
SEGMENT_LIQUIDITY_WEIGHT = 10
# Impact (percent) above which a segment's impact term turns negative
SEGMENT_IMPACT_CEILING = 5.0
# Liquidity (USD) at which the liquidity term saturates
SEGMENT_LIQUIDITY_SATURATION = 1_000_000

# Path score weights
OUTPUT_WEIGHT = 40
GAS_HEADROOM_WEIGHT = 20
SLIPPAGE_HEADROOM_WEIGHT = 15
SPEED_WEIGHT = 10
TRUST_WEIGHT = 10
SIMPLICITY_WEIGHT = 5
# Latency (ms) at which the speed term reaches zero
SPEED_HORIZON_MS = 10_000


def segment_score(segment: PathSegment, options: RoutingOptions) -> float:
    """Weighted desirability of one hop, driven by the caller's priorities."""
    score = 0.0
    if options.prioritize_cost:
        score += 1 / (segment.gas_cost + 1) * SEGMENT_GAS_WEIGHT
        score += (SEGMENT_IMPACT_CEILING - segment.price_impact) * SEGMENT_IMPACT_WEIGHT
    if options.prioritize_speed:
        score += 1 / (segment.latency + 1) * SEGMENT_SPEED_WEIGHT
    score += segment.trust_score / 100 * SEGMENT_TRUST_WEIGHT
    score += min(segment.liquidity_usd / SEGMENT_LIQUIDITY_SATURATION, 1.0) * SEGMENT_LIQUIDITY_WEIGHT
    return score


def best_segment(segments: list[PathSegment], options: RoutingOptions) -> PathSegment | None:
    """Highest scoring segment; ties go to the first in venue order."""
    best: PathSegment | None = None
    best_score = float("-inf")
    for segment in sorted(segments, key=lambda s: s.venue):
        score = segment_score(segment, options)
        if score > best_score:
            best, best_score = segment, score
    return best


def _headroom(limit: float, used: float) -> float:
    if limit <= 0:
        return 1.0 if used <= 0 else 0.0
    return max(0.0, (limit - used) / limit)


def path_score(path: RoutingPath, amount: float, options: RoutingOptions) -> float:
    """Composite score of a costed path (higher is better)."""
    score = path.total_output / amount * OUTPUT_WEIGHT if amount > 0 else 0.0
    score += _headroom(options.max_gas_cost, path.total_gas_cost) * GAS_HEADROOM_WEIGHT
    score += _headroom(options.max_slippage, path.total_price_impact) * SLIPPAGE_HEADROOM_WEIGHT
    if options.prioritize_speed:
        score += max(0.0, (SPEED_HORIZON_MS - path.total_latency) / SPEED_HORIZON_MS) * SPEED_WEIGHT
    score += path.reliability_score / 100 * TRUST_WEIGHT
    score += max(0.0, (options.max_hops + 1 - path.hop_count) / options.max_hops) * SIMPLICITY_WEIGHT
    return score


def trust_floor(options: RoutingOptions, config: RoutingConfig) -> float:
    return config.trust_floors[options.risk_tolerance.value]


def segment_violations(
    segment: PathSegment,
    options: RoutingOptions,
    config: RoutingConfig,
    trade_value: float,
) -> list[str]:
    """Trust floor and liquidity constraints broken by a single hop."""
    reasons = []
    floor = trust_floor(options, config)
    if segment.trust_score < floor:
        reasons.append(
            f"{segment.venue} trust {segment.trust_score:.0f} below "
            f"{options.risk_tolerance.value} risk floor {floor:.0f}"
        )
    utilization = config.max_liquidity_utilization[options.risk_tolerance.value]
    if trade_value > segment.liquidity_usd * utilization:
        reasons.append(
            f"{segment.venue} {segment.token_in}->{segment.token_out} liquidity "
            f"${segment.liquidity_usd:,.0f} too shallow for ${trade_value:,.0f}"
        )
    return reasons


def constraint_violations(
    path: RoutingPath,
    options: RoutingOptions,
    config: RoutingConfig,
    trade_value: float,
) -> list[str]:
    """Every constraint the path breaks, checked on the aggregate path.

    Args:
        path: Candidate path
        options: Caller constraints
        config: Routing tunables (trust floors, liquidity utilization caps)
        trade_value: Fiat value of the order, compared against liquidity

    Returns:
        Human-readable reasons; empty if the path is viable
    """
    reasons = []
    if path.total_price_impact > options.max_slippage:
        reasons.append(
            f"price impact {path.total_price_impact:.4f}% exceeds max slippage {options.max_slippage}%"
        )
    if path.total_gas_cost > options.max_gas_cost:
        reasons.append(f"gas cost ${path.total_gas_cost:.2f} exceeds max ${options.max_gas_cost:.2f}")
    if path.hop_count > options.max_hops:
        reasons.append(f"{path.hop_count} hops exceeds max {options.max_hops}")

    for segment in path.segments:
        reasons.extend(segment_violations(segment, options, config, trade_value))
    return reasons


def select_path(scored: list[ScoredPath], options: RoutingOptions) -> ScoredPath:
    """Pick the winner per the caller's priority.

    Fastest when speed is prioritized, cheapest (gas + impact) when cost
    is, otherwise the highest score. Ties fall to the higher score, then
    the path's deterministic sort key.
    """
    if not scored:
        raise ValueError("select_path requires at least one candidate")

    def tiebreak(candidate: ScoredPath) -> tuple[float, tuple]:
        return (-candidate.score, candidate.path.sort_key)

    if options.prioritize_speed:
        return min(scored, key=lambda c: (c.path.total_latency, *tiebreak(c)))
    if options.prioritize_cost:
        return min(
            scored, key=lambda c: (c.path.total_gas_cost + c.path.total_price_impact, *tiebreak(c))
        )
    return min(scored, key=tiebreak)


__all__ = [
    "best_segment",
    "constraint_violations",
    "path_score",
    "segment_score",
    "segment_violations",
    "select_path",
    "trust_floor",
]
