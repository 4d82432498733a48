"""Fee and gas estimation.

Combines a venue gas profile, the network's latest gas snapshot and the
native token price into a GasEstimate. The synchronous estimate() never
performs I/O: it reads whatever the snapshot store and price feed hold.
The async entry points refresh stale data first.
"""

from __future__ import annotations

import asyncio
import math
from collections.abc import Callable

import structlog

from dexroute.constants import WEI_PER_ETHER, WEI_PER_GWEI
from dexroute.errors import DexRouteError
from dexroute.gas.price_feed import NativePriceFeed
from dexroute.gas.profiles import OperationProfile, VenueGasProfile, profile_for
from dexroute.gas.result import GasEstimate, GasEstimateRequest
from dexroute.gas.snapshot import NetworkGasSnapshot
from dexroute.gas.store import GasSnapshotStore, NetworkStatus
from dexroute.gas.strategies import (
    SPEED_BLOCKS,
    SPEED_MULTIPLIERS,
    gas_confidence,
    select_strategy,
)
from dexroute.models.types import Speed

logger = structlog.get_logger()

# Advice attached to the optimizations a venue implementation supports
OPTIMIZATION_TIPS: dict[str, str] = {
    "multicall": "Bundle approvals and swaps into one multicall transaction",
    "batch_transfers": "Batch transfers to amortize the base transaction cost",
    "concentrated_liquidity": "Prefer pools whose active range covers the trade to avoid extra tick crossings",
    "bentobox": "Keep balances in BentoBox to skip token transfers between swaps",
    "stable_math": "Use stable pools for pegged assets; they need fewer hops",
    "meta_pools": "Route through meta pools instead of chaining base pool swaps",
    "weighted_math": "Weighted pools can replace a two-hop route with a single swap",
    "batch_swaps": "Use batch swaps to execute multi-hop routes in one call",
    "pathfinding": "Let the aggregator pathfinder merge hops sharing a pool",
    "gas_optimization": "Enable the aggregator's gas-optimized execution mode",
    "chi_gas_token": "Gas tokens can offset part of the execution cost",
    "compute_optimization": "Request a tighter compute budget for simple routes",
    "lookup_tables": "Use address lookup tables to shrink transaction size",
}


class FeeGasEstimator:
    """Estimate gas limit, fee and fiat cost for venue operations.

    Args:
        snapshots: Per-network gas snapshot store
        prices: Native token price feed
        profiles: Maps a venue name to its gas profile
    """

    def __init__(
        self,
        snapshots: GasSnapshotStore | None = None,
        prices: NativePriceFeed | None = None,
        profiles: Callable[[str], VenueGasProfile] = profile_for,
    ) -> None:
        self.snapshots = snapshots or GasSnapshotStore()
        self.prices = prices or NativePriceFeed()
        self.profiles = profiles

    def estimate(
        self,
        network: str,
        operation: OperationProfile,
        speed: Speed = Speed.STANDARD,
        snapshot: NetworkGasSnapshot | None = None,
        native_price: float | None = None,
    ) -> GasEstimate:
        """Price one operation from the current (or given) snapshot.

        Raises:
            UnsupportedNetworkError: If the network has no gas market data
        """
        snapshot = snapshot or self.snapshots.get(network)
        if native_price is None:
            native_price = self.prices.cached_price(snapshot.chain_id)

        strategy = select_strategy(snapshot)
        speed_multiplier = SPEED_MULTIPLIERS[speed]
        gas_limit = math.ceil(operation.gas_profile.gas_limit(operation.hop_count) * strategy.gas_multiplier)

        max_fee: float | None = None
        max_priority: float | None = None
        if snapshot.has_fee_market:
            max_priority = snapshot.priority_fee * strategy.priority_fee_multiplier * speed_multiplier
            max_fee = 2 * snapshot.base_fee + max_priority
            gas_price = max_fee
        else:
            gas_price = snapshot.gas_price * strategy.gas_multiplier * speed_multiplier

        total_cost_wei = round(gas_limit * gas_price * WEI_PER_GWEI)
        total_cost_usd = total_cost_wei / WEI_PER_ETHER * native_price

        return GasEstimate(
            network=network,
            gas_limit=gas_limit,
            gas_price=gas_price,
            max_fee_per_gas=max_fee,
            max_priority_fee_per_gas=max_priority,
            total_cost_wei=total_cost_wei,
            total_cost_usd=total_cost_usd,
            confidence=gas_confidence(snapshot, strategy),
            speed=speed,
            estimated_confirmation_time=confirmation_seconds(snapshot, speed),
            strategy=strategy.name,
        )

    async def estimate_gas(
        self,
        venue: str,
        route: list[str] | tuple[str, ...],
        network: str,
        speed: Speed = Speed.STANDARD,
    ) -> GasEstimate:
        """Estimate a swap along a token route on one venue, refreshing stale data."""
        snapshot = await self.snapshots.get_fresh(network)
        native_price = await self.prices.price(snapshot.chain_id)
        operation = OperationProfile.for_route(self.profiles(venue), route)
        estimate = self.estimate(network, operation, speed, snapshot=snapshot, native_price=native_price)
        logger.debug(
            "gas_estimated",
            venue=venue,
            network=network,
            gas_limit=estimate.gas_limit,
            strategy=estimate.strategy.value,
            cost_usd=round(estimate.total_cost_usd, 4),
        )
        return estimate

    async def batch_estimate(self, requests: list[GasEstimateRequest]) -> list[GasEstimate]:
        """Estimate several operations concurrently; failed items are skipped."""
        results = await asyncio.gather(
            *(self.estimate_gas(r.venue, r.route, r.network, r.speed) for r in requests),
            return_exceptions=True,
        )
        estimates: list[GasEstimate] = []
        for request, result in zip(requests, results, strict=True):
            if isinstance(result, DexRouteError):
                logger.warning(
                    "batch_gas_estimate_failed", venue=request.venue, network=request.network, error=str(result)
                )
                continue
            if isinstance(result, BaseException):
                raise result
            estimates.append(result)
        return estimates

    def network_status(self, network: str) -> NetworkStatus:
        return self.snapshots.status(network)

    def all_network_statuses(self) -> list[NetworkStatus]:
        return self.snapshots.statuses()

    def optimization_tips(self, venue: str, network: str | None = None) -> list[str]:
        """Practical ways to reduce gas on a venue, given current conditions."""
        profile = self.profiles(venue)
        tips = [OPTIMIZATION_TIPS[name] for name in profile.optimizations if name in OPTIMIZATION_TIPS]
        if network is not None:
            tips.extend(_condition_tips(self.snapshots.get(network)))
        return tips


def confirmation_seconds(snapshot: NetworkGasSnapshot, speed: Speed) -> int:
    """Expected seconds to inclusion: block time x blocks, stretched by congestion."""
    block_time = snapshot.average_block_time / 1000
    return math.ceil(block_time * SPEED_BLOCKS[speed] * (1 + snapshot.network_congestion / 100))


def _condition_tips(snapshot: NetworkGasSnapshot) -> list[str]:
    tips = []
    if snapshot.network_congestion > 70:
        tips.append("Network is congested; delay non-urgent trades or use a slower speed")
    elif snapshot.network_congestion < 30:
        tips.append("Network is quiet; a slow speed setting will confirm promptly")
    if snapshot.has_fee_market:
        tips.append(f"Set max fee near {2 * snapshot.base_fee:.2f} gwei plus tip to avoid overpaying")
    if snapshot.block_utilization > 90:
        tips.append("Blocks are nearly full; expect base fee increases over the next blocks")
    return tips
