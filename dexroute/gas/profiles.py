"""Per-venue gas profiles.

Different venue implementations cost different amounts of computation per
swap. A profile gives the fixed cost of the first swap and the marginal cost
of each additional hop.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class VenueGasProfile:
    """Gas cost model for one venue implementation."""

    name: str
    base_gas: int
    gas_per_hop: int
    optimizations: tuple[str, ...] = ()

    def gas_limit(self, hop_count: int) -> int:
        """Unadjusted gas limit: base_gas + gas_per_hop * max(1, hop_count)."""
        return self.base_gas + self.gas_per_hop * max(1, hop_count)


@dataclass(frozen=True)
class OperationProfile:
    """The operation being priced: which venue profile, how many hops."""

    gas_profile: VenueGasProfile
    hop_count: int = 1

    @classmethod
    def for_route(cls, gas_profile: VenueGasProfile, route: list[str] | tuple[str, ...]) -> OperationProfile:
        """Hops implied by a token route: one fewer than its length, at least one."""
        return cls(gas_profile=gas_profile, hop_count=max(1, len(route) - 1))


UNISWAP_V2_GAS = VenueGasProfile("uniswap_v2", 120_000, 60_000, ("multicall", "batch_transfers"))
UNISWAP_V3_GAS = VenueGasProfile("uniswap_v3", 150_000, 70_000, ("concentrated_liquidity", "multicall"))
SUSHISWAP_GAS = VenueGasProfile("sushiswap", 130_000, 65_000, ("bentobox", "multicall"))
CURVE_GAS = VenueGasProfile("curve", 200_000, 80_000, ("stable_math", "meta_pools"))
BALANCER_GAS = VenueGasProfile("balancer", 180_000, 75_000, ("weighted_math", "batch_swaps"))
ONEINCH_GAS = VenueGasProfile("1inch", 160_000, 40_000, ("pathfinding", "gas_optimization", "chi_gas_token"))
JUPITER_GAS = VenueGasProfile("jupiter", 5_000, 2_000, ("compute_optimization", "lookup_tables"))
DEFAULT_GAS_PROFILE = VenueGasProfile("default", 140_000, 60_000)

GAS_PROFILES: dict[str, VenueGasProfile] = {
    profile.name: profile
    for profile in (
        UNISWAP_V2_GAS,
        UNISWAP_V3_GAS,
        SUSHISWAP_GAS,
        CURVE_GAS,
        BALANCER_GAS,
        ONEINCH_GAS,
        JUPITER_GAS,
    )
}

_PROFILE_ALIASES = {"oneinch": "1inch", "uniswap": "uniswap_v2", "sushi": "sushiswap"}


def profile_for(venue: str) -> VenueGasProfile:
    """Gas profile for a venue name, case-insensitive; default if unknown."""
    key = venue.strip().lower().replace("-", "_").replace(" ", "_")
    key = _PROFILE_ALIASES.get(key, key)
    return GAS_PROFILES.get(key, DEFAULT_GAS_PROFILE)
