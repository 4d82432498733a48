"""Closed set of known venues plus a default variant."""

from __future__ import annotations

from dexroute.gas.profiles import (
    BALANCER_GAS,
    CURVE_GAS,
    DEFAULT_GAS_PROFILE,
    JUPITER_GAS,
    ONEINCH_GAS,
    SUSHISWAP_GAS,
    UNISWAP_V2_GAS,
    UNISWAP_V3_GAS,
)
from dexroute.venues.base import Venue, VenueKind

KNOWN_VENUES: tuple[Venue, ...] = (
    Venue(
        VenueKind.UNISWAP_V2,
        "UNISWAP_V2",
        UNISWAP_V2_GAS,
        12_000,
        "0x7a250d5630b4cf539739df2c5dacb4c659f2488d",
    ),
    Venue(
        VenueKind.UNISWAP_V3,
        "UNISWAP_V3",
        UNISWAP_V3_GAS,
        12_000,
        "0xe592427a0aece92de3edee1f18e0157c05861564",
    ),
    Venue(
        VenueKind.SUSHISWAP,
        "SUSHISWAP",
        SUSHISWAP_GAS,
        13_000,
        "0xd9e1ce17f2641f24ae83637ab66a2cca9c378b9f",
    ),
    Venue(VenueKind.CURVE, "CURVE", CURVE_GAS, 14_000),
    Venue(
        VenueKind.BALANCER,
        "BALANCER",
        BALANCER_GAS,
        14_000,
        "0xba12222222228d8ba445958a75a0704d566bf2c8",
    ),
    Venue(
        VenueKind.ONEINCH,
        "1INCH",
        ONEINCH_GAS,
        15_000,
        "0x1111111254eeb25477b68fb85ed929f73a960582",
    ),
    Venue(VenueKind.JUPITER, "JUPITER", JUPITER_GAS, 800),
)

DEFAULT_LATENCY_MS = 15_000

_ALIASES = {"ONEINCH": "1INCH", "UNISWAP": "UNISWAP_V2", "SUSHI": "SUSHISWAP"}


def normalize_venue_name(name: str) -> str:
    key = name.strip().upper().replace("-", "_").replace(" ", "_")
    return _ALIASES.get(key, key)


class VenueRegistry:
    """Resolves venue names to variants; unknown names get the default variant.

    Usage:
        registry = VenueRegistry()
        venue = registry.resolve("uniswap-v3")
        venue.gas_profile.gas_limit(2)
    """

    def __init__(self, venues: tuple[Venue, ...] = KNOWN_VENUES) -> None:
        self._venues = {venue.name: venue for venue in venues}

    def resolve(self, name: str) -> Venue:
        key = normalize_venue_name(name)
        venue = self._venues.get(key)
        if venue is not None:
            return venue
        return Venue(VenueKind.DEFAULT, key, DEFAULT_GAS_PROFILE, DEFAULT_LATENCY_MS)

    def is_known(self, name: str) -> bool:
        return normalize_venue_name(name) in self._venues

    @property
    def names(self) -> list[str]:
        return sorted(self._venues)

    def __iter__(self):
        return iter(self._venues.values())

    def __len__(self) -> int:
        return len(self._venues)
