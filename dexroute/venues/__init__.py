"""Venue variants and quote feeds.

Module structure:
- base.py: Venue variant, VenueKind tags and the VenueAdapter interface
- registry.py: VenueRegistry resolving names to known or default variants
- feed.py: QuoteFeed interface and PoolQuoteFeed deriving quotes from pools
"""

from dexroute.venues.base import Venue, VenueAdapter, VenueKind
from dexroute.venues.feed import PoolQuoteFeed, QuoteFeed
from dexroute.venues.registry import KNOWN_VENUES, VenueRegistry, normalize_venue_name

__all__ = [
    "KNOWN_VENUES",
    "PoolQuoteFeed",
    "QuoteFeed",
    "Venue",
    "VenueAdapter",
    "VenueKind",
    "VenueRegistry",
    "normalize_venue_name",
]
