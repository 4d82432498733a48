"""Quote feeds.

A quote feed supplies the venue quotes a routing request runs over.
PoolQuoteFeed derives them from the pool store: direct pools for the pair
plus the legs through each hub token, priced by the impact estimator,
costed by the gas estimator and stamped with the venue's trust score.
"""

from __future__ import annotations

from typing import Protocol

import structlog

from dexroute.constants import CHAIN_IDS, HUB_TOKENS
from dexroute.errors import DexRouteError
from dexroute.gas.estimator import FeeGasEstimator
from dexroute.gas.profiles import OperationProfile
from dexroute.gas.result import GasEstimate
from dexroute.impact.errors import PriceImpactError
from dexroute.impact.estimator import PriceImpactEstimator
from dexroute.models.quote import Quote
from dexroute.models.types import Speed, normalize_network, normalize_symbol
from dexroute.trust.model import VenueTrustModel
from dexroute.venues.base import Venue
from dexroute.venues.registry import VenueRegistry

logger = structlog.get_logger()


class QuoteFeed(Protocol):
    async def get_quotes(self, token_in: str, token_out: str, amount: float, network: str) -> list[Quote]: ...


class PoolQuoteFeed:
    """Quotes computed from the pools held in a PoolStore.

    Args:
        impact: Estimator with the pool store to quote from
        gas: Gas estimator for per-swap costs (EVM networks only)
        trust: Trust model for the quoted venues
        registry: Venue variants
        hub_tokens: Intermediate tokens whose legs are also quoted
    """

    def __init__(
        self,
        impact: PriceImpactEstimator,
        gas: FeeGasEstimator | None = None,
        trust: VenueTrustModel | None = None,
        registry: VenueRegistry | None = None,
        hub_tokens: tuple[str, ...] = HUB_TOKENS,
    ) -> None:
        self.impact = impact
        self.gas = gas
        self.trust = trust
        self.registry = registry or VenueRegistry()
        self.hub_tokens = hub_tokens

    async def get_quotes(self, token_in: str, token_out: str, amount: float, network: str) -> list[Quote]:
        return self.quotes(token_in, token_out, amount, network)

    def quotes(self, token_in: str, token_out: str, amount: float, network: str) -> list[Quote]:
        """Synchronous quote derivation from the current pool snapshot."""
        token_in = normalize_symbol(token_in)
        token_out = normalize_symbol(token_out)
        network = normalize_network(network)

        quotes = self._pair_quotes(token_in, token_out, amount, network)
        for hub in self.hub_tokens:
            hub = normalize_symbol(hub)
            if hub in (token_in, token_out):
                continue
            first_leg = self._pair_quotes(token_in, hub, amount, network)
            if not first_leg:
                continue
            hub_amount = max(q.amount_out for q in first_leg)
            second_leg = self._pair_quotes(hub, token_out, hub_amount, network)
            if second_leg:
                quotes.extend(first_leg)
                quotes.extend(second_leg)

        logger.debug(
            "pool_quotes_built", token_in=token_in, token_out=token_out, network=network, quotes=len(quotes)
        )
        return quotes

    def _pair_quotes(self, token_in: str, token_out: str, amount: float, network: str) -> list[Quote]:
        quotes = []
        for pool in self.impact.available_pools(token_in, token_out, network):
            venue = self.registry.resolve(pool.venue)
            try:
                quote = venue.quote(
                    pool,
                    token_in,
                    token_out,
                    amount,
                    self.impact,
                    gas=self._gas_for(venue, network),
                    trust_score=self._trust_for(venue, network),
                )
            except PriceImpactError as err:
                logger.warning("pool_quote_failed", venue=venue.name, pool=pool.address, error=str(err))
                continue
            quotes.append(quote)
        return quotes

    def _gas_for(self, venue: Venue, network: str) -> GasEstimate | None:
        if self.gas is None or network not in CHAIN_IDS:
            return None
        try:
            return self.gas.estimate(network, OperationProfile(venue.gas_profile), Speed.STANDARD)
        except DexRouteError as err:
            logger.warning("quote_gas_unavailable", venue=venue.name, network=network, error=str(err))
            return None

    def _trust_for(self, venue: Venue, network: str) -> float:
        if self.trust is None:
            return 0.0
        return self.trust.score(venue.name, network).overall
