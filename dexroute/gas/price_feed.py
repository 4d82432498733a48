"""Native token USD prices for converting gas costs.

Prices are cached per chain for a configurable TTL. When the source fails
the last cached price is used, then the fallback table.
"""

from __future__ import annotations

import time
from typing import Protocol

import httpx
import structlog

from dexroute.constants import (
    COINGECKO_IDS,
    DEFAULT_NATIVE_PRICE_USD,
    FALLBACK_NATIVE_PRICES_USD,
)
from dexroute.errors import UpstreamUnavailableError

logger = structlog.get_logger()

COINGECKO_PRICE_URL = "https://api.coingecko.com/api/v3/simple/price"


class PriceSource(Protocol):
    name: str

    async def fetch(self, chain_id: int) -> float: ...


class CoinGeckoPriceSource:
    """USD price of a chain's native asset from the CoinGecko simple price API."""

    name = "coingecko"

    def __init__(
        self,
        url: str = COINGECKO_PRICE_URL,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.url = url
        self._client = client
        self.timeout = timeout

    async def _get(self, client: httpx.AsyncClient, asset_id: str) -> float:
        response = await client.get(
            self.url, params={"ids": asset_id, "vs_currencies": "usd"}, timeout=self.timeout
        )
        response.raise_for_status()
        return float(response.json()[asset_id]["usd"])

    async def fetch(self, chain_id: int) -> float:
        asset_id = COINGECKO_IDS.get(chain_id)
        if asset_id is None:
            raise UpstreamUnavailableError(self.name, f"no asset id for chain {chain_id}")
        try:
            if self._client is not None:
                return await self._get(self._client, asset_id)
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                return await self._get(client, asset_id)
        except httpx.HTTPError as err:
            raise UpstreamUnavailableError(self.name, str(err)) from err
        except (KeyError, TypeError, ValueError) as err:
            raise UpstreamUnavailableError(self.name, f"malformed response: {err}") from err


class NativePriceFeed:
    """TTL cache in front of a PriceSource with a static fallback table."""

    def __init__(
        self,
        source: PriceSource | None = None,
        ttl: float = 300.0,
        fallback_prices: dict[int, float] | None = None,
    ) -> None:
        self.source = source
        self.ttl = ttl
        self.fallback_prices = fallback_prices if fallback_prices is not None else FALLBACK_NATIVE_PRICES_USD
        # chain_id -> (price, monotonic fetch time)
        self._cache: dict[int, tuple[float, float]] = {}

    def fallback_price(self, chain_id: int) -> float:
        return self.fallback_prices.get(chain_id, DEFAULT_NATIVE_PRICE_USD)

    def cached_price(self, chain_id: int) -> float:
        """Last known price without any I/O."""
        cached = self._cache.get(chain_id)
        if cached is not None:
            return cached[0]
        return self.fallback_price(chain_id)

    def set_price(self, chain_id: int, price: float) -> None:
        self._cache[chain_id] = (price, time.monotonic())

    async def price(self, chain_id: int) -> float:
        cached = self._cache.get(chain_id)
        if cached is not None and time.monotonic() - cached[1] < self.ttl:
            return cached[0]
        if self.source is None:
            return self.cached_price(chain_id)
        try:
            price = await self.source.fetch(chain_id)
        except UpstreamUnavailableError as err:
            logger.warning("native_price_fetch_failed", chain_id=chain_id, error=err.detail)
            return self.cached_price(chain_id)
        self.set_price(chain_id, price)
        return price
