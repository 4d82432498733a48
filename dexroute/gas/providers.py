"""Gas market data providers.

Each provider turns one upstream (block explorer gas oracle, node JSON-RPC,
gas aggregator) into a NetworkGasSnapshot. Providers raise
UpstreamUnavailableError on any failure; retry and fallback across
providers is owned by GasSnapshotStore.

SyntheticGasProvider is the documented fallback: it never fails and is the
only place randomness enters gas data.
"""

from __future__ import annotations

import asyncio
import random
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Protocol

import httpx
import structlog

from dexroute.constants import (
    BLOCK_TIMES_MS,
    CHAIN_IDS,
    CONGESTION_BASELINE_GWEI,
    SYNTHETIC_BASE_GAS_GWEI,
    WEI_PER_GWEI,
)
from dexroute.errors import UnsupportedNetworkError, UpstreamUnavailableError
from dexroute.gas.snapshot import NetworkGasSnapshot

logger = structlog.get_logger()

# Block explorer APIs exposing an Etherscan-compatible gas oracle
EXPLORER_API_URLS: dict[str, str] = {
    "ethereum": "https://api.etherscan.io/api",
    "polygon": "https://api.polygonscan.com/api",
    "arbitrum": "https://api.arbiscan.io/api",
    "optimism": "https://api-optimistic.etherscan.io/api",
    "base": "https://api.basescan.org/api",
    "avalanche": "https://api.snowtrace.io/api",
    "bsc": "https://api.bscscan.com/api",
}

BLOCKNATIVE_URL = "https://api.blocknative.com/gasprices/blockprices"

DEFAULT_TIMEOUT = 10.0

# Errors that mean the upstream answered with something unusable
_PARSE_ERRORS = (KeyError, IndexError, TypeError, ValueError)


class GasDataProvider(Protocol):
    """Source of gas snapshots for one or more networks."""

    name: str

    async def fetch(self, network: str) -> NetworkGasSnapshot: ...


def chain_id_for(network: str) -> int:
    try:
        return CHAIN_IDS[network]
    except KeyError as err:
        raise UnsupportedNetworkError(f"No gas market data for network '{network}'") from err


def congestion_from_gas_price(gas_price: float, network: str) -> float:
    """Congestion (0-100) as the premium over the network's uncongested price."""
    baseline = CONGESTION_BASELINE_GWEI.get(network, 15.0)
    return min(100.0, max(0.0, (gas_price - baseline) / baseline * 100))


class _HttpProvider:
    """Shared HTTP plumbing: optional injected client, per-request timeout."""

    name = "http"

    def __init__(self, client: httpx.AsyncClient | None = None, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._client = client
        self.timeout = timeout

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                yield client

    def _unavailable(self, network: str, err: Exception) -> UpstreamUnavailableError:
        return UpstreamUnavailableError(self.name, f"{network}: {type(err).__name__}: {err}")


class EtherscanGasProvider(_HttpProvider):
    """Gas oracle and block height from an Etherscan-compatible explorer."""

    name = "etherscan"

    def __init__(
        self,
        api_key: str | None = None,
        urls: dict[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        super().__init__(client, timeout)
        self.api_key = api_key or ""
        self.urls = urls if urls is not None else EXPLORER_API_URLS

    def supports(self, network: str) -> bool:
        return network in self.urls

    async def fetch(self, network: str) -> NetworkGasSnapshot:
        if network not in self.urls:
            raise UpstreamUnavailableError(self.name, f"no explorer configured for {network}")
        url = self.urls[network]
        try:
            async with self._session() as client:
                gas_response, block_response = await asyncio.gather(
                    client.get(
                        url,
                        params={"module": "gastracker", "action": "gasoracle", "apikey": self.api_key},
                        timeout=self.timeout,
                    ),
                    client.get(
                        url,
                        params={"module": "proxy", "action": "eth_blockNumber", "apikey": self.api_key},
                        timeout=self.timeout,
                    ),
                )
                gas_response.raise_for_status()
                block_response.raise_for_status()
                oracle = gas_response.json()["result"]
                block_number = int(block_response.json()["result"], 16)
                return self._parse(network, oracle, block_number)
        except httpx.HTTPError as err:
            raise self._unavailable(network, err) from err
        except _PARSE_ERRORS as err:
            raise self._unavailable(network, err) from err

    def _parse(self, network: str, oracle: dict[str, Any], block_number: int) -> NetworkGasSnapshot:
        proposed = float(oracle["ProposeGasPrice"])
        base_fee = float(oracle.get("suggestBaseFee") or oracle.get("BaseFee") or 0)
        ratios = [float(r) for r in str(oracle.get("gasUsedRatio", "")).split(",") if r.strip()]
        congestion = min(100.0, max(0.0, (proposed - 10) / 0.5))
        utilization = sum(ratios) / len(ratios) * 100 if ratios else congestion
        return NetworkGasSnapshot(
            network=network,
            chain_id=chain_id_for(network),
            block_number=block_number,
            base_fee=base_fee,
            priority_fee=max(proposed - base_fee, 0.0) if base_fee > 0 else proposed,
            gas_price=proposed,
            network_congestion=congestion,
            block_utilization=min(100.0, utilization),
            average_block_time=BLOCK_TIMES_MS[network],
            source=self.name,
        )


class JsonRpcGasProvider(_HttpProvider):
    """Gas price and latest block header from a node's JSON-RPC endpoint."""

    name = "json_rpc"

    def __init__(
        self,
        rpc_urls: dict[str, str],
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        super().__init__(client, timeout)
        self.rpc_urls = rpc_urls

    def supports(self, network: str) -> bool:
        return network in self.rpc_urls

    async def _call(
        self, client: httpx.AsyncClient, url: str, method: str, params: list[Any], request_id: int
    ) -> Any:
        response = await client.post(
            url,
            json={"jsonrpc": "2.0", "method": method, "params": params, "id": request_id},
            timeout=self.timeout,
        )
        response.raise_for_status()
        body = response.json()
        if "error" in body:
            raise ValueError(f"{method}: {body['error']}")
        return body["result"]

    async def fetch(self, network: str) -> NetworkGasSnapshot:
        if network not in self.rpc_urls:
            raise UpstreamUnavailableError(self.name, f"no RPC endpoint configured for {network}")
        url = self.rpc_urls[network]
        try:
            async with self._session() as client:
                gas_price_hex, block = await asyncio.gather(
                    self._call(client, url, "eth_gasPrice", [], 1),
                    self._call(client, url, "eth_getBlockByNumber", ["latest", False], 2),
                )
                gas_price = int(gas_price_hex, 16) / WEI_PER_GWEI
                block_number = int(block["number"], 16)
                base_fee = int(block.get("baseFeePerGas") or "0x0", 16) / WEI_PER_GWEI
                gas_limit = int(block["gasLimit"], 16)
                utilization = int(block["gasUsed"], 16) / gas_limit * 100 if gas_limit else 0.0
        except httpx.HTTPError as err:
            raise self._unavailable(network, err) from err
        except _PARSE_ERRORS as err:
            raise self._unavailable(network, err) from err

        return NetworkGasSnapshot(
            network=network,
            chain_id=chain_id_for(network),
            block_number=block_number,
            base_fee=base_fee,
            priority_fee=max(gas_price - base_fee, 0.0),
            gas_price=gas_price,
            network_congestion=congestion_from_gas_price(gas_price, network),
            block_utilization=min(100.0, utilization),
            average_block_time=BLOCK_TIMES_MS[network],
            source=self.name,
        )


class BlocknativeGasProvider(_HttpProvider):
    """Block prices from the Blocknative gas API (Ethereum mainnet only)."""

    name = "blocknative"

    def __init__(
        self,
        api_key: str | None = None,
        url: str = BLOCKNATIVE_URL,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        super().__init__(client, timeout)
        self.api_key = api_key or ""
        self.url = url

    def supports(self, network: str) -> bool:
        return network == "ethereum"

    async def fetch(self, network: str) -> NetworkGasSnapshot:
        if network != "ethereum":
            raise UpstreamUnavailableError(self.name, f"{network} not covered")
        try:
            async with self._session() as client:
                response = await client.get(
                    self.url, headers={"Authorization": self.api_key}, timeout=self.timeout
                )
                response.raise_for_status()
                block = response.json()["blockPrices"][0]
                base_fee = float(block["baseFeePerGas"])
                priority_fee = float(block["estimatedPrices"][1]["maxPriorityFeePerGas"])
                utilization = min(100.0, float(block["gasUsedRatio"]) * 100)
                block_number = int(block["blockNumber"])
        except httpx.HTTPError as err:
            raise self._unavailable(network, err) from err
        except _PARSE_ERRORS as err:
            raise self._unavailable(network, err) from err

        return NetworkGasSnapshot(
            network=network,
            chain_id=chain_id_for(network),
            block_number=block_number,
            base_fee=base_fee,
            priority_fee=priority_fee,
            gas_price=base_fee + priority_fee,
            network_congestion=utilization,
            block_utilization=utilization,
            average_block_time=BLOCK_TIMES_MS[network],
            source=self.name,
        )


class SyntheticGasProvider:
    """Plausible random snapshots used when every live source fails.

    Gas price is the network's typical level; base fee and tip split it
    80/20. Congestion and utilization are drawn uniformly from 0-100 using
    the injected random generator.
    """

    name = "synthetic"

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    def snapshot(self, network: str) -> NetworkGasSnapshot:
        gas_price = SYNTHETIC_BASE_GAS_GWEI.get(network, 20.0)
        return NetworkGasSnapshot(
            network=network,
            chain_id=chain_id_for(network),
            block_number=int(time.time()),
            base_fee=gas_price * 0.8,
            priority_fee=gas_price * 0.2,
            gas_price=gas_price,
            network_congestion=self.rng.random() * 100,
            block_utilization=self.rng.random() * 100,
            average_block_time=BLOCK_TIMES_MS[network],
            source=self.name,
        )

    async def fetch(self, network: str) -> NetworkGasSnapshot:
        return self.snapshot(network)


def default_providers(
    networks: tuple[str, ...] | list[str],
    etherscan_api_key: str | None = None,
    rpc_urls: dict[str, str] | None = None,
    blocknative_api_key: str | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> dict[str, list[GasDataProvider]]:
    """Ordered live providers per network: explorer, node RPC, aggregator."""
    etherscan = EtherscanGasProvider(api_key=etherscan_api_key, timeout=timeout)
    rpc = JsonRpcGasProvider(rpc_urls or {}, timeout=timeout)
    blocknative = BlocknativeGasProvider(api_key=blocknative_api_key, timeout=timeout)

    providers: dict[str, list[GasDataProvider]] = {}
    for network in networks:
        ordered: list[GasDataProvider] = []
        if etherscan.supports(network):
            ordered.append(etherscan)
        if rpc.supports(network):
            ordered.append(rpc)
        if blocknative_api_key and blocknative.supports(network):
            ordered.append(blocknative)
        providers[network] = ordered
    return providers
