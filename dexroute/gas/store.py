"""Per-network gas snapshot store.

Holds the latest snapshot for every configured network. Reads never block
and never come back empty: a network with no snapshot yet gets a synthetic
one. Refreshes walk the network's providers in order, keep the first
success, and fall back to the last known good snapshot (or a synthetic one)
when every live source fails.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import UTC, datetime

import structlog

from dexroute.config import GasConfig
from dexroute.constants import CHAIN_IDS
from dexroute.errors import UnsupportedNetworkError, UpstreamUnavailableError
from dexroute.gas.providers import GasDataProvider, SyntheticGasProvider
from dexroute.gas.snapshot import NetworkGasSnapshot

logger = structlog.get_logger()


@dataclass(frozen=True)
class NetworkStatus:
    """Summary of one network's gas conditions for status endpoints."""

    network: str
    chain_id: int
    gas_price: float
    base_fee: float
    congestion: float
    block_number: int
    source: str
    age_seconds: float
    healthy: bool


class GasSnapshotStore:
    """Latest gas snapshot per network with ordered provider fallback."""

    def __init__(
        self,
        providers: dict[str, list[GasDataProvider]] | None = None,
        fallback: SyntheticGasProvider | None = None,
        config: GasConfig | None = None,
        networks: tuple[str, ...] | list[str] | None = None,
    ) -> None:
        self.providers = providers or {}
        self.fallback = fallback or SyntheticGasProvider()
        self.config = config or GasConfig()
        self.networks = tuple(networks) if networks is not None else tuple(CHAIN_IDS)
        self._snapshots: dict[str, NetworkGasSnapshot] = {}

    def _check_network(self, network: str) -> None:
        if network not in CHAIN_IDS:
            raise UnsupportedNetworkError(f"No gas market data for network '{network}'")

    def get(self, network: str) -> NetworkGasSnapshot:
        """Latest snapshot for a network, synthesizing one if none exists."""
        self._check_network(network)
        snapshot = self._snapshots.get(network)
        if snapshot is None:
            snapshot = self.fallback.snapshot(network)
            self._snapshots[network] = snapshot
            logger.debug("gas_snapshot_synthesized", network=network)
        return snapshot

    def peek(self, network: str) -> NetworkGasSnapshot | None:
        return self._snapshots.get(network)

    def set(self, snapshot: NetworkGasSnapshot) -> None:
        self._check_network(snapshot.network)
        self._snapshots[snapshot.network] = snapshot

    async def refresh(self, network: str, force: bool = False) -> NetworkGasSnapshot:
        """Fetch a new snapshot for one network.

        A snapshot younger than the fresh age is returned as is unless
        force is set. Providers are tried in order with the configured
        timeout; the first success is stored. When all fail, the last
        known good snapshot is kept, or a synthetic one stored if there
        is none.
        """
        self._check_network(network)
        current = self._snapshots.get(network)
        if not force and current is not None and not current.is_synthetic:
            if current.age_seconds() < self.config.fresh_age:
                return current

        for provider in self.providers.get(network, []):
            try:
                snapshot = await asyncio.wait_for(
                    provider.fetch(network), timeout=self.config.request_timeout
                )
            except UpstreamUnavailableError as err:
                logger.warning(
                    "gas_provider_failed", network=network, provider=provider.name, error=err.detail
                )
                continue
            except TimeoutError:
                logger.warning("gas_provider_timeout", network=network, provider=provider.name)
                continue
            self._snapshots[network] = snapshot
            logger.debug(
                "gas_snapshot_refreshed",
                network=network,
                provider=provider.name,
                gas_price=snapshot.gas_price,
                congestion=round(snapshot.network_congestion, 1),
            )
            return snapshot

        if current is not None and not current.is_synthetic:
            logger.warning(
                "gas_using_last_known_good", network=network, age_seconds=round(current.age_seconds(), 1)
            )
            return current

        snapshot = self.fallback.snapshot(network)
        self._snapshots[network] = snapshot
        logger.warning("gas_using_synthetic", network=network)
        return snapshot

    async def get_fresh(self, network: str) -> NetworkGasSnapshot:
        """Snapshot no older than the max age, refetching if needed."""
        current = self.get(network)
        if current.is_synthetic or current.age_seconds() > self.config.max_age:
            return await self.refresh(network)
        return current

    async def refresh_all(self) -> dict[str, NetworkGasSnapshot]:
        """Refresh every configured network concurrently.

        One network failing does not affect the others.
        """
        results = await asyncio.gather(
            *(self.refresh(network) for network in self.networks), return_exceptions=True
        )
        refreshed: dict[str, NetworkGasSnapshot] = {}
        for network, result in zip(self.networks, results, strict=True):
            if isinstance(result, BaseException):
                logger.error("gas_refresh_failed", network=network, error=str(result))
                continue
            refreshed[network] = result
        return refreshed

    def prune(self, now: datetime | None = None) -> list[str]:
        """Drop snapshots older than the prune age; returns pruned networks."""
        now = now or datetime.now(UTC)
        stale = [
            network
            for network, snapshot in self._snapshots.items()
            if snapshot.age_seconds(now) > self.config.prune_age
        ]
        for network in stale:
            del self._snapshots[network]
        if stale:
            logger.debug("gas_snapshots_pruned", networks=stale)
        return stale

    async def run_forever(self, interval: float | None = None) -> None:
        """Refresh all networks on an interval until cancelled."""
        interval = interval if interval is not None else self.config.refresh_interval
        while True:
            await self.refresh_all()
            self.prune()
            await asyncio.sleep(interval)

    def status(self, network: str) -> NetworkStatus:
        snapshot = self.get(network)
        age = snapshot.age_seconds()
        return NetworkStatus(
            network=network,
            chain_id=snapshot.chain_id,
            gas_price=snapshot.gas_price,
            base_fee=snapshot.base_fee,
            congestion=snapshot.network_congestion,
            block_number=snapshot.block_number,
            source=snapshot.source,
            age_seconds=age,
            healthy=not snapshot.is_synthetic and age <= self.config.max_age,
        )

    def statuses(self) -> list[NetworkStatus]:
        return [self.status(network) for network in self.networks]
