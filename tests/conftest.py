"""Pytest configuration and fixtures.

Every fixture is built without network access: gas snapshots come from a
seeded synthetic provider or are set explicitly, and the native price feed
has no live source, so it serves the fallback table.
"""

import random
from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from dexroute.api.endpoints import get_service
from dexroute.api.main import app
from dexroute.gas.estimator import FeeGasEstimator
from dexroute.gas.price_feed import NativePriceFeed
from dexroute.gas.providers import SyntheticGasProvider
from dexroute.gas.store import GasSnapshotStore
from dexroute.impact.estimator import PriceImpactEstimator
from dexroute.impact.store import PoolStore
from dexroute.routing.engine import RoutingEngine
from dexroute.service import RoutingService
from dexroute.trust.model import VenueTrustModel
from dexroute.trust.store import SyntheticMetricsProvider, VenueMetricsStore
from tests.helpers import make_snapshot

# Fixed conditions: fee market, moderate congestion -> eip1559_optimized
STEADY_SNAPSHOT_KWARGS = {"base_fee": 20.0, "priority_fee": 2.0, "gas_price": 22.0, "congestion": 50.0}


@pytest.fixture
def trust_model() -> VenueTrustModel:
    """Trust model over the seeded venue metrics."""
    return VenueTrustModel(VenueMetricsStore.with_known_venues())


@pytest.fixture
def pool_store() -> PoolStore:
    return PoolStore.with_reference_pools()


@pytest.fixture
def impact_estimator(pool_store: PoolStore) -> PriceImpactEstimator:
    return PriceImpactEstimator(pool_store)


@pytest.fixture
def gas_store() -> GasSnapshotStore:
    """Snapshot store with no live providers and a steady ethereum snapshot."""
    store = GasSnapshotStore(providers={}, fallback=SyntheticGasProvider(random.Random(7)))
    store.set(make_snapshot("ethereum", **STEADY_SNAPSHOT_KWARGS))
    return store


@pytest.fixture
def price_feed() -> NativePriceFeed:
    return NativePriceFeed(source=None)


@pytest.fixture
def gas_estimator(gas_store: GasSnapshotStore, price_feed: NativePriceFeed) -> FeeGasEstimator:
    return FeeGasEstimator(gas_store, price_feed)


@pytest.fixture
def engine() -> RoutingEngine:
    """Engine without a trust model: segments use the quotes' trust scores."""
    return RoutingEngine()


@pytest.fixture
def service(
    trust_model: VenueTrustModel,
    pool_store: PoolStore,
    gas_store: GasSnapshotStore,
    price_feed: NativePriceFeed,
) -> RoutingService:
    """Fully wired service over reference pools, without network access."""
    return RoutingService(
        trust_model=trust_model,
        pools=pool_store,
        gas_store=gas_store,
        prices=price_feed,
        metrics_provider=SyntheticMetricsProvider(random.Random(7)),
    )


@pytest.fixture
def client(service: RoutingService) -> Iterator[TestClient]:
    """API client with the offline service injected."""
    app.dependency_overrides[get_service] = lambda: service
    yield TestClient(app)
    # Ensure dependency overrides are cleared after test
    app.dependency_overrides.clear()
