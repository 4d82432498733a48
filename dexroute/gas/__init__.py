"""Fee and gas estimation.

Module structure:
- snapshot.py: NetworkGasSnapshot, gas market conditions at a point in time
- providers.py: Explorer, JSON-RPC, Blocknative and synthetic data sources
- store.py: GasSnapshotStore with ordered provider fallback and refresh loop
- price_feed.py: Native token USD prices with TTL cache and fallback table
- profiles.py: Per-venue gas profiles
- strategies.py: Pricing strategies and the congestion-driven selector
- estimator.py: FeeGasEstimator producing GasEstimate results

Usage:
    from dexroute.gas import FeeGasEstimator, OperationProfile, UNISWAP_V3_GAS

    estimator = FeeGasEstimator()
    estimate = estimator.estimate("ethereum", OperationProfile(UNISWAP_V3_GAS, 2), Speed.FAST)
"""

from dexroute.gas.estimator import FeeGasEstimator, confirmation_seconds
from dexroute.gas.price_feed import CoinGeckoPriceSource, NativePriceFeed, PriceSource
from dexroute.gas.profiles import (
    BALANCER_GAS,
    CURVE_GAS,
    DEFAULT_GAS_PROFILE,
    GAS_PROFILES,
    JUPITER_GAS,
    ONEINCH_GAS,
    SUSHISWAP_GAS,
    UNISWAP_V2_GAS,
    UNISWAP_V3_GAS,
    OperationProfile,
    VenueGasProfile,
    profile_for,
)
from dexroute.gas.providers import (
    BlocknativeGasProvider,
    EtherscanGasProvider,
    GasDataProvider,
    JsonRpcGasProvider,
    SyntheticGasProvider,
    default_providers,
)
from dexroute.gas.result import GasEstimate, GasEstimateRequest
from dexroute.gas.snapshot import NetworkGasSnapshot
from dexroute.gas.store import GasSnapshotStore, NetworkStatus
from dexroute.gas.strategies import GasStrategy, GasStrategyName, select_strategy

__all__ = [
    # Estimation
    "FeeGasEstimator",
    "GasEstimate",
    "GasEstimateRequest",
    "confirmation_seconds",
    # Snapshots
    "NetworkGasSnapshot",
    "GasSnapshotStore",
    "NetworkStatus",
    # Providers
    "GasDataProvider",
    "EtherscanGasProvider",
    "JsonRpcGasProvider",
    "BlocknativeGasProvider",
    "SyntheticGasProvider",
    "default_providers",
    # Prices
    "PriceSource",
    "CoinGeckoPriceSource",
    "NativePriceFeed",
    # Profiles
    "VenueGasProfile",
    "OperationProfile",
    "GAS_PROFILES",
    "profile_for",
    "UNISWAP_V2_GAS",
    "UNISWAP_V3_GAS",
    "SUSHISWAP_GAS",
    "CURVE_GAS",
    "BALANCER_GAS",
    "ONEINCH_GAS",
    "JUPITER_GAS",
    "DEFAULT_GAS_PROFILE",
    # Strategies
    "GasStrategy",
    "GasStrategyName",
    "select_strategy",
]
