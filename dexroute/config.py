"""Engine configuration.

Each component reads its tunables from a frozen dataclass so tests can build
engines with alternative settings without touching module globals.
"""

import os
from dataclasses import dataclass, field

from dexroute.constants import CHAIN_IDS, HOP_FEE, HUB_TOKENS


@dataclass(frozen=True)
class RoutingConfig:
    """Tunables for the routing engine.

    Attributes:
        hub_tokens: Intermediate tokens tried for two-hop paths
        hop_fee: Flat venue fee applied per hop in the output fold (0.3%)
        split_factors: Sub-order counts tried when splitting large orders
        trust_floors: Minimum venue trust score per risk tolerance
        max_liquidity_utilization: Largest share of a segment's liquidity a
            trade may consume, per risk tolerance
    """

    hub_tokens: tuple[str, ...] = HUB_TOKENS
    hop_fee: float = HOP_FEE
    split_factors: tuple[int, ...] = (2, 3, 4)
    trust_floors: dict[str, float] = field(
        default_factory=lambda: {"low": 90.0, "medium": 75.0, "high": 60.0}
    )
    max_liquidity_utilization: dict[str, float] = field(
        default_factory=lambda: {"low": 0.1, "medium": 0.3, "high": 1.0}
    )


@dataclass(frozen=True)
class TrustConfig:
    """Tunables for the venue trust model.

    Attributes:
        history_size: Metric snapshots kept per venue (recent + older window)
        trend_window: Snapshots per side of the trend comparison
        trend_threshold: Relative change that flips the trend (5%)
        feedback_window_seconds: How long user reports count (7 days)
        incident_window_days: Recency window for incident risk (90 days)
        feedback_decay: Weight given to the feedback window when blending
        max_feedback_step: Largest change (points) one blend may apply
        refresh_interval: Seconds between metrics provider polls
    """

    history_size: int = 10
    trend_window: int = 5
    trend_threshold: float = 0.05
    feedback_window_seconds: float = 7 * 24 * 60 * 60
    incident_window_days: int = 90
    feedback_decay: float = 0.5
    max_feedback_step: float = 10.0
    refresh_interval: float = 60.0


@dataclass(frozen=True)
class GasConfig:
    """Tunables for the gas snapshot store and price feed.

    Attributes:
        refresh_interval: Seconds between background snapshot refreshes
        request_timeout: Per-source HTTP timeout in seconds
        fresh_age: Snapshots younger than this are served without refetch
        max_age: Snapshots older than this are considered stale
        prune_age: Snapshots older than this are dropped from the store
        native_price_ttl: Seconds a fetched native token price stays valid
    """

    refresh_interval: float = 15.0
    request_timeout: float = 10.0
    fresh_age: float = 30.0
    max_age: float = 60.0
    prune_age: float = 3600.0
    native_price_ttl: float = 300.0


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    return float(value) if value else default


@dataclass(frozen=True)
class EngineConfig:
    """Top-level configuration aggregating every component's settings."""

    routing: RoutingConfig = field(default_factory=RoutingConfig)
    trust: TrustConfig = field(default_factory=TrustConfig)
    gas: GasConfig = field(default_factory=GasConfig)
    networks: tuple[str, ...] = tuple(CHAIN_IDS)
    etherscan_api_key: str | None = None
    rpc_urls: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Build a configuration from DEXROUTE_* environment variables.

        Recognised variables:
        - DEXROUTE_NETWORKS: comma-separated networks to keep gas data for
        - DEXROUTE_GAS_REFRESH_INTERVAL: seconds between gas refreshes
        - DEXROUTE_REQUEST_TIMEOUT: per-source HTTP timeout in seconds
        - DEXROUTE_PRICE_TTL: native token price cache lifetime in seconds
        - DEXROUTE_ETHERSCAN_API_KEY: key for the explorer gas oracle
        - DEXROUTE_RPC_<NETWORK>: JSON-RPC endpoint for a network
        """
        networks_env = os.environ.get("DEXROUTE_NETWORKS")
        networks = (
            tuple(n.strip() for n in networks_env.split(",") if n.strip())
            if networks_env
            else tuple(CHAIN_IDS)
        )
        gas = GasConfig(
            refresh_interval=_env_float("DEXROUTE_GAS_REFRESH_INTERVAL", 15.0),
            request_timeout=_env_float("DEXROUTE_REQUEST_TIMEOUT", 10.0),
            native_price_ttl=_env_float("DEXROUTE_PRICE_TTL", 300.0),
        )
        rpc_urls = {
            network: url
            for network in networks
            if (url := os.environ.get(f"DEXROUTE_RPC_{network.upper()}"))
        }
        return cls(
            gas=gas,
            networks=networks,
            etherscan_api_key=os.environ.get("DEXROUTE_ETHERSCAN_API_KEY") or None,
            rpc_urls=rpc_urls,
        )


DEFAULT_ENGINE_CONFIG = EngineConfig()
