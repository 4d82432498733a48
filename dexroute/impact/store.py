"""Injectable pool store.

Pool reserves are supplied by external indexers. The store holds the latest
known state per network and is replaced wholesale on refresh, so readers
always see a complete snapshot.
"""

from __future__ import annotations

import structlog

from dexroute.impact.pools import ConstantProductPool, Pool, pool_trades
from dexroute.models.types import normalize_network

logger = structlog.get_logger()


class PoolStore:
    """Process-local pools keyed by network.

    Usage:
        store = PoolStore()
        store.add(ConstantProductPool(venue="SUSHISWAP", token0="USDC", ...))
        pools = store.pools_for("USDC", "ETH", "ethereum")
    """

    def __init__(self, pools: list[Pool] | None = None) -> None:
        self._pools: dict[str, tuple[Pool, ...]] = {}
        for pool in pools or []:
            self.add(pool)

    def add(self, pool: Pool) -> None:
        """Add or replace a pool, keyed by venue and token set."""
        network = normalize_network(pool.network)
        current = self._pools.get(network, ())
        kept = tuple(
            p for p in current if not (p.venue == pool.venue and set(p.tokens) == set(pool.tokens))
        )
        self._pools[network] = kept + (pool,)

    def replace_network(self, network: str, pools: list[Pool]) -> None:
        """Swap in a fresh snapshot of every pool on a network."""
        self._pools[normalize_network(network)] = tuple(pools)
        logger.debug("pools_replaced", network=network, pool_count=len(pools))

    def pools_for(self, token_in: str, token_out: str, network: str) -> list[Pool]:
        return [
            p
            for p in self._pools.get(normalize_network(network), ())
            if pool_trades(p, token_in, token_out)
        ]

    @property
    def pool_count(self) -> int:
        return sum(len(pools) for pools in self._pools.values())

    @classmethod
    def with_reference_pools(cls) -> PoolStore:
        """Store seeded with the mainnet USDC/ETH reference pools."""
        return cls(
            [
                ConstantProductPool(
                    venue="UNISWAP_V3",
                    token0="USDC",
                    token1="ETH",
                    reserve0=50_000_000,
                    reserve1=17_500,
                    fee=0.0005,
                    address="0x88e6a0c2ddd26feeb64f039a2c41296fcb3f5640",
                    total_liquidity_usd=142_500_000,
                    volume_24h=25_000_000,
                ),
                ConstantProductPool(
                    venue="SUSHISWAP",
                    token0="USDC",
                    token1="ETH",
                    reserve0=25_000_000,
                    reserve1=8_750,
                    fee=0.003,
                    address="0xa43fe16908251ee70ef74718545e4fe6c5ccec9f",
                    total_liquidity_usd=71_250_000,
                    volume_24h=8_000_000,
                ),
            ]
        )
