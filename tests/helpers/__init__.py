"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Token symbols, seeded venues and common amounts
- factories: Quote, path, snapshot and metrics factory functions
"""

from tests.helpers.constants import (
    DAI,
    DEEP_LIQUIDITY_USD,
    ETH,
    JUPITER,
    REFERENCE_NATIVE_PRICE,
    SUSHISWAP,
    TRADE_AMOUNT,
    UNISWAP_V3,
    USDC,
    USDT,
    WBTC,
    WETH,
)
from tests.helpers.factories import make_metrics, make_path, make_quote, make_segment, make_snapshot

__all__ = [
    # Constants
    "ETH",
    "WETH",
    "USDC",
    "USDT",
    "DAI",
    "WBTC",
    "UNISWAP_V3",
    "SUSHISWAP",
    "JUPITER",
    "TRADE_AMOUNT",
    "DEEP_LIQUIDITY_USD",
    "REFERENCE_NATIVE_PRICE",
    # Factories
    "make_quote",
    "make_segment",
    "make_path",
    "make_snapshot",
    "make_metrics",
]
