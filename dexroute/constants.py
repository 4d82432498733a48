"""Network and venue constants shared across the routing engine."""

# Intermediate tokens tried when building two-hop paths
HUB_TOKENS: tuple[str, ...] = ("USDC", "USDT", "ETH", "WETH", "DAI")

# Commonly routed tokens per network
BASE_TOKENS: dict[str, tuple[str, ...]] = {
    "ethereum": ("ETH", "WETH", "USDC", "USDT", "DAI", "WBTC"),
    "arbitrum": ("ETH", "WETH", "USDC", "USDT", "ARB"),
    "optimism": ("ETH", "WETH", "USDC", "USDT", "OP"),
    "polygon": ("MATIC", "WMATIC", "USDC", "USDT", "DAI"),
    "base": ("ETH", "WETH", "USDC", "USDbC"),
    "bsc": ("BNB", "WBNB", "USDT", "USDC", "BUSD"),
    "avalanche": ("AVAX", "WAVAX", "USDC", "USDT"),
    "solana": ("SOL", "WSOL", "USDC", "USDT"),
}

# Flat venue fee charged per hop when folding a path's output
HOP_FEE = 0.003

# EVM networks with gas market data
CHAIN_IDS: dict[str, int] = {
    "ethereum": 1,
    "polygon": 137,
    "arbitrum": 42161,
    "optimism": 10,
    "base": 8453,
    "avalanche": 43114,
    "bsc": 56,
}

NATIVE_SYMBOLS: dict[int, str] = {
    1: "ETH",
    137: "MATIC",
    42161: "ETH",
    10: "ETH",
    8453: "ETH",
    43114: "AVAX",
    56: "BNB",
}

# Average block time in milliseconds
BLOCK_TIMES_MS: dict[str, int] = {
    "ethereum": 12_000,
    "polygon": 2_000,
    "arbitrum": 1_000,
    "optimism": 2_000,
    "base": 2_000,
    "avalanche": 2_000,
    "bsc": 3_000,
}

# Gas price (gwei) used as the centre of synthetic snapshots
SYNTHETIC_BASE_GAS_GWEI: dict[str, float] = {
    "ethereum": 25.0,
    "polygon": 30.0,
    "arbitrum": 0.1,
    "optimism": 0.001,
    "base": 0.001,
    "avalanche": 25.0,
    "bsc": 5.0,
}

# Uncongested gas price (gwei) used to derive congestion from a bare gas price
CONGESTION_BASELINE_GWEI: dict[str, float] = {
    "ethereum": 15.0,
    "polygon": 20.0,
    "arbitrum": 0.1,
    "optimism": 0.001,
    "base": 0.001,
    "avalanche": 20.0,
    "bsc": 3.0,
}

# CoinGecko asset ids keyed by chain id
COINGECKO_IDS: dict[int, str] = {
    1: "ethereum",
    137: "matic-network",
    42161: "ethereum",
    10: "ethereum",
    8453: "ethereum",
    43114: "avalanche-2",
    56: "binancecoin",
}

# Native token USD prices used when the price feed is unavailable
FALLBACK_NATIVE_PRICES_USD: dict[int, float] = {
    1: 2850.0,
    137: 0.8,
    42161: 2850.0,
    10: 2850.0,
    8453: 2850.0,
    43114: 25.0,
    56: 320.0,
}
DEFAULT_NATIVE_PRICE_USD = 2850.0

WEI_PER_GWEI = 10**9
WEI_PER_ETHER = 10**18
