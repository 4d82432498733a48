"""Liquidity pool types priced by the impact estimator.

Two curve families are supported:
- ConstantProductPool: x * y = k with the fee taken on input
- StableSwapPool: Curve-style StableSwap invariant with amplification A

Both expose the same pricing surface (get_amount_out, spot_price,
after_swap, depth) so the estimator can treat them uniformly.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from dexroute.impact.errors import InvalidPoolError, ZeroBalanceError
from dexroute.impact.stable_math import stable_calc_out_given_in, stable_spot_price
from dexroute.models.types import normalize_symbol


class PoolKind(str, Enum):
    """Pricing curve of a pool."""

    CONSTANT_PRODUCT = "constant_product"
    STABLE = "stable"


@dataclass(frozen=True)
class ConstantProductPool:
    """Represents a constant-product (UniswapV2-style) liquidity pool."""

    venue: str
    token0: str
    token1: str
    reserve0: float
    reserve1: float
    # Fee as a fraction of the input (0.003 = 0.3%)
    fee: float = 0.003
    network: str = "ethereum"
    address: str | None = None
    # Fiat value of both reserves
    total_liquidity_usd: float = 0.0
    volume_24h: float = 0.0

    kind = PoolKind.CONSTANT_PRODUCT

    @property
    def tokens(self) -> tuple[str, str]:
        return (normalize_symbol(self.token0), normalize_symbol(self.token1))

    def get_reserves(self, token_in: str) -> tuple[float, float]:
        """Get reserves ordered as (reserve_in, reserve_out)."""
        token_in_norm = normalize_symbol(token_in)
        if token_in_norm == normalize_symbol(self.token0):
            return self.reserve0, self.reserve1
        elif token_in_norm == normalize_symbol(self.token1):
            return self.reserve1, self.reserve0
        else:
            raise InvalidPoolError(f"Token {token_in} not in pool {self.venue}")

    def get_amount_out(self, token_in: str, token_out: str, amount_in: float) -> float:
        """Calculate output using the constant product formula.

        Formula: out = R_out - k / (R_in + in * (1 - fee))
        """
        self._check_pair(token_in, token_out)
        self._check_liquidity(token_in, token_out)
        if amount_in <= 0:
            return 0.0
        reserve_in, reserve_out = self.get_reserves(token_in)
        amount_in_after_fee = amount_in * (1 - self.fee)
        return reserve_out * amount_in_after_fee / (reserve_in + amount_in_after_fee)

    def spot_price(self, token_in: str, token_out: str) -> float:
        """Marginal price of token_in in token_out, excluding the fee."""
        self._check_pair(token_in, token_out)
        self._check_liquidity(token_in, token_out)
        reserve_in, reserve_out = self.get_reserves(token_in)
        return reserve_out / reserve_in

    def after_swap(self, token_in: str, token_out: str, amount_in: float) -> ConstantProductPool:
        """Pool state after swapping amount_in of token_in.

        The fee stays in the pool, so the input reserve grows by the full
        amount.
        """
        amount_out = self.get_amount_out(token_in, token_out, amount_in)
        if normalize_symbol(token_in) == normalize_symbol(self.token0):
            return replace(self, reserve0=self.reserve0 + amount_in, reserve1=self.reserve1 - amount_out)
        return replace(self, reserve1=self.reserve1 + amount_in, reserve0=self.reserve0 - amount_out)

    def depth(self, token_in: str) -> float:
        """Liquidity available on the input side, in token_in units."""
        return self.get_reserves(token_in)[0]

    def has_liquidity(self, token_in: str, token_out: str) -> bool:
        """True if both sides of the pair hold a positive reserve."""
        reserve_in, reserve_out = self.get_reserves(token_in)
        return reserve_in > 0 and reserve_out > 0

    def _check_pair(self, token_in: str, token_out: str) -> None:
        pair = {normalize_symbol(token_in), normalize_symbol(token_out)}
        if pair != set(self.tokens):
            raise InvalidPoolError(f"Pool {self.venue} does not trade {token_in}/{token_out}")

    def _check_liquidity(self, token_in: str, token_out: str) -> None:
        if not self.has_liquidity(token_in, token_out):
            raise ZeroBalanceError(f"Pool {self.venue} has no {token_in}/{token_out} liquidity")


@dataclass(frozen=True)
class StableSwapPool:
    """Represents a Curve-style stable pool with two or more tokens.

    Balances must be expressed in a common unit (e.g. both stablecoins in
    dollars) for the invariant to be meaningful.
    """

    venue: str
    tokens: tuple[str, ...]
    balances: tuple[float, ...]
    amplification: float = 100.0
    fee: float = 0.0004
    network: str = "ethereum"
    address: str | None = None
    total_liquidity_usd: float = 0.0
    volume_24h: float = 0.0

    kind = PoolKind.STABLE

    def __post_init__(self) -> None:
        object.__setattr__(self, "tokens", tuple(normalize_symbol(t) for t in self.tokens))
        if len(self.tokens) != len(self.balances):
            raise InvalidPoolError("Stable pool needs one balance per token")
        if len(self.tokens) < 2:
            raise InvalidPoolError("Stable pool needs at least two tokens")

    def index_of(self, token: str) -> int:
        try:
            return self.tokens.index(normalize_symbol(token))
        except ValueError as err:
            raise InvalidPoolError(f"Token {token} not in pool {self.venue}") from err

    def get_amount_out(self, token_in: str, token_out: str, amount_in: float) -> float:
        """Calculate output from the StableSwap invariant, fee taken on input."""
        i, j = self._indices(token_in, token_out)
        if amount_in <= 0:
            return 0.0
        return stable_calc_out_given_in(
            self.amplification, list(self.balances), i, j, amount_in * (1 - self.fee)
        )

    def spot_price(self, token_in: str, token_out: str) -> float:
        i, j = self._indices(token_in, token_out)
        return stable_spot_price(self.amplification, list(self.balances), i, j)

    def after_swap(self, token_in: str, token_out: str, amount_in: float) -> StableSwapPool:
        i, j = self._indices(token_in, token_out)
        amount_out = self.get_amount_out(token_in, token_out, amount_in)
        balances = list(self.balances)
        balances[i] += amount_in
        balances[j] -= amount_out
        return replace(self, balances=tuple(balances))

    def depth(self, token_in: str) -> float:
        return self.balances[self.index_of(token_in)]

    def has_liquidity(self, token_in: str, token_out: str) -> bool:
        """True if every balance is positive, as the invariant requires."""
        self._indices(token_in, token_out)
        return all(balance > 0 for balance in self.balances)

    def _indices(self, token_in: str, token_out: str) -> tuple[int, int]:
        i, j = self.index_of(token_in), self.index_of(token_out)
        if i == j:
            raise InvalidPoolError(f"Cannot swap {token_in} for itself")
        return i, j


Pool = ConstantProductPool | StableSwapPool


def pool_trades(pool: Pool, token_in: str, token_out: str) -> bool:
    """True if the pool can price token_in -> token_out."""
    tokens = pool.tokens
    token_in_norm, token_out_norm = normalize_symbol(token_in), normalize_symbol(token_out)
    return token_in_norm != token_out_norm and token_in_norm in tokens and token_out_norm in tokens


__all__ = ["ConstantProductPool", "Pool", "PoolKind", "StableSwapPool", "pool_trades"]
