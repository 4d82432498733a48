"""Stable pool math.

Core math functions for stable (StableSwap/Curve-style) pools, in floating
point. Uses Newton-Raphson iteration for the invariant and for solving a
single balance given the invariant.

The amplification parameter follows Curve's convention: the iteration uses
A * n^n, where n is the number of coins.
"""

from .errors import StableGetBalanceDidNotConverge, StableInvariantDidNotConverge, ZeroBalanceError

# Maximum iterations for Newton-Raphson convergence
_STABLE_MAX_ITERATIONS = 255

# Relative change below which an iteration is considered converged
_CONVERGENCE_TOLERANCE = 1e-12


def _converged(new: float, prev: float) -> bool:
    return abs(new - prev) <= _CONVERGENCE_TOLERANCE * max(abs(new), 1.0)


def calculate_invariant(amp: float, balances: list[float]) -> float:
    """Calculate StableSwap invariant D using Newton-Raphson iteration.

    Algorithm:
        1. Initial guess: D = sum(balances)
        2. Iterate D = (Ann*S + n*D_P) * D / ((Ann - 1) * D + (n + 1) * D_P)
           where D_P = D^(n+1) / (n^n * prod(balances))
        3. Stop when the relative change is negligible, at most 255 rounds

    Args:
        amp: Amplification coefficient A
        balances: Token balances, normalised to a common unit

    Returns:
        The invariant D

    Raises:
        StableInvariantDidNotConverge: If iteration doesn't converge
        ZeroBalanceError: If any balance is zero or negative
    """
    n_coins = len(balances)
    if n_coins == 0:
        return 0.0

    for i, balance in enumerate(balances):
        if balance <= 0:
            raise ZeroBalanceError(f"Balance at index {i} must be positive")

    sum_balances = sum(balances)
    ann = amp * n_coins**n_coins
    d_prev = sum_balances

    for _ in range(_STABLE_MAX_ITERATIONS):
        d_p = d_prev
        for balance in balances:
            d_p = d_p * d_prev / (n_coins * balance)

        numerator = (ann * sum_balances + d_p * n_coins) * d_prev
        denominator = (ann - 1) * d_prev + (n_coins + 1) * d_p
        d_new = numerator / denominator

        if _converged(d_new, d_prev):
            return d_new
        d_prev = d_new

    raise StableInvariantDidNotConverge(
        f"Stable invariant did not converge after {_STABLE_MAX_ITERATIONS} iterations"
    )


def get_balance_given_invariant(
    amp: float,
    balances: list[float],
    invariant: float,
    token_index: int,
) -> float:
    """Solve for balances[token_index] given D and all other balances.

    The value at token_index in ``balances`` is ignored.

    Raises:
        StableGetBalanceDidNotConverge: If iteration doesn't converge
        IndexError: If token_index is out of range
    """
    n_coins = len(balances)
    if token_index < 0 or token_index >= n_coins:
        raise IndexError(f"token_index {token_index} out of range for {n_coins} tokens")

    ann = amp * n_coins**n_coins
    c = invariant
    sum_others = 0.0
    for j, balance in enumerate(balances):
        if j == token_index:
            continue
        if balance <= 0:
            raise ZeroBalanceError(f"Balance at index {j} must be positive")
        sum_others += balance
        c = c * invariant / (balance * n_coins)
    c = c * invariant / (ann * n_coins)
    b = sum_others + invariant / ann

    y = invariant
    for _ in range(_STABLE_MAX_ITERATIONS):
        y_prev = y
        denominator = 2 * y + b - invariant
        if denominator <= 0:
            raise StableGetBalanceDidNotConverge("Denominator became non-positive")
        y = (y * y + c) / denominator
        if _converged(y, y_prev):
            return y

    raise StableGetBalanceDidNotConverge(
        f"Stable get_balance did not converge after {_STABLE_MAX_ITERATIONS} iterations"
    )


def stable_calc_out_given_in(
    amp: float,
    balances: list[float],
    token_index_in: int,
    token_index_out: int,
    amount_in: float,
) -> float:
    """Calculate the output of a stable swap, before fees.

    Args:
        amp: Amplification coefficient A
        balances: Token balances
        token_index_in: Index of the token being sold
        token_index_out: Index of the token being bought
        amount_in: Amount of token_in added to the pool

    Returns:
        Amount of token_out removed from the pool
    """
    if amount_in <= 0:
        return 0.0
    invariant = calculate_invariant(amp, balances)
    new_balances = list(balances)
    new_balances[token_index_in] += amount_in
    new_balance_out = get_balance_given_invariant(amp, new_balances, invariant, token_index_out)
    return max(0.0, balances[token_index_out] - new_balance_out)


def stable_spot_price(
    amp: float,
    balances: list[float],
    token_index_in: int,
    token_index_out: int,
) -> float:
    """Marginal price of token_in in units of token_out, before fees.

    Evaluated as the output of an infinitesimal trade.
    """
    nudge = balances[token_index_in] * 1e-6
    return stable_calc_out_given_in(amp, balances, token_index_in, token_index_out, nudge) / nudge


__all__ = [
    "calculate_invariant",
    "get_balance_given_invariant",
    "stable_calc_out_given_in",
    "stable_spot_price",
]
