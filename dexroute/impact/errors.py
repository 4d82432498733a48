"""Price impact error classes."""

from dexroute.errors import DexRouteError


class PriceImpactError(DexRouteError):
    """Base error for pool pricing operations."""

    pass


class InvalidPoolError(PriceImpactError):
    """The pool cannot price the requested token pair."""

    pass


class NoPoolsError(PriceImpactError):
    """Aggregation was requested over an empty pool set."""

    pass


class ZeroBalanceError(PriceImpactError):
    """Token balance must be positive for swaps."""

    pass


class StableInvariantDidNotConverge(PriceImpactError):
    """Newton-Raphson iteration for stable invariant D did not converge."""

    pass


class StableGetBalanceDidNotConverge(PriceImpactError):
    """Newton-Raphson iteration for stable balance Y did not converge."""

    pass
