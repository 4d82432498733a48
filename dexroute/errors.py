"""Error types raised by the routing engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dexroute.routing.types import RejectedCandidate


class DexRouteError(Exception):
    """Base error for routing engine operations."""

    pass


class NoViableRouteError(DexRouteError):
    """Every candidate path was filtered out, or none existed.

    Attributes:
        reason: Human-readable explanation suitable for the caller
        rejected: Candidates that were evaluated and rejected, with reasons
    """

    def __init__(self, reason: str, rejected: list[RejectedCandidate] | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.rejected = rejected or []


class UpstreamUnavailableError(DexRouteError):
    """An external data source (gas API, node, price feed) failed."""

    def __init__(self, source: str, detail: str) -> None:
        super().__init__(f"{source}: {detail}")
        self.source = source
        self.detail = detail


class UnsupportedNetworkError(DexRouteError, ValueError):
    """The requested network has no gas market data."""

    pass
