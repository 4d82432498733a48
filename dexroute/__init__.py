"""Multi-venue DEX routing and execution-cost estimation engine."""

from dexroute.service import RoutingService, get_default_service

__version__ = "0.1.0"
__all__ = ["RoutingService", "get_default_service", "__version__"]
