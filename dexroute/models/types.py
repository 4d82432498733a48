"""Shared type definitions for routing models.

These types are used across the quote, routing and result models.
"""

import math
from enum import Enum
from typing import Annotated, Any

from pydantic import BeforeValidator, Field


def validate_finite(value: Any) -> float:
    """Validate that a value is a finite, non-negative number.

    Args:
        value: Value to validate (int, float or numeric string)

    Returns:
        The value as a float

    Raises:
        ValueError: If value is not numeric, not finite, or negative
    """
    if isinstance(value, bool):
        raise ValueError("Amount must be numeric, got bool")
    try:
        number = float(value)
    except (TypeError, ValueError) as err:
        raise ValueError(f"Amount must be numeric: {value!r}") from err
    if not math.isfinite(number):
        raise ValueError(f"Amount must be finite: {value!r}")
    if number < 0:
        raise ValueError(f"Amount cannot be negative: {value!r}")
    return number


def normalize_symbol(symbol: Any) -> str:
    """Normalize a token symbol for graph lookups.

    Symbols are compared case-insensitively; "weth" and "WETH" are the same
    node. Mixed-case symbols such as "USDbC" collapse to upper case too.
    """
    if not isinstance(symbol, str) or not symbol.strip():
        raise ValueError(f"Token symbol must be a non-empty string: {symbol!r}")
    return symbol.strip().upper()


def normalize_network(network: Any) -> str:
    """Normalize a network name to lowercase."""
    if not isinstance(network, str) or not network.strip():
        raise ValueError(f"Network must be a non-empty string: {network!r}")
    return network.strip().lower()


# Non-negative finite float (amounts, USD values, latencies)
Amount = Annotated[float, BeforeValidator(validate_finite)]

# Percentage in [0, 100]
Percentage = Annotated[float, BeforeValidator(validate_finite), Field(le=100)]

TokenSymbol = Annotated[str, BeforeValidator(normalize_symbol)]

Network = Annotated[str, BeforeValidator(normalize_network)]


class Speed(str, Enum):
    """Desired confirmation urgency for a transaction."""

    SLOW = "slow"
    STANDARD = "standard"
    FAST = "fast"
    INSTANT = "instant"


class RiskTolerance(str, Enum):
    """How much venue risk the caller accepts."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RiskLevel(str, Enum):
    """Risk tier derived from a venue's composite trust score."""

    VERY_LOW = "very_low"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very_high"


class Trend(str, Enum):
    """Direction of a venue's score over its history window."""

    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


class PathStrategy(str, Enum):
    """Shape of an internal routing path."""

    DIRECT = "direct"
    MULTI_HOP = "multi-hop"
    SPLIT = "split"
    HYBRID = "hybrid"


# Risk levels ordered from safest to riskiest
RISK_LEVEL_ORDER: tuple[RiskLevel, ...] = (
    RiskLevel.VERY_LOW,
    RiskLevel.LOW,
    RiskLevel.MEDIUM,
    RiskLevel.HIGH,
    RiskLevel.VERY_HIGH,
)
