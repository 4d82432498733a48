"""Network gas snapshot."""

from dataclasses import dataclass, field
from datetime import UTC, datetime


@dataclass(frozen=True)
class NetworkGasSnapshot:
    """Gas market conditions on one network at a point in time.

    Fees are in gwei. Congestion and block utilization are 0-100.

    Attributes:
        base_fee: Protocol base fee; zero on networks without a fee market
        priority_fee: Suggested tip on top of the base fee
        gas_price: Single gas price for legacy pricing
        average_block_time: Milliseconds between blocks
        source: Name of the provider that produced the snapshot
    """

    network: str
    chain_id: int
    block_number: int
    base_fee: float
    priority_fee: float
    gas_price: float
    network_congestion: float
    block_utilization: float
    average_block_time: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    source: str = "unknown"

    @property
    def has_fee_market(self) -> bool:
        return self.base_fee > 0

    @property
    def is_synthetic(self) -> bool:
        return self.source == "synthetic"

    def age_seconds(self, now: datetime | None = None) -> float:
        return ((now or datetime.now(UTC)) - self.timestamp).total_seconds()
