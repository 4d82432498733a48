"""Gas estimate result."""

from dataclasses import dataclass

from dexroute.gas.strategies import GasStrategyName
from dexroute.models.types import Speed


@dataclass(frozen=True)
class GasEstimate:
    """Gas required and fee to pay for one operation.

    Fees are in gwei, totals in wei and USD. max_fee_per_gas and
    max_priority_fee_per_gas are None under legacy pricing.
    """

    network: str
    gas_limit: int
    gas_price: float
    max_fee_per_gas: float | None
    max_priority_fee_per_gas: float | None
    total_cost_wei: int
    total_cost_usd: float
    confidence: float
    speed: Speed
    estimated_confirmation_time: int
    strategy: GasStrategyName

    @property
    def is_eip1559(self) -> bool:
        return self.max_fee_per_gas is not None


@dataclass(frozen=True)
class GasEstimateRequest:
    """One item of a batch estimate."""

    venue: str
    route: tuple[str, ...]
    network: str
    speed: Speed = Speed.STANDARD
