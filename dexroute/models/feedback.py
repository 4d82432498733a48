"""Pydantic models for user-reported execution outcomes."""

from datetime import datetime

from pydantic import BaseModel, Field

from dexroute.models.types import Amount


class ExecutionOutcome(BaseModel):
    """A user's report of how a trade through a venue went.

    Rating is on a 1-5 scale. Slippage values are percentages.
    """

    successful: bool
    actual_slippage: Amount = Field(default=0.0, alias="actualSlippage")
    expected_slippage: Amount = Field(default=0.0, alias="expectedSlippage")
    execution_time: Amount = Field(default=0.0, alias="executionTime", description="Milliseconds")
    gas_used: Amount = Field(default=0.0, alias="gasUsed")
    rating: float = Field(ge=1, le=5)
    comments: str | None = None
    reported_at: datetime | None = Field(default=None, alias="reportedAt")

    model_config = {"populate_by_name": True, "frozen": True}
