"""Request/response schemas for credit and debit endpoints."""

from decimal import Decimal

from pydantic import BaseModel, Field

DESCRIPTION_MIN_LENGTH = 5
DESCRIPTION_MAX_LENGTH = 1_000


class AdjustBalanceRequest(BaseModel):
    """Body for POST /api/{userId}/credit and /api/{userId}/debit."""

    amount: Decimal = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        max_digits=15,
        decimal_places=2,
        description="Positive amount; direction comes from the route, not the sign.",
    )
    description: str | None = Field(
        default=None,
        min_length=DESCRIPTION_MIN_LENGTH,
        max_length=DESCRIPTION_MAX_LENGTH,
        description="Optional note stored on the transaction record.",
    )


class AdjustBalanceResponse(BaseModel):
    """Confirmation returned after a committed adjustment."""

    message: str
    balance: Decimal = Field(..., description="Balance after the adjustment")
