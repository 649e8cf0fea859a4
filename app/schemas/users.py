"""Pydantic schemas for the paginated user listing."""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class UserOut(BaseModel):
    """User entry for the admin table (no password)."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str
    email: str
    balance: Decimal = Field(..., description="Exact decimal balance, serialized as a string")
    created_at: datetime


class UsersResponse(BaseModel):
    """Response for GET /api/users."""

    users: list[UserOut]
    totalUsers: int = Field(..., ge=0, description="Total users regardless of pagination")
