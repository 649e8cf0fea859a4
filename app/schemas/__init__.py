"""Pydantic request/response schemas."""

from app.schemas.balance import AdjustBalanceRequest, AdjustBalanceResponse
from app.schemas.errors import ErrorResponse, FieldError, ValidationErrorResponse
from app.schemas.health import HealthResponse
from app.schemas.users import UserOut, UsersResponse

__all__ = [
    "AdjustBalanceRequest",
    "AdjustBalanceResponse",
    "ErrorResponse",
    "FieldError",
    "HealthResponse",
    "UserOut",
    "UsersResponse",
    "ValidationErrorResponse",
]
