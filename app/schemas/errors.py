"""Error response bodies shared by every route."""

from typing import Literal

from pydantic import BaseModel


class FieldError(BaseModel):
    """One failed validation rule; path is dotted (e.g. 'amount' or 'userId')."""

    path: str
    message: str


class ErrorResponse(BaseModel):
    status: Literal["error"] = "error"
    message: str


class ValidationErrorResponse(ErrorResponse):
    errors: list[FieldError]
