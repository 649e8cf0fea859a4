"""Pydantic schemas for health check responses."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response body for the health check endpoint."""

    status: Literal["ok"] = Field(default="ok", description="Service status")
    environment: str = Field(description="Current app environment (e.g. dev, prod)")
    database: Literal["connected", "disconnected"] = Field(
        description="Database connectivity status at request time",
    )
    pool: str | None = Field(
        default=None,
        description="Connection pool summary (checked out / overflow) from SQLAlchemy",
    )


class LivenessResponse(BaseModel):
    """Response body for GET / (process is up; no dependency checks)."""

    status: Literal["ok"] = "ok"
    message: str
    timestamp: str
