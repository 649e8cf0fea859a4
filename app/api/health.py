"""Health check endpoint with database connectivity check."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.core.config import settings
from app.core.database import Database, get_database
from app.schemas.health import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def get_health(database: Annotated[Database, Depends(get_database)]) -> HealthResponse:
    """
    Return service health status and database connectivity.
    Used by load balancers and monitoring.
    """
    db_status = "connected" if database.check_connected() else "disconnected"

    return HealthResponse(
        status="ok",
        environment=settings.APP_ENV,
        database=db_status,
        pool=database.engine.pool.status(),
    )
