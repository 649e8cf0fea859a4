"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

from dotenv import load_dotenv

load_dotenv()

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import router as api_router
from app.api.errors import register_error_handlers
from app.core.config import settings
from app.core.database import Database
from app.core.logging import configure_logging
from app.core.resilience import ResilientExecutor
from app.schemas.health import LivenessResponse


def create_app(
    database: Database | None = None,
    executor: ResilientExecutor | None = None,
) -> FastAPI:
    """
    Build the application. The connection pool is created at startup (unless
    a Database is passed in, e.g. by tests) and disposed at shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(settings.LOG_LEVEL)
        db = database or Database.from_settings(settings)
        app.state.database = db
        app.state.executor = executor or ResilientExecutor.from_settings(db, settings)
        try:
            yield
        finally:
            db.dispose()

    app = FastAPI(
        title="Balance Admin API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.APP_ENV == "dev" else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.get("/", response_model=LivenessResponse)
    def root() -> LivenessResponse:
        """Liveness check; does not touch the database."""
        return LivenessResponse(
            message="Backend server is running successfully.",
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    return app


app = create_app()
