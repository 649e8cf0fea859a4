"""PostgreSQL connection pool and session management.

The pool is owned by a Database instance created once at startup (see app.main
lifespan) and disposed at shutdown; request handlers receive it through
dependencies instead of importing a module-level engine.
"""

from collections.abc import Generator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from fastapi import Request
from sqlalchemy import Engine, create_engine, text
from sqlalchemy.orm import Session, sessionmaker

if TYPE_CHECKING:
    from app.core.config import Settings
    from app.core.resilience import ResilientExecutor


class Database:
    """Engine (bounded, thread-safe connection pool) plus session factory."""

    def __init__(
        self,
        url: str,
        *,
        pool_size: int = 10,
        max_overflow: int = 5,
        pool_timeout: float = 10.0,
        statement_timeout_ms: int = 0,
        echo: bool = False,
    ) -> None:
        self.url = url
        self.engine: Engine = create_engine(
            url,
            pool_pre_ping=True,
            echo=echo,
            **_engine_options(url, pool_size, max_overflow, pool_timeout, statement_timeout_ms),
        )
        self._session_factory = sessionmaker(
            bind=self.engine,
            autoflush=False,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: "Settings") -> "Database":
        return cls(
            settings.DATABASE_URL,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT_SEC,
            statement_timeout_ms=settings.DB_STATEMENT_TIMEOUT_MS,
            echo=settings.DEBUG,
        )

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Check out a session; its connection returns to the pool on every exit path."""
        db = self._session_factory()
        try:
            yield db
        finally:
            db.close()

    def check_connected(self) -> bool:
        """Run a trivial query to verify the database is reachable."""
        try:
            with self.session() as db:
                db.execute(text("SELECT 1"))
            return True
        except Exception:
            return False

    def dispose(self) -> None:
        """Close every pooled connection. Call once at shutdown."""
        self.engine.dispose()


def _engine_options(
    url: str,
    pool_size: int,
    max_overflow: int,
    pool_timeout: float,
    statement_timeout_ms: int,
) -> dict[str, Any]:
    if url.startswith("sqlite"):
        # Local/test databases: SQLite connections are shared across request threads.
        return {"connect_args": {"check_same_thread": False}}
    options: dict[str, Any] = {
        "pool_size": pool_size,
        "max_overflow": max_overflow,
        "pool_timeout": pool_timeout,
    }
    if statement_timeout_ms > 0:
        options["connect_args"] = {"options": f"-c statement_timeout={statement_timeout_ms}"}
    return options


def get_database(request: Request) -> Database:
    """Dependency returning the process-wide Database stored on app.state."""
    return request.app.state.database


def get_executor(request: Request) -> "ResilientExecutor":
    """Dependency returning the process-wide ResilientExecutor stored on app.state."""
    return request.app.state.executor
