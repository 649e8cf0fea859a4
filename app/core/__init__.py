"""Core app configuration, database lifecycle and retry engine."""

from app.core.config import get_settings, settings
from app.core.database import Database, get_database, get_executor
from app.core.resilience import ResilientExecutor, UnitOfWork

__all__ = [
    "Database",
    "ResilientExecutor",
    "UnitOfWork",
    "get_database",
    "get_executor",
    "get_settings",
    "settings",
]
