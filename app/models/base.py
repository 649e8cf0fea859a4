"""SQLAlchemy declarative Base shared by the users and transactions tables."""

from sqlalchemy import inspect
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""

    def __repr__(self) -> str:
        identity = inspect(self).identity
        key = identity[0] if identity else None
        return f"<{type(self).__name__} id={key!r}>"
