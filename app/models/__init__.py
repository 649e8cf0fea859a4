"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.transaction import Transaction
from app.models.user import User

__all__ = ["Base", "Transaction", "User"]
