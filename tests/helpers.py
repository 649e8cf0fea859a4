"""Shared fixtures for store-backed tests: a throwaway SQLite file database."""

import tempfile
from decimal import Decimal
from pathlib import Path

from app.core.database import Database
from app.core.resilience import ResilientExecutor
from app.models import Base, Transaction, User


class SqliteDatabaseMixin:
    """unittest mixin: fresh schema per test, executor that never sleeps."""

    def setUp(self) -> None:
        self._tmpdir = tempfile.TemporaryDirectory()
        self.database = Database(f"sqlite:///{Path(self._tmpdir.name) / 'test.db'}")
        Base.metadata.create_all(self.database.engine)
        self.sleeps: list[float] = []
        self.executor = ResilientExecutor(self.database, sleep=self.sleeps.append)

    def tearDown(self) -> None:
        self.database.dispose()
        self._tmpdir.cleanup()

    def add_user(self, username: str, balance: str = "0", email: str | None = None) -> User:
        user = User(
            username=username,
            email=email or f"{username}@example.com",
            balance=Decimal(balance),
        )
        with self.database.session() as db:
            with db.begin():
                db.add(user)
        return user

    def balance_of(self, user_id) -> Decimal:
        with self.database.session() as db:
            return db.get(User, user_id).balance

    def transactions_of(self, user_id) -> list[Transaction]:
        with self.database.session() as db:
            return list(
                db.query(Transaction)
                .filter(Transaction.user_id == user_id)
                .order_by(Transaction.created_at)
                .all()
            )
