"""ORM model for user accounts whose balance is adjusted by the ledger."""

import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, Numeric, String, Uuid, func

from app.models.base import Base

# Exact decimal with two fractional digits; shared with Transaction.amount.
MONEY = Numeric(15, 2)


class User(Base):
    """
    User account listed by the admin console.

    balance is mutated only through app.services.ledger. The exceptions are the
    admin scripts: app.scripts.create_user sets a starting balance on insert, and
    app.scripts.seed writes balances directly alongside the matching historical
    transactions when populating an empty database.
    password is an opaque credential and is never returned by the API.
    """

    __tablename__ = "users"
    __table_args__ = (CheckConstraint("balance >= 0", name="ck_users_balance_non_negative"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    username = Column(String(255), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password = Column(String(255), nullable=True)
    balance = Column(MONEY, nullable=False, default=0, server_default="0", index=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        index=True,
    )
