"""ORM model for the balance-adjustment audit log."""

import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, String, Text, Uuid, func

from app.models.base import Base
from app.models.user import MONEY

TRANSACTION_TYPES = ("credit", "debit")


class Transaction(Base):
    """
    Immutable record of one committed balance adjustment.

    amount is always positive; direction is carried by type.
    """

    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("type IN ('credit', 'debit')", name="ck_transactions_type"),
        CheckConstraint("amount > 0", name="ck_transactions_amount_positive"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type = Column(String(16), nullable=False)
    amount = Column(MONEY, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
