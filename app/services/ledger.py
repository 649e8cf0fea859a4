"""Balance ledger: atomic credit/debit of a user's balance plus its audit Transaction row."""

import enum
import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.core.exceptions import InsufficientBalanceError, UserNotFoundError
from app.models import Transaction, User

if TYPE_CHECKING:
    from app.core.resilience import ResilientExecutor

logger = logging.getLogger(__name__)

# Smallest unit the balance and amount columns (Numeric(15, 2)) can hold.
CENT = Decimal("0.01")
# Numeric(15, 2) holds at most 13 integer digits.
MAX_AMOUNT = Decimal("9999999999999.99")


class Direction(str, enum.Enum):
    """Direction of an adjustment; amounts themselves are always positive."""

    CREDIT = "credit"
    DEBIT = "debit"


@dataclass(frozen=True)
class AdjustBalance:
    """
    Unit of work: move a user's balance by a positive amount and record it.

    The debit condition (balance >= amount) and the decrement are one UPDATE
    statement, so concurrent debits cannot both pass the check. Must run inside
    a transaction (ResilientExecutor.run with atomic=True) so the balance change
    and the Transaction insert commit or roll back together.
    """

    user_id: uuid.UUID
    amount: Decimal
    direction: Direction
    description: str | None = None

    def execute(self, session: Session) -> Decimal:
        stmt = (
            update(User)
            .where(User.id == self.user_id)
            .returning(User.balance)
            .execution_options(synchronize_session=False)
        )
        if self.direction is Direction.CREDIT:
            stmt = stmt.values(balance=User.balance + self.amount)
        else:
            stmt = stmt.where(User.balance >= self.amount).values(
                balance=User.balance - self.amount
            )

        new_balance = session.execute(stmt).scalar_one_or_none()
        if new_balance is None:
            exists = session.execute(
                select(User.id).where(User.id == self.user_id)
            ).first()
            if exists is None:
                raise UserNotFoundError()
            raise InsufficientBalanceError()

        session.add(
            Transaction(
                user_id=self.user_id,
                type=self.direction.value,
                amount=self.amount,
                description=self.description,
            )
        )
        session.flush()
        return new_balance


def adjust_balance(
    executor: "ResilientExecutor",
    user_id: uuid.UUID,
    amount: Decimal,
    direction: Direction | str,
    description: str | None = None,
) -> Decimal:
    """
    Credit or debit a user's balance atomically and return the new balance.

    Raises UserNotFoundError if the user does not exist and InsufficientBalanceError
    if a debit exceeds the balance; in both cases nothing is written.
    """
    amount = Decimal(str(amount)) if isinstance(amount, float) else Decimal(amount)
    if not amount.is_finite() or amount <= 0:
        raise ValueError("amount must be a positive number")
    if amount > MAX_AMOUNT:
        raise ValueError(f"amount must not exceed {MAX_AMOUNT}")
    if amount != amount.quantize(CENT):
        raise ValueError("amount must not have more than two decimal places")
    direction = Direction(direction)

    work = AdjustBalance(
        user_id=user_id,
        amount=amount,
        direction=direction,
        description=description,
    )
    new_balance = executor.run(work, atomic=True)
    logger.info(
        "Balance adjusted: user_id=%s, type=%s, amount=%s, balance=%s",
        user_id,
        direction.value,
        amount,
        new_balance,
    )
    return new_balance
