"""
Seed the database with random users and historical transactions. Run from project root:
  python -m app.scripts.seed [--users 50] [--transactions 200]

All rows are inserted in one transaction through the ResilientExecutor, so a
failed run leaves nothing behind.
"""
import argparse
import logging
import random
import sys
from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import Database
from app.core.logging import configure_logging
from app.core.resilience import ResilientExecutor
from app.models import Transaction, User

logger = logging.getLogger(__name__)

FIRST_NAMES = ("alex", "sam", "jordan", "taylor", "morgan", "casey", "riley", "jamie", "drew", "kai")
LAST_NAMES = ("smith", "lee", "garcia", "chen", "patel", "kim", "novak", "silva", "okafor", "berg")
DESCRIPTIONS = (
    "Deposit via bank transfer",
    "Promotional bonus",
    "Withdrawal to wallet",
    "Manual correction by support",
    "Refund of previous charge",
)

CENT = Decimal("0.01")


def random_amount(rng: random.Random, low: int, high: int) -> Decimal:
    """Random two-decimal amount in [low, high]."""
    return (Decimal(rng.randint(low * 100, high * 100)) * CENT).quantize(CENT)


@dataclass
class SeedData:
    """Unit of work: insert users, then transactions that keep every balance >= 0."""

    users: int
    transactions: int
    rng: random.Random = field(default_factory=random.Random)

    def execute(self, session: Session) -> tuple[int, int]:
        suffix = self.rng.randrange(16**6)
        created: list[User] = []
        for i in range(self.users):
            name = f"{self.rng.choice(FIRST_NAMES)}.{self.rng.choice(LAST_NAMES)}.{suffix:06x}{i}"
            user = User(
                username=name,
                email=f"{name}@example.com",
                balance=random_amount(self.rng, 0, 10_000),
            )
            session.add(user)
            created.append(user)
        session.flush()

        recorded = 0
        for _ in range(self.transactions if created else 0):
            user = self.rng.choice(created)
            kind = self.rng.choice(("credit", "debit"))
            amount = random_amount(self.rng, 1, 1_000)
            if kind == "debit" and amount > user.balance:
                kind = "credit"
            user.balance = user.balance + amount if kind == "credit" else user.balance - amount
            session.add(
                Transaction(
                    user_id=user.id,
                    type=kind,
                    amount=amount,
                    description=self.rng.choice(DESCRIPTIONS),
                )
            )
            recorded += 1
        session.flush()
        return len(created), recorded


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Insert random users and transactions.")
    parser.add_argument("--users", type=int, default=50, help="Number of users to create")
    parser.add_argument("--transactions", type=int, default=200, help="Number of transactions to create")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible data")
    args = parser.parse_args(argv)
    if args.users < 0 or args.transactions < 0:
        print("--users and --transactions must be >= 0.", file=sys.stderr)
        return 1

    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    database = Database.from_settings(settings)
    executor = ResilientExecutor.from_settings(database, settings)
    try:
        users, transactions = executor.run(
            SeedData(args.users, args.transactions, random.Random(args.seed))
        )
        logger.info("Seed completed: users=%s, transactions=%s", users, transactions)
        return 0
    except Exception as e:
        logger.exception("Seed failed: %s", e)
        return 1
    finally:
        database.dispose()


if __name__ == "__main__":
    sys.exit(main())
