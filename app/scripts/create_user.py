"""
Create a user (no registration UI). Run from project root:
  python -m app.scripts.create_user USERNAME EMAIL [--password P] [--balance B]
Example:
  python -m app.scripts.create_user alice alice@example.com --balance 250.00
"""
import argparse
import logging
import sys
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import Database
from app.core.logging import configure_logging
from app.core.resilience import ResilientExecutor
from app.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN, hash_password
from app.models import User

logger = logging.getLogger(__name__)


class UserExistsError(Exception):
    """Username or email already taken."""


@dataclass(frozen=True)
class CreateUser:
    """Unit of work: insert one user unless the username or email is taken."""

    username: str
    email: str
    balance: Decimal
    password_hash: str | None = None

    def execute(self, session: Session) -> User:
        existing = session.execute(
            select(User.id).where(or_(User.username == self.username, User.email == self.email))
        ).first()
        if existing:
            raise UserExistsError(f"User '{self.username}' or email '{self.email}' already exists.")
        user = User(
            username=self.username,
            email=self.email,
            password=self.password_hash,
            balance=self.balance,
        )
        session.add(user)
        session.flush()
        return user


def parse_balance(raw: str) -> Decimal:
    try:
        value = Decimal(raw)
    except InvalidOperation as e:
        raise argparse.ArgumentTypeError(f"Invalid balance: {raw!r}") from e
    if not value.is_finite() or value < 0:
        raise argparse.ArgumentTypeError("Balance must be a non-negative number.")
    return value


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a user with an optional starting balance.")
    parser.add_argument("username", help="Username (1-255 chars)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("--password", default=None, help="Password (8-128 chars); stored bcrypt-hashed")
    parser.add_argument("--balance", type=parse_balance, default=Decimal("0"), help="Starting balance")
    args = parser.parse_args(argv)

    username = args.username.strip()
    email = args.email.strip()
    if not username or len(username) > 255:
        print("Invalid username length.", file=sys.stderr)
        return 1
    if "@" not in email or len(email) > 255:
        print("Invalid email address.", file=sys.stderr)
        return 1
    password_hash = None
    if args.password is not None:
        if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
            print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
            return 1
        password_hash = hash_password(args.password)

    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    database = Database.from_settings(settings)
    executor = ResilientExecutor.from_settings(database, settings)
    try:
        user = executor.run(CreateUser(username, email, args.balance, password_hash))
    except UserExistsError as e:
        print(str(e), file=sys.stderr)
        return 1
    finally:
        database.dispose()
    print(f"Created user '{username}' ({user.id}) with balance {args.balance}.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
