"""Paginated, sortable read access to the users table."""

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models import User

if TYPE_CHECKING:
    from app.core.resilience import ResilientExecutor

SortBy = Literal["username", "email", "balance", "created_at"]
SortOrder = Literal["asc", "desc"]

# Allow-list: client input selects a column from here, it is never interpolated into SQL.
SORT_COLUMNS = {
    "username": User.username,
    "email": User.email,
    "balance": User.balance,
    "created_at": User.created_at,
}
SORT_ORDERS = frozenset({"asc", "desc"})


@dataclass(frozen=True)
class ListUsers:
    """Unit of work: one offset page of users ordered by an allowed column."""

    page: int
    limit: int
    sort_by: SortBy = "created_at"
    sort_order: SortOrder = "desc"

    def execute(self, session: Session) -> list[User]:
        column = SORT_COLUMNS[self.sort_by]
        ordering = column.desc() if self.sort_order == "desc" else column.asc()
        stmt = (
            select(User)
            .order_by(ordering, User.id.asc())
            .limit(self.limit)
            .offset((self.page - 1) * self.limit)
        )
        return list(session.scalars(stmt).all())


class CountUsers:
    """Unit of work: total number of users, independent of pagination."""

    def execute(self, session: Session) -> int:
        return session.execute(select(func.count()).select_from(User)).scalar_one()


def list_users(
    executor: "ResilientExecutor",
    page: int = 1,
    limit: int = 10,
    sort_by: str = "created_at",
    sort_order: str = "desc",
) -> list[User]:
    """Return rows ((page-1)*limit + 1) .. (page*limit) in the requested order."""
    if page < 1:
        raise ValueError("page must be >= 1")
    if limit < 1:
        raise ValueError("limit must be >= 1")
    if sort_by not in SORT_COLUMNS:
        raise ValueError(f"sort_by must be one of {sorted(SORT_COLUMNS)}, got {sort_by!r}")
    sort_order = sort_order.lower()
    if sort_order not in SORT_ORDERS:
        raise ValueError(f"sort_order must be 'asc' or 'desc', got {sort_order!r}")
    return executor.run(ListUsers(page, limit, sort_by, sort_order), atomic=False)


def count_users(executor: "ResilientExecutor") -> int:
    """Total number of users."""
    return executor.run(CountUsers(), atomic=False)


def total_pages(total: int, limit: int) -> int:
    """Number of pages needed to show `total` rows at `limit` per page."""
    if limit < 1:
        raise ValueError("limit must be >= 1")
    return math.ceil(total / limit)
