"""Tests for app.services.user_query: offset pagination, allow-listed sorting, counting."""

import unittest
from decimal import Decimal
from unittest.mock import MagicMock

from app.services.user_query import count_users, list_users, total_pages
from helpers import SqliteDatabaseMixin


class TestListUsers(SqliteDatabaseMixin, unittest.TestCase):
    def setUp(self) -> None:
        super().setUp()
        # 25 users with balances 1..25 and usernames in reverse balance order.
        for i in range(1, 26):
            self.add_user(f"user{26 - i:02d}", str(i))

    def test_second_page_sorted_by_balance_desc(self) -> None:
        users = list_users(self.executor, page=2, limit=10, sort_by="balance", sort_order="desc")
        self.assertEqual(
            [u.balance for u in users],
            [Decimal(b) for b in range(15, 5, -1)],
        )

    def test_last_partial_page(self) -> None:
        users = list_users(self.executor, page=3, limit=10, sort_by="balance", sort_order="asc")
        self.assertEqual([u.balance for u in users], [Decimal(b) for b in range(21, 26)])

    def test_page_past_the_end_is_empty(self) -> None:
        self.assertEqual(list_users(self.executor, page=4, limit=10), [])

    def test_sort_by_username_ascending(self) -> None:
        users = list_users(self.executor, page=1, limit=3, sort_by="username", sort_order="asc")
        self.assertEqual([u.username for u in users], ["user01", "user02", "user03"])

    def test_sort_order_is_case_insensitive(self) -> None:
        users = list_users(self.executor, page=1, limit=1, sort_by="balance", sort_order="DESC")
        self.assertEqual(users[0].balance, Decimal("25"))

    def test_count_ignores_pagination(self) -> None:
        list_users(self.executor, page=2, limit=5)
        self.assertEqual(count_users(self.executor), 25)


class TestListUsersValidation(unittest.TestCase):
    """Invalid arguments never reach the database."""

    def test_rejects_invalid_arguments(self) -> None:
        executor = MagicMock()
        cases = [
            {"page": 0},
            {"limit": 0},
            {"sort_by": "password"},
            {"sort_by": "balance; DROP TABLE users"},
            {"sort_order": "sideways"},
        ]
        for kwargs in cases:
            with self.subTest(**kwargs):
                with self.assertRaises(ValueError):
                    list_users(executor, **kwargs)
        executor.run.assert_not_called()

    def test_list_and_count_run_without_transaction(self) -> None:
        executor = MagicMock()
        list_users(executor)
        count_users(executor)
        for call in executor.run.call_args_list:
            self.assertEqual(call.kwargs, {"atomic": False})


class TestTotalPages(unittest.TestCase):
    def test_rounds_up(self) -> None:
        self.assertEqual(total_pages(25, 10), 3)
        self.assertEqual(total_pages(20, 10), 2)
        self.assertEqual(total_pages(0, 10), 0)

    def test_rejects_zero_limit(self) -> None:
        with self.assertRaises(ValueError):
            total_pages(10, 0)


if __name__ == "__main__":
    unittest.main()
