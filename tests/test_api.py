"""API tests: routes, status codes and the {status, message[, errors]} error contract."""

import unittest
import uuid
from decimal import Decimal
from unittest.mock import patch

from fastapi.testclient import TestClient

from app.core.config import settings
from app.core.exceptions import NonRetryableStoreError
from app.main import create_app
from helpers import SqliteDatabaseMixin

PREFIX = settings.API_PREFIX


class ApiTestCase(SqliteDatabaseMixin, unittest.TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.client = TestClient(
            create_app(database=self.database, executor=self.executor),
            raise_server_exceptions=False,
        )
        self.client.__enter__()

    def tearDown(self) -> None:
        self.client.__exit__(None, None, None)
        super().tearDown()

    def assert_validation_error(self, response, path: str) -> None:
        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertEqual(body["status"], "error")
        self.assertEqual(body["message"], "Validation failed")
        self.assertIn(path, [e["path"] for e in body["errors"]])
        for err in body["errors"]:
            self.assertTrue(err["message"])


class TestGetUsers(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        for i, balance in enumerate(("30", "10", "20")):
            self.add_user(f"user{i}", balance)

    def test_returns_page_and_total(self) -> None:
        response = self.client.get(
            f"{PREFIX}/users",
            params={"page": 1, "limit": 2, "sortBy": "balance", "sortOrder": "asc"},
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["totalUsers"], 3)
        self.assertEqual([Decimal(u["balance"]) for u in body["users"]], [Decimal("10"), Decimal("20")])
        self.assertEqual(set(body["users"][0]), {"id", "username", "email", "balance", "created_at"})

    def test_defaults_apply_without_query_params(self) -> None:
        response = self.client.get(f"{PREFIX}/users")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()["users"]), 3)

    def test_rejects_sort_column_outside_allow_list(self) -> None:
        response = self.client.get(f"{PREFIX}/users", params={"sortBy": "password"})
        self.assert_validation_error(response, "sortBy")

    def test_rejects_non_positive_page_and_limit(self) -> None:
        self.assert_validation_error(self.client.get(f"{PREFIX}/users", params={"page": 0}), "page")
        self.assert_validation_error(self.client.get(f"{PREFIX}/users", params={"limit": 0}), "limit")

    def test_rejects_unknown_sort_order(self) -> None:
        response = self.client.get(f"{PREFIX}/users", params={"sortOrder": "up"})
        self.assert_validation_error(response, "sortOrder")


class TestAdjustBalance(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user = self.add_user("alice", "100")

    def test_credit(self) -> None:
        response = self.client.post(
            f"{PREFIX}/{self.user.id}/credit",
            json={"amount": 50, "description": "Deposit via bank transfer"},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["message"], "User credited successfully")
        self.assertEqual(Decimal(response.json()["balance"]), Decimal("150"))
        self.assertEqual(self.balance_of(self.user.id), Decimal("150"))

    def test_debit(self) -> None:
        response = self.client.post(f"{PREFIX}/{self.user.id}/debit", json={"amount": "60.50"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["message"], "User debited successfully")
        self.assertEqual(self.balance_of(self.user.id), Decimal("39.50"))

    def test_debit_insufficient_balance_is_400(self) -> None:
        response = self.client.post(f"{PREFIX}/{self.user.id}/debit", json={"amount": "100.01"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"status": "error", "message": "Insufficient balance"})
        self.assertEqual(self.transactions_of(self.user.id), [])

    def test_unknown_user_is_404(self) -> None:
        for action in ("credit", "debit"):
            with self.subTest(action=action):
                response = self.client.post(f"{PREFIX}/{uuid.uuid4()}/{action}", json={"amount": 1})
                self.assertEqual(response.status_code, 404)
                self.assertEqual(response.json(), {"status": "error", "message": "User not found"})

    def test_malformed_user_id(self) -> None:
        response = self.client.post(f"{PREFIX}/not-a-uuid/credit", json={"amount": 1})
        self.assert_validation_error(response, "userId")

    def test_amount_must_be_positive(self) -> None:
        for amount in (0, -10):
            with self.subTest(amount=amount):
                response = self.client.post(f"{PREFIX}/{self.user.id}/credit", json={"amount": amount})
                self.assert_validation_error(response, "amount")
        self.assertEqual(self.transactions_of(self.user.id), [])

    def test_amount_is_required(self) -> None:
        response = self.client.post(f"{PREFIX}/{self.user.id}/credit", json={})
        self.assert_validation_error(response, "amount")

    def test_description_has_minimum_length(self) -> None:
        response = self.client.post(
            f"{PREFIX}/{self.user.id}/credit",
            json={"amount": 5, "description": "abc"},
        )
        self.assert_validation_error(response, "description")


class TestServerErrors(ApiTestCase):
    def test_store_error_details_are_not_returned(self) -> None:
        user = self.add_user("bob", "10")
        with patch(
            "app.api.users.adjust_balance",
            side_effect=NonRetryableStoreError("duplicate key value violates unique constraint"),
        ):
            with self.assertLogs("app.api.errors", level="ERROR"):
                response = self.client.post(f"{PREFIX}/{user.id}/credit", json={"amount": 1})
        self.assertEqual(response.status_code, 500)
        body = response.json()
        self.assertEqual(body["status"], "error")
        self.assertEqual(body["message"], "Internal server error")
        self.assertEqual("stack" in body, settings.APP_ENV == "dev")

    def test_unexpected_exception_is_500(self) -> None:
        with patch("app.api.users.count_users", side_effect=RuntimeError("boom")):
            response = self.client.get(f"{PREFIX}/users")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["message"], "Internal server error")

    def test_unknown_route_uses_error_shape(self) -> None:
        response = self.client.get(f"{PREFIX}/nope/nothing/here")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["status"], "error")


class TestHealth(ApiTestCase):
    def test_health_reports_database(self) -> None:
        response = self.client.get(f"{PREFIX}/health")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["status"], "ok")
        self.assertEqual(body["database"], "connected")
        self.assertEqual(body["environment"], settings.APP_ENV)

    def test_root_liveness(self) -> None:
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")


if __name__ == "__main__":
    unittest.main()
