import threading
import unittest
from datetime import date

from sqlalchemy import func, select

from backend.budget_store import find_budget, upsert_budget
from backend.database import budgets
from backend.tests.api_support import ApiTestCase


class SetBudgetTests(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user_id, self.headers = self.register()

    def count_budgets(self) -> int:
        with self.database.begin() as conn:
            return conn.execute(select(func.count()).select_from(budgets)).scalar_one()

    def test_second_call_for_same_period_overwrites_amount(self) -> None:
        first = self.client.post(
            "/api/budget", json={"month": 3, "year": 2024, "amount": 500}, headers=self.headers
        )
        second = self.client.post(
            "/api/budget", json={"month": 3, "year": 2024, "amount": 700}, headers=self.headers
        )

        self.assertEqual(first.status_code, 201)
        self.assertEqual(second.status_code, 201)
        self.assertEqual(first.json()["id"], second.json()["id"])
        self.assertEqual(second.json()["amount"], 700)
        self.assertEqual(second.json()["userId"], self.user_id)
        self.assertEqual(self.count_budgets(), 1)
        stored = find_budget(self.database, self.user_id, 3, 2024)
        self.assertEqual(stored["amount"], 700)

    def test_periods_and_users_are_independent(self) -> None:
        _, other_headers = self.register("other@example.com")
        self.client.post(
            "/api/budget", json={"month": 3, "year": 2024, "amount": 500}, headers=self.headers
        )
        self.client.post(
            "/api/budget", json={"month": 4, "year": 2024, "amount": 600}, headers=self.headers
        )
        self.client.post(
            "/api/budget", json={"month": 3, "year": 2024, "amount": 900}, headers=other_headers
        )

        self.assertEqual(self.count_budgets(), 3)
        self.assertEqual(find_budget(self.database, self.user_id, 3, 2024)["amount"], 500)

    def test_upsert_keeps_single_row_per_period(self) -> None:
        for amount in (100, 200, 300):
            upsert_budget(self.database, self.user_id, 12, 2025, amount)

        self.assertEqual(self.count_budgets(), 1)
        self.assertEqual(find_budget(self.database, self.user_id, 12, 2025)["amount"], 300)

    def test_concurrent_upserts_leave_one_row(self) -> None:
        errors = []

        def set_amount(amount: int) -> None:
            try:
                upsert_budget(self.database, self.user_id, 3, 2024, amount)
            except Exception as exc:
                errors.append(exc)

        threads = [threading.Thread(target=set_amount, args=(100 + i,)) for i in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(errors, [])
        self.assertEqual(self.count_budgets(), 1)
        stored = find_budget(self.database, self.user_id, 3, 2024)
        self.assertIn(stored["amount"], range(100, 116))

    def test_month_out_of_range_rejected(self) -> None:
        response = self.client.post(
            "/api/budget", json={"month": 13, "year": 2024, "amount": 500}, headers=self.headers
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.count_budgets(), 0)


class BudgetSummaryTests(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user_id, self.headers = self.register()

    def test_summary_without_budget_reports_negative_balance(self) -> None:
        self.add_transaction(self.headers, type="expense", amount=120, date="2024-03-05T10:00:00")
        self.add_transaction(self.headers, type="expense", amount=30, date="2024-03-31T23:30:00")

        response = self.client.get(
            "/api/budget/summary", params={"month": "3", "year": "2024"}, headers=self.headers
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"budget": 0, "totalExpenses": 150, "balance": -150})

    def test_summary_counts_only_expenses_inside_month(self) -> None:
        self.client.post(
            "/api/budget", json={"month": 2, "year": 2024, "amount": 400}, headers=self.headers
        )
        self.add_transaction(self.headers, type="expense", amount=100, date="2024-02-01T00:00:00")
        self.add_transaction(self.headers, type="expense", amount=50, date="2024-02-29T23:59:59")
        self.add_transaction(self.headers, type="expense", amount=999, date="2024-03-01T00:00:00")
        self.add_transaction(self.headers, type="expense", amount=999, date="2024-01-31T23:59:59")
        self.add_transaction(self.headers, type="income", amount=999, date="2024-02-10T12:00:00")

        response = self.client.get(
            "/api/budget/summary", params={"month": "2", "year": "2024"}, headers=self.headers
        )

        self.assertEqual(response.json(), {"budget": 400, "totalExpenses": 150, "balance": 250})

    def test_summary_defaults_to_current_month(self) -> None:
        today = date.today()
        self.client.post(
            "/api/budget",
            json={"month": today.month, "year": today.year, "amount": 300},
            headers=self.headers,
        )
        self.add_transaction(self.headers, type="expense", amount=80)

        response = self.client.get("/api/budget/summary", headers=self.headers)

        self.assertEqual(response.json(), {"budget": 300, "totalExpenses": 80, "balance": 220})

    def test_summary_ignores_other_users(self) -> None:
        _, other_headers = self.register("other@example.com")
        self.add_transaction(other_headers, type="expense", amount=70, date="2024-03-05T10:00:00")

        response = self.client.get(
            "/api/budget/summary", params={"month": "3", "year": "2024"}, headers=self.headers
        )

        self.assertEqual(response.json(), {"budget": 0, "totalExpenses": 0, "balance": 0})

    def test_summary_for_last_representable_month(self) -> None:
        self.client.post(
            "/api/budget", json={"month": 12, "year": 9999, "amount": 50}, headers=self.headers
        )

        response = self.client.get(
            "/api/budget/summary", params={"month": "12", "year": "9999"}, headers=self.headers
        )

        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.json(), {"budget": 50, "totalExpenses": 0, "balance": 50})

    def test_invalid_month_rejected(self) -> None:
        response = self.client.get(
            "/api/budget/summary", params={"month": "13", "year": "2024"}, headers=self.headers
        )

        self.assertEqual(response.status_code, 400)


if __name__ == "__main__":
    unittest.main()
