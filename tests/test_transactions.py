from datetime import date, timedelta

import pytest

from app.core.identity import resolve_tenant, Identity
from app.models.role import Role
from app.services.transaction_service import TransactionService, add_months, percentage_change


def expense(**overrides):
    data = {"description": "Electricity", "amount": 120.5, "type": "expense", "date": str(date.today())}
    data.update(overrides)
    return data


class TestTransactionCrud:
    """Tests for financial records"""

    def test_create_pending(self, client, admin_headers):
        response = client.post("/api/transactions", headers=admin_headers, json=expense())

        assert response.status_code == 201
        transaction = response.json()
        assert transaction["status"] == "pending"
        assert transaction["paid_at"] is None
        assert transaction["competence_date"] == transaction["date"]

    def test_create_paid_stamps_paid_at(self, client, admin_headers):
        response = client.post("/api/transactions", headers=admin_headers, json=expense(status="paid"))

        assert response.json()["paid_at"] is not None

    def test_amount_must_be_positive(self, client, admin_headers):
        response = client.post("/api/transactions", headers=admin_headers, json=expense(amount=-10))

        assert response.status_code == 422
        assert "amount" in response.json()["fields"]

    def test_amount_must_be_whole_cents(self, client, admin_headers):
        response = client.post("/api/transactions", headers=admin_headers, json=expense(amount=10.005))

        assert response.status_code == 422
        assert "amount" in response.json()["fields"]

    def test_filters(self, client, admin_headers):
        client.post("/api/transactions", headers=admin_headers, json=expense())
        client.post("/api/transactions", headers=admin_headers, json=expense(type="income", description="Consulting"))
        client.post("/api/transactions", headers=admin_headers, json=expense(date="2020-01-15"))

        assert client.get("/api/transactions", headers=admin_headers, params={"type": "income"}).json()["total"] == 1
        assert client.get("/api/transactions", headers=admin_headers, params={"start_date": "2021-01-01"}).json()["total"] == 2
        assert client.get("/api/transactions", headers=admin_headers, params={"search": "consult"}).json()["total"] == 1

    def test_update_to_paid_and_back(self, client, admin_headers):
        transaction = client.post("/api/transactions", headers=admin_headers, json=expense()).json()

        paid = client.patch(f"/api/transactions/{transaction['id']}", headers=admin_headers, json={"status": "paid"}).json()
        pending = client.patch(f"/api/transactions/{transaction['id']}", headers=admin_headers, json={"status": "pending"}).json()

        assert paid["paid_at"] is not None
        assert pending["paid_at"] is None

    def test_delete(self, client, admin_headers):
        transaction = client.post("/api/transactions", headers=admin_headers, json=expense()).json()

        response = client.delete(f"/api/transactions/{transaction['id']}", headers=admin_headers)

        assert response.json() == {"success": True}
        assert client.get(f"/api/transactions/{transaction['id']}", headers=admin_headers).status_code == 404


class TestPaymentConfirmation:
    """Pending to paid happens once"""

    def test_confirm_payment(self, client, admin_headers):
        transaction = client.post("/api/transactions", headers=admin_headers, json=expense()).json()

        response = client.post(f"/api/transactions/{transaction['id']}/confirm", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["status"] == "paid"
        assert response.json()["paid_at"] is not None

    def test_confirm_twice_is_rejected(self, client, admin_headers):
        transaction = client.post("/api/transactions", headers=admin_headers, json=expense()).json()
        first = client.post(f"/api/transactions/{transaction['id']}/confirm", headers=admin_headers).json()

        response = client.post(f"/api/transactions/{transaction['id']}/confirm", headers=admin_headers)

        assert response.status_code == 400
        assert client.get(f"/api/transactions/{transaction['id']}", headers=admin_headers).json()["paid_at"] == first["paid_at"]

    def test_confirm_other_tenant(self, client, admin_headers, other_headers):
        transaction = client.post("/api/transactions", headers=admin_headers, json=expense()).json()

        response = client.post(f"/api/transactions/{transaction['id']}/confirm", headers=other_headers)

        assert response.status_code == 404


class TestRecurringExpenses:
    """Expenses spread over several dates"""

    def test_monthly(self, client, admin_headers):
        data = {"description": "Rent", "amount": 1000, "date": "2024-01-31", "recurrence": "monthly", "occurrences": 3}

        response = client.post("/api/transactions/recurring", headers=admin_headers, json=data)

        assert response.status_code == 201
        body = response.json()
        assert body["count"] == 3
        assert [t["date"] for t in body["items"]] == ["2024-01-31", "2024-02-29", "2024-03-31"]
        assert [t["description"] for t in body["items"]] == ["Rent (1/3)", "Rent (2/3)", "Rent (3/3)"]
        assert all(t["amount"] == 1000 for t in body["items"])

    def test_installments_split_amount(self, client, admin_headers):
        data = {"description": "Laptop", "amount": 300, "date": "2024-05-10", "recurrence": "installment", "occurrences": 3}

        body = client.post("/api/transactions/recurring", headers=admin_headers, json=data).json()

        assert [t["amount"] for t in body["items"]] == [100, 100, 100]
        assert [t["installment_number"] for t in body["items"]] == [1, 2, 3]

    def test_weekly(self, client, admin_headers):
        data = {"description": "Cleaning", "amount": 50, "date": "2024-05-01", "recurrence": "weekly", "occurrences": 2}

        body = client.post("/api/transactions/recurring", headers=admin_headers, json=data).json()

        assert [t["date"] for t in body["items"]] == ["2024-05-01", "2024-05-08"]

    def test_unique_ignores_occurrences(self, client, admin_headers):
        data = {"description": "Repair", "amount": 80, "date": "2024-05-01", "occurrences": 5}

        body = client.post("/api/transactions/recurring", headers=admin_headers, json=data).json()

        assert body["count"] == 1
        assert body["items"][0]["description"] == "Repair"


class TestPendingAndSummary:
    """Payables, receivables and the dashboard summary"""

    def test_payables_with_overdue_flag(self, client, admin_headers):
        supplier = client.post("/api/suppliers", headers=admin_headers, json={"name": "Landlord"}).json()
        yesterday = str(date.today() - timedelta(days=1))
        client.post("/api/transactions", headers=admin_headers, json=expense(date=yesterday, supplier_id=supplier["id"]))
        client.post("/api/transactions", headers=admin_headers, json=expense(status="paid"))

        response = client.get("/api/transactions/payables", headers=admin_headers)

        body = response.json()
        assert body["total"] == 1
        assert body["total_amount"] == 120.5
        assert body["items"][0]["overdue"] is True
        assert body["items"][0]["counterpart_name"] == "Landlord"

    def test_receivables(self, client, admin_headers):
        client.post("/api/transactions", headers=admin_headers, json=expense(type="income", amount=70))

        body = client.get("/api/transactions/receivables", headers=admin_headers).json()

        assert body["total"] == 1
        assert body["total_amount"] == 70

    def test_summary(self, client, admin_headers):
        client.post("/api/transactions", headers=admin_headers, json=expense(type="income", amount=500, status="paid"))
        client.post("/api/transactions", headers=admin_headers, json=expense(amount=200, status="paid"))
        client.post("/api/transactions", headers=admin_headers, json=expense(amount=50))

        summary = client.get("/api/transactions/summary", headers=admin_headers).json()

        assert summary["balance"] == 300
        assert summary["income"] == 500
        assert summary["expense"] == 200
        assert summary["pending_expenses"] == 50
        assert summary["income_count"] == 1

    def test_summary_trends(self, db_session, admin_user):
        context = resolve_tenant(Identity(user_id=admin_user.id, role=Role.ADMINISTRATOR, parent_admin_id=None))
        summary = TransactionService(db_session).get_financial_summary(context, today=date(2024, 6, 15))

        assert summary.trends.income == 0
        assert summary.balance == 0


class TestHelpers:
    @pytest.mark.parametrize(
        "start,months,expected",
        [
            (date(2024, 1, 31), 1, date(2024, 2, 29)),
            (date(2023, 1, 31), 1, date(2023, 2, 28)),
            (date(2024, 11, 15), 3, date(2025, 2, 15)),
            (date(2024, 3, 10), -1, date(2024, 2, 10)),
        ],
    )
    def test_add_months(self, start, months, expected):
        assert add_months(start, months) == expected

    def test_percentage_change(self):
        assert percentage_change(150, 100) == 50
        assert percentage_change(0, 0) == 0
