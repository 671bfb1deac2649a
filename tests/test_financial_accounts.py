from datetime import date

URL = "/api/financial-accounts"


def create_account(client, headers, **overrides):
    data = {"name": "Main bank", "type": "checking", "balance": 1500.0}
    data.update(overrides)
    return client.post(URL, headers=headers, json=data)


class TestFinancialAccounts:
    """Accounts and the single default"""

    def test_create_account(self, client, admin_headers):
        response = create_account(client, admin_headers)

        assert response.status_code == 201
        account = response.json()
        assert account["balance"] == 1500.0
        assert account["is_default"] is False
        assert account["active"] is True
        assert "/dashboard/finance/accounts" in response.headers["x-invalidated-views"]

    def test_new_default_replaces_previous(self, client, admin_headers):
        first = create_account(client, admin_headers, name="Bank", is_default=True).json()

        second = create_account(client, admin_headers, name="Cash box", type="cash", is_default=True).json()
        default = client.get(f"{URL}/default", headers=admin_headers).json()

        assert default["id"] == second["id"]
        assert client.get(f"{URL}/{first['id']}", headers=admin_headers).json()["is_default"] is False

    def test_update_to_default(self, client, admin_headers):
        first = create_account(client, admin_headers, name="Bank", is_default=True).json()
        second = create_account(client, admin_headers, name="Wallet").json()

        response = client.patch(f"{URL}/{second['id']}", headers=admin_headers, json={"is_default": True})

        assert response.json()["is_default"] is True
        assert client.get(f"{URL}/{first['id']}", headers=admin_headers).json()["is_default"] is False

    def test_listing_puts_default_first(self, client, admin_headers):
        create_account(client, admin_headers, name="Alpha")
        create_account(client, admin_headers, name="Zeta", is_default=True)
        create_account(client, admin_headers, name="Beta")

        names = [account["name"] for account in client.get(URL, headers=admin_headers).json()["items"]]

        assert names == ["Zeta", "Alpha", "Beta"]

    def test_no_default(self, client, admin_headers):
        response = client.get(f"{URL}/default", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() is None

    def test_type_cannot_be_cleared(self, client, admin_headers):
        account = create_account(client, admin_headers).json()

        response = client.patch(f"{URL}/{account['id']}", headers=admin_headers, json={"type": None})

        assert response.status_code == 400

    def test_accounts_are_per_tenant(self, client, admin_headers, other_headers):
        account = create_account(client, admin_headers).json()

        assert client.get(f"{URL}/{account['id']}", headers=other_headers).status_code == 404
        assert client.get(URL, headers=other_headers).json()["total"] == 0


class TestAccountDeletion:
    def test_delete_account(self, client, admin_headers):
        account = create_account(client, admin_headers).json()

        response = client.delete(f"{URL}/{account['id']}", headers=admin_headers)

        assert response.json() == {"success": True}
        assert client.get(f"{URL}/{account['id']}", headers=admin_headers).status_code == 404

    def test_default_account_cannot_be_deleted(self, client, admin_headers):
        account = create_account(client, admin_headers, is_default=True).json()

        response = client.delete(f"{URL}/{account['id']}", headers=admin_headers)

        assert response.status_code == 409

    def test_account_with_transactions_cannot_be_deleted(self, client, admin_headers):
        account = create_account(client, admin_headers).json()
        client.post(
            "/api/transactions",
            headers=admin_headers,
            json={
                "description": "Rent",
                "amount": 900,
                "type": "expense",
                "date": str(date.today()),
                "financial_account_id": account["id"],
            },
        )

        response = client.delete(f"{URL}/{account['id']}", headers=admin_headers)

        assert response.status_code == 409
        assert "1 linked transaction" in response.json()["error"]


class TestTransactionAccount:
    def test_transaction_records_account(self, client, admin_headers):
        account = create_account(client, admin_headers).json()

        response = client.post(
            "/api/transactions",
            headers=admin_headers,
            json={"description": "Rent", "amount": 900, "type": "expense", "date": str(date.today()), "financial_account_id": account["id"]},
        )

        assert response.status_code == 201
        assert response.json()["financial_account_id"] == account["id"]

    def test_other_tenant_account_is_rejected(self, client, admin_headers, other_headers):
        account = create_account(client, other_headers).json()

        response = client.post(
            "/api/transactions",
            headers=admin_headers,
            json={"description": "Rent", "amount": 900, "type": "expense", "date": str(date.today()), "financial_account_id": account["id"]},
        )

        assert response.status_code == 404
