from datetime import date, timedelta

import pytest

from app.models.customer import Customer
from app.models.product import Product
from app.models.transaction import Transaction, TransactionStatus, TransactionType

URL = "/api/quotes"


@pytest.fixture
def catalog(client, admin_headers):
    product = client.post(
        "/api/products", headers=admin_headers, json={"name": "Coffee mug", "price": 25.0, "stock_quantity": 10}
    ).json()
    service = client.post("/api/services", headers=admin_headers, json={"name": "Engraving", "price": 15.0}).json()
    return {"product": product, "service": service}


def quote_data(catalog, **overrides):
    data = {
        "client_name": "Dana Client",
        "client_email": "dana@example.com",
        "discount": 5,
        "items": [
            {"description": "Coffee mug", "quantity": 2, "unit_price": 25.0, "product_id": catalog["product"]["id"]},
            {"description": "Engraving", "quantity": 1, "unit_price": 15.0, "service_id": catalog["service"]["id"]},
        ],
    }
    data.update(overrides)
    return data


def set_status(client, headers, quote_id, status):
    return client.patch(f"{URL}/{quote_id}/status", headers=headers, json={"status": status})


class TestQuoteCreation:
    """Issuing quotes"""

    def test_total_subtracts_discount(self, client, admin_headers, catalog):
        response = client.post(URL, headers=admin_headers, json=quote_data(catalog))

        assert response.status_code == 201
        quote = response.json()
        assert quote["number"] == 1
        assert quote["status"] == "draft"
        assert quote["total_amount"] == 60.0
        assert [item["total_price"] for item in quote["items"]] == [50.0, 15.0]

    def test_total_never_negative(self, client, admin_headers, catalog):
        response = client.post(URL, headers=admin_headers, json=quote_data(catalog, discount=500))

        assert response.json()["total_amount"] == 0.0

    def test_numbers_are_sequential_per_tenant(self, client, admin_headers, other_headers, catalog):
        client.post(URL, headers=admin_headers, json=quote_data(catalog))
        second = client.post(URL, headers=admin_headers, json=quote_data(catalog)).json()
        other = client.post(
            URL, headers=other_headers, json={"client_name": "Eve", "items": [{"description": "Visit", "quantity": 1, "unit_price": 80}]}
        ).json()

        assert second["number"] == 2
        assert other["number"] == 1
        assert client.get(f"{URL}/next-number", headers=admin_headers).json() == {"number": 3}

    def test_item_cannot_reference_product_and_service(self, client, admin_headers, catalog):
        items = [{"description": "Both", "quantity": 1, "unit_price": 1, "product_id": catalog["product"]["id"], "service_id": catalog["service"]["id"]}]

        response = client.post(URL, headers=admin_headers, json=quote_data(catalog, items=items))

        assert response.status_code == 422

    def test_other_tenant_product_is_rejected(self, client, other_headers, catalog):
        items = [{"description": "Mug", "quantity": 1, "unit_price": 25, "product_id": catalog["product"]["id"]}]

        response = client.post(URL, headers=other_headers, json={"client_name": "Eve", "items": items})

        assert response.status_code == 404

    def test_fractional_cent_price_is_rejected(self, client, admin_headers, catalog):
        items = [{"description": "Visit", "quantity": 1, "unit_price": 0.335}]

        response = client.post(URL, headers=admin_headers, json=quote_data(catalog, items=items))

        assert response.status_code == 422

    def test_cannot_be_created_approved(self, client, admin_headers, catalog):
        response = client.post(URL, headers=admin_headers, json=quote_data(catalog, status="approved"))

        assert response.status_code == 422


class TestQuoteExpiry:
    def test_listing_expires_overdue_quotes(self, client, admin_headers, catalog):
        yesterday = str(date.today() - timedelta(days=1))
        overdue = client.post(URL, headers=admin_headers, json=quote_data(catalog, valid_until=yesterday, status="sent")).json()
        current = client.post(URL, headers=admin_headers, json=quote_data(catalog, valid_until=str(date.today()))).json()

        quotes = {quote["id"]: quote["status"] for quote in client.get(URL, headers=admin_headers).json()["items"]}

        assert quotes[overdue["id"]] == "expired"
        assert quotes[current["id"]] == "draft"

    def test_rejected_quotes_do_not_expire(self, client, admin_headers, catalog):
        yesterday = str(date.today() - timedelta(days=1))
        quote = client.post(URL, headers=admin_headers, json=quote_data(catalog, valid_until=yesterday)).json()
        set_status(client, admin_headers, quote["id"], "rejected")

        listed = client.get(URL, headers=admin_headers, params={"status": "rejected"}).json()

        assert [item["id"] for item in listed["items"]] == [quote["id"]]


class TestQuoteApproval:
    """Approval moves stock, links the customer and raises receivables"""

    def test_approval_effects(self, client, admin_headers, catalog, db_session):
        quote = client.post(URL, headers=admin_headers, json=quote_data(catalog)).json()

        response = set_status(client, admin_headers, quote["id"], "approved")

        assert response.status_code == 200
        assert db_session.get(Product, catalog["product"]["id"]).stock_quantity == 8
        customer = db_session.query(Customer).filter_by(name="Dana Client").one()
        assert response.json()["customer_id"] == customer.id
        receivable = db_session.query(Transaction).filter_by(quote_id=quote["id"]).one()
        assert receivable.description == "Quote #0001 - Dana Client"
        assert receivable.amount == 60.0
        assert receivable.type == TransactionType.INCOME
        assert receivable.status == TransactionStatus.PENDING
        assert receivable.customer_id == customer.id

    def test_existing_customer_gets_missing_contact(self, client, admin_headers, catalog, db_session):
        customer = client.post("/api/customers", headers=admin_headers, json={"name": "Dana", "phone": "5551234"}).json()
        quote = client.post(
            URL, headers=admin_headers, json=quote_data(catalog, client_name="Dana C.", client_phone="5551234")
        ).json()

        set_status(client, admin_headers, quote["id"], "approved")

        stored = db_session.get(Customer, customer["id"])
        assert stored.email == "dana@example.com"
        assert db_session.query(Customer).count() == 1

    def test_recurring_quote_bills_installments(self, client, admin_headers, catalog, db_session):
        quote = client.post(
            URL, headers=admin_headers, json=quote_data(catalog, is_recurring=True, installments=3)
        ).json()

        set_status(client, admin_headers, quote["id"], "approved")

        receivables = db_session.query(Transaction).filter_by(quote_id=quote["id"]).order_by(Transaction.installment_number).all()
        assert [t.amount for t in receivables] == [20.0, 20.0, 20.0]
        assert receivables[2].description == "Quote #0001 - Dana Client (3/3)"
        assert receivables[1].date > receivables[0].date

    def test_reapproval_does_not_duplicate_receivables(self, client, admin_headers, catalog, db_session):
        quote = client.post(URL, headers=admin_headers, json=quote_data(catalog)).json()

        set_status(client, admin_headers, quote["id"], "approved")
        set_status(client, admin_headers, quote["id"], "rejected")
        restored = db_session.get(Product, catalog["product"]["id"]).stock_quantity
        set_status(client, admin_headers, quote["id"], "approved")

        assert restored == 10
        assert db_session.query(Transaction).filter_by(quote_id=quote["id"]).count() == 1
        db_session.expire_all()
        assert db_session.get(Product, catalog["product"]["id"]).stock_quantity == 8

    def test_insufficient_stock_blocks_approval(self, client, admin_headers, catalog, db_session):
        items = [{"description": "Mugs", "quantity": 11, "unit_price": 25, "product_id": catalog["product"]["id"]}]
        quote = client.post(URL, headers=admin_headers, json=quote_data(catalog, items=items)).json()

        response = set_status(client, admin_headers, quote["id"], "approved")

        assert response.status_code == 400
        assert f"product_{catalog['product']['id']}" in response.json()["fields"]
        assert client.get(f"{URL}/{quote['id']}", headers=admin_headers).json()["status"] == "draft"
        assert db_session.query(Transaction).count() == 0


class TestQuoteDeletion:
    def test_deleting_approved_quote_restores_stock(self, client, admin_headers, catalog, db_session):
        quote = client.post(URL, headers=admin_headers, json=quote_data(catalog)).json()
        set_status(client, admin_headers, quote["id"], "approved")

        response = client.delete(f"{URL}/{quote['id']}", headers=admin_headers)

        assert response.json() == {"success": True}
        db_session.expire_all()
        assert db_session.get(Product, catalog["product"]["id"]).stock_quantity == 10
        receivable = db_session.query(Transaction).one()
        assert receivable.quote_id is None

    def test_quoted_product_cannot_be_deleted(self, client, admin_headers, catalog):
        client.post(URL, headers=admin_headers, json=quote_data(catalog))

        response = client.delete(f"/api/products/{catalog['product']['id']}", headers=admin_headers)

        assert response.status_code == 409

    def test_other_tenant_cannot_delete(self, client, admin_headers, other_headers, catalog):
        quote = client.post(URL, headers=admin_headers, json=quote_data(catalog)).json()

        assert client.delete(f"{URL}/{quote['id']}", headers=other_headers).status_code == 404
