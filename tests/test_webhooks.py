import hashlib
import hmac
import json

import pytest

from app.config import settings
from app.models.customer import Customer
from app.models.integration_config import IntegrationConfig
from app.models.product import Product
from app.models.sale import Sale
from app.models.shipment import ShipmentOrder
from app.models.transaction import Transaction, TransactionStatus, TransactionType
from app.services.order_import_service import map_payment_method

URL = "/api/webhooks/nuvemshop"
STORE_ID = "777"


@pytest.fixture
def integration(client, admin_headers):
    response = client.put(
        "/api/settings/integrations/nuvemshop",
        headers=admin_headers,
        json={"store_id": STORE_ID, "access_token": "tok-123"},
    )
    assert response.status_code == 200
    return response.json()


@pytest.fixture
def mug(db_session, admin_user):
    product = Product(user_id=admin_user.id, name="Coffee mug", price=25.0, sku="MUG-1", stock_quantity=5, manage_stock=True)
    db_session.add(product)
    db_session.commit()
    return product


def order_event(event="order/created", **overrides):
    payload = {
        "event": event,
        "store_id": int(STORE_ID),
        "id": 9001,
        "number": 1042,
        "payment_status": "pending",
        "gateway": "mercadopago_pix",
        "shipping": {"cost": "12.50"},
        "products": [
            {"name": "Coffee mug", "quantity": 2, "price": "25.00", "sku": "MUG-1"},
            {"name": "Sticker pack", "quantity": 1, "price": "5.00"},
        ],
        "customer": {
            "id": 55,
            "name": "Dana Buyer",
            "email": "Dana@Example.com",
            "billing_address": {"address": "Rua A", "number": "10", "floor": "3", "city": "Curitiba", "zip": "80000-000"},
        },
        "shipping_address": {"address": "Rua A", "number": "10", "city": "Curitiba"},
        "created_at": "2024-05-01T12:30:00+00:00",
    }
    payload.update(overrides)
    return payload


class TestWebhookIngress:
    """Envelope handling before any tenant is touched"""

    def test_health(self, client):
        response = client.get(URL)

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "endpoint": "nuvemshop-webhook"}

    def test_missing_event_and_store(self, client):
        response = client.post(URL, json={"id": 1})

        assert response.status_code == 400
        assert set(response.json()["fields"]) == {"event", "store_id"}

    def test_non_object_body(self, client):
        response = client.post(URL, content=b"[1, 2]", headers={"Content-Type": "application/json"})

        assert response.status_code == 400

    def test_malformed_json(self, client):
        response = client.post(URL, content=b"{not json", headers={"Content-Type": "application/json"})

        assert response.status_code == 400

    def test_unknown_store_is_acknowledged(self, client, db_session):
        response = client.post(URL, json=order_event(store_id=12345))

        assert response.status_code == 200
        assert response.json() == {"received": True}
        assert db_session.query(Sale).count() == 0

    def test_disabled_sync_is_acknowledged(self, client, admin_headers, integration, db_session):
        client.patch("/api/settings/integrations/nuvemshop/sync", headers=admin_headers, json={"enabled": False})

        response = client.post(URL, json=order_event())

        assert response.json() == {"received": True}
        assert db_session.query(Sale).count() == 0

    def test_unhandled_event_is_echoed(self, client, integration):
        response = client.post(URL, json={"event": "product/updated", "store_id": STORE_ID, "id": 3})

        assert response.status_code == 200
        assert response.json() == {"received": True, "event": "product/updated"}

    def test_no_session_needed(self, client, integration):
        response = client.post(URL, json=order_event())

        assert response.status_code == 200


class TestSignature:
    """HMAC check when an app secret is configured"""

    @pytest.fixture(autouse=True)
    def secret(self, monkeypatch):
        monkeypatch.setattr(settings, "NUVEMSHOP_APP_SECRET", "app-secret")

    def sign(self, body: bytes) -> str:
        return hmac.new(b"app-secret", body, hashlib.sha256).hexdigest()

    def test_missing_signature(self, client, integration):
        response = client.post(URL, json=order_event())

        assert response.status_code == 401

    def test_wrong_signature(self, client, integration):
        body = json.dumps(order_event()).encode()

        response = client.post(
            URL, content=body, headers={"Content-Type": "application/json", "X-Linkedstore-Hmac-Sha256": "0" * 64}
        )

        assert response.status_code == 401

    def test_valid_signature(self, client, integration):
        body = json.dumps(order_event()).encode()

        response = client.post(
            URL, content=body, headers={"Content-Type": "application/json", "X-Linkedstore-Hmac-Sha256": self.sign(body)}
        )

        assert response.status_code == 200
        assert response.json()["success"] is True


class TestOrderCreated:
    """Importing an order as a sale of the store's tenant"""

    def test_import(self, client, integration, mug, db_session, admin_user):
        response = client.post(URL, json=order_event())

        assert response.status_code == 200
        sale = db_session.get(Sale, response.json()["sale_id"])
        assert sale.user_id == admin_user.id
        assert sale.external_order_id == "9001"
        assert sale.total_amount == 67.5
        assert sale.payment_method == "pix"
        assert sale.date.isoformat() == "2024-05-01"
        assert [item.product_id for item in sale.items] == [mug.id, None]

    def test_stock_is_decremented_and_floored(self, client, integration, mug, db_session):
        client.post(URL, json=order_event())
        client.post(URL, json=order_event(id=9002, number=1043, products=[{"name": "coffee MUG", "quantity": 10, "price": "25"}]))

        db_session.refresh(mug)
        assert mug.stock_quantity == 0

    def test_customer_is_created_once(self, client, integration, db_session, admin_user):
        client.post(URL, json=order_event())
        client.post(URL, json=order_event(id=9002, number=1043))

        customers = db_session.query(Customer).filter(Customer.user_id == admin_user.id).all()
        assert len(customers) == 1
        assert customers[0].email == "dana@example.com"
        assert customers[0].complement == "Floor 3"
        assert customers[0].zip_code == "80000-000"

    def test_receivable_and_shipment(self, client, integration, db_session):
        sale_id = client.post(URL, json=order_event()).json()["sale_id"]

        receivable = db_session.query(Transaction).filter(Transaction.sale_id == sale_id).one()
        assert receivable.type == TransactionType.INCOME
        assert receivable.status == TransactionStatus.PENDING
        assert receivable.description == "Nuvemshop order #1042"
        assert receivable.external_order_id == "9001"
        assert db_session.query(ShipmentOrder).filter(ShipmentOrder.sale_id == sale_id).count() == 1

    def test_paid_order_imports_paid(self, client, integration, db_session):
        sale_id = client.post(URL, json=order_event(payment_status="paid")).json()["sale_id"]

        receivable = db_session.query(Transaction).filter(Transaction.sale_id == sale_id).one()
        assert receivable.status == TransactionStatus.PAID
        assert receivable.paid_at is not None

    def test_redelivery_is_skipped(self, client, integration, db_session):
        first = client.post(URL, json=order_event()).json()

        second = client.post(URL, json=order_event()).json()

        assert second == {"success": True, "skipped": True, "sale_id": first["sale_id"]}
        assert db_session.query(Sale).count() == 1

    def test_last_sync_is_stamped(self, client, integration, db_session):
        client.post(URL, json=order_event())

        config = db_session.query(IntegrationConfig).one()
        assert config.last_sync_at is not None

    def test_invalid_order_body_is_acknowledged(self, client, integration, db_session):
        response = client.post(URL, json={"event": "order/created", "store_id": STORE_ID, "products": "nope"})

        assert response.status_code == 200
        assert response.json() == {"received": True}
        assert db_session.query(Sale).count() == 0

    def test_other_tenant_is_untouched(self, client, integration, other_headers):
        client.post(URL, json=order_event())

        assert client.get("/api/sales", headers=other_headers).json()["total"] == 0

    def test_store_cannot_be_rerouted_to_other_tenant(self, client, integration, admin_headers, other_headers):
        hijack = client.put(
            "/api/settings/integrations/nuvemshop",
            headers=other_headers,
            json={"store_id": STORE_ID, "access_token": "bogus"},
        )

        client.post(URL, json=order_event())

        assert hijack.status_code == 409
        assert client.get("/api/sales", headers=other_headers).json()["total"] == 0
        assert client.get("/api/sales", headers=admin_headers).json()["total"] == 1


class TestOrderPaid:
    """Payment confirmation for imported orders"""

    def test_marks_receivable_paid(self, client, integration, db_session):
        sale_id = client.post(URL, json=order_event()).json()["sale_id"]

        response = client.post(URL, json={"event": "order/paid", "store_id": STORE_ID, "id": 9001, "number": 1042})

        assert response.json() == {"received": True}
        receivable = db_session.query(Transaction).filter(Transaction.sale_id == sale_id).one()
        db_session.refresh(receivable)
        assert receivable.status == TransactionStatus.PAID

    def test_replay_keeps_first_payment_time(self, client, integration, db_session):
        sale_id = client.post(URL, json=order_event()).json()["sale_id"]
        paid_event = {"event": "order/paid", "store_id": STORE_ID, "id": 9001}
        client.post(URL, json=paid_event)
        receivable = db_session.query(Transaction).filter(Transaction.sale_id == sale_id).one()
        db_session.refresh(receivable)
        first_paid_at = receivable.paid_at

        client.post(URL, json=paid_event)

        db_session.refresh(receivable)
        assert receivable.paid_at == first_paid_at

    def test_unlinked_receivable_matched_by_number(self, client, integration, admin_headers, db_session):
        legacy = client.post(
            "/api/transactions",
            headers=admin_headers,
            json={"description": "Nuvemshop order #1042", "amount": 60, "type": "income", "date": "2024-05-01"},
        ).json()

        client.post(URL, json={"event": "order/paid", "store_id": STORE_ID, "id": 4444, "number": 1042})

        assert client.get(f"/api/transactions/{legacy['id']}", headers=admin_headers).json()["status"] == "paid"

    def test_number_prefix_does_not_match(self, client, integration, admin_headers):
        other = client.post(
            "/api/transactions",
            headers=admin_headers,
            json={"description": "Nuvemshop order #10420", "amount": 60, "type": "income", "date": "2024-05-01"},
        ).json()

        client.post(URL, json={"event": "order/paid", "store_id": STORE_ID, "number": 1042})

        assert client.get(f"/api/transactions/{other['id']}", headers=admin_headers).json()["status"] == "pending"


class TestOrderFulfilled:
    def test_shipment_goes_in_transit(self, client, integration, db_session):
        sale_id = client.post(URL, json=order_event()).json()["sale_id"]

        client.post(
            URL,
            json={"event": "order/fulfilled", "store_id": STORE_ID, "id": 9001, "shipping_tracking_number": "BR123"},
        )

        shipment = db_session.query(ShipmentOrder).filter(ShipmentOrder.sale_id == sale_id).one()
        db_session.refresh(shipment)
        assert shipment.status.value == "in_transit"
        assert shipment.tracking_code == "BR123"

    def test_unknown_order_is_acknowledged(self, client, integration):
        response = client.post(URL, json={"event": "order/fulfilled", "store_id": STORE_ID, "id": 1})

        assert response.json() == {"received": True}


@pytest.mark.parametrize(
    "gateway,expected",
    [
        ("mercadopago_pix", "pix"),
        ("Boleto Bancario", "boleto"),
        ("pagseguro_credit_card", "credit_card"),
        ("cartao de debito", "debit_card"),
        ("dinheiro", "cash"),
        ("custom", "other"),
        (None, "other"),
    ],
)
def test_map_payment_method(gateway, expected):
    assert map_payment_method(gateway) == expected
