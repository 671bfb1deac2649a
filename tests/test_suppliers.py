from datetime import date

from sqlalchemy.exc import OperationalError

from app.repositories.base import TenantScopedRepository


class TestSupplierCrud:
    """Tests for suppliers"""

    def test_create_supplier(self, client, admin_headers):
        data = {"name": "Acme Supplies", "email": "sales@acme.com", "document": "12.345.678/0001-90", "city": "Recife"}

        response = client.post("/api/suppliers", headers=admin_headers, json=data)

        assert response.status_code == 201
        supplier = response.json()
        assert supplier["name"] == "Acme Supplies"
        assert supplier["city"] == "Recife"
        assert response.headers["x-invalidated-views"] == "/dashboard/registry/suppliers"

    def test_create_supplier_missing_name(self, client, admin_headers):
        response = client.post("/api/suppliers", headers=admin_headers, json={"email": "x@acme.com"})

        assert response.status_code == 422
        assert "name" in response.json()["fields"]

    def test_search_and_pagination(self, client, admin_headers):
        for name in ("Alpha Parts", "Beta Parts", "Gamma Tools"):
            client.post("/api/suppliers", headers=admin_headers, json={"name": name})

        parts = client.get("/api/suppliers", headers=admin_headers, params={"search": "parts"}).json()
        page = client.get("/api/suppliers", headers=admin_headers, params={"page": 2, "page_size": 2}).json()

        assert parts["total"] == 2
        assert page["total"] == 3
        assert [s["name"] for s in page["items"]] == ["Gamma Tools"]

    def test_partial_update(self, client, admin_headers):
        supplier = client.post("/api/suppliers", headers=admin_headers, json={"name": "Acme", "phone": "111"}).json()

        response = client.patch(f"/api/suppliers/{supplier['id']}", headers=admin_headers, json={"phone": None})

        assert response.status_code == 200
        assert response.json()["name"] == "Acme"
        assert response.json()["phone"] is None

    def test_update_cannot_clear_name(self, client, admin_headers):
        supplier = client.post("/api/suppliers", headers=admin_headers, json={"name": "Acme"}).json()

        response = client.patch(f"/api/suppliers/{supplier['id']}", headers=admin_headers, json={"name": None})

        assert response.status_code == 400

    def test_delete_unreferenced_supplier(self, client, admin_headers):
        supplier = client.post("/api/suppliers", headers=admin_headers, json={"name": "Acme"}).json()

        response = client.delete(f"/api/suppliers/{supplier['id']}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert client.get(f"/api/suppliers/{supplier['id']}", headers=admin_headers).status_code == 404


class TestSupplierReferences:
    """Referenced suppliers cannot be deleted"""

    def test_delete_with_transactions_conflicts(self, client, admin_headers):
        supplier = client.post("/api/suppliers", headers=admin_headers, json={"name": "Landlord"}).json()
        client.post(
            "/api/transactions",
            headers=admin_headers,
            json={"description": "Rent", "amount": 1500, "type": "expense", "date": str(date.today()), "supplier_id": supplier["id"]},
        )

        response = client.delete(f"/api/suppliers/{supplier['id']}", headers=admin_headers)

        assert response.status_code == 409
        assert "1 linked transaction" in response.json()["error"]
        assert client.get(f"/api/suppliers/{supplier['id']}", headers=admin_headers).status_code == 200

    def test_delete_carrier_of_sale_conflicts(self, client, admin_headers):
        carrier = client.post("/api/suppliers", headers=admin_headers, json={"name": "FastShip"}).json()
        product = client.post("/api/products", headers=admin_headers, json={"name": "Mug", "price": 20, "stock_quantity": 3}).json()
        client.post(
            "/api/sales",
            headers=admin_headers,
            json={"carrier_id": carrier["id"], "items": [{"item_type": "product", "product_id": product["id"], "quantity": 1}]},
        )

        response = client.delete(f"/api/suppliers/{carrier['id']}", headers=admin_headers)

        assert response.status_code == 409


class TestSupplierQuotes:
    """Quotes and their derived totals"""

    def _supplier(self, client, headers):
        return client.post("/api/suppliers", headers=headers, json={"name": "Acme"}).json()

    def test_total_is_computed_from_items(self, client, admin_headers):
        supplier = self._supplier(client, admin_headers)
        data = {
            "supplier_id": supplier["id"],
            "description": "Packaging",
            "items": [
                {"description": "Boxes", "quantity": 10, "unit_price": 2.5},
                {"description": "Tape", "quantity": 3, "unit_price": 4.1},
            ],
        }

        response = client.post("/api/supplier-quotes", headers=admin_headers, json=data)

        assert response.status_code == 201
        quote = response.json()
        assert quote["total_amount"] == 37.3
        assert [item["total_price"] for item in quote["items"]] == [25.0, 12.3]
        assert quote["status"] == "pending"

    def test_client_total_is_rejected(self, client, admin_headers):
        supplier = self._supplier(client, admin_headers)
        data = {
            "supplier_id": supplier["id"],
            "total_amount": 1,
            "items": [{"description": "Boxes", "quantity": 1, "unit_price": 2}],
        }

        response = client.post("/api/supplier-quotes", headers=admin_headers, json=data)

        assert response.status_code == 422

    def test_fractional_cent_price_is_rejected(self, client, admin_headers):
        supplier = self._supplier(client, admin_headers)
        data = {"supplier_id": supplier["id"], "items": [{"description": "Boxes", "quantity": 3, "unit_price": 0.335}]}

        response = client.post("/api/supplier-quotes", headers=admin_headers, json=data)

        assert response.status_code == 422
        assert "items.0.unit_price" in response.json()["fields"]

    def test_quote_requires_items(self, client, admin_headers):
        supplier = self._supplier(client, admin_headers)

        response = client.post("/api/supplier-quotes", headers=admin_headers, json={"supplier_id": supplier["id"], "items": []})

        assert response.status_code == 422

    def test_replacing_items_recomputes_total(self, client, admin_headers):
        supplier = self._supplier(client, admin_headers)
        quote = client.post(
            "/api/supplier-quotes",
            headers=admin_headers,
            json={"supplier_id": supplier["id"], "items": [{"description": "Boxes", "quantity": 10, "unit_price": 2.5}]},
        ).json()

        response = client.patch(
            f"/api/supplier-quotes/{quote['id']}",
            headers=admin_headers,
            json={"items": [{"description": "Pallets", "quantity": 2, "unit_price": 40}]},
        )

        assert response.status_code == 200
        updated = response.json()
        assert updated["total_amount"] == 80.0
        assert [item["description"] for item in updated["items"]] == ["Pallets"]

    def test_update_without_items_keeps_total(self, client, admin_headers):
        supplier = self._supplier(client, admin_headers)
        quote = client.post(
            "/api/supplier-quotes",
            headers=admin_headers,
            json={"supplier_id": supplier["id"], "items": [{"description": "Boxes", "quantity": 4, "unit_price": 5}]},
        ).json()

        response = client.patch(f"/api/supplier-quotes/{quote['id']}", headers=admin_headers, json={"notes": "Call first"})

        assert response.json()["total_amount"] == 20.0
        assert response.json()["notes"] == "Call first"

    def test_status_update(self, client, admin_headers):
        supplier = self._supplier(client, admin_headers)
        quote = client.post(
            "/api/supplier-quotes",
            headers=admin_headers,
            json={"supplier_id": supplier["id"], "items": [{"description": "Boxes", "quantity": 1, "unit_price": 5}]},
        ).json()

        response = client.patch(f"/api/supplier-quotes/{quote['id']}/status", headers=admin_headers, json={"status": "approved"})

        assert response.json()["status"] == "approved"

    def test_quote_for_other_tenant_supplier(self, client, admin_headers, other_headers):
        supplier = self._supplier(client, other_headers)

        response = client.post(
            "/api/supplier-quotes",
            headers=admin_headers,
            json={"supplier_id": supplier["id"], "items": [{"description": "Boxes", "quantity": 1, "unit_price": 5}]},
        )

        assert response.status_code == 404

    def test_list_by_supplier(self, client, admin_headers):
        first = self._supplier(client, admin_headers)
        second = self._supplier(client, admin_headers)
        for supplier in (first, first, second):
            client.post(
                "/api/supplier-quotes",
                headers=admin_headers,
                json={"supplier_id": supplier["id"], "items": [{"description": "Boxes", "quantity": 1, "unit_price": 5}]},
            )

        response = client.get("/api/supplier-quotes", headers=admin_headers, params={"supplier_id": first["id"]})

        assert response.json()["total"] == 2


class TestDatabaseFailure:
    """Store errors on read paths"""

    def test_failed_listing_returns_generic_error(self, client, admin_headers, monkeypatch):
        def failing_paginate(self, query, page, page_size):
            raise OperationalError("SELECT", {}, Exception("database is locked"))

        monkeypatch.setattr(TenantScopedRepository, "paginate", failing_paginate)

        response = client.get("/api/suppliers", headers=admin_headers)

        assert response.status_code == 500
        assert response.headers["content-type"] == "application/json"
        assert response.json() == {"error": "The operation could not be completed"}
