import pytest


@pytest.fixture
def sale(client, admin_headers):
    carrier = client.post("/api/suppliers", headers=admin_headers, json={"name": "FastShip"}).json()
    service = client.post("/api/services", headers=admin_headers, json={"name": "Gift wrap", "price": 10}).json()
    return client.post(
        "/api/sales",
        headers=admin_headers,
        json={
            "carrier_id": carrier["id"],
            "shipping_cost": 15,
            "items": [{"item_type": "service", "service_id": service["id"], "quantity": 1}],
        },
    ).json()


class TestShipments:
    """Logistics pipeline"""

    def test_create_from_sale(self, client, admin_headers, sale):
        response = client.post("/api/shipments", headers=admin_headers, json={"sale_id": sale["id"]})

        assert response.status_code == 201
        shipment = response.json()
        assert shipment["status"] == "pending"
        assert shipment["carrier_id"] == sale["carrier_id"]
        assert shipment["shipping_cost"] == 15

    def test_one_shipment_per_sale(self, client, admin_headers, sale):
        client.post("/api/shipments", headers=admin_headers, json={"sale_id": sale["id"]})

        response = client.post("/api/shipments", headers=admin_headers, json={"sale_id": sale["id"]})

        assert response.status_code == 400
        assert "sale_id" in response.json()["fields"]

    def test_other_tenant_sale(self, client, other_headers, sale):
        response = client.post("/api/shipments", headers=other_headers, json={"sale_id": sale["id"]})

        assert response.status_code == 404

    def test_status_changes_stamp_timestamps(self, client, admin_headers, sale):
        shipment = client.post("/api/shipments", headers=admin_headers, json={"sale_id": sale["id"]}).json()

        picked = client.patch(f"/api/shipments/{shipment['id']}/status", headers=admin_headers, json={"status": "picking"}).json()
        delivered = client.patch(
            f"/api/shipments/{shipment['id']}/status", headers=admin_headers, json={"status": "delivered"}
        ).json()

        assert picked["picked_at"] is not None
        assert picked["delivered_at"] is None
        assert delivered["delivered_at"] is not None
        assert delivered["picked_at"] == picked["picked_at"]

    def test_unknown_status(self, client, admin_headers, sale):
        shipment = client.post("/api/shipments", headers=admin_headers, json={"sale_id": sale["id"]}).json()

        response = client.patch(f"/api/shipments/{shipment['id']}/status", headers=admin_headers, json={"status": "lost"})

        assert response.status_code == 422

    def test_update_details(self, client, admin_headers, sale):
        shipment = client.post("/api/shipments", headers=admin_headers, json={"sale_id": sale["id"]}).json()

        response = client.patch(
            f"/api/shipments/{shipment['id']}",
            headers=admin_headers,
            json={"tracking_code": "BR123", "weight": 1.5},
        )

        assert response.json()["tracking_code"] == "BR123"
        assert response.json()["weight"] == 1.5

    def test_list_by_status(self, client, admin_headers, sale):
        shipment = client.post("/api/shipments", headers=admin_headers, json={"sale_id": sale["id"]}).json()
        client.patch(f"/api/shipments/{shipment['id']}/status", headers=admin_headers, json={"status": "posted"})

        assert client.get("/api/shipments", headers=admin_headers, params={"status": "posted"}).json()["total"] == 1
        assert client.get("/api/shipments", headers=admin_headers, params={"status": "pending"}).json()["total"] == 0

    def test_deleting_sale_removes_shipment(self, client, admin_headers, sale):
        shipment = client.post("/api/shipments", headers=admin_headers, json={"sale_id": sale["id"]}).json()

        client.delete(f"/api/sales/{sale['id']}", headers=admin_headers)

        assert client.get(f"/api/shipments/{shipment['id']}", headers=admin_headers).status_code == 404
