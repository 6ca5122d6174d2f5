"""
End-to-end tests through the FastAPI routers.
"""
import pytest

pytestmark = pytest.mark.integration

NOTE_PAYLOAD = {
    "date": "2025-06-02",
    "vehicle_plate": "L 9001 XY",
    "driver_name": "Slamet",
    "delivery_note_number": "SJ-API-1",
    "destination": "Gresik",
}

PO_PAYLOAD = {
    "po_number": "PO-2025-0001",
    "po_date": "2025-05-01",
    "buyer_name": "PT Sinar Laut",
    "product_type": "CPO",
    "total_tonnage": 40,
    "price_per_ton": "12500000",
}


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


class TestAuthorization:

    def test_missing_role_header(self, client):
        assert client.get("/api/delivery-notes").status_code == 401

    def test_unknown_role(self, client, headers):
        assert client.get("/api/delivery-notes", headers=headers("courier")).status_code == 400

    def test_driver_can_view_but_not_manage(self, client, headers):
        assert client.get("/api/delivery-notes", headers=headers("driver")).status_code == 200
        response = client.post("/api/delivery-notes", json=NOTE_PAYLOAD, headers=headers("driver"))
        assert response.status_code == 403

    def test_operator_cannot_manage_purchase_orders(self, client, headers):
        response = client.post("/api/purchase-orders", json=PO_PAYLOAD, headers=headers("operator"))
        assert response.status_code == 403

    def test_only_administrator_lists_users(self, client, headers):
        assert client.get("/api/users", headers=headers("supervisor")).status_code == 403
        assert client.get("/api/users", headers=headers("administrator")).status_code == 200


class TestDeliveryNotes:

    def test_create_get_and_list(self, client, headers):
        response = client.post(
            "/api/delivery-notes",
            json={**NOTE_PAYLOAD, "po_number": "-", "net_weight": 0},
            headers=headers("operator"),
        )
        assert response.status_code == 200
        note = response.json()
        assert note["status"] == "awaiting"
        assert note["po_number"] is None
        assert note["net_weight"] is None

        fetched = client.get(f"/api/delivery-notes/{note['id']}", headers=headers("driver"))
        assert fetched.json()["delivery_note_number"] == "SJ-API-1"

        listed = client.get("/api/delivery-notes", params={"status": "awaiting"}, headers=headers("driver"))
        assert [n["id"] for n in listed.json()] == [note["id"]]

    def test_missing_note_is_404(self, client, headers):
        response = client.get("/api/delivery-notes/nope", headers=headers("operator"))
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

        response = client.patch("/api/delivery-notes/nope", json={"driver_name": "X"}, headers=headers("operator"))
        assert response.status_code == 404

    def test_invalid_payload_is_422(self, client, headers):
        response = client.post(
            "/api/delivery-notes",
            json={**NOTE_PAYLOAD, "net_weight": -5},
            headers=headers("operator"),
        )
        assert response.status_code == 422

    @pytest.mark.parametrize("field", ["vehicle_plate", "driver_name", "date", "status", "has_seal"])
    def test_clearing_required_field_is_422(self, client, headers, field):
        operator = headers("operator")
        note = client.post("/api/delivery-notes", json=NOTE_PAYLOAD, headers=operator).json()

        response = client.patch(f"/api/delivery-notes/{note['id']}", json={field: None}, headers=operator)

        assert response.status_code == 422
        fetched = client.get(f"/api/delivery-notes/{note['id']}", headers=operator).json()
        assert fetched[field] == note[field]

    def test_print_moves_note_in_transit(self, client, headers):
        note = client.post("/api/delivery-notes", json=NOTE_PAYLOAD, headers=headers("operator")).json()

        assert client.post(f"/api/delivery-notes/{note['id']}/print", headers=headers("driver")).status_code == 403

        response = client.post(f"/api/delivery-notes/{note['id']}/print", headers=headers("operator"))
        assert response.status_code == 200
        assert response.json()["status"] == "in-transit"

    def test_po_change_reconciles_both_pos(self, client, headers, make_po):
        make_po("PO-100", total_tonnage=100)
        make_po("PO-200", total_tonnage=50)
        admin = headers("administrator")

        moving = client.post(
            "/api/delivery-notes", json={**NOTE_PAYLOAD, "po_number": "PO-100"}, headers=admin
        ).json()
        client.post(
            "/api/delivery-notes",
            json={**NOTE_PAYLOAD, "delivery_note_number": "SJ-API-2", "po_number": "PO-100", "net_weight": 30},
            headers=admin,
        )

        response = client.patch(f"/api/delivery-notes/{moving['id']}", json={"po_number": "PO-200"}, headers=admin)
        assert response.status_code == 200
        assert response.json()["po_number"] == "PO-200"

        old_po = client.get("/api/purchase-orders/PO-100", headers=admin).json()
        new_po = client.get("/api/purchase-orders/PO-200", headers=admin).json()
        assert (old_po["shipped_tonnage"], old_po["remaining_tonnage"], old_po["status"]) == (30, 70, "Partial")
        assert (new_po["shipped_tonnage"], new_po["remaining_tonnage"], new_po["status"]) == (0, 50, "Active")
        assert [d["id"] for d in new_po["deliveries"]] == [moving["id"]]

    def test_stats_and_delete(self, client, headers):
        operator = headers("operator")
        note = client.post("/api/delivery-notes", json={**NOTE_PAYLOAD, "net_weight": 12.5}, headers=operator).json()

        stats = client.get("/api/delivery-notes/stats", headers=operator).json()
        assert stats["total"] == 1
        assert stats["total_weight"] == 12.5

        response = client.delete(f"/api/delivery-notes/{note['id']}", headers=operator)
        assert response.json() == {"deleted": True, "id": note["id"]}
        assert client.get("/api/delivery-notes/stats", headers=operator).json()["total"] == 0

    def test_refresh_picks_up_rows_written_elsewhere(self, client, headers, make_note):
        operator = headers("operator")
        assert client.get("/api/delivery-notes", headers=operator).json() == []

        make_note()
        assert client.get("/api/delivery-notes", headers=operator).json() == []
        assert len(client.post("/api/delivery-notes/refresh", headers=operator).json()) == 1


class TestPurchaseOrders:

    def test_create_and_duplicate(self, client, headers):
        supervisor = headers("supervisor")
        response = client.post("/api/purchase-orders", json=PO_PAYLOAD, headers=supervisor)
        assert response.status_code == 200
        po = response.json()
        assert po["status"] == "Active"
        assert po["remaining_tonnage"] == 40
        assert float(po["total_value"]) == 500_000_000

        duplicate = client.post("/api/purchase-orders", json=PO_PAYLOAD, headers=supervisor)
        assert duplicate.status_code == 422
        assert duplicate.json()["code"] == "VALIDATION_ERROR"

    def test_tonnage_update_rederives_balance(self, client, headers, make_po):
        make_po("PO-1", total_tonnage=50, shipped_tonnage=30, remaining_tonnage=20, status="Partial")

        response = client.patch("/api/purchase-orders/PO-1", json={"total_tonnage": 25}, headers=headers("supervisor"))
        po = response.json()
        assert (po["remaining_tonnage"], po["status"]) == (0, "Completed")

    @pytest.mark.parametrize("field", ["total_tonnage", "price_per_ton", "po_date", "status"])
    def test_clearing_required_field_is_422(self, client, headers, make_po, po_row, field):
        make_po("PO-9", total_tonnage=50)

        response = client.patch("/api/purchase-orders/PO-9", json={field: None}, headers=headers("supervisor"))

        assert response.status_code == 422
        assert po_row("PO-9").total_tonnage == 50

    def test_reconcile_endpoint(self, client, headers, make_po, make_note):
        make_po("PO-1", total_tonnage=50)
        make_note(po_number="PO-1", net_weight=20)

        response = client.post("/api/purchase-orders/PO-1/reconcile", headers=headers("supervisor"))
        assert response.status_code == 200
        assert response.json()["shipped_tonnage"] == 20
        assert response.json()["status"] == "Partial"

        missing = client.post("/api/purchase-orders/PO-X/reconcile", headers=headers("supervisor"))
        assert missing.status_code == 404

    def test_status_filter_and_delete(self, client, headers, make_po):
        make_po("PO-1")
        make_po("PO-2", status="Cancelled")
        admin = headers("administrator")

        listed = client.get("/api/purchase-orders", params={"status": "Cancelled"}, headers=admin).json()
        assert [po["po_number"] for po in listed] == ["PO-2"]

        assert client.delete("/api/purchase-orders/PO-2", headers=admin).json() == {"deleted": True, "po_number": "PO-2"}
        assert client.get("/api/purchase-orders/PO-2", headers=admin).status_code == 404


class TestUsersAndPermissions:

    def test_custom_menus_replace_role_menus(self, client, headers):
        admin = headers("administrator")
        response = client.post(
            "/api/users",
            json={"username": "budi", "name": "Budi", "role": "driver", "custom_menu_access": ["laporan", "laporan"]},
            headers=admin,
        )
        assert response.status_code == 200
        user = response.json()
        assert user["custom_menu_access"] == ["laporan"]

        menus = client.get(f"/api/users/{user['id']}/menus", headers=headers("driver")).json()
        assert [m["id"] for m in menus] == ["laporan"]

        me = client.get("/api/permissions/me", headers=headers("driver", user_id=user["id"])).json()
        assert [m["id"] for m in me["menus"]] == ["laporan"]
        assert me["custom_menu_access"] is True
        assert me["permissions"]["canManageDeliveryNotes"] is False

    def test_unknown_menu_id_rejected(self, client, headers):
        response = client.post(
            "/api/users",
            json={"username": "x", "name": "X", "role": "operator", "custom_menu_access": ["kasir"]},
            headers=headers("administrator"),
        )
        assert response.status_code == 422

    def test_clearing_custom_menus_restores_role_default(self, client, headers):
        admin = headers("administrator")
        user = client.post(
            "/api/users",
            json={"username": "sari", "name": "Sari", "role": "operator", "custom_menu_access": ["dashboard"]},
            headers=admin,
        ).json()

        client.patch(f"/api/users/{user['id']}", json={"custom_menu_access": []}, headers=admin)
        menus = client.get(f"/api/users/{user['id']}/menus", headers=admin).json()
        assert [m["id"] for m in menus] == ["dashboard", "pengiriman", "surat-jalan", "laporan"]

    def test_route_check(self, client, headers):
        response = client.get("/api/permissions/route", params={"path": "/pengaturan"}, headers=headers("supervisor"))
        assert response.json() == {"role": "supervisor", "path": "/pengaturan", "allowed": False}

    def test_roles(self, client):
        roles = client.get("/api/permissions/roles").json()
        assert [r["role"] for r in roles] == ["administrator", "supervisor", "operator", "driver"]
