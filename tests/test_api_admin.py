import csv
import io

import pytest

import phone_order.config as config_mod

from conftest import UNMANAGED_ID, WIDGET_ID


def place_order(client, phone="555-1234", product_id=WIDGET_ID, quantity=1):
    resp = client.post(
        "/phone-order/create",
        json={"phone": phone, "product_id": product_id, "quantity": quantity},
    )
    assert resp.status_code == 200
    return resp.json()["order_id"]


# =============================================================================
# Authentication
# =============================================================================

@pytest.mark.parametrize("path", [
    "/admin/phone-orders/stats",
    "/admin/phone-orders",
    "/admin/phone-order-settings",
    "/admin/phone-orders/export?start_date=2026-10-01&end_date=2026-10-31",
])
def test_admin_endpoints_require_auth(client, path):
    """Test that admin endpoints return 401 without auth."""
    resp = client.get(path)
    assert resp.status_code == 401


def test_admin_rejects_invalid_auth(client):
    """Test that admin endpoints return 401 with invalid credentials."""
    resp = client.get("/admin/phone-orders/stats", auth=("wrong", "credentials"))
    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == "Basic"


def test_admin_returns_503_without_configured_password(client, admin_auth, monkeypatch):
    monkeypatch.setattr(config_mod, "ADMIN_PASSWORD", "")
    resp = client.get("/admin/phone-orders/stats", auth=admin_auth)
    assert resp.status_code == 503


# =============================================================================
# Dashboard Stats
# =============================================================================

def test_stats_reflect_new_orders(client, admin_auth):
    resp = client.get("/admin/phone-orders/stats", auth=admin_auth)
    assert resp.status_code == 200
    assert resp.json()["total_orders"] == 0

    place_order(client, quantity=2)
    place_order(client, phone="555-9876", product_id=UNMANAGED_ID)

    data = client.get("/admin/phone-orders/stats", auth=admin_auth).json()
    assert data["total_orders"] == 2
    assert data["today_orders"] == 2
    assert data["month_orders"] == 2
    assert data["total_revenue"] == pytest.approx(19.99 * 2 + 12.5)
    assert len(data["recent_orders"]) == 2
    assert data["top_products"][0]["product_name"] == "Widget"
    assert data["conversion_rate"] == 100.0
    assert data["average_order_value"] == pytest.approx(round((19.99 * 2 + 12.5) / 2, 2))


def test_stats_under_api_v1(client, admin_auth):
    resp = client.get("/api/v1/admin/phone-orders/stats", auth=admin_auth)
    assert resp.status_code == 200


# =============================================================================
# Orders
# =============================================================================

def test_list_phone_orders(client, admin_auth):
    first = place_order(client)
    second = place_order(client, phone="555-9876")

    resp = client.get("/admin/phone-orders", auth=admin_auth)

    assert resp.status_code == 200
    data = resp.json()
    assert data["total"] == 2
    assert data["has_next"] is False
    assert {o["id"] for o in data["items"]} == {first, second}
    assert data["items"][0]["items"][0]["product_name"] == "Widget"


def test_list_phone_orders_paginates_and_filters(client, admin_auth):
    order_ids = [place_order(client, phone=f"555-100{i}") for i in range(3)]
    client.patch(f"/admin/phone-orders/{order_ids[0]}/status", json={"status": "completed"}, auth=admin_auth)

    page = client.get("/admin/phone-orders?page=1&page_size=2", auth=admin_auth).json()
    assert len(page["items"]) == 2
    assert page["has_next"] is True

    completed = client.get("/admin/phone-orders?status=completed", auth=admin_auth).json()
    assert [o["id"] for o in completed["items"]] == [order_ids[0]]


def test_list_phone_orders_status_filter_accepts_prefix(client, admin_auth):
    order_id = place_order(client)
    place_order(client, phone="555-9876")
    client.patch(f"/admin/phone-orders/{order_id}/status", json={"status": "completed"}, auth=admin_auth)

    resp = client.get("/admin/phone-orders?status=wc-completed", auth=admin_auth)

    assert resp.status_code == 200
    assert [o["id"] for o in resp.json()["items"]] == [order_id]


def test_list_phone_orders_rejects_unknown_status(client, admin_auth):
    place_order(client)

    resp = client.get("/admin/phone-orders?status=shipped", auth=admin_auth)

    assert resp.status_code == 400


def test_update_status_invalidates_stats(client, admin_auth):
    order_id = place_order(client)
    before = client.get("/admin/phone-orders/stats", auth=admin_auth).json()
    assert before["total_revenue"] == pytest.approx(19.99)

    resp = client.patch(f"/admin/phone-orders/{order_id}/status", json={"status": "wc-cancelled"}, auth=admin_auth)

    assert resp.status_code == 200
    assert resp.json() == {"order_id": order_id, "old_status": "processing", "status": "cancelled"}
    after = client.get("/admin/phone-orders/stats", auth=admin_auth).json()
    assert after["total_revenue"] == 0.0


def test_update_status_unknown_order(client, admin_auth):
    resp = client.patch("/admin/phone-orders/9999/status", json={"status": "completed"}, auth=admin_auth)
    assert resp.status_code == 404


def test_update_status_rejects_unknown_status(client, admin_auth):
    order_id = place_order(client)
    resp = client.patch(f"/admin/phone-orders/{order_id}/status", json={"status": "shipped"}, auth=admin_auth)
    assert resp.status_code == 422


# =============================================================================
# Export
# =============================================================================

def test_export_csv(client, admin_auth):
    order_id = place_order(client)

    resp = client.get(
        "/admin/phone-orders/export?start_date=2000-01-01&end_date=2100-12-31",
        auth=admin_auth,
    )

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert 'filename="phone-orders-2000-01-01-to-2100-12-31.csv"' in resp.headers["content-disposition"]
    rows = list(csv.reader(io.StringIO(resp.text)))
    assert rows[0] == ["Order ID", "Date", "Phone", "Product", "Total", "Status"]
    assert rows[1][0] == str(order_id)
    assert rows[1][2:] == ["555-1234", "Widget", "19.99", "processing"]


def test_export_rejects_inverted_range(client, admin_auth):
    resp = client.get(
        "/admin/phone-orders/export?start_date=2026-10-31&end_date=2026-10-01",
        auth=admin_auth,
    )
    assert resp.status_code == 400


# =============================================================================
# Settings
# =============================================================================

def test_get_settings_defaults(client, admin_auth):
    resp = client.get("/admin/phone-order-settings", auth=admin_auth)

    assert resp.status_code == 200
    data = resp.json()
    assert data["enabled"] is True
    assert data["form_title"] == "Order by Phone"
    assert data["out_of_stock_behavior"] == "hide"


def test_update_settings_partial(client, admin_auth):
    resp = client.put(
        "/admin/phone-order-settings",
        json={"form_button_text": "Call me", "enable_analytics": False},
        auth=admin_auth,
    )

    assert resp.status_code == 200
    data = resp.json()
    assert data["form_button_text"] == "Call me"
    assert data["enable_analytics"] is False
    assert data["form_title"] == "Order by Phone"


def test_update_settings_validates_choices(client, admin_auth):
    resp = client.put(
        "/admin/phone-order-settings",
        json={"display_position": "sidebar"},
        auth=admin_auth,
    )
    assert resp.status_code == 422
