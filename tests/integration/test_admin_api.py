from bundlestore.orders.models import COMPLETED, FAILED, PENDING

def test_admin_routes_require_session(client):
    assert client.get("/admin/api/orders").status_code == 401

def test_admin_routes_reject_customers(client, user_store):
    user_store.add("ama@example.com", "secret1")
    token = client.post("/api/v1/auth/login", json={"email": "ama@example.com", "password": "secret1"}).json()["access_token"]
    client.cookies.clear()
    r = client.get("/admin/api/stats", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 403

def test_list_orders(client, as_admin, order_store):
    order_store.insert_order({"reference": "R1", "status": PENDING, "price": 6.0})
    order_store.insert_order({"reference": "R2", "status": COMPLETED, "price": 11.5})
    r = client.get("/admin/api/orders", params={"status": "pending"})
    assert r.status_code == 200
    assert [o["reference"] for o in r.json()["orders"]] == ["R1"]

def test_list_orders_unknown_status(client, as_admin):
    assert client.get("/admin/api/orders", params={"status": "lost"}).status_code == 400

def test_failed_order_cannot_be_completed(client, as_admin, order_store):
    row = order_store.insert_order({"reference": "R1", "status": FAILED, "price": 6.0})
    r = client.post(f"/admin/api/orders/{row['id']}/status", json={"status": "completed"})
    assert r.status_code == 409
    assert order_store.get_order(row["id"])["status"] == FAILED

def test_pending_order_can_be_marked_processing(client, as_admin, order_store):
    row = order_store.insert_order({"reference": "R1", "status": PENDING, "price": 6.0})
    r = client.post(f"/admin/api/orders/{row['id']}/status", json={"status": "processing"})
    assert r.status_code == 200
    assert r.json()["order"]["status"] == "processing"

def test_update_unknown_order(client, as_admin):
    r = client.post("/admin/api/orders/missing/status", json={"status": "failed"})
    assert r.status_code == 404

def test_stats(client, as_admin, order_store):
    order_store.insert_order({"reference": "R1", "status": COMPLETED, "price": 20.0})
    stats = client.get("/admin/api/stats").json()
    assert stats["total_revenue"] == 20.0
    assert stats["total_orders"] == 1
    assert stats["recent_orders"] == 1
