from bundlestore.orders.models import COMPLETED, FAILED, PENDING
from bundlestore.users import service as users_service

def test_summary_counts_only_completed_spending(order_store):
    order_store.insert_order({"reference": "R1", "user_id": "u1", "status": COMPLETED, "price": 20.0})
    order_store.insert_order({"reference": "R2", "user_id": "u1", "status": COMPLETED, "price": 6.5})
    order_store.insert_order({"reference": "R3", "user_id": "u1", "status": FAILED, "price": 52.0})
    order_store.insert_order({"reference": "R4", "user_id": "u1", "status": PENDING, "price": 11.5})
    order_store.insert_order({"reference": "R5", "user_id": "u2", "status": COMPLETED, "price": 100.0})

    assert users_service.get_user_summary("u1") == {
        "total_orders": 4,
        "completed_orders": 2,
        "total_spent": 26.5,
    }

def test_user_orders_only_returns_own_orders(order_store):
    order_store.insert_order({"reference": "R1", "user_id": "u1", "status": COMPLETED, "price": 20.0})
    order_store.insert_order({"reference": "R2", "user_id": "u2", "status": COMPLETED, "price": 6.0})
    orders = users_service.get_user_orders("u1")
    assert [o["reference"] for o in orders] == ["R1"]
    assert orders[0]["price"] == 20.0
