import os

# Pas de Redis en tests: le lifespan n'initialise pas fastapi-limiter
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")
# Hôte du TestClient accepté par TrustedHostMiddleware
os.environ.setdefault("ALLOWED_HOSTS", "testserver,localhost,127.0.0.1")

import itertools
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Generator, List, Optional

import bcrypt
import pytest
from fastapi.testclient import TestClient

from bundlestore.app import app as fastapi_app
from bundlestore.orders.repository import DuplicateOrderReference
from bundlestore.users.repository import DuplicateUserEmail, UserStoreError
from bundlestore.utils.security import require_user, require_admin, require_checkout_user

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)
        elif "tests/functional/" in nodeid:
            item.add_marker(pytest.mark.functional)

def _now() -> str:
    return datetime.now(timezone.utc).isoformat()

class FakeOrderStore:
    """Table orders en mémoire: contrainte unique sur reference et update compare-and-set."""

    def __init__(self):
        self.rows: Dict[str, dict] = {}
        self._lock = threading.Lock()
        self._ids = itertools.count(1)

    def get_order(self, order_id: str) -> Optional[dict]:
        row = self.rows.get(str(order_id))
        return dict(row) if row else None

    def get_order_by_reference(self, reference: str) -> Optional[dict]:
        for row in list(self.rows.values()):
            if row.get("reference") == reference:
                return dict(row)
        return None

    def insert_order(self, row: Dict[str, Any]) -> dict:
        with self._lock:
            if self.get_order_by_reference(row.get("reference")):
                raise DuplicateOrderReference(row.get("reference"))
            new = dict(row)
            new.setdefault("id", f"order-{next(self._ids)}")
            new.setdefault("created_at", _now())
            new.setdefault("updated_at", new["created_at"])
            self.rows[new["id"]] = new
            return dict(new)

    def update_status(self, order_id: str, expected: str, target: str) -> Optional[dict]:
        with self._lock:
            row = self.rows.get(str(order_id))
            if not row or row.get("status") != expected:
                return None
            row["status"] = target
            row["updated_at"] = _now()
            return dict(row)

    def list_orders(self, status: Optional[str] = None, limit: int = 200) -> List[dict]:
        rows = [dict(r) for r in self.rows.values() if not status or r.get("status") == status]
        rows.sort(key=lambda r: r.get("created_at") or "", reverse=True)
        return rows[:limit]

    def list_user_orders(self, user_id: str) -> List[dict]:
        rows = [dict(r) for r in self.rows.values() if r.get("user_id") == user_id]
        rows.sort(key=lambda r: r.get("created_at") or "", reverse=True)
        return rows

    def fetch_order_stats_rows(self) -> List[dict]:
        return [{"price": r.get("price"), "status": r.get("status"), "created_at": r.get("created_at")} for r in self.rows.values()]

    def for_reference(self, reference: str) -> List[dict]:
        return [dict(r) for r in self.rows.values() if r.get("reference") == reference]

class FakeUserStore:
    """Table users en mémoire (email unique)."""

    def __init__(self):
        self.rows: Dict[str, dict] = {}
        self._ids = itertools.count(1)

    def add(self, email: str, password: str, full_name: Optional[str] = None, is_admin: bool = False, user_id: Optional[str] = None) -> dict:
        # Coût bcrypt réduit pour la rapidité des tests
        password_hash = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=4)).decode("utf-8")
        row = self.insert_user(email, password_hash, full_name)
        row = self.rows.pop(row["id"])
        if user_id:
            row["id"] = user_id
        row["is_admin"] = is_admin
        self.rows[row["id"]] = row
        return dict(row)

    def get_user_by_email(self, email: str) -> Optional[dict]:
        for row in self.rows.values():
            if row["email"] == email:
                return dict(row)
        return None

    def get_user_by_id(self, user_id: str) -> Optional[dict]:
        row = self.rows.get(str(user_id))
        return dict(row) if row else None

    def insert_user(self, email: str, password_hash: str, full_name: Optional[str] = None) -> dict:
        if self.get_user_by_email(email):
            raise DuplicateUserEmail(email)
        uid = f"user-{next(self._ids)}"
        row = {
            "id": uid,
            "email": email,
            "password_hash": password_hash,
            "full_name": full_name,
            "is_admin": False,
            "created_at": _now(),
            "updated_at": _now(),
        }
        self.rows[uid] = row
        return dict(row)

    def update_user(self, user_id: str, data: Dict[str, Any]) -> dict:
        row = self.rows.get(str(user_id))
        if not row:
            raise UserStoreError("User not found")
        row.update(data)
        row["updated_at"] = _now()
        return dict(row)

@pytest.fixture(scope="session")
def app():
    return fastapi_app

@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()

@pytest.fixture(autouse=True)
def configured(monkeypatch):
    """Clés Paystack/Supabase factices: aucun test ne dépend d'un .env local."""
    monkeypatch.setattr("bundlestore.config.SUPABASE_URL", "https://store.example.test")
    monkeypatch.setattr("bundlestore.config.SUPABASE_SERVICE_KEY", "service-role-key")
    monkeypatch.setattr("bundlestore.config.PAYSTACK_PUBLIC_KEY", "pk_test_public")
    monkeypatch.setattr("bundlestore.config.PAYSTACK_SECRET_KEY", "sk_test_secret")
    monkeypatch.setattr("bundlestore.config.SESSION_SECRET_KEY", "test-session-secret")
    monkeypatch.delenv("LOCAL_RATE_LIMIT_FALLBACK", raising=False)

@pytest.fixture(autouse=True)
def order_store(monkeypatch) -> FakeOrderStore:
    store = FakeOrderStore()
    for name in (
        "get_order",
        "get_order_by_reference",
        "insert_order",
        "update_status",
        "list_orders",
        "list_user_orders",
        "fetch_order_stats_rows",
    ):
        monkeypatch.setattr(f"bundlestore.orders.repository.{name}", getattr(store, name))
    return store

@pytest.fixture(autouse=True)
def user_store(monkeypatch) -> FakeUserStore:
    store = FakeUserStore()
    for name in ("get_user_by_email", "get_user_by_id", "insert_user", "update_user"):
        monkeypatch.setattr(f"bundlestore.users.repository.{name}", getattr(store, name))
    monkeypatch.setattr("bundlestore.admin.repository.count_table_rows", lambda table: len(store.rows) if table == "users" else 0)
    return store

@pytest.fixture
def paystack(monkeypatch):
    """Remplace l'appel HTTP Paystack; `paystack.envelope` est la réponse renvoyée."""
    class _Gateway:
        envelope: Dict[str, Any] = {"status": False, "message": "Transaction reference not found"}
        calls: List[str] = []

        def verify(self, reference: str) -> Dict[str, Any]:
            self.calls.append(reference)
            if isinstance(self.envelope, Exception):
                raise self.envelope
            return self.envelope

        def succeed(self, amount: int, metadata: Dict[str, Any], customer: Optional[Dict[str, Any]] = None, status: str = "success"):
            self.envelope = {
                "status": True,
                "message": "Verification successful",
                "data": {
                    "status": status,
                    "amount": amount,
                    "currency": "GHS",
                    "channel": "mobile_money",
                    "metadata": metadata,
                    "customer": customer or {"email": "buyer@example.com"},
                },
            }

    gateway = _Gateway()
    gateway.calls = []
    monkeypatch.setattr("bundlestore.payments.paystack_client.verify_transaction", gateway.verify)
    return gateway

CUSTOMER = {
    "id": "user-42",
    "email": "ama@example.com",
    "full_name": "Ama Mensah",
    "is_admin": False,
    "role": "user",
}

ADMIN = {
    "id": "admin-1",
    "email": "admin@example.com",
    "full_name": "Store Admin",
    "is_admin": True,
    "role": "admin",
}

@pytest.fixture
def as_customer(app):
    app.dependency_overrides[require_user] = lambda: CUSTOMER
    app.dependency_overrides[require_checkout_user] = lambda: CUSTOMER
    yield CUSTOMER
    app.dependency_overrides.pop(require_user, None)
    app.dependency_overrides.pop(require_checkout_user, None)

@pytest.fixture
def as_admin(app):
    app.dependency_overrides[require_admin] = lambda: ADMIN
    yield ADMIN
    app.dependency_overrides.pop(require_admin, None)
