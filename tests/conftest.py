"""Pytest configuration and fixtures"""
import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ["PASSWORD_BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Callable, Dict, Generator, Iterable, Optional, Tuple

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from airdealer.database import Base, get_db
from airdealer.exceptions import Unavailable
from airdealer.identity.local import LocalIdentityProvider
from airdealer.main import app
from airdealer.services.access_gate import AccessGate
from airdealer.store.base import RecordStore
from airdealer.store.sqlalchemy_store import SQLAlchemyRecordStore
import airdealer.models  # noqa: F401

TEST_DATABASE_URL = os.environ["DATABASE_URL"]

engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

DEFAULT_PASSWORD = "secret123"


class FailingStore(RecordStore):
    """Wraps a real store and raises for selected (method, table) pairs.

    ``fail_on`` entries look like ``("insert", "admins")``. Calls not listed are
    passed through unchanged.
    """

    def __init__(self, inner: RecordStore, fail_on: Iterable[Tuple[str, str]], error: Exception = None):
        self.inner = inner
        self.fail_on = set(fail_on)
        self.error = error or Unavailable("simulated outage")
        self.calls = []

    def _check(self, method: str, table: str) -> None:
        self.calls.append((method, table))
        if (method, table) in self.fail_on:
            raise self.error

    def find(self, table, filter=None, order_by=None, descending=False, limit=None, offset=0):
        self._check("find", table)
        return self.inner.find(table, filter, order_by, descending, limit, offset)

    def find_one(self, table, filter):
        self._check("find", table)
        return self.inner.find_one(table, filter)

    def insert(self, table, record):
        self._check("insert", table)
        return self.inner.insert(table, record)

    def update(self, table, filter, patch):
        self._check("update", table)
        return self.inner.update(table, filter, patch)

    def delete(self, table, filter):
        self._check("delete", table)
        return self.inner.delete(table, filter)

    def count(self, table, filter=None):
        self._check("count", table)
        return self.inner.count(table, filter)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db: Session) -> Generator[TestClient, None, None]:
    """Create test client with database session override"""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def store(db: Session) -> SQLAlchemyRecordStore:
    return SQLAlchemyRecordStore(db)


@pytest.fixture
def session_factory(db: Session) -> Generator[Callable[[], Session], None, None]:
    """Open extra sessions on the test database, as separate requests would"""
    opened = []

    def _open() -> Session:
        session = TestingSessionLocal()
        opened.append(session)
        return session

    yield _open
    for session in opened:
        session.close()


@pytest.fixture
def gate(store: SQLAlchemyRecordStore) -> AccessGate:
    return AccessGate(store, LocalIdentityProvider(store))


@pytest.fixture
def failing_store(store: SQLAlchemyRecordStore) -> Callable[..., FailingStore]:
    """Factory: ``failing_store(("insert", "admins"), error=ConstraintViolation())``"""

    def _make(*fail_on: Tuple[str, str], error: Exception = None) -> FailingStore:
        return FailingStore(store, fail_on, error)

    return _make


@pytest.fixture
def make_admin(store: SQLAlchemyRecordStore) -> Callable[..., Dict[str, Any]]:
    """Register an administrator through the gate, optionally approving it directly.

    Returns the admin record plus ``password``.
    """

    def _make(email: str, approved: bool = False, password: str = DEFAULT_PASSWORD,
              created_at: Optional[datetime] = None) -> Dict[str, Any]:
        gate = AccessGate(store, LocalIdentityProvider(store))
        name = email.split("@")[0].capitalize()
        record = gate.register(email, password, name, "Tester")

        patch: Dict[str, Any] = {}
        if approved:
            patch["is_approved"] = True
        if created_at is not None:
            patch["created_at"] = created_at
        if patch:
            store.update("admins", {"id": record["id"]}, patch)
            record = store.find_one("admins", {"id": record["id"]})
        return {**record, "password": password}

    return _make


@pytest.fixture
def login(client: TestClient) -> Callable[..., dict]:
    """Sign in and return bearer headers (empty when no token was issued)"""

    def _do(email: str, password: str = DEFAULT_PASSWORD) -> dict:
        return _login(client, email, password)

    return _do


def _login(client: TestClient, email: str, password: str = DEFAULT_PASSWORD) -> dict:
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"} if token else {}


@pytest.fixture
def approved_admin(client: TestClient, make_admin) -> Dict[str, Any]:
    """An approved administrator with a live session in ``headers``"""
    admin = make_admin("head@airdealer.test", approved=True)
    admin["headers"] = _login(client, admin["email"], admin["password"])
    return admin


@pytest.fixture
def pending_admin(make_admin) -> Dict[str, Any]:
    return make_admin("newbie@airdealer.test")


@pytest.fixture
def catalog(store: SQLAlchemyRecordStore) -> Dict[str, Any]:
    """One customer, one blocked customer, a product and a pickup location"""
    customer = store.insert("users", {"telegram_id": 100001, "first_name": "Ivan", "username": "ivan"})
    store.insert("users", {"telegram_id": 100002, "first_name": "Spam", "is_blocked": True})
    product = store.insert("products", {
        "name": "AirPods Pro",
        "variation": "2nd gen",
        "price": Decimal("199.99"),
        "cost": Decimal("120.00"),
    })
    location = store.insert("locations", {"name": "Central", "address": "Main st. 1"})
    return {"customer": customer, "product": product, "location": location}


@pytest.fixture
def make_order(store: SQLAlchemyRecordStore, catalog: Dict[str, Any]) -> Callable[..., Dict[str, Any]]:
    """Insert an order with one item; later calls get later ``created_at`` values"""
    sequence = {"n": 0}
    base_time = datetime(2026, 1, 1, 12, 0, 0)

    def _make(status: str = "pending_admin_approval", total: str = "100.00",
              final_total: Optional[str] = None, admin_notes: Optional[str] = None) -> Dict[str, Any]:
        sequence["n"] += 1
        created_at = base_time + timedelta(minutes=sequence["n"])
        order = store.insert("orders", {
            "user_id": catalog["customer"]["telegram_id"],
            "status": status,
            "payment_method": "card",
            "total_amount": Decimal(total),
            "final_total_amount": Decimal(final_total) if final_total is not None else None,
            "delivery_method": "pickup",
            "admin_notes": admin_notes,
            "created_at": created_at,
            "updated_at": created_at,
        })
        store.insert("order_items", {
            "order_id": order["id"],
            "product_id": catalog["product"]["id"],
            "location_id": catalog["location"]["id"],
            "quantity": 1,
            "price_at_order": Decimal(total),
        })
        return order

    return _make
