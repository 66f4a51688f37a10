# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# Sets up environment variables before any webapp import (webapp.config
# loads settings at import time), then provides:
# - an in-memory SQLite database shared across threads
# - in-memory fakes for object storage and the notification publisher
# - a controllable clock for verification expiry
# - a TestClient wired to all of the above
# =============================================================================

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("REDIS_URL", "redis://127.0.0.1:6379/0")

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from webapp.database import Database
from webapp.main import create_app
from webapp.models import Image
from webapp.services.storage import StorageResult


# =============================================================================
# Fakes
# =============================================================================

class FakeClock:
    """Clock whose time only moves when a test moves it."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class FakeStorage:
    """In-memory object storage recording every call."""

    def __init__(self, database: Database):
        self.database = database
        self.objects: dict[str, bytes] = {}
        self.calls: list[tuple[str, str]] = []
        # For each delete: was the metadata row still present when storage was hit?
        self.row_present_on_delete: list[bool] = []
        self.fail_put = False
        self.fail_delete = False

    async def put(self, data: bytes, content_type: str, storage_path: str) -> StorageResult:
        self.calls.append(("put", storage_path))
        if self.fail_put:
            return StorageResult(success=False, error="storage down")
        self.objects[storage_path] = data
        return StorageResult(success=True, path=storage_path)

    async def delete(self, storage_path: str) -> StorageResult:
        self.calls.append(("delete", storage_path))
        with self.database.session() as s:
            row = s.query(Image).filter(Image.storage_path == storage_path).first()
            self.row_present_on_delete.append(row is not None)
        if self.fail_delete:
            return StorageResult(success=False, path=storage_path, error="storage down")
        self.objects.pop(storage_path, None)
        return StorageResult(success=True, path=storage_path)

    async def close(self) -> None:
        pass


class FakePublisher:
    """Records published messages instead of queueing them."""

    def __init__(self):
        self.messages: list[dict] = []
        self.fail = False

    async def publish(self, topic: str, payload: dict) -> bool:
        if self.fail:
            return False
        self.messages.append({"topic": topic, "payload": payload})
        return True

    def last_token(self, email: str) -> str:
        for message in reversed(self.messages):
            if message["payload"]["email"] == email:
                return message["payload"]["token"]
        raise AssertionError(f"No message published for {email}")

    async def close(self) -> None:
        pass


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def database():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    db = Database(engine=engine)
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def db_session(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 1, 15, 10, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def storage(database):
    return FakeStorage(database)


@pytest.fixture
def publisher():
    return FakePublisher()


@pytest.fixture
def client(database, storage, publisher, clock):
    app = create_app(database=database, storage=storage, publisher=publisher, clock=clock)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def user_payload():
    return {
        "first_name": "Alice",
        "last_name": "Smith",
        "password": "S3cret!pass",
        "username": "alice@example.com",
    }


@pytest.fixture
def product_payload():
    return {
        "name": "Desk Lamp",
        "description": "LED desk lamp",
        "sku": "LAMP-001",
        "manufacturer": "Acme",
        "quantity": 10,
    }


def register(client, email: str, password: str = "S3cret!pass", first_name: str = "Test", last_name: str = "User"):
    """Register a user through the API and return the response."""
    return client.post("/v1/user", json={
        "first_name": first_name,
        "last_name": last_name,
        "password": password,
        "username": email,
    })


@pytest.fixture
def alice(client):
    response = register(client, "alice@example.com", first_name="Alice", last_name="Smith")
    assert response.status_code == 201
    return {"id": response.json()["id"], "auth": ("alice@example.com", "S3cret!pass")}


@pytest.fixture
def bob(client):
    response = register(client, "bob@example.com", first_name="Bob", last_name="Jones")
    assert response.status_code == 201
    return {"id": response.json()["id"], "auth": ("bob@example.com", "S3cret!pass")}


@pytest.fixture
def alice_product(client, alice, product_payload):
    response = client.post("/v1/product", json=product_payload, auth=alice["auth"])
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def register_user(client):
    """Register additional users: register_user(email, **fields)."""
    def _register(email: str, **fields):
        return register(client, email, **fields)
    return _register
