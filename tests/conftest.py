"""
Shared test configuration.
Handler tests talk to the FastAPI app through TestClient, with the database
dependency replaced by the in-memory fake from support.py.
"""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

# Settings are cached on first use, so the test environment must be in place
# before the application modules are imported.
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("UPLOAD_ROOT", str(Path(tempfile.mkdtemp(prefix="gcafo-uploads-")) / "uploads"))

from fastapi.testclient import TestClient  # noqa: E402

from db import getDB  # noqa: E402
from main import app  # noqa: E402
from support import FakeConnection, FakeStore, auth_headers, register  # noqa: E402


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def client(store: FakeStore):
    async def _fake_db():
        yield FakeConnection(store)

    app.dependency_overrides[getDB] = _fake_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def provider(client: TestClient, store: FakeStore) -> dict:
    """A registered provider with one service."""

    data = register(client, email="provider@example.com", role="provider", full_name="Awa Plombier")
    token = data["token"]
    created = client.post(
        "/api/services",
        json={"nom_service": "Plumbing repair", "prix": "50.00", "duree_estimee": 60, "categorie": "plomberie"},
        headers=auth_headers(token),
    )
    assert created.status_code == 201, created.text
    return {
        "token": token,
        "user": data["user"],
        "profile_id": store.profile_for_user(data["user"]["id"])["id"],
        "service": created.json()["service"],
    }


@pytest.fixture
def customer(client: TestClient) -> dict:
    data = register(client, email="client@example.com", role="client", full_name="Moussa Client")
    return {"token": data["token"], "user": data["user"]}


@pytest.fixture
def booking(client: TestClient, provider: dict, customer: dict) -> dict:
    response = client.post(
        "/api/bookings",
        json={
            "prestataire_id": provider["profile_id"],
            "service_id": provider["service"]["id"],
            "date_reservation": "2026-03-01T10:00:00+00:00",
            "adresse_prestation": "12 rue des Lilas",
            "notes": "Second floor",
        },
        headers=auth_headers(customer["token"]),
    )
    assert response.status_code == 201, response.text
    return response.json()["booking"]
