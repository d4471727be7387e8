"""Web test fixtures — TestClient over a fresh in-memory store."""

from __future__ import annotations

import pytest

from laundrybill.settings import Settings
from tests.conftest import TEST_PASSCODE, FaultyStore


@pytest.fixture(autouse=True)
def web_test_store(monkeypatch):
    """Point the web app at an isolated store and test settings."""
    store = FaultyStore()
    test_settings = Settings(_env_file=None, admin_passcode=TEST_PASSCODE)

    import web.deps as deps_module

    monkeypatch.setattr(deps_module, "_store", store)
    monkeypatch.setattr(deps_module, "get_settings", lambda: test_settings)

    return store


@pytest.fixture()
def web_settings():
    import web.deps as deps_module

    return deps_module.get_settings()


@pytest.fixture()
def client():
    from starlette.testclient import TestClient

    from web.app import app

    return TestClient(app)


@pytest.fixture()
def auth_client(client):
    """Client carrying a valid bearer token."""
    response = client.post("/auth/login", json={"passcode": TEST_PASSCODE})
    client.headers["Authorization"] = f"Bearer {response.json()['token']}"
    return client


def create_customer(client, name="Asha", phone="9000000001", address="12 MG Road") -> dict:
    response = client.post("/customers", json={"name": name, "phone": phone, "address": address})
    assert response.status_code == 201
    return response.json()


SHIRT = {"name": "Shirt", "quantity": 2, "pricePerUnit": 50, "service": "Wash"}
PANTS = {"name": "Pants", "quantity": 1, "pricePerUnit": 80}
