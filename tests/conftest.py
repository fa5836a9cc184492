"""
Pytest configuration and fixtures.
"""

import asyncio
import os
import sys
from pathlib import Path

import pytest

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Set test environment (before any core.config import)
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("PAYMENT_BACKEND", "mock")
os.environ.setdefault("JWT_SECRET", "test-secret")

from fastapi.testclient import TestClient

from api.server import create_app
from core.storage import UserRole
from core.storage.memory import MemoryStore
from services import AccountService
from tools.payment_gateway import MockPaymentGateway


PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def user_payload(email: str = "jane@example.com", **overrides) -> dict:
    payload = {
        "name": "Jane Doe",
        "email": email,
        "password": "secret123",
        "phone": "81234567",
        "address": "1 Market Street",
        "answer": "Football",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def gateway():
    return MockPaymentGateway()


@pytest.fixture
def client(store, gateway):
    """TestClient with lifespan running against the in-memory store."""
    app = create_app(store=store, payment_gateway=gateway)
    with TestClient(app) as test_client:
        yield test_client


def _login(client: TestClient, email: str, password: str = "secret123") -> str:
    response = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["token"]


@pytest.fixture
def user_token(client):
    client.post("/api/v1/auth/register", json=user_payload())
    return _login(client, "jane@example.com")


@pytest.fixture
def admin_token(client, store):
    client.post(
        "/api/v1/auth/register",
        json=user_payload("admin@example.com", name="Admin"),
    )
    asyncio.run(AccountService(store).set_role("admin@example.com", UserRole.ADMIN))
    return _login(client, "admin@example.com")


@pytest.fixture
def category(client, admin_token) -> dict:
    response = client.post(
        "/api/v1/category/create-category",
        json={"name": "Electronics"},
        headers={"Authorization": admin_token},
    )
    assert response.status_code == 201, response.text
    return response.json()["category"]


def create_product(client: TestClient, token: str, category_id: str, **overrides) -> dict:
    form = {
        "name": "Phone",
        "description": "A smart phone",
        "price": "199.99",
        "category": category_id,
        "quantity": "10",
        "shipping": "true",
    }
    form.update(overrides)
    response = client.post(
        "/api/v1/product/create-product",
        data=form,
        headers={"Authorization": token},
    )
    assert response.status_code == 201, response.text
    return response.json()["product"]
