"""Shared fixtures"""
import pytest
from fastapi.testclient import TestClient

from transactions_service.main import app
from transactions_service.repositories.memory_store import InMemoryTransactionStore
from transactions_service.routers.transactions import get_transaction_service
from transactions_service.services.auth import AuthService, TEST_USER_CLAIMS
from transactions_service.services.transactions import TransactionService


def make_payload(**overrides) -> dict:
    """Minimal valid creation payload in the external (camelCase) form"""
    payload = {
        "address": "123 Main St",
        "city": "Denver",
        "state": "CO",
        "contractDate": "2024-01-15",
    }
    payload.update(overrides)
    return payload


def make_activity(**overrides) -> dict:
    activity = {
        "user": "Alice",
        "userEmail": "alice@example.com",
        "message": "Title ordered",
    }
    activity.update(overrides)
    return activity


def make_document(**overrides) -> dict:
    document = {
        "name": "contract.pdf",
        "url": "/uploads/contract.pdf",
    }
    document.update(overrides)
    return document


@pytest.fixture
def store():
    return InMemoryTransactionStore()


@pytest.fixture
def service(store):
    return TransactionService(store)


@pytest.fixture
def client(service):
    """API client backed by the in-memory store"""
    app.dependency_overrides[get_transaction_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    token = AuthService.create_access_token(data=TEST_USER_CLAIMS)
    return {"Authorization": f"Bearer {token}"}
