"""
Shared test fixtures and configuration.
"""

import pytest
import os

# Set test environment variables before importing app modules
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("LOCAL_STORAGE_PATH", "/tmp/shanti_test_data")
os.environ.setdefault("LOG_FILE_ENABLED", "false")
os.environ.setdefault("LLM_API_KEY", "")

import httpx
from fastapi.testclient import TestClient

from shanti.api.auth import get_auth_service
from shanti.client import AuthClient, MemoryStore, SessionClient
from shanti.main import app
from shanti.services import AuthService
from shanti.storage import LocalStorage, UserStorage


@pytest.fixture
def user_storage(tmp_path):
    return UserStorage(LocalStorage(str(tmp_path / "data")))


@pytest.fixture
def auth_service(user_storage):
    return AuthService(user_storage)


@pytest.fixture
def api_app(auth_service):
    """The FastAPI app wired to a per-test credential store."""
    app.dependency_overrides[get_auth_service] = lambda: auth_service
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(api_app):
    return TestClient(api_app)


@pytest.fixture
def auth_client(api_app):
    """An AuthClient that talks to the in-process app."""
    return AuthClient("http://testserver", transport=httpx.ASGITransport(app=api_app))


@pytest.fixture
def local_store():
    return MemoryStore()


@pytest.fixture
def session(local_store, auth_client):
    return SessionClient(local_store, auth_client)
