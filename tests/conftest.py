import os

# Must be set before the application settings are first imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["STORAGE_BACKEND"] = "sql"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

from taskboard.api.routes.auth import login_rate_limiter
from taskboard.database.database import engine
from taskboard.main import app
from taskboard.models.user import UserCreate
from taskboard.services.identity_service import IdentityService
from taskboard.storage import MemoryStore, SqlStore


@pytest.fixture(autouse=True)
def reset_state():
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    login_rate_limiter.reset()
    yield
    app.dependency_overrides.clear()


@pytest.fixture(params=["sql", "memory"])
def store(request):
    """Each ledger test runs once per storage backend."""
    if request.param == "memory":
        yield MemoryStore()
        return
    with Session(engine) as session:
        yield SqlStore(session)


@pytest.fixture
def make_user(store):
    def _make(name: str = "alice"):
        user = IdentityService.register(
            store,
            UserCreate(email=f"{name}@example.com", username=name, password="secret123"),
        )
        return user.id
    return _make


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def register(client):
    """Register through the API and return (user payload, auth headers)."""
    def _register(name: str = "alice", password: str = "secret123"):
        response = client.post("/auth/register", json={
            "email": f"{name}@example.com",
            "username": name,
            "password": password,
        })
        assert response.status_code == 201, response.text
        data = response.json()["data"]
        return data["user"], {"Authorization": f"Bearer {data['token']}"}
    return _register
