import os

os.environ.setdefault("SQLALCHEMY_DATABASE_URI", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from collections.abc import Callable, Generator
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from journal_api.api.deps import get_db as app_get_db
from journal_api.core.config import settings
from journal_api.db.base import Base
from journal_api.main import app


engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db() -> Generator[Session, None, None]:
    db = TestingSessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@pytest.fixture(autouse=True)
def database() -> Generator[None, None, None]:
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch) -> str:
    path = str(tmp_path / "uploads")
    monkeypatch.setattr(settings, "upload_dir", path)
    return path


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    app.dependency_overrides[app_get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def register(client: TestClient) -> Callable[..., dict[str, Any]]:
    """Registers a user and returns the auth response plus ready-to-use headers."""

    def _register(username: str, **overrides: Any) -> dict[str, Any]:
        payload = {
            "username": username,
            "email": f"{username}@example.com",
            "password": "password123",
            "confirm_password": "password123",
            "birth_date": "1995-06-15",
        }
        payload.update(overrides)
        response = client.post("/api/v1/auth/register", json=payload)
        assert response.status_code == 201, response.text
        data = response.json()
        data["headers"] = {"Authorization": f"Bearer {data['access_token']}"}
        return data

    return _register


@pytest.fixture
def befriend(client: TestClient) -> Callable[[dict[str, Any], dict[str, Any]], None]:
    def _befriend(requester: dict[str, Any], recipient: dict[str, Any]) -> None:
        response = client.post(
            "/api/v1/friends/requests",
            json={"username": recipient["user"]["username"]},
            headers=requester["headers"],
        )
        assert response.status_code == 201, response.text
        response = client.post(
            f"/api/v1/friends/requests/{requester['user']['username']}/accept",
            headers=recipient["headers"],
        )
        assert response.status_code == 200, response.text

    return _befriend
