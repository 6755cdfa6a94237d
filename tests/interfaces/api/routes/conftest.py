"""Fixtures for API route tests."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from notifier.infrastructure.database import get_db
from notifier.infrastructure.security import create_access_token
from notifier.main import create_app


@pytest.fixture
def app(session):
    application = create_app()

    def override_get_db():
        yield session

    application.dependency_overrides[get_db] = override_get_db
    return application


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def token() -> str:
    return create_access_token({"sub": "u1"})


@pytest.fixture
def auth_headers(token) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
