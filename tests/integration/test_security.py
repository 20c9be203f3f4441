"""Security-related integration tests."""

from __future__ import annotations

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from grocer.config import get_settings
from grocer.db.repository import reset_repository_state
from grocer.server.app import create_app


@pytest.fixture()
def secure_client(tmp_path, monkeypatch) -> TestClient:
    db_path = tmp_path / "secure.db"
    monkeypatch.setenv("GROCER_DATABASE_PATH", str(db_path))
    monkeypatch.setenv("GROCER_API_TOKEN", "secret-token")
    get_settings.cache_clear()
    reset_repository_state()
    app = create_app()
    client = TestClient(app)
    yield client
    monkeypatch.delenv("GROCER_API_TOKEN", raising=False)
    reset_repository_state()
    get_settings.cache_clear()


def test_adding_items_requires_api_token(secure_client):
    response = secure_client.post("/shopping-list/items", json={"name": "eggs"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED

    headers = {"Authorization": "Bearer secret-token"}
    response = secure_client.post("/shopping-list/items", json={"name": "eggs"}, headers=headers)
    assert response.status_code == status.HTTP_201_CREATED


def test_meal_plan_updates_accept_api_key_header(secure_client):
    response = secure_client.put("/meal-plan/pantry", json=["salt"])
    assert response.status_code == status.HTTP_401_UNAUTHORIZED

    response = secure_client.put(
        "/meal-plan/pantry",
        json=["salt"],
        headers={"X-API-Key": "secret-token"},
    )
    assert response.status_code == status.HTTP_200_OK


def test_reads_do_not_require_api_token(secure_client):
    response = secure_client.get("/shopping-list")
    assert response.status_code == status.HTTP_200_OK

    response = secure_client.post("/shopping-list/reset", params={"api_token": "wrong"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
