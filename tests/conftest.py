"""Shared pytest fixtures for the Grocer test suite."""

from __future__ import annotations

from typing import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from grocer.config import get_settings
from grocer.db.repository import reset_repository_state
from grocer.models.meal import Meal
from grocer.server.app import create_app


@pytest.fixture()
def app() -> Generator[FastAPI, None, None]:
    """Create a new FastAPI app instance for each test and reset overrides."""

    application = create_app()
    yield application
    application.dependency_overrides.clear()


@pytest.fixture()
def client(app) -> TestClient:
    """Return a test client bound to the FastAPI app."""

    return TestClient(app)


@pytest.fixture()
def sample_meals() -> list[Meal]:
    """Two meals sharing an ingredient so merging is exercised."""

    return [
        Meal(
            id="m1",
            title="Pancakes",
            day="Monday",
            ingredients=["2 cups flour", "2 eggs", "1 cup milk"],
        ),
        Meal(
            id="m2",
            title="Omelette",
            day="Tuesday",
            ingredients=["3 eggs", "1/2 cup cheddar cheese", "1 tbsp olive oil"],
        ),
    ]


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Ensure each test uses an isolated SQLite database location."""

    db_path = tmp_path / "test_grocer.db"
    monkeypatch.setenv("GROCER_DATABASE_PATH", str(db_path))
    get_settings.cache_clear()
    reset_repository_state()
    yield
    reset_repository_state()
    monkeypatch.delenv("GROCER_DATABASE_PATH", raising=False)
    get_settings.cache_clear()
