from __future__ import annotations

from grocer.config import DEFAULT_STORES, get_settings


def test_settings_defaults():
    settings = get_settings()

    assert settings.default_stores == DEFAULT_STORES
    assert settings.undo_limit == 100
    assert settings.api_token is None


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("GROCER_DEFAULT_STORES", "Unassigned, Co-op ,,Bakery")
    monkeypatch.setenv("GROCER_UNDO_LIMIT", "5")
    monkeypatch.setenv("GROCER_LOG_REQUESTS", "off")
    get_settings.cache_clear()

    settings = get_settings()

    assert settings.default_stores == ("Unassigned", "Co-op", "Bakery")
    assert settings.undo_limit == 5
    assert settings.log_requests is False
