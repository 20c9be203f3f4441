"""Shared helpers for integration tests."""

from __future__ import annotations

from grocer.config import get_settings

MEALS_PAYLOAD = [
    {
        "id": "m1",
        "title": "Pancakes",
        "day": "Monday",
        "ingredients": ["2 cups flour", "2 eggs", "1 cup milk"],
    },
    {
        "id": "m2",
        "title": "Omelette",
        "day": "Tuesday",
        "ingredients": ["3 eggs", "1 tbsp butter"],
        "recipeUrl": "https://example.com/omelette",
    },
]


def auth_headers() -> dict[str, str]:
    token = get_settings().api_token
    if not token:
        return {}
    return {"Authorization": f"Bearer {token}"}
