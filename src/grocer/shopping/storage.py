"""JSON encoding of shopping list state onto the key-value store."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Sequence, TypeVar

from pydantic import TypeAdapter, ValidationError

from grocer.db.kv_store import KeyValueStore
from grocer.models.grocery import GroceryCategory, GroceryItem
from grocer.models.meal import Meal

logger = logging.getLogger(__name__)

ITEMS_KEY = "shopping_list.items"
ARCHIVED_KEY = "shopping_list.archived"
STORES_KEY = "shopping_list.stores"
ASSIGNMENTS_KEY = "shopping_list.store_assignments"
REMOVED_IDS_KEY = "shopping_list.removed_ids"
CATEGORY_LABELS_KEY = "shopping_list.category_labels"
MEALS_KEY = "meal_plan.meals"
PANTRY_KEY = "meal_plan.pantry"

_ITEMS = TypeAdapter(list[GroceryItem])
_STRINGS = TypeAdapter(list[str])
_PAIRS = TypeAdapter(list[tuple[str, str]])
_MEALS = TypeAdapter(list[Meal])
_LABELS = TypeAdapter(dict[GroceryCategory, str])

T = TypeVar("T")


@dataclass
class ShoppingListSnapshot:
    """Everything the item store needs to survive a restart."""

    items: list[GroceryItem] = field(default_factory=list)
    archived: list[GroceryItem] = field(default_factory=list)
    stores: list[str] = field(default_factory=list)
    assignments: list[tuple[str, str]] = field(default_factory=list)
    removed_ids: list[str] = field(default_factory=list)
    category_labels: dict[str, str] = field(default_factory=dict)


def _decode(store: KeyValueStore, key: str, adapter: TypeAdapter[T], default: T) -> T:
    raw = store.get(key)
    if raw is None:
        return default
    try:
        return adapter.validate_json(raw)
    except ValidationError as exc:
        logger.warning("Discarding malformed value for key=%s: %s", key, exc.errors()[:3])
        return default


def _encode(store: KeyValueStore, key: str, adapter: TypeAdapter[Any], value: Any) -> None:
    payload = adapter.dump_json(value).decode("utf-8")
    try:
        store.set(key, payload)
    except Exception as exc:
        logger.warning("Failed to persist key=%s: %s", key, exc)


class ShoppingListStorage:
    """Reads and writes the shopping list collections under fixed keys."""

    def __init__(self, store: KeyValueStore, default_stores: Sequence[str]) -> None:
        self._store = store
        self._default_stores = list(default_stores)

    def load(self) -> ShoppingListSnapshot:
        stores = _decode(self._store, STORES_KEY, _STRINGS, list(self._default_stores))
        return ShoppingListSnapshot(
            items=_decode(self._store, ITEMS_KEY, _ITEMS, []),
            archived=_decode(self._store, ARCHIVED_KEY, _ITEMS, []),
            stores=stores or list(self._default_stores),
            assignments=_decode(self._store, ASSIGNMENTS_KEY, _PAIRS, []),
            removed_ids=_decode(self._store, REMOVED_IDS_KEY, _STRINGS, []),
            category_labels=_decode(self._store, CATEGORY_LABELS_KEY, _LABELS, {}),
        )

    def save(self, snapshot: ShoppingListSnapshot) -> None:
        _encode(self._store, ITEMS_KEY, _ITEMS, snapshot.items)
        _encode(self._store, ARCHIVED_KEY, _ITEMS, snapshot.archived)
        _encode(self._store, STORES_KEY, _STRINGS, snapshot.stores)
        _encode(self._store, ASSIGNMENTS_KEY, _PAIRS, snapshot.assignments)
        _encode(self._store, REMOVED_IDS_KEY, _STRINGS, snapshot.removed_ids)
        _encode(self._store, CATEGORY_LABELS_KEY, _LABELS, snapshot.category_labels)
        logger.debug(
            "Persisted shopping list items=%s archived=%s",
            len(snapshot.items),
            len(snapshot.archived),
        )


class MealPlanStorage:
    """Persists the meal plan inputs used by the HTTP and CLI surfaces."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def load_meals(self) -> list[Meal]:
        return _decode(self._store, MEALS_KEY, _MEALS, [])

    def save_meals(self, meals: Sequence[Meal]) -> None:
        _encode(self._store, MEALS_KEY, _MEALS, list(meals))

    def load_pantry(self) -> list[str]:
        return _decode(self._store, PANTRY_KEY, _STRINGS, [])

    def save_pantry(self, pantry: Sequence[str]) -> None:
        _encode(self._store, PANTRY_KEY, _STRINGS, list(pantry))


def dumps_items(items: Sequence[GroceryItem]) -> str:
    """Human-readable JSON for CLI output."""

    return json.dumps(_ITEMS.dump_python(list(items), mode="json"), indent=2)


__all__ = [
    "ARCHIVED_KEY",
    "ASSIGNMENTS_KEY",
    "CATEGORY_LABELS_KEY",
    "ITEMS_KEY",
    "MEALS_KEY",
    "PANTRY_KEY",
    "REMOVED_IDS_KEY",
    "STORES_KEY",
    "MealPlanStorage",
    "ShoppingListSnapshot",
    "ShoppingListStorage",
    "dumps_items",
]
