"""Pydantic models defining shared data contracts."""

from grocer.models.actions import ActionData, ActionType, Notice, Severity, UndoAction
from grocer.models.grocery import (
    CATEGORY_LABELS,
    UNASSIGNED,
    GroceryCategory,
    GroceryItem,
    ItemOrigin,
    NewGroceryItem,
    normalize_name,
    normalize_store,
)
from grocer.models.meal import Meal

__all__ = [
    "ActionData",
    "ActionType",
    "Notice",
    "Severity",
    "UndoAction",
    "CATEGORY_LABELS",
    "UNASSIGNED",
    "GroceryCategory",
    "GroceryItem",
    "ItemOrigin",
    "NewGroceryItem",
    "normalize_name",
    "normalize_store",
    "Meal",
]
