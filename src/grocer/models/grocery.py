"""Shopping list item models."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

GroceryCategory = Literal[
    "produce",
    "dairy",
    "meat",
    "grains",
    "frozen",
    "pantry",
    "spices",
    "other",
]
ItemOrigin = Literal["meal", "manual"]

CATEGORY_LABELS: dict[str, str] = {
    "produce": "Produce",
    "dairy": "Dairy",
    "meat": "Meat",
    "grains": "Grains",
    "frozen": "Frozen",
    "pantry": "Pantry",
    "spices": "Spices",
    "other": "Other",
}

UNASSIGNED = "Unassigned"


def normalize_store(store: Optional[str]) -> str:
    """Collapse blank or placeholder store labels to ``Unassigned``."""

    if store is None:
        return UNASSIGNED
    cleaned = store.strip()
    if not cleaned or cleaned.lower() in {"undefined", "null", "none"}:
        return UNASSIGNED
    return cleaned


def normalize_name(name: str) -> str:
    """Key used wherever items are matched by name rather than id."""

    return name.strip().lower()


class GroceryItem(BaseModel):
    """Single entry on the shopping list, active or archived."""

    id: str
    name: str = Field(min_length=1)
    category: GroceryCategory = Field(default="other")
    quantity: str = Field(default="1")
    checked: bool = Field(default=False)
    meal: Optional[str] = Field(default=None)
    store: str = Field(default=UNASSIGNED)
    department: Optional[str] = Field(default=None)
    origin: ItemOrigin = Field(default="meal")

    model_config = ConfigDict(frozen=True)

    @property
    def is_manual(self) -> bool:
        return self.origin == "manual"


class NewGroceryItem(BaseModel):
    """Payload for a manual addition; the id is assigned by the item store."""

    name: str = Field(min_length=1)
    category: GroceryCategory = Field(default="other")
    quantity: str = Field(default="1")
    meal: Optional[str] = Field(default=None)
    store: Optional[str] = Field(default=None)
    department: Optional[str] = Field(default=None)

    model_config = ConfigDict(frozen=True)


__all__ = [
    "CATEGORY_LABELS",
    "GroceryCategory",
    "GroceryItem",
    "ItemOrigin",
    "NewGroceryItem",
    "UNASSIGNED",
    "normalize_name",
    "normalize_store",
]
