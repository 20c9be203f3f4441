"""Meal plan input models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Meal(BaseModel):
    """Planned meal whose ingredient lines feed the shopping list."""

    id: str
    title: str
    day: Optional[str] = Field(default=None)
    ingredients: list[str] = Field(default_factory=list)
    recipe_url: Optional[str] = Field(default=None, alias="recipeUrl")
    notes: Optional[str] = Field(default=None)

    model_config = ConfigDict(frozen=True, populate_by_name=True)


__all__ = ["Meal"]
