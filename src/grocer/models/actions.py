"""Undo/redo history entries and user-facing notices."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from grocer.models.grocery import GroceryItem

ActionType = Literal["add", "toggle", "update"]
Severity = Literal["info", "success", "warning", "error"]


class ActionData(BaseModel):
    """State needed to report or reverse a recorded action."""

    item: GroceryItem
    previous: Optional[GroceryItem] = Field(default=None)

    model_config = ConfigDict(frozen=True)


class UndoAction(BaseModel):
    """Entry on the linear undo/redo history."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    type: ActionType
    data: ActionData
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(frozen=True)


class Notice(BaseModel):
    """Fire-and-forget outcome report shown to the user."""

    title: str
    description: str = Field(default="")
    severity: Severity = Field(default="info")

    model_config = ConfigDict(frozen=True)


__all__ = ["ActionData", "ActionType", "Notice", "Severity", "UndoAction"]
