"""Linear undo/redo history of user actions."""

from __future__ import annotations

import logging
from collections import deque
from typing import Optional

from grocer.models.actions import ActionData, ActionType, UndoAction
from grocer.models.grocery import GroceryItem

logger = logging.getLogger(__name__)


class ActionLog:
    """Two-stack history: recording a new action discards anything redoable.

    The log only stores entries. Applying the inverse of an undone action is
    up to the caller.
    """

    def __init__(self, limit: Optional[int] = None) -> None:
        self._past: deque[UndoAction] = deque(maxlen=limit)
        self._future: list[UndoAction] = []

    @property
    def can_undo(self) -> bool:
        return bool(self._past)

    @property
    def can_redo(self) -> bool:
        return bool(self._future)

    @property
    def last_action(self) -> Optional[UndoAction]:
        return self._past[-1] if self._past else None

    @property
    def past(self) -> list[UndoAction]:
        return list(self._past)

    @property
    def future(self) -> list[UndoAction]:
        return list(self._future)

    def record(
        self,
        action_type: ActionType,
        item: GroceryItem,
        previous: Optional[GroceryItem] = None,
    ) -> UndoAction:
        action = UndoAction(type=action_type, data=ActionData(item=item, previous=previous))
        self._past.append(action)
        self._future.clear()
        logger.debug("Recorded %s action id=%s item=%s", action_type, action.id, item.id)
        return action

    def undo(self) -> Optional[UndoAction]:
        if not self._past:
            return None
        action = self._past.pop()
        self._future.append(action)
        return action

    def redo(self) -> Optional[UndoAction]:
        if not self._future:
            return None
        action = self._future.pop()
        self._past.append(action)
        return action

    def clear(self) -> None:
        self._past.clear()
        self._future.clear()


__all__ = ["ActionLog"]
