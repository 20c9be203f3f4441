"""Coordinator wiring the aggregator, item store, history and notifications."""

from __future__ import annotations

import functools
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence, TypeVar

from grocer.config import Settings
from grocer.db.kv_store import KeyValueStore
from grocer.models.actions import Notice, Severity, UndoAction
from grocer.models.grocery import UNASSIGNED, GroceryCategory, GroceryItem, NewGroceryItem
from grocer.models.meal import Meal
from grocer.notifications import LoggingNotifier, NotificationSink
from grocer.shopping.aggregator import generate_candidates
from grocer.shopping.assignments import StoreAssignmentIndex
from grocer.shopping.history import ActionLog
from grocer.shopping.item_store import Clock, ItemStore, ResetOutcome, epoch_ms
from grocer.shopping.reconcile import ReconcileResult
from grocer.shopping.storage import ShoppingListStorage

logger = logging.getLogger(__name__)

Aggregator = Callable[[Iterable[Meal], Iterable[str]], list[GroceryItem]]
F = TypeVar("F", bound=Callable[..., Any])


def _synchronized(method: F) -> F:
    @functools.wraps(method)
    def wrapper(self: "ShoppingListService", *args: Any, **kwargs: Any) -> Any:
        with self._lock:
            return method(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]


@dataclass(frozen=True)
class HistoryOutcome:
    """Result of an undo or redo request."""

    action: Optional[UndoAction]
    applied: bool

    @property
    def empty(self) -> bool:
        return self.action is None


class ShoppingListService:
    """Entry point used by the HTTP and CLI surfaces.

    Regeneration is suppressed until :meth:`load` has restored persisted
    state, so an early call cannot overwrite the durable list with one built
    from empty inputs. The service records add/toggle/update actions; the item
    store itself never touches the history.

    The HTTP server runs handlers on a worker pool, so every method that reads
    or mutates shared state holds the service lock.
    """

    def __init__(
        self,
        storage: Optional[ShoppingListStorage] = None,
        *,
        notifier: Optional[NotificationSink] = None,
        default_stores: Optional[Sequence[str]] = None,
        undo_limit: Optional[int] = None,
        clock: Clock = epoch_ms,
        aggregator: Aggregator = generate_candidates,
    ) -> None:
        self.assignments = StoreAssignmentIndex()
        self.removed_ids: set[str] = set()
        self.items = ItemStore(
            self.assignments,
            self.removed_ids,
            stores=default_stores,
            storage=storage,
            clock=clock,
        )
        self.history = ActionLog(limit=undo_limit)
        self._storage = storage
        self._notifier = notifier or LoggingNotifier()
        self._aggregator = aggregator
        self._initialized = False
        self._lock = threading.RLock()

    @classmethod
    def from_settings(
        cls,
        store: KeyValueStore,
        settings: Settings,
        notifier: Optional[NotificationSink] = None,
    ) -> "ShoppingListService":
        """Build a service bound to ``store`` and load its persisted state."""

        service = cls(
            ShoppingListStorage(store, settings.default_stores),
            notifier=notifier,
            default_stores=settings.default_stores,
            undo_limit=settings.undo_limit,
        )
        service.load()
        return service

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def active_items(self) -> list[GroceryItem]:
        return self.items.active_items

    @property
    def archived_items(self) -> list[GroceryItem]:
        return self.items.archived_items

    @property
    def available_stores(self) -> list[str]:
        return self.items.available_stores

    @property
    def revision(self) -> int:
        return self.items.revision

    @property
    def category_labels(self) -> dict[str, str]:
        return self.items.category_labels

    def _notify(self, title: str, description: str = "", severity: Severity = "info") -> None:
        try:
            self._notifier.notify(Notice(title=title, description=description, severity=severity))
        except Exception as exc:  # pragma: no cover - notifications are best effort
            logger.warning("Notification sink failed for %r: %s", title, exc)

    @_synchronized
    def load(self) -> None:
        """Restore persisted state and allow regeneration from then on."""

        if self._storage is not None:
            self.items.restore_state(self._storage.load())
        self._initialized = True

    @_synchronized
    def sync(self, meals: Iterable[Meal], pantry: Iterable[str]) -> Optional[ReconcileResult]:
        """Regenerate candidates from the inputs and merge them into the list."""

        if not self._initialized:
            logger.debug("Skipping shopping list regeneration before state is loaded")
            return None

        candidates = self._aggregator(meals, pantry)
        result = self.items.apply_candidates(candidates)
        if result.changed:
            logger.info(
                "Shopping list regenerated candidates=%s added=%s retired=%s",
                len(candidates),
                len(result.added),
                len(result.dropped),
            )
        return result

    @_synchronized
    def toggle_item(self, item_id: str) -> Optional[GroceryItem]:
        previous = self.items.get_item(item_id)
        toggled = self.items.toggle_item(item_id)
        if toggled is None:
            return None
        self.history.record("toggle", toggled, previous=previous)
        return toggled

    @_synchronized
    def archive_item(self, item_id: str) -> Optional[GroceryItem]:
        archived = self.items.archive_item(item_id)
        if archived is not None:
            self._notify("Item Archived", f"{archived.name} moved to the archive")
        return archived

    @_synchronized
    def add_item(self, new_item: NewGroceryItem) -> GroceryItem:
        item = self.items.add_item(new_item)
        self.history.record("add", item)
        self._notify("Item Added", f"{item.name} added to shopping list", "success")
        return item

    @_synchronized
    def update_item(self, item: GroceryItem) -> Optional[GroceryItem]:
        previous = self.items.get_item(item.id)
        updated = self.items.update_item(item)
        if updated is None:
            return None
        self.history.record("update", updated, previous=previous)
        if updated.store != UNASSIGNED:
            self._notify("Item Updated", f"{updated.name} assigned to {updated.store}")
        else:
            self._notify("Item Updated", f"{updated.name} updated")
        return updated

    @_synchronized
    def update_items(self, item_ids: Iterable[str], changes: Mapping[str, Any]) -> list[GroceryItem]:
        ids = list(item_ids)
        previous = {item_id: self.items.get_item(item_id) for item_id in ids}
        updated = self.items.update_items(ids, changes)
        for item in updated:
            self.history.record("update", item, previous=previous.get(item.id))
        if updated:
            plural = "s" if len(updated) > 1 else ""
            if "store" in changes:
                description = f"{len(updated)} item{plural} moved to {updated[0].store}"
            else:
                description = f"{len(updated)} item{plural} updated"
            self._notify("Items Updated", description)
        return updated

    @_synchronized
    def update_stores(self, stores: Sequence[str]) -> list[GroceryItem]:
        demoted = self.items.update_stores(stores)
        description = "Store list has been updated"
        if demoted:
            description += f"; {len(demoted)} item(s) moved to {UNASSIGNED}"
        self._notify("Stores Updated", description)
        return demoted

    @_synchronized
    def reset_list(self) -> ResetOutcome:
        outcome = self.items.reset_list()
        if outcome.already_empty:
            self._notify("List Already Empty", "There are no items to reset")
        else:
            self._notify("List Reset", f"{len(outcome.archived)} items archived")
        return outcome

    @_synchronized
    def restore_item(self, item_id: str) -> Optional[GroceryItem]:
        restored = self.items.restore_item(item_id)
        if restored is not None:
            self._notify("Item Restored", f"{restored.name} is back on the list")
        return restored

    @_synchronized
    def rename_category(self, category: GroceryCategory, label: Optional[str]) -> str:
        heading = self.items.rename_category(category, label)
        self._notify("Category Renamed", f"{category} is now shown as {heading}")
        return heading

    @_synchronized
    def clear_archive(self) -> int:
        count = self.items.clear_archive()
        if count:
            self._notify("Archive Cleared", f"{count} archived items removed")
        return count

    def _replay(self, action: UndoAction, target: Optional[GroceryItem], verb: str) -> bool:
        # Only updates carry enough state to re-apply; add and toggle are reported.
        if action.type != "update" or target is None:
            self._notify(
                f"Cannot {verb.title()}",
                f"{action.type.title()} of {action.data.item.name} is not reversible",
                "warning",
            )
            return False

        applied = self.items.update_item(target) is not None
        if applied:
            self._notify(f"{verb.title()} Applied", f"{target.name} restored")
        else:
            self._notify(f"Cannot {verb.title()}", f"{target.name} is no longer on the list", "warning")
        return applied

    @_synchronized
    def undo(self) -> HistoryOutcome:
        action = self.history.undo()
        if action is None:
            return HistoryOutcome(action=None, applied=False)
        logger.debug("Undoing %s action id=%s", action.type, action.id)
        return HistoryOutcome(action=action, applied=self._replay(action, action.data.previous, "undo"))

    @_synchronized
    def redo(self) -> HistoryOutcome:
        action = self.history.redo()
        if action is None:
            return HistoryOutcome(action=None, applied=False)
        logger.debug("Redoing %s action id=%s", action.type, action.id)
        return HistoryOutcome(action=action, applied=self._replay(action, action.data.item, "redo"))


__all__ = ["Aggregator", "HistoryOutcome", "ShoppingListService"]
