"""Authoritative in-memory shopping list collections and their mutations."""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from pydantic import ValidationError

from grocer import metrics
from grocer.config import DEFAULT_STORES
from grocer.models.grocery import (
    CATEGORY_LABELS,
    UNASSIGNED,
    GroceryCategory,
    GroceryItem,
    NewGroceryItem,
    normalize_name,
    normalize_store,
)
from grocer.shopping.assignments import StoreAssignmentIndex
from grocer.shopping.reconcile import ReconcileResult, Reconciler
from grocer.shopping.storage import ShoppingListSnapshot, ShoppingListStorage

logger = logging.getLogger(__name__)

ARCHIVED_PREFIX = "archived-"
MANUAL_PREFIX = "manual-"
BULK_FIELDS = frozenset({"name", "category", "quantity", "meal", "store", "department"})

_ARCHIVED_ID = re.compile(r"^archived-\d+-(?P<original>.+)$")
_WHITESPACE = re.compile(r"\s+")

Clock = Callable[[], int]


def epoch_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class ResetOutcome:
    """Items moved to the archive by a reset; empty when nothing was active."""

    archived: list[GroceryItem] = field(default_factory=list)

    @property
    def already_empty(self) -> bool:
        return not self.archived


class ItemStore:
    """Active, manual and archived items plus the store catalog.

    Missing ids are ignored: operations return ``None`` and change nothing.
    Every effective mutation bumps :attr:`revision` and is written through to
    the storage adapter before the call returns.
    """

    def __init__(
        self,
        assignments: StoreAssignmentIndex,
        removed_ids: set[str],
        *,
        stores: Optional[Sequence[str]] = None,
        storage: Optional[ShoppingListStorage] = None,
        clock: Clock = epoch_ms,
    ) -> None:
        self._assignments = assignments
        self._removed_ids = removed_ids
        self._reconciler = Reconciler(assignments, removed_ids)
        self._storage = storage
        self._clock = clock
        self._active: list[GroceryItem] = []
        self._manual: dict[str, GroceryItem] = {}
        self._archived: list[GroceryItem] = []
        self._stores: list[str] = _clean_catalog(stores if stores is not None else DEFAULT_STORES)
        self._category_labels: dict[str, str] = {}
        self._revision = 0

    # -- read-only views -------------------------------------------------

    @property
    def active_items(self) -> list[GroceryItem]:
        return list(self._active)

    @property
    def manual_items(self) -> list[GroceryItem]:
        return list(self._manual.values())

    @property
    def archived_items(self) -> list[GroceryItem]:
        return list(self._archived)

    @property
    def available_stores(self) -> list[str]:
        return list(self._stores)

    @property
    def category_labels(self) -> dict[str, str]:
        """Display name per category, user overrides applied."""
        return {**CATEGORY_LABELS, **self._category_labels}

    @property
    def removed_ids(self) -> frozenset[str]:
        return frozenset(self._removed_ids)

    @property
    def assignments(self) -> StoreAssignmentIndex:
        return self._assignments

    @property
    def revision(self) -> int:
        return self._revision

    def get_item(self, item_id: str) -> Optional[GroceryItem]:
        index = self._index_of(item_id)
        return self._active[index] if index is not None else None

    def get_archived_item(self, item_id: str) -> Optional[GroceryItem]:
        return next((item for item in self._archived if item.id == item_id), None)

    # -- persistence -----------------------------------------------------

    def snapshot(self) -> ShoppingListSnapshot:
        return ShoppingListSnapshot(
            items=list(self._active),
            archived=list(self._archived),
            stores=list(self._stores),
            assignments=[(name, store) for name, store in self._assignments.to_pairs()],
            removed_ids=sorted(self._removed_ids),
            category_labels=dict(self._category_labels),
        )

    def restore_state(self, snapshot: ShoppingListSnapshot) -> None:
        """Replace in-memory state with a persisted snapshot."""

        self._assignments.clear()
        for name, store in snapshot.assignments:
            self._assignments.set(name, store)
        self._removed_ids.clear()
        self._removed_ids.update(snapshot.removed_ids)

        self._archived = []
        self._archive(snapshot.archived)
        archived_ids = {item.id for item in self._archived}

        self._active = []
        self._manual = {}
        seen: set[str] = set()
        for item in snapshot.items:
            if item.id in seen or item.id in archived_ids:
                continue
            seen.add(item.id)
            if item.checked:
                # A checked item left over from a previous run is archived history.
                self._archive([item])
                continue
            self._active.append(item)
            if item.is_manual:
                self._manual[item.id] = item

        if snapshot.stores:
            self._stores = _clean_catalog(snapshot.stores)
        self._category_labels = {
            category: label.strip()
            for category, label in snapshot.category_labels.items()
            if category in CATEGORY_LABELS and label.strip()
        }
        self._revision += 1
        logger.info(
            "Restored shopping list active=%s archived=%s stores=%s",
            len(self._active),
            len(self._archived),
            len(self._stores),
        )

    def flush(self) -> None:
        if self._storage is not None:
            self._storage.save(self.snapshot())

    def _commit(self, operation: str) -> None:
        self._revision += 1
        metrics.ITEM_MUTATIONS.labels(operation=operation).inc()
        logger.debug("Applied %s revision=%s", operation, self._revision, extra={"operation": operation})
        self.flush()

    # -- helpers ---------------------------------------------------------

    def _index_of(self, item_id: str) -> Optional[int]:
        for index, item in enumerate(self._active):
            if item.id == item_id:
                return index
        return None

    def _replace(self, index: int, item: GroceryItem) -> None:
        self._active[index] = item
        if item.id in self._manual:
            self._manual[item.id] = item

    def _archive(self, items: Iterable[GroceryItem]) -> None:
        archived_ids = {item.id for item in self._archived}
        for item in items:
            if item.id in archived_ids:
                continue
            archived_ids.add(item.id)
            self._archived.append(item if item.checked else item.model_copy(update={"checked": True}))

    def _taken_ids(self) -> set[str]:
        return {item.id for item in self._active} | {item.id for item in self._archived}

    def _apply_update(self, index: int, item: GroceryItem) -> GroceryItem:
        current = self._active[index]
        updated = item.model_copy(
            update={"store": normalize_store(item.store), "origin": current.origin}
        )
        if updated.store != UNASSIGNED:
            self._assignments.set(updated.name, updated.store)
        else:
            self._assignments.delete(updated.name)
        if updated.checked:
            self._removed_ids.add(updated.id)
        else:
            self._removed_ids.discard(updated.id)
        self._replace(index, updated)
        return updated

    # -- mutations -------------------------------------------------------

    def toggle_item(self, item_id: str) -> Optional[GroceryItem]:
        """Flip ``checked`` on an active item; checking marks it as removed."""

        index = self._index_of(item_id)
        if index is None:
            logger.debug("Toggle ignored for unknown item id=%s", item_id, extra={"item_id": item_id})
            return None

        toggled = self._active[index].model_copy(update={"checked": not self._active[index].checked})
        if toggled.checked:
            self._removed_ids.add(item_id)
        else:
            self._removed_ids.discard(item_id)
        self._replace(index, toggled)
        self._commit("toggle")
        return toggled

    def archive_item(self, item_id: str) -> Optional[GroceryItem]:
        """Move an active item into the archive and keep it from coming back."""

        index = self._index_of(item_id)
        if index is None:
            logger.debug("Archive ignored for unknown item id=%s", item_id, extra={"item_id": item_id})
            return None

        item = self._active.pop(index)
        self._manual.pop(item_id, None)
        archived = item.model_copy(update={"checked": True})
        self._archive([archived])
        self._removed_ids.add(item_id)
        self._commit("archive")
        return archived

    def add_item(self, new_item: NewGroceryItem) -> GroceryItem:
        """Append a manual item with a fresh id; duplicate names are allowed."""

        slug = _WHITESPACE.sub("-", normalize_name(new_item.name))
        base_id = f"{MANUAL_PREFIX}{slug}-{self._clock()}"
        taken = self._taken_ids()
        item_id, suffix = base_id, 1
        while item_id in taken:
            item_id = f"{base_id}-{suffix}"
            suffix += 1

        item = GroceryItem(
            id=item_id,
            name=new_item.name.strip(),
            category=new_item.category,
            quantity=new_item.quantity,
            checked=False,
            meal=new_item.meal,
            store=normalize_store(new_item.store),
            department=new_item.department,
            origin="manual",
        )
        self._active.append(item)
        self._manual[item.id] = item
        metrics.ITEMS_ADDED.labels(origin="manual").inc()
        self._commit("add")
        return item

    def update_item(self, item: GroceryItem) -> Optional[GroceryItem]:
        """Replace the active item with the same id and remember its store by name."""

        index = self._index_of(item.id)
        if index is None:
            logger.debug("Update ignored for unknown item id=%s", item.id, extra={"item_id": item.id})
            return None

        updated = self._apply_update(index, item)
        self._commit("update")
        return updated

    def update_items(self, item_ids: Iterable[str], changes: Mapping[str, Any]) -> list[GroceryItem]:
        """Apply the same field changes to several active items at once."""

        unknown = set(changes) - BULK_FIELDS
        if unknown:
            raise ValueError(f"Unsupported bulk update fields: {', '.join(sorted(unknown))}")

        updated: list[GroceryItem] = []
        for item_id in dict.fromkeys(item_ids):
            index = self._index_of(item_id)
            if index is None:
                continue
            try:
                candidate = GroceryItem.model_validate({**self._active[index].model_dump(), **changes})
            except ValidationError as exc:
                raise ValueError(str(exc)) from exc
            updated.append(self._apply_update(index, candidate))

        if updated:
            self._commit("bulk_update")
        return updated

    def update_stores(self, stores: Sequence[str]) -> list[GroceryItem]:
        """Replace the store catalog, demoting items whose store disappeared."""

        self._stores = _clean_catalog(stores)
        catalog = set(self._stores)
        self._assignments.retain_stores(catalog)
        demoted: list[GroceryItem] = []
        for index, item in enumerate(self._active):
            if item.store != UNASSIGNED and item.store not in catalog:
                demoted_item = item.model_copy(update={"store": UNASSIGNED})
                self._replace(index, demoted_item)
                demoted.append(demoted_item)

        self._commit("update_stores")
        return demoted

    def reset_list(self) -> ResetOutcome:
        """Archive every active and manual item and start over."""

        if not self._active:
            return ResetOutcome()

        stamp = self._clock()
        to_archive: dict[str, GroceryItem] = {item.id: item for item in self._active}
        for item_id, item in self._manual.items():
            to_archive.setdefault(item_id, item)

        # Earlier archive entries keep their live ids until now; retag them too so
        # regenerated items cannot collide once the removed ids are forgotten.
        self._archived = [
            item
            if item.id.startswith(ARCHIVED_PREFIX)
            else item.model_copy(update={"id": f"{ARCHIVED_PREFIX}{stamp}-{item.id}"})
            for item in self._archived
        ]
        archived = [
            item.model_copy(update={"id": f"{ARCHIVED_PREFIX}{stamp}-{item.id}", "checked": True})
            for item in to_archive.values()
        ]
        self._archive(archived)
        self._active = []
        self._manual = {}
        self._removed_ids.clear()
        self._commit("reset")
        return ResetOutcome(archived=archived)

    def restore_item(self, item_id: str) -> Optional[GroceryItem]:
        """Bring an archived item back onto the active list, unchecked."""

        archived = self.get_archived_item(item_id)
        if archived is None:
            logger.debug("Restore ignored for unknown archived id=%s", item_id)
            return None

        taken = self._taken_ids()
        restored_id = item_id
        match = _ARCHIVED_ID.match(item_id)
        if match and match.group("original") not in taken:
            restored_id = match.group("original")

        self._archived = [item for item in self._archived if item.id != item_id]
        restored = archived.model_copy(update={"id": restored_id, "checked": False})
        self._removed_ids.discard(item_id)
        self._removed_ids.discard(restored_id)
        self._active.append(restored)
        if restored.is_manual:
            self._manual[restored.id] = restored
        self._commit("restore")
        return restored

    def rename_category(self, category: GroceryCategory, label: Optional[str]) -> str:
        """Set the display name of a category; a blank label restores the default."""

        if category not in CATEGORY_LABELS:
            raise ValueError(f"Unknown category: {category}")
        cleaned = (label or "").strip()
        if not cleaned or cleaned == CATEGORY_LABELS[category]:
            self._category_labels.pop(category, None)
        else:
            self._category_labels[category] = cleaned
        self._commit("rename_category")
        return self.category_labels[category]

    def clear_archive(self) -> int:
        count = len(self._archived)
        if count:
            self._archived = []
            self._commit("clear_archive")
        return count

    def apply_candidates(self, candidates: Sequence[GroceryItem]) -> ReconcileResult:
        """Reconcile aggregator output into the active list."""

        result = self._reconciler.reconcile(self._active, candidates)
        if not result.changed:
            metrics.RECONCILE_RUNS.labels(outcome="unchanged").inc()
            return result

        self._active = list(result.items)
        for item in result.dropped:
            self._manual.pop(item.id, None)
        self._archive(result.dropped)
        if result.added:
            metrics.ITEMS_ADDED.labels(origin="meal").inc(len(result.added))
        metrics.RECONCILE_RUNS.labels(outcome="changed").inc()
        self._commit("reconcile")
        return result


def _clean_catalog(stores: Iterable[str]) -> list[str]:
    cleaned: list[str] = []
    for store in stores:
        label = (store or "").strip()
        if label and label not in cleaned:
            cleaned.append(label)
    return cleaned


__all__ = ["ARCHIVED_PREFIX", "MANUAL_PREFIX", "ItemStore", "ResetOutcome", "epoch_ms"]
