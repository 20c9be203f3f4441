"""Merge freshly derived candidates into the edited shopping list."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from grocer.models.grocery import UNASSIGNED, GroceryItem
from grocer.shopping.assignments import StoreAssignmentIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of a single reconciliation pass."""

    items: list[GroceryItem]
    added: list[GroceryItem] = field(default_factory=list)
    dropped: list[GroceryItem] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.dropped)


class Reconciler:
    """Additive merge of aggregator output into the active item list.

    The store-assignment index and the removed-id set are shared with the item
    store; the reconciler only reads them.
    """

    def __init__(self, assignments: StoreAssignmentIndex, removed_ids: set[str]) -> None:
        self._assignments = assignments
        self._removed_ids = removed_ids

    def _is_retired(self, item: GroceryItem) -> bool:
        return item.checked or item.id in self._removed_ids

    def prepare(self, candidates: Sequence[GroceryItem]) -> list[GroceryItem]:
        """Drop retired candidates and apply remembered store assignments."""

        prepared: list[GroceryItem] = []
        for candidate in candidates:
            if self._is_retired(candidate):
                continue
            store = self._assignments.get(candidate.name) or UNASSIGNED
            if candidate.store != store:
                candidate = candidate.model_copy(update={"store": store})
            prepared.append(candidate)
        return prepared

    def reconcile(
        self,
        active: Sequence[GroceryItem],
        candidates: Sequence[GroceryItem],
    ) -> ReconcileResult:
        prepared = self.prepare(candidates)

        # Existing items always win: a candidate only lands when its id is new.
        existing_ids = {item.id for item in active}
        added: list[GroceryItem] = []
        for candidate in prepared:
            if candidate.id in existing_ids:
                continue
            existing_ids.add(candidate.id)
            added.append(candidate)

        # A toggle or archive may have landed in the same cycle; filter again.
        kept: list[GroceryItem] = []
        dropped: list[GroceryItem] = []
        for item in [*active, *added]:
            (dropped if self._is_retired(item) else kept).append(item)

        if added or dropped:
            logger.debug(
                "Reconciled candidates=%s added=%s dropped=%s",
                len(candidates),
                len(added),
                len(dropped),
            )
        return ReconcileResult(items=kept, added=added, dropped=dropped)


__all__ = ["ReconcileResult", "Reconciler"]
