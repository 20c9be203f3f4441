"""Sorting and grouping of shopping list items for display and export."""

from __future__ import annotations

from typing import Literal, Mapping, Optional, Sequence

from grocer.models.grocery import CATEGORY_LABELS, UNASSIGNED, GroceryItem, normalize_store

SortKey = Literal["category", "department"]


def sort_items(items: Sequence[GroceryItem]) -> list[GroceryItem]:
    """Order by store (Unassigned last), then department, then category."""

    def key(item: GroceryItem) -> tuple[bool, str, str, str]:
        store = normalize_store(item.store)
        return (store == UNASSIGNED, store.lower(), (item.department or "").lower(), item.category)

    return sorted(items, key=key)


def _secondary_key(item: GroceryItem, sort_by: SortKey, labels: Mapping[str, str]) -> str:
    if sort_by == "department":
        return item.department or UNASSIGNED
    return labels.get(item.category) or CATEGORY_LABELS.get(item.category, "Other")


def filter_items(
    items: Sequence[GroceryItem],
    *,
    search: str = "",
    store: Optional[str] = None,
) -> list[GroceryItem]:
    needle = search.strip().lower()
    return [
        item
        for item in items
        if (not needle or needle in item.name.lower())
        and (store is None or normalize_store(item.store) == store)
    ]


def group_items(
    items: Sequence[GroceryItem],
    *,
    by_store: bool = True,
    sort_by: SortKey = "category",
    search: str = "",
    store: Optional[str] = None,
    labels: Optional[Mapping[str, str]] = None,
) -> dict[str, dict[str, list[GroceryItem]]] | dict[str, list[GroceryItem]]:
    """Group filtered items by store then category/department, or by category alone.

    ``labels`` overrides category display names used as group headings.
    """

    headings = labels or CATEGORY_LABELS
    filtered = sort_items(filter_items(items, search=search, store=store))
    if by_store:
        by_store_groups: dict[str, dict[str, list[GroceryItem]]] = {}
        for item in filtered:
            section = by_store_groups.setdefault(normalize_store(item.store), {})
            section.setdefault(_secondary_key(item, sort_by, headings), []).append(item)
        return by_store_groups

    groups: dict[str, list[GroceryItem]] = {}
    for item in filtered:
        groups.setdefault(_secondary_key(item, sort_by, headings), []).append(item)
    return groups


__all__ = ["SortKey", "filter_items", "group_items", "sort_items"]
