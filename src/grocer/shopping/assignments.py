"""Name-keyed store assignments that outlive individual item ids."""

from __future__ import annotations

from typing import Iterable, Iterator, Optional

from grocer.models.grocery import UNASSIGNED, normalize_name, normalize_store


class StoreAssignmentIndex:
    """Mapping of normalized ingredient name to the store the user picked for it.

    Regenerated items get new ids every time the meal plan changes, so the
    preference "milk always goes to Store A" is remembered by name here.
    Entries stay until the name is reassigned to ``Unassigned``.
    """

    def __init__(self, entries: Optional[Iterable[tuple[str, str]]] = None) -> None:
        self._stores: dict[str, str] = {}
        for name, store in entries or ():
            self.set(name, store)

    def get(self, name: str) -> Optional[str]:
        return self._stores.get(normalize_name(name))

    def set(self, name: str, store: Optional[str]) -> None:
        key = normalize_name(name)
        if not key:
            return
        label = normalize_store(store)
        if label == UNASSIGNED:
            self._stores.pop(key, None)
            return
        self._stores[key] = label

    def delete(self, name: str) -> None:
        self._stores.pop(normalize_name(name), None)

    def clear(self) -> None:
        self._stores.clear()

    def retain_stores(self, stores: Iterable[str]) -> list[str]:
        """Forget assignments to stores outside ``stores``; return the affected names."""

        keep = set(stores)
        stale = [name for name, store in self._stores.items() if store not in keep]
        for name in stale:
            del self._stores[name]
        return stale

    def to_pairs(self) -> list[list[str]]:
        return [[name, store] for name, store in self._stores.items()]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and normalize_name(name) in self._stores

    def __iter__(self) -> Iterator[str]:
        return iter(self._stores)

    def __len__(self) -> int:
        return len(self._stores)


__all__ = ["StoreAssignmentIndex"]
