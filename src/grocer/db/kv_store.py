"""Key-value storage adapters used to persist shopping list state."""

from __future__ import annotations

import logging
from typing import Dict, Optional, Protocol

from .models import KeyValueORM
from .repository import session_scope

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Durable string storage with last-write-wins semantics per key."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


def read_value(key: str) -> Optional[str]:
    """Return the raw value stored under ``key`` or ``None``."""

    with session_scope() as session:
        row = session.get(KeyValueORM, key)
        return row.value if row is not None else None


def write_value(key: str, value: str) -> None:
    """Insert or replace the value stored under ``key``."""

    with session_scope() as session:
        session.merge(KeyValueORM(key=key, value=value))


class DatabaseKeyValueStore:
    """Key-value store persisted in the configured SQLite database."""

    def get(self, key: str) -> Optional[str]:
        return read_value(key)

    def set(self, key: str, value: str) -> None:
        logger.debug("Writing key=%s bytes=%s", key, len(value))
        write_value(key, value)


class MemoryKeyValueStore:
    """Process-local store; contents vanish with the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def snapshot(self) -> Dict[str, str]:
        return dict(self._values)


__all__ = [
    "DatabaseKeyValueStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "read_value",
    "write_value",
]
