"""Durable key-value storage backed by SQLite."""

from grocer.db.kv_store import DatabaseKeyValueStore, KeyValueStore, MemoryKeyValueStore

__all__ = ["DatabaseKeyValueStore", "KeyValueStore", "MemoryKeyValueStore"]
