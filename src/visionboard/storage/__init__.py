"""Visionboard storage layer."""

from visionboard.storage.base import EntityStore
from visionboard.storage.memory_store import MemoryStore
from visionboard.storage.sqlite_store import SQLiteStore

__all__ = ["EntityStore", "MemoryStore", "SQLiteStore"]
