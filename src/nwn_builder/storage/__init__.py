"""Character persistence.

Exports:
    StorageResult: Value-or-error outcome of a storage operation.
    CharacterRepository: Async persistence port.
    SqliteCharacterStore: SQLite key/value implementation.
    InMemoryCharacterStore: Dict-backed implementation.
"""

from __future__ import annotations

from nwn_builder.storage.memory_store import InMemoryCharacterStore
from nwn_builder.storage.repository import CharacterRepository, StorageResult
from nwn_builder.storage.sqlite_store import SqliteCharacterStore


__all__ = [
    "StorageResult",
    "CharacterRepository",
    "SqliteCharacterStore",
    "InMemoryCharacterStore",
]
