"""In-memory character repository for tests and embedding."""

from __future__ import annotations

import asyncio
from typing import Any

from nwn_builder.core.exceptions import CharacterNotFoundError
from nwn_builder.models.character import Character
from nwn_builder.storage.repository import StorageResult


class InMemoryCharacterStore:
    """Repository that keeps serialized characters in a dict.

    Characters are stored in their JSON form so a load returns a fresh
    copy, the same as the SQLite store.
    """

    def __init__(self) -> None:
        self._records: dict[str, dict[str, Any]] = {}
        self._lock = asyncio.Lock()

    async def save(self, character: Character) -> StorageResult[None]:
        async with self._lock:
            self._records[character.id] = character.model_dump(mode="json")
        return StorageResult.success()

    async def load(self, character_id: str) -> StorageResult[Character]:
        record = self._records.get(character_id)
        if record is None:
            return StorageResult.failure(
                CharacterNotFoundError(f"Character {character_id} not found", character_id=character_id)
            )
        return StorageResult.success(Character.model_validate(record))

    async def list_ids(self) -> StorageResult[list[str]]:
        return StorageResult.success(list(self._records))

    async def delete(self, character_id: str) -> StorageResult[None]:
        async with self._lock:
            if self._records.pop(character_id, None) is None:
                return StorageResult.failure(
                    CharacterNotFoundError(f"Character {character_id} not found", character_id=character_id)
                )
        return StorageResult.success()


__all__ = [
    "InMemoryCharacterStore",
]
