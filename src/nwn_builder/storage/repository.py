"""Persistence port for characters.

The rules engine only talks to a ``CharacterRepository``. Operations are
async and never raise for storage failures: they return a
``StorageResult`` carrying either a value or a ``PersistenceError``, and
the caller decides what to do with it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Protocol, TypeVar, runtime_checkable

from nwn_builder.core.exceptions import PersistenceError
from nwn_builder.models.character import Character


T = TypeVar("T")


@dataclass(frozen=True)
class StorageResult(Generic[T]):
    """Outcome of a storage operation.

    Attributes:
        value: The result on success.
        error: The failure, if any.
    """

    value: T | None = None
    error: PersistenceError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T | None = None) -> StorageResult[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: PersistenceError) -> StorageResult[T]:
        return cls(error=error)

    def unwrap(self) -> T | None:
        """Return the value or raise the stored error."""
        if self.error is not None:
            raise self.error
        return self.value


@runtime_checkable
class CharacterRepository(Protocol):
    """Async store of characters keyed by id."""

    async def save(self, character: Character) -> StorageResult[None]:
        """Insert or replace a character."""
        ...

    async def load(self, character_id: str) -> StorageResult[Character]:
        """Load a character by id."""
        ...

    async def list_ids(self) -> StorageResult[list[str]]:
        """List stored character ids."""
        ...

    async def delete(self, character_id: str) -> StorageResult[None]:
        """Delete a character by id."""
        ...


__all__ = [
    "StorageResult",
    "CharacterRepository",
]
