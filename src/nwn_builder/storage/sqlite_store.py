"""SQLite persistence for characters.

All characters are stored as one JSON list under a single key of a
key/value table, so the layout matches a browser-style local store. Dates
are written as ISO strings and rehydrated to datetimes on load.

Blocking sqlite calls run in a worker thread. Writes are read-modify-write
on the whole list and are serialized with a lock.

Storage location: ``Settings.storage.database_path`` (data/nwn_builder.db)
"""

from __future__ import annotations

import asyncio
import json
import sqlite3
import threading
from collections.abc import Generator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from nwn_builder.core.config import get_settings
from nwn_builder.core.exceptions import CharacterNotFoundError, PersistenceError
from nwn_builder.core.logging import get_logger
from nwn_builder.models.character import Character
from nwn_builder.storage.repository import StorageResult


logger = get_logger(__name__)


class SqliteCharacterStore:
    """Character repository backed by a SQLite key/value table.

    Example:
        >>> store = SqliteCharacterStore(tmp_path / "chars.db")
        >>> result = asyncio.run(store.save(character))
        >>> result.ok
        True
    """

    SCHEMA_VERSION = 1

    def __init__(self, db_path: str | Path | None = None, storage_key: str | None = None) -> None:
        """Initialize the store.

        Args:
            db_path: Path to the database file. If None, uses the configured path.
            storage_key: Key holding the character list. If None, uses the configured key.
        """
        storage = get_settings().storage
        self.db_path = Path(db_path) if db_path is not None else storage.database_path
        self.storage_key = storage_key or storage.storage_key
        self._lock = threading.Lock()

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

        logger.info("Character store initialized", db_path=str(self.db_path), key=self.storage_key)

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a database connection with proper cleanup."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self) -> None:
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY
                )
            """)
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            cursor.execute(
                "INSERT OR REPLACE INTO schema_version (version) VALUES (?)",
                (self.SCHEMA_VERSION,),
            )

    # =========================================================================
    # Blocking Helpers
    # =========================================================================

    def _read_all(self) -> list[dict[str, Any]]:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT value FROM kv_store WHERE key = ?",
                (self.storage_key,),
            ).fetchone()
        if row is None:
            return []
        records = json.loads(row["value"])
        if not isinstance(records, list):
            raise PersistenceError(
                "Stored character list is not a JSON list",
                details={"storage_key": self.storage_key},
            )
        return records

    def _write_all(self, records: list[dict[str, Any]]) -> None:
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO kv_store (key, value, updated_at)
                VALUES (?, ?, ?)
                """,
                (self.storage_key, json.dumps(records), datetime.now(UTC).isoformat()),
            )

    def _save_sync(self, character: Character) -> None:
        record = character.model_dump(mode="json")
        with self._lock:
            records = [r for r in self._read_all() if r.get("id") != character.id]
            records.append(record)
            self._write_all(records)

    def _load_sync(self, character_id: str) -> Character:
        for record in self._read_all():
            if record.get("id") == character_id:
                return Character.model_validate(record)
        raise CharacterNotFoundError(
            f"Character {character_id} not found",
            character_id=character_id,
        )

    def _list_ids_sync(self) -> list[str]:
        return [str(r["id"]) for r in self._read_all() if "id" in r]

    def _delete_sync(self, character_id: str) -> None:
        with self._lock:
            records = self._read_all()
            remaining = [r for r in records if r.get("id") != character_id]
            if len(remaining) == len(records):
                raise CharacterNotFoundError(
                    f"Character {character_id} not found",
                    character_id=character_id,
                )
            self._write_all(remaining)

    # =========================================================================
    # Repository API
    # =========================================================================

    async def save(self, character: Character) -> StorageResult[None]:
        """Insert or replace a character."""
        try:
            await asyncio.to_thread(self._save_sync, character)
        except PersistenceError as exc:
            return StorageResult.failure(exc)
        except (sqlite3.Error, OSError, ValueError) as exc:
            logger.error("Character save failed", character_id=character.id, error=str(exc))
            return StorageResult.failure(
                PersistenceError(f"Failed to save character: {exc}", character_id=character.id)
            )
        logger.info("Character saved", character_id=character.id, name=character.name)
        return StorageResult.success()

    async def load(self, character_id: str) -> StorageResult[Character]:
        """Load a character by id."""
        try:
            character = await asyncio.to_thread(self._load_sync, character_id)
        except PersistenceError as exc:
            return StorageResult.failure(exc)
        except PydanticValidationError as exc:
            logger.error("Stored character is invalid", character_id=character_id, error=str(exc))
            return StorageResult.failure(
                PersistenceError(f"Stored character is invalid: {exc}", character_id=character_id)
            )
        except (sqlite3.Error, OSError, ValueError) as exc:
            logger.error("Character load failed", character_id=character_id, error=str(exc))
            return StorageResult.failure(
                PersistenceError(f"Failed to load character: {exc}", character_id=character_id)
            )
        logger.info("Character loaded", character_id=character_id)
        return StorageResult.success(character)

    async def list_ids(self) -> StorageResult[list[str]]:
        """List stored character ids."""
        try:
            ids = await asyncio.to_thread(self._list_ids_sync)
        except PersistenceError as exc:
            return StorageResult.failure(exc)
        except (sqlite3.Error, OSError, ValueError) as exc:
            return StorageResult.failure(PersistenceError(f"Failed to list characters: {exc}"))
        return StorageResult.success(ids)

    async def delete(self, character_id: str) -> StorageResult[None]:
        """Delete a character by id."""
        try:
            await asyncio.to_thread(self._delete_sync, character_id)
        except PersistenceError as exc:
            return StorageResult.failure(exc)
        except (sqlite3.Error, OSError, ValueError) as exc:
            return StorageResult.failure(
                PersistenceError(f"Failed to delete character: {exc}", character_id=character_id)
            )
        logger.info("Character deleted", character_id=character_id)
        return StorageResult.success()


__all__ = [
    "SqliteCharacterStore",
]
