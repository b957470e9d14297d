"""Persistence layer for enrolled speakers using SQLite."""

import asyncio
import json
import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from uuid import UUID

import aiosqlite

from .config import DEFAULT_SPEAKER_DB_PATH, DEFAULT_WAL_MODE, SCHEMA_VERSION
from .exceptions import SpeakerStoreError
from .models import Speaker, SpeakerEmbedding, SpeakerMetadata

logger = logging.getLogger(__name__)


class SpeakerStore:
    """
    SQLite store holding the flat collection of enrolled speakers.

    The collection is loaded wholesale and every save rewrites it in a single
    transaction, so readers never observe a partially written list.
    """

    def __init__(self, db_path: str = DEFAULT_SPEAKER_DB_PATH, wal_mode: bool = DEFAULT_WAL_MODE) -> None:
        """
        Initialize the store.

        Args:
            db_path: Path to SQLite database file (use ":memory:" for in-memory)
            wal_mode: Enable WAL mode for concurrent access
        """
        self.db_path = db_path
        self.wal_mode = wal_mode
        self._connection: aiosqlite.Connection | None = None

    async def initialize(self) -> None:
        """Open the connection and create the schema if needed."""
        if self._connection is None:
            if self.db_path != ":memory:":
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            try:
                self._connection = await aiosqlite.connect(self.db_path)
            except Exception as e:
                raise SpeakerStoreError(f"Failed to open speaker database: {e}") from e
            self._connection.row_factory = aiosqlite.Row

            # WAL is not supported for :memory:
            if self.wal_mode and self.db_path != ":memory:":
                await self._connection.execute("PRAGMA journal_mode=WAL")

        await self._create_schema()

    async def _create_schema(self) -> None:
        async with self._get_connection() as conn:
            await conn.execute(
                """
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY,
                    applied_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
                )
                """
            )

            cursor = await conn.execute("SELECT MAX(version) FROM schema_version")
            result = await cursor.fetchone()
            current_version = result[0] if result and result[0] is not None else 0

            if current_version < SCHEMA_VERSION:
                await self._apply_migrations(conn, current_version)

            await conn.commit()

    async def _apply_migrations(self, conn: aiosqlite.Connection, from_version: int) -> None:
        """
        Apply database migrations.

        Args:
            conn: Database connection
            from_version: Current schema version
        """
        if from_version < 1:
            await conn.execute(
                """
                CREATE TABLE IF NOT EXISTS speakers (
                    id TEXT PRIMARY KEY,
                    position INTEGER NOT NULL,
                    name TEXT NOT NULL,
                    embedding TEXT NOT NULL,
                    model_version TEXT NOT NULL,
                    enrolled_at TIMESTAMP NOT NULL,
                    identification_threshold REAL,
                    command_count INTEGER NOT NULL DEFAULT 0,
                    last_seen_at TIMESTAMP
                )
                """
            )
            await conn.execute(
                "INSERT OR REPLACE INTO schema_version (version) VALUES (?)",
                (SCHEMA_VERSION,),
            )

    @asynccontextmanager
    async def _get_connection(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Get database connection context manager.

        Raises:
            SpeakerStoreError: If connection is not initialized
        """
        if self._connection is None:
            raise SpeakerStoreError("Speaker store not initialized")
        yield self._connection

    async def get_schema_version(self) -> int:
        async with self._get_connection() as conn:
            cursor = await conn.execute("SELECT MAX(version) FROM schema_version")
            result = await cursor.fetchone()
            return result[0] if result and result[0] is not None else 0

    async def close(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    async def load_speakers(self) -> list[Speaker]:
        """
        Load every enrolled speaker in enrollment order.

        Raises:
            SpeakerStoreError: If the rows cannot be read or decoded
        """
        async with self._get_connection() as conn:
            try:
                cursor = await conn.execute("SELECT * FROM speakers ORDER BY position")
                rows = await cursor.fetchall()
                return [self._row_to_speaker(row) for row in rows]
            except SpeakerStoreError:
                raise
            except Exception as e:
                raise SpeakerStoreError(f"Failed to load speakers: {e}") from e

    async def save_speakers(self, speakers: Sequence[Speaker]) -> None:
        """
        Replace the stored collection with ``speakers``.

        Raises:
            SpeakerStoreError: If the write fails; the previous collection is kept
        """
        async with self._get_connection() as conn:
            try:
                await conn.execute("DELETE FROM speakers")
                await conn.executemany(
                    """
                    INSERT INTO speakers (
                        id, position, name, embedding, model_version, enrolled_at,
                        identification_threshold, command_count, last_seen_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    [self._speaker_to_row(position, s) for position, s in enumerate(speakers)],
                )
                await conn.commit()
            except asyncio.CancelledError:
                await conn.rollback()
                raise
            except Exception as e:
                await conn.rollback()
                raise SpeakerStoreError(f"Failed to save speakers: {e}") from e

        logger.debug(f"Saved {len(speakers)} speaker(s) to {self.db_path}")

    async def has_speakers(self) -> bool:
        async with self._get_connection() as conn:
            cursor = await conn.execute("SELECT COUNT(*) FROM speakers")
            result = await cursor.fetchone()
            return bool(result and result[0] > 0)

    @staticmethod
    def _speaker_to_row(position: int, speaker: Speaker) -> tuple:
        last_seen = speaker.metadata.last_seen_at
        return (
            str(speaker.id),
            position,
            speaker.name,
            json.dumps(list(speaker.embedding.vector)),
            speaker.embedding.model_version,
            speaker.enrolled_at.isoformat(),
            speaker.identification_threshold,
            speaker.metadata.command_count,
            last_seen.isoformat() if last_seen else None,
        )

    @staticmethod
    def _row_to_speaker(row: aiosqlite.Row) -> Speaker:
        try:
            vector = json.loads(row["embedding"])
        except json.JSONDecodeError as e:
            raise SpeakerStoreError(f"Corrupt embedding for speaker {row['id']}") from e

        return Speaker(
            id=UUID(row["id"]),
            name=row["name"],
            embedding=SpeakerEmbedding(vector=tuple(vector), model_version=row["model_version"]),
            enrolled_at=datetime.fromisoformat(row["enrolled_at"]),
            identification_threshold=row["identification_threshold"],
            metadata=SpeakerMetadata(
                command_count=row["command_count"],
                last_seen_at=(
                    datetime.fromisoformat(row["last_seen_at"]) if row["last_seen_at"] else None
                ),
            ),
        )
