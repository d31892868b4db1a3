# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Summary cache SQLite implementation."""

import logging
import sqlite3
import threading

from datetime import datetime, timezone
from pathlib import Path

from srcdigest.cache import CacheError, decode_members, encode_members
from srcdigest.config import CacheValidation
from srcdigest.model import FileSummary

logger = logging.getLogger(__name__)


class SQLiteSummaryCache:
    """Persist per-file summaries in a SQLite database."""

    def __init__(self, db_path: Path, validation: CacheValidation = "hash") -> None:
        """Initialize cache backend.

        Args:
            db_path: SQLite database file path.
            validation: ``hash`` reuses a record only when its content hash
                matches; ``existence`` reuses any stored record.
        """
        self._db_path = db_path
        self._validation = validation
        self._write_lock = threading.Lock()

    def lookup(self, key: str, content_hash: str) -> FileSummary | None:
        """Load a reusable summary for one file.

        Args:
            key: Root-relative file path.
            content_hash: Hash of the file's current content.

        Returns:
            Cached summary, or ``None`` when absent or stale.

        Raises:
            CacheError: If the database cannot be read.
        """
        try:
            connection = self._connect()
        except (sqlite3.Error, OSError) as exc:
            raise self._failure("lookup", exc) from exc
        try:
            row = connection.execute(
                "SELECT content_hash, members_json FROM file_summaries WHERE key = ?",
                (key,),
            ).fetchone()
        except sqlite3.Error as exc:
            raise self._failure("lookup", exc) from exc
        finally:
            connection.close()

        if row is None:
            return None
        stored_hash, members_json = row
        if self._validation == "hash" and stored_hash != content_hash:
            logger.debug(f"Cached summary is stale (key={key})")
            return None
        return FileSummary(
            file_path=key,
            members=decode_members(members_json),
            content_hash=stored_hash,
        )

    def store(self, summary: FileSummary) -> None:
        """Insert or replace the record for one file.

        Args:
            summary: Summary to persist; only ``ok`` summaries are stored.

        Raises:
            CacheError: If schema setup or the write fails.
        """
        if summary.status != "ok":
            logger.debug(f"Not caching diagnostic summary (key={summary.file_path})")
            return
        updated_at = datetime.now(tz=timezone.utc).isoformat()
        with self._write_lock:
            try:
                connection = self._connect()
            except (sqlite3.Error, OSError) as exc:
                raise self._failure("store", exc) from exc
            try:
                connection.execute(
                    "INSERT INTO file_summaries (key, content_hash, members_json, updated_at) "
                    "VALUES (?, ?, ?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET "
                    "content_hash = excluded.content_hash, "
                    "members_json = excluded.members_json, "
                    "updated_at = excluded.updated_at",
                    (
                        summary.file_path,
                        summary.content_hash,
                        encode_members(summary.members),
                        updated_at,
                    ),
                )
                connection.commit()
            except sqlite3.Error as exc:
                connection.rollback()
                raise self._failure("store", exc) from exc
            finally:
                connection.close()

    def reset(self) -> None:
        """Delete every cached summary.

        Raises:
            CacheError: If the database cannot be written.
        """
        with self._write_lock:
            try:
                connection = self._connect()
            except (sqlite3.Error, OSError) as exc:
                raise self._failure("reset", exc) from exc
            try:
                connection.execute("DELETE FROM file_summaries")
                connection.commit()
            except sqlite3.Error as exc:
                connection.rollback()
                raise self._failure("reset", exc) from exc
            finally:
                connection.close()
        logger.info(f"Summary cache reset (db_path={self._db_path})")

    def _connect(self) -> sqlite3.Connection:
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        connection = sqlite3.connect(self._db_path)
        try:
            self._ensure_schema(connection=connection)
        except sqlite3.Error:
            connection.close()
            raise
        return connection

    def _ensure_schema(self, connection: sqlite3.Connection) -> None:
        """Create the summary table when missing.

        Args:
            connection: Open SQLite connection.
        """
        connection.execute(
            "CREATE TABLE IF NOT EXISTS file_summaries ("
            "key TEXT PRIMARY KEY, "
            "content_hash TEXT NOT NULL, "
            "members_json TEXT NOT NULL, "
            "updated_at TEXT NOT NULL"
            ")"
        )

    def _failure(self, operation: str, exc: Exception) -> CacheError:
        logger.warning(
            f"SQLite cache {operation} failed (db_path={self._db_path} error={exc})"
        )
        return CacheError(str(exc))
