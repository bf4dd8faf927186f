"""
Application Store - SQLite persistence for the record set and sync watermark

Records are stored as JSON documents keyed by message id. The watermark
lives in a small key-value table. save() replaces both in one transaction
so a reader never sees records from one pass with the watermark of another.
"""

import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from apptrack.models import ApplicationRecord, RecordSet

logger = logging.getLogger(__name__)

WATERMARK_KEY = "last_sync"


class ApplicationStore:
    """Key-value persistence for classified applications."""

    def __init__(self, db_path):
        self.db_path = Path(db_path)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=30.0)
        conn.row_factory = sqlite3.Row
        return conn

    def init(self) -> None:
        """Create tables if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = self._connect()
        try:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("""
                CREATE TABLE IF NOT EXISTS applications (
                    id TEXT PRIMARY KEY,
                    data TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS sync_state (
                    key TEXT PRIMARY KEY,
                    value TEXT
                )
            """)
            conn.commit()
        finally:
            conn.close()
        logger.debug(f"Application store ready at {self.db_path}")

    def load_records(self) -> RecordSet:
        """Load every stored record, keyed by id."""
        conn = self._connect()
        try:
            rows = conn.execute("SELECT id, data FROM applications").fetchall()
        finally:
            conn.close()

        records: RecordSet = {}
        for row in rows:
            try:
                records[row["id"]] = ApplicationRecord.from_dict(json.loads(row["data"]))
            except (ValueError, KeyError) as e:
                logger.warning(f"Skipping unreadable stored record {row['id']}: {e}")
        return records

    def load_watermark(self) -> Optional[datetime]:
        """Return the last successful sync time, or None before the first sync."""
        conn = self._connect()
        try:
            row = conn.execute(
                "SELECT value FROM sync_state WHERE key = ?", (WATERMARK_KEY,)
            ).fetchone()
        finally:
            conn.close()

        if not row or not row["value"]:
            return None
        watermark = datetime.fromisoformat(row["value"])
        if watermark.tzinfo is None:
            watermark = watermark.replace(tzinfo=timezone.utc)
        return watermark

    def save(self, records: RecordSet, watermark: datetime) -> None:
        """
        Replace the stored record set and watermark atomically.

        Args:
            records: Complete record set after a sync pass
            watermark: Completion time of that pass
        """
        conn = self._connect()
        try:
            with conn:
                conn.execute("DELETE FROM applications")
                conn.executemany(
                    "INSERT INTO applications (id, data) VALUES (?, ?)",
                    [(rid, json.dumps(rec.to_dict())) for rid, rec in records.items()],
                )
                conn.execute(
                    "INSERT OR REPLACE INTO sync_state (key, value) VALUES (?, ?)",
                    (WATERMARK_KEY, watermark.isoformat()),
                )
        finally:
            conn.close()
        logger.info(f"Saved {len(records)} applications (watermark {watermark.isoformat()})")

    def clear(self) -> None:
        """Delete all records and the watermark, forcing a full sync next time."""
        conn = self._connect()
        try:
            with conn:
                conn.execute("DELETE FROM applications")
                conn.execute("DELETE FROM sync_state")
        finally:
            conn.close()
