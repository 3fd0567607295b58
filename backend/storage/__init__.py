"""
Record Store Layer

RESPONSIBILITY: Read-only access to raw feedback records
ALLOWED INPUTS: A backing source (memory, JSON file, SQLite database)
OUTPUTS: List[FeedbackRecord]

WHAT THIS LAYER MUST NOT DO:
============================
- Write or mutate records
- Return a silently empty list when the source failed
- Know anything about annotations or facets

BOUNDARY ENFORCEMENT:
=====================
Every failure is a RecordStoreError carrying a StoreErrorCode, which is
distinguishable from "legitimately zero records".
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Sequence
import json
import logging
import sqlite3

from ..contracts.records import FeedbackRecord


logger = logging.getLogger(__name__)


# =============================================================================
# ERRORS
# =============================================================================

class StoreErrorCode(Enum):
    """Explicit store failure codes."""
    UNAVAILABLE = "unavailable"
    NOT_FOUND = "not_found"
    MALFORMED_ROW = "malformed_row"


class RecordStoreError(Exception):
    """Record fetch could not complete. Fatal to producing a view."""

    def __init__(self, code: StoreErrorCode, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


def rows_to_records(rows: Iterable[dict]) -> List[FeedbackRecord]:
    """Convert store rows, failing the whole fetch on the first malformed row."""
    records = []
    for position, row in enumerate(rows):
        try:
            records.append(FeedbackRecord.from_row(row))
        except (KeyError, TypeError, ValueError) as e:
            raise RecordStoreError(
                StoreErrorCode.MALFORMED_ROW,
                f"Row {position} is not a feedback record: {e!r}"
            ) from e
    return records


# =============================================================================
# STORES
# =============================================================================

class RecordStore(ABC):
    """Read-only source of feedback records."""

    @abstractmethod
    def fetch_records(self) -> List[FeedbackRecord]:
        """
        Fetch every record, in store order.

        Raises RecordStoreError on failure; never returns a partial list.
        """


class InMemoryRecordStore(RecordStore):
    """Records held in memory. Used by tests and the mock setup."""

    def __init__(self, records: Sequence[FeedbackRecord] = ()):
        self._records = tuple(records)

    @classmethod
    def from_rows(cls, rows: Iterable[dict]) -> InMemoryRecordStore:
        return cls(rows_to_records(rows))

    def fetch_records(self) -> List[FeedbackRecord]:
        return list(self._records)


class JsonFileRecordStore(RecordStore):
    """
    JSON array of {id, source, message, timestamp} objects on disk.

    The file is read on every fetch so edits show up without a restart.
    """

    def __init__(self, path: Path):
        self._path = Path(path)

    def fetch_records(self) -> List[FeedbackRecord]:
        if not self._path.exists():
            raise RecordStoreError(StoreErrorCode.NOT_FOUND, f"No feedback file at {self._path}")

        try:
            with open(self._path, 'r', encoding='utf-8') as f:
                rows = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise RecordStoreError(
                StoreErrorCode.UNAVAILABLE,
                f"Cannot read feedback file {self._path}: {e}"
            ) from e

        if not isinstance(rows, list):
            raise RecordStoreError(
                StoreErrorCode.MALFORMED_ROW,
                f"Feedback file {self._path} must hold a JSON array"
            )

        records = rows_to_records(rows)
        logger.debug("Loaded %d records from %s", len(records), self._path)
        return records


class SQLiteRecordStore(RecordStore):
    """
    SQLite table `feedback(id, source, message, timestamp)`.

    Rows come back in rowid order. `id` is declared without a type so SQLite
    keeps each value's storage class: integer ids come back as int, text ids
    (including "007") come back unchanged.
    """

    SCHEMA = '''
        CREATE TABLE IF NOT EXISTS feedback (
            id PRIMARY KEY NOT NULL,
            source TEXT NOT NULL,
            message TEXT NOT NULL,
            timestamp TEXT NOT NULL
        );
    '''

    def __init__(self, db_path: Path, table: str = "feedback"):
        self._db_path = Path(db_path)
        self._table = table

    @contextmanager
    def _get_conn(self):
        """Get database connection."""
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def init_schema(self):
        """Create the feedback table (setup and tests only)."""
        with self._get_conn() as conn:
            conn.executescript(self.SCHEMA)

    def insert_records(self, records: Iterable[FeedbackRecord]):
        """Seed helper; the store itself is read-only to the view pipeline."""
        with self._get_conn() as conn:
            conn.executemany(
                f"INSERT INTO {self._table} (id, source, message, timestamp) VALUES (?, ?, ?, ?)",
                [
                    (r.id, r.source, r.message, r.timestamp.isoformat())
                    for r in records
                ],
            )
            conn.commit()

    def fetch_records(self) -> List[FeedbackRecord]:
        if not self._db_path.exists():
            raise RecordStoreError(StoreErrorCode.NOT_FOUND, f"No database at {self._db_path}")

        try:
            with self._get_conn() as conn:
                rows = conn.execute(
                    f"SELECT id, source, message, timestamp FROM {self._table} ORDER BY rowid"
                ).fetchall()
        except sqlite3.Error as e:
            raise RecordStoreError(
                StoreErrorCode.UNAVAILABLE,
                f"Feedback query failed: {e}"
            ) from e

        return rows_to_records(dict(row) for row in rows)


def create_store(kind: str, path: Optional[Path] = None) -> RecordStore:
    """Build a store from config values ("memory" | "json" | "sqlite")."""
    if kind == "memory":
        return InMemoryRecordStore(load_sample_records())
    if kind == "json":
        return JsonFileRecordStore(path or SAMPLE_DATA_PATH)
    if kind == "sqlite":
        if path is None:
            raise ValueError("sqlite store needs a database path")
        return SQLiteRecordStore(path)
    raise ValueError(f"Unknown record store: {kind}")


SAMPLE_DATA_PATH = Path(__file__).resolve().parent / "sample_feedback.json"


def load_sample_records() -> List[FeedbackRecord]:
    """The bundled sample feedback set."""
    return JsonFileRecordStore(SAMPLE_DATA_PATH).fetch_records()
