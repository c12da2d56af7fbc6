"""DuckDB-backed store for upload records.

Database Schema:
    upload_records table:
        - id: UUID string primary key
        - name: Uploader name
        - email: Uploader email (no UNIQUE constraint; uniqueness is checked
          by the upload endpoint before insert)
        - image_url: Public URL of the stored image
        - created_at / updated_at: UTC timestamps

Thread Safety:
    One DuckDB connection per store. Handlers call it from the event loop
    thread, so access is serialized within a process.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

import duckdb

from .schemas import UploadRecord

logger = logging.getLogger(__name__)

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS upload_records (
    id         VARCHAR PRIMARY KEY,
    name       VARCHAR NOT NULL,
    email      VARCHAR NOT NULL,
    image_url  VARCHAR NOT NULL,
    created_at TIMESTAMP NOT NULL,
    updated_at TIMESTAMP NOT NULL
)
"""

_INDEX = "CREATE INDEX IF NOT EXISTS idx_upload_records_email ON upload_records(email)"

_COLUMNS = "id, name, email, image_url, created_at, updated_at"


class RecordStoreError(Exception):
    """The database could not be opened, read, or written."""


def _to_db(ts: datetime) -> datetime:
    # TIMESTAMP columns are naive; values are always UTC.
    return ts.astimezone(timezone.utc).replace(tzinfo=None)


def _from_db(ts: datetime) -> datetime:
    return ts.replace(tzinfo=timezone.utc)


def _row_to_record(row) -> UploadRecord:
    return UploadRecord(
        id=row[0],
        name=row[1],
        email=row[2],
        image_url=row[3],
        created_at=_from_db(row[4]),
        updated_at=_from_db(row[5]),
    )


class UploadRecordStore:
    """Single-collection store of UploadRecord rows."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        try:
            self._conn: Optional[duckdb.DuckDBPyConnection] = duckdb.connect(db_path)
            self._conn.execute(_CREATE_TABLE)
            self._conn.execute(_INDEX)
        except duckdb.Error as e:
            raise RecordStoreError(f"Cannot open database {db_path}: {e}") from e
        logger.info("[UploadRecordStore] Initialized with db=%s", db_path)

    def _connection(self) -> duckdb.DuckDBPyConnection:
        if self._conn is None:
            raise RecordStoreError("Database connection is closed")
        return self._conn

    def find_by_email(self, email: str) -> Optional[UploadRecord]:
        """Return the first record with this email, or None."""
        try:
            row = self._connection().execute(
                f"SELECT {_COLUMNS} FROM upload_records WHERE email = ? LIMIT 1",
                [email],
            ).fetchone()
        except duckdb.Error as e:
            raise RecordStoreError(str(e)) from e
        return _row_to_record(row) if row else None

    def insert(self, name: str, email: str, image_url: str) -> UploadRecord:
        """Persist a new record with fresh id and timestamps."""
        record = UploadRecord(name=name, email=email, image_url=image_url)
        record.updated_at = record.created_at
        try:
            self._connection().execute(
                f"INSERT INTO upload_records ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?)",
                [
                    record.id,
                    record.name,
                    record.email,
                    record.image_url,
                    _to_db(record.created_at),
                    _to_db(record.updated_at),
                ],
            )
        except duckdb.Error as e:
            raise RecordStoreError(str(e)) from e
        return record

    def list_all(self) -> List[UploadRecord]:
        """Every record in storage order."""
        try:
            rows = self._connection().execute(
                f"SELECT {_COLUMNS} FROM upload_records"
            ).fetchall()
        except duckdb.Error as e:
            raise RecordStoreError(str(e)) from e
        return [_row_to_record(r) for r in rows]

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.info("[UploadRecordStore] Closed db=%s", self._db_path)
