"""Record store — insert-one persistence for imported rows.

The import pipeline only needs "insert this row into that table, give me the
stored row back or fail". Two implementations:

- RedisRecordStore: JSON rows in Redis, used by the running service
- MemoryRecordStore: process-local dicts, used by tests and local tooling

Both enforce the same unique constraints so duplicate rows fail per row with
a readable message.
"""

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional

import redis as redis_lib

from eos_import.core.id_gen import generate_id
from eos_import.core.redis_client import get_redis_client

logger = logging.getLogger(__name__)

# table -> columns that must be unique together
UNIQUE_CONSTRAINTS: dict[str, tuple[str, ...]] = {
    "users": ("email",),
    "user_organizations": ("user_id", "organization_id"),
}

DUPLICATE_CODE = "23505"
DUPLICATE_MESSAGE = "A record with this information already exists"


class RecordStoreError(Exception):
    """An insert was rejected by the store."""

    def __init__(self, message: str, code: Optional[str] = None):
        self.code = code
        super().__init__(message)


def _unique_key(table: str, record: dict) -> Optional[str]:
    columns = UNIQUE_CONSTRAINTS.get(table)
    if not columns:
        return None
    return "|".join(str(record.get(c, "")).lower() for c in columns)


def _stamp(record: dict) -> dict:
    """Copy the record, filling id and timestamps the way the database defaults would."""
    row = dict(record)
    row.setdefault("id", generate_id())
    now = datetime.now(timezone.utc).isoformat()
    row.setdefault("created_at", now)
    row.setdefault("updated_at", now)
    return row


class RecordStore(ABC):
    @abstractmethod
    def insert(self, table: str, record: dict) -> dict:
        """Insert one row and return it as stored. Raises RecordStoreError."""

    @abstractmethod
    def list_records(self, table: str) -> list[dict]:
        """All rows of a table in insertion order."""


class MemoryRecordStore(RecordStore):
    def __init__(self):
        self._tables: dict[str, list[dict]] = {}
        self._unique: dict[str, set[str]] = {}

    def insert(self, table: str, record: dict) -> dict:
        key = _unique_key(table, record)
        seen = self._unique.setdefault(table, set())
        if key is not None and key in seen:
            raise RecordStoreError(DUPLICATE_MESSAGE, code=DUPLICATE_CODE)
        row = _stamp(record)
        self._tables.setdefault(table, []).append(row)
        if key is not None:
            seen.add(key)
        return dict(row)

    def list_records(self, table: str) -> list[dict]:
        return [dict(r) for r in self._tables.get(table, [])]


class RedisRecordStore(RecordStore):
    """Rows stored as JSON strings under {prefix}:{table}:{id}.

    {prefix}:{table} is a list of ids in insertion order; unique constraints
    are claimed with SET NX on {prefix}:{table}:unique:{key}.
    """

    def __init__(self, client: Optional[redis_lib.Redis] = None, prefix: str = "eos"):
        self._client = client
        self._prefix = prefix

    @property
    def client(self) -> redis_lib.Redis:
        return self._client or get_redis_client()

    def _key(self, *parts: str) -> str:
        return ":".join([self._prefix, *parts])

    def insert(self, table: str, record: dict) -> dict:
        row = _stamp(record)
        unique = _unique_key(table, record)
        unique_key = self._key(table, "unique", unique) if unique is not None else None
        try:
            if unique_key is not None:
                claimed = self.client.set(unique_key, row["id"], nx=True)
                if not claimed:
                    raise RecordStoreError(DUPLICATE_MESSAGE, code=DUPLICATE_CODE)
        except redis_lib.RedisError as e:
            logger.error(f"Insert into '{table}' failed: {e}")
            raise RecordStoreError(f"Database operation failed: {e}")

        try:
            pipe = self.client.pipeline()
            pipe.set(self._key(table, row["id"]), json.dumps(row, default=str))
            pipe.rpush(self._key(table), row["id"])
            pipe.execute()
        except redis_lib.RedisError as e:
            logger.error(f"Insert into '{table}' failed: {e}")
            if unique_key is not None:
                self._release(unique_key, row["id"])
            raise RecordStoreError(f"Database operation failed: {e}")
        return row

    def _release(self, unique_key: str, row_id: str) -> None:
        # The row was never written, so its unique value must be claimable again
        try:
            if self.client.get(unique_key) == row_id:
                self.client.delete(unique_key)
        except redis_lib.RedisError as e:
            logger.error(f"Could not release unique key {unique_key}: {e}")

    def list_records(self, table: str) -> list[dict]:
        ids = self.client.lrange(self._key(table), 0, -1)
        if not ids:
            return []
        raw_rows = self.client.mget([self._key(table, rid) for rid in ids])
        return [json.loads(raw) for raw in raw_rows if raw]
