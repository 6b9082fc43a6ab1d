from __future__ import annotations

import logging
from typing import Collection, Sequence, Set

import mysql.connector

from ..core.exceptions import StoreInsertError, StoreLookupError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import chunked, db_cursor, fetchall, placeholders
from .model import InsertCandidate
from .repository import RecordRepository

logger = logging.getLogger(__name__)

# Keeps IN (...) lists well under max_allowed_packet.
_LOOKUP_CHUNK = 500


class MySQLRecordRepository(RecordRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, table: str):
        self._conn_factory = conn_factory
        self._table = table

    def exists(self, record_id: str) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(f"SELECT 1 AS found FROM {self._table} WHERE id=%s LIMIT 1", (record_id,))
                return bool(fetchall(cur))
        except mysql.connector.Error as exc:
            logger.error("Lookup of %s in %s failed: %s", record_id, self._table, exc)
            raise StoreLookupError("Could not check existing records. Please try again.") from exc

    def find_existing_ids(self, record_ids: Collection[str]) -> Set[str]:
        ids = sorted(set(record_ids))
        found: Set[str] = set()
        if not ids:
            return found
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                for part in chunked(ids, _LOOKUP_CHUNK):
                    cur.execute(
                        f"SELECT id FROM {self._table} WHERE id IN ({placeholders(len(part))})",
                        tuple(part),
                    )
                    found.update(str(r["id"]) for r in fetchall(cur))
        except mysql.connector.Error as exc:
            logger.error("Existing-id lookup in %s failed: %s", self._table, exc)
            raise StoreLookupError("Could not check existing records. Please try again.") from exc
        return found

    def insert_many(self, records: Sequence[InsertCandidate]) -> int:
        if not records:
            return 0
        rows = [r.as_row() for r in records]
        columns = list(rows[0].keys())
        sql = (
            f"INSERT INTO {self._table}({', '.join(columns)}) "
            f"VALUES({placeholders(len(columns))})"
        )
        try:
            # Single transaction: db_cursor rolls back everything on failure.
            with db_cursor(self._conn_factory, dictionary=False) as (_, cur):
                cur.executemany(sql, [tuple(row[c] for c in columns) for row in rows])
        except mysql.connector.Error as exc:
            logger.error("Bulk insert into %s rejected: %s", self._table, exc)
            raise StoreInsertError(f"The record store rejected the import: {exc.msg}") from exc
        return len(rows)
