"""Registry store — durable key/value entries persisted to SQLite."""

from __future__ import annotations

import json
import logging
import sqlite3
from typing import Any

logger = logging.getLogger(__name__)


class RegistryStore:
    """CRUD wrapper around the ``registry_entries`` table.

    Every instance is bound to one *partition*; keys from other partitions
    are invisible to it.  Values are any JSON-serialisable object.

    Args:
        conn:      An open :class:`sqlite3.Connection` (WAL mode recommended).
        partition: Partition name the store reads and writes.
    """

    def __init__(self, conn: sqlite3.Connection, partition: str = "global") -> None:
        self._conn = conn
        self.partition = partition

    def put(self, key: str, value: Any) -> None:
        """Insert or overwrite the entry for *key*."""
        self._conn.execute(
            """
            INSERT INTO registry_entries (partition, key, value, updated_at)
            VALUES (?, ?, ?, CURRENT_TIMESTAMP)
            ON CONFLICT(partition, key) DO UPDATE SET
                value      = excluded.value,
                updated_at = CURRENT_TIMESTAMP
            """,
            (self.partition, key, json.dumps(value)),
        )
        self._conn.commit()
        logger.debug("put partition=%s key=%s", self.partition, key)

    def get(self, key: str) -> Any | None:
        """Return the value stored under *key*, or ``None``."""
        cur = self._conn.execute(
            "SELECT value FROM registry_entries WHERE partition = ? AND key = ?",
            (self.partition, key),
        )
        row = cur.fetchone()
        return json.loads(row[0]) if row else None

    def delete(self, key: str) -> None:
        """Remove *key*; a missing key is not an error."""
        self._conn.execute(
            "DELETE FROM registry_entries WHERE partition = ? AND key = ?",
            (self.partition, key),
        )
        self._conn.commit()
        logger.debug("delete partition=%s key=%s", self.partition, key)

    def list_by_prefix(self, prefix: str = "") -> list[tuple[str, Any]]:
        """Return ``(key, value)`` pairs whose key starts with *prefix*.

        Ordered by key.  An empty *prefix* selects every entry; no match
        yields an empty list.  Matching is literal and case-sensitive.
        """
        cur = self._conn.execute(
            """
            SELECT key, value FROM registry_entries
             WHERE partition = ? AND substr(key, 1, length(?)) = ?
             ORDER BY key
            """,
            (self.partition, prefix, prefix),
        )
        return [(row[0], json.loads(row[1])) for row in cur.fetchall()]
