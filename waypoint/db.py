"""SQLite storage for Waypoint.

The registry's durable key-value primitive is one table in one database
file.  A process holds a single connection to it; every partition's
coordinator shares that connection and serializes its own access.

The file lives at ``<data_dir>/waypoint.db`` where ``data_dir`` comes from
:class:`~waypoint.config.RegistryConfig` (``WAYPOINT_DATA_DIR``, default
``./data``) unless :func:`configure` or :func:`set_db_path` says otherwise.

Usage::

    from waypoint.db import configure, get_db
    configure(config.data_dir)
    conn = get_db()            # opened and migrated on first use
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from pathlib import Path

logger = logging.getLogger(__name__)

DB_FILENAME = "waypoint.db"

_DB_PATH: Path | None = None
_CONN: sqlite3.Connection | None = None
_CONN_LOCK = threading.Lock()


def _default_path() -> Path:
    from waypoint.config import RegistryConfig

    return Path(RegistryConfig.from_env().data_dir) / DB_FILENAME


def configure(data_dir: str | Path) -> Path:
    """Point the process at ``<data_dir>/waypoint.db``, creating the directory."""
    data_dir = Path(data_dir)
    data_dir.mkdir(parents=True, exist_ok=True)
    path = data_dir / DB_FILENAME
    set_db_path(path)
    return path


def set_db_path(path: str | Path) -> None:
    """Use *path* from now on; an already open connection is closed."""
    global _DB_PATH
    with _CONN_LOCK:
        _close_locked()
        _DB_PATH = Path(path)


def get_db() -> sqlite3.Connection:
    """Return the process-wide connection, opening it on first use."""
    global _CONN, _DB_PATH
    with _CONN_LOCK:
        if _CONN is None:
            if _DB_PATH is None:
                _DB_PATH = _default_path()
                _DB_PATH.parent.mkdir(parents=True, exist_ok=True)
            # Opened on one thread, used on the event loop's
            _CONN = sqlite3.connect(str(_DB_PATH), check_same_thread=False)
            _CONN.row_factory = sqlite3.Row
            _CONN.execute("PRAGMA journal_mode=WAL")
            _create_schema(_CONN)
            _CONN.commit()
            logger.debug("opened registry database %s", _DB_PATH)
        return _CONN


def init_db(path: str | Path | None = None) -> None:
    """Open the database and create tables (idempotent)."""
    if path:
        set_db_path(path)
    get_db()


def close_db() -> None:
    with _CONN_LOCK:
        _close_locked()


def _close_locked() -> None:
    global _CONN
    if _CONN is not None:
        _CONN.close()
        _CONN = None


_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS registry_entries (
    partition   TEXT NOT NULL,
    key         TEXT NOT NULL,
    value       TEXT NOT NULL,
    updated_at  TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY (partition, key)
);
"""


def _create_schema(conn: sqlite3.Connection) -> None:
    conn.executescript(_SCHEMA_SQL)
