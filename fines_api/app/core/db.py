"""
SQLite database integration.

This module provides a connection factory (``get_connection``), the
request-scoped FastAPI dependency ``get_db`` and ``init_db``, which
creates the ``fines`` table on application start.  Every service
method receives its connection from the caller and never opens one
itself.
"""

import logging
import os
import sqlite3
from pathlib import Path
from typing import Iterator

from .config import settings

logger = logging.getLogger(__name__)


SCHEMA = """
CREATE TABLE IF NOT EXISTS fines (
    fine_id INTEGER PRIMARY KEY AUTOINCREMENT,
    offender_name TEXT NOT NULL,
    offence_type TEXT NOT NULL,
    fine_amount REAL NOT NULL,
    date_issued DATE NOT NULL,
    status TEXT NOT NULL DEFAULT 'unpaid'
        CHECK (status IN ('unpaid', 'overdue', 'paid'))
);

-- Used by the frequent offender count on insert
CREATE INDEX IF NOT EXISTS idx_fines_offender_status ON fines(offender_name, status);
"""


def get_database_path() -> str:
    """Compute the path to the SQLite database file.

    If ``settings.database_url`` is an absolute path, use it directly.
    Otherwise resolve it relative to the project root.
    """
    db_url = settings.database_url
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return str((base_dir / db_url).resolve())


def get_connection() -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    Rows are returned as ``sqlite3.Row`` so columns can be accessed by
    name.  FastAPI may open the connection in a worker thread and use it
    from the event loop thread, hence ``check_same_thread=False``; a
    connection is still never shared between two requests.
    """
    conn = sqlite3.connect(get_database_path(), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


def get_db() -> Iterator[sqlite3.Connection]:
    """FastAPI dependency yielding one connection per request."""
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


def init_db() -> None:
    """Create the ``fines`` table and its index if they do not exist."""
    conn = get_connection()
    try:
        conn.executescript(SCHEMA)
        conn.commit()
    finally:
        conn.close()
    logger.info("Database ready at %s", get_database_path())
