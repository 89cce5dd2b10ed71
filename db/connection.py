"""
SQLite connections for the Folio image store.

Every connection runs in WAL mode so layout reads never wait on an admin
write.
"""

import os
import sqlite3
from contextlib import contextmanager

DEFAULT_DB_PATH = 'folio.db'
DEFAULT_CACHE_SIZE_MB = 16


def get_db_path():
    """Database path from the DB_PATH environment variable, read per call."""
    return os.environ.get('DB_PATH', DEFAULT_DB_PATH)


def apply_pragmas(conn, cache_size_mb=None):
    """Apply the store's PRAGMA settings to a fresh connection.

    Args:
        conn: SQLite connection
        cache_size_mb: Page cache size (MB). None = DEFAULT_CACHE_SIZE_MB.
    """
    cache_kb = (cache_size_mb or DEFAULT_CACHE_SIZE_MB) * 1000
    conn.execute("PRAGMA journal_mode = WAL")
    conn.execute("PRAGMA busy_timeout = 5000")
    conn.execute("PRAGMA synchronous = NORMAL")
    conn.execute(f"PRAGMA cache_size = -{cache_kb}")  # negative = KB


def connect(db_path=None, cache_size_mb=None):
    """Open a configured connection with dict-like rows. Caller closes it."""
    conn = sqlite3.connect(db_path or get_db_path())
    apply_pragmas(conn, cache_size_mb)
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def get_connection(db_path=None, cache_size_mb=None):
    """
    Context manager around ``connect``.

    Usage:
        with get_connection() as conn:
            images = list_images(conn)
    """
    conn = connect(db_path, cache_size_mb)
    try:
        yield conn
    finally:
        conn.close()
