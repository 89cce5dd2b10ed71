"""
Database access for FastAPI routes.

Connections are opened per request; the image store is small and every
query is a single indexed read or write.
"""

from contextlib import contextmanager

from api import config as api_config
from db import connect


@contextmanager
def get_db():
    """Context manager for a request's connection.

    Honors the optional ``performance.cache_size_mb`` override in
    folio_config.json.
    """
    perf = api_config.FULL_CONFIG.get('performance', {})
    conn = connect(cache_size_mb=perf.get('cache_size_mb'))
    try:
        yield conn
    finally:
        conn.close()
