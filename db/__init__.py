"""
Folio database package.

Re-exports public API.
"""

from db.connection import (
    get_connection, connect, apply_pragmas, get_db_path, DEFAULT_DB_PATH, DEFAULT_CACHE_SIZE_MB,
)
from db.schema import (
    init_database,
    IMAGES_COLUMNS, INDEXES,
    _build_create_table_sql, _migrate_add_missing_columns,
)
from db.images import (
    list_images, get_image, create_image, update_image, delete_image, reorder_images,
    row_to_image, UPDATABLE_FIELDS,
)
