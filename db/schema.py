"""
Database schema definitions and initialization for Folio.

Single source of truth for table and index definitions.
"""

import sqlite3

from db.connection import get_connection

# Schema definitions as (name, type_definition) tuples
# Type definition includes any defaults or constraints

IMAGES_COLUMNS = [
    ('id', 'TEXT PRIMARY KEY'),
    ('section_id', 'TEXT'),
    ('url', 'TEXT NOT NULL'),
    ('alt', "TEXT DEFAULT ''"),
    ('title', "TEXT DEFAULT ''"),
    ('description', "TEXT DEFAULT ''"),
    ('width', 'INTEGER'),
    ('height', 'INTEGER'),
    ('display_order', 'INTEGER DEFAULT 0'),
    ('category', 'TEXT'),
    ('tags', "TEXT DEFAULT '[]'"),  # JSON array of strings
    ('featured', 'INTEGER DEFAULT 0 CHECK (featured IN (0, 1))'),

    # Mobile layout hints
    ('mobile_row_type', "TEXT CHECK (mobile_row_type IS NULL OR mobile_row_type IN "
                        "('16:9-single', '1:1-9:16', '1:1-1:1', '9:16-9:16', '16:9-9:16'))"),
    ('mobile_row_order', 'INTEGER'),
    ('mobile_position', 'INTEGER'),
    ('aspect_ratio', "TEXT CHECK (aspect_ratio IS NULL OR aspect_ratio IN ('16:9', '9:16', '1:1'))"),

    ('created_at', 'TEXT DEFAULT CURRENT_TIMESTAMP'),
    ('updated_at', 'TEXT DEFAULT CURRENT_TIMESTAMP'),
]

INDEXES = [
    ('idx_images_order', 'images', 'display_order'),
    ('idx_images_mobile_row', 'images', 'mobile_row_order, mobile_position'),
    ('idx_images_category', 'images', 'category'),
    ('idx_images_section', 'images', 'section_id'),
]


def _build_create_table_sql(table_name, columns, constraints=None):
    """Build CREATE TABLE IF NOT EXISTS SQL from column definitions."""
    col_defs = [f'{name} {typedef}' for name, typedef in columns]
    if constraints:
        col_defs.extend(constraints)
    cols_sql = ',\n                    '.join(col_defs)
    return f'''CREATE TABLE IF NOT EXISTS {table_name} (
                    {cols_sql}
                )'''


def _migrate_add_missing_columns(conn, table_name, columns):
    """Add any missing columns to an existing table.

    Args:
        conn: SQLite connection
        table_name: Name of the table to migrate
        columns: List of (name, type_definition) tuples defining expected columns
    """
    cursor = conn.execute(f"PRAGMA table_info({table_name})")
    existing_cols = {row[1] for row in cursor.fetchall()}

    for col_name, col_type in columns:
        if col_name not in existing_cols:
            # Extract base type (without constraints/defaults for ALTER TABLE)
            base_type = col_type.split()[0] if col_type else 'TEXT'
            try:
                conn.execute(f"ALTER TABLE {table_name} ADD COLUMN {col_name} {base_type}")
                print(f"  Added column: {table_name}.{col_name}")
            except sqlite3.OperationalError as e:
                if 'duplicate column name' not in str(e).lower():
                    print(f"  Warning: Could not add {table_name}.{col_name}: {e}")


def init_database(db_path=None):
    """
    Initialize the database schema (idempotent).

    Safe to call on existing databases: columns added since the table was
    created are appended with ALTER TABLE.

    Args:
        db_path: Path to the SQLite database file (DB_PATH env var when None)
    """
    with get_connection(db_path) as conn:
        conn.execute(_build_create_table_sql('images', IMAGES_COLUMNS))
        _migrate_add_missing_columns(conn, 'images', IMAGES_COLUMNS)

        for idx_name, table, column_expr in INDEXES:
            conn.execute(
                f'CREATE INDEX IF NOT EXISTS {idx_name} ON {table}({column_expr})'
            )

        conn.commit()
