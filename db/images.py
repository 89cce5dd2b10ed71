"""
Image table access for Folio.

Plain functions over an open connection; callers own commit/close.
"""

import json
import uuid

# API field name -> column name, for fields that differ
_FIELD_COLUMNS = {'order': 'display_order'}

UPDATABLE_FIELDS = (
    'section_id', 'url', 'alt', 'title', 'description', 'width', 'height',
    'order', 'category', 'tags', 'featured', 'mobile_row_type', 'mobile_row_order',
    'mobile_position', 'aspect_ratio',
)


def _column(field):
    return _FIELD_COLUMNS.get(field, field)


def _encode_values(values):
    """Convert API values to their stored form (in place)."""
    if values.get('featured') is not None:
        values['featured'] = 1 if values['featured'] else 0
    if 'tags' in values:
        values['tags'] = json.dumps(list(values['tags'] or []))
    return values


def _decode_tags(raw):
    # NULL on rows created before the column existed
    return json.loads(raw) if raw else []


def row_to_image(row):
    """Convert an images row into the API/engine dict shape."""
    if row is None:
        return None
    data = dict(row)
    data['order'] = data.pop('display_order', 0) or 0
    data['featured'] = bool(data.get('featured'))
    data['tags'] = _decode_tags(data.get('tags'))
    return data


def list_images(conn, category=None, featured=None, section_id=None):
    """All images ordered by display order (ties by creation)."""
    where = []
    params = []
    if section_id:
        where.append("section_id = ?")
        params.append(section_id)
    if category:
        where.append("category = ?")
        params.append(category)
    if featured is not None:
        where.append("featured = ?")
        params.append(1 if featured else 0)
    where_sql = f"WHERE {' AND '.join(where)}" if where else ''
    rows = conn.execute(
        f"SELECT * FROM images {where_sql} ORDER BY display_order ASC, created_at ASC, rowid ASC",
        params
    ).fetchall()
    return [row_to_image(r) for r in rows]


def get_image(conn, image_id):
    row = conn.execute("SELECT * FROM images WHERE id = ?", (image_id,)).fetchone()
    return row_to_image(row)


def create_image(conn, fields):
    """Insert an image and return it. ``fields`` uses API field names."""
    image_id = fields.get('id') or uuid.uuid4().hex
    values = _encode_values({k: v for k, v in fields.items() if k in UPDATABLE_FIELDS and v is not None})
    columns = ['id'] + [_column(k) for k in values]
    placeholders = ', '.join('?' for _ in columns)
    conn.execute(
        f"INSERT INTO images ({', '.join(columns)}) VALUES ({placeholders})",
        [image_id] + list(values.values())
    )
    return get_image(conn, image_id)


def update_image(conn, image_id, fields):
    """Apply a partial update. Returns the updated image, or None if unknown."""
    values = _encode_values({k: v for k, v in fields.items() if k in UPDATABLE_FIELDS})
    if values:
        assignments = ', '.join(f"{_column(k)} = ?" for k in values)
        cursor = conn.execute(
            f"UPDATE images SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            list(values.values()) + [image_id]
        )
        if cursor.rowcount == 0:
            return None
    return get_image(conn, image_id)


def delete_image(conn, image_id):
    """Delete an image. Returns True if a row was removed."""
    cursor = conn.execute("DELETE FROM images WHERE id = ?", (image_id,))
    return cursor.rowcount > 0


def reorder_images(conn, image_ids):
    """Set display order to each id's position in ``image_ids``.

    Returns the number of rows updated.
    """
    updated = 0
    for order, image_id in enumerate(image_ids):
        cursor = conn.execute(
            "UPDATE images SET display_order = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            (order, image_id)
        )
        updated += cursor.rowcount
    return updated
