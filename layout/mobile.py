"""
Mobile row composer.

Rows come from authoring hints rather than measured packing: images are
grouped by ``mobile_row_order``, ordered by ``mobile_position`` and split
according to the row template. Box shapes follow the declared aspect tag,
not the decoded bitmap.
"""

from layout.descriptors import SINGLE_ROW_TYPE
from layout.plan import MOBILE, Row, RowItem
from layout.reveal import reveal_delay_ms


def group_mobile_rows(images):
    """Group images into rows keyed by ``mobile_row_order``.

    Rows are ordered by key ascending; images inside a row by
    ``mobile_position`` ascending, ties keeping input order.
    """
    groups = {}
    for image in images:
        groups.setdefault(image.mobile_row_order, []).append(image)
    return [
        sorted(groups[key], key=lambda image: image.mobile_position)
        for key in sorted(groups)
    ]


def row_template(row):
    """Template of a row; the first image's declared type wins."""
    return row[0].mobile_row_type if row else None


def width_percentages(row):
    """Width of each image in the row as a percentage of the container."""
    if not row:
        return []
    if row_template(row) == SINGLE_ROW_TYPE:
        return [100.0]
    values = [image.aspect_tag_value for image in row]
    total = sum(values)
    return [value / total * 100 for value in values]


def _split_single_rows(rows):
    # A single-image template holding several images stacks them full width
    for row in rows:
        if row_template(row) == SINGLE_ROW_TYPE and len(row) > 1:
            for image in row:
                yield [image]
        else:
            yield row


def build_mobile_rows(images, index_of=None, stagger_ms=50):
    """Compose renderable mobile rows with percentage widths."""
    if index_of is None:
        index_of = {image.id: i for i, image in enumerate(images)}

    rows = []
    for row in _split_single_rows(group_mobile_rows(images)):
        items = []
        for image, percent in zip(row, width_percentages(row)):
            index = index_of.get(image.id, 0)
            items.append(RowItem(
                image_id=image.id,
                url=image.url,
                alt=image.alt,
                index=index,
                width_percent=percent,
                aspect_ratio=image.aspect_tag_value,
                reveal_delay_ms=reveal_delay_ms(index, stagger_ms),
            ))
        rows.append(Row(items, MOBILE))
    return rows
