"""
Desktop row packer.

Greedy single pass: images are laid out at a nominal row height and a row
is closed as soon as the next image would overflow the container. Each row
is then rescaled so its widths sum exactly to the container width.
"""

from layout.plan import DESKTOP, Row, RowItem
from layout.reveal import reveal_delay_ms

DEFAULT_ROW_HEIGHT = 300


def pack_rows(images, container_width, row_height=DEFAULT_ROW_HEIGHT):
    """Group images into rows without reordering them.

    Args:
        images: ResolvedImage sequence, already in ``order`` sequence
        container_width: Available width in px. <= 0 means not measured yet.
        row_height: Nominal row height used for packing

    Returns:
        list of lists of ResolvedImage. An image wider than the container
        still gets a row of its own.
    """
    if not images or container_width <= 0:
        return []

    rows = []
    current_row = []
    current_width = 0.0

    for image in images:
        image_width = row_height * image.calculated_aspect_ratio
        if current_width + image_width <= container_width:
            current_row.append(image)
            current_width += image_width
        else:
            if current_row:
                rows.append(current_row)
            current_row = [image]
            current_width = image_width

    if current_row:
        rows.append(current_row)
    return rows


def scale_row(row, container_width):
    """Return (row_height, [widths]) so the row fills ``container_width``.

    Returns None for a row whose ratio sum is not positive.
    """
    total_ratio = sum(image.calculated_aspect_ratio for image in row)
    if total_ratio <= 0:
        return None
    scaled_height = container_width / total_ratio
    return scaled_height, [scaled_height * image.calculated_aspect_ratio for image in row]


def build_desktop_rows(images, container_width, row_height=DEFAULT_ROW_HEIGHT,
                       index_of=None, stagger_ms=50):
    """Pack and rescale images into renderable desktop rows.

    ``index_of`` maps image id -> index in the original descriptor order and
    drives the reveal stagger; position in ``images`` is used when omitted.
    """
    if index_of is None:
        index_of = {image.id: i for i, image in enumerate(images)}

    rows = []
    for packed in pack_rows(images, container_width, row_height):
        scaled = scale_row(packed, container_width)
        if scaled is None:
            continue
        scaled_height, widths = scaled
        items = []
        for image, width in zip(packed, widths):
            index = index_of.get(image.id, 0)
            items.append(RowItem(
                image_id=image.id,
                url=image.url,
                alt=image.alt,
                index=index,
                width=width,
                height=scaled_height,
                aspect_ratio=image.calculated_aspect_ratio,
                reveal_delay_ms=reveal_delay_ms(index, stagger_ms),
            ))
        rows.append(Row(items, DESKTOP, height=scaled_height))
    return rows
