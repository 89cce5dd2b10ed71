"""
Render plan produced by a layout pass.

Desktop items carry pixel sizes; mobile items carry a width percentage and
the aspect ratio the box is forced to.
"""

from typing import List, Optional

DESKTOP = 'desktop'
MOBILE = 'mobile'
DEVICE_MODES = (DESKTOP, MOBILE)


class RowItem:
    """One sized box in a row."""
    __slots__ = ('image_id', 'url', 'alt', 'index', 'width', 'height',
                 'width_percent', 'aspect_ratio', 'reveal_delay_ms', 'revealed')

    def __init__(self, image_id, url, alt=None, index=0, width=None, height=None,
                 width_percent=None, aspect_ratio=None, reveal_delay_ms=0, revealed=False):
        self.image_id = image_id
        self.url = url
        self.alt = alt
        self.index = index
        self.width = width
        self.height = height
        self.width_percent = width_percent
        self.aspect_ratio = aspect_ratio
        self.reveal_delay_ms = reveal_delay_ms
        self.revealed = revealed

    def to_dict(self):
        return {
            'image_id': self.image_id,
            'url': self.url,
            'alt': self.alt or 'Photography',
            'index': self.index,
            'width': self.width,
            'height': self.height,
            'width_percent': self.width_percent,
            'aspect_ratio': self.aspect_ratio,
            'reveal_delay_ms': self.reveal_delay_ms,
            'revealed': self.revealed,
        }


class Row:
    """A horizontal group of items that fills the container width."""
    __slots__ = ('items', 'height', 'mode')

    def __init__(self, items: List[RowItem], mode: str, height: Optional[float] = None):
        self.items = items
        self.mode = mode
        self.height = height

    @property
    def image_ids(self):
        return [item.image_id for item in self.items]

    def total_width(self):
        return sum(item.width or 0 for item in self.items)

    def total_percent(self):
        return sum(item.width_percent or 0 for item in self.items)

    def to_dict(self):
        return {
            'height': self.height,
            'items': [item.to_dict() for item in self.items],
        }


class LayoutPlan:
    """Ordered rows for one layout pass."""
    __slots__ = ('mode', 'container_width', 'rows')

    def __init__(self, mode: str, container_width: float, rows: List[Row]):
        self.mode = mode
        self.container_width = container_width
        self.rows = rows

    @property
    def image_ids(self):
        return [image_id for row in self.rows for image_id in row.image_ids]

    def __len__(self):
        return len(self.rows)

    def to_dict(self):
        return {
            'mode': self.mode,
            'container_width': self.container_width,
            'row_count': len(self.rows),
            'rows': [row.to_dict() for row in self.rows],
        }
