"""
Image descriptors for the photo grid.

Normalizes raw image records (database rows or JSON payloads) into fully
populated descriptors once at ingestion, so the packers never coalesce
defaults themselves.
"""


# Declared aspect tags and their numeric width/height values
ASPECT_TAG_VALUES = {
    '16:9': 16 / 9,
    '9:16': 9 / 16,
    '1:1': 1.0,
}
DEFAULT_ASPECT_TAG = '16:9'

# Mobile row templates (relative width split between 1-2 images)
MOBILE_ROW_TYPES = (
    '16:9-single',
    '1:1-9:16',
    '1:1-1:1',
    '9:16-9:16',
    '16:9-9:16',
)
SINGLE_ROW_TYPE = '16:9-single'

# Dimensions substituted when a bitmap cannot be loaded
FALLBACK_WIDTH = 1600
FALLBACK_HEIGHT = 900

# camelCase keys used by the admin client -> snake_case
_RECORD_ALIASES = {
    'mobileRowOrder': 'mobile_row_order',
    'mobilePosition': 'mobile_position',
    'mobileRowType': 'mobile_row_type',
    'aspectRatio': 'aspect_ratio',
}


def aspect_tag_value(tag):
    """Numeric width/height for a declared aspect tag (16:9 when unknown)."""
    return ASPECT_TAG_VALUES.get(tag, ASPECT_TAG_VALUES[DEFAULT_ASPECT_TAG])


def _as_int(value, default=0):
    if value is None or value == '':
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


class ImageDescriptor:
    """One image and its layout hints, with every optional field defaulted."""
    __slots__ = ('id', 'url', 'alt', 'order', 'mobile_row_order',
                 'mobile_position', 'mobile_row_type', 'aspect_ratio')

    def __init__(self, id, url, alt=None, order=0, mobile_row_order=0,
                 mobile_position=0, mobile_row_type=None, aspect_ratio=DEFAULT_ASPECT_TAG):
        self.id = str(id)
        self.url = url
        self.alt = alt
        self.order = _as_int(order)
        self.mobile_row_order = _as_int(mobile_row_order)
        self.mobile_position = _as_int(mobile_position)
        self.mobile_row_type = mobile_row_type if mobile_row_type in MOBILE_ROW_TYPES else None
        self.aspect_ratio = aspect_ratio if aspect_ratio in ASPECT_TAG_VALUES else DEFAULT_ASPECT_TAG

    @classmethod
    def from_record(cls, record):
        """Build a descriptor from a dict or sqlite3.Row.

        Accepts both snake_case column names and the camelCase names the
        admin client sends.
        """
        data = dict(record)
        for alias, name in _RECORD_ALIASES.items():
            if alias in data and name not in data:
                data[name] = data[alias]
        if 'id' not in data or not data.get('url'):
            raise ValueError(f"Image record needs 'id' and 'url': {data!r}")
        return cls(
            id=data['id'],
            url=data['url'],
            alt=data.get('alt'),
            order=data.get('order'),
            mobile_row_order=data.get('mobile_row_order'),
            mobile_position=data.get('mobile_position'),
            mobile_row_type=data.get('mobile_row_type'),
            aspect_ratio=data.get('aspect_ratio'),
        )

    @property
    def aspect_tag_value(self):
        return aspect_tag_value(self.aspect_ratio)

    def _key(self):
        return (self.id, self.url, self.alt, self.order, self.mobile_row_order,
                self.mobile_position, self.mobile_row_type, self.aspect_ratio)

    def __eq__(self, other):
        if not isinstance(other, ImageDescriptor):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    def __repr__(self):
        return f"ImageDescriptor(id={self.id!r}, url={self.url!r}, order={self.order})"


class ResolvedImage:
    """A descriptor enriched with the natural pixel size of its bitmap."""
    __slots__ = ('descriptor', 'width', 'height', 'is_fallback')

    def __init__(self, descriptor: ImageDescriptor, width: int, height: int, is_fallback: bool = False):
        self.descriptor = descriptor
        self.width = width
        self.height = height
        self.is_fallback = is_fallback

    @classmethod
    def fallback(cls, descriptor: ImageDescriptor) -> 'ResolvedImage':
        return cls(descriptor, FALLBACK_WIDTH, FALLBACK_HEIGHT, is_fallback=True)

    @property
    def id(self) -> str:
        return self.descriptor.id

    @property
    def calculated_aspect_ratio(self) -> float:
        return self.width / self.height

    def __getattr__(self, name):
        # Expose descriptor hints (url, mobile_row_order, ...) directly
        if name.startswith('_') or name in ResolvedImage.__slots__:
            raise AttributeError(name)
        return getattr(self.descriptor, name)

    def __repr__(self):
        return f"ResolvedImage(id={self.id!r}, {self.width}x{self.height})"


def normalize_descriptors(records):
    """Turn raw records into descriptors sorted by ``order``.

    Accepts ImageDescriptor instances or anything ``from_record`` takes.
    The sort is stable, so equal ``order`` values keep input order.
    """
    descriptors = [
        r if isinstance(r, ImageDescriptor) else ImageDescriptor.from_record(r)
        for r in records
    ]
    return sorted(descriptors, key=lambda d: d.order)


def find_row_type_conflicts(descriptors) -> dict:
    """Find mobile rows whose images declare different row types.

    Returns {mobile_row_order: [declared types in position order]} for every
    conflicting row. Images with no declared type are ignored.
    """
    declared = {}
    for d in sorted(descriptors, key=lambda d: (d.mobile_row_order, d.mobile_position)):
        if d.mobile_row_type is None:
            continue
        declared.setdefault(d.mobile_row_order, []).append(d.mobile_row_type)
    return {row: types for row, types in declared.items() if len(set(types)) > 1}


def source_index(records) -> dict:
    """Map image id -> index in the original descriptor order."""
    index = {}
    for i, r in enumerate(records):
        image_id = r.id if isinstance(r, (ImageDescriptor, ResolvedImage)) else str(dict(r)['id'])
        index.setdefault(image_id, i)
    return index
