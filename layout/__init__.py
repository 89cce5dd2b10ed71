"""
Folio photo-grid layout engine.

Re-exports public API for the host view and the API server.
"""

from layout.descriptors import (
    ImageDescriptor, ResolvedImage,
    ASPECT_TAG_VALUES, DEFAULT_ASPECT_TAG, MOBILE_ROW_TYPES, SINGLE_ROW_TYPE,
    FALLBACK_WIDTH, FALLBACK_HEIGHT,
    aspect_tag_value, normalize_descriptors, find_row_type_conflicts, source_index,
)
from layout.plan import Row, RowItem, LayoutPlan, DESKTOP, MOBILE, DEVICE_MODES
from layout.reveal import (
    VisibilityState, ViewportObserver, ManualViewportObserver, RevealTracker,
    reveal_delay_ms,
)
from layout.desktop import pack_rows, scale_row, build_desktop_rows, DEFAULT_ROW_HEIGHT
from layout.mobile import group_mobile_rows, row_template, width_percentages, build_mobile_rows
from layout.resolver import DimensionResolver, probe, probe_dimensions, local_path_for
from layout.engine import GridController, compute_layout, device_mode_for, apply_visibility
