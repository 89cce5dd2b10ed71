"""
Layout pass for the photo grid.

compute_layout is the pure entry point: resolved images + device mode +
container width in, render plan out. GridController keeps the state a host
view needs between passes (descriptors, resolved dimensions, width, mode,
revealed ids) and re-runs the pass when any of them changes.
"""

import logging

from config import GridConfig
from layout.descriptors import find_row_type_conflicts, normalize_descriptors, source_index
from layout.desktop import build_desktop_rows
from layout.mobile import build_mobile_rows
from layout.plan import DESKTOP, DEVICE_MODES, MOBILE, LayoutPlan
from layout.resolver import DimensionResolver
from layout.reveal import VisibilityState


def device_mode_for(viewport_width, breakpoint=768):
    """'mobile' below the breakpoint, 'desktop' otherwise."""
    return MOBILE if viewport_width < breakpoint else DESKTOP


def compute_layout(images, mode, container_width, config=None, source_order=None):
    """Run one layout pass.

    Args:
        images: ResolvedImage sequence in ``order`` sequence
        mode: 'desktop' or 'mobile'
        container_width: Container width in px (desktop rows fill it exactly).
            0 means not measured yet and yields no rows.
        config: GridConfig (defaults when None)
        source_order: Records in the order the host received them; drives the
            reveal stagger. Defaults to ``images``.

    Returns:
        LayoutPlan
    """
    if mode not in DEVICE_MODES:
        raise ValueError(f"Unknown device mode: {mode!r}")
    config = config or GridConfig(config={})
    grid = config.get_grid_settings()
    stagger_ms = config.get_reveal_settings()['stagger_ms']
    index_of = source_index(source_order if source_order is not None else images)

    if container_width <= 0:
        # Container not measured yet; defer layout in both modes
        rows = []
    elif mode == MOBILE:
        rows = build_mobile_rows(images, index_of=index_of, stagger_ms=stagger_ms)
    else:
        rows = build_desktop_rows(images, container_width, row_height=grid['row_height_px'],
                                  index_of=index_of, stagger_ms=stagger_ms)
    return LayoutPlan(mode, container_width, rows)


def apply_visibility(plan, state):
    """Mark each item of ``plan`` with its revealed flag from ``state``."""
    for row in plan.rows:
        for item in row.items:
            item.revealed = state.is_revealed(item.image_id)
    return plan


class GridController:
    """
    State holder for one rendered grid.

    Usage:
        controller = GridController(config=GridConfig())
        await controller.set_images(records)
        controller.set_container_width(1280)
        plan = controller.layout()
    """

    def __init__(self, resolver=None, config=None, state=None):
        self.config = config or GridConfig()
        if resolver is None:
            settings = self.config.get_resolver_settings()
            resolver = DimensionResolver(max_concurrency=settings['max_concurrency'],
                                         timeout=settings['timeout_seconds'])
        self.resolver = resolver
        self.state = state if state is not None else VisibilityState()
        self.records = []
        self.images = []
        self.container_width = 0
        self.mode = DESKTOP

    async def set_images(self, records):
        """Resolve dimensions for a new descriptor list.

        Returns True when this batch was committed, False when a newer
        call superseded it.
        """
        records = list(records)
        conflicts = find_row_type_conflicts(normalize_descriptors(records))
        for row, types in conflicts.items():
            logging.warning(f"Mobile row {row} declares conflicting row types {types}; "
                            f"using {types[0]!r}")
        resolved = await self.resolver.resolve(records)
        if resolved is None:
            return False
        self.records = records
        self.images = resolved
        return True

    def set_container_width(self, width):
        self.container_width = max(width or 0, 0)

    def set_viewport_width(self, viewport_width):
        """Pick the device mode from the viewport width."""
        breakpoint = self.config.get_grid_settings()['mobile_breakpoint_px']
        self.mode = device_mode_for(viewport_width, breakpoint)

    def set_mode(self, mode):
        if mode not in DEVICE_MODES:
            raise ValueError(f"Unknown device mode: {mode!r}")
        self.mode = mode

    def mark_revealed(self, image_id):
        self.state = self.state.reveal(image_id)
        return self.state

    def layout(self):
        """Layout pass over the current state, with reveal flags applied."""
        plan = compute_layout(self.images, self.mode, self.container_width,
                              config=self.config, source_order=self.records)
        return apply_visibility(plan, self.state)

    async def aclose(self):
        await self.resolver.aclose()
