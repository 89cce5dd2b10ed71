"""
Layout router: photo grid render plan and per-session reveal state.

"""

from collections import OrderedDict
from typing import Optional
from fastapi import APIRouter, HTTPException, Query

from api import config as api_config
from api.database import get_db
from api.models.images import LayoutResponse, RevealRequest, RevealResponse
from db import list_images
from layout import (
    DEVICE_MODES, DimensionResolver, VisibilityState,
    apply_visibility, compute_layout, device_mode_for,
)

router = APIRouter(prefix="/api/layout", tags=["layout"])

# Dimensions shared by every request's resolver (url -> (width, height))
_dimension_cache = {}

# session id -> VisibilityState, least recently used first
_visibility_sessions = OrderedDict()


def get_visibility(session: Optional[str]) -> VisibilityState:
    if not session:
        return VisibilityState()
    state = _visibility_sessions.get(session)
    if state is None:
        return VisibilityState()
    _visibility_sessions.move_to_end(session)
    return state


def store_visibility(session: str, state: VisibilityState):
    _visibility_sessions[session] = state
    _visibility_sessions.move_to_end(session)
    max_sessions = api_config.SITE_CONFIG['max_sessions']
    while len(_visibility_sessions) > max_sessions:
        _visibility_sessions.popitem(last=False)


def clear_layout_caches():
    """Forget memoized dimensions and every session's reveal state."""
    _dimension_cache.clear()
    _visibility_sessions.clear()


async def _resolve_images(records):
    settings = api_config.GRID_CONFIG.get_resolver_settings()
    resolver = DimensionResolver(
        max_concurrency=settings['max_concurrency'],
        upload_dir=api_config.SITE_CONFIG['upload_dir'],
        timeout=settings['timeout_seconds'],
        dimension_cache=_dimension_cache,
    )
    try:
        # Each request owns its resolver, so its batch is never superseded
        return await resolver.resolve(records)
    finally:
        await resolver.aclose()


@router.get("", response_model=LayoutResponse)
async def api_layout(
    width: float = Query(0, ge=0, description="Container width in px"),
    viewport: Optional[float] = Query(None, ge=0, description="Viewport width in px"),
    mode: Optional[str] = Query(None),
    session: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
):
    """Render plan for the stored images.

    ``mode`` defaults from the viewport width (or the container width)
    against the mobile breakpoint.
    """
    if mode is not None and mode not in DEVICE_MODES:
        raise HTTPException(status_code=400, detail=f"mode must be one of {list(DEVICE_MODES)}")
    if mode is None:
        breakpoint = api_config.GRID_CONFIG.get_grid_settings()['mobile_breakpoint_px']
        mode = device_mode_for(viewport if viewport is not None else width, breakpoint)

    with get_db() as conn:
        records = list_images(conn, category=category)

    images = await _resolve_images(records)
    plan = compute_layout(images, mode, width, config=api_config.GRID_CONFIG, source_order=records)
    apply_visibility(plan, get_visibility(session))
    return plan.to_dict()


@router.post("/reveal", response_model=RevealResponse)
async def api_reveal(body: RevealRequest):
    """Record that an image entered the viewport in this session."""
    state = get_visibility(body.session).reveal(body.image_id)
    store_visibility(body.session, state)
    return RevealResponse(session=body.session, revealed=state.to_list())


@router.get("/reveal", response_model=RevealResponse)
async def api_reveal_state(session: str = Query(...)):
    return RevealResponse(session=session, revealed=get_visibility(session).to_list())
