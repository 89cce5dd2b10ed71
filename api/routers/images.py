"""
Images router: portfolio image listing, create/update/delete, reorder.

"""

from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query

from api.auth import CurrentUser, require_admin
from api.database import get_db
from api.models.images import Image, ImageCreate, ImageUpdate, ReorderRequest
from db import (
    list_images, get_image, create_image, update_image, delete_image, reorder_images,
)
from layout import ImageDescriptor, find_row_type_conflicts

router = APIRouter(prefix="/api/images", tags=["images"])


def _check_row_type_conflict(conn, candidate):
    """Raise 422 if ``candidate`` would give its mobile row two row types."""
    if not candidate.get('mobile_row_type'):
        return
    others = [img for img in list_images(conn) if img['id'] != candidate['id']]
    descriptors = [ImageDescriptor.from_record(img) for img in others + [candidate]]
    conflicts = find_row_type_conflicts(descriptors)
    row = ImageDescriptor.from_record(candidate).mobile_row_order
    if row in conflicts:
        raise HTTPException(
            status_code=422,
            detail=f"Mobile row {row} already uses row type(s) "
                   f"{sorted(set(conflicts[row]) - {candidate['mobile_row_type']})}",
        )


@router.get("", response_model=List[Image])
async def api_list_images(
    category: Optional[str] = Query(None),
    featured: Optional[bool] = Query(None),
    section_id: Optional[str] = Query(None),
    section_id_camel: Optional[str] = Query(None, alias="sectionId"),
):
    """List images ordered by display order.

    ``featured=false`` does not filter; only featured images can be selected.
    """
    with get_db() as conn:
        return list_images(conn, category=category, featured=featured if featured else None,
                           section_id=section_id or section_id_camel)


@router.get("/{image_id}", response_model=Image)
async def api_get_image(image_id: str):
    with get_db() as conn:
        image = get_image(conn, image_id)
    if image is None:
        raise HTTPException(status_code=404, detail="Image not found")
    return image


@router.post("", response_model=Image, status_code=201)
async def api_create_image(body: ImageCreate, user: CurrentUser = Depends(require_admin)):
    """Create an image record."""
    if not body.url:
        raise HTTPException(status_code=400, detail="Image URL is required")
    fields = body.model_dump()
    with get_db() as conn:
        _check_row_type_conflict(conn, {'id': '', **fields})
        image = create_image(conn, fields)
        conn.commit()
        return image


@router.put("/reorder")
async def api_reorder_images(body: ReorderRequest, user: CurrentUser = Depends(require_admin)):
    """Set the display order from the position of each id in the list."""
    with get_db() as conn:
        updated = reorder_images(conn, body.ids)
        conn.commit()
    return {'success': True, 'updated': updated}


@router.put("/{image_id}", response_model=Image)
async def api_update_image(image_id: str, body: ImageUpdate,
                           user: CurrentUser = Depends(require_admin)):
    """Partially update an image."""
    fields = body.model_dump(exclude_unset=True)
    if 'url' in fields and not fields['url']:
        raise HTTPException(status_code=400, detail="Image URL cannot be empty")
    with get_db() as conn:
        existing = get_image(conn, image_id)
        if existing is None:
            raise HTTPException(status_code=404, detail="Image not found")
        _check_row_type_conflict(conn, {**existing, **fields})
        image = update_image(conn, image_id, fields)
        conn.commit()
        return image


@router.delete("/{image_id}")
async def api_delete_image(image_id: str, user: CurrentUser = Depends(require_admin)):
    with get_db() as conn:
        deleted = delete_image(conn, image_id)
        conn.commit()
    if not deleted:
        raise HTTPException(status_code=404, detail="Image not found")
    return {'message': 'Image deleted successfully'}
