# archive_backend/features/admin/routes.py

# This file defines FastAPI API endpoints for the admin feature: staff-only
# management of archive items. Every route requires an admin or supervisor
# session; the page gate is not relied on here.

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query

from ...models.auth import SessionData
from ..user.auth.dependencies import require_staff
from . import service as admin_service

# --- Define API Router for this feature ---
router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    dependencies=[Depends(require_staff)],
)


@router.post("/add")
async def add_archive_item(
    payload: Dict[str, Any] = Body(...),
    session: SessionData = Depends(require_staff),
) -> Dict[str, Any]:
    """
    Creates an archive item. The payload's 'category' (key or URL slug)
    selects which optional field set is accepted.
    """
    print(f"Add item request from user {session.user_id} for category: {payload.get('category')}")
    slug = await admin_service.add_item(session, payload)
    return {"success": True, "slug": slug}


# Declared before /{item_id} so the literal path wins
@router.get("/content-management")
async def content_management(
    q: Optional[str] = Query(None),
    page: Optional[str] = Query(None),
    session: SessionData = Depends(require_staff),
) -> Dict[str, Any]:
    return await admin_service.list_my_items(session, q, page)


@router.get("/{item_id}")
async def get_archive_item(item_id: str) -> Dict[str, Any]:
    return await admin_service.get_item(item_id)


@router.put("/{item_id}")
async def update_archive_item(
    item_id: str,
    payload: Dict[str, Any] = Body(...),
    session: SessionData = Depends(require_staff),
) -> Dict[str, Any]:
    slug = await admin_service.update_item(session, item_id, payload)
    return {"success": True, "slug": slug}


@router.delete("/{item_id}")
async def delete_archive_item(
    item_id: str,
    session: SessionData = Depends(require_staff),
) -> Dict[str, Any]:
    await admin_service.delete_item(session, item_id)
    return {"success": True}
