# archive_backend/features/archive/routes.py

# Public read-only API endpoints: taxonomy, category pages, entries and search.

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Query

from ...models.archive_item import describe_categories
from . import resolver
from . import search as archive_search
from . import service as archive_service

router = APIRouter(
    prefix="/api",
    tags=["archive"]
)


@router.get("/archive/categories")
async def list_categories() -> List[Dict[str, Any]]:
    """Category table used by clients to build category-aware forms."""
    return describe_categories()


@router.get("/archive/{category}")
async def category_page(category: str) -> Dict[str, Any]:
    """
    Either {type: "sub-categories", subTypes} when the category's items carry
    sub-type values, or {type: "list", items}.
    """
    category_key = archive_service.require_category(category)
    return await resolver.resolve_category_view(category_key)


@router.get("/archive/{category}/{sub_type}")
async def sub_type_page(category: str, sub_type: str) -> Dict[str, Any]:
    category_key = archive_service.require_category(category)
    return await resolver.list_sub_type_items(category_key, sub_type)


@router.get("/entry/{slug}")
async def entry_detail(slug: str) -> Dict[str, Any]:
    return await archive_service.get_entry(slug)


@router.get("/search")
async def search(q: Optional[str] = Query(None), page: Optional[str] = Query(None)) -> Dict[str, Any]:
    return await archive_search.search_items(q, page)
