# archive_backend/features/archive/search.py

# Full-text style search over archive items. MongoDB selects candidates with
# case-insensitive regex matches; ranking and pagination happen here.

import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ...config.settings import settings
from ...db import mongo_client as database
from ...shared.utils import as_utc, parse_page, total_pages
from .resolver import present_items

# Category-specific text fields searched in addition to the shared ones
SEARCH_TEXT_FIELDS = (
    "subType", "profession", "education", "achievements", "address", "period",
    "significance", "involvedParties", "foundedBy", "missionStatement",
    "traditionalName", "toolsUsed", "headOfInstitution", "transportType",
    "destinations", "serviceType", "entryFee", "bestTimeToVisit", "sectorNo",
    "currentStatus", "occupationStatus",
)

TEXT_BLOCK_TYPES = ("paragraph", "heading", "list", "quote")

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def build_search_query(term: str) -> Dict[str, Any]:
    pattern = {"$regex": re.escape(term), "$options": "i"}
    clauses: List[Dict[str, Any]] = [
        {"title": pattern},
        {"slug": pattern},
        {"tags": pattern},
        {"category": pattern},
        {"bodyContent": {"$elemMatch": {"type": {"$in": list(TEXT_BLOCK_TYPES)}, "content": pattern}}},
    ]
    clauses.extend({field: pattern} for field in SEARCH_TEXT_FIELDS)
    return {"$or": clauses}


def rank(document: Dict[str, Any], term: str) -> int:
    """0 when the title starts with the term, 1 when it contains it, else 2."""
    title = str(document.get("title") or "").lower()
    needle = term.lower()
    if title.startswith(needle):
        return 0
    if needle in title:
        return 1
    return 2


def rank_results(documents: List[Dict[str, Any]], term: str) -> List[Dict[str, Any]]:
    newest_first = sorted(documents, key=lambda doc: as_utc(doc.get("createdAt")) or _EPOCH, reverse=True)
    return sorted(newest_first, key=lambda doc: rank(doc, term))


async def search_items(q: Optional[str], raw_page: Optional[str]) -> Dict[str, Any]:
    term = (q or "").strip()
    if not term:
        return {"results": [], "query": "", "currentPage": 1, "totalPages": 0, "totalResults": 0}

    page = parse_page(raw_page)
    page_size = settings.PAGE_SIZE

    items_collection = await database.get_archive_items_collection()
    candidates = await database.find_many(items_collection, build_search_query(term), {
        "projection": {"bodyContent": 0},
    })
    ranked = rank_results(candidates, term)
    start = (page - 1) * page_size

    print(f"Search '{term}': {len(ranked)} results, page {page}.")
    return {
        "results": present_items(ranked[start:start + page_size]),
        "query": term,
        "currentPage": page,
        "totalPages": total_pages(len(ranked), page_size),
        "totalResults": len(ranked),
    }
