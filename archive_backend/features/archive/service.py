# archive_backend/features/archive/service.py

# Read-side logic for public archive pages: category lookup and entry detail.

from typing import Any, Dict

from ...db import mongo_client as database
from ...models.archive_item import resolve_category
from ...shared.errors import NotFoundError
from ...shared.media import normalize_body_content, normalize_image_url
from ...shared.utils import serialize_document


def require_category(raw: str) -> str:
    category = resolve_category(raw)
    if category is None:
        raise NotFoundError(f"Unknown category: {raw}")
    return category


async def get_entry(slug: str) -> Dict[str, Any]:
    """
    Entry detail by slug with the author's username populated, media URLs
    normalized and body blocks in display order.
    """
    items_collection = await database.get_archive_items_collection()
    item_document = await database.find_one(items_collection, {"slug": slug})
    if item_document is None:
        raise NotFoundError("Archive entry not found")

    author = None
    if item_document.get("author") is not None:
        users_collection = await database.get_users_collection()
        author = await database.find_one(users_collection, {"_id": item_document["author"]}, {"username": 1})

    entry = serialize_document(item_document)
    entry["author"] = serialize_document(author) if author else None
    if entry.get("thumbnail"):
        entry["thumbnail"] = normalize_image_url(entry["thumbnail"])
    blocks = normalize_body_content(entry.get("bodyContent") or [])
    entry["bodyContent"] = sorted(blocks, key=lambda block: block.get("order") or 0)
    return entry
