# archive_backend/features/admin/service.py

# Business logic for staff content management: creating, listing, reading,
# editing and deleting archive items.

import re
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ...config.settings import settings
from ...db import mongo_client as database
from ...models.archive_item import (
    CATEGORY_MODELS,
    EXTENSION_FIELDS,
    SUB_TYPE_FIELDS,
    ArchiveItemBase,
    category_fields,
    parse_archive_item,
    resolve_category,
    sub_type_of,
)
from ...models.auth import SessionData
from ...models.common import blank_to_none
from ...shared.errors import BadRequestError, NotFoundError, format_validation_errors
from ...shared.utils import parse_page, serialize_document, total_pages, utcnow

SLUG_TAKEN_ON_CREATE = "The slug already exists. Please use a unique slug."
SLUG_TAKEN_ON_EDIT = "The slug already exists."

BASE_DOCUMENT_FIELDS = ("title", "slug", "thumbnail", "bodyContent", "tags")
SERVER_MANAGED_FIELDS = ("_id", "author", "createdAt", "updatedAt")

# Form inputs posted in place of the stored field they fill
FORM_FIELD_TARGETS = {
    "bodyContentJSON": "bodyContent",
    "lat": "coordinates",
    "lng": "coordinates",
    "eventDate": "dateOfIncident",
}


def _canonical_category(raw: Any) -> str:
    category = resolve_category(raw) if isinstance(raw, str) else None
    if category is None:
        raise BadRequestError(f"Invalid Category: {raw}")
    return category


def _parse(data: Dict[str, Any], strict_enums: bool) -> ArchiveItemBase:
    try:
        return parse_archive_item(data, strict_enums=strict_enums)
    except ValidationError as e:
        raise BadRequestError(format_validation_errors(e.errors()))


def _take_posted_fields(stored: Dict[str, Any], payload: Dict[str, Any], category: str) -> set:
    """
    Drops from `stored` every field the edit form posts, directly or through a
    form input such as lat/lng, so the posted value replaces it. Returns the
    fields posted blank, which the update removes. title and slug are never
    cleared; posting them blank fails validation.
    """
    editable = set(BASE_DOCUMENT_FIELDS) | set(category_fields(category))
    sub_type_field = CATEGORY_MODELS[category].sub_type_field

    cleared = set()
    for key, value in payload.items():
        field = sub_type_field if key == "subType" and sub_type_field else FORM_FIELD_TARGETS.get(key, key)
        if field not in editable:
            continue
        stored.pop(field, None)
        if blank_to_none(value) is None and field not in ("title", "slug"):
            cleared.add(field)
    return cleared


async def _find_item(item_id: str) -> Dict[str, Any]:
    object_id = database.to_object_id(item_id)
    if object_id is None:
        raise NotFoundError("Item not found")
    items_collection = await database.get_archive_items_collection()
    item_document = await database.find_one(items_collection, {"_id": object_id})
    if item_document is None:
        raise NotFoundError("Item not found")
    return item_document


# --- Create ---

async def add_item(session: SessionData, payload: Dict[str, Any]) -> str:
    """
    Validates the payload against its category's model and stores it with the
    caller as author. Returns the stored slug.
    """
    category = _canonical_category(payload.get("category"))
    item = _parse({**payload, "category": category}, strict_enums=True)

    now = utcnow()
    document = item.to_document()
    document.update({
        "author": database.to_object_id(session.user_id),
        "createdAt": now,
        "updatedAt": now,
    })

    items_collection = await database.get_archive_items_collection()
    new_id = await database.insert_one(items_collection, document, conflict_message=SLUG_TAKEN_ON_CREATE)
    print(f"Archive item {new_id} ('{item.slug}', {category}) created by user {session.user_id}.")
    return item.slug


# --- Read ---

async def list_my_items(session: SessionData, q: Optional[str], raw_page: Optional[str]) -> Dict[str, Any]:
    """The caller's own items, newest first, optionally filtered by a search term."""
    page = parse_page(raw_page)
    page_size = settings.PAGE_SIZE

    query: Dict[str, Any] = {"author": database.to_object_id(session.user_id)}
    term = (q or "").strip()
    if term:
        pattern = {"$regex": re.escape(term), "$options": "i"}
        query["$or"] = [{"title": pattern}, {"slug": pattern}, {"category": pattern}] + [
            {field: pattern} for field in SUB_TYPE_FIELDS
        ]

    items_collection = await database.get_archive_items_collection()
    total_items = await database.count_documents(items_collection, query)
    documents = await database.find_many(items_collection, query, {
        "sort": [("createdAt", -1)],
        "skip": (page - 1) * page_size,
        "limit": page_size,
        "projection": {"title": 1, "slug": 1, "category": 1, "thumbnail": 1, "createdAt": 1,
                       "updatedAt": 1, **{field: 1 for field in SUB_TYPE_FIELDS}},
    })

    items = []
    for document in documents:
        item = serialize_document(document)
        item["subType"] = sub_type_of(document)
        items.append(item)

    return {
        "items": items,
        "totalItems": total_items,
        "totalPages": total_pages(total_items, page_size),
        "currentPage": page,
    }


async def get_item(item_id: str) -> Dict[str, Any]:
    """Full item for the edit form, with the author's username and a unified subType."""
    item_document = await _find_item(item_id)

    author = None
    author_id = item_document.get("author")
    if author_id is not None:
        users_collection = await database.get_users_collection()
        author = await database.find_one(users_collection, {"_id": author_id}, {"username": 1})

    result = serialize_document(item_document)
    result["author"] = serialize_document(author) if author else None
    result["subType"] = sub_type_of(item_document)
    return result


# --- Update ---

async def update_item(session: SessionData, item_id: str, payload: Dict[str, Any]) -> str:
    """
    Edits an item. Omitted fields keep their stored values. Moving an item to
    another category removes the fields that belong to other categories.
    Fields posted blank are removed. Sub-type enums are not enforced on edit.
    """
    existing = await _find_item(item_id)
    old_category = existing.get("category")
    category = _canonical_category(payload.get("category") or old_category)
    category_changed = category != old_category

    if category_changed:
        stored = {key: existing[key] for key in BASE_DOCUMENT_FIELDS if key in existing}
    else:
        stored = {key: value for key, value in existing.items() if key not in SERVER_MANAGED_FIELDS}
        # Let a newly posted subType win over the stored one
        if payload.get("subType"):
            for field in SUB_TYPE_FIELDS:
                stored.pop(field, None)

    cleared = _take_posted_fields(stored, payload, category)

    item = _parse({**stored, **payload, "category": category}, strict_enums=False)
    update_data = item.to_document(exclude_unset=True)
    update_data["updatedAt"] = utcnow()

    own_fields = set(category_fields(category))
    unset_fields = [field for field in EXTENSION_FIELDS if field not in own_fields] if category_changed else []
    unset_fields += sorted(field for field in cleared if field not in update_data and field not in unset_fields)

    items_collection = await database.get_archive_items_collection()
    matched = await database.update_one_by_id(
        items_collection,
        existing["_id"],
        update_data,
        unset_fields=unset_fields or None,
        conflict_message=SLUG_TAKEN_ON_EDIT,
    )
    if not matched:
        raise NotFoundError("Item not found")

    print(f"Archive item {item_id} updated by user {session.user_id} (category: {category}).")
    return item.slug


# --- Delete ---

async def delete_item(session: SessionData, item_id: str) -> None:
    items_collection = await database.get_archive_items_collection()
    deleted = await database.delete_one_by_id(items_collection, item_id)
    if not deleted:
        raise NotFoundError("Item not found")
    print(f"Archive item {item_id} deleted by user {session.user_id}.")
