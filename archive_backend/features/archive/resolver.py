# archive_backend/features/archive/resolver.py

# Decides how a category page is presented: as a grid of sub-types (when the
# category's items carry sub-type values) or as a flat list of items.

import re
from typing import Any, Dict, List

from ...db import mongo_client as database
from ...models.archive_item import CATEGORY_LABELS, SUB_TYPE_FIELDS, SUB_TYPE_MAP
from ...shared.media import normalize_image_url
from ...shared.utils import serialize_document

LIST_PROJECTION = {"title": 1, "slug": 1, "thumbnail": 1, "category": 1, "tags": 1, "createdAt": 1}
SUB_TYPE_PROJECTION = {"title": 1, "slug": 1, "thumbnail": 1, "category": 1,
                       **{field: 1 for field in SUB_TYPE_FIELDS}}


def category_query(category: str) -> Dict[str, Any]:
    """Case-insensitive exact match, so legacy rows with other casing still count."""
    return {"category": {"$regex": f"^{re.escape(category)}$", "$options": "i"}}


def _order_values(values: List[Any], declared: tuple = ()) -> List[str]:
    present = {value for value in values if isinstance(value, str) and value.strip()}
    ordered = [value for value in declared if value in present]
    ordered.extend(sorted(present - set(ordered)))
    return ordered


def present_items(documents: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    items = []
    for document in documents:
        item = serialize_document(document)
        if item.get("thumbnail"):
            item["thumbnail"] = normalize_image_url(item["thumbnail"])
        items.append(item)
    return items


async def stored_sub_types(category: str) -> List[str]:
    """
    Distinct non-empty sub-type values stored for the category.
    Mapped categories read their declared field; others scan every sub-type field.
    """
    items_collection = await database.get_archive_items_collection()
    query = category_query(category)

    mapping = SUB_TYPE_MAP.get(category)
    if mapping:
        field, declared = mapping
        values = await database.distinct(items_collection, field, query)
        return _order_values(values, declared)

    values: List[Any] = []
    for field in SUB_TYPE_FIELDS:
        values.extend(await database.distinct(items_collection, field, query))
    return _order_values(values)


async def resolve_category_view(category: str) -> Dict[str, Any]:
    label = CATEGORY_LABELS.get(category, category)
    sub_types = await stored_sub_types(category)

    if sub_types:
        return {
            "type": "sub-categories",
            "category": category,
            "subTypes": sub_types,
            "title": f"Explore {label}",
        }

    items_collection = await database.get_archive_items_collection()
    documents = await database.find_many(items_collection, category_query(category), {
        "sort": [("createdAt", -1)],
        "projection": LIST_PROJECTION,
    })
    return {
        "type": "list",
        "category": category,
        "items": present_items(documents),
        "title": label,
    }


async def list_sub_type_items(category: str, sub_type: str) -> Dict[str, Any]:
    items_collection = await database.get_archive_items_collection()
    query = {
        **category_query(category),
        "$or": [{field: sub_type} for field in SUB_TYPE_FIELDS],
    }
    documents = await database.find_many(items_collection, query, {
        "sort": [("createdAt", -1)],
        "projection": SUB_TYPE_PROJECTION,
    })
    label = CATEGORY_LABELS.get(category, category)
    return {
        "items": present_items(documents),
        "title": f"{sub_type} {label}",
        "category": category,
        "subType": sub_type,
    }
