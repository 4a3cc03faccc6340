# archive_backend/models/archive_item.py

# This file defines the archive item documents stored in the MongoDB
# 'archive_items' collection.
#
# Every item shares the ArchiveItemBase fields; the 'category' value selects one
# of thirteen concrete models, each adding its own optional field set. The
# concrete models form a discriminated union (ArchiveItemModel) so parsing a
# payload picks exactly one field set and drops anything belonging to another
# category.

import datetime
import json
from typing import Annotated, Any, ClassVar, Dict, List, Literal, Optional, Tuple, Type, Union

from pydantic import (
    BaseModel,
    Field,
    TypeAdapter,
    ValidationInfo,
    field_validator,
    model_validator,
)

from .common import CamelModel, blank_to_none, parse_date, split_list
from ..shared.media import normalize_body_content, normalize_image_url


BLOCK_TYPES = ("paragraph", "heading", "image", "list", "pdf", "video", "quote", "link")

OCCUPATION_STATUSES = ("Thriving", "Declining", "Extinct")

# Category key -> (stored field name, declared values)
SUB_TYPE_MAP: Dict[str, Tuple[str, Tuple[str, ...]]] = {
    "institution": ("subType", ("educational", "governmental", "Banks", "Religious", "other")),
    "transport": ("transportType", ("bus", "train", "auto stand", "launch-ghat")),
    "Emergency services": ("serviceType", ("hospitals", "police", "fire")),
}

SUB_TYPE_FIELDS = ("subType", "transportType", "serviceType")


def _strict_enums(info: ValidationInfo) -> bool:
    # Creation validates enums strictly; edits pass {"strict_enums": False}
    context = info.context or {}
    return context.get("strict_enums", True)


def _check_enum(value: Optional[str], allowed: Tuple[str, ...], label: str, info: ValidationInfo) -> Optional[str]:
    if value is None or not _strict_enums(info):
        return value
    if value not in allowed:
        raise ValueError(f"{label} must be one of: {', '.join(allowed)}")
    return value


# --- Content Block ---
class ContentBlock(CamelModel):
    """One ordered unit of an entry's body."""
    type: Literal["paragraph", "heading", "image", "list", "pdf", "video", "quote", "link"]
    content: Any = ""
    order: int = 0

    @model_validator(mode="before")
    @classmethod
    def build_link_content(cls, data: Any) -> Any:
        # Link blocks come from the editor as separate title/url inputs
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if data.get("type") == "link" and not data.get("content") and (data.get("linkUrl") or data.get("linkTitle")):
            data["content"] = {"title": data.get("linkTitle") or "", "url": data.get("linkUrl") or ""}
        if data.get("type") in ("link", "image") and isinstance(data.get("content"), dict):
            data["content"] = json.dumps(data["content"])
        if data.get("content") is None:
            data["content"] = ""
        return data


# --- Base Archive Item ---
class ArchiveItemBase(CamelModel):
    """Fields shared by every category."""
    title: str = Field(..., min_length=1)
    slug: str = Field(..., min_length=1)
    thumbnail: Optional[str] = None
    category: str
    body_content: List[ContentBlock] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)

    # Name of this category's sub-type field (subType/transportType/serviceType), if any
    sub_type_field: ClassVar[Optional[str]] = None

    @model_validator(mode="before")
    @classmethod
    def apply_form_conventions(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        # Empty form inputs mean "not provided"
        data = {key: value for key, value in data.items() if blank_to_none(value) is not None}

        # bodyContent may arrive serialized from the editor form
        raw_body = data.pop("bodyContentJSON", None)
        if raw_body and not data.get("bodyContent"):
            try:
                data["bodyContent"] = json.loads(raw_body)
            except ValueError:
                raise ValueError("bodyContentJSON is not valid JSON")

        # Blocks without an explicit order keep their position in the list
        blocks = data.get("bodyContent")
        if isinstance(blocks, list):
            data["bodyContent"] = [
                {**block, "order": index} if isinstance(block, dict) and block.get("order") is None else block
                for index, block in enumerate(blocks)
            ]

        # The form always posts the sub-type as 'subType'
        if cls.sub_type_field and cls.sub_type_field != "subType" and data.get("subType") and not data.get(cls.sub_type_field):
            data[cls.sub_type_field] = data["subType"]

        # Separate lat/lng inputs become the coordinates sub-document
        if (data.get("lat") is not None or data.get("lng") is not None) and not data.get("coordinates"):
            try:
                data["coordinates"] = {"lat": float(data["lat"]), "lng": float(data["lng"])}
            except (KeyError, TypeError, ValueError):
                pass

        if data.get("eventDate") and not data.get("dateOfIncident"):
            data["dateOfIncident"] = data["eventDate"]

        return data

    @field_validator("slug", mode="before")
    @classmethod
    def clean_slug(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, value: Any) -> Any:
        return split_list(value)

    @field_validator("thumbnail")
    @classmethod
    def normalize_thumbnail(cls, value: Optional[str]) -> Optional[str]:
        return normalize_image_url(value) if value else value

    @field_validator("body_content")
    @classmethod
    def normalize_blocks(cls, blocks: List[ContentBlock]) -> List[ContentBlock]:
        normalized = normalize_body_content([block.model_dump() for block in blocks])
        return [ContentBlock.model_validate(block) for block in normalized]

    def to_document(self, exclude_unset: bool = False) -> Dict[str, Any]:
        """Serializes to the camelCase shape stored in MongoDB."""
        if exclude_unset:
            return self.model_dump(by_alias=True, exclude_unset=True)
        return self.model_dump(by_alias=True, exclude_none=True)


# --- Shared field mixins ---
class Coordinates(BaseModel):
    lat: float
    lng: float


class LocationFields(CamelModel):
    location_link: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    address: Optional[str] = None
    contact_phone: Optional[str] = None


class PersonFields(CamelModel):
    date_of_birth: Optional[datetime.datetime] = None
    date_of_death: Optional[datetime.datetime] = None
    education: Optional[str] = None
    achievements: Optional[List[str]] = None
    sector_no: Optional[str] = None
    passing_year: Optional[int] = None
    current_status: Optional[str] = None
    profession: Optional[str] = None

    @field_validator("date_of_birth", "date_of_death", mode="before")
    @classmethod
    def parse_dates(cls, value: Any) -> Any:
        return parse_date(value)

    @field_validator("achievements", mode="before")
    @classmethod
    def split_achievements(cls, value: Any) -> Any:
        return split_list(value) if value is not None else None

    @field_validator("sector_no", mode="before")
    @classmethod
    def sector_as_text(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value


class HeritageFields(CamelModel):
    period: Optional[str] = None
    significance: Optional[str] = None


class NarrativeFields(CamelModel):
    date_of_incident: Optional[datetime.datetime] = None
    involved_parties: Optional[List[str]] = None

    @field_validator("date_of_incident", mode="before")
    @classmethod
    def parse_incident_date(cls, value: Any) -> Any:
        return parse_date(value)

    @field_validator("involved_parties", mode="before")
    @classmethod
    def split_parties(cls, value: Any) -> Any:
        return split_list(value) if value is not None else None


class OccupationFields(CamelModel):
    traditional_name: Optional[str] = None
    tools_used: Optional[List[str]] = None
    occupation_status: Optional[str] = None

    @field_validator("tools_used", mode="before")
    @classmethod
    def split_tools(cls, value: Any) -> Any:
        return split_list(value) if value is not None else None

    @field_validator("occupation_status")
    @classmethod
    def check_status(cls, value: Optional[str], info: ValidationInfo) -> Optional[str]:
        return _check_enum(value, OCCUPATION_STATUSES, "occupationStatus", info)


class OrgFields(CamelModel):
    founded_by: Optional[str] = None
    mission_statement: Optional[str] = None


# --- Concrete category models ---
class HistoryItem(ArchiveItemBase, HeritageFields, NarrativeFields):
    category: Literal["history"]


class CultureItem(ArchiveItemBase, HeritageFields, NarrativeFields):
    category: Literal["culture"]


class NotablePersonItem(ArchiveItemBase, PersonFields):
    category: Literal["notable people"]


class FreedomFighterItem(ArchiveItemBase, PersonFields):
    category: Literal["freedom fighters"]


class MeritoriousStudentItem(ArchiveItemBase, PersonFields):
    category: Literal["meritorious student"]


class HiddenTalentItem(ArchiveItemBase, PersonFields):
    category: Literal["hidden talent"]


class OccupationItem(ArchiveItemBase, HeritageFields, OccupationFields):
    category: Literal["occupation"]


class HeartbreakingStoryItem(ArchiveItemBase, NarrativeFields):
    category: Literal["Heartbreaking stories"]


class SocialWorkItem(ArchiveItemBase, LocationFields, OrgFields):
    category: Literal["social works"]


class InstitutionItem(ArchiveItemBase, LocationFields):
    category: Literal["institution"]
    sub_type: Optional[str] = None
    established_date: Optional[datetime.datetime] = None
    head_of_institution: Optional[str] = None

    sub_type_field: ClassVar[Optional[str]] = "subType"

    @field_validator("established_date", mode="before")
    @classmethod
    def parse_established(cls, value: Any) -> Any:
        return parse_date(value)

    @field_validator("sub_type")
    @classmethod
    def check_sub_type(cls, value: Optional[str], info: ValidationInfo) -> Optional[str]:
        return _check_enum(value, SUB_TYPE_MAP["institution"][1], "subType", info)


class TransportItem(ArchiveItemBase, LocationFields):
    category: Literal["transport"]
    transport_type: Optional[str] = None
    destinations: Optional[List[str]] = None

    sub_type_field: ClassVar[Optional[str]] = "transportType"

    @field_validator("destinations", mode="before")
    @classmethod
    def split_destinations(cls, value: Any) -> Any:
        return split_list(value) if value is not None else None

    @field_validator("transport_type")
    @classmethod
    def check_transport_type(cls, value: Optional[str], info: ValidationInfo) -> Optional[str]:
        return _check_enum(value, SUB_TYPE_MAP["transport"][1], "transportType", info)


class EmergencyServiceItem(ArchiveItemBase, LocationFields):
    category: Literal["Emergency services"]
    service_type: Optional[str] = None
    is_24_hours: bool = Field(default=True, alias="is24Hours")

    sub_type_field: ClassVar[Optional[str]] = "serviceType"

    @field_validator("service_type")
    @classmethod
    def check_service_type(cls, value: Optional[str], info: ValidationInfo) -> Optional[str]:
        return _check_enum(value, SUB_TYPE_MAP["Emergency services"][1], "serviceType", info)


class TouristSpotItem(ArchiveItemBase, LocationFields):
    category: Literal["tourist spots"]
    entry_fee: Optional[str] = None
    best_time_to_visit: Optional[str] = None


ArchiveItemModel = Annotated[
    Union[
        HistoryItem,
        CultureItem,
        NotablePersonItem,
        FreedomFighterItem,
        MeritoriousStudentItem,
        HiddenTalentItem,
        OccupationItem,
        HeartbreakingStoryItem,
        SocialWorkItem,
        InstitutionItem,
        TransportItem,
        EmergencyServiceItem,
        TouristSpotItem,
    ],
    Field(discriminator="category"),
]

archive_item_adapter: TypeAdapter = TypeAdapter(ArchiveItemModel)


# --- Category table: the one place category -> field set is declared ---
CATEGORY_MODELS: Dict[str, Type[ArchiveItemBase]] = {
    "history": HistoryItem,
    "culture": CultureItem,
    "institution": InstitutionItem,
    "notable people": NotablePersonItem,
    "freedom fighters": FreedomFighterItem,
    "meritorious student": MeritoriousStudentItem,
    "hidden talent": HiddenTalentItem,
    "occupation": OccupationItem,
    "Heartbreaking stories": HeartbreakingStoryItem,
    "tourist spots": TouristSpotItem,
    "transport": TransportItem,
    "Emergency services": EmergencyServiceItem,
    "social works": SocialWorkItem,
}

CATEGORY_LABELS: Dict[str, str] = {
    "history": "History",
    "culture": "Culture",
    "institution": "Institutions",
    "notable people": "Notable People",
    "freedom fighters": "Freedom Fighters",
    "meritorious student": "Meritorious Student",
    "hidden talent": "Hidden Talent",
    "occupation": "Occupation",
    "Heartbreaking stories": "Heartbreaking Stories",
    "tourist spots": "Tourist Spots",
    "transport": "Transport",
    "Emergency services": "Emergency Services",
    "social works": "Social Works",
}

_BASE_FIELDS = {field.alias or name for name, field in ArchiveItemBase.model_fields.items()}


def category_slug(category: str) -> str:
    """URL form of a category key: 'Emergency services' -> 'emergency-services'."""
    return category.strip().lower().replace(" ", "-")


_CATEGORY_LOOKUP: Dict[str, str] = {}
for _key in CATEGORY_MODELS:
    _CATEGORY_LOOKUP[_key.lower()] = _key
    _CATEGORY_LOOKUP[category_slug(_key)] = _key


def resolve_category(raw: Optional[str]) -> Optional[str]:
    """Maps a category key or URL slug to its canonical key, or None if unknown."""
    if not raw:
        return None
    if raw in CATEGORY_MODELS:
        return raw
    return _CATEGORY_LOOKUP.get(raw.strip().lower()) or _CATEGORY_LOOKUP.get(raw.strip().lower().replace("-", " "))


def category_fields(category: str) -> List[str]:
    """Stored names of the extension fields a category adds to the base item."""
    model = CATEGORY_MODELS[category]
    return [field.alias or name for name, field in model.model_fields.items() if (field.alias or name) not in _BASE_FIELDS]


EXTENSION_FIELDS = sorted({field for category in CATEGORY_MODELS for field in category_fields(category)})


def parse_archive_item(data: Dict[str, Any], strict_enums: bool = True) -> ArchiveItemBase:
    """
    Validates a payload against the model selected by its 'category'.
    The caller must already have replaced 'category' with its canonical key.
    """
    return archive_item_adapter.validate_python(data, context={"strict_enums": strict_enums})


def describe_categories() -> List[Dict[str, Any]]:
    """Taxonomy table for clients building category-aware forms."""
    described = []
    for key in CATEGORY_MODELS:
        sub_type = SUB_TYPE_MAP.get(key)
        described.append({
            "key": key,
            "slug": category_slug(key),
            "label": CATEGORY_LABELS[key],
            "fields": category_fields(key),
            "subTypeField": sub_type[0] if sub_type else None,
            "subTypeValues": list(sub_type[1]) if sub_type else [],
        })
    return described


def sub_type_of(document: Dict[str, Any]) -> Optional[str]:
    """The item's sub-type, whichever of the sub-type fields holds it."""
    for field in SUB_TYPE_FIELDS:
        if document.get(field):
            return document[field]
    return None
