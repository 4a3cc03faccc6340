# archive_backend/models/common.py

# Shared building blocks for the Pydantic models in this package.

import datetime
import re
from typing import Annotated, Any, Optional

from bson import ObjectId
from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel


def _object_id_to_str(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    return value


# --- Custom Type for handling MongoDB ObjectId ---
# Accepts an ObjectId or a string and always exposes a string.
PyObjectId = Annotated[str, BeforeValidator(_object_id_to_str)]


class CamelModel(BaseModel):
    """Python attributes are snake_case; stored and transmitted keys are camelCase."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# --- Coercion helpers shared by request and document models ---

def blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def split_list(value: Any) -> Any:
    """Form inputs send list fields as a comma-separated string."""
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return value


def parse_date(value: Any) -> Optional[Any]:
    """Accepts an ISO date ("1971-03-26") or datetime string from date inputs."""
    value = blank_to_none(value)
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime(value.year, value.month, value.day, tzinfo=datetime.timezone.utc)
    if isinstance(value, str):
        text = re.sub(r"Z$", "+00:00", value.strip())
        try:
            parsed = datetime.datetime.fromisoformat(text)
        except ValueError:
            raise ValueError(f"Invalid date: {value}")
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=datetime.timezone.utc)
        return parsed
    return value


