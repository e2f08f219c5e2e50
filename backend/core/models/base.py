"""
Base model for booking API payloads.

The API speaks camelCase with Mongo-style `_id`; models use snake_case
attributes, accept either spelling on input and serialize back by alias.
"""
from datetime import datetime, timezone
from typing import Annotated, Any, Optional

from pydantic import AfterValidator, BaseModel
from pydantic.alias_generators import to_camel


def _ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# Naive timestamps from the API are UTC
UtcDatetime = Annotated[datetime, AfterValidator(_ensure_utc)]


class ApiModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = "ignore"


def ref_id(value: Any) -> Optional[str]:
    """Id of a reference that may be a plain id or a populated document."""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return getattr(value, "id", None)
