"""Base model for documents handled by :class:`DocumentRepository`."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .identifiers import PyObjectId

ID_FIELD = "_id"


def as_stored_datetime(value: datetime) -> datetime:
    """Normalise ``value`` the way MongoDB stores it: UTC, millisecond precision.

    Naive values are taken to already be UTC.
    """

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


class Record(BaseModel):
    """A stored document with a MongoDB primary key.

    Subclasses declare their own fields; aliases define the stored names. The
    identifier is optional so callers can let the store assign one on insert.
    Datetime fields are held as aware UTC values so a record compares equal
    to itself after a round trip through the store.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow", arbitrary_types_allowed=True)

    id: Optional[PyObjectId] = Field(default=None, alias=ID_FIELD)

    @field_validator("*")
    @classmethod
    def _normalise_datetimes(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return as_stored_datetime(value)
        return value

    def to_document(self) -> dict[str, Any]:
        doc = self.model_dump(by_alias=True)
        if doc.get(ID_FIELD) is None:
            doc.pop(ID_FIELD, None)
        return doc


__all__ = ["ID_FIELD", "Record", "as_stored_datetime"]
