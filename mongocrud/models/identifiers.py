"""Identifier types shared by record models and repositories."""

from __future__ import annotations

from typing import Annotated, Any

from bson import ObjectId
from bson.errors import InvalidId
from pydantic.functional_serializers import PlainSerializer
from pydantic.functional_validators import BeforeValidator


def to_object_id(value: Any) -> ObjectId:
    """Coerce an ``ObjectId`` or its hex string form into an ``ObjectId``."""

    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("ObjectId string must not be empty")
        try:
            return ObjectId(text)
        except InvalidId as exc:
            raise ValueError(f"Invalid ObjectId hex string: {text!r}") from exc
    raise TypeError("ObjectId value must be str or ObjectId instance")


# Stays an ObjectId in python-mode dumps so documents keep the native key type.
PyObjectId = Annotated[
    ObjectId,
    BeforeValidator(to_object_id),
    PlainSerializer(lambda value: str(value), return_type=str, when_used="json"),
]

__all__ = ["PyObjectId", "to_object_id"]
