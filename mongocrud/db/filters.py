"""Builders for the MongoDB filter documents used by the repository.

Filters are plain ``dict`` query documents handed to the driver as-is; none of
them is evaluated locally.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any

from bson import ObjectId

from ..models.record import ID_FIELD
from ..repositories.exceptions import InvalidPatternError

Filter = dict[str, Any]

MATCH_ALL: Filter = {}


def match_all() -> Filter:
    return dict(MATCH_ALL)


def equals(field: str, value: Any) -> Filter:
    return {field: value}


def by_id(object_id: ObjectId) -> Filter:
    return {ID_FIELD: object_id}


def on_date(field: str, timestamp: datetime) -> Filter:
    return {field: timestamp}


def matches(field: str, pattern: str, *, case_sensitive: bool = True) -> Filter:
    """Regular expression filter on ``field``.

    The pattern is compiled locally first so a malformed expression fails
    before any round trip to the store.
    """

    try:
        re.compile(pattern)
    except (re.error, TypeError) as exc:
        raise InvalidPatternError(f"invalid pattern {pattern!r}: {exc}") from exc

    condition: dict[str, Any] = {"$regex": pattern}
    if not case_sensitive:
        condition["$options"] = "i"
    return {field: condition}


def between(field: str, start: datetime, end: datetime) -> Filter:
    """Half-open range ``start <= field < end``; empty when ``start > end``."""

    return {field: {"$gte": start, "$lt": end}}


def greater_than(field: str, number: float) -> Filter:
    return {field: {"$gt": number}}


__all__ = [
    "Filter",
    "between",
    "by_id",
    "equals",
    "greater_than",
    "match_all",
    "matches",
    "on_date",
]
