import logging
from typing import Any, Optional

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import MongoClient

from ..config import Settings, get_settings

LOGGER = logging.getLogger(__name__)


def _client_options(settings: Settings) -> dict[str, Any]:
    return {
        "maxPoolSize": settings.max_pool_size,
        "tz_aware": True,
        "serverSelectionTimeoutMS": settings.server_selection_timeout_ms,
        "connectTimeoutMS": settings.connect_timeout_ms,
        "socketTimeoutMS": settings.socket_timeout_ms,
        **({"directConnection": True} if settings.mongo_direct else {}),
    }


def open_client(uri: str, settings: Optional[Settings] = None) -> MongoClient:
    """Create a blocking driver client for ``uri``.

    The driver connects lazily, so a malformed or unreachable URI only fails
    here when it cannot be parsed.
    """

    client = MongoClient(uri, **_client_options(settings or get_settings()))
    LOGGER.info("MongoDB client opened")
    return client


def open_async_client(uri: str, settings: Optional[Settings] = None) -> AsyncIOMotorClient:
    """Create an asyncio driver client for ``uri``."""

    client = AsyncIOMotorClient(uri, **_client_options(settings or get_settings()))
    LOGGER.info("MongoDB async client opened")
    return client


__all__ = ["open_async_client", "open_client"]
