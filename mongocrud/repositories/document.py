"""Generic repository over a MongoDB database."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Generic, Optional, TypeVar, Union

import pymongo
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection

from ..config import Settings, get_settings
from ..db import open_async_client, open_client
from ..db import filters
from ..models.identifiers import to_object_id
from ..models.record import ID_FIELD, Record
from .exceptions import (
    ConstraintCreationFailedError,
    NotFoundRepositoryError,
    RepositoryError,
    WriteRejectedError,
    translate_store_errors,
)

LOGGER = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=Record)
Identifier = Union[ObjectId, str]


class DocumentRepository(Generic[RecordT]):
    """CRUD access to the collections of one MongoDB database.

    Every operation names its collection and resolves a fresh collection
    handle; only the driver clients are kept, and they are opened on first
    use. Blocking methods go through pymongo, their ``*_async`` twins through
    motor, with one motor client per running event loop.
    """

    def __init__(
        self,
        connection_string: str,
        database_name: str,
        model: type[RecordT],
        *,
        timeout: Optional[float] = None,
        best_effort_deletes: Optional[bool] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._connection_string = connection_string
        self._database_name = database_name
        self._model = model
        self._timeout = timeout
        self._settings = settings or get_settings()
        self._best_effort_deletes = (
            self._settings.best_effort_deletes if best_effort_deletes is None else best_effort_deletes
        )
        self._client: Optional[MongoClient] = None
        self._async_client: Optional[AsyncIOMotorClient] = None
        self._async_loop: Optional[asyncio.AbstractEventLoop] = None
        self._lock = threading.Lock()
        self._closed = False

    @classmethod
    def from_settings(
        cls,
        model: type[RecordT],
        settings: Optional[Settings] = None,
        **kwargs: Any,
    ) -> "DocumentRepository[RecordT]":
        settings = settings or get_settings()
        return cls(settings.mongo_uri, settings.mongo_db, model, settings=settings, **kwargs)

    @property
    def connection_string(self) -> str:
        return self._connection_string

    @property
    def database_name(self) -> str:
        return self._database_name

    @property
    def model(self) -> type[RecordT]:
        return self._model

    @property
    def closed(self) -> bool:
        return self._closed

    # -- lifecycle -----------------------------------------------------------

    def close(self) -> None:
        """Close any opened client. Further operations raise ``RepositoryError``."""

        with self._lock:
            if self._closed:
                return
            self._closed = True
            clients = (self._client, self._async_client)
            self._client = None
            self._async_client = None
            self._async_loop = None
        for client in clients:
            if client is not None:
                client.close()
        LOGGER.info("Repository for database '%s' closed", self._database_name)

    async def aclose(self) -> None:
        self.close()

    def __enter__(self) -> "DocumentRepository[RecordT]":
        return self

    def __exit__(self, *_exc_info: object) -> None:
        self.close()

    async def __aenter__(self) -> "DocumentRepository[RecordT]":
        return self

    async def __aexit__(self, *_exc_info: object) -> None:
        await self.aclose()

    # -- plumbing ------------------------------------------------------------

    def _ensure_open(self) -> None:
        if self._closed:
            raise RepositoryError("repository is closed")

    def _get_client(self) -> MongoClient:
        with self._lock:
            self._ensure_open()
            if self._client is None:
                self._client = open_client(self._connection_string, self._settings)
            return self._client

    def _get_async_client(self) -> AsyncIOMotorClient:
        # A motor client is bound to the loop it first ran on.
        loop = asyncio.get_running_loop()
        stale: Optional[AsyncIOMotorClient] = None
        with self._lock:
            self._ensure_open()
            if self._async_client is not None and self._async_loop is not loop:
                stale, self._async_client = self._async_client, None
            if self._async_client is None:
                self._async_client = open_async_client(self._connection_string, self._settings)
                self._async_loop = loop
            client = self._async_client
        if stale is not None:
            LOGGER.debug("Event loop changed; replaced async client for '%s'", self._database_name)
            stale.close()
        return client

    def _collection(self, name: str) -> Collection:
        return self._get_client()[self._database_name][name]

    def _async_collection(self, name: str) -> AsyncIOMotorCollection:
        return self._get_async_client()[self._database_name][name]

    @contextmanager
    def _operation(
        self,
        action: str,
        rejected: Optional[type[RepositoryError]] = None,
    ) -> Iterator[None]:
        with translate_store_errors(action, rejected):
            if self._timeout is None:
                yield
            else:
                with pymongo.timeout(self._timeout):
                    yield

    def _to_record(self, document: Mapping[str, Any]) -> RecordT:
        return self._model.model_validate(document)

    def _find(self, collection: str, query: filters.Filter) -> list[RecordT]:
        with self._operation(f"find in {collection}"):
            return [self._to_record(doc) for doc in self._collection(collection).find(query)]

    async def _find_async(self, collection: str, query: filters.Filter) -> list[RecordT]:
        with self._operation(f"find in {collection}"):
            docs = await self._async_collection(collection).find(query).to_list(length=None)
        return [self._to_record(doc) for doc in docs]

    def _find_one(self, collection: str, query: filters.Filter) -> Optional[RecordT]:
        with self._operation(f"find one in {collection}"):
            doc = self._collection(collection).find_one(query)
        return self._to_record(doc) if doc else None

    async def _find_one_async(self, collection: str, query: filters.Filter) -> Optional[RecordT]:
        with self._operation(f"find one in {collection}"):
            doc = await self._async_collection(collection).find_one(query)
        return self._to_record(doc) if doc else None

    @staticmethod
    def _require(record: Optional[RecordT], collection: str, description: str) -> RecordT:
        if record is None:
            raise NotFoundRepositoryError(f"no document in '{collection}' with {description}")
        return record

    # -- writes --------------------------------------------------------------

    def insert(self, collection: str, record: RecordT) -> RecordT:
        """Insert ``record`` and return it with its (possibly new) identifier."""

        document = record.to_document()
        with self._operation(f"insert into {collection}", WriteRejectedError):
            result = self._collection(collection).insert_one(document)
        return record.model_copy(update={"id": result.inserted_id})

    async def insert_async(self, collection: str, record: RecordT) -> RecordT:
        document = record.to_document()
        with self._operation(f"insert into {collection}", WriteRejectedError):
            result = await self._async_collection(collection).insert_one(document)
        return record.model_copy(update={"id": result.inserted_id})

    def insert_unique(self, collection: str, record: RecordT, field: str) -> RecordT:
        """Declare a unique index on ``field``, then insert ``record``.

        The index comes first so the insert itself is checked against it and
        existing duplicates block the write.
        """

        with self._operation(
            f"create unique index on {collection}.{field}", ConstraintCreationFailedError
        ):
            self._collection(collection).create_index([(field, ASCENDING)], unique=True)
        return self.insert(collection, record)

    async def insert_unique_async(self, collection: str, record: RecordT, field: str) -> RecordT:
        with self._operation(
            f"create unique index on {collection}.{field}", ConstraintCreationFailedError
        ):
            await self._async_collection(collection).create_index([(field, ASCENDING)], unique=True)
        return await self.insert_async(collection, record)

    def upsert(self, collection: str, record_id: Identifier, record: RecordT) -> RecordT:
        """Replace the document with ``record_id`` by ``record``, inserting it if absent."""

        object_id = to_object_id(record_id)
        document = {**record.to_document(), ID_FIELD: object_id}
        with self._operation(f"upsert into {collection}", WriteRejectedError):
            self._collection(collection).replace_one(filters.by_id(object_id), document, upsert=True)
        return record.model_copy(update={"id": object_id})

    async def upsert_async(self, collection: str, record_id: Identifier, record: RecordT) -> RecordT:
        object_id = to_object_id(record_id)
        document = {**record.to_document(), ID_FIELD: object_id}
        with self._operation(f"upsert into {collection}", WriteRejectedError):
            await self._async_collection(collection).replace_one(
                filters.by_id(object_id), document, upsert=True
            )
        return record.model_copy(update={"id": object_id})

    def delete_by_field(
        self,
        collection: str,
        field: str,
        value: Any,
        *,
        best_effort: Optional[bool] = None,
    ) -> bool:
        """Delete the first document where ``field == value``.

        With ``best_effort`` (defaulting to the repository setting) store
        failures are logged and reported as ``False`` instead of raised.
        """

        self._ensure_open()
        try:
            with self._operation(f"delete from {collection}", WriteRejectedError):
                result = self._collection(collection).delete_one(filters.equals(field, value))
        except RepositoryError as exc:
            if not self._is_best_effort(best_effort):
                raise
            LOGGER.warning("Best-effort delete from '%s' where %s failed: %s", collection, field, exc)
            return False
        return bool(result.deleted_count)

    async def delete_by_field_async(
        self,
        collection: str,
        field: str,
        value: Any,
        *,
        best_effort: Optional[bool] = None,
    ) -> bool:
        self._ensure_open()
        try:
            with self._operation(f"delete from {collection}", WriteRejectedError):
                result = await self._async_collection(collection).delete_one(filters.equals(field, value))
        except RepositoryError as exc:
            if not self._is_best_effort(best_effort):
                raise
            LOGGER.warning("Best-effort delete from '%s' where %s failed: %s", collection, field, exc)
            return False
        return bool(result.deleted_count)

    def _is_best_effort(self, best_effort: Optional[bool]) -> bool:
        return self._best_effort_deletes if best_effort is None else best_effort

    def delete_by_id(self, collection: str, record_id: Identifier) -> bool:
        object_id = to_object_id(record_id)
        with self._operation(f"delete from {collection}", WriteRejectedError):
            result = self._collection(collection).delete_one(filters.by_id(object_id))
        return bool(result.deleted_count)

    async def delete_by_id_async(self, collection: str, record_id: Identifier) -> bool:
        object_id = to_object_id(record_id)
        with self._operation(f"delete from {collection}", WriteRejectedError):
            result = await self._async_collection(collection).delete_one(filters.by_id(object_id))
        return bool(result.deleted_count)

    # -- reads ---------------------------------------------------------------

    def load_all(self, collection: str) -> list[RecordT]:
        return self._find(collection, filters.match_all())

    async def load_all_async(self, collection: str) -> list[RecordT]:
        return await self._find_async(collection, filters.match_all())

    def load_by_field(self, collection: str, field: str, value: Any) -> list[RecordT]:
        return self._find(collection, filters.equals(field, value))

    async def load_by_field_async(self, collection: str, field: str, value: Any) -> list[RecordT]:
        return await self._find_async(collection, filters.equals(field, value))

    def load_one_by_field(self, collection: str, field: str, value: Any) -> RecordT:
        """First document where ``field == value``; raises when there is none."""

        record = self._find_one(collection, filters.equals(field, value))
        return self._require(record, collection, f"{field}={value!r}")

    async def load_one_by_field_async(self, collection: str, field: str, value: Any) -> RecordT:
        record = await self._find_one_async(collection, filters.equals(field, value))
        return self._require(record, collection, f"{field}={value!r}")

    def find_one_by_field(self, collection: str, field: str, value: Any) -> Optional[RecordT]:
        """First document where ``field == value``, or ``None``."""

        return self._find_one(collection, filters.equals(field, value))

    async def find_one_by_field_async(self, collection: str, field: str, value: Any) -> Optional[RecordT]:
        return await self._find_one_async(collection, filters.equals(field, value))

    def load_by_id(self, collection: str, record_id: Identifier) -> RecordT:
        object_id = to_object_id(record_id)
        record = self._find_one(collection, filters.by_id(object_id))
        return self._require(record, collection, f"{ID_FIELD}={object_id}")

    async def load_by_id_async(self, collection: str, record_id: Identifier) -> RecordT:
        object_id = to_object_id(record_id)
        record = await self._find_one_async(collection, filters.by_id(object_id))
        return self._require(record, collection, f"{ID_FIELD}={object_id}")

    def search_by_pattern(
        self,
        collection: str,
        field: str,
        pattern: str,
        case_sensitive: bool = True,
    ) -> list[RecordT]:
        return self._find(collection, filters.matches(field, pattern, case_sensitive=case_sensitive))

    async def search_by_pattern_async(
        self,
        collection: str,
        field: str,
        pattern: str,
        case_sensitive: bool = True,
    ) -> list[RecordT]:
        return await self._find_async(
            collection, filters.matches(field, pattern, case_sensitive=case_sensitive)
        )

    def load_by_date(self, collection: str, field: str, timestamp: datetime) -> list[RecordT]:
        return self._find(collection, filters.on_date(field, timestamp))

    async def load_by_date_async(self, collection: str, field: str, timestamp: datetime) -> list[RecordT]:
        return await self._find_async(collection, filters.on_date(field, timestamp))

    def load_between_dates(
        self, collection: str, field: str, start: datetime, end: datetime
    ) -> list[RecordT]:
        """Documents with ``start <= field < end``."""

        return self._find(collection, filters.between(field, start, end))

    async def load_between_dates_async(
        self, collection: str, field: str, start: datetime, end: datetime
    ) -> list[RecordT]:
        return await self._find_async(collection, filters.between(field, start, end))

    def load_greater_than(self, collection: str, field: str, number: float) -> list[RecordT]:
        return self._find(collection, filters.greater_than(field, number))

    async def load_greater_than_async(self, collection: str, field: str, number: float) -> list[RecordT]:
        return await self._find_async(collection, filters.greater_than(field, number))

    # -- health --------------------------------------------------------------

    def ping(self) -> bool:
        """Round-trip a ``ping`` command; raises when the store is unreachable."""

        with self._operation("ping"):
            self._get_client().admin.command("ping")
        return True

    async def ping_async(self) -> bool:
        with self._operation("ping"):
            await self._get_async_client().admin.command("ping")
        return True


__all__ = ["DocumentRepository", "Identifier", "RecordT"]
