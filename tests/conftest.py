from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from pathlib import Path
import sys

import mongomock
import pytest
import pytest_asyncio
from mongomock_motor import AsyncMongoMockClient

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from mongocrud.config import get_settings
from mongocrud.repositories import DocumentRepository

from records import AccountRecord

TEST_URI = "mongodb://localhost:27017/test"
TEST_DB = "mongocrud-test"


@pytest.fixture(autouse=True)
def _env_overrides(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setenv("MONGO_URI", TEST_URI)
    monkeypatch.setenv("MONGO_DB_NAME", TEST_DB)
    monkeypatch.delenv("MONGO_BEST_EFFORT_DELETES", raising=False)
    get_settings.cache_clear()  # type: ignore[attr-defined]
    yield
    get_settings.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture
def mongo_client(monkeypatch: pytest.MonkeyPatch) -> Iterator[mongomock.MongoClient]:
    client = mongomock.MongoClient()

    def _client_factory(*_args, **_kwargs) -> mongomock.MongoClient:
        return client

    monkeypatch.setattr("mongocrud.db.MongoClient", _client_factory)
    yield client
    client.close()


@pytest_asyncio.fixture
async def motor_client(
    monkeypatch: pytest.MonkeyPatch,
    mongo_client: mongomock.MongoClient,
) -> AsyncIterator[AsyncMongoMockClient]:
    client = AsyncMongoMockClient()

    def _client_factory(*_args, **_kwargs) -> AsyncMongoMockClient:
        return client

    monkeypatch.setattr("mongocrud.db.AsyncIOMotorClient", _client_factory)
    yield client
    client.close()


@pytest.fixture
def repo(mongo_client: mongomock.MongoClient) -> Iterator[DocumentRepository[AccountRecord]]:
    with DocumentRepository(TEST_URI, TEST_DB, AccountRecord) as repository:
        yield repository


@pytest_asyncio.fixture
async def async_repo(motor_client: AsyncMongoMockClient) -> AsyncIterator[DocumentRepository[AccountRecord]]:
    async with DocumentRepository(TEST_URI, TEST_DB, AccountRecord) as repository:
        yield repository
