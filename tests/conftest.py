"""
pytest configuration and shared fixtures for the Nearby Commerce API tests.

Key concern: tests must not require a live MongoDB.
We achieve this by:
  1. Patching connect_to_mongo / close_mongo_connection to no-ops so
     FastAPI's lifespan doesn't try to reach a real database.
  2. Setting db_client.client = None (disconnected) so the health check
     reports "disconnected", a valid test-mode state.
  3. Injecting an in-memory FakeDB through app.dependency_overrides[get_db]
     for routes that read or write data.
"""

import os
import re
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from bson import ObjectId
from httpx import ASGITransport, AsyncClient
from pymongo.errors import ServerSelectionTimeoutError

# Set env vars BEFORE importing the app so Settings picks them up correctly
os.environ.setdefault("ENVIRONMENT", "test")


# ── In-memory Motor stand-ins ─────────────────────────────────────────────────

def _matches(doc: dict, query: dict) -> bool:
    for key, cond in query.items():
        value = doc.get(key)
        if isinstance(cond, dict):
            if "$in" in cond and value not in cond["$in"]:
                return False
            if "$gte" in cond and (value is None or value < cond["$gte"]):
                return False
            if "$lte" in cond and (value is None or value > cond["$lte"]):
                return False
            if "$regex" in cond:
                flags = re.IGNORECASE if "i" in cond.get("$options", "") else 0
                if value is None or not re.search(cond["$regex"], value, flags):
                    return False
        elif value != cond:
            return False
    return True


class FakeCursor:
    def __init__(self, docs):
        self._docs = docs
        self._limit = None

    def sort(self, key, direction=1):
        self._docs = sorted(self._docs, key=lambda d: d.get(key), reverse=direction < 0)
        return self

    def limit(self, n):
        self._limit = n
        return self

    def _results(self):
        return self._docs[: self._limit] if self._limit else list(self._docs)

    async def to_list(self, length=None):
        docs = self._results()
        return docs[:length] if length else docs

    async def __aiter__(self):
        for doc in self._results():
            yield doc


class FakeCollection:
    def __init__(self):
        self.docs: list[dict] = []
        self.indexes: list[tuple] = []
        self.queries: list[dict] = []

    def add(self, *docs):
        self.docs.extend(docs)

    def find(self, query=None, projection=None):
        query = query or {}
        self.queries.append(query)
        return FakeCursor([d for d in self.docs if _matches(d, query)])

    async def find_one(self, query):
        self.queries.append(query)
        return next((d for d in self.docs if _matches(d, query)), None)

    async def insert_one(self, doc):
        oid = ObjectId()
        self.docs.append({**doc, "_id": oid})
        result = MagicMock()
        result.inserted_id = oid
        return result

    async def create_index(self, keys, **kwargs):
        self.indexes.append((keys, kwargs))
        return kwargs.get("name")


class FakeDB:
    def __init__(self):
        self.collections: dict[str, FakeCollection] = {}
        self.views: dict[str, dict] = {}

    def __getitem__(self, name):
        return self.collections.setdefault(name, FakeCollection())

    async def list_collection_names(self):
        return list(self.collections) + list(self.views)

    async def create_collection(self, name, **kwargs):
        self.views[name] = kwargs
        return self[name]


class FailingCursor:
    def sort(self, *_args):
        return self

    def limit(self, _n):
        return self

    async def to_list(self, length=None):
        raise ServerSelectionTimeoutError("mongo:27017: [Errno 111] Connection refused")

    def __aiter__(self):
        return self

    async def __anext__(self):
        raise ServerSelectionTimeoutError("mongo:27017: [Errno 111] Connection refused")


class FailingCollection:
    def find(self, *_args, **_kwargs):
        return FailingCursor()

    async def find_one(self, *_args, **_kwargs):
        raise ServerSelectionTimeoutError("mongo:27017: [Errno 111] Connection refused")

    async def insert_one(self, *_args, **_kwargs):
        raise ServerSelectionTimeoutError("mongo:27017: [Errno 111] Connection refused")


class FailingDB:
    def __getitem__(self, name):
        return FailingCollection()


# ── Fixtures ──────────────────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
async def mock_db():
    """
    Patch the MongoDB lifecycle for every test.

    - connect_to_mongo / close_mongo_connection → no-op AsyncMock
    - db_client.client / db_client.db → None (disconnected)
    """
    with (
        patch("app.core.database.connect_to_mongo", new_callable=AsyncMock),
        patch("app.core.database.close_mongo_connection", new_callable=AsyncMock),
    ):
        import app.core.database as db_module

        original_client = db_module.db_client.client
        original_db = db_module.db_client.db

        db_module.db_client.client = None
        db_module.db_client.db = None

        yield

        db_module.db_client.client = original_client
        db_module.db_client.db = original_db


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """slowapi keeps hit counters in memory for the whole session."""
    from app.core.rate_limit import limiter

    limiter.reset()
    yield


@pytest.fixture()
async def client(mock_db):  # noqa: ARG001 (mock_db must run first)
    """HTTPX async client with no database at all (degraded mode)."""
    from app.main import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def fake_db():
    return FakeDB()


@pytest.fixture()
async def api_client(fake_db):
    """HTTPX async client whose get_db dependency returns `fake_db`."""
    from app.core.database import get_db
    from app.main import app

    app.dependency_overrides[get_db] = lambda: fake_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture()
def failing_db():
    return FailingDB()


@pytest.fixture()
async def failing_client(failing_db):
    """HTTPX async client whose database raises on every query."""
    from app.core.database import get_db
    from app.main import app

    app.dependency_overrides[get_db] = lambda: failing_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
