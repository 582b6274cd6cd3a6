"""Pytest configuration and fixtures for the catalog admin service."""

import asyncio
import itertools

import pytest
import pytest_asyncio
from fakeredis import aioredis as fakeredis
from httpx import ASGITransport, AsyncClient

from src.services.catalog.session_store import get_redis_client
from src.services.clients.store_client import RecordStore, StoreError, get_record_store

SEED_CATEGORIES = [
    {"id": 1, "name": "Templates", "description": "Site templates", "slug": "templates"},
    {"id": 2, "name": "Plugins", "description": "Editor plugins", "slug": "plugins"},
]

SEED_PRODUCTS = [
    {
        "id": 7,
        "name": "Portfolio Kit",
        "short_description": None,
        "description": "A portfolio template",
        "price": 19.0,
        "original_price": None,
        "image_url": "https://cdn.example.com/kit.png",
        "file_url": "https://cdn.example.com/kit.zip",
        "category_id": 1,
        "is_active": True,
        "is_featured": False,
        "has_live_demo": False,
        "live_demo_url": None,
        "features": ["a", "b"],
        "created_at": "2025-01-01T00:00:00+00:00",
    },
    {
        "id": 8,
        "name": "Dark Mode Plugin",
        "short_description": "Night theme",
        "description": "Adds a dark theme",
        "price": 0,
        "original_price": 5.0,
        "image_url": "https://cdn.example.com/dark.png",
        "file_url": "https://cdn.example.com/dark.zip",
        "category_id": 2,
        "is_active": False,
        "is_featured": True,
        "has_live_demo": True,
        "live_demo_url": "https://demo.example.com/dark",
        "features": None,
        "created_at": "2025-02-01T00:00:00+00:00",
    },
]


class FakeRecordStore(RecordStore):
    """In-memory record store that records every call it receives."""

    def __init__(self, tables=None):
        self.tables = tables or {
            "products": [dict(row) for row in SEED_PRODUCTS],
            "categories": [dict(row) for row in SEED_CATEGORIES],
        }
        self.calls = []
        self._failures = {}
        self._ids = itertools.count(100)
        self._clock = itertools.count(1)

    def fail_on(self, operation, collection, message):
        self._failures[(operation, collection)] = StoreError(message)

    def calls_of(self, operation):
        return [call for call in self.calls if call[0] == operation]

    def _check(self, operation, collection):
        error = self._failures.get((operation, collection))
        if error is not None:
            raise error

    @staticmethod
    def _matches(row, match):
        return all(str(row.get(column)) == str(value) for column, value in match.items())

    async def select(self, collection, *, order_by=None, descending=False):
        await asyncio.sleep(0)
        self.calls.append(
            ("select", collection, {"order_by": order_by, "descending": descending})
        )
        self._check("select", collection)
        rows = [dict(row) for row in self.tables.get(collection, [])]
        if order_by:
            rows.sort(key=lambda row: row.get(order_by) or "", reverse=descending)
        return rows

    async def insert(self, collection, rows):
        await asyncio.sleep(0)
        self.calls.append(("insert", collection, {"rows": [dict(row) for row in rows]}))
        self._check("insert", collection)
        stored = []
        for row in rows:
            record = dict(row)
            record["id"] = next(self._ids)
            record["created_at"] = f"2026-01-01T00:00:{next(self._clock):02d}+00:00"
            self.tables.setdefault(collection, []).append(record)
            stored.append(dict(record))
        return stored

    async def update(self, collection, values, *, match):
        await asyncio.sleep(0)
        self.calls.append(
            ("update", collection, {"values": dict(values), "match": dict(match)})
        )
        self._check("update", collection)
        updated = []
        for row in self.tables.get(collection, []):
            if self._matches(row, match):
                row.update(values)
                updated.append(dict(row))
        return updated

    async def delete(self, collection, *, match):
        await asyncio.sleep(0)
        self.calls.append(("delete", collection, {"match": dict(match)}))
        self._check("delete", collection)
        kept, removed = [], []
        for row in self.tables.get(collection, []):
            (removed if self._matches(row, match) else kept).append(row)
        self.tables[collection] = kept
        return removed


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "asyncio: marks tests as async tests")


@pytest.fixture()
def fake_store():
    """Provide a fresh in-memory record store seeded with two products."""
    return FakeRecordStore()


@pytest.fixture(autouse=True)
def store_stub(fake_store):
    """Route the app's record store dependency to the fake store."""
    from src.main import app

    app.dependency_overrides[get_record_store] = lambda: fake_store
    yield fake_store
    app.dependency_overrides.pop(get_record_store, None)


@pytest_asyncio.fixture()
async def redis_client():
    """Provide a fake Redis client for each test."""
    from src.main import app

    client = fakeredis.FakeRedis()
    app.dependency_overrides[get_redis_client] = lambda: client
    try:
        yield client
    finally:
        await client.flushdb()
        await client.aclose()
        app.dependency_overrides.pop(get_redis_client, None)


@pytest_asyncio.fixture()
async def client(redis_client):
    """Return an HTTPX async client pointing at the FastAPI app."""
    from src.main import app

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as test_client:
        yield test_client
