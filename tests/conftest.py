from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from core import db


class FakeDatabase:
    """Stands in for the asyncpg helpers; records SQL and replays queued results."""

    def __init__(self):
        self.calls: list[tuple[str, str, tuple[Any, ...]]] = []
        self.one: list[Any] = []
        self.all: list[list[dict[str, Any]]] = []
        self.values: list[Any] = []
        self.columns: dict[str, list[str]] = {}

    def _take(self, queue: list[Any], default: Any) -> Any:
        item = queue.pop(0) if queue else default
        if isinstance(item, BaseException):
            raise item
        return item

    async def fetch_one(self, sql: str, *args: Any):
        self.calls.append(("fetch_one", sql, args))
        return self._take(self.one, None)

    async def fetch_all(self, sql: str, *args: Any):
        self.calls.append(("fetch_all", sql, args))
        return self._take(self.all, [])

    async def fetch_value(self, sql: str, *args: Any):
        self.calls.append(("fetch_value", sql, args))
        return self._take(self.values, 0)

    async def list_columns(self, table: str) -> list[str]:
        self.calls.append(("list_columns", table, ()))
        return self.columns.get(table, [])

    def sql(self, method: str) -> list[tuple[str, tuple[Any, ...]]]:
        return [(sql, args) for name, sql, args in self.calls if name == method]


@pytest.fixture
def fake_db(monkeypatch) -> FakeDatabase:
    fake = FakeDatabase()
    monkeypatch.setattr(db, "fetch_one", fake.fetch_one)
    monkeypatch.setattr(db, "fetch_all", fake.fetch_all)
    monkeypatch.setattr(db, "fetch_value", fake.fetch_value)
    monkeypatch.setattr(db, "list_columns", fake.list_columns)
    monkeypatch.setenv("DATABASE_DRIVER", "pgsql")
    monkeypatch.delenv("DB_TABLE_PREFIX", raising=False)
    monkeypatch.delenv("JSONAPI_STRICT", raising=False)
    monkeypatch.delenv("JSONAPI_PAGE_LIMIT", raising=False)
    monkeypatch.delenv("API_VERSION", raising=False)
    monkeypatch.delenv("JSONAPI_VERSION", raising=False)
    return fake


@pytest_asyncio.fixture
async def client(fake_db: FakeDatabase) -> AsyncGenerator[AsyncClient]:
    from main import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


def user_row(**overrides: Any) -> dict[str, Any]:
    row = {
        "id": 1,
        "name": "test",
        "email": "test@test.com",
        "password_hash": "$2b$12$hash",
        "created_at": datetime(2016, 3, 10, 17, 40, 46, tzinfo=timezone.utc),
        "updated_at": datetime(2016, 3, 11, 20, 45, 18, tzinfo=timezone.utc),
    }
    row.update(overrides)
    return row


@pytest.fixture
def make_user_row():
    return user_row
