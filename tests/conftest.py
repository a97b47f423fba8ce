import time
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError

from settings_api.config import settings
from settings_api.db.models import Setting
from settings_api.main import create_app
from settings_api.utils.security import create_access_token


class StubStore:
    """In-memory stand-in for SettingsStore. Set `fail` to make every call raise."""

    def __init__(self):
        self.rows = []
        self.next_id = 1
        self.fail = False
        self.writes = 0

    def _check(self):
        if self.fail:
            raise SQLAlchemyError("database unavailable")

    async def get_by_key(self, key):
        self._check()
        return next((row for row in self.rows if row.key == key), None)

    async def list_all(self):
        self._check()
        return sorted(self.rows, key=lambda row: row.id, reverse=True)

    async def insert(self, key, value):
        self._check()
        now = datetime.now(timezone.utc)
        row = Setting(id=self.next_id, key=key, value=value, created_at=now, updated_at=now)
        self.next_id += 1
        self.rows.append(row)
        self.writes += 1
        return row

    async def update_value(self, key, value):
        self._check()
        matched = [row for row in self.rows if row.key == key]
        for row in matched:
            row.value = value
            row.updated_at = datetime.now(timezone.utc)
        self.writes += 1
        return len(matched)

    async def ping(self):
        self._check()


class StubCache:
    """In-memory stand-in for SettingsCache with monotonic-clock expiry."""

    def __init__(self):
        self.entries = {}
        self.fail = False
        self.writes = 0

    def _check(self):
        if self.fail:
            raise RedisError("redis unavailable")

    async def set_with_expiry(self, key, value, ttl):
        self._check()
        self.entries[key] = (value, time.monotonic() + ttl)
        self.writes += 1

    async def remaining_expiry(self, key):
        self._check()
        entry = self.entries.get(key)
        if entry is None:
            return None
        remaining = int(entry[1] - time.monotonic())
        return remaining if remaining > 0 else None

    async def ping(self):
        self._check()
        return True


@pytest.fixture()
def store():
    return StubStore()


@pytest.fixture()
def cache():
    return StubCache()


@pytest.fixture()
def client(store, cache):
    return TestClient(create_app(store=store, cache=cache))


@pytest.fixture()
def secret(monkeypatch):
    monkeypatch.setattr(settings, "JWT_SECRET_KEY", "test-secret")
    return "test-secret"


@pytest.fixture()
def auth_headers(secret):
    return {"Authorization": create_access_token("admin")}
