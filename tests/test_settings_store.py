import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from settings_api.db import postgres
from settings_api.db.postgres import SettingsStore, init_db


@pytest_asyncio.fixture()
async def settings_store():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    await init_db(engine)
    store = SettingsStore(engine)
    yield store
    await store.close()


@pytest.mark.asyncio
async def test_insert_assigns_id_and_timestamps(settings_store):
    setting = await settings_store.insert("theme", "dark")

    assert setting.id == 1
    assert setting.created_at is not None
    assert setting.updated_at is not None


@pytest.mark.asyncio
async def test_get_by_key_returns_none_when_absent(settings_store):
    await settings_store.insert("theme", "dark")

    found = await settings_store.get_by_key("theme")
    assert found.value == "dark"
    assert await settings_store.get_by_key("missing") is None


@pytest.mark.asyncio
async def test_list_all_is_newest_id_first(settings_store):
    assert await settings_store.list_all() == []

    for key in ("a", "b", "c"):
        await settings_store.insert(key, key.upper())

    rows = await settings_store.list_all()
    assert [row.key for row in rows] == ["c", "b", "a"]


@pytest.mark.asyncio
async def test_update_value_reports_matched_rows(settings_store):
    await settings_store.insert("theme", "dark")

    assert await settings_store.update_value("missing", "x") == 0
    assert await settings_store.update_value("theme", "light") == 1
    assert (await settings_store.get_by_key("theme")).value == "light"


@pytest.mark.asyncio
async def test_ping(settings_store):
    await settings_store.ping()


class UnreachableEngine:
    def __init__(self):
        self.disposed = False

    def connect(self):
        return self

    async def __aenter__(self):
        raise ConnectionRefusedError("connection refused")

    async def __aexit__(self, *exc_info):
        return False

    async def dispose(self):
        self.disposed = True


@pytest.mark.asyncio
async def test_connect_postgres_raises_connection_error_and_disposes_engine(monkeypatch):
    engine = UnreachableEngine()
    captured = {}

    def fake_create_async_engine(url, **kwargs):
        captured["url"] = url
        return engine

    monkeypatch.setattr(postgres, "create_async_engine", fake_create_async_engine)

    with pytest.raises(ConnectionError):
        await postgres.connect_postgres("pg.invalid", 5432, "postgres", "p@ss:word", "settingsdb")
    assert engine.disposed
    assert captured["url"].host == "pg.invalid"
    assert captured["url"].password == "p@ss:word"
    assert captured["url"].database == "settingsdb"
