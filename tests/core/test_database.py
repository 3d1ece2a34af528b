"""Tests for the connect-once store handle."""
from unittest.mock import patch

import pytest

from projectdesk.core.exceptions import StoreUnavailableError
from projectdesk.db.base import Database, resolve_store_url

pytestmark = pytest.mark.integration


@pytest.mark.unit
def test_resolve_store_url_fills_database_name():
    url = resolve_store_url("postgresql+asyncpg://app:pw@db:5432", "miniprogram")
    assert url.database == "miniprogram"


@pytest.mark.unit
def test_resolve_store_url_keeps_explicit_database():
    url = resolve_store_url("postgresql+asyncpg://app:pw@db:5432/projects", "miniprogram")
    assert url.database == "projects"


@pytest.mark.unit
def test_resolve_store_url_leaves_sqlite_alone():
    url = resolve_store_url("sqlite+aiosqlite://", "miniprogram")
    assert url.database is None


async def test_unconfigured_store_never_connects(offline_database):
    assert await offline_database.connect() is False
    assert offline_database.connected is False
    assert await offline_database.ping() is False
    with pytest.raises(StoreUnavailableError):
        offline_database.session_factory


async def test_connect_is_idempotent(sqlite_url):
    db = Database(sqlite_url)
    try:
        assert await db.connect() is True
        factory = db.session_factory
        assert await db.connect() is True
        assert db.session_factory is factory
        assert await db.ping() is True
    finally:
        await db.close()


async def test_close_resets_handle(sqlite_url):
    db = Database(sqlite_url)
    await db.connect()
    await db.close()

    assert db.connected is False
    assert await db.ping() is False
    assert await db.connect() is True
    await db.close()


async def test_unreachable_store_reports_failure(tmp_path):
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'missing-dir' / 'store.db'}")
    assert await db.connect() is False
    assert db.connected is False


async def test_failed_connect_backs_off_before_retrying(tmp_path):
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'missing-dir' / 'store.db'}", retry_after_seconds=60)
    assert await db.connect() is False

    with patch("projectdesk.db.base.create_async_engine") as create_engine:
        assert await db.connect() is False

    create_engine.assert_not_called()


async def test_connect_retries_once_backoff_has_passed(tmp_path):
    store_dir = tmp_path / "later"
    db = Database(f"sqlite+aiosqlite:///{store_dir / 'store.db'}", retry_after_seconds=0)
    assert await db.connect() is False

    store_dir.mkdir()
    try:
        assert await db.connect() is True
    finally:
        await db.close()
