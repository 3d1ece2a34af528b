"""Shared test fixtures for all test groups."""

import httpx
import pytest

from projectdesk.core.tokens import TokenIssuer
from projectdesk.db.base import Database
from projectdesk.integrations.wechat import WeChatClient

TEST_JWT_SECRET = "test-secret"


def wechat_transport(openids: dict[str, str], calls: list | None = None) -> httpx.MockTransport:
    """Fake jscode2session: known codes map to openids, anything else is rejected."""

    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        code = request.url.params.get("js_code")
        if code in openids:
            return httpx.Response(200, json={"openid": openids[code], "session_key": "sk-" + code})
        return httpx.Response(200, json={"errcode": 40029, "errmsg": "invalid code"})

    return httpx.MockTransport(handler)


def make_wechat_client(openids: dict[str, str], calls: list | None = None) -> WeChatClient:
    return WeChatClient(
        app_id="wx-test-app",
        app_secret="wx-test-secret",
        transport=wechat_transport(openids, calls),
    )


@pytest.fixture
def sqlite_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'projectdesk.db'}"


@pytest.fixture
async def database(sqlite_url):
    """Connected store backed by a throwaway SQLite file."""
    db = Database(sqlite_url)
    assert await db.connect()
    yield db
    await db.close()


@pytest.fixture
def offline_database() -> Database:
    """Store handle with no URL configured: never connects."""
    return Database("")


@pytest.fixture
def wechat_factory():
    """Build a WeChatClient answering from a code -> openid map."""
    return make_wechat_client


@pytest.fixture
def token_issuer() -> TokenIssuer:
    return TokenIssuer(secret=TEST_JWT_SECRET)


@pytest.fixture
def wechat_client() -> WeChatClient:
    return make_wechat_client({
        "code-alice": "openid-alice",
        "code-bob": "openid-bob",
        "code-carol": "openid-carol",
    })
