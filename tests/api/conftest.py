"""API-specific test fixtures."""

import pytest
from fastapi.testclient import TestClient

from projectdesk.api.deps import get_identity_client, get_token_issuer
from projectdesk.db.base import Database
from projectdesk.main import create_app


@pytest.fixture
def make_api_client(sqlite_url, wechat_client, token_issuer):
    """Build a TestClient for an app serving from ``database``.

    The store handle is created here rather than in the pytest-asyncio loop:
    the TestClient runs the lifespan (and every request) in its own loop.
    """
    clients = []

    def _make(database: Database | None = None, identity_client=None, **client_kwargs) -> TestClient:
        app = create_app(database=database or Database(sqlite_url))
        app.dependency_overrides[get_identity_client] = lambda: identity_client or wechat_client
        app.dependency_overrides[get_token_issuer] = lambda: token_issuer
        client = TestClient(app, **client_kwargs)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def api_client(make_api_client) -> TestClient:
    """TestClient backed by a fresh SQLite store and a fake WeChat."""
    return make_api_client()


@pytest.fixture
def login(api_client):
    """Log a user in through the API and return the login payload."""

    def _login(code: str = "code-alice", **profile) -> dict:
        response = api_client.post("/api/login", json={"code": code, **profile})
        assert response.status_code == 200, response.text
        return response.json()

    return _login
