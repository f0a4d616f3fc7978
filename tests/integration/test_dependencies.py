"""Tests for the session cookie gate on privileged routes."""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from adminpanel.api.dependencies import CurrentAdmin, get_session_store
from adminpanel.services.session_store import SessionStore


@pytest.fixture
def store():
    return SessionStore()


@pytest.fixture
def app(store):
    app = FastAPI()

    @app.get("/admin/whoami")
    async def whoami(admin: CurrentAdmin):
        return {"username": admin}

    app.dependency_overrides[get_session_store] = lambda: store
    return app


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


class TestCurrentAdmin:

    async def test_missing_cookie(self, client):
        response = await client.get("/admin/whoami")

        assert response.status_code == 401
        assert response.json()["detail"] == "Not authenticated"

    async def test_unknown_token(self, client):
        response = await client.get("/admin/whoami", cookies={"session_id": "bogus"})

        assert response.status_code == 401

    async def test_valid_session(self, client, store):
        store.set("token-1", "admin", 60)

        response = await client.get("/admin/whoami", cookies={"session_id": "token-1"})

        assert response.status_code == 200
        assert response.json() == {"username": "admin"}

    async def test_expired_session(self, client, store):
        store.set("token-1", "admin", 0)

        response = await client.get("/admin/whoami", cookies={"session_id": "token-1"})

        assert response.status_code == 401
        assert "token-1" not in store
