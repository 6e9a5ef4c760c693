"""Tests for the admin cookie gate."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api_forward.auth import AdminAuth, is_protected
from api_forward.models.config import AdminConfig


@pytest.fixture
def app_with_auth():
    """FastAPI app with auth middleware."""
    app = FastAPI()
    auth = AdminAuth(AdminConfig(token="test-secret", cookie_name="admin_cookie"))

    @app.get("/config")
    async def config():
        return {"apiUrls": {}}

    @app.get("/open")
    async def open_endpoint():
        return {"status": "ok"}

    app.middleware("http")(auth)
    return app


def test_valid_cookie(app_with_auth):
    """Matching admin cookie passes."""
    client = TestClient(app_with_auth, cookies={"admin_cookie": "test-secret"})
    response = client.get("/config")
    assert response.status_code == 200


def test_missing_cookie(app_with_auth):
    """Missing cookie returns 401."""
    client = TestClient(app_with_auth)
    response = client.get("/config")
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


def test_wrong_cookie(app_with_auth):
    """Wrong token returns 401."""
    client = TestClient(app_with_auth, cookies={"admin_cookie": "nope"})
    assert client.get("/config").status_code == 401


def test_unprotected_path(app_with_auth):
    """Other paths need no cookie."""
    client = TestClient(app_with_auth)
    assert client.get("/open").status_code == 200


@pytest.mark.parametrize(
    "path, expected",
    [("/config", True), ("/config/x", True), ("/configs", False), ("/ycy", False)],
)
def test_is_protected(path, expected):
    """Only /config and below is guarded."""
    assert is_protected(path) is expected
