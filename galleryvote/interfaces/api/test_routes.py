"""Tests for API Routes."""

from __future__ import annotations

import json
from collections.abc import Generator
from typing import Any

import httpx
import pytest
from cryptography.fernet import Fernet
from fastapi.testclient import TestClient

from galleryvote.adapters.supabase import SupabaseClient
from galleryvote.config import ErrorCode, get_settings
from galleryvote.domains.session import AuthSession, Identity

from .auth import TokenEncryption, get_encryption
from .deps import get_supabase_client
from .main import create_app
from .middleware import status_for

CAPTIONS = [
    {"id": "c1", "content": "A cat wearing a tiny hat", "is_featured": True},
    {"id": "c2", "content": "Monday, again", "is_featured": False},
]


class FakeSupabase:
    """Just enough GoTrue and PostgREST to drive the routes."""

    def __init__(self) -> None:
        self.captions: list[dict[str, Any]] = list(CAPTIONS)
        self.votes: list[dict[str, Any]] = []
        self.token_status = 200
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        params = request.url.params

        if path == "/auth/v1/token":
            if self.token_status != 200:
                return httpx.Response(
                    self.token_status, json={"error_description": "invalid grant"}
                )
            return httpx.Response(200, json=_token_payload())
        if path == "/auth/v1/user":
            return httpx.Response(200, json={"id": "u1", "email": "u1@example.com"})
        if path == "/auth/v1/logout":
            return httpx.Response(204)
        if path == "/rest/v1/captions":
            return httpx.Response(200, json=self.captions)
        if path == "/rest/v1/caption_votes":
            return self._votes(request, params)
        return httpx.Response(404, json={"message": f"no route {path}"})

    def _votes(self, request: httpx.Request, params: httpx.QueryParams) -> httpx.Response:
        if request.method == "GET":
            owner = params["profile_id"].removeprefix("eq.")
            return httpx.Response(
                200, json=[v for v in self.votes if v["profile_id"] == owner]
            )
        if request.method == "POST":
            row = json.loads(request.content)
            self.votes = [
                v
                for v in self.votes
                if (v["profile_id"], v["caption_id"]) != (row["profile_id"], row["caption_id"])
            ]
            self.votes.append(row)
            return httpx.Response(201)
        if request.method == "DELETE":
            item = params["caption_id"].removeprefix("eq.")
            owner = params["profile_id"].removeprefix("eq.")
            self.votes = [
                v
                for v in self.votes
                if (v["profile_id"], v["caption_id"]) != (owner, item)
            ]
            return httpx.Response(204)
        return httpx.Response(405)

    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]


def _token_payload() -> dict[str, Any]:
    return {
        "access_token": "access-1",
        "token_type": "bearer",
        "expires_in": 3600,
        "refresh_token": "refresh-1",
        "user": {"id": "u1", "email": "u1@example.com"},
    }


@pytest.fixture
def supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def encryption() -> TokenEncryption:
    return TokenEncryption(Fernet.generate_key().decode())


@pytest.fixture
def client(
    supabase: FakeSupabase, encryption: TokenEncryption
) -> Generator[TestClient, None, None]:
    """Create a test client against a fake Supabase project."""
    app = create_app()
    supabase_client = SupabaseClient(
        "https://project.supabase.co",
        "anon-key",
        transport=httpx.MockTransport(supabase.handler),
    )

    app.dependency_overrides[get_supabase_client] = lambda: supabase_client
    app.dependency_overrides[get_encryption] = lambda: encryption

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def signed_in(client: TestClient, encryption: TokenEncryption) -> TestClient:
    """Client carrying a valid session cookie."""
    session = AuthSession(
        access_token="access-1",
        refresh_token="refresh-1",
        expires_at=2_000_000_000,
        user=Identity(id="u1", email="u1@example.com"),
    )
    client.cookies.set(
        get_settings().session_cookie_name,
        encryption.encrypt(session.model_dump_json()),
    )
    return client


# --- Health ---


def test_health_endpoint(client: TestClient) -> None:
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "galleryvote"


def test_request_id_header(client: TestClient) -> None:
    """Test request ids are echoed back."""
    response = client.get("/health", headers={"X-Request-ID": "req-42"})

    assert response.headers["X-Request-ID"] == "req-42"
    assert "X-Response-Time-Ms" in response.headers


# --- Landing / Protected ---


def test_landing_signed_out(client: TestClient) -> None:
    """Test the landing page offers sign-in when there is no session."""
    response = client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert data["signed_in"] is False
    assert data["login_url"] == "/auth/login"


def test_landing_signed_in(signed_in: TestClient) -> None:
    """Test the landing page shows the signed-in email."""
    data = signed_in.get("/").json()

    assert data["signed_in"] is True
    assert data["email"] == "u1@example.com"


def test_protected_redirects_without_session(client: TestClient) -> None:
    """Test the gated page sends anonymous visitors back to /."""
    response = client.get("/protected", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == "/"


def test_protected_with_session(signed_in: TestClient, supabase: FakeSupabase) -> None:
    """Test the gated page validates the session with the provider."""
    response = signed_in.get("/protected")

    assert response.status_code == 200
    assert response.json() == {
        "title": "Gated Content",
        "email": "u1@example.com",
        "user_id": "u1",
    }
    assert "/auth/v1/user" in supabase.paths()


# --- OAuth ---


def test_login_redirects_to_provider(client: TestClient) -> None:
    """Test login sends the browser to the authorize URL with the fixed return address."""
    response = client.get("/auth/login", follow_redirects=False)

    assert response.status_code == 302
    location = httpx.URL(response.headers["location"])
    assert location.path == "/auth/v1/authorize"
    assert location.params["provider"] == get_settings().oauth_provider
    assert location.params["redirect_to"] == get_settings().callback_url
    assert location.params["code_challenge"]
    assert "-code-verifier=" in response.headers["set-cookie"]


def test_callback_success_redirects_to_protected(
    client: TestClient, supabase: FakeSupabase
) -> None:
    """Test a valid code lands on /protected with a session cookie."""
    client.get("/auth/login", follow_redirects=False)

    response = client.get("/auth/callback?code=abc123", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == "/protected"
    assert "/auth/v1/token" in supabase.paths()

    landing = client.get("/").json()
    assert landing["signed_in"] is True


def test_callback_without_code(client: TestClient, supabase: FakeSupabase) -> None:
    """Test a callback with no code goes back to / without calling the provider."""
    response = client.get(
        "/auth/callback?error=access_denied", follow_redirects=False
    )

    assert response.status_code == 302
    assert response.headers["location"] == "/"
    assert supabase.requests == []


def test_callback_rejected_code(client: TestClient, supabase: FakeSupabase) -> None:
    """Test a failed exchange goes back to / without a session."""
    supabase.token_status = 400
    client.get("/auth/login", follow_redirects=False)

    response = client.get("/auth/callback?code=stale", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == "/"
    assert client.get("/").json()["signed_in"] is False


def test_callback_rejected_code_drops_verifier(
    client: TestClient, supabase: FakeSupabase
) -> None:
    """Test a failed exchange deletes the leftover PKCE verifier cookie."""
    supabase.token_status = 400
    client.get("/auth/login", follow_redirects=False)

    response = client.get("/auth/callback?code=stale", follow_redirects=False)

    verifier = [
        cookie
        for cookie in response.headers.get_list("set-cookie")
        if "-code-verifier=" in cookie
    ]
    assert len(verifier) == 1
    assert "max-age=0" in verifier[0].lower()


def test_callback_without_verifier(client: TestClient, supabase: FakeSupabase) -> None:
    """Test a code with no sign-in in progress is refused locally."""
    response = client.get("/auth/callback?code=abc123", follow_redirects=False)

    assert response.headers["location"] == "/"
    assert supabase.requests == []


def test_logout(signed_in: TestClient, supabase: FakeSupabase) -> None:
    """Test logout revokes the session and clears the cookie."""
    response = signed_in.post("/auth/logout", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == "/"
    assert "/auth/v1/logout" in supabase.paths()
    cookie = response.headers["set-cookie"]
    assert cookie.startswith(f"{get_settings().session_cookie_name}=")
    assert "max-age=0" in cookie.lower()


# --- Gallery ---


def test_gallery_requires_session(client: TestClient, supabase: FakeSupabase) -> None:
    """Test the gallery is gated."""
    response = client.get("/api/gallery")

    assert response.status_code == 401
    assert supabase.requests == []


def test_gallery_rejected_refresh_clears_cookie(
    client: TestClient, supabase: FakeSupabase, encryption: TokenEncryption
) -> None:
    """Test a 401 caused by a rejected refresh token also deletes the session cookie."""
    expired = AuthSession(
        access_token="access-0",
        refresh_token="refresh-0",
        expires_at=1,
        user=Identity(id="u1", email="u1@example.com"),
    )
    client.cookies.set(
        get_settings().session_cookie_name,
        encryption.encrypt(expired.model_dump_json()),
    )
    supabase.token_status = 400

    response = client.get("/api/gallery")

    assert response.status_code == 401
    cookie = response.headers["set-cookie"]
    assert cookie.startswith(f"{get_settings().session_cookie_name}=")
    assert "max-age=0" in cookie.lower()


def test_gallery_snapshot(signed_in: TestClient, supabase: FakeSupabase) -> None:
    """Test the gallery lists content with the viewer's own votes."""
    supabase.votes = [
        {"caption_id": "c2", "profile_id": "u1", "vote_value": -1},
        {"caption_id": "c1", "profile_id": "u2", "vote_value": 1},
    ]

    data = signed_in.get("/api/gallery").json()

    assert data["signed_in"] is True
    assert data["email"] == "u1@example.com"
    assert [item["id"] for item in data["items"]] == ["c1", "c2"]
    assert data["items"][0]["vote"] is None
    assert data["items"][1]["vote"] == -1
    assert data["is_empty"] is False


def test_gallery_empty(signed_in: TestClient, supabase: FakeSupabase) -> None:
    """Test an empty content table yields the empty state."""
    supabase.captions = []

    data = signed_in.get("/api/gallery").json()

    assert data["items"] == []
    assert data["is_empty"] is True


def test_vote_cycle(signed_in: TestClient, supabase: FakeSupabase) -> None:
    """Test up, up again, then down through the API."""
    first = signed_in.post("/api/gallery/c1/vote", json={"direction": 1}).json()
    assert first["items"][0]["vote"] == 1
    assert supabase.votes[0]["vote_value"] == 1

    second = signed_in.post("/api/gallery/c1/vote", json={"direction": 1}).json()
    assert second["items"][0]["vote"] is None
    assert supabase.votes == []

    third = signed_in.post("/api/gallery/c1/vote", json={"direction": -1}).json()
    assert third["items"][0]["vote"] == -1
    assert supabase.votes[0]["vote_value"] == -1


def test_vote_requires_session(client: TestClient, supabase: FakeSupabase) -> None:
    """Test voting without a session is refused and writes nothing."""
    response = client.post("/api/gallery/c1/vote", json={"direction": 1})

    assert response.status_code == 401
    assert supabase.votes == []


def test_vote_invalid_direction(signed_in: TestClient, supabase: FakeSupabase) -> None:
    """Test a direction other than 1 or -1 is rejected."""
    response = signed_in.post("/api/gallery/c1/vote", json={"direction": 2})

    assert response.status_code == 422
    assert supabase.votes == []


# --- Error Mapping ---


def test_status_for_error_codes() -> None:
    """Test taxonomy codes map onto HTTP statuses."""
    assert status_for(ErrorCode.VOTE_INVALID_DIRECTION) == 422
    assert status_for(ErrorCode.STORAGE_WRITE_FAILED) == 502
    assert status_for(ErrorCode.STORAGE_CONNECTION_FAILED) == 503
    assert status_for(ErrorCode.INTERNAL_ERROR) == 500


def test_refresh_outage_is_structured_error(
    client: TestClient, supabase: FakeSupabase, encryption: TokenEncryption
) -> None:
    """Test a provider outage during refresh returns the error envelope."""
    expired = AuthSession(
        access_token="access-0",
        refresh_token="refresh-0",
        expires_at=1,
        user=Identity(id="u1", email="u1@example.com"),
    )
    client.cookies.set(
        get_settings().session_cookie_name,
        encryption.encrypt(expired.model_dump_json()),
    )
    supabase.token_status = 503

    response = client.get("/", headers={"X-Request-ID": "req-7"})

    assert response.status_code == 401
    body = response.json()
    assert body["error"]["code"] == ErrorCode.AUTH_REFRESH_FAILED.value
    assert body["request_id"] == "req-7"
