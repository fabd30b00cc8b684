"""Shared fakes for domain tests: an in-memory store and auth provider."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from typing import Any

import pytest

from galleryvote.config.errors import StorageError
from galleryvote.domains.session.models import (
    AuthSession,
    Identity,
    OAuthRedirect,
    SessionEvent,
)


class InMemoryStore:
    """DataStore fake that enforces the upsert conflict target."""

    def __init__(self, tables: dict[str, list[dict[str, Any]]] | None = None) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = tables or {}
        self.calls: list[tuple[str, str]] = []
        self.failures: dict[str, StorageError] = {}
        self.gate: asyncio.Event | None = None

    async def _enter(self, operation: str, table: str) -> None:
        self.calls.append((operation, table))
        if self.gate is not None:
            await self.gate.wait()
        if operation in self.failures:
            raise self.failures[operation]

    @staticmethod
    def _matches(row: Mapping[str, Any], filters: Mapping[str, Any]) -> bool:
        return all(row.get(column) == value for column, value in filters.items())

    async def select_all(self, table: str) -> list[dict[str, Any]]:
        await self._enter("select_all", table)
        return [dict(row) for row in self.tables.get(table, [])]

    async def select_where(
        self, table: str, filters: Mapping[str, Any]
    ) -> list[dict[str, Any]]:
        await self._enter("select_where", table)
        return [dict(r) for r in self.tables.get(table, []) if self._matches(r, filters)]

    async def upsert(
        self, table: str, row: Mapping[str, Any], conflict_keys: Sequence[str]
    ) -> None:
        await self._enter("upsert", table)
        rows = self.tables.setdefault(table, [])
        key = {column: row[column] for column in conflict_keys}
        for existing in rows:
            if self._matches(existing, key):
                existing.update(row)
                return
        rows.append(dict(row))

    async def delete_where(self, table: str, filters: Mapping[str, Any]) -> None:
        await self._enter("delete_where", table)
        self.tables[table] = [
            r for r in self.tables.get(table, []) if not self._matches(r, filters)
        ]

    def writes(self) -> list[str]:
        return [op for op, _ in self.calls if op in ("upsert", "delete_where")]


class FakeAuthProvider:
    """AuthProvider fake; tests drive transitions with sign_in/sign_out."""

    def __init__(
        self,
        session: AuthSession | None = None,
        error: Exception | None = None,
        refresh_on_lookup: bool = False,
    ) -> None:
        self.session = session
        self.error = error
        self.refresh_on_lookup = refresh_on_lookup
        self.listeners: dict[int, Any] = {}
        self.oauth_requests: list[tuple[str, str]] = []
        self._next = 0

    async def get_session(self) -> AuthSession | None:
        if self.error is not None:
            raise self.error
        if self.refresh_on_lookup and self.session is not None:
            # An expired stored session is refreshed while it is being read
            await self.emit(SessionEvent.TOKEN_REFRESHED, self.session)
        return self.session

    async def get_user(self) -> Identity | None:
        return self.session.user if self.session else None

    def on_session_change(self, handler):
        key = self._next
        self._next += 1
        self.listeners[key] = handler

        def unsubscribe() -> None:
            self.listeners.pop(key, None)

        return unsubscribe

    async def emit(self, event: SessionEvent, session: AuthSession | None) -> None:
        for handler in list(self.listeners.values()):
            await handler(event, session)

    async def begin_oauth(self, provider: str, redirect_to: str) -> OAuthRedirect:
        self.oauth_requests.append((provider, redirect_to))
        return OAuthRedirect(
            url=f"https://auth.example/authorize?provider={provider}",
            provider=provider,
            redirect_to=redirect_to,
        )

    async def exchange_code_for_session(self, code: str) -> AuthSession:
        assert self.session is not None
        await self.emit(SessionEvent.SIGNED_IN, self.session)
        return self.session

    async def refresh_session(self) -> AuthSession | None:
        return self.session

    async def sign_in(self, session: AuthSession) -> None:
        self.session = session
        await self.emit(SessionEvent.SIGNED_IN, session)

    async def sign_out(self) -> None:
        self.session = None
        await self.emit(SessionEvent.SIGNED_OUT, None)


def make_session(user_id: str = "u1", email: str = "u1@example.com") -> AuthSession:
    return AuthSession(
        access_token=f"token-{user_id}",
        refresh_token=f"refresh-{user_id}",
        user=Identity(id=user_id, email=email),
    )


@pytest.fixture
def identity() -> Identity:
    return Identity(id="u1", email="u1@example.com")


@pytest.fixture
def captions() -> list[dict[str, Any]]:
    return [
        {
            "id": "c1",
            "content": "A cat wearing a tiny hat",
            "is_featured": True,
            "created_datetime_utc": "2025-01-10T12:00:00+00:00",
        },
        {
            "id": "c2",
            "content": "Monday, again",
            "is_featured": False,
            "created_datetime_utc": "2025-01-11T08:30:00+00:00",
        },
    ]


@pytest.fixture
def store(captions: list[dict[str, Any]]) -> InMemoryStore:
    return InMemoryStore({"captions": captions, "caption_votes": []})


@pytest.fixture
def signed_in_auth() -> FakeAuthProvider:
    return FakeAuthProvider(session=make_session())


@pytest.fixture
def signed_out_auth() -> FakeAuthProvider:
    return FakeAuthProvider()


@pytest.fixture
def session_factory():
    return make_session


@pytest.fixture
def auth_factory():
    return FakeAuthProvider
