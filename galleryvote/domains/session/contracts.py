"""
Session Contracts - Interfaces for the session domain.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Protocol, runtime_checkable

from .models import AuthSession, Identity, OAuthRedirect, SessionEvent

SessionChangeHandler = Callable[[SessionEvent, "AuthSession | None"], Awaitable[None]]
Unsubscribe = Callable[[], None]


@runtime_checkable
class AuthProvider(Protocol):
    """Contract for the hosted authentication provider."""

    async def get_session(self) -> AuthSession | None:
        """Return the stored session, refreshing it if expired."""
        ...

    async def get_user(self) -> Identity | None:
        """Validate the stored access token with the provider."""
        ...

    def on_session_change(self, handler: SessionChangeHandler) -> Unsubscribe:
        """Register a transition listener; returns its unsubscribe callable."""
        ...

    async def begin_oauth(self, provider: str, redirect_to: str) -> OAuthRedirect:
        """Prepare a redirect-based OAuth handshake."""
        ...

    async def exchange_code_for_session(self, code: str) -> AuthSession:
        """Trade an authorization code for a session."""
        ...

    async def refresh_session(self) -> AuthSession | None:
        """Exchange the refresh token for a new session."""
        ...

    async def sign_out(self) -> None:
        """Invalidate the current session."""
        ...


@runtime_checkable
class SessionStorage(Protocol):
    """Where an auth provider keeps its session and PKCE verifier."""

    def load_session(self) -> AuthSession | None: ...

    def save_session(self, session: AuthSession) -> None: ...

    def clear_session(self) -> None: ...

    def load_code_verifier(self) -> str | None: ...

    def save_code_verifier(self, verifier: str) -> None: ...

    def clear_code_verifier(self) -> None: ...
