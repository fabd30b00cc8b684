"""
Supabase Auth - GoTrue adapter for the auth provider boundary.

Features:
- PKCE authorization-code flow (authorize URL + code exchange)
- Session persistence through a pluggable SessionStorage
- Transparent refresh of expired sessions
- Session transition listeners (SIGNED_IN, SIGNED_OUT, TOKEN_REFRESHED)
"""

from __future__ import annotations

import base64
import hashlib
import itertools
import logging
import secrets

import httpx
from pydantic import ValidationError

from galleryvote.config.errors import AuthError, ErrorCode
from galleryvote.domains.session.contracts import (
    SessionChangeHandler,
    SessionStorage,
    Unsubscribe,
)
from galleryvote.domains.session.models import (
    AuthSession,
    Identity,
    OAuthRedirect,
    SessionEvent,
)

from .client import SupabaseClient, error_message
from .models import TokenResponse, UserPayload
from .storage import MemorySessionStorage

logger = logging.getLogger(__name__)

__all__ = ["SupabaseAuth", "code_challenge"]


def code_challenge(verifier: str) -> str:
    """S256 PKCE challenge for ``verifier``."""
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


class SupabaseAuth:
    """
    Auth provider backed by Supabase GoTrue.

    Example:
        >>> auth = SupabaseAuth(client)
        >>> redirect = await auth.begin_oauth("google", "http://localhost:8000/auth/callback")
        >>> # ... browser comes back with ?code=...
        >>> session = await auth.exchange_code_for_session(code)
    """

    def __init__(
        self,
        client: SupabaseClient,
        storage: SessionStorage | None = None,
    ) -> None:
        """
        Initialize auth adapter.

        Args:
            client: Shared Supabase client
            storage: Where the session lives. In-memory if None.
        """
        self._client = client
        self.storage = storage or MemorySessionStorage()
        self._listeners: dict[int, SessionChangeHandler] = {}
        self._ids = itertools.count()

    # --- Listeners ---

    def on_session_change(self, handler: SessionChangeHandler) -> Unsubscribe:
        """Register a transition listener."""
        key = next(self._ids)
        self._listeners[key] = handler

        def unsubscribe() -> None:
            self._listeners.pop(key, None)

        return unsubscribe

    async def _emit(self, event: SessionEvent, session: AuthSession | None) -> None:
        for handler in list(self._listeners.values()):
            await handler(event, session)

    # --- Session ---

    def access_token(self) -> str | None:
        """Access token of the stored session, if any."""
        session = self.storage.load_session()
        return session.access_token if session else None

    async def get_session(self) -> AuthSession | None:
        """Return the stored session, refreshing it first if expired."""
        session = self.storage.load_session()
        if session is None:
            return None
        if session.is_expired():
            return await self.refresh_session()
        return session

    async def _lookup_user(self, access_token: str) -> Identity | None:
        """Ask GoTrue who ``access_token`` belongs to; None if it is rejected."""
        try:
            response = await self._client.request(
                "GET", "/auth/v1/user", access_token=access_token
            )
        except httpx.HTTPError as e:
            raise AuthError(f"User lookup failed: {e}") from e

        if response.status_code in (401, 403):
            return None
        if response.is_error:
            raise AuthError(error_message(response), {"status": response.status_code})

        try:
            return UserPayload.model_validate(response.json()).to_identity()
        except (ValueError, ValidationError) as e:
            raise AuthError("Unexpected user payload") from e

    async def get_user(self) -> Identity | None:
        """
        Validate the stored access token with GoTrue.

        Returns:
            Identity, or None when there is no session or the token is rejected
        """
        session = await self.get_session()
        if session is None:
            return None
        return await self._lookup_user(session.access_token)

    async def set_session(
        self, access_token: str, refresh_token: str | None = None
    ) -> AuthSession:
        """
        Adopt tokens obtained elsewhere (e.g. copied from a browser).

        The access token is validated with GoTrue before it is stored.

        Raises:
            AuthError: If GoTrue rejects the token
        """
        user = await self._lookup_user(access_token)
        if user is None:
            raise AuthError("Access token rejected", {"status": 401})

        session = AuthSession(
            access_token=access_token, refresh_token=refresh_token, user=user
        )
        self.storage.save_session(session)
        await self._emit(SessionEvent.SIGNED_IN, session)
        return session

    async def refresh_session(self) -> AuthSession | None:
        """
        Exchange the refresh token for a fresh session.

        A rejected refresh token ends the session (SIGNED_OUT).
        """
        session = self.storage.load_session()
        if session is None or not session.refresh_token:
            return None

        try:
            response = await self._client.request(
                "POST",
                "/auth/v1/token",
                params={"grant_type": "refresh_token"},
                json={"refresh_token": session.refresh_token},
            )
        except httpx.HTTPError as e:
            raise AuthError(
                f"Session refresh failed: {e}", code=ErrorCode.AUTH_REFRESH_FAILED
            ) from e

        if response.is_client_error:
            logger.info("Refresh token rejected: %s", error_message(response))
            self.storage.clear_session()
            await self._emit(SessionEvent.SIGNED_OUT, None)
            return None
        if response.is_error:
            raise AuthError(
                error_message(response),
                {"status": response.status_code},
                code=ErrorCode.AUTH_REFRESH_FAILED,
            )

        refreshed = self._parse_session(response, ErrorCode.AUTH_REFRESH_FAILED)
        self.storage.save_session(refreshed)
        await self._emit(SessionEvent.TOKEN_REFRESHED, refreshed)
        return refreshed

    # --- OAuth ---

    async def begin_oauth(self, provider: str, redirect_to: str) -> OAuthRedirect:
        """
        Build the provider authorize URL.

        A PKCE verifier is generated and kept in storage until the code comes
        back. No request is sent; the browser follows the returned URL.
        """
        verifier = secrets.token_urlsafe(64)
        self.storage.save_code_verifier(verifier)

        url = httpx.URL(
            self._client.endpoint("/auth/v1/authorize"),
            params={
                "provider": provider,
                "redirect_to": redirect_to,
                "code_challenge": code_challenge(verifier),
                "code_challenge_method": "s256",
            },
        )
        return OAuthRedirect(url=str(url), provider=provider, redirect_to=redirect_to)

    async def exchange_code_for_session(self, code: str) -> AuthSession:
        """
        Trade an authorization code for a session.

        Raises:
            AuthError: If the verifier is missing or GoTrue rejects the code
        """
        verifier = self.storage.load_code_verifier()
        if not verifier:
            raise AuthError(
                "No PKCE code verifier for this sign-in",
                code=ErrorCode.AUTH_CODE_EXCHANGE_FAILED,
            )

        try:
            response = await self._client.request(
                "POST",
                "/auth/v1/token",
                params={"grant_type": "pkce"},
                json={"auth_code": code, "code_verifier": verifier},
            )
        except httpx.HTTPError as e:
            raise AuthError(
                f"Code exchange failed: {e}", code=ErrorCode.AUTH_CODE_EXCHANGE_FAILED
            ) from e

        if response.is_error:
            raise AuthError(
                error_message(response),
                {"status": response.status_code},
                code=ErrorCode.AUTH_CODE_EXCHANGE_FAILED,
            )

        session = self._parse_session(response, ErrorCode.AUTH_CODE_EXCHANGE_FAILED)
        self.storage.clear_code_verifier()
        self.storage.save_session(session)
        await self._emit(SessionEvent.SIGNED_IN, session)
        return session

    async def sign_out(self) -> None:
        """
        Revoke the session at GoTrue and forget it locally.

        The local session is dropped and SIGNED_OUT fires even if the revoke
        call fails; the failure is logged.
        """
        session = self.storage.load_session()

        if session is not None:
            try:
                response = await self._client.request(
                    "POST",
                    "/auth/v1/logout",
                    access_token=session.access_token,
                )
                if response.is_error and response.status_code not in (401, 403, 404):
                    logger.warning("Sign-out rejected: %s", error_message(response))
            except httpx.HTTPError as e:
                logger.warning("Sign-out request failed: %s", e)

        self.storage.clear_session()
        await self._emit(SessionEvent.SIGNED_OUT, None)

    @staticmethod
    def _parse_session(response: httpx.Response, code: ErrorCode) -> AuthSession:
        try:
            return TokenResponse.model_validate(response.json()).to_session()
        except (ValueError, ValidationError) as e:
            raise AuthError("Unexpected token payload", code=code) from e
