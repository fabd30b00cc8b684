"""
Session Manager - Bootstraps and tracks the authenticated identity.

The manager never touches gallery data itself. It calls two hooks:
``on_signed_in(identity)`` whenever a session appears (startup, sign-in,
token refresh) and ``on_signed_out()`` once the provider confirms the
session is gone.

Example:
    >>> async with SessionManager(auth, redirect_to=settings.callback_url) as sm:
    ...     print(sm.identity)
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from types import TracebackType

from galleryvote.config.errors import GalleryVoteError

from .contracts import AuthProvider, SessionChangeHandler, Unsubscribe
from .models import AuthSession, Identity, OAuthRedirect, SessionEvent

logger = logging.getLogger(__name__)

__all__ = ["SessionManager"]

SignedInHook = Callable[[Identity], Awaitable[None]]
SignedOutHook = Callable[[], Awaitable[None]]


class SessionManager:
    """Exposes the current identity (or its absence) to the application."""

    def __init__(
        self,
        auth: AuthProvider,
        *,
        redirect_to: str,
        provider: str = "google",
        on_signed_in: SignedInHook | None = None,
        on_signed_out: SignedOutHook | None = None,
    ) -> None:
        """
        Initialize the session manager.

        Args:
            auth: Auth provider boundary
            redirect_to: Fixed OAuth return address registered with the provider
            provider: OAuth provider name
            on_signed_in: Data load triggered for a newly present identity
            on_signed_out: Clears identity-scoped state after sign-out
        """
        self._auth = auth
        self.redirect_to = redirect_to
        self.provider = provider
        self._on_signed_in = on_signed_in
        self._on_signed_out = on_signed_out
        self._subscriptions: list[Unsubscribe] = []

        self.identity: Identity | None = None
        self.loading = True

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    async def initialize(self) -> Identity | None:
        """
        Look up an existing session and load data for it.

        A failing provider query is logged and treated as "no session".
        """
        try:
            session = await self._auth.get_session()
        except GalleryVoteError as e:
            logger.error("Session lookup failed: %s", e.message)
            session = None

        identity = session.user if session else None
        # A refresh fired during the lookup may already have loaded this identity
        already_loaded = (
            identity is not None
            and self.identity is not None
            and self.identity.id == identity.id
        )
        self.identity = identity

        if identity is not None and not already_loaded:
            await self._signed_in(identity)
        self.loading = False
        return self.identity

    def subscribe_to_changes(
        self, handler: SessionChangeHandler | None = None
    ) -> Unsubscribe:
        """
        Listen for provider session transitions.

        The manager updates identity and runs its hooks first, then calls
        ``handler`` (if given) with the raw event.

        Returns:
            Callable releasing this subscription
        """

        async def listener(event: SessionEvent, session: AuthSession | None) -> None:
            await self._handle_change(event, session)
            if handler is not None:
                await handler(event, session)

        unsubscribe = self._auth.on_session_change(listener)
        self._subscriptions.append(unsubscribe)
        return unsubscribe

    async def _handle_change(
        self, event: SessionEvent, session: AuthSession | None
    ) -> None:
        logger.debug("Session transition: %s", event.value)

        if event is SessionEvent.TOKEN_REFRESHED and session is not None:
            if self.identity is not None and self.identity.id == session.user.id:
                # Same viewer, new tokens: loaded data stays valid
                self.identity = session.user
                return

        if session is not None:
            self.identity = session.user
            self.loading = True
            try:
                await self._signed_in(session.user)
            finally:
                self.loading = False
            return

        self.identity = None
        if self._on_signed_out is not None:
            await self._on_signed_out()
        self.loading = False

    async def _signed_in(self, identity: Identity) -> None:
        if self._on_signed_in is not None:
            await self._on_signed_in(identity)

    async def begin_sign_in(self) -> OAuthRedirect:
        """Start the OAuth handshake with the fixed return address."""
        return await self._auth.begin_oauth(self.provider, self.redirect_to)

    async def sign_out(self) -> None:
        """Invalidate the session; the provider fires the signed-out transition."""
        await self._auth.sign_out()

    def close(self) -> None:
        """Release every subscription taken by this manager."""
        while self._subscriptions:
            self._subscriptions.pop()()

    async def __aenter__(self) -> SessionManager:
        self.subscribe_to_changes()
        await self.initialize()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
