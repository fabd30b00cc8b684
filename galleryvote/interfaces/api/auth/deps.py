"""
Authentication Dependencies - Per-request Supabase session.

The browser carries the Supabase session in an encrypted cookie. Each
request gets its own SupabaseAuth view over that cookie, sharing the
process-wide HTTP client. Routes must call ``commit_cookies`` on the
response they return so refreshed or cleared sessions reach the browser.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from functools import lru_cache

from fastapi import Depends, HTTPException, Request
from starlette.responses import Response

from galleryvote.adapters.supabase import SupabaseAuth, SupabaseClient, SupabaseStore
from galleryvote.config import GalleryVoteError, get_settings
from galleryvote.domains.gallery import GalleryView
from galleryvote.domains.session import Identity, SessionManager
from galleryvote.interfaces.api.deps import get_supabase_client

from .cookies import CookieSessionStorage
from .encryption import TokenEncryption

logger = logging.getLogger(__name__)


@lru_cache
def get_encryption() -> TokenEncryption:
    """Get session cookie cipher singleton."""
    return TokenEncryption(get_settings().session_secret)


def get_auth(
    request: Request,
    client: SupabaseClient = Depends(get_supabase_client),
    encryption: TokenEncryption = Depends(get_encryption),
) -> SupabaseAuth:
    """Auth provider bound to this request's cookies."""
    settings = get_settings()
    storage = CookieSessionStorage(
        request.cookies,
        encryption,
        cookie_name=settings.session_cookie_name,
        secure=settings.session_cookie_secure,
    )
    return SupabaseAuth(client, storage)


def get_store(
    auth: SupabaseAuth = Depends(get_auth),
    client: SupabaseClient = Depends(get_supabase_client),
) -> SupabaseStore:
    """Data store acting with the viewer's access token."""
    return SupabaseStore(client, auth.access_token)


def get_session_manager(auth: SupabaseAuth = Depends(get_auth)) -> SessionManager:
    """Session manager for sign-in/sign-out routes (no data load)."""
    settings = get_settings()
    return SessionManager(
        auth,
        redirect_to=settings.callback_url,
        provider=settings.oauth_provider,
    )


async def get_gallery(
    auth: SupabaseAuth = Depends(get_auth),
    store: SupabaseStore = Depends(get_store),
) -> AsyncIterator[GalleryView]:
    """Gallery view for the current viewer, opened for the request's duration."""
    async with GalleryView.from_settings(auth, store, get_settings()) as view:
        yield view


def commit_cookies(auth: SupabaseAuth, response: Response) -> Response:
    """Copy queued session cookie changes onto ``response``."""
    if isinstance(auth.storage, CookieSessionStorage):
        auth.storage.apply(response)
    return response


async def get_current_user_optional(
    auth: SupabaseAuth = Depends(get_auth),
) -> Identity | None:
    """
    Validated identity if signed in, None otherwise.

    Provider failures are logged and treated as signed out.
    """
    try:
        return await auth.get_user()
    except GalleryVoteError as e:
        logger.error("User lookup failed: %s", e.message)
        return None


async def get_current_user(
    user: Identity | None = Depends(get_current_user_optional),
) -> Identity:
    """
    Validated identity.

    Raises:
        HTTPException 401 if not signed in
    """
    if user is None:
        raise HTTPException(status_code=401, detail="Not signed in")
    return user
