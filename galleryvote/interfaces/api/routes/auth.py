"""
Auth Routes - Google OAuth handshake through Supabase.

The callback only forwards the authorization code; it has no logic of its
own beyond choosing where to redirect.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse

from galleryvote.adapters.supabase import SupabaseAuth
from galleryvote.config import GalleryVoteError
from galleryvote.domains.session import SessionManager
from galleryvote.interfaces.api.auth import commit_cookies, get_auth, get_session_manager

logger = logging.getLogger(__name__)

router = APIRouter()

SUCCESS_PATH = "/protected"
LANDING_PATH = "/"


@router.get("/login")
async def login(
    auth: SupabaseAuth = Depends(get_auth),
    manager: SessionManager = Depends(get_session_manager),
) -> RedirectResponse:
    """Send the browser to the OAuth provider."""
    redirect = await manager.begin_sign_in()
    response = RedirectResponse(redirect.url, status_code=302)
    return commit_cookies(auth, response)


@router.get("/callback")
async def callback(
    request: Request,
    auth: SupabaseAuth = Depends(get_auth),
) -> RedirectResponse:
    """
    Complete the OAuth handshake.

    - **code**: Authorization code from the provider

    Success redirects to /protected; a missing code or failed exchange
    redirects to /.
    """
    code = request.query_params.get("code")

    if code:
        try:
            session = await auth.exchange_code_for_session(code)
        except GalleryVoteError as e:
            logger.warning("OAuth code exchange failed: %s", e.message)
        else:
            logger.info("Signed in user_id=%s", session.user.id)
            response = RedirectResponse(SUCCESS_PATH, status_code=302)
            return commit_cookies(auth, response)
    else:
        error = request.query_params.get("error_description") or request.query_params.get("error")
        logger.info("OAuth callback without code: %s", error or "no error given")

    # Any verifier left over belongs to a handshake that is now dead
    auth.storage.clear_code_verifier()
    response = RedirectResponse(LANDING_PATH, status_code=302)
    return commit_cookies(auth, response)


@router.api_route("/logout", methods=["GET", "POST"])
async def logout(
    auth: SupabaseAuth = Depends(get_auth),
    manager: SessionManager = Depends(get_session_manager),
) -> RedirectResponse:
    """Sign out and return to the landing page."""
    await manager.sign_out()
    response = RedirectResponse(LANDING_PATH, status_code=302)
    return commit_cookies(auth, response)
