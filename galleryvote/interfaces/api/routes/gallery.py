"""
Gallery Routes - Landing page, gated page, gallery state and voting.
"""

from __future__ import annotations

from typing import Any, Literal

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel, Field

from galleryvote.adapters.supabase import SupabaseAuth
from galleryvote.domains.gallery import GallerySnapshot, GalleryView
from galleryvote.domains.session import Identity
from galleryvote.interfaces.api.auth import (
    commit_cookies,
    get_auth,
    get_current_user_optional,
    get_gallery,
)

router = APIRouter()


def _not_signed_in(auth: SupabaseAuth) -> Response:
    # A rejected refresh has already queued the session cookie for deletion
    return commit_cookies(auth, JSONResponse({"detail": "Not signed in"}, status_code=401))


class VoteRequest(BaseModel):
    """Vote request body."""

    direction: Literal[1, -1] = Field(..., description="1 = upvote, -1 = downvote")


class LandingResponse(BaseModel):
    """Landing page state."""

    signed_in: bool
    email: str | None = None
    login_url: str = "/auth/login"
    logout_url: str = "/auth/logout"


@router.get("/", response_model=LandingResponse)
async def landing(
    response: Response,
    auth: SupabaseAuth = Depends(get_auth),
):
    """Public landing page: who is signed in, and where to sign in."""
    session = await auth.get_session()
    commit_cookies(auth, response)
    return LandingResponse(
        signed_in=session is not None,
        email=session.user.email if session else None,
    )


@router.get("/protected", response_model=None)
async def protected(
    user: Identity | None = Depends(get_current_user_optional),
) -> RedirectResponse | dict[str, Any]:
    """Gated page. Anyone without a valid session is sent back to /."""
    if user is None:
        return RedirectResponse("/", status_code=302)

    return {"title": "Gated Content", "email": user.email, "user_id": user.id}


@router.get("/api/gallery", response_model=GallerySnapshot)
async def gallery(
    response: Response,
    auth: SupabaseAuth = Depends(get_auth),
    view: GalleryView = Depends(get_gallery),
):
    """
    The viewer's gallery: every content item with the viewer's own vote.

    Load failures come back in ``error``; an empty table sets ``is_empty``.
    """
    if view.identity is None:
        return _not_signed_in(auth)

    commit_cookies(auth, response)
    return view.snapshot()


@router.post("/api/gallery/{item_id}/vote", response_model=GallerySnapshot)
async def vote(
    item_id: str,
    request: VoteRequest,
    response: Response,
    auth: SupabaseAuth = Depends(get_auth),
    view: GalleryView = Depends(get_gallery),
):
    """
    Click a vote button.

    - **direction**: 1 or -1. Clicking the current direction again removes the vote.

    A failed write leaves the vote unchanged and sets ``error``.
    """
    if view.identity is None:
        return _not_signed_in(auth)

    await view.cast_vote(item_id, request.direction)

    commit_cookies(auth, response)
    return view.snapshot()
