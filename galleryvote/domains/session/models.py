"""
Session Models - Data types for the session domain.
"""

from __future__ import annotations

import time
from enum import Enum

from pydantic import BaseModel, Field


class Identity(BaseModel):
    """Authenticated user principal returned by the auth provider."""

    id: str = Field(..., min_length=1)
    email: str | None = None

    model_config = {"frozen": True}


class AuthSession(BaseModel):
    """Provider session: tokens plus the identity they belong to."""

    access_token: str
    refresh_token: str | None = None
    token_type: str = "bearer"
    expires_at: int | None = None  # unix seconds
    user: Identity

    model_config = {"frozen": True}

    def is_expired(self, leeway: int = 10) -> bool:
        """True when the access token is past (or within ``leeway`` of) expiry."""
        if self.expires_at is None:
            return False
        return self.expires_at - leeway <= int(time.time())


class SessionEvent(str, Enum):
    """Session state transitions emitted by the auth provider."""

    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"


class OAuthRedirect(BaseModel):
    """Where to send the browser to start the OAuth handshake."""

    url: str
    provider: str
    redirect_to: str
