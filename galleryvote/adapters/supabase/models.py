"""
Supabase wire models - GoTrue response payloads.
"""

from __future__ import annotations

import time
from typing import Any

from pydantic import BaseModel

from galleryvote.domains.session.models import AuthSession, Identity


class UserPayload(BaseModel):
    """``user`` object returned by GoTrue."""

    id: str
    email: str | None = None
    role: str | None = None
    app_metadata: dict[str, Any] = {}
    user_metadata: dict[str, Any] = {}

    def to_identity(self) -> Identity:
        return Identity(id=self.id, email=self.email)


class TokenResponse(BaseModel):
    """Body of ``/auth/v1/token`` responses."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int | None = None
    expires_at: int | None = None
    refresh_token: str | None = None
    user: UserPayload

    def to_session(self) -> AuthSession:
        expires_at = self.expires_at
        if expires_at is None and self.expires_in is not None:
            expires_at = int(time.time()) + self.expires_in

        return AuthSession(
            access_token=self.access_token,
            refresh_token=self.refresh_token,
            token_type=self.token_type,
            expires_at=expires_at,
            user=self.user.to_identity(),
        )
