"""
Cookie Session Storage - Keeps the Supabase session in encrypted cookies.

Reads come from the incoming request. Writes are queued and copied onto
the outgoing response with ``apply()``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from pydantic import ValidationError
from starlette.responses import Response

from galleryvote.domains.session.models import AuthSession

from .encryption import InvalidToken, TokenEncryption

logger = logging.getLogger(__name__)

__all__ = ["CookieSessionStorage"]

SESSION_MAX_AGE = 60 * 60 * 24 * 30
VERIFIER_MAX_AGE = 60 * 10

_UNSET = object()


class CookieSessionStorage:
    """SessionStorage over one request/response pair."""

    def __init__(
        self,
        cookies: Mapping[str, str],
        encryption: TokenEncryption,
        *,
        cookie_name: str,
        secure: bool = False,
    ) -> None:
        self._cookies = cookies
        self._encryption = encryption
        self.cookie_name = cookie_name
        self.verifier_cookie_name = f"{cookie_name}-code-verifier"
        self.secure = secure

        self._session: AuthSession | None | object = _UNSET
        self._verifier: str | None | object = _UNSET
        # cookie name -> (encrypted value or None to delete, max age)
        self._pending: dict[str, tuple[str | None, int]] = {}

    def _read(self, name: str, ttl: int | None = None) -> str | None:
        raw = self._cookies.get(name)
        if not raw:
            return None
        try:
            return self._encryption.decrypt(raw, ttl=ttl)
        except InvalidToken:
            logger.info("Ignoring unreadable %s cookie", name)
            return None

    # --- Session ---

    def load_session(self) -> AuthSession | None:
        if self._session is _UNSET:
            payload = self._read(self.cookie_name)
            session = None
            if payload:
                try:
                    session = AuthSession.model_validate_json(payload)
                except ValidationError:
                    logger.info("Ignoring malformed session cookie")
            self._session = session
        return self._session  # type: ignore[return-value]

    def save_session(self, session: AuthSession) -> None:
        self._session = session
        self._pending[self.cookie_name] = (
            self._encryption.encrypt(session.model_dump_json()),
            SESSION_MAX_AGE,
        )

    def clear_session(self) -> None:
        self._session = None
        self._pending[self.cookie_name] = (None, 0)

    # --- PKCE verifier ---

    def load_code_verifier(self) -> str | None:
        if self._verifier is _UNSET:
            self._verifier = self._read(self.verifier_cookie_name, ttl=VERIFIER_MAX_AGE)
        return self._verifier  # type: ignore[return-value]

    def save_code_verifier(self, verifier: str) -> None:
        self._verifier = verifier
        self._pending[self.verifier_cookie_name] = (
            self._encryption.encrypt(verifier),
            VERIFIER_MAX_AGE,
        )

    def clear_code_verifier(self) -> None:
        self._verifier = None
        self._pending[self.verifier_cookie_name] = (None, 0)

    # --- Response ---

    @property
    def has_changes(self) -> bool:
        return bool(self._pending)

    def apply(self, response: Response) -> Response:
        """Write queued cookie changes onto ``response``."""
        for name, (value, max_age) in self._pending.items():
            if value is None:
                response.delete_cookie(name, path="/")
            else:
                response.set_cookie(
                    name,
                    value,
                    max_age=max_age,
                    path="/",
                    httponly=True,
                    secure=self.secure,
                    samesite="lax",
                )
        return response
