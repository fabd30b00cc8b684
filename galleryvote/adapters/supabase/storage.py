"""
In-memory session storage for Supabase auth.
"""

from __future__ import annotations

from galleryvote.domains.session.models import AuthSession

__all__ = ["MemorySessionStorage"]


class MemorySessionStorage:
    """Keeps the session for the lifetime of the process (CLI, tests)."""

    def __init__(self, session: AuthSession | None = None) -> None:
        self._session = session
        self._code_verifier: str | None = None

    def load_session(self) -> AuthSession | None:
        return self._session

    def save_session(self, session: AuthSession) -> None:
        self._session = session

    def clear_session(self) -> None:
        self._session = None

    def load_code_verifier(self) -> str | None:
        return self._code_verifier

    def save_code_verifier(self, verifier: str) -> None:
        self._code_verifier = verifier

    def clear_code_verifier(self) -> None:
        self._code_verifier = None
