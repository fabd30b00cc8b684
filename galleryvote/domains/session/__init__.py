"""
Session Domain - Authenticated identity lifecycle.

This domain handles:
- Session bootstrap on load
- Session transition listeners (sign-in, sign-out, token refresh)
- Starting the OAuth handshake and signing out
"""

from .contracts import AuthProvider, SessionChangeHandler, SessionStorage, Unsubscribe
from .manager import SessionManager
from .models import AuthSession, Identity, OAuthRedirect, SessionEvent

__all__ = [
    # Contracts
    "AuthProvider",
    "SessionStorage",
    "SessionChangeHandler",
    "Unsubscribe",
    # Models
    "Identity",
    "AuthSession",
    "SessionEvent",
    "OAuthRedirect",
    # Implementations
    "SessionManager",
]
