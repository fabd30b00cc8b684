"""
Authentication - Google OAuth through Supabase, session kept in cookies.

Flow:
    /auth/login     → PKCE verifier cookie, redirect to provider
    /auth/callback  → exchange code, session cookie, redirect to /protected
    /auth/logout    → revoke session, clear cookie, redirect to /
"""

from .cookies import CookieSessionStorage
from .deps import (
    commit_cookies,
    get_auth,
    get_current_user,
    get_current_user_optional,
    get_encryption,
    get_gallery,
    get_session_manager,
    get_store,
)
from .encryption import TokenEncryption

__all__ = [
    "get_auth",
    "get_store",
    "get_gallery",
    "get_session_manager",
    "get_current_user",
    "get_current_user_optional",
    "get_encryption",
    "commit_cookies",
    "CookieSessionStorage",
    "TokenEncryption",
]
