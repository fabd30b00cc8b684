"""
Token Encryption - Secure storage for session cookies.

Uses Fernet symmetric encryption so the browser only ever holds opaque
cookie values, never raw access or refresh tokens.
"""

from __future__ import annotations

import logging

from cryptography.fernet import Fernet, InvalidToken

logger = logging.getLogger(__name__)

__all__ = ["TokenEncryption", "InvalidToken"]


class TokenEncryption:
    """Handles encryption/decryption of session payloads."""

    def __init__(self, key: str | None = None) -> None:
        if not key:
            # Generate temporary key for development
            logger.warning("SESSION_SECRET not set - generating temporary key")
            logger.warning("Sessions will not survive a restart; set SESSION_SECRET in production")
            key = Fernet.generate_key().decode()

        self.cipher = Fernet(key.encode() if isinstance(key, str) else key)

    def encrypt(self, token: str) -> str:
        """
        Encrypt a token.

        Args:
            token: Plain text token

        Returns:
            Encrypted token string (base64)
        """
        if not token:
            return ""

        return self.cipher.encrypt(token.encode()).decode()

    def decrypt(self, encrypted_token: str, ttl: int | None = None) -> str:
        """
        Decrypt a token.

        Args:
            encrypted_token: Encrypted token string
            ttl: Reject tokens older than this many seconds

        Returns:
            Plain text token

        Raises:
            InvalidToken: If the value was tampered with, expired, or
                encrypted under another key
        """
        if not encrypted_token:
            return ""

        return self.cipher.decrypt(encrypted_token.encode(), ttl=ttl).decode()
