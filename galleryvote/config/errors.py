"""
Error Taxonomy - Consistent error codes across the application.

Usage:
    from galleryvote.config.errors import ErrorCode, GalleryVoteError

    raise GalleryVoteError(ErrorCode.STORAGE_WRITE_FAILED, "duplicate key")
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standardized error codes for machine-readable error responses."""

    # Auth provider errors
    AUTH_SESSION_UNAVAILABLE = "AUTH_SESSION_UNAVAILABLE"
    AUTH_CODE_EXCHANGE_FAILED = "AUTH_CODE_EXCHANGE_FAILED"
    AUTH_REFRESH_FAILED = "AUTH_REFRESH_FAILED"
    AUTH_SIGN_OUT_FAILED = "AUTH_SIGN_OUT_FAILED"

    # Storage errors
    STORAGE_CONNECTION_FAILED = "STORAGE_CONNECTION_FAILED"
    STORAGE_READ_FAILED = "STORAGE_READ_FAILED"
    STORAGE_WRITE_FAILED = "STORAGE_WRITE_FAILED"
    STORAGE_INVALID_ROW = "STORAGE_INVALID_ROW"

    # Vote errors
    VOTE_INVALID_DIRECTION = "VOTE_INVALID_DIRECTION"

    # Security errors
    SECURITY_UNAUTHORIZED = "SECURITY_UNAUTHORIZED"

    # General errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"


class GalleryVoteError(Exception):
    """Base exception with error code support."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to API-friendly dictionary."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class AuthError(GalleryVoteError):
    """Auth provider errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        code: ErrorCode = ErrorCode.AUTH_SESSION_UNAVAILABLE,
    ) -> None:
        super().__init__(code, message, details)


class StorageError(GalleryVoteError):
    """Remote store errors. ``message`` carries the store's own text."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        code: ErrorCode = ErrorCode.STORAGE_CONNECTION_FAILED,
    ) -> None:
        super().__init__(code, message, details)


class VoteError(GalleryVoteError):
    """Vote workflow errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.VOTE_INVALID_DIRECTION, message, details)


class ConfigurationError(GalleryVoteError):
    """Missing or invalid configuration."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.CONFIGURATION_ERROR, message, details)
