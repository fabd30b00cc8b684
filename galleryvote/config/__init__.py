"""
Configuration - Application settings and error taxonomy.
"""

from .errors import (
    AuthError,
    ConfigurationError,
    ErrorCode,
    GalleryVoteError,
    StorageError,
    VoteError,
)
from .settings import Settings, get_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    # Errors
    "ErrorCode",
    "GalleryVoteError",
    "AuthError",
    "StorageError",
    "VoteError",
    "ConfigurationError",
]
