"""
CLI Interface - Command-line tools for GalleryVote.

Provides commands for:
- Listing captions
- Viewing the gallery and voting with an access token
- Running the API server
"""

from .main import app, main

__all__ = ["app", "main"]
