"""
API Interface - FastAPI app for the gallery and the OAuth handshake.
"""

from .main import app, create_app

__all__ = ["app", "create_app"]
