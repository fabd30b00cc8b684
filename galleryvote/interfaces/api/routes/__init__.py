"""
API Routes.
"""

from . import auth, gallery, health

__all__ = ["health", "auth", "gallery"]
