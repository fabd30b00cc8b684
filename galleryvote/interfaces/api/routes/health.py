"""
Health Routes - System health and status endpoints.
"""

from typing import Any

from fastapi import APIRouter

from galleryvote import __version__

router = APIRouter()


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": "galleryvote"}


@router.get("/api")
async def api_info() -> dict[str, Any]:
    """API info endpoint."""
    return {
        "name": "GalleryVote API",
        "version": __version__,
        "description": "Gated caption gallery with up/down voting",
        "docs": "/docs",
    }
