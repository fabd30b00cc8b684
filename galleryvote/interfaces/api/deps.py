"""
API Dependencies - Dependency injection for FastAPI routes.

Provides the process-wide Supabase client. It is built once here and
handed to the per-request auth/store adapters.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from galleryvote.adapters.supabase import SupabaseClient
from galleryvote.config import get_settings

logger = logging.getLogger(__name__)


@lru_cache
def get_supabase_client() -> SupabaseClient:
    """Get Supabase client singleton."""
    return SupabaseClient.from_settings(get_settings())


async def init_services() -> None:
    """
    Initialize services on startup.

    This should be called from the FastAPI lifespan handler.
    """
    client = get_supabase_client()
    logger.info("  Supabase project: %s", client.url)


async def cleanup_services() -> None:
    """Cleanup services on shutdown."""
    client = get_supabase_client()
    await client.close()
