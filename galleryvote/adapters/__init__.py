"""
Adapters - External service integrations.

All external API calls are wrapped here to isolate domains from third-party changes.
"""

from .supabase import MemorySessionStorage, SupabaseAuth, SupabaseClient, SupabaseStore

__all__ = [
    "SupabaseClient",
    "SupabaseAuth",
    "SupabaseStore",
    "MemorySessionStorage",
]
