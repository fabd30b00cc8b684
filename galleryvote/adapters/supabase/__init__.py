"""
Supabase Adapter - Hosted auth (GoTrue) and relational store (PostgREST).

This is the ONLY place that talks to Supabase.
"""

from .auth import SupabaseAuth
from .client import SupabaseClient
from .storage import MemorySessionStorage
from .store import SupabaseStore

__all__ = [
    "SupabaseClient",
    "SupabaseAuth",
    "SupabaseStore",
    "MemorySessionStorage",
]
