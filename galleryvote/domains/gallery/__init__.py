"""
Gallery Domain - Content items and the vote workflow.

This domain handles:
- Typed content/vote records validated at the store boundary
- The tri-state vote cycle with undo
- Confirmed (non-optimistic) local vote state
- Per-viewer composition with the session domain
"""

from .contracts import DataStore
from .models import (
    VOTE_CONFLICT_KEYS,
    ContentItem,
    Direction,
    GallerySnapshot,
    ItemView,
    Vote,
    VoteChange,
    next_vote,
)
from .view import GalleryView
from .workflow import VoteWorkflow

__all__ = [
    # Contracts
    "DataStore",
    # Models
    "ContentItem",
    "Vote",
    "Direction",
    "VoteChange",
    "ItemView",
    "GallerySnapshot",
    "VOTE_CONFLICT_KEYS",
    "next_vote",
    # Implementations
    "VoteWorkflow",
    "GalleryView",
]
