"""
Vote Workflow - Keeps a viewer's ratings in sync with the remote store.

Features:
- Loads content items and the viewer's votes into local view state
- Tri-state vote cycle (none -> up/down, same direction again = undo)
- One remote write per click; local state changes only after it succeeds
- Per-item in-flight markers
- ``clear()`` invalidates anything still in flight

Example:
    >>> workflow = VoteWorkflow(store)
    >>> await workflow.load_content()
    >>> await workflow.load_user_votes(identity)
    >>> await workflow.cast_vote(identity, "c1", Direction.UP)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from galleryvote.config.errors import ErrorCode, StorageError
from galleryvote.domains.session.models import Identity

from .contracts import DataStore
from .models import (
    VOTE_CONFLICT_KEYS,
    VOTE_IDENTITY_COLUMN,
    VOTE_ITEM_COLUMN,
    ContentItem,
    Direction,
    Vote,
    VoteChange,
    next_vote,
)

logger = logging.getLogger(__name__)

__all__ = ["VoteWorkflow"]

RecordT = TypeVar("RecordT", bound=BaseModel)


def _parse_rows(model: type[RecordT], rows: Iterable[dict[str, Any]]) -> list[RecordT]:
    """Validate raw store rows into typed records."""
    try:
        return [model.model_validate(row) for row in rows]
    except ValidationError as e:
        raise StorageError(
            f"Unexpected {model.__name__} row shape",
            details={"error_count": e.error_count()},
            code=ErrorCode.STORAGE_INVALID_ROW,
        ) from e


class VoteWorkflow:
    """
    Gallery data and vote mutations for a single viewer.

    State (``items``, ``votes``, ``in_flight``, ``error``) belongs to the
    event loop that drives this object; no locking is done.
    """

    def __init__(
        self,
        store: DataStore,
        *,
        content_table: str = "captions",
        vote_table: str = "caption_votes",
    ) -> None:
        """
        Initialize workflow.

        Args:
            store: Remote data store boundary
            content_table: Table holding content items
            vote_table: Table holding votes
        """
        self._store = store
        self.content_table = content_table
        self.vote_table = vote_table

        self.items: list[ContentItem] = []
        self.votes: dict[str, Direction] = {}
        self.in_flight: set[str] = set()
        self.error: str | None = None
        self.loading = False

        # Bumped by clear(); work started under an older value is discarded
        self._generation = 0

    async def load_content(self) -> list[ContentItem]:
        """
        Fetch every content item.

        Failures become the user-visible ``error``; nothing is retried.
        """
        generation = self._generation
        self.loading = True
        self.error = None

        try:
            rows = await self._store.select_all(self.content_table)
            items = _parse_rows(ContentItem, rows)
        except StorageError as e:
            if generation == self._generation:
                self.error = e.message
                self.loading = False
            return []

        if generation != self._generation:
            return []

        self.items = items
        self.loading = False
        return items

    async def load_user_votes(self, identity: Identity) -> dict[str, Direction]:
        """
        Fetch the identity's votes into ``item_id -> direction``.

        Failures are logged only and leave no votes shown.
        """
        generation = self._generation

        try:
            rows = await self._store.select_where(
                self.vote_table, {VOTE_IDENTITY_COLUMN: identity.id}
            )
            votes = _parse_rows(Vote, rows)
        except StorageError as e:
            logger.error("Error loading user votes: %s", e.message)
            votes = []

        if generation != self._generation:
            return {}

        self.votes = {vote.content_item_id: vote.direction for vote in votes}
        return dict(self.votes)

    async def cast_vote(
        self,
        identity: Identity | None,
        item_id: str,
        direction: Direction | int | str,
    ) -> VoteChange | None:
        """
        Apply one vote click.

        Args:
            identity: Acting identity, captured by the caller at click time
            item_id: Content item id
            direction: Clicked direction

        Returns:
            The remote write that committed, or None if nothing was written

        Raises:
            VoteError: If ``direction`` is not up or down
        """
        if identity is None:
            return None

        clicked = Direction.parse(direction)

        if item_id in self.in_flight:
            logger.debug("Vote on %s ignored: previous vote still in flight", item_id)
            return None

        generation = self._generation
        target, change = next_vote(self.votes.get(item_id), clicked)

        self.in_flight.add(item_id)
        try:
            if change is VoteChange.DELETE:
                await self._store.delete_where(
                    self.vote_table,
                    {VOTE_ITEM_COLUMN: item_id, VOTE_IDENTITY_COLUMN: identity.id},
                )
            else:
                vote = Vote(
                    content_item_id=item_id,
                    identity_id=identity.id,
                    direction=target,
                    modified_at=datetime.now(timezone.utc),
                )
                await self._store.upsert(
                    self.vote_table, vote.to_row(), VOTE_CONFLICT_KEYS
                )
        except StorageError as e:
            logger.warning("Vote %s on %s failed: %s", change.value, item_id, e.message)
            if generation == self._generation:
                self.error = e.message
            return None
        finally:
            if generation == self._generation:
                self.in_flight.discard(item_id)

        if generation != self._generation:
            logger.info("Vote on %s committed after state was cleared", item_id)
            return change

        if target is None:
            self.votes.pop(item_id, None)
        else:
            self.votes[item_id] = target
        return change

    def clear(self) -> None:
        """Drop all viewer-scoped state."""
        self._generation += 1
        self.items = []
        self.votes = {}
        self.in_flight = set()
        self.error = None
        self.loading = False
