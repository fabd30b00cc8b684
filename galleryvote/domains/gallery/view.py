"""
Gallery View - One viewer's session and gallery state, wired together.

Owns the session subscription for its lifetime: signing in loads content
and votes, signing out clears them.
"""

from __future__ import annotations

from types import TracebackType

from galleryvote.config import Settings
from galleryvote.domains.session import AuthProvider, Identity, SessionManager

from .contracts import DataStore
from .models import Direction, GallerySnapshot, ItemView, VoteChange
from .workflow import VoteWorkflow

__all__ = ["GalleryView"]


class GalleryView:
    """
    Composition of SessionManager and VoteWorkflow.

    Example:
        >>> async with GalleryView(auth, store, redirect_to=url) as view:
        ...     await view.cast_vote("c1", Direction.UP)
        ...     print(view.snapshot())
    """

    def __init__(
        self,
        auth: AuthProvider,
        store: DataStore,
        *,
        redirect_to: str,
        provider: str = "google",
        content_table: str = "captions",
        vote_table: str = "caption_votes",
    ) -> None:
        self.workflow = VoteWorkflow(
            store, content_table=content_table, vote_table=vote_table
        )
        self.session = SessionManager(
            auth,
            redirect_to=redirect_to,
            provider=provider,
            on_signed_in=self._load,
            on_signed_out=self._reset,
        )
        # Identity whose data the workflow currently holds
        self._loaded_for: str | None = None

    @classmethod
    def from_settings(
        cls, auth: AuthProvider, store: DataStore, settings: Settings
    ) -> GalleryView:
        return cls(
            auth,
            store,
            redirect_to=settings.callback_url,
            provider=settings.oauth_provider,
            content_table=settings.content_table,
            vote_table=settings.vote_table,
        )

    @property
    def identity(self) -> Identity | None:
        return self.session.identity

    async def _load(self, identity: Identity) -> None:
        if identity.id != self._loaded_for:
            # Work started for the previous viewer must not land in this one's state
            self.workflow.clear()
            self._loaded_for = identity.id
        await self.workflow.load_content()
        await self.workflow.load_user_votes(identity)

    async def _reset(self) -> None:
        self.workflow.clear()
        self._loaded_for = None

    async def open(self) -> GalleryView:
        """Subscribe to session changes, then bootstrap the session."""
        self.session.subscribe_to_changes()
        await self.session.initialize()
        return self

    def close(self) -> None:
        """Release the session subscription."""
        self.session.close()

    async def cast_vote(
        self, item_id: str, direction: Direction | int | str
    ) -> VoteChange | None:
        """Vote as whoever is signed in right now."""
        return await self.workflow.cast_vote(self.session.identity, item_id, direction)

    async def sign_out(self) -> None:
        await self.session.sign_out()

    def snapshot(self) -> GallerySnapshot:
        """Render current state."""
        workflow = self.workflow
        items = [
            ItemView(
                id=item.id,
                content=item.content,
                image_url=item.image_url,
                is_featured=item.is_featured,
                created_at=item.created_at,
                vote=workflow.votes.get(item.id),
                in_flight=item.id in workflow.in_flight,
            )
            for item in workflow.items
        ]
        loading = self.session.loading or workflow.loading
        identity = self.session.identity

        return GallerySnapshot(
            signed_in=identity is not None,
            email=identity.email if identity else None,
            loading=loading,
            error=workflow.error,
            items=items,
            is_empty=(
                identity is not None
                and not items
                and not loading
                and workflow.error is None
            ),
        )

    async def __aenter__(self) -> GalleryView:
        return await self.open()

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
