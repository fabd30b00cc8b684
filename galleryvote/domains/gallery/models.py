"""
Gallery Models - Content items, votes and view state.

Rows coming back from the store are validated here. Several column
spellings are accepted on read; ``Vote.to_row`` always writes the
canonical ones.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum, IntEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator

from galleryvote.config.errors import VoteError

# Canonical vote columns
VOTE_ITEM_COLUMN = "caption_id"
VOTE_IDENTITY_COLUMN = "profile_id"
VOTE_DIRECTION_COLUMN = "vote_value"
VOTE_MODIFIED_COLUMN = "modified_datetime_utc"

# Uniqueness constraint on the vote table
VOTE_CONFLICT_KEYS = (VOTE_IDENTITY_COLUMN, VOTE_ITEM_COLUMN)

_DIRECTION_NAMES = {
    "up": 1,
    "upvote": 1,
    "down": -1,
    "downvote": -1,
}


class Direction(IntEnum):
    """Signed rating a user assigns to a content item."""

    UP = 1
    DOWN = -1

    @classmethod
    def parse(cls, value: Any) -> Direction:
        """Accept +1/-1 or the string spellings used by older vote tables."""
        if isinstance(value, Direction):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            if key in _DIRECTION_NAMES:
                return cls(_DIRECTION_NAMES[key])
            try:
                value = int(key)
            except ValueError:
                raise VoteError(f"Unknown vote direction: {value!r}") from None
        if isinstance(value, bool) or not isinstance(value, int):
            raise VoteError(f"Unknown vote direction: {value!r}")
        try:
            return cls(value)
        except ValueError:
            raise VoteError(f"Vote direction must be 1 or -1, got {value}") from None


class VoteChange(str, Enum):
    """Remote write issued by a single vote click."""

    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


def next_vote(
    current: Direction | None, clicked: Direction
) -> tuple[Direction | None, VoteChange]:
    """
    Apply one click to the tri-state vote cycle.

    Clicking the active direction removes the vote; clicking the other one
    flips it in place.

    Returns:
        (resulting direction or None, remote write to issue)
    """
    if current is None:
        return clicked, VoteChange.INSERT
    if current == clicked:
        return None, VoteChange.DELETE
    return clicked, VoteChange.UPDATE


class ContentItem(BaseModel):
    """Caption or image record available for rating."""

    id: str
    content: str = Field(
        default="",
        validation_alias=AliasChoices("content", "caption", "text"),
    )
    image_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("image_url", "image_ref", "image"),
    )
    is_featured: bool = Field(
        default=False,
        validation_alias=AliasChoices("is_featured", "featured"),
    )
    created_at: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("created_datetime_utc", "created_at"),
    )

    model_config = {"frozen": True, "extra": "ignore", "populate_by_name": True}

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    @field_validator("content", mode="before")
    @classmethod
    def _none_content(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("is_featured", mode="before")
    @classmethod
    def _none_featured(cls, value: Any) -> Any:
        return False if value is None else value


class Vote(BaseModel):
    """One identity's rating of one content item."""

    content_item_id: str = Field(
        validation_alias=AliasChoices(VOTE_ITEM_COLUMN, "content_item_id"),
    )
    identity_id: str = Field(
        validation_alias=AliasChoices(VOTE_IDENTITY_COLUMN, "identity_id", "user_id"),
    )
    direction: Direction = Field(
        validation_alias=AliasChoices(VOTE_DIRECTION_COLUMN, "direction", "vote_type"),
    )
    modified_at: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices(VOTE_MODIFIED_COLUMN, "modified_at"),
    )

    model_config = {"frozen": True, "extra": "ignore", "populate_by_name": True}

    @field_validator("content_item_id", "identity_id", mode="before")
    @classmethod
    def _coerce_ids(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    @field_validator("direction", mode="before")
    @classmethod
    def _parse_direction(cls, value: Any) -> Direction:
        try:
            return Direction.parse(value)
        except VoteError as e:
            raise ValueError(e.message) from None

    def to_row(self) -> dict[str, Any]:
        """Serialize with the canonical column names."""
        row: dict[str, Any] = {
            VOTE_ITEM_COLUMN: self.content_item_id,
            VOTE_IDENTITY_COLUMN: self.identity_id,
            VOTE_DIRECTION_COLUMN: int(self.direction),
        }
        if self.modified_at is not None:
            row[VOTE_MODIFIED_COLUMN] = self.modified_at.isoformat()
        return row


class ItemView(BaseModel):
    """A content item as one viewer sees it."""

    id: str
    content: str
    image_url: str | None = None
    is_featured: bool = False
    created_at: datetime | None = None
    vote: Direction | None = None
    in_flight: bool = False


class GallerySnapshot(BaseModel):
    """Immutable copy of a viewer's gallery state."""

    signed_in: bool
    email: str | None = None
    loading: bool = False
    error: str | None = None
    items: list[ItemView] = Field(default_factory=list)
    is_empty: bool = False

    model_config = {"frozen": True}
