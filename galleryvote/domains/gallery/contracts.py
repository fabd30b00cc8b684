"""
Gallery Contracts - Interfaces for the gallery domain.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class DataStore(Protocol):
    """Contract for the hosted relational store.

    Filters are column -> value equality predicates, ANDed together.
    Failures raise ``StorageError`` carrying the store's own message.
    """

    async def select_all(self, table: str) -> list[dict[str, Any]]:
        """Return every row of ``table``."""
        ...

    async def select_where(
        self, table: str, filters: Mapping[str, Any]
    ) -> list[dict[str, Any]]:
        """Return rows of ``table`` matching ``filters``."""
        ...

    async def upsert(
        self,
        table: str,
        row: Mapping[str, Any],
        conflict_keys: Sequence[str],
    ) -> None:
        """Insert ``row`` or update the row sharing its ``conflict_keys``."""
        ...

    async def delete_where(self, table: str, filters: Mapping[str, Any]) -> None:
        """Delete rows of ``table`` matching ``filters``."""
        ...
