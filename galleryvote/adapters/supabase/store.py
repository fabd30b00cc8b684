"""
Supabase Store - PostgREST adapter for the data store boundary.

Features:
- Equality filters (``col=eq.value``)
- Upsert with an explicit conflict target
- Row-level security honoured by sending the viewer's access token
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any

import httpx

from galleryvote.config.errors import ErrorCode, StorageError

from .client import SupabaseClient, error_message

logger = logging.getLogger(__name__)

__all__ = ["SupabaseStore"]

TokenProvider = Callable[[], "str | None"]


def _filter_operator(value: Any) -> str:
    """PostgREST operator expression for an equality predicate."""
    if value is None:
        return "is.null"
    if isinstance(value, bool):
        return "is.true" if value else "is.false"
    return f"eq.{value}"


def _filter_params(filters: Mapping[str, Any]) -> dict[str, str]:
    return {column: _filter_operator(value) for column, value in filters.items()}


class SupabaseStore:
    """
    Relational store backed by Supabase PostgREST.

    Example:
        >>> store = SupabaseStore(client, auth.access_token)
        >>> rows = await store.select_where("caption_votes", {"profile_id": uid})
        >>> await store.upsert("caption_votes", row, ("profile_id", "caption_id"))
    """

    def __init__(
        self,
        client: SupabaseClient,
        token_provider: TokenProvider | None = None,
    ) -> None:
        """
        Initialize store adapter.

        Args:
            client: Shared Supabase client
            token_provider: Returns the viewer's access token; anon key if None
        """
        self._client = client
        self._token_provider = token_provider

    def _token(self) -> str | None:
        return self._token_provider() if self._token_provider else None

    async def _send(
        self,
        method: str,
        table: str,
        code: ErrorCode,
        **kwargs: Any,
    ) -> httpx.Response:
        try:
            response = await self._client.request(
                method,
                f"/rest/v1/{table}",
                access_token=self._token(),
                **kwargs,
            )
        except httpx.HTTPError as e:
            raise StorageError(
                f"{method} {table} failed: {e}",
                {"table": table},
                code=ErrorCode.STORAGE_CONNECTION_FAILED,
            ) from e

        if response.is_error:
            details: dict[str, Any] = {"table": table, "status": response.status_code}
            try:
                payload = response.json()
            except ValueError:
                payload = None
            if isinstance(payload, dict):
                for key in ("code", "hint", "details"):
                    if payload.get(key):
                        details[key] = payload[key]
            raise StorageError(error_message(response), details, code=code)

        return response

    async def _select(self, table: str, filters: Mapping[str, Any]) -> list[dict[str, Any]]:
        params = {"select": "*", **_filter_params(filters)}
        response = await self._send(
            "GET", table, ErrorCode.STORAGE_READ_FAILED, params=params
        )

        try:
            rows = response.json()
        except ValueError as e:
            raise StorageError(
                f"Response from {table} is not JSON",
                {"table": table, "content_type": response.headers.get("content-type", "")},
                code=ErrorCode.STORAGE_INVALID_ROW,
            ) from e
        if not isinstance(rows, list):
            raise StorageError(
                f"Expected a list of rows from {table}",
                {"table": table},
                code=ErrorCode.STORAGE_INVALID_ROW,
            )
        return rows

    async def select_all(self, table: str) -> list[dict[str, Any]]:
        """Return every row of ``table``."""
        return await self._select(table, {})

    async def select_where(
        self, table: str, filters: Mapping[str, Any]
    ) -> list[dict[str, Any]]:
        """Return rows of ``table`` matching all ``filters``."""
        return await self._select(table, filters)

    async def upsert(
        self,
        table: str,
        row: Mapping[str, Any],
        conflict_keys: Sequence[str],
    ) -> None:
        """Insert ``row``, or merge it into the row sharing ``conflict_keys``."""
        await self._send(
            "POST",
            table,
            ErrorCode.STORAGE_WRITE_FAILED,
            params={"on_conflict": ",".join(conflict_keys)},
            json=dict(row),
            headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
        )
        logger.debug("Upserted into %s on (%s)", table, ", ".join(conflict_keys))

    async def delete_where(self, table: str, filters: Mapping[str, Any]) -> None:
        """Delete rows matching all ``filters``. Empty filters are refused."""
        if not filters:
            raise StorageError(
                f"Refusing unfiltered delete on {table}",
                {"table": table},
                code=ErrorCode.STORAGE_WRITE_FAILED,
            )

        await self._send(
            "DELETE",
            table,
            ErrorCode.STORAGE_WRITE_FAILED,
            params=_filter_params(filters),
            headers={"Prefer": "return=minimal"},
        )
        logger.debug("Deleted from %s where %s", table, sorted(filters))
