"""
Supabase Client - Shared HTTP connection to a Supabase project.

One instance per process, owned by the composition root. The auth and
store adapters borrow it; neither opens connections of its own.

Features:
- Async HTTP client with connection pooling
- ``apikey`` header on every request, bearer token per request
- Error payload extraction for GoTrue and PostgREST responses
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from galleryvote.config import ConfigurationError, Settings

logger = logging.getLogger(__name__)

__all__ = ["SupabaseClient", "error_message"]


def error_message(response: httpx.Response) -> str:
    """Pull the human-readable message out of a Supabase error response."""
    try:
        payload = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"

    if isinstance(payload, dict):
        for key in ("message", "msg", "error_description", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
    return f"HTTP {response.status_code}"


class SupabaseClient:
    """
    Supabase project client.

    Example:
        >>> client = SupabaseClient("https://xyz.supabase.co", "anon-key")
        >>> response = await client.request("GET", "/rest/v1/captions")
        >>> await client.close()
    """

    def __init__(
        self,
        url: str,
        anon_key: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize client.

        Args:
            url: Project URL
            anon_key: Public anon key
            timeout: Request timeout in seconds
            transport: Optional transport override (tests)
        """
        if not url:
            raise ConfigurationError("Supabase URL is not configured")

        self.url = url.rstrip("/")
        self.anon_key = anon_key
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

        if not anon_key:
            logger.warning("Supabase anon key is empty; requests will be rejected")

    @classmethod
    def from_settings(cls, settings: Settings) -> SupabaseClient:
        return cls(
            settings.supabase_url,
            settings.supabase_anon_key,
            timeout=settings.http_timeout,
        )

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.url,
                timeout=self.timeout,
                headers={"apikey": self.anon_key},
                transport=self._transport,
            )
        return self._client

    def endpoint(self, path: str) -> str:
        """Absolute URL for a project path."""
        return f"{self.url}{path}"

    async def request(
        self,
        method: str,
        path: str,
        *,
        access_token: str | None = None,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Send a request to the project.

        The bearer is the user's access token when given, else the anon key.
        Transport errors propagate as ``httpx.HTTPError``; status codes are
        left for the caller to inspect.
        """
        client = self._get_client()

        request_headers = {"Authorization": f"Bearer {access_token or self.anon_key}"}
        if headers:
            request_headers.update(headers)

        return await client.request(method, path, headers=request_headers, **kwargs)

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
