"""Mock Supabase backend for adapter tests."""

from __future__ import annotations

import json as jsonlib
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from .client import SupabaseClient

Responder = Callable[[httpx.Request], httpx.Response]


class MockSupabase:
    """Routes requests by (method, path) and records what was sent."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Responder] = {}
        self.requests: list[httpx.Request] = []

    def route(
        self,
        method: str,
        path: str,
        status: int = 200,
        json: Any = None,
        responder: Responder | None = None,
    ) -> None:
        """Answer (method, path) with a fresh response each time."""
        if responder is None:

            def responder(request: httpx.Request) -> httpx.Response:
                if json is None:
                    return httpx.Response(status)
                return httpx.Response(status, json=json)

        self.routes[(method, path)] = responder

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        responder = self.routes.get((request.method, request.url.path))
        if responder is None:
            return httpx.Response(404, json={"message": "no route"})
        return responder(request)

    @staticmethod
    def json_body(request: httpx.Request) -> Any:
        return jsonlib.loads(request.content)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def backend() -> MockSupabase:
    return MockSupabase()


@pytest.fixture
async def client(backend: MockSupabase):
    client = SupabaseClient(
        "https://project.supabase.co",
        "anon-key",
        transport=httpx.MockTransport(backend.handler),
    )
    yield client
    await client.close()
