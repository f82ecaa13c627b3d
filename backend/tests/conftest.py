from __future__ import annotations

from typing import Any, Mapping

import pytest

from toolbridge.mcp.api_client import Presence


class StubClient:
    """In-memory ApiClient that records every call.

    ``responses`` maps ``(METHOD, path)`` to the value to return; exception
    instances are raised instead. Probes are keyed by ``("PROBE", path)``.
    """

    def __init__(self, responses: Mapping[tuple[str, str], Any] | None = None, default: Any = None):
        self.responses = dict(responses or {})
        self.default = default
        self.calls: list[tuple[str, str, Any]] = []
        self.headers: list[Mapping[str, str] | None] = []
        self.closed = False

    def _answer(self, method: str, path: str, payload: Any) -> Any:
        self.calls.append((method, path, payload))
        result = self.responses.get((method, path), self.default)
        if isinstance(result, Exception):
            raise result
        return result

    async def get(self, path, params=None, *, headers=None):
        self.headers.append(headers)
        return self._answer("GET", path, params)

    async def post(self, path, body=None):
        return self._answer("POST", path, body)

    async def patch(self, path, body=None):
        return self._answer("PATCH", path, body)

    async def put(self, path, body=None):
        return self._answer("PUT", path, body)

    async def delete(self, path, body=None):
        return self._answer("DELETE", path, body)

    async def graphql(self, query, variables=None):
        return self._answer("GRAPHQL", query, variables)

    async def probe(self, path, params=None):
        self.calls.append(("PROBE", path, params))
        result = self.responses.get(("PROBE", path), Presence.FOUND)
        if isinstance(result, Exception):
            raise result
        return result

    async def aclose(self):
        self.closed = True

    @property
    def call_count(self) -> int:
        return len(self.calls)


@pytest.fixture
def stub_client() -> StubClient:
    return StubClient()


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    from toolbridge import settings as settings_module

    for name in (
        "GITHUB_PERSONAL_ACCESS_TOKEN",
        "GITHUB_TOKEN",
        "GITHUB_API_URL",
        "VERCEL_TOKEN",
        "VERCEL_TEAM_ID",
        "VERCEL_API_URL",
        "GOOGLE_SERVICE_ACCOUNT_KEY",
        "GOOGLE_USER_EMAIL",
        "TOOLBRIDGE_API_KEY",
        "TOOLBRIDGE_HTTP_TIMEOUT_SECONDS",
        "TOOLBRIDGE_RATE_LIMIT_MAX_TOKENS",
        "TOOLBRIDGE_RATE_LIMIT_REFILL_PER_SECOND",
        "TOOLBRIDGE_MAX_RESPONSE_BYTES",
        "TOOLBRIDGE_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    settings_module.reset_settings()
    yield
    settings_module.reset_settings()
