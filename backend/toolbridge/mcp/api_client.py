"""Authenticated HTTP/GraphQL client every adapter performs network I/O through."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Protocol, cast

import httpx
from pydantic import SecretStr

from .errors import ApiError, TransportFault

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


class Presence(str, Enum):
    """Outcome of an existence probe."""

    FOUND = "found"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class BackendProfile:
    """Static description of one backend family."""

    service: str
    base_url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    default_params: Mapping[str, Any] = field(default_factory=dict)
    graphql_path: str = "/graphql"


class TokenSource(Protocol):
    """Supplies a bearer token that may change over the client's lifetime."""

    async def current(self) -> SecretStr: ...


class ApiClient(Protocol):
    """What adapters may call. Tests substitute their own implementation."""

    async def get(
        self, path: str, params: Mapping[str, Any] | None = None, *, headers: Mapping[str, str] | None = None
    ) -> Any: ...

    async def post(self, path: str, body: Any = None) -> Any: ...

    async def patch(self, path: str, body: Any = None) -> Any: ...

    async def put(self, path: str, body: Any = None) -> Any: ...

    async def delete(self, path: str, body: Any = None) -> Any: ...

    async def graphql(self, query: str, variables: Mapping[str, Any] | None = None) -> Any: ...

    async def probe(self, path: str, params: Mapping[str, Any] | None = None) -> Presence: ...


def encode_query(params: Mapping[str, Any]) -> list[tuple[str, str]]:
    """Serialize query params; ``None`` values are dropped."""

    encoded: list[tuple[str, str]] = []
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            encoded.append((key, "true" if value else "false"))
        elif isinstance(value, (list, tuple)):
            encoded.append((key, ",".join(str(item) for item in value)))
        else:
            encoded.append((key, str(value)))
    return encoded


class AuthenticatedApiClient:
    """Single-attempt HTTP client bound to one backend and one credential."""

    def __init__(
        self,
        profile: BackendProfile,
        credential: SecretStr | str | TokenSource,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.profile = profile
        self._token_source: TokenSource | None = None
        self._credential: SecretStr | None = None
        if isinstance(credential, SecretStr):
            self._credential = credential
        elif isinstance(credential, str):
            self._credential = SecretStr(credential)
        else:
            self._token_source = credential
        self._http = httpx.AsyncClient(
            timeout=timeout, transport=transport, follow_redirects=True
        )

    def __repr__(self) -> str:
        return f"AuthenticatedApiClient(service={self.profile.service!r}, base_url={self.profile.base_url!r})"

    async def __aenter__(self) -> "AuthenticatedApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def get(
        self,
        path: str,
        params: Mapping[str, Any] | None = None,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        return await self.request("GET", path, params=params, headers=headers)

    async def post(self, path: str, body: Any = None) -> Any:
        return await self.request("POST", path, body=body)

    async def patch(self, path: str, body: Any = None) -> Any:
        return await self.request("PATCH", path, body=body)

    async def put(self, path: str, body: Any = None) -> Any:
        return await self.request("PUT", path, body=body)

    async def delete(self, path: str, body: Any = None) -> Any:
        return await self.request("DELETE", path, body=body)

    async def graphql(self, query: str, variables: Mapping[str, Any] | None = None) -> Any:
        """POST a query or mutation document to the backend's GraphQL endpoint."""
        envelope: dict[str, Any] = {"query": query}
        if variables:
            envelope["variables"] = dict(variables)
        payload = await self.post(self.profile.graphql_path, envelope)
        if isinstance(payload, Mapping) and payload.get("errors"):
            raise ApiError(200, json.dumps(payload["errors"]), service=self.profile.service)
        return payload

    async def probe(self, path: str, params: Mapping[str, Any] | None = None) -> Presence:
        """GET ``path`` and report whether it exists; only 404 counts as absent."""
        response = await self._send("GET", path, params=params)
        if response.status_code == 404:
            return Presence.NOT_FOUND
        self._raise_for_status(response)
        return Presence.FOUND

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        response = await self._send(method, path, params=params, body=body, headers=headers)
        self._raise_for_status(response)
        return self._parse(response)

    def resolve_url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.profile.base_url.rstrip('/')}/{path.lstrip('/')}"

    async def bearer(self) -> SecretStr:
        if self._token_source is not None:
            return await self._token_source.current()
        return cast(SecretStr, self._credential)

    def build_headers(
        self, token: SecretStr, extra: Mapping[str, str] | None = None
    ) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {token.get_secret_value()}",
            "Accept": "application/json",
        }
        headers.update(self.profile.headers)
        if extra:
            headers.update(extra)
        return headers

    def merge_params(self, params: Mapping[str, Any] | None) -> list[tuple[str, str]]:
        merged: dict[str, Any] = dict(self.profile.default_params)
        for key, value in (params or {}).items():
            if value is not None:
                merged[key] = value
        return encode_query(merged)

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        url = self.resolve_url(path)
        query = self.merge_params(params)
        token = await self.bearer()
        logger.debug("%s request %s %s", self.profile.service, method, url)
        try:
            return await self._http.request(
                method,
                url,
                params=query or None,
                json=body,
                headers=self.build_headers(token, headers),
            )
        except httpx.HTTPError as exc:
            logger.warning(
                "%s transport failure method=%s url=%s error=%s",
                self.profile.service,
                method,
                url,
                exc.__class__.__name__,
            )
            raise TransportFault(self.profile.service, str(exc) or exc.__class__.__name__) from exc

    def _raise_for_status(self, response: httpx.Response) -> None:
        if response.is_success:
            return
        logger.info(
            "%s api error status=%s url=%s",
            self.profile.service,
            response.status_code,
            response.request.url,
        )
        raise ApiError(response.status_code, response.text, service=self.profile.service)

    @staticmethod
    def _parse(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text


__all__ = [
    "ApiClient",
    "AuthenticatedApiClient",
    "BackendProfile",
    "Presence",
    "TokenSource",
    "encode_query",
]
