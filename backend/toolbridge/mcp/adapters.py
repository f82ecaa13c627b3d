"""Declarative operation adapters and the generic executor that interprets them.

A tool's backend call is described as data (method, path template, which
arguments become query params or body fields) instead of a hand-written
function. Tools whose behaviour does not fit a single request are plain
``async def adapter(arguments, client)`` callables.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Literal, Mapping, Union
from urllib.parse import quote

from .api_client import ApiClient, Presence, encode_query
from .errors import ArgumentValidationError
from .schema import ToolCallResult

DEFAULT_EMPTY_MESSAGE = "Operation completed successfully"

BodyMode = Literal["fields", "remainder"]

AdapterFn = Callable[[Mapping[str, Any], ApiClient], Awaitable[ToolCallResult]]

# "{name}" is a single URL segment, "{name*}" may span segments (file paths).
_PLACEHOLDER = re.compile(r"\{(\w+)(\*?)\}")


def path_parameters(template: str) -> list[str]:
    return [match.group(1) for match in _PLACEHOLDER.finditer(template)]


def render_path(template: str, arguments: Mapping[str, Any]) -> str:
    def _substitute(match: re.Match[str]) -> str:
        name, greedy = match.group(1), match.group(2)
        value = arguments.get(name)
        if value is None or value == "":
            raise ArgumentValidationError(name, f"Missing required argument: {name}")
        return quote(str(value), safe="/" if greedy else "")

    return _PLACEHOLDER.sub(_substitute, template)


@dataclass(frozen=True)
class RestOperation:
    """One REST request built from call arguments."""

    method: str
    path: str
    query: tuple[str, ...] = ()
    body: tuple[str, ...] = ()
    body_mode: BodyMode = "fields"
    static_body: Mapping[str, Any] | None = None
    static_query: Mapping[str, Any] | None = None
    renames: Mapping[str, str] = field(default_factory=dict)
    fallback_path: str | None = None
    accept: str | None = None
    message: str | None = None

    def select_path(self, arguments: Mapping[str, Any]) -> str:
        if self.fallback_path is None:
            return self.path
        if all(arguments.get(name) is not None for name in path_parameters(self.path)):
            return self.path
        return self.fallback_path

    def build_query(self, arguments: Mapping[str, Any]) -> dict[str, Any]:
        query = dict(self.static_query or {})
        for name in self.query:
            if arguments.get(name) is not None:
                query[self.renames.get(name, name)] = arguments[name]
        return query

    def build_body(self, arguments: Mapping[str, Any], path: str) -> dict[str, Any] | None:
        if self.body_mode == "fields" and not self.body and self.static_body is None:
            return None
        if self.body_mode == "remainder":
            consumed = set(path_parameters(path)) | set(self.query)
            selected = [name for name in arguments if name not in consumed]
        else:
            selected = list(self.body)
        payload: dict[str, Any] = dict(self.static_body or {})
        for name in selected:
            value = arguments.get(name)
            if value is not None:
                payload[self.renames.get(name, name)] = value
        return payload

    async def __call__(self, arguments: Mapping[str, Any], client: ApiClient) -> ToolCallResult:
        template = self.select_path(arguments)
        path = render_path(template, arguments)
        query = self.build_query(arguments)
        method = self.method.upper()
        if method == "GET":
            headers = {"Accept": self.accept} if self.accept else None
            payload = await client.get(path, query or None, headers=headers)
        else:
            if query:
                path = _append_query(path, query)
            body = self.build_body(arguments, template)
            sender = {
                "POST": client.post,
                "PATCH": client.patch,
                "PUT": client.put,
                "DELETE": client.delete,
            }[method]
            payload = await sender(path, body)
        if self.message is not None:
            return ToolCallResult.text(self.message)
        return ToolCallResult.from_payload(payload, empty_message=DEFAULT_EMPTY_MESSAGE)


@dataclass(frozen=True)
class GraphQLOperation:
    """A GraphQL document whose variables are taken from call arguments."""

    document: str
    variables: tuple[str, ...] = ()
    message: str | None = None

    async def __call__(self, arguments: Mapping[str, Any], client: ApiClient) -> ToolCallResult:
        variables = {
            name: arguments[name] for name in self.variables if arguments.get(name) is not None
        }
        payload = await client.graphql(self.document, variables or None)
        if self.message is not None:
            return ToolCallResult.text(self.message)
        return ToolCallResult.from_payload(payload, empty_message=DEFAULT_EMPTY_MESSAGE)


@dataclass(frozen=True)
class ProbeOperation:
    """Existence check; absence is an answer, not a failure."""

    path: str
    found: str
    missing: str

    async def __call__(self, arguments: Mapping[str, Any], client: ApiClient) -> ToolCallResult:
        presence = await client.probe(render_path(self.path, arguments))
        return ToolCallResult.text(self.found if presence is Presence.FOUND else self.missing)


Operation = Union[RestOperation, GraphQLOperation, ProbeOperation, AdapterFn]


def _append_query(path: str, query: Mapping[str, Any]) -> str:
    pairs = "&".join(f"{key}={quote(value, safe=',')}" for key, value in encode_query(query))
    separator = "&" if "?" in path else "?"
    return f"{path}{separator}{pairs}"


__all__ = [
    "AdapterFn",
    "DEFAULT_EMPTY_MESSAGE",
    "GraphQLOperation",
    "Operation",
    "ProbeOperation",
    "RestOperation",
    "path_parameters",
    "render_path",
]
