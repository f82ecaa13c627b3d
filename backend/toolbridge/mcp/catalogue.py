"""Helpers for writing tool catalogues as data."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

from .adapters import (
    GraphQLOperation,
    Operation,
    ProbeOperation,
    RestOperation,
    path_parameters,
)
from .registry import SchemaRegistry
from .schema import ToolDescriptor


@dataclass(frozen=True)
class CatalogueEntry:
    """A tool descriptor paired with the operation that implements it."""

    descriptor: ToolDescriptor
    operation: Operation

    @property
    def name(self) -> str:
        return self.descriptor.name


def string(description: str | None = None, *, enum: Sequence[str] | None = None) -> dict[str, Any]:
    prop: dict[str, Any] = {"type": "string"}
    if description:
        prop["description"] = description
    if enum is not None:
        prop["enum"] = list(enum)
    return prop


def number(description: str | None = None) -> dict[str, Any]:
    prop: dict[str, Any] = {"type": "number"}
    if description:
        prop["description"] = description
    return prop


def boolean(description: str | None = None) -> dict[str, Any]:
    prop: dict[str, Any] = {"type": "boolean"}
    if description:
        prop["description"] = description
    return prop


def array(description: str | None = None, *, items: Mapping[str, Any] | None = None) -> dict[str, Any]:
    prop: dict[str, Any] = {"type": "array", "items": dict(items or {"type": "string"})}
    if description:
        prop["description"] = description
    return prop


def obj(description: str | None = None) -> dict[str, Any]:
    prop: dict[str, Any] = {"type": "object"}
    if description:
        prop["description"] = description
    return prop


def object_schema(
    properties: Mapping[str, Mapping[str, Any]], required: Iterable[str] = ()
) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": "object", "properties": {k: dict(v) for k, v in properties.items()}}
    required = list(dict.fromkeys(required))
    if required:
        schema["required"] = required
    return schema


def _with_path_requirements(
    properties: Mapping[str, Mapping[str, Any]],
    required: Iterable[str],
    path: str | None,
) -> tuple[dict[str, Mapping[str, Any]], list[str]]:
    merged = dict(properties)
    names = list(required)
    for name in path_parameters(path or ""):
        merged.setdefault(name, string())
        if name not in names:
            names.append(name)
    return merged, names


def tool(
    name: str,
    description: str,
    operation: Operation,
    *,
    properties: Mapping[str, Mapping[str, Any]] | None = None,
    required: Iterable[str] = (),
) -> CatalogueEntry:
    """Declare a tool backed by any operation (REST, GraphQL, probe or callable).

    Path placeholders of REST and probe operations become required string
    properties unless the operation has a fallback path.
    """

    path: str | None = None
    if isinstance(operation, RestOperation) and operation.fallback_path is None:
        path = operation.path
    elif isinstance(operation, ProbeOperation):
        path = operation.path
    props, names = _with_path_requirements(properties or {}, required, path)
    descriptor = ToolDescriptor(
        name=name,
        description=description,
        input_schema=object_schema(props, names),
    )
    return CatalogueEntry(descriptor=descriptor, operation=operation)


def rest(
    name: str,
    description: str,
    method: str,
    path: str,
    *,
    properties: Mapping[str, Mapping[str, Any]] | None = None,
    required: Iterable[str] = (),
    **options: Any,
) -> CatalogueEntry:
    return tool(
        name,
        description,
        RestOperation(method=method, path=path, **options),
        properties=properties,
        required=required,
    )


def graphql(
    name: str,
    description: str,
    document: str,
    *,
    properties: Mapping[str, Mapping[str, Any]] | None = None,
    required: Iterable[str] = (),
    message: str | None = None,
) -> CatalogueEntry:
    props = dict(properties or {})
    return tool(
        name,
        description,
        GraphQLOperation(document=document, variables=tuple(props), message=message),
        properties=props,
        required=required,
    )


def probe(
    name: str,
    description: str,
    path: str,
    *,
    found: str,
    missing: str,
    properties: Mapping[str, Mapping[str, Any]] | None = None,
) -> CatalogueEntry:
    return tool(
        name,
        description,
        ProbeOperation(path=path, found=found, missing=missing),
        properties=properties,
    )


def build_tables(
    entries: Iterable[CatalogueEntry],
) -> tuple[SchemaRegistry, dict[str, Operation]]:
    """Split entries into the registry and the adapter mapping, in lockstep."""

    registry = SchemaRegistry()
    adapters: dict[str, Operation] = {}
    for entry in entries:
        registry.register(entry.descriptor)
        adapters[entry.name] = entry.operation
    return registry, adapters


__all__ = [
    "CatalogueEntry",
    "array",
    "boolean",
    "build_tables",
    "graphql",
    "number",
    "obj",
    "object_schema",
    "probe",
    "rest",
    "string",
    "tool",
]
