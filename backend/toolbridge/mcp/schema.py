"""Shared MCP schema models."""

from __future__ import annotations

import json
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


def _empty_object_schema() -> dict[str, Any]:
    return {"type": "object", "properties": {}}


class ToolDescriptor(BaseModel):
    """Structured metadata describing a tool exposed by an MCP server."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    name: str = Field(..., min_length=1)
    description: str
    input_schema: dict[str, Any] = Field(
        default_factory=_empty_object_schema, alias="inputSchema"
    )
    category: str | None = None

    @property
    def resolved_category(self) -> str:
        """Explicit category, or the tool name prefix (``github_get_repo`` -> ``github``)."""
        if self.category:
            return self.category
        return self.name.split("_", 1)[0]

    @property
    def required_fields(self) -> list[str]:
        return list(self.input_schema.get("required") or [])

    def to_wire(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


class ToolCallRequest(BaseModel):
    """Request envelope sent to a server for a tool invocation."""

    model_config = ConfigDict(extra="forbid")

    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class TextContent(BaseModel):
    """One entry of a result payload."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    type: Literal["text"] = "text"
    text: str


class ToolCallResult(BaseModel):
    """Response envelope returned by servers after execution."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    content: list[TextContent]
    is_error: bool = Field(default=False, alias="isError")

    @model_validator(mode="after")
    def _validate_content(self) -> "ToolCallResult":
        if not self.content:
            raise ValueError("tool call result requires at least one content entry")
        return self

    @classmethod
    def text(cls, text: str) -> "ToolCallResult":
        return cls(content=[TextContent(text=text)])

    @classmethod
    def error(cls, message: str) -> "ToolCallResult":
        return cls(content=[TextContent(text=f"Error: {message}")], is_error=True)

    @classmethod
    def from_payload(cls, payload: Any, *, empty_message: str) -> "ToolCallResult":
        """Render a backend payload as text.

        Strings pass through untouched (diffs, logs), ``None`` becomes
        ``empty_message`` and everything else is serialized as compact JSON.
        """
        if payload is None:
            return cls.text(empty_message)
        if isinstance(payload, str):
            return cls.text(payload)
        return cls.text(json.dumps(payload, separators=(",", ":"), ensure_ascii=False))

    @property
    def first_text(self) -> str:
        return self.content[0].text

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
