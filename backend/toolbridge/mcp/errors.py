"""Error taxonomy shared by the dispatch core and the API client."""

from __future__ import annotations

from typing import Any, Mapping


class ToolbridgeError(Exception):
    """Base error carrying an optional structured payload."""

    def __init__(self, message: str, *, details: Mapping[str, Any] | None = None):
        super().__init__(message)
        self.details = dict(details or {})


class UnknownToolError(ToolbridgeError):
    """Raised when a call names a tool that is not registered."""

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}", details={"tool": name})
        self.name = name


class DuplicateToolError(ToolbridgeError):
    """Raised when a catalogue registers the same tool name twice."""

    def __init__(self, name: str):
        super().__init__(f"duplicate tool name {name}", details={"tool": name})
        self.name = name


class CatalogueMismatchError(ToolbridgeError):
    """Raised when registered descriptors and adapters drift apart."""


class ArgumentValidationError(ToolbridgeError):
    """Raised when call arguments do not satisfy the tool's input schema."""

    def __init__(self, field: str, message: str):
        super().__init__(message, details={"field": field})
        self.field = field


class ApiError(ToolbridgeError):
    """Backend answered with a non-success status.

    ``body`` is the upstream response text, kept verbatim.
    """

    def __init__(self, status: int | None, body: str, *, service: str = "Backend"):
        super().__init__(
            f"{service} API error ({status}): {body}",
            details={"status": status, "body": body, "service": service},
        )
        self.status = status
        self.body = body
        self.service = service


class TransportFault(ApiError):
    """The HTTP exchange itself failed (DNS, TLS, connection reset, timeout)."""

    def __init__(self, service: str, reason: str):
        ToolbridgeError.__init__(
            self,
            f"{service} request failed: {reason}",
            details={"status": None, "body": reason, "service": service},
        )
        self.status = None
        self.body = reason
        self.service = service


__all__ = [
    "ApiError",
    "ArgumentValidationError",
    "CatalogueMismatchError",
    "DuplicateToolError",
    "ToolbridgeError",
    "TransportFault",
    "UnknownToolError",
]
