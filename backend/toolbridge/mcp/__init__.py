"""Dispatch core, schema registry and API client."""

from .api_client import AuthenticatedApiClient, BackendProfile, Presence
from .client import MCPClient
from .dispatcher import DispatchOutcome, DispatchResult, Dispatcher
from .errors import (
    ApiError,
    ArgumentValidationError,
    ToolbridgeError,
    TransportFault,
    UnknownToolError,
)
from .registry import MCPRegistry, SchemaRegistry
from .schema import ToolCallRequest, ToolCallResult, ToolDescriptor
from .server import MCPServer

__all__ = [
    "ApiError",
    "ArgumentValidationError",
    "AuthenticatedApiClient",
    "BackendProfile",
    "DispatchOutcome",
    "DispatchResult",
    "Dispatcher",
    "MCPClient",
    "MCPRegistry",
    "MCPServer",
    "Presence",
    "SchemaRegistry",
    "ToolCallRequest",
    "ToolCallResult",
    "ToolDescriptor",
    "ToolbridgeError",
    "TransportFault",
    "UnknownToolError",
]
