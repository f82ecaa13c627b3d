"""MCP server contract shared by every backend family."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from .api_client import ApiClient
from .catalogue import CatalogueEntry, build_tables
from .dispatcher import Dispatcher, DispatchResult
from .schema import ToolCallRequest, ToolCallResult, ToolDescriptor


class MCPServer:
    """A catalogue of tools bound to one authenticated backend client."""

    def __init__(
        self,
        server_id: str,
        entries: Iterable[CatalogueEntry],
        client: ApiClient,
        *,
        version: str = "1.0.0",
    ):
        self.server_id = server_id
        self.version = version
        registry, adapters = build_tables(entries)
        self.dispatcher = Dispatcher(registry, adapters, client)

    @property
    def client(self) -> ApiClient:
        return self.dispatcher.client

    def list_tools(self) -> list[ToolDescriptor]:
        """Return the tools exposed by this server."""
        return self.dispatcher.list_tools()

    async def call_tool(
        self, *, tool_name: str, arguments: Mapping[str, Any] | None = None
    ) -> ToolCallResult:
        """Execute a tool; failures come back as error envelopes."""
        return await self.dispatcher.call_tool(tool_name, arguments)

    async def dispatch(self, request: ToolCallRequest) -> DispatchResult:
        return await self.dispatcher.dispatch(request)

    async def aclose(self) -> None:
        closer = getattr(self.client, "aclose", None)
        if closer is not None:
            await closer()
