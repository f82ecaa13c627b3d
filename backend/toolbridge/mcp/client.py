"""MCP client that routes calls across every configured server."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from .errors import UnknownToolError
from .registry import MCPRegistry
from .schema import ToolCallResult, ToolDescriptor
from .server import MCPServer

logger = logging.getLogger(__name__)


class MCPClient:
    """Front door for transports that serve more than one backend."""

    def __init__(self, registry: MCPRegistry | None = None):
        self.registry = registry or MCPRegistry()

    def register_server(self, server: MCPServer) -> None:
        """Register a server so its tools can be discovered."""
        self.registry.register_server(server)
        logger.info(
            "mcp server registered server_id=%s tools=%s",
            server.server_id,
            len(server.list_tools()),
        )

    def list_tools(self) -> list[ToolDescriptor]:
        return self.registry.list_tools()

    async def execute_tool(
        self, tool_name: str, arguments: Mapping[str, Any] | None = None
    ) -> ToolCallResult:
        """Route execution to the server responsible for the tool."""
        server = self.registry.get_server_for_tool(tool_name)
        if server is None:
            logger.warning("unknown tool requested", extra={"tool": tool_name})
            return ToolCallResult.error(str(UnknownToolError(tool_name)))
        return await server.call_tool(tool_name=tool_name, arguments=arguments)

    async def aclose(self) -> None:
        for server in self.registry.list_servers():
            await server.aclose()
