"""Stdio transport binding: serves one MCPServer over the MCP SDK session."""

from __future__ import annotations

import logging
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import CallToolResult, TextContent, Tool

from ..run_logging import log_tool
from .schema import ToolCallRequest, ToolCallResult, ToolDescriptor
from .server import MCPServer

logger = logging.getLogger(__name__)


def to_sdk_tool(descriptor: ToolDescriptor) -> Tool:
    return Tool(
        name=descriptor.name,
        description=descriptor.description,
        inputSchema=dict(descriptor.input_schema),
    )


def to_sdk_result(result: ToolCallResult) -> CallToolResult:
    return CallToolResult(
        content=[TextContent(type="text", text=item.text) for item in result.content],
        isError=result.is_error,
    )


def build_sdk_server(backend: MCPServer) -> Server:
    """Wire the SDK's list/call handlers to the backend's dispatcher.

    Argument checking is left to the dispatcher so failures keep the
    ``Error:`` envelope instead of the SDK's own message.
    """

    server: Server = Server(f"{backend.server_id}-mcp-server", version=backend.version)
    tools = [to_sdk_tool(descriptor) for descriptor in backend.list_tools()]

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        return tools

    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, Any] | None) -> CallToolResult:
        settled = await backend.dispatch(ToolCallRequest.model_construct(name=name, arguments=arguments))
        if not settled.ok:
            log_tool(name, "stdio call settled outcome=%s", settled.outcome.value)
        return to_sdk_result(settled.result)

    return server


async def serve_stdio(backend: MCPServer) -> None:
    """Run until the calling process closes the channel."""

    server = build_sdk_server(backend)
    logger.info(
        "%s MCP server running on stdio tools=%s",
        backend.server_id,
        len(backend.list_tools()),
    )
    try:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options(),
            )
    finally:
        await backend.aclose()


__all__ = ["build_sdk_server", "serve_stdio", "to_sdk_result", "to_sdk_tool"]
