"""Registries for tool descriptors and the servers that own them."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Mapping

from .errors import DuplicateToolError
from .schema import ToolDescriptor

if TYPE_CHECKING:
    from .server import MCPServer

MAX_PAGE_SIZE = 500
DEFAULT_PAGE_SIZE = 100


class SchemaRegistry:
    """Immutable-once-built, ordered catalogue of tool descriptors."""

    def __init__(self, descriptors: Iterable[ToolDescriptor] = ()) -> None:
        self._tools: dict[str, ToolDescriptor] = {}
        for descriptor in descriptors:
            self.register(descriptor)

    def register(self, descriptor: ToolDescriptor) -> None:
        if descriptor.name in self._tools:
            raise DuplicateToolError(descriptor.name)
        self._tools[descriptor.name] = descriptor

    def list_tools(self) -> list[ToolDescriptor]:
        """Return all descriptors in registration order."""
        return list(self._tools.values())

    def get_tool(self, name: str) -> ToolDescriptor | None:
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


def page_window(offset: int, limit: int) -> tuple[int, int]:
    """Clamp paging input to ``(start, size)``; a zero limit means the default page."""
    start = max(0, offset)
    size = max(1, min(MAX_PAGE_SIZE, limit or DEFAULT_PAGE_SIZE))
    return start, size


def search_tools(
    descriptors: Iterable[ToolDescriptor],
    *,
    query: str = "",
    category: str = "",
    offset: int = 0,
    limit: int = DEFAULT_PAGE_SIZE,
) -> tuple[int, list[ToolDescriptor]]:
    """Filter by category and substring, then page. Returns ``(total, page)``."""

    needle = query.strip().lower()
    matched = [
        descriptor
        for descriptor in descriptors
        if (not category or descriptor.resolved_category == category)
        and (
            needle in descriptor.name.lower()
            or needle in descriptor.resolved_category.lower()
        )
    ]
    start, size = page_window(offset, limit)
    return len(matched), matched[start : start + size]


class MCPRegistry:
    """Maps tool names to the server that serves them."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolDescriptor] = {}
        self._tool_servers: dict[str, str] = {}
        self._servers: dict[str, MCPServer] = {}

    def register_server(self, server: MCPServer) -> None:
        """Track a server and index every tool it advertises."""
        for descriptor in server.list_tools():
            owner = self._tool_servers.get(descriptor.name)
            if owner is not None and owner != server.server_id:
                raise DuplicateToolError(descriptor.name)
        if server.server_id in self._servers:
            self.remove_server(server.server_id)
        self._servers[server.server_id] = server
        for descriptor in server.list_tools():
            self._tools[descriptor.name] = descriptor
            self._tool_servers[descriptor.name] = server.server_id

    def remove_server(self, server_id: str) -> None:
        """Detach a server and purge its tools."""
        self._servers.pop(server_id, None)
        for name in [n for n, owner in self._tool_servers.items() if owner == server_id]:
            self._tools.pop(name, None)
            self._tool_servers.pop(name, None)

    def list_servers(self) -> list[MCPServer]:
        return list(self._servers.values())

    def list_tools(self) -> list[ToolDescriptor]:
        return list(self._tools.values())

    def get_tool(self, name: str) -> ToolDescriptor | None:
        return self._tools.get(name)

    def get_server_for_tool(self, name: str) -> MCPServer | None:
        server_id = self._tool_servers.get(name)
        if not server_id:
            return None
        return self._servers.get(server_id)

    def describe(self) -> Mapping[str, str]:
        """Return a mapping of tool name to owning server id (diagnostics)."""
        return dict(self._tool_servers)
