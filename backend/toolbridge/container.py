"""Explicit dependency container for the HTTP binding.

Side-effect free on import. Building the container constructs clients but
performs no network I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .limits.rate_limiter import RateLimiter
    from .mcp.client import MCPClient
    from .settings import Settings


@dataclass
class ToolbridgeContainer:
    """Holds the constructed runtime dependencies."""

    settings: Settings
    mcp_client: MCPClient
    rate_limiter: RateLimiter
    mcp_initialized: bool = False


def build_container(
    *,
    settings: "Settings" | None = None,
    mcp_client: "MCPClient" | None = None,
) -> ToolbridgeContainer:
    """Construct the dependency graph without registering any server."""

    from .limits.rate_limiter import RateLimiter
    from .mcp.client import MCPClient
    from .settings import get_settings

    settings = settings or get_settings()
    return ToolbridgeContainer(
        settings=settings,
        mcp_client=mcp_client or MCPClient(),
        rate_limiter=RateLimiter(
            settings.http.rate_limit_max_tokens,
            settings.http.rate_limit_refill_per_second,
        ),
    )


def startup(container: ToolbridgeContainer) -> list[str]:
    """Register a server for every configured backend, once."""

    from .mcp.bootstrap import initialize_mcp

    if container.mcp_initialized:
        return [server.server_id for server in container.mcp_client.registry.list_servers()]
    registered = initialize_mcp(container.mcp_client, container.settings)
    container.mcp_initialized = True
    return registered


async def shutdown(container: ToolbridgeContainer) -> None:
    """Close the outbound HTTP clients owned by registered servers."""

    await container.mcp_client.aclose()
