"""HTTP binding: tool listing and execution over JSON.

This module is safe to import: it does not construct runtime singletons or
perform network side effects.
"""

from __future__ import annotations

import hmac
import json
import logging
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Body, Header, Query, status
from fastapi.responses import JSONResponse

from .mcp.registry import page_window, search_tools
from .mcp.schema import ToolCallResult

if TYPE_CHECKING:
    from .container import ToolbridgeContainer

logger = logging.getLogger(__name__)


def _log(message: str, tool: str, *args: object) -> None:
    logger.info(message, *args, extra={"tool": tool})


def _int_param(value: str | None) -> int:
    """Lenient query integer; anything unparseable reads as 0."""
    try:
        return int((value or "").strip())
    except ValueError:
        return 0


def enforce_size_limit(result: ToolCallResult, max_bytes: int) -> ToolCallResult:
    """Replace oversized results with an error telling the caller to page."""

    size = len(json.dumps(result.to_wire(), ensure_ascii=False).encode("utf-8"))
    if size <= max_bytes:
        return result
    return ToolCallResult.error(
        f"Response too large: {size / 1024:.2f}KB (max: {max_bytes / 1024:.2f}KB). "
        "Use pagination parameters to reduce response size."
    )


def get_router(container: "ToolbridgeContainer") -> APIRouter:
    """Build API routes using the provided dependency container."""

    router = APIRouter()
    http_settings = container.settings.http

    def _bucket(api_key: str | None) -> str:
        # Unauthenticated callers share one bucket.
        if http_settings.api_key is None:
            return ""
        return api_key or ""

    def _guard(api_key: str | None) -> JSONResponse | None:
        expected = http_settings.api_key
        if expected is not None and not hmac.compare_digest(
            (api_key or "").encode("utf-8"),
            expected.get_secret_value().encode("utf-8"),
        ):
            return JSONResponse(
                {"ok": False, "error": "Forbidden: Invalid or missing API key"},
                status_code=status.HTTP_403_FORBIDDEN,
            )
        if not container.rate_limiter.try_acquire(_bucket(api_key)):
            return JSONResponse(
                {"ok": False, "reason": "rate_limited"},
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                headers={
                    "X-RateLimit-Limit": str(container.rate_limiter.max_tokens),
                    "X-RateLimit-Remaining": "0",
                },
            )
        return None

    @router.get("/tools")
    async def list_tools(
        q: str = "",
        category: str = "",
        offset: str = Query(default="0"),
        limit: str = Query(default=""),
        x_api_key: str | None = Header(default=None, alias="X-API-Key"),
    ) -> JSONResponse:
        """Search the catalogue of every registered server."""
        rejected = _guard(x_api_key)
        if rejected is not None:
            return rejected
        start, size = page_window(_int_param(offset), _int_param(limit))
        total, page = search_tools(
            container.mcp_client.list_tools(),
            query=q,
            category=category,
            offset=start,
            limit=size,
        )
        return JSONResponse(
            {
                "ok": True,
                "total": total,
                "offset": start,
                "limit": size,
                "tools": [
                    {
                        "name": descriptor.name,
                        "category": descriptor.resolved_category,
                        "description": descriptor.description,
                    }
                    for descriptor in page
                ],
            }
        )

    @router.get("/tools/{tool_name}")
    async def describe_tool(
        tool_name: str,
        x_api_key: str | None = Header(default=None, alias="X-API-Key"),
    ) -> JSONResponse:
        rejected = _guard(x_api_key)
        if rejected is not None:
            return rejected
        descriptor = container.mcp_client.registry.get_tool(tool_name)
        if descriptor is None:
            return JSONResponse(
                {"ok": False, "error": f"Unknown tool: {tool_name}"},
                status_code=status.HTTP_404_NOT_FOUND,
            )
        return JSONResponse({"ok": True, "tool": descriptor.to_wire()})

    @router.post("/execute")
    async def execute(
        payload: dict[str, Any] = Body(...),
        x_api_key: str | None = Header(default=None, alias="X-API-Key"),
    ) -> JSONResponse:
        """Run one tool; the body is ``{"tool": name, ...arguments}``."""
        rejected = _guard(x_api_key)
        if rejected is not None:
            return rejected
        arguments = dict(payload)
        tool_name = arguments.pop("tool", None)
        if not isinstance(tool_name, str) or not tool_name:
            return JSONResponse(
                {"ok": False, "error": "Missing required field: tool"},
                status_code=status.HTTP_400_BAD_REQUEST,
            )
        _log("execute request args=%s", tool_name, sorted(arguments))
        result = await container.mcp_client.execute_tool(tool_name, arguments)
        result = enforce_size_limit(result, http_settings.max_response_bytes)
        return JSONResponse(
            {"ok": not result.is_error, "result": result.to_wire()},
            headers={
                "X-RateLimit-Limit": str(container.rate_limiter.max_tokens),
                "X-RateLimit-Remaining": str(container.rate_limiter.remaining(_bucket(x_api_key))),
            },
        )

    return router


__all__ = ["enforce_size_limit", "get_router"]
