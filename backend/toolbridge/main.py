"""FastAPI application bootstrap for the HTTP tool binding."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import get_router
from .container import (
    ToolbridgeContainer,
    build_container,
    shutdown as shutdown_container,
    startup as startup_container,
)
from .env import load_dotenv_if_present
from .run_logging import configure_logging
from .startup_checks import run_startup_checks

logger = logging.getLogger(__name__)


def create_app(container: ToolbridgeContainer | None = None) -> FastAPI:
    """Construct the FastAPI application.

    Pass a prebuilt container to skip environment loading (tests do this).
    """
    if container is None:
        load_dotenv_if_present()
        from .settings import get_settings

        settings = get_settings()
        configure_logging(settings.log_level)
        container = build_container(settings=settings)

    app = FastAPI(title="toolbridge")
    app.state.container = container
    if container.settings.http.cors_enabled:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["Content-Type", "X-API-Key"],
        )
    app.include_router(get_router(container))

    @app.on_event("startup")
    async def _startup() -> None:
        if not container.mcp_initialized:
            run_startup_checks(container.settings)
        registered = startup_container(container)
        logger.info(
            "tool servers ready servers=%s tools=%s",
            ",".join(registered),
            len(container.mcp_client.list_tools()),
        )

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        await shutdown_container(container)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


_APP: FastAPI | None = None


def get_app() -> FastAPI:
    """Accessor for ASGI servers expecting an `app` variable."""

    global _APP
    if _APP is None:
        _APP = create_app()
    return _APP


def __getattr__(name: str):  # pragma: no cover
    if name == "app":
        return get_app()
    raise AttributeError(name)
