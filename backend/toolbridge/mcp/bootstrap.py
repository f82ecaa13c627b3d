"""MCP bootstrap helpers shared by the stdio and HTTP entrypoints."""

from __future__ import annotations

import logging

from pydantic import SecretStr

from ..settings import Settings
from ..startup_checks import SERVICES, MissingCredentialError
from .client import MCPClient
from .server import MCPServer
from .servers.github_server import GitHubMCPServer
from .servers.google_server import GoogleMCPServer
from .servers.vercel_server import VercelMCPServer

logger = logging.getLogger(__name__)


def build_server(
    service: str,
    settings: Settings,
    *,
    token: SecretStr | str | None = None,
    team_id: str | None = None,
    user_email: str | None = None,
) -> MCPServer:
    """Build one server; explicit arguments win over settings.

    For Google, ``token`` is the service-account key (file path or JSON).
    """

    timeout = settings.http.timeout_seconds
    if service == "github":
        credential = token or settings.github.token
        if credential is None:
            raise MissingCredentialError("github")
        return GitHubMCPServer.from_token(
            credential, base_url=settings.github.api_url, timeout=timeout
        )
    if service == "vercel":
        credential = token or settings.vercel.token
        if credential is None:
            raise MissingCredentialError("vercel")
        return VercelMCPServer.from_token(
            credential,
            team_id=team_id or settings.vercel.team_id,
            base_url=settings.vercel.api_url,
            timeout=timeout,
        )
    if service == "google":
        credential = token or settings.google.service_account_key
        if credential is None:
            raise MissingCredentialError("google")
        return GoogleMCPServer.from_service_account(
            credential,
            user_email=user_email or settings.google.user_email,
            timeout=timeout,
        )
    raise RuntimeError(f"Unknown service {service!r}")


def initialize_mcp(client: MCPClient, settings: Settings) -> list[str]:
    """Register a server for every backend with a configured credential."""

    registered: list[str] = []
    for service in SERVICES:
        if not getattr(settings, service).configured:
            logger.info("skipping %s server: no credential configured", service)
            continue
        server = build_server(service, settings)
        client.register_server(server)
        registered.append(server.server_id)
    return registered
