"""Backend tool catalogues."""

from .github_server import GitHubMCPServer
from .google_server import GoogleMCPServer
from .vercel_server import VercelMCPServer

__all__ = ["GitHubMCPServer", "GoogleMCPServer", "VercelMCPServer"]
