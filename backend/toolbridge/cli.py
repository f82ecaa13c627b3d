"""Command-line entrypoint: run one tool server over stdio."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Sequence

from pydantic import SecretStr

from .env import load_dotenv_if_present
from .mcp.bootstrap import build_server
from .mcp.stdio import serve_stdio
from .run_logging import configure_logging
from .settings import Settings, get_settings
from .startup_checks import (
    MissingCredentialError,
    credential_env_var,
    require_credential,
    service_label,
)

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="toolbridge",
        description="Serve a backend's tool catalogue to an agent over stdio.",
    )
    subcommands = parser.add_subparsers(dest="service", required=True)

    github = subcommands.add_parser("github", help="GitHub REST and GraphQL tools.")
    github.add_argument(
        "token",
        nargs="?",
        default=None,
        help="Personal access token (default: $GITHUB_PERSONAL_ACCESS_TOKEN or $GITHUB_TOKEN).",
    )

    vercel = subcommands.add_parser("vercel", help="Vercel platform tools.")
    vercel.add_argument(
        "token",
        nargs="?",
        default=None,
        help="API token (default: $VERCEL_TOKEN).",
    )
    vercel.add_argument(
        "--team-id",
        default=None,
        help="Scope every request to this team (default: $VERCEL_TEAM_ID).",
    )

    google = subcommands.add_parser(
        "google", help="Google Workspace tools (Gmail, Drive, Calendar, Sheets, Docs)."
    )
    google.add_argument(
        "token",
        nargs="?",
        default=None,
        metavar="KEYFILE",
        help="Service account key file or JSON (default: $GOOGLE_SERVICE_ACCOUNT_KEY).",
    )
    google.add_argument(
        "user_email",
        nargs="?",
        default=None,
        metavar="USER",
        help="User to impersonate (default: $GOOGLE_USER_EMAIL).",
    )
    return parser


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    return _build_parser().parse_args(list(argv) if argv is not None else None)


def _usage(service: str) -> str:
    if service == "google":
        return "\n".join(
            [
                "Usage: toolbridge google <service-account-key.json> <user-email>",
                "   or: GOOGLE_SERVICE_ACCOUNT_KEY=<path> GOOGLE_USER_EMAIL=<email> toolbridge google",
            ]
        )
    lines = [
        f"Usage: toolbridge {service} <{service.upper()}_TOKEN>",
        f"   or: {credential_env_var(service)}=<token> toolbridge {service}",
    ]
    if service == "vercel":
        lines.append("Optional: --team-id <id> or VERCEL_TEAM_ID=<id>")
    return "\n".join(lines)


def resolve_credential(service: str, token: str | None, settings: Settings) -> SecretStr:
    """A positional token wins over the environment."""
    if token and token.strip():
        return SecretStr(token.strip())
    return require_credential(service, settings)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    load_dotenv_if_present()
    settings = get_settings()
    configure_logging(settings.log_level)

    try:
        credential = resolve_credential(args.service, args.token, settings)
    except MissingCredentialError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        print(_usage(args.service), file=sys.stderr)
        return 1

    try:
        server = build_server(
            args.service,
            settings,
            token=credential,
            team_id=getattr(args, "team_id", None),
            user_email=getattr(args, "user_email", None),
        )
    except (OSError, ValueError) as exc:
        # Unreadable or malformed service-account key.
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    logger.info("starting %s server", service_label(args.service))
    try:
        asyncio.run(serve_stdio(server))
    except KeyboardInterrupt:
        logger.info("%s server interrupted", service_label(args.service))
    return 0


if __name__ == "__main__":
    sys.exit(main())
