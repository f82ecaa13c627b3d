"""Startup validation: a server without its credential can do no useful work."""

from __future__ import annotations

import logging
import sys

from pydantic import SecretStr

from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

SERVICES = ("github", "vercel", "google")

_SERVICE_LABELS = {"github": "GitHub", "vercel": "Vercel", "google": "Google Workspace"}
_CREDENTIAL_ENV = {
    "github": "GITHUB_PERSONAL_ACCESS_TOKEN",
    "vercel": "VERCEL_TOKEN",
    "google": "GOOGLE_SERVICE_ACCOUNT_KEY",
}
_CREDENTIAL_NOUNS = {"google": "service account key"}


class MissingCredentialError(RuntimeError):
    """Raised when a service is started without its credential."""

    def __init__(self, service: str):
        self.service = service
        label = _SERVICE_LABELS.get(service, service)
        noun = _CREDENTIAL_NOUNS.get(service, "token")
        super().__init__(f"{label} {noun} required!")


def service_label(service: str) -> str:
    return _SERVICE_LABELS.get(service, service)


def credential_env_var(service: str) -> str:
    return _CREDENTIAL_ENV[service]


def require_credential(service: str, settings: Settings | None = None) -> SecretStr:
    """Return the configured credential, failing fast when there is none."""
    if service not in SERVICES:
        raise RuntimeError(f"Unknown service {service!r}; expected one of {', '.join(SERVICES)}")
    settings = settings or get_settings()
    credential = getattr(settings, service).credential
    if credential is None:
        raise MissingCredentialError(service)
    return credential


def run_startup_checks(settings: Settings | None = None) -> list[str]:
    """Return the services that can be started; raise when none can."""
    settings = settings or get_settings()
    enabled = [service for service in SERVICES if getattr(settings, service).configured]
    if not enabled:
        raise RuntimeError(
            "No backend credentials configured; set "
            + " or ".join(_CREDENTIAL_ENV[service] for service in SERVICES)
        )
    logger.info("Startup checks passed. enabled_services=%s", ",".join(enabled))
    return enabled


def main() -> int:
    logging.basicConfig(level=logging.INFO, stream=sys.stderr)
    try:
        run_startup_checks()
    except RuntimeError as exc:
        logger.error("Startup check failed: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
