"""Process settings for the tool servers and the HTTP binding."""

from __future__ import annotations

import os
from dataclasses import dataclass

from pydantic import SecretStr


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    return normalized in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_str(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip()
    return normalized or default


def _env_secret(*names: str) -> SecretStr | None:
    for name in names:
        value = _env_str(name)
        if value:
            return SecretStr(value)
    return None


@dataclass(frozen=True)
class GitHubSettings:
    """Credential and endpoint for the GitHub server."""

    token: SecretStr | None
    api_url: str

    @property
    def configured(self) -> bool:
        return self.token is not None

    @property
    def credential(self) -> SecretStr | None:
        return self.token

    @classmethod
    def from_env(cls) -> "GitHubSettings":
        return cls(
            token=_env_secret("GITHUB_PERSONAL_ACCESS_TOKEN", "GITHUB_TOKEN"),
            api_url=_env_str("GITHUB_API_URL", "https://api.github.com") or "https://api.github.com",
        )


@dataclass(frozen=True)
class VercelSettings:
    """Credential, team scope and endpoint for the Vercel server."""

    token: SecretStr | None
    team_id: str | None
    api_url: str

    @property
    def configured(self) -> bool:
        return self.token is not None

    @property
    def credential(self) -> SecretStr | None:
        return self.token

    @classmethod
    def from_env(cls) -> "VercelSettings":
        return cls(
            token=_env_secret("VERCEL_TOKEN"),
            team_id=_env_str("VERCEL_TEAM_ID"),
            api_url=_env_str("VERCEL_API_URL", "https://api.vercel.com") or "https://api.vercel.com",
        )


@dataclass(frozen=True)
class GoogleSettings:
    """Service-account key (file path or inline JSON) and the user it acts as."""

    service_account_key: SecretStr | None
    user_email: str | None

    @property
    def configured(self) -> bool:
        return self.service_account_key is not None

    @property
    def credential(self) -> SecretStr | None:
        return self.service_account_key

    @classmethod
    def from_env(cls) -> "GoogleSettings":
        return cls(
            service_account_key=_env_secret("GOOGLE_SERVICE_ACCOUNT_KEY"),
            user_email=_env_str("GOOGLE_USER_EMAIL"),
        )


@dataclass(frozen=True)
class HttpSettings:
    """Outbound client and inbound HTTP binding controls."""

    timeout_seconds: float
    api_key: SecretStr | None
    rate_limit_max_tokens: int
    rate_limit_refill_per_second: float
    max_response_bytes: int
    cors_enabled: bool

    @classmethod
    def from_env(cls) -> "HttpSettings":
        return cls(
            timeout_seconds=max(1.0, _env_float("TOOLBRIDGE_HTTP_TIMEOUT_SECONDS", 30.0)),
            api_key=_env_secret("TOOLBRIDGE_API_KEY"),
            rate_limit_max_tokens=max(1, _env_int("TOOLBRIDGE_RATE_LIMIT_MAX_TOKENS", 100)),
            rate_limit_refill_per_second=max(
                0.0, _env_float("TOOLBRIDGE_RATE_LIMIT_REFILL_PER_SECOND", 10.0)
            ),
            max_response_bytes=max(1024, _env_int("TOOLBRIDGE_MAX_RESPONSE_BYTES", 100 * 1024)),
            cors_enabled=_env_bool("TOOLBRIDGE_CORS_ENABLED", True),
        )


class Settings:
    """Container for application settings."""

    def __init__(
        self,
        *,
        github: GitHubSettings,
        vercel: VercelSettings,
        google: GoogleSettings,
        http: HttpSettings,
        log_level: str = "INFO",
    ) -> None:
        self.github = github
        self.vercel = vercel
        self.google = google
        self.http = http
        self.log_level = log_level

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            github=GitHubSettings.from_env(),
            vercel=VercelSettings.from_env(),
            google=GoogleSettings.from_env(),
            http=HttpSettings.from_env(),
            log_level=(_env_str("TOOLBRIDGE_LOG_LEVEL", "INFO") or "INFO").upper(),
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    """Return a cached Settings instance built from the current environment."""

    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS


def reset_settings() -> None:
    """Drop the cached instance so the next call re-reads the environment."""

    global _SETTINGS
    _SETTINGS = None
