import logging

import pytest

from toolbridge import cli
from toolbridge.container import build_container, startup
from toolbridge.run_logging import ToolFilter
from toolbridge.settings import Settings, get_settings
from toolbridge.startup_checks import MissingCredentialError, require_credential, run_startup_checks


@pytest.fixture(autouse=True)
def _no_dotenv(monkeypatch):
    monkeypatch.setattr(cli, "load_dotenv_if_present", lambda: None)


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "gh-token")
    monkeypatch.setenv("VERCEL_TEAM_ID", "team_1")
    monkeypatch.setenv("TOOLBRIDGE_RATE_LIMIT_MAX_TOKENS", "not-a-number")
    monkeypatch.setenv("TOOLBRIDGE_MAX_RESPONSE_BYTES", "2048")
    settings = Settings.from_env()
    assert settings.github.token.get_secret_value() == "gh-token"
    assert settings.github.api_url == "https://api.github.com"
    assert settings.vercel.configured is False
    assert settings.vercel.team_id == "team_1"
    assert settings.http.rate_limit_max_tokens == 100
    assert settings.http.max_response_bytes == 2048
    assert "gh-token" not in repr(settings.github)


def test_personal_access_token_wins_over_github_token(monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "fallback")
    monkeypatch.setenv("GITHUB_PERSONAL_ACCESS_TOKEN", "primary")
    assert get_settings().github.token.get_secret_value() == "primary"


def test_require_credential_fails_fast():
    with pytest.raises(MissingCredentialError) as excinfo:
        require_credential("vercel", Settings.from_env())
    assert str(excinfo.value) == "Vercel token required!"


def test_startup_checks_need_at_least_one_backend(monkeypatch):
    with pytest.raises(RuntimeError):
        run_startup_checks(Settings.from_env())
    monkeypatch.setenv("VERCEL_TOKEN", "vc")
    assert run_startup_checks(Settings.from_env()) == ["vercel"]


def test_container_startup_registers_only_configured_backends(monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "gh")
    container = build_container(settings=Settings.from_env())
    assert startup(container) == ["github"]
    assert startup(container) == ["github"]
    names = [tool.name for tool in container.mcp_client.list_tools()]
    assert names and all(name.startswith("github_") for name in names)


def test_cli_exits_with_diagnostic_when_token_missing(capsys):
    assert cli.main(["github"]) == 1
    err = capsys.readouterr().err
    assert "Error: GitHub token required!" in err
    assert "Usage: toolbridge github" in err


def test_cli_positional_token_overrides_environment(monkeypatch):
    served = []

    async def fake_serve(server):
        served.append(server)
        await server.aclose()

    monkeypatch.setenv("VERCEL_TOKEN", "from-env")
    monkeypatch.setattr(cli, "serve_stdio", fake_serve)
    assert cli.main(["vercel", "from-argv", "--team-id", "team_9"]) == 0
    server = served[0]
    assert server.server_id == "vercel"
    assert server.client.profile.default_params == {"teamId": "team_9"}
    assert server.client._credential.get_secret_value() == "from-argv"


def test_resolve_credential_prefers_argument():
    settings = Settings.from_env()
    assert cli.resolve_credential("github", " tok ", settings).get_secret_value() == "tok"
    with pytest.raises(MissingCredentialError):
        cli.resolve_credential("github", "", settings)


def test_tool_filter_defaults_missing_tool_attribute():
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
    assert ToolFilter().filter(record) is True
    assert record.tool == "-"
