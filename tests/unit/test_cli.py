"""
Tests for the StateBridge command-line interface.
"""

import json

import httpx
import pytest
from click.testing import CliRunner

from statebridge import cli as cli_module
from statebridge.cli import _cli_overrides, cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("STATEBRIDGE_HOST", "STATEBRIDGE_PORT", "STATEBRIDGE_LOG_LEVEL",
                 "STATEBRIDGE_STATE_ENDPOINT", "DAPR_HTTP_PORT"):
        monkeypatch.delenv(name, raising=False)


def _response(method, url, status_code, **kwargs):
    return httpx.Response(status_code, request=httpx.Request(method, url), **kwargs)


class TestInfoCommands:
    """Test version and config commands."""

    def test_version_command(self, runner):
        result = runner.invoke(cli, ["version"])

        assert result.exit_code == 0
        assert "StateBridge version 0.1.0" in result.output

    def test_version_option(self, runner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_config_command(self, runner, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("state:\n  endpoint: http://sidecar:3500/v1.0\n")

        result = runner.invoke(cli, ["config", "--config", str(config_file)])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["state"]["endpoint"] == "http://sidecar:3500/v1.0"
        assert data["server"]["port"] == 8000

    def test_config_command_invalid(self, runner, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("state:\n  endpoint: sidecar:3500\n")

        result = runner.invoke(cli, ["config", "--config", str(config_file)])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output


class TestStartCommand:
    """Test the start command without running a server."""

    def test_start_passes_overrides(self, runner, monkeypatch):
        calls = {}

        def fake_run(app, **kwargs):
            calls["app"] = app
            calls.update(kwargs)

        monkeypatch.setattr(cli_module, "create_app", lambda config: config)
        monkeypatch.setattr(cli_module.uvicorn, "run", fake_run)

        result = runner.invoke(cli, ["start", "--port", "9001", "--log-level", "debug"])

        assert result.exit_code == 0
        assert calls["port"] == 9001
        assert calls["log_level"] == "debug"
        assert calls["app"].server.port == 9001
        assert "State endpoint: http://localhost:3500/v1.0" in result.output

    def test_cli_overrides_helper(self):
        assert _cli_overrides(None, None, None) == {}
        assert _cli_overrides("127.0.0.1", 8080, "info") == {
            "server": {"host": "127.0.0.1", "port": 8080},
            "logging": {"level": "INFO"},
        }


class TestAccountCommands:
    """Test account commands against a stubbed server."""

    def test_create(self, runner, monkeypatch):
        sent = {}

        def fake_post(url, json, timeout):
            sent["url"] = url
            sent["json"] = json
            return _response("POST", url, 201, json=json)

        monkeypatch.setattr(cli_module.httpx, "post", fake_post)

        result = runner.invoke(cli, ["account", "create", "42", "--name", "Ada"])

        assert result.exit_code == 0
        assert "[OK] Account 42 saved" in result.output
        assert sent["url"] == "http://127.0.0.1:8000/account"
        assert sent["json"] == {"accountId": 42, "name": "Ada", "email": None}

    def test_get(self, runner, monkeypatch):
        monkeypatch.setattr(
            cli_module.httpx, "get",
            lambda url, timeout: _response("GET", url, 200, json={"accountId": 42, "name": "Ada"})
        )

        result = runner.invoke(cli, ["account", "get", "42"])

        assert result.exit_code == 0
        assert json.loads(result.output) == {"accountId": 42, "name": "Ada"}

    def test_get_missing(self, runner, monkeypatch):
        monkeypatch.setattr(
            cli_module.httpx, "get",
            lambda url, timeout: _response("GET", url, 204)
        )

        result = runner.invoke(cli, ["account", "get", "7"])

        assert result.exit_code == 0
        assert "Account 7 not found" in result.output

    def test_delete(self, runner, monkeypatch):
        urls = []

        def fake_delete(url, timeout):
            urls.append(url)
            return _response("DELETE", url, 200)

        monkeypatch.setattr(cli_module.httpx, "delete", fake_delete)

        result = runner.invoke(cli, ["account", "delete", "42", "--url", "http://api:9000/"])

        assert result.exit_code == 0
        assert "[OK] Account 42 deleted" in result.output
        assert urls == ["http://api:9000/account/42"]

    def test_server_error(self, runner, monkeypatch):
        monkeypatch.setattr(
            cli_module.httpx, "get",
            lambda url, timeout: _response("GET", url, 500, json={"error": {"code": "StoreUnavailable"}})
        )

        result = runner.invoke(cli, ["account", "get", "42"])

        assert result.exit_code == 1
        assert "[ERROR] Failed to get account" in result.output

    def test_connection_error(self, runner, monkeypatch):
        def refuse(url, json, timeout):
            raise httpx.ConnectError("connection refused")

        monkeypatch.setattr(cli_module.httpx, "post", refuse)

        result = runner.invoke(cli, ["account", "create", "1"])

        assert result.exit_code == 1
        assert "[ERROR] Failed to save account" in result.output
