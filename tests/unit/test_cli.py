"""Tests for the relay CLI."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from src.cli import cli


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "GEMINI_API_KEY", "WHATSAPP_VERIFY_TOKEN", "WHATSAPP_ACCESS_TOKEN",
        "WHATSAPP_PHONE_NUMBER_ID", "WHATSAPP_APP_SECRET", "PORT", "HOST",
        "WEBHOOK_PATH", "AUDIT_LOG_PATH", "AUDIT_LOG_MAX_BYTES",
        "AUDIT_LOG_BACKUP_COUNT", "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


def test_serve_refuses_to_start_without_api_key() -> None:
    runner = CliRunner()
    with patch("src.cli.uvicorn.run") as mock_run:
        result = runner.invoke(cli, ["serve"])
    assert result.exit_code == 1
    assert "GEMINI_API_KEY" in result.output
    mock_run.assert_not_called()


def test_serve_runs_uvicorn_on_configured_port() -> None:
    runner = CliRunner()
    with patch("src.cli.uvicorn.run") as mock_run, \
         patch("src.generator.gemini.genai.Client"):
        result = runner.invoke(
            cli, ["serve"], env={"GEMINI_API_KEY": "k", "PORT": "8123"},
        )
    assert result.exit_code == 0, result.output
    mock_run.assert_called_once()
    assert mock_run.call_args.kwargs["port"] == 8123
    assert "/whatsapp" in result.output


def test_serve_port_option_overrides_env() -> None:
    runner = CliRunner()
    with patch("src.cli.uvicorn.run") as mock_run, \
         patch("src.generator.gemini.genai.Client"):
        result = runner.invoke(
            cli, ["serve", "--port", "9000", "--host", "127.0.0.1"],
            env={"GEMINI_API_KEY": "k", "PORT": "8123"},
        )
    assert result.exit_code == 0, result.output
    assert mock_run.call_args.kwargs["port"] == 9000
    assert mock_run.call_args.kwargs["host"] == "127.0.0.1"


def test_check_config_prints_summary_without_secrets() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["check-config"], env={
        "GEMINI_API_KEY": "super-secret-key",
        "WHATSAPP_VERIFY_TOKEN": "verify-secret",
    })
    assert result.exit_code == 0
    summary = json.loads(result.output)
    assert summary["verification_enabled"] is True
    assert summary["sending_enabled"] is False
    assert "super-secret-key" not in result.output
    assert "verify-secret" not in result.output


def test_check_config_fails_without_api_key() -> None:
    result = CliRunner().invoke(cli, ["check-config"])
    assert result.exit_code == 1


@pytest.mark.parametrize("env", [
    {"AUDIT_LOG_MAX_BYTES": "ten"},
    {"AUDIT_LOG_BACKUP_COUNT": "-1"},
    {"LOG_LEVEL": "verbose"},
])
def test_check_config_rejects_invalid_values(env: dict[str, str]) -> None:
    result = CliRunner().invoke(cli, ["check-config"], env={"GEMINI_API_KEY": "k", **env})
    assert result.exit_code == 1
    assert "Configuration error" in result.output


def test_serve_exits_cleanly_on_invalid_log_level() -> None:
    with patch("src.cli.uvicorn.run") as mock_run:
        result = CliRunner().invoke(
            cli, ["serve"], env={"GEMINI_API_KEY": "k", "LOG_LEVEL": "verbose"},
        )
    assert result.exit_code == 1
    assert "LOG_LEVEL" in result.output
    mock_run.assert_not_called()
