"""Click CLI for running the WhatsApp relay."""

from __future__ import annotations

import json
import logging
import sys

import click
import uvicorn

from src.config import ConfigError, RelaySettings


def _load_settings() -> RelaySettings:
    try:
        return RelaySettings.from_env()
    except ConfigError as exc:
        click.echo(f"Configuration error: {exc}", err=True)
        sys.exit(1)


@click.group()
def cli() -> None:
    """WhatsApp to Gemini webhook relay."""


@cli.command()
@click.option("--host", default=None, help="Bind address (default: $HOST or 0.0.0.0).")
@click.option("--port", type=int, default=None, help="Listen port (default: $PORT or 3000).")
def serve(host: str | None, port: int | None) -> None:
    """Start the webhook server."""
    settings = _load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from src.server.app import create_app

    app = create_app(settings)
    bind_host = host or settings.host
    bind_port = port or settings.port
    click.echo(f"Listening on http://{bind_host}:{bind_port}")
    click.echo(f"WhatsApp webhook at {settings.webhook_path}")
    uvicorn.run(app, host=bind_host, port=bind_port, log_level=settings.log_level.lower())


@cli.command("check-config")
def check_config() -> None:
    """Validate the environment and print a summary without secrets."""
    settings = _load_settings()
    summary = {
        "gemini_model": settings.gemini_model,
        "webhook_path": settings.webhook_path,
        "port": settings.port,
        "verification_enabled": settings.verify_token is not None,
        "sending_enabled": settings.sending_enabled,
        "signature_check_enabled": settings.app_secret is not None,
        "mark_read": settings.mark_read,
        "text_only_reply": settings.text_only_reply,
        "audit_log_path": settings.audit_log_path,
    }
    click.echo(json.dumps(summary, indent=2))
