"""Relay configuration loaded from environment variables."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_API_VERSION = "v18.0"
DEFAULT_WEBHOOK_PATH = "/whatsapp"
DEFAULT_PORT = 3000
DEFAULT_AUDIT_MAX_BYTES = 10_485_760
DEFAULT_AUDIT_BACKUP_COUNT = 5

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


class ConfigError(Exception):
    """Raised when required configuration is missing or malformed."""


class RelaySettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    gemini_api_key: str = Field(min_length=1)
    gemini_model: str = DEFAULT_GEMINI_MODEL
    verify_token: str | None = None
    access_token: str | None = None
    phone_number_id: str | None = None
    api_version: str = DEFAULT_API_VERSION
    app_secret: str | None = None
    mark_read: bool = False
    text_only_reply: bool = False
    webhook_path: str = DEFAULT_WEBHOOK_PATH
    host: str = "0.0.0.0"  # noqa: S104
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    audit_log_path: str | None = None
    audit_log_max_bytes: int = Field(default=DEFAULT_AUDIT_MAX_BYTES, gt=0)
    audit_log_backup_count: int = Field(default=DEFAULT_AUDIT_BACKUP_COUNT, ge=1)
    log_level: str = "INFO"

    @property
    def sending_enabled(self) -> bool:
        return bool(self.access_token and self.phone_number_id)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RelaySettings:
        """Build settings from the process environment (or a given mapping).

        GEMINI_API_KEY is mandatory; every other variable is optional.
        """
        env = os.environ if environ is None else environ

        api_key = env.get("GEMINI_API_KEY", "").strip()
        if not api_key:
            raise ConfigError("GEMINI_API_KEY is not set")

        path = env.get("WEBHOOK_PATH", DEFAULT_WEBHOOK_PATH).strip() or DEFAULT_WEBHOOK_PATH
        if not path.startswith("/"):
            path = f"/{path}"

        log_level = (env.get("LOG_LEVEL") or "INFO").strip().upper()
        if log_level not in logging.getLevelNamesMapping():
            raise ConfigError(f"LOG_LEVEL must be a logging level name, got {log_level!r}")

        try:
            return cls(
                gemini_api_key=api_key,
                gemini_model=env.get("GEMINI_MODEL") or DEFAULT_GEMINI_MODEL,
                verify_token=env.get("WHATSAPP_VERIFY_TOKEN") or None,
                access_token=env.get("WHATSAPP_ACCESS_TOKEN") or None,
                phone_number_id=env.get("WHATSAPP_PHONE_NUMBER_ID") or None,
                api_version=env.get("WHATSAPP_API_VERSION") or DEFAULT_API_VERSION,
                app_secret=env.get("WHATSAPP_APP_SECRET") or None,
                mark_read=_parse_bool(env, "WHATSAPP_MARK_READ"),
                text_only_reply=_parse_bool(env, "WHATSAPP_TEXT_ONLY_REPLY"),
                webhook_path=path,
                host=env.get("HOST") or "0.0.0.0",  # noqa: S104
                port=_parse_int(env, "PORT", DEFAULT_PORT),
                audit_log_path=env.get("AUDIT_LOG_PATH") or None,
                audit_log_max_bytes=_parse_int(
                    env, "AUDIT_LOG_MAX_BYTES", DEFAULT_AUDIT_MAX_BYTES,
                ),
                audit_log_backup_count=_parse_int(
                    env, "AUDIT_LOG_BACKUP_COUNT", DEFAULT_AUDIT_BACKUP_COUNT,
                ),
                log_level=log_level,
            )
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc


def _parse_bool(env: Mapping[str, str], name: str) -> bool:
    raw = env.get(name, "").strip().lower()
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


def _parse_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc
