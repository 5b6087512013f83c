"""Shared Pydantic data models for the WhatsApp relay."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field

# --- Enums ---


class AuditEventType(str, Enum):
    WEBHOOK_VERIFIED = "webhook_verified"
    WEBHOOK_VERIFY_FAILED = "webhook_verify_failed"
    SIGNATURE_INVALID = "signature_invalid"
    MESSAGE_RECEIVED = "message_received"
    MESSAGE_IGNORED = "message_ignored"
    REPLY_GENERATED = "reply_generated"
    REPLY_FALLBACK = "reply_fallback"
    REPLY_SENT = "reply_sent"
    REPLY_SEND_FAILED = "reply_send_failed"


# --- Audit Models ---


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class AuditEvent(BaseModel):
    timestamp: str = Field(default_factory=_now_iso)
    event_type: AuditEventType
    sender_id: str | None = None
    message_id: str | None = None
    action: str
    result: str  # "success" | "failure" | "ignored"
    details: dict[str, object] | None = None
