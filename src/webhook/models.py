"""Data models for the webhook relay pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class TextMessage:
    """A user-authored text message."""

    sender_id: str
    message_id: str
    body: str


@dataclass(frozen=True)
class OtherMessage:
    """A message whose type the relay does not process (image, audio, ...)."""

    sender_id: str
    message_id: str
    message_type: str

    @property
    def description(self) -> str:
        return f"User sent a message of type: {self.message_type}."


@dataclass(frozen=True)
class NoActionableEvent:
    """Status updates, other change fields, or payloads without a message."""

    reason: str


InboundEvent = TextMessage | OtherMessage | NoActionableEvent


@dataclass(frozen=True)
class VerificationResult:
    status_code: int
    content: str = ""


class FallbackReason(str, Enum):
    EMPTY_RESPONSE = "empty_response"
    SERVICE_ERROR = "service_error"


@dataclass(frozen=True)
class GenerationResult:
    """Outcome of one generation call; ``fallback`` is None on success."""

    text: str
    fallback: FallbackReason | None = None

    @property
    def ok(self) -> bool:
        return self.fallback is None


@dataclass(frozen=True)
class SendResult:
    ok: bool
    status_code: int | None = None
    error: str | None = None
