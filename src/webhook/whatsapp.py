"""WhatsApp Cloud API webhook protocol.

Meta verification challenge, optional HMAC signature check, and
extraction of the first message from a webhook payload.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from collections.abc import Mapping
from typing import Any

from src.webhook.models import (
    InboundEvent,
    NoActionableEvent,
    OtherMessage,
    TextMessage,
    VerificationResult,
)

logger = logging.getLogger(__name__)


def _get(obj: Any, key: str) -> Any:
    return obj.get(key) if isinstance(obj, dict) else None


def _first(obj: Any) -> Any:
    return obj[0] if isinstance(obj, list) and obj else None


def parse_event(payload: Any) -> InboundEvent:
    """Find the first message under entry[0].changes[0].value.messages.

    Never raises: any missing or oddly shaped segment yields a
    NoActionableEvent.
    """
    change = _first(_get(_first(_get(payload, "entry")), "changes"))
    if change is None:
        return NoActionableEvent("no change entry")

    field = _get(change, "field")
    if field is not None and field != "messages":
        return NoActionableEvent(f"unhandled field: {field}")

    value = _get(change, "value")
    message = _first(_get(value, "messages"))
    if not isinstance(message, dict):
        if _get(value, "statuses"):
            return NoActionableEvent("status update")
        return NoActionableEvent("no message in change")

    sender_id = str(message.get("from", ""))
    message_id = str(message.get("id", ""))
    message_type = message.get("type")

    if message_type == "text":
        body = _get(_get(message, "text"), "body")
        if not isinstance(body, str):
            return NoActionableEvent("text message without body")
        return TextMessage(sender_id=sender_id, message_id=message_id, body=body)

    return OtherMessage(
        sender_id=sender_id,
        message_id=message_id,
        message_type=str(message_type or "unknown"),
    )


class WhatsAppWebhook:
    """Verification and authentication for the WhatsApp webhook endpoint."""

    def __init__(
        self,
        verify_token: str | None,
        app_secret: str | None = None,
    ) -> None:
        self._verify_token = verify_token
        self._app_secret = app_secret

    @property
    def signature_required(self) -> bool:
        return self._app_secret is not None

    def verify_signature(self, headers: Mapping[str, str], body: bytes) -> bool:
        """Check X-Hub-Signature-256; always true when no app secret is set."""
        if self._app_secret is None:
            return True

        signature = headers.get("x-hub-signature-256", "")
        if not signature.startswith("sha256="):
            return False

        expected = hmac.new(
            self._app_secret.encode(), body, hashlib.sha256,
        ).hexdigest()
        return hmac.compare_digest(signature[7:], expected)

    def handle_verification(self, params: Mapping[str, str]) -> VerificationResult:
        """Meta subscription handshake: echo the challenge or refuse with 403."""
        mode = params.get("hub.mode")
        token = params.get("hub.verify_token", "")
        challenge = params.get("hub.challenge", "")

        logger.info("Webhook verification request (mode=%s)", mode)

        if (
            mode == "subscribe"
            and self._verify_token is not None
            and hmac.compare_digest(token.encode(), self._verify_token.encode())
        ):
            logger.info("Webhook verified")
            return VerificationResult(status_code=200, content=challenge)

        logger.warning("Webhook verification failed")
        return VerificationResult(status_code=403)
