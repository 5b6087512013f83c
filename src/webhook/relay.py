"""Webhook relay pipeline.

Takes a parsed inbound event through the remaining stages:

1. Ignore events without a user message
2. Optional read receipt / text-only notice
3. Generate a reply with Gemini
4. Send the reply back over WhatsApp
5. Audit log
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from src.models import AuditEvent, AuditEventType
from src.webhook.models import (
    GenerationResult,
    InboundEvent,
    NoActionableEvent,
    OtherMessage,
    SendResult,
)

if TYPE_CHECKING:
    from src.audit.logger import AuditLogger
    from src.generator.gemini import ResponseGenerator
    from src.webhook.sender import WhatsAppSender

logger = logging.getLogger(__name__)

TEXT_ONLY_REPLY = (
    "For now I can only process text messages. "
    "Could you describe what you need in writing?"
)


class WebhookRelayPipeline:
    """Turns one inbound event into at most one outbound reply."""

    def __init__(
        self,
        generator: ResponseGenerator,
        sender: WhatsAppSender | None = None,
        audit_logger: AuditLogger | None = None,
        mark_read: bool = False,
        text_only_reply: bool = False,
    ) -> None:
        self._generator = generator
        self._sender = sender
        self._audit = audit_logger
        self._mark_read = mark_read
        self._text_only_reply = text_only_reply

    async def relay(self, event: InboundEvent) -> GenerationResult | None:
        """Process ``event``; returns the generation outcome, if any."""
        if isinstance(event, NoActionableEvent):
            logger.info("Ignoring webhook event: %s", event.reason)
            return None

        if isinstance(event, OtherMessage):
            logger.info("Incoming message from %s: %s", event.sender_id, event.description)
            self._log(AuditEventType.MESSAGE_IGNORED, event.sender_id, event.message_id,
                      "receive", "ignored",
                      {"type": event.message_type, "description": event.description})
            if self._text_only_reply:
                await self._send(event.sender_id, event.message_id, TEXT_ONLY_REPLY)
            return None

        logger.info("Incoming message from %s: %r", event.sender_id, event.body)
        self._log(AuditEventType.MESSAGE_RECEIVED, event.sender_id, event.message_id,
                  "receive", "success")

        if not event.body:
            return None

        if self._mark_read and self._sender is not None:
            await self._sender.mark_as_read(event.message_id)

        result = await self._generator.generate(event.body)
        if result.ok:
            logger.info("Generated reply for %s", event.sender_id)
            self._log(AuditEventType.REPLY_GENERATED, event.sender_id, event.message_id,
                      "generate", "success", {"length": len(result.text)})
        else:
            self._log(AuditEventType.REPLY_FALLBACK, event.sender_id, event.message_id,
                      "generate", "failure", {"reason": result.fallback.value})

        await self._send(event.sender_id, event.message_id, result.text)
        return result

    async def _send(self, recipient: str, message_id: str, text: str) -> SendResult | None:
        if self._sender is None:
            logger.info("Sending disabled; reply to %s not delivered: %r", recipient, text)
            return None

        result = await self._sender.send_text(recipient, text)
        if result.ok:
            self._log(AuditEventType.REPLY_SENT, recipient, message_id, "send", "success")
        else:
            self._log(AuditEventType.REPLY_SEND_FAILED, recipient, message_id, "send",
                      "failure", {"status_code": result.status_code, "error": result.error})
        return result

    def _log(
        self,
        event_type: AuditEventType,
        sender_id: str,
        message_id: str,
        action: str,
        result: str,
        details: dict[str, object] | None = None,
    ) -> None:
        if self._audit is None:
            return
        self._audit.log(AuditEvent(
            event_type=event_type,
            sender_id=sender_id,
            message_id=message_id,
            action=action,
            result=result,
            details=details,
        ))
