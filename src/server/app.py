"""FastAPI application exposing the WhatsApp webhook."""

from __future__ import annotations

import json
import logging

from fastapi import FastAPI, Request, Response
from fastapi.responses import PlainTextResponse

from src.audit.logger import AuditLogger
from src.config import RelaySettings
from src.generator.gemini import ResponseGenerator
from src.models import AuditEvent, AuditEventType
from src.webhook.relay import WebhookRelayPipeline
from src.webhook.sender import WhatsAppSender
from src.webhook.whatsapp import WhatsAppWebhook, parse_event

logger = logging.getLogger(__name__)


def create_app_from_env() -> FastAPI:
    """Factory for uvicorn --factory: reads config from environment variables.

    Raises ConfigError when GEMINI_API_KEY is missing.
    """
    return create_app(RelaySettings.from_env())


def create_app(
    settings: RelaySettings,
    generator: ResponseGenerator | None = None,
    sender: WhatsAppSender | None = None,
    audit_logger: AuditLogger | None = None,
) -> FastAPI:
    """Create the relay app; collaborators default to ones built from settings."""
    if generator is None:
        generator = ResponseGenerator.from_api_key(
            settings.gemini_api_key, settings.gemini_model,
        )
    if sender is None and settings.access_token and settings.phone_number_id:
        sender = WhatsAppSender(
            phone_number_id=settings.phone_number_id,
            access_token=settings.access_token,
            api_version=settings.api_version,
        )
    if audit_logger is None and settings.audit_log_path:
        audit_logger = AuditLogger(
            settings.audit_log_path,
            max_bytes=settings.audit_log_max_bytes,
            backup_count=settings.audit_log_backup_count,
        )

    if settings.verify_token is None:
        logger.warning("WHATSAPP_VERIFY_TOKEN is not set; verification requests will be refused")
    if sender is None:
        logger.warning("WhatsApp sending is not configured; replies will only be logged")

    webhook = WhatsAppWebhook(settings.verify_token, settings.app_secret)
    pipeline = WebhookRelayPipeline(
        generator,
        sender,
        audit_logger,
        mark_read=settings.mark_read,
        text_only_reply=settings.text_only_reply,
    )

    app = FastAPI(docs_url=None, redoc_url=None)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get(settings.webhook_path)
    async def verify(request: Request) -> Response:
        result = webhook.handle_verification(dict(request.query_params))
        if audit_logger:
            verified = result.status_code == 200
            try:
                audit_logger.log(AuditEvent(
                    event_type=(
                        AuditEventType.WEBHOOK_VERIFIED if verified
                        else AuditEventType.WEBHOOK_VERIFY_FAILED
                    ),
                    action="verify",
                    result="success" if verified else "failure",
                    details={"mode": request.query_params.get("hub.mode")},
                ))
            except OSError:
                logger.exception("Failed to write verification audit event")
        if result.status_code == 200:
            return PlainTextResponse(result.content)
        return Response(status_code=result.status_code)

    @app.post(settings.webhook_path)
    async def receive(request: Request) -> Response:
        # The platform retries anything other than 200, so every path acknowledges.
        try:
            body = await request.body()
            if not webhook.verify_signature(request.headers, body):
                logger.warning("Dropping webhook with invalid signature")
                if audit_logger:
                    audit_logger.log(AuditEvent(
                        event_type=AuditEventType.SIGNATURE_INVALID,
                        action="receive",
                        result="failure",
                    ))
                return Response(status_code=200)

            try:
                payload = json.loads(body)
            except (json.JSONDecodeError, UnicodeDecodeError):
                logger.warning("Webhook body is not valid JSON")
                return Response(status_code=200)

            logger.debug("Webhook received: %s", json.dumps(payload, indent=2))
            await pipeline.relay(parse_event(payload))
        except Exception:
            logger.exception("Error processing WhatsApp webhook")
        return Response(status_code=200)

    return app
