"""Shared test fixtures for the WhatsApp relay."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.audit.logger import AuditLogger
from src.config import RelaySettings
from src.webhook.models import FallbackReason, GenerationResult, SendResult


@pytest.fixture
def mock_audit_logger() -> MagicMock:
    return MagicMock(spec=AuditLogger)


@pytest.fixture
def mock_generator() -> MagicMock:
    generator = MagicMock()
    generator.generate = AsyncMock(return_value=GenerationResult(text="generated reply"))
    return generator


@pytest.fixture
def failing_generator() -> MagicMock:
    from src.generator.gemini import SERVICE_ERROR_TEXT

    generator = MagicMock()
    generator.generate = AsyncMock(return_value=GenerationResult(
        text=SERVICE_ERROR_TEXT, fallback=FallbackReason.SERVICE_ERROR,
    ))
    return generator


@pytest.fixture
def mock_sender() -> MagicMock:
    sender = MagicMock()
    sender.send_text = AsyncMock(return_value=SendResult(ok=True, status_code=200))
    sender.mark_as_read = AsyncMock(return_value=SendResult(ok=True, status_code=200))
    return sender


# --- Factory functions for test data ---


def make_settings(**kwargs: Any) -> RelaySettings:
    """Factory for RelaySettings with sensible defaults."""
    defaults: dict[str, Any] = {
        "gemini_api_key": "test-gemini-key",
        "verify_token": "test_verify",
    }
    defaults.update(kwargs)
    return RelaySettings(**defaults)


def make_text_payload(
    text: str = "Hello",
    phone: str = "+15551234567",
    message_id: str = "wamid.TEST1",
) -> dict[str, Any]:
    return make_message_payload({
        "from": phone,
        "id": message_id,
        "timestamp": "1700000000",
        "type": "text",
        "text": {"body": text},
    })


def make_message_payload(message: dict[str, Any]) -> dict[str, Any]:
    return make_change_payload({
        "messaging_product": "whatsapp",
        "metadata": {"phone_number_id": "PHONE_ID"},
        "messages": [message],
    })


def make_change_payload(
    value: dict[str, Any], field: str = "messages",
) -> dict[str, Any]:
    return {
        "object": "whatsapp_business_account",
        "entry": [
            {
                "id": "BUSINESS_ID",
                "changes": [{"value": value, "field": field}],
            }
        ],
    }


def make_status_payload() -> dict[str, Any]:
    return make_change_payload({
        "messaging_product": "whatsapp",
        "metadata": {"phone_number_id": "PHONE_ID"},
        "statuses": [{"id": "wamid.TEST1", "status": "delivered"}],
    })
