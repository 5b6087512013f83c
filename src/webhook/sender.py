"""Outbound WhatsApp Cloud API client.

One POST per call, no retries. Failures are logged and reported through
``SendResult``; they never raise, since the inbound webhook has already
been (or is about to be) acknowledged.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from src.webhook.models import SendResult

logger = logging.getLogger(__name__)

_WHATSAPP_API_BASE = "https://graph.facebook.com"


class WhatsAppSender:
    """Sends text replies and read receipts via the WhatsApp send API."""

    def __init__(
        self,
        phone_number_id: str,
        access_token: str,
        api_version: str = "v18.0",
    ) -> None:
        self._access_token = access_token
        self._url = f"{_WHATSAPP_API_BASE}/{api_version}/{phone_number_id}/messages"

    async def send_text(self, recipient: str, text: str) -> SendResult:
        payload = {
            "messaging_product": "whatsapp",
            "to": recipient,
            "type": "text",
            "text": {"body": text},
        }
        result = await self._post(payload)
        if result.ok:
            logger.info("Reply sent to %s", recipient)
        else:
            logger.error("Failed to send reply to %s: %s", recipient, result.error)
        return result

    async def mark_as_read(self, message_id: str) -> SendResult:
        payload = {
            "messaging_product": "whatsapp",
            "status": "read",
            "message_id": message_id,
        }
        result = await self._post(payload)
        if not result.ok:
            logger.warning("Failed to mark message %s as read: %s", message_id, result.error)
        return result

    async def _post(self, payload: dict[str, Any]) -> SendResult:
        headers = {
            "Authorization": f"Bearer {self._access_token}",
            "Content-Type": "application/json",
        }
        try:
            async with httpx.AsyncClient(verify=True) as client:
                resp = await client.post(self._url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            return SendResult(ok=False, error=f"{type(exc).__name__}: {exc}")

        if resp.status_code >= 400:
            return SendResult(
                ok=False, status_code=resp.status_code, error=resp.text,
            )
        return SendResult(ok=True, status_code=resp.status_code)
