# app/infrastructure/external/email_client.py
"""
Resend e-mail API client.

POST {RESEND_BASE_URL}/emails with a bearer API key.
Docs: https://resend.com/docs/api-reference/emails/send-email
"""

from __future__ import annotations

import logging
from typing import Any, Dict

import httpx

from app.core.config import settings

logger = logging.getLogger("email_client")

_TIMEOUT = 20


class EmailDeliveryError(Exception):
    """Raised when the e-mail API rejects or fails a send."""

    def __init__(self, message: str, status_code: int = 0, response: dict | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response or {}


class EmailClient:
    """Client for the Resend transactional e-mail API."""

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.base = settings.RESEND_BASE_URL.rstrip("/")
        self.api_key = settings.RESEND_API_KEY
        self.from_email = settings.NOTIFICATION_FROM_EMAIL
        self._transport = transport

    @classmethod
    def is_configured(cls) -> bool:
        return bool(settings.RESEND_API_KEY and settings.RESEND_BASE_URL)

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def _request(self, method: str, path: str, json_body: dict | None = None) -> Dict[str, Any]:
        url = f"{self.base}{path}"
        logger.info("Email API %s %s", method, path)

        async with httpx.AsyncClient(timeout=_TIMEOUT, transport=self._transport) as client:
            try:
                r = await client.request(method, url, headers=self._headers(), json=json_body)
                r.raise_for_status()
                return r.json()
            except httpx.HTTPStatusError as exc:
                body: dict = {}
                try:
                    body = exc.response.json()
                except ValueError:
                    pass
                logger.error(
                    "Email API HTTP error: %s %s -> %d",
                    method, path, exc.response.status_code,
                )
                raise EmailDeliveryError(
                    body.get("message") or f"Email API error: {exc.response.status_code}",
                    status_code=exc.response.status_code,
                    response=body,
                ) from exc
            except httpx.TimeoutException as exc:
                raise EmailDeliveryError("Email API timeout") from exc
            except httpx.HTTPError as exc:
                raise EmailDeliveryError(f"Email API transport error: {exc}") from exc

    async def send_email(self, to: str, subject: str, html: str, text: str | None = None) -> str:
        """Send one message; returns the provider's message id."""
        payload: Dict[str, Any] = {
            "from": self.from_email,
            "to": [to],
            "subject": subject,
            "html": html,
        }
        if text:
            payload["text"] = text
        data = await self._request("POST", "/emails", json_body=payload)
        return data.get("id", "")
