# tests/test_email_client.py
"""Tests for the Resend e-mail client, against httpx.MockTransport."""

import json
from unittest.mock import patch

import httpx
import pytest

from app.core.config import settings
from app.infrastructure.external.email_client import EmailClient, EmailDeliveryError


@pytest.fixture(autouse=True)
def api_key():
    with patch.object(settings, "RESEND_API_KEY", "re_test_key"):
        yield


def test_is_configured():
    assert EmailClient.is_configured() is True
    with patch.object(settings, "RESEND_API_KEY", ""):
        assert EmailClient.is_configured() is False


def test_send_email(event_loop):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "email-123"})

    client = EmailClient(transport=httpx.MockTransport(handler))
    message_id = event_loop.run_until_complete(
        client.send_email("ravi@example.com", "Hello", "<p>Hi</p>", "Hi")
    )

    assert message_id == "email-123"
    assert seen["url"] == "https://api.resend.com/emails"
    assert seen["auth"] == "Bearer re_test_key"
    assert seen["body"]["to"] == ["ravi@example.com"]
    assert seen["body"]["text"] == "Hi"


def test_api_error_carries_status(event_loop):
    transport = httpx.MockTransport(
        lambda request: httpx.Response(422, json={"message": "Invalid `to` field"})
    )
    client = EmailClient(transport=transport)
    with pytest.raises(EmailDeliveryError) as exc_info:
        event_loop.run_until_complete(client.send_email("bad", "Hello", "<p>Hi</p>"))
    assert exc_info.value.status_code == 422
    assert str(exc_info.value) == "Invalid `to` field"


def test_transport_error(event_loop):
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    client = EmailClient(transport=httpx.MockTransport(handler))
    with pytest.raises(EmailDeliveryError):
        event_loop.run_until_complete(client.send_email("ravi@example.com", "Hello", "<p>Hi</p>"))
