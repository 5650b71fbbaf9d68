"""
Tests for EmailService (the HTTP mail gateway)
"""

import json

import httpx
import pytest

from subgate.core.exceptions import DeliveryFailure
from subgate.services.notification_service import EmailService


def make_service(handler, api_url="https://mail.test/v1/send") -> EmailService:
    return EmailService(
        api_url=api_url,
        api_key="secret-key",
        sender="no-reply@subgate.test",
        timeout=5.0,
        transport=httpx.MockTransport(handler)
    )


class TestEmailService:
    """Test cases for EmailService.send"""

    def test_send_posts_message(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(202, json={"id": "msg_1"})

        make_service(handler).send("alice@example.com", "Subscription Approved", "Hello")

        assert len(requests) == 1
        request = requests[0]
        assert str(request.url) == "https://mail.test/v1/send"
        assert request.headers["Authorization"] == "Bearer secret-key"
        assert json.loads(request.content) == {
            "sender": "no-reply@subgate.test",
            "to": "alice@example.com",
            "subject": "Subscription Approved",
            "text": "Hello",
        }

    def test_rejected_message_raises_delivery_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"error": "bad recipient"})

        with pytest.raises(DeliveryFailure) as exc_info:
            make_service(handler).send("bad", "Subject", "Body")

        assert "400" in str(exc_info.value)

    def test_connection_error_raises_delivery_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(DeliveryFailure):
            make_service(handler).send("alice@example.com", "Subject", "Body")

    def test_unconfigured_url_raises_delivery_failure(self, monkeypatch):
        from subgate.core.config import settings
        monkeypatch.setattr(settings, "mail_api_url", None)

        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        service = make_service(handler, api_url=None)

        with pytest.raises(DeliveryFailure):
            service.send("alice@example.com", "Subject", "Body")
