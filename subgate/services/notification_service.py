import logging
from typing import Optional, Protocol

import httpx
from pydantic import BaseModel

from subgate.core.config import settings
from subgate.core.exceptions import DeliveryFailure

logger = logging.getLogger(__name__)


class EmailMessage(BaseModel):
    """Payload posted to the transactional mail API"""
    sender: str
    to: str
    subject: str
    text: str


class NotificationGateway(Protocol):
    def send(self, email: str, subject: str, body: str) -> None:
        """Deliver one message or raise DeliveryFailure"""
        ...


class EmailService:
    """Sends plain-text email through an HTTP mail API (Mailgun/Postmark style)"""

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_key: Optional[str] = None,
        sender: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None
    ):
        self.api_url = api_url or settings.mail_api_url
        self.api_key = api_key or settings.mail_api_key
        self.sender = sender or settings.mail_from
        self.timeout = timeout or settings.mail_timeout_seconds
        self.transport = transport
        self.logger = logging.getLogger(__name__)

    def send(self, email: str, subject: str, body: str) -> None:
        self.logger.info(f"send: Entry - to: {email}, subject: {subject}")

        if not self.api_url:
            self.logger.error("send: Failure - mail API URL is not configured")
            raise DeliveryFailure("Mail API URL is not configured")

        message = EmailMessage(sender=self.sender, to=email, subject=subject, text=body)
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        try:
            with httpx.Client(transport=self.transport, timeout=self.timeout) as client:
                response = client.post(
                    self.api_url,
                    headers=headers,
                    json=message.model_dump()
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            self.logger.error(f"send: Failure - to: {email}, status: {e.response.status_code}")
            raise DeliveryFailure(f"Mail API rejected message: {e.response.status_code}") from e
        except httpx.HTTPError as e:
            self.logger.error(f"send: Failure - to: {email}, error: {e}")
            raise DeliveryFailure(f"Mail API unreachable: {e}") from e

        self.logger.info(f"send: Success - to: {email}")


_notification_gateway: Optional[NotificationGateway] = None


def get_notification_gateway() -> NotificationGateway:
    """Get notification gateway instance (singleton)"""
    global _notification_gateway
    if _notification_gateway is None:
        _notification_gateway = EmailService()
    return _notification_gateway
