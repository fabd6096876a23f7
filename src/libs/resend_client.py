"""
Resend API client for transactional emails.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import httpx
import structlog
from src.core.config import get_settings

logger = structlog.get_logger(__name__)


class EmailClientError(Exception):
    """Base exception for email transport errors."""


class EmailNotConfiguredError(EmailClientError):
    """Raised when the transport has no API key."""


class EmailAPIError(EmailClientError):
    """Raised for non-success responses from Resend."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(slots=True)
class EmailMessage:
    from_email: str
    to_emails: list[str]
    subject: str
    html: str
    text: str
    reply_to: str | None = None


@dataclass(slots=True)
class SentEmail:
    """Minimal Resend email response."""

    id: str


class EmailClientProtocol(Protocol):
    """Protocol for email transport (allows mocking)."""

    async def send(self, message: EmailMessage) -> SentEmail: ...


class ResendClient:
    """Async Resend API client. One attempt per message, no retries."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        settings = get_settings()
        self.api_key = api_key if api_key is not None else settings.resend_api_key
        self.base_url = (base_url or settings.resend_base_url).rstrip("/")
        self.timeout = (
            timeout_seconds if timeout_seconds is not None else settings.notify_timeout_seconds
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def send(self, message: EmailMessage) -> SentEmail:
        """Send one email via Resend."""
        if not self.api_key:
            raise EmailNotConfiguredError("RESEND_API_KEY not configured")

        payload: dict[str, object] = {
            "from": message.from_email,
            "to": message.to_emails,
            "subject": message.subject,
            "html": message.html,
            "text": message.text,
        }
        if message.reply_to:
            payload["reply_to"] = message.reply_to

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/emails",
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json=payload,
                )
        except httpx.TimeoutException as exc:
            raise EmailClientError(f"Resend request timed out after {self.timeout}s") from exc
        except httpx.RequestError as exc:
            raise EmailClientError(f"Resend request failed: {exc}") from exc

        if response.status_code not in (200, 201):
            raise EmailAPIError(
                f"Resend error {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            email_id = response.json().get("id")
        except ValueError as exc:
            raise EmailAPIError(
                "Resend response was not valid JSON",
                status_code=response.status_code,
            ) from exc

        if not email_id:
            raise EmailAPIError(
                "Resend response missing email id",
                status_code=response.status_code,
            )

        return SentEmail(id=email_id)
