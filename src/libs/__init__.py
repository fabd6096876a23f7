"""Shared library helpers."""

from src.libs.resend_client import (
    EmailAPIError,
    EmailClientError,
    EmailClientProtocol,
    EmailMessage,
    EmailNotConfiguredError,
    ResendClient,
    SentEmail,
)

__all__ = [
    "EmailAPIError",
    "EmailClientError",
    "EmailClientProtocol",
    "EmailMessage",
    "EmailNotConfiguredError",
    "ResendClient",
    "SentEmail",
]
