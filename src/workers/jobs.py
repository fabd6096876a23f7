"""
Worker jobs for background processing.

Job functions are synchronous entry points executed by the RQ worker; each
one drives its async service through ``asyncio.run``.
"""

from __future__ import annotations

import asyncio
from typing import Any

import structlog
from src.domain.services.notifications import NotificationService
from src.libs.resend_client import EmailClientProtocol

logger = structlog.get_logger()


def send_assessment_notifications_job(
    record: dict[str, Any],
    email_client: EmailClientProtocol | None = None,
) -> dict[str, str]:
    """
    Send the internal notice and the user acknowledgment for a stored assessment.

    Args:
        record: The stored assessment as returned by the submission service.
        email_client: Optional transport (for testing injection).

    Returns:
        Delivery status per channel, kept as the RQ job result.
    """
    return asyncio.run(_send_assessment_notifications(record, email_client))


async def _send_assessment_notifications(
    record: dict[str, Any],
    email_client: EmailClientProtocol | None,
) -> dict[str, str]:
    service = NotificationService(client=email_client)
    statuses = await service.notify(record)
    result = {channel.value: status.value for channel, status in statuses.items()}
    await logger.ainfo("notification_job_completed", assessment_id=record.get("id"), **result)
    return result
