"""
RQ-backed notification queue.

Stored assessments are handed to Redis and delivered by a separate worker
process (``python -m src.workers.worker``). Enqueueing is best effort: when
Redis cannot be reached the notification is logged and dropped, and the
submission still succeeds.
"""

from __future__ import annotations

import asyncio
from typing import Any

import structlog
from redis import Redis
from redis.exceptions import RedisError
from rq import Queue
from src.core.config import Settings, get_settings
from src.workers.jobs import send_assessment_notifications_job

logger = structlog.get_logger(__name__)


class NotificationQueue:
    """Enqueues notification jobs without blocking the event loop."""

    def __init__(self, queue: Queue, *, job_timeout: int = 120) -> None:
        self.queue = queue
        self.job_timeout = job_timeout

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> NotificationQueue:
        settings = settings or get_settings()
        connection = Redis.from_url(
            settings.redis_url,
            socket_connect_timeout=settings.redis_timeout_seconds,
            socket_timeout=settings.redis_timeout_seconds,
        )
        return cls(
            Queue(settings.notify_queue_name, connection=connection),
            job_timeout=settings.notify_job_timeout_seconds,
        )

    async def enqueue(self, record: dict[str, Any]) -> bool:
        """Queue notifications for a record. Returns False if it was dropped."""
        try:
            job = await asyncio.to_thread(
                self.queue.enqueue,
                send_assessment_notifications_job,
                record,
                job_timeout=self.job_timeout,
                description=f"notify assessment {record.get('id')}",
            )
        except (RedisError, OSError) as exc:
            await logger.awarning(
                "notification_dropped",
                assessment_id=record.get("id"),
                reason="queue unavailable",
                error=str(exc)[:200],
            )
            return False

        await logger.ainfo(
            "notification_enqueued",
            assessment_id=record.get("id"),
            job_id=job.id,
            queue=self.queue.name,
        )
        return True

    async def ping(self) -> bool:
        try:
            return bool(await asyncio.to_thread(self.queue.connection.ping))
        except (RedisError, OSError):
            return False

    def close(self) -> None:
        self.queue.connection.close()
