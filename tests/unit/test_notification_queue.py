"""Unit tests for the RQ notification queue and its worker job."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError
from src.core.config import Settings
from src.workers import worker
from src.workers.jobs import send_assessment_notifications_job
from src.workers.queue import NotificationQueue

from tests.utils import FakeEmailClient

RECORD = {
    "id": "00000000-0000-4000-8000-000000000001",
    "respondent": {"name": "Jane Doe", "email": "jane@example.com"},
    "environment": {"unique_name": "Payments Platform"},
    "answers": {"q1": "4"},
    "detailed_answers": [],
    "score": 80,
    "language": "en",
}


class TestNotificationQueue:
    @pytest.fixture
    def rq_queue(self):
        """Mock RQ queue."""
        queue = MagicMock()
        queue.name = "notifications"
        queue.enqueue.return_value = MagicMock(id="job-123")
        return queue

    async def test_enqueue_hands_record_to_job(self, rq_queue) -> None:
        notification_queue = NotificationQueue(rq_queue, job_timeout=30)

        accepted = await notification_queue.enqueue(RECORD)

        assert accepted is True
        rq_queue.enqueue.assert_called_once()
        args, kwargs = rq_queue.enqueue.call_args
        assert args == (send_assessment_notifications_job, RECORD)
        assert kwargs["job_timeout"] == 30
        assert RECORD["id"] in kwargs["description"]

    @pytest.mark.parametrize(
        "error",
        [RedisConnectionError("connection refused"), RedisTimeoutError("timed out"), OSError()],
    )
    async def test_unreachable_redis_drops_notification(self, rq_queue, error) -> None:
        rq_queue.enqueue.side_effect = error

        accepted = await NotificationQueue(rq_queue).enqueue(RECORD)

        assert accepted is False

    async def test_ping_reports_connection_state(self, rq_queue) -> None:
        rq_queue.connection.ping.return_value = True
        assert await NotificationQueue(rq_queue).ping() is True

        rq_queue.connection.ping.side_effect = RedisConnectionError("down")
        assert await NotificationQueue(rq_queue).ping() is False

    def test_from_settings_uses_configured_queue(self) -> None:
        settings = Settings(
            DATABASE_URL="sqlite+aiosqlite:///:memory:",
            REDIS_URL="redis://cache.internal:6380/2",
            NOTIFY_QUEUE_NAME="emails",
            NOTIFY_JOB_TIMEOUT_SECONDS=45,
        )

        notification_queue = NotificationQueue.from_settings(settings)

        assert notification_queue.queue.name == "emails"
        assert notification_queue.job_timeout == 45
        connection_kwargs = notification_queue.queue.connection.connection_pool.connection_kwargs
        assert connection_kwargs["host"] == "cache.internal"
        assert connection_kwargs["port"] == 6380
        assert connection_kwargs["db"] == 2
        notification_queue.close()


class TestNotificationJob:
    def test_job_reports_channel_statuses(self) -> None:
        client = FakeEmailClient()

        result = send_assessment_notifications_job(RECORD, email_client=client)

        # Email transport is not configured under test
        assert result == {"internal": "skipped", "user": "skipped"}
        assert client.sent == []

    def test_worker_registers_notification_job(self) -> None:
        assert (
            worker.REGISTERED_JOBS["send_assessment_notifications"]
            is send_assessment_notifications_job
        )
