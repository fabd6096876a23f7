from __future__ import annotations

import structlog
from redis import Redis
from rq import Queue, Worker
from src.core.config import get_settings
from src.core.logging import setup_logging
from src.workers import jobs

logger = structlog.get_logger()

REGISTERED_JOBS = {
    "send_assessment_notifications": jobs.send_assessment_notifications_job,
}


def main() -> None:
    """Bootstrap the notification worker against the configured queue.

    Runs in the main thread: RQ installs signal handlers for warm shutdown.
    """
    settings = get_settings()
    setup_logging(settings.log_level)
    redis_connection = Redis.from_url(settings.redis_url)
    logger.info(
        "worker_bootstrap",
        queue=settings.notify_queue_name,
        jobs=list(REGISTERED_JOBS),
    )

    queue = Queue(settings.notify_queue_name, connection=redis_connection)
    worker = Worker([queue], connection=redis_connection)
    worker.work()


if __name__ == "__main__":
    main()
