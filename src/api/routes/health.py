from __future__ import annotations

import asyncio
from datetime import UTC, datetime

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from src.api.deps import get_db_session, get_notification_queue
from src.core.config import get_settings
from src.workers.queue import NotificationQueue

router = APIRouter(tags=["Observability"])
logger = structlog.get_logger()


async def check_database(session: AsyncSession, timeout: float) -> dict:
    """Round-trip a trivial query."""
    try:
        await asyncio.wait_for(session.execute(text("SELECT 1")), timeout=timeout)
    except (SQLAlchemyError, OSError, TimeoutError) as e:
        return {"status": "error", "message": str(e)[:100] or type(e).__name__}
    return {"status": "ok"}


async def check_redis(notification_queue: NotificationQueue | None) -> dict:
    """Ping the broker behind the notification queue."""
    if notification_queue is None:
        return {"status": "disabled"}
    if await notification_queue.ping():
        return {"status": "ok"}
    return {"status": "error", "message": "Redis unreachable"}


@router.get("/health", summary="Service health check")
async def health_check(
    session: AsyncSession = Depends(get_db_session),
    notification_queue: NotificationQueue | None = Depends(get_notification_queue),
) -> dict:
    """Return basic service and datastore status information.

    Redis only carries notifications, so an unreachable broker degrades the
    service without taking submissions down.
    """
    settings = get_settings()

    database_status = await check_database(session, timeout=min(settings.storage_timeout_seconds, 5))
    redis_status = await check_redis(notification_queue)
    healthy = database_status["status"] == "ok" and redis_status["status"] in ("ok", "disabled")

    payload = {
        "service": settings.app_name,
        "version": settings.version,
        "status": "ok" if healthy else "degraded",
        "timestamp": datetime.now(UTC).isoformat(),
        "datastores": {"database": database_status, "redis": redis_status},
        "notifications": "enabled" if settings.notifications_configured else "skipped",
    }
    logger.info("health_checked", **payload)
    return payload
