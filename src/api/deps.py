from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from src.core.config import get_settings
from src.core.security import Role, TokenError, decode_access_token
from src.domain import AdminUser
from src.domain.services.submission import RetryPolicy, SubmissionService
from src.infrastructure.db.session import get_session
from src.infrastructure.repositories.submissions import SubmissionRepository
from src.workers.queue import NotificationQueue

bearer_scheme = HTTPBearer(auto_error=False)


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """Provide an async SQLAlchemy session for API handlers."""
    async for session in get_session():
        yield session


def get_notification_queue(request: Request) -> NotificationQueue | None:
    """Notification queue opened in the application lifespan, if any."""
    return getattr(request.app.state, "notification_queue", None)


def get_retry_policy() -> RetryPolicy:
    return RetryPolicy.from_settings(get_settings())


def get_submission_service(
    session: AsyncSession = Depends(get_db_session),  # noqa: B008
    notification_queue: NotificationQueue | None = Depends(get_notification_queue),  # noqa: B008
    retry_policy: RetryPolicy = Depends(get_retry_policy),  # noqa: B008
) -> SubmissionService:
    return SubmissionService(
        SubmissionRepository(session),
        retry_policy=retry_policy,
        notifications=notification_queue,
    )


async def get_current_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),  # noqa: B008
) -> AdminUser:
    """Resolve the authenticated administrator from a bearer token."""
    if credentials is None:
        raise _unauthorized("Missing bearer token")

    try:
        claims = decode_access_token(credentials.credentials)
    except TokenError as exc:
        raise _unauthorized(str(exc)) from exc

    if Role.ADMIN.value not in claims.roles:
        raise _forbidden("Insufficient role privileges")

    return AdminUser(user_id=claims.subject, email=claims.email, roles=claims.roles)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _forbidden(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
