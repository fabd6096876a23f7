"""
Assessment repository.

The only write path into the ``assessments`` table. Inserts report their
outcome as a typed ``StoreResult`` so callers can branch on the kind of
failure instead of parsing driver messages.
"""

from __future__ import annotations

import asyncio
import enum
from collections.abc import Awaitable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, TypeVar

import structlog
from sqlalchemy import Select, delete, func, select
from sqlalchemy import exc as sa_exc
from sqlalchemy.ext.asyncio import AsyncSession
from src.core.config import get_settings
from src.domain.models import DuplicateKey
from src.infrastructure.db.models import AssessmentRecord

logger = structlog.get_logger()

T = TypeVar("T")


class StoreStatus(str, enum.Enum):
    OK = "ok"
    ALREADY_EXISTS = "already_exists"
    TRANSIENT = "transient"
    FATAL = "fatal"


@dataclass(slots=True)
class StoreResult:
    status: StoreStatus
    record: AssessmentRecord | None = None
    error: str | None = None


class StorageError(Exception):
    """Base exception for storage failures on read/delete paths."""


class StorageUnavailableError(StorageError):
    """Raised when the database cannot be reached or timed out."""


class StorageQueryError(StorageError):
    """Raised for failures that retrying will not fix."""


@dataclass(slots=True)
class AssessmentFilters:
    email: str | None = None
    environment_name: str | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None


def classify_error(exc: BaseException) -> StoreStatus:
    """Map a database exception onto a store status."""
    if isinstance(exc, sa_exc.IntegrityError):
        return StoreStatus.ALREADY_EXISTS
    if isinstance(exc, (TimeoutError, asyncio.TimeoutError, sa_exc.TimeoutError, OSError)):
        return StoreStatus.TRANSIENT
    if isinstance(exc, (sa_exc.OperationalError, sa_exc.InterfaceError, sa_exc.DisconnectionError)):
        return StoreStatus.TRANSIENT
    if isinstance(exc, sa_exc.DBAPIError) and exc.connection_invalidated:
        return StoreStatus.TRANSIENT
    return StoreStatus.FATAL


class SubmissionRepository:
    """Persistence for assessment records."""

    def __init__(self, session: AsyncSession, timeout_seconds: float | None = None) -> None:
        self.session = session
        self.timeout = (
            timeout_seconds
            if timeout_seconds is not None
            else get_settings().storage_timeout_seconds
        )

    async def insert(self, values: dict[str, Any]) -> StoreResult:
        """Insert a record and commit, reporting the outcome without raising."""
        record = AssessmentRecord(**values)
        try:
            self.session.add(record)
            await self._bounded(self.session.commit())
        except (sa_exc.SQLAlchemyError, TimeoutError, OSError) as exc:
            await self._rollback()
            status = classify_error(exc)
            await logger.awarning(
                "assessment_insert_failed",
                status=status.value,
                error_type=type(exc).__name__,
                error=str(exc)[:200],
            )
            return StoreResult(status=status, error=str(exc))

        return StoreResult(status=StoreStatus.OK, record=record)

    async def find_by_key(self, key: DuplicateKey) -> AssessmentRecord | None:
        stmt = (
            select(AssessmentRecord)
            .where(
                AssessmentRecord.email == key.email,
                AssessmentRecord.environment_name == key.environment_name,
                AssessmentRecord.score == key.score,
                AssessmentRecord.total_questions == key.total_questions,
                AssessmentRecord.completed_questions == key.completed_questions,
            )
            .order_by(AssessmentRecord.created_at.asc())
            .limit(1)
        )
        return await self._scalar(stmt)

    async def find_latest_for_environment(
        self, email: str, environment_name: str
    ) -> AssessmentRecord | None:
        stmt = (
            select(AssessmentRecord)
            .where(
                AssessmentRecord.email == email,
                AssessmentRecord.environment_name == environment_name,
            )
            .order_by(AssessmentRecord.created_at.desc())
            .limit(1)
        )
        return await self._scalar(stmt)

    async def get(self, assessment_id: str) -> AssessmentRecord | None:
        stmt = select(AssessmentRecord).where(AssessmentRecord.id == assessment_id)
        return await self._scalar(stmt)

    async def delete(self, assessment_id: str) -> int:
        """Delete a record permanently. Returns the number of rows removed."""
        stmt = delete(AssessmentRecord).where(AssessmentRecord.id == assessment_id)
        try:
            result = await self._bounded(self.session.execute(stmt))
            await self._bounded(self.session.commit())
        except (sa_exc.SQLAlchemyError, TimeoutError, OSError) as exc:
            await self._rollback()
            raise self._as_storage_error(exc) from exc
        return result.rowcount or 0

    async def list_page(
        self,
        filters: AssessmentFilters,
        *,
        limit: int,
        skip: int,
    ) -> tuple[list[AssessmentRecord], int]:
        """Return one page of records, newest first, plus the filtered total."""
        page_stmt = (
            self._apply_filters(select(AssessmentRecord), filters)
            .order_by(AssessmentRecord.created_at.desc(), AssessmentRecord.id.desc())
            .offset(skip)
            .limit(limit)
        )
        count_stmt = self._apply_filters(
            select(func.count()).select_from(AssessmentRecord), filters
        )
        try:
            total = await self._bounded(self.session.scalar(count_stmt))
            result = await self._bounded(self.session.scalars(page_stmt))
        except (sa_exc.SQLAlchemyError, TimeoutError, OSError) as exc:
            raise self._as_storage_error(exc) from exc
        return list(result.all()), int(total or 0)

    async def score_statistics(self, filters: AssessmentFilters) -> dict[str, Any]:
        stmt = self._apply_filters(
            select(
                func.count(AssessmentRecord.id),
                func.avg(AssessmentRecord.score),
                func.min(AssessmentRecord.score),
                func.max(AssessmentRecord.score),
            ),
            filters,
        )
        try:
            result = await self._bounded(self.session.execute(stmt))
        except (sa_exc.SQLAlchemyError, TimeoutError, OSError) as exc:
            raise self._as_storage_error(exc) from exc

        count, average, minimum, maximum = result.one()
        return {
            "total_assessments": int(count or 0),
            "average_score": float(average) if average is not None else 0.0,
            "min_score": int(minimum) if minimum is not None else 0,
            "max_score": int(maximum) if maximum is not None else 0,
        }

    @staticmethod
    def _apply_filters(stmt: Select, filters: AssessmentFilters) -> Select:
        if filters.email:
            stmt = stmt.where(
                func.lower(AssessmentRecord.email).contains(filters.email.lower(), autoescape=True)
            )
        if filters.environment_name:
            stmt = stmt.where(
                func.lower(AssessmentRecord.environment_name).contains(
                    filters.environment_name.lower(), autoescape=True
                )
            )
        if filters.date_from:
            stmt = stmt.where(AssessmentRecord.created_at >= filters.date_from)
        if filters.date_to:
            stmt = stmt.where(AssessmentRecord.created_at <= filters.date_to)
        return stmt

    async def _scalar(self, stmt: Select) -> AssessmentRecord | None:
        try:
            return await self._bounded(self.session.scalar(stmt))
        except (sa_exc.SQLAlchemyError, TimeoutError, OSError) as exc:
            raise self._as_storage_error(exc) from exc

    async def _bounded(self, awaitable: Awaitable[T]) -> T:
        return await asyncio.wait_for(awaitable, timeout=self.timeout)

    async def _rollback(self) -> None:
        try:
            await self.session.rollback()
        except sa_exc.SQLAlchemyError as exc:
            await logger.awarning("assessment_rollback_failed", error=str(exc)[:200])

    @staticmethod
    def _as_storage_error(exc: BaseException) -> StorageError:
        if classify_error(exc) is StoreStatus.TRANSIENT:
            return StorageUnavailableError(f"Database unavailable: {exc}")
        return StorageQueryError(f"Database error: {exc}")
