"""Read and delete operations behind the admin dashboard."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

import structlog
from src.domain.models import DeleteOutcome
from src.domain.services.records import record_to_dict
from src.infrastructure.repositories.submissions import AssessmentFilters, SubmissionRepository

logger = structlog.get_logger()

MAX_PAGE_SIZE = 100


class InvalidAssessmentIdError(Exception):
    """Raised when an assessment id is not a well-formed UUID."""


class AssessmentNotFoundError(Exception):
    """Raised when an assessment does not exist."""


class AdminAssessmentService:
    """Paginated listing, lookup and removal of stored assessments."""

    def __init__(self, repository: SubmissionRepository) -> None:
        self.repository = repository

    async def list_assessments(
        self,
        *,
        limit: int = 10,
        skip: int = 0,
        email: str | None = None,
        environment_name: str | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
    ) -> dict[str, Any]:
        limit = max(1, min(limit, MAX_PAGE_SIZE))
        skip = max(0, skip)
        filters = AssessmentFilters(
            email=(email or "").strip() or None,
            environment_name=(environment_name or "").strip() or None,
            date_from=date_from,
            date_to=date_to,
        )

        records, total = await self.repository.list_page(filters, limit=limit, skip=skip)
        statistics = await self.repository.score_statistics(filters)

        await logger.ainfo(
            "assessments_listed",
            returned=len(records),
            total=total,
            limit=limit,
            skip=skip,
        )

        return {
            "assessments": [record_to_dict(record) for record in records],
            "pagination": {
                "total": total,
                "limit": limit,
                "skip": skip,
                "has_more": total > skip + limit,
            },
            "statistics": statistics,
        }

    async def get_assessment(self, assessment_id: str) -> dict[str, Any]:
        self._ensure_valid_id(assessment_id)
        record = await self.repository.get(assessment_id)
        if record is None:
            raise AssessmentNotFoundError("Assessment not found")
        return record_to_dict(record)

    async def delete_assessment(self, assessment_id: str) -> DeleteOutcome:
        """Remove an assessment permanently. Absent ids are reported, not raised."""
        self._ensure_valid_id(assessment_id)
        deleted = await self.repository.delete(assessment_id)
        if not deleted:
            await logger.ainfo("assessment_delete_not_found", assessment_id=assessment_id)
            return DeleteOutcome.NOT_FOUND

        await logger.ainfo("assessment_deleted", assessment_id=assessment_id)
        return DeleteOutcome.DELETED

    @staticmethod
    def _ensure_valid_id(assessment_id: str) -> None:
        try:
            uuid.UUID(assessment_id)
        except (ValueError, AttributeError, TypeError) as exc:
            raise InvalidAssessmentIdError("Invalid assessment ID format") from exc
