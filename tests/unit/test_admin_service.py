"""Unit tests for admin listing and deletion against the in-memory database."""

from __future__ import annotations

import pytest
from sqlalchemy.ext.asyncio import AsyncSession
from src.domain.models import DeleteOutcome
from src.domain.services.admin import (
    AdminAssessmentService,
    AssessmentNotFoundError,
    InvalidAssessmentIdError,
)
from src.infrastructure.repositories.submissions import SubmissionRepository

from tests.utils import build_record_values


@pytest.fixture
async def seeded(db: AsyncSession) -> AdminAssessmentService:
    repository = SubmissionRepository(db, timeout_seconds=5)
    for index in range(1, 16):
        await repository.insert(build_record_values(index))
    return AdminAssessmentService(repository)


class TestListAssessments:
    async def test_first_page_is_newest_first(self, seeded: AdminAssessmentService) -> None:
        result = await seeded.list_assessments(limit=10, skip=0)

        emails = [item["respondent"]["email"] for item in result["assessments"]]
        assert len(emails) == 10
        assert emails[0] == "user15@example.com"
        assert emails[-1] == "user6@example.com"
        assert result["pagination"] == {"total": 15, "limit": 10, "skip": 0, "has_more": True}

    async def test_last_page(self, seeded: AdminAssessmentService) -> None:
        result = await seeded.list_assessments(limit=10, skip=10)

        assert len(result["assessments"]) == 5
        assert result["pagination"]["has_more"] is False

    async def test_statistics_cover_filtered_set(self, seeded: AdminAssessmentService) -> None:
        result = await seeded.list_assessments(environment_name="env 1")

        # "Env 1" and "Env 10".."Env 15"
        assert result["pagination"]["total"] == 7
        stats = result["statistics"]
        assert stats["total_assessments"] == 7
        assert stats["min_score"] == 41
        assert stats["max_score"] == 55

    async def test_email_filter_is_case_insensitive(self, seeded: AdminAssessmentService) -> None:
        result = await seeded.list_assessments(email="USER3@")

        assert [a["respondent"]["email"] for a in result["assessments"]] == ["user3@example.com"]

    async def test_page_size_is_capped(self, seeded: AdminAssessmentService) -> None:
        result = await seeded.list_assessments(limit=500)

        assert result["pagination"]["limit"] == 100
        assert len(result["assessments"]) == 15

    async def test_empty_store(self, db: AsyncSession) -> None:
        service = AdminAssessmentService(SubmissionRepository(db, timeout_seconds=5))

        result = await service.list_assessments()

        assert result["assessments"] == []
        assert result["pagination"]["has_more"] is False
        assert result["statistics"]["average_score"] == 0.0


class TestGetAndDelete:
    async def test_get_assessment(self, seeded: AdminAssessmentService) -> None:
        record = await seeded.get_assessment("00000000-0000-4000-8000-000000000003")

        assert record["score"] == 43
        assert record["metadata"] == {"language": "en"}

    async def test_get_missing_assessment(self, seeded: AdminAssessmentService) -> None:
        with pytest.raises(AssessmentNotFoundError):
            await seeded.get_assessment("00000000-0000-4000-8000-999999999999")

    async def test_delete_then_delete_again(self, seeded: AdminAssessmentService) -> None:
        assessment_id = "00000000-0000-4000-8000-000000000007"

        assert await seeded.delete_assessment(assessment_id) is DeleteOutcome.DELETED
        assert await seeded.delete_assessment(assessment_id) is DeleteOutcome.NOT_FOUND

        result = await seeded.list_assessments(limit=100)
        assert result["pagination"]["total"] == 14

    @pytest.mark.parametrize("bad_id", ["not-a-uuid", "", "12345"])
    async def test_malformed_id_is_rejected(
        self, seeded: AdminAssessmentService, bad_id: str
    ) -> None:
        with pytest.raises(InvalidAssessmentIdError):
            await seeded.delete_assessment(bad_id)
