from __future__ import annotations

from typing import Protocol

import structlog
from src.domain.models import DuplicateKey
from src.infrastructure.db.models import AssessmentRecord

logger = structlog.get_logger()


class DuplicateLookup(Protocol):
    async def find_by_key(self, key: DuplicateKey) -> AssessmentRecord | None: ...


class DuplicateDetector:
    """Exact-match duplicate policy.

    A submission duplicates a stored record only when email, environment
    name, score, total and completed question counts are all equal. A retake
    that differs in any of them is a new record.
    """

    def __init__(self, lookup: DuplicateLookup) -> None:
        self.lookup = lookup

    @staticmethod
    def key_for(
        *,
        email: str,
        environment_name: str,
        score: int,
        total_questions: int,
        completed_questions: int,
    ) -> DuplicateKey:
        return DuplicateKey(
            email=email.strip(),
            environment_name=environment_name.strip(),
            score=score,
            total_questions=total_questions,
            completed_questions=completed_questions,
        )

    async def find_duplicate(self, key: DuplicateKey) -> AssessmentRecord | None:
        existing = await self.lookup.find_by_key(key)
        if existing is not None:
            await logger.ainfo(
                "assessment_duplicate_detected",
                assessment_id=existing.id,
                email=key.email,
                environment=key.environment_name,
                score=key.score,
            )
        return existing

    async def is_duplicate(self, key: DuplicateKey) -> bool:
        return await self.find_duplicate(key) is not None
