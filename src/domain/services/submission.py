"""
Submission coordinator: the single write path for completed assessments.

- Validates identity fields and recomputes the score server-side
- Skips the insert when an identical submission is already stored
- Retries transient storage failures with exponential backoff
- Queues notification jobs for new records once persisted
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Protocol
from uuid import uuid4

import structlog
from src.core.config import Settings
from src.domain.models import DuplicateKey, Submission, SubmitOutcome, SubmitStatus
from src.domain.scoring import ScoreResult, calculate_score
from src.domain.services.duplicates import DuplicateDetector
from src.domain.services.records import (
    build_detailed_answers,
    metadata_document,
    record_to_dict,
)
from src.infrastructure.db.models import AssessmentRecord
from src.infrastructure.repositories.submissions import (
    StorageQueryError,
    StorageUnavailableError,
    StoreResult,
    StoreStatus,
)

logger = structlog.get_logger()


class SubmissionValidationError(Exception):
    """Raised when a submission is missing or has malformed required fields."""


class TransientStorageError(Exception):
    """Raised when storage stayed unreachable for every attempt."""

    def __init__(self, message: str, attempts: int, last_error: str | None = None) -> None:
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error


class PersistentStorageError(Exception):
    """Raised for storage failures that retrying will not fix."""


class _RetryableAttempt(Exception):
    def __init__(self, error: str) -> None:
        super().__init__(error)
        self.error = error


class SubmissionStore(Protocol):
    async def find_by_key(self, key: DuplicateKey) -> AssessmentRecord | None: ...

    async def find_latest_for_environment(
        self, email: str, environment_name: str
    ) -> AssessmentRecord | None: ...

    async def insert(self, values: dict[str, Any]) -> StoreResult: ...


class NotificationSink(Protocol):
    async def enqueue(self, record: dict[str, Any]) -> bool: ...


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    max_attempts: int = 5
    initial_delay: float = 2.0
    multiplier: float = 2.0
    max_delay: float = 10.0

    def delay_after(self, attempt: int) -> float:
        """Seconds to wait after the given (1-based) failed attempt."""
        return min(self.initial_delay * self.multiplier ** (attempt - 1), self.max_delay)

    @classmethod
    def from_settings(cls, settings: Settings) -> RetryPolicy:
        return cls(
            max_attempts=settings.submit_max_attempts,
            initial_delay=settings.submit_initial_backoff_seconds,
            max_delay=settings.submit_max_backoff_seconds,
        )


class SubmissionService:
    """Persists completed assessments with retries and duplicate detection."""

    def __init__(
        self,
        store: SubmissionStore,
        *,
        retry_policy: RetryPolicy | None = None,
        notifications: NotificationSink | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.store = store
        self.detector = DuplicateDetector(store)
        self.retry_policy = retry_policy or RetryPolicy()
        self.notifications = notifications
        self._sleep = sleep
        self._clock = clock or (lambda: datetime.now(UTC))

    async def submit(self, submission: Submission) -> SubmitOutcome:
        self._validate(submission)

        score = calculate_score(submission.answers)
        self._check_client_score(submission, score)

        key = self.detector.key_for(
            email=submission.respondent.email,
            environment_name=submission.environment.unique_name,
            score=score.percentage,
            total_questions=submission.total_questions,
            completed_questions=submission.completed_questions,
        )

        policy = self.retry_policy
        last_error: str | None = None
        for attempt in range(1, policy.max_attempts + 1):
            try:
                outcome = await self._attempt(submission, score, key)
            except _RetryableAttempt as exc:
                last_error = exc.error
            else:
                await self._notify(outcome)
                return outcome

            await logger.awarning(
                "storage_attempt_failed",
                attempt=attempt,
                max_attempts=policy.max_attempts,
                error=(last_error or "")[:200],
            )
            if attempt < policy.max_attempts:
                await self._sleep(policy.delay_after(attempt))

        await logger.aerror(
            "assessment_store_exhausted",
            email=key.email,
            environment=key.environment_name,
            attempts=policy.max_attempts,
            error=(last_error or "")[:200],
        )
        raise TransientStorageError(
            f"Failed to store assessment after {policy.max_attempts} attempts",
            attempts=policy.max_attempts,
            last_error=last_error,
        )

    async def _attempt(
        self,
        submission: Submission,
        score: ScoreResult,
        key: DuplicateKey,
    ) -> SubmitOutcome:
        try:
            existing = await self.detector.find_duplicate(key)
            if existing is not None:
                return self._outcome(SubmitStatus.ALREADY_EXISTS, existing)

            result = await self.store.insert(self._build_values(submission, score, key))

            if result.status is StoreStatus.OK and result.record is not None:
                await logger.ainfo(
                    "assessment_stored",
                    assessment_id=result.record.id,
                    email=key.email,
                    environment=key.environment_name,
                    score=key.score,
                )
                return self._outcome(SubmitStatus.CREATED, result.record)

            if result.status is StoreStatus.ALREADY_EXISTS:
                # Lost a race with an identical submission between check and insert
                existing = await self.store.find_by_key(key)
                if existing is None:
                    existing = await self.store.find_latest_for_environment(
                        key.email, key.environment_name
                    )
                if existing is not None:
                    await logger.ainfo(
                        "assessment_insert_conflict_resolved", assessment_id=existing.id
                    )
                    return self._outcome(SubmitStatus.ALREADY_EXISTS, existing)
                raise PersistentStorageError(
                    f"Uniqueness conflict without a matching record: {result.error}"
                )

            if result.status is StoreStatus.TRANSIENT:
                raise _RetryableAttempt(result.error or "transient storage failure")

            raise PersistentStorageError(f"Failed to store assessment: {result.error}")
        except StorageUnavailableError as exc:
            raise _RetryableAttempt(str(exc)) from exc
        except StorageQueryError as exc:
            raise PersistentStorageError(str(exc)) from exc

    def _validate(self, submission: Submission) -> None:
        missing = []
        if not submission.respondent.email or not submission.respondent.email.strip():
            missing.append("email")
        if not submission.environment.unique_name or not submission.environment.unique_name.strip():
            missing.append("environment_unique_name")
        if missing:
            raise SubmissionValidationError(f"Missing required fields: {', '.join(missing)}")

        if submission.total_questions < 0 or submission.completed_questions < 0:
            raise SubmissionValidationError("Question counts must not be negative")
        if submission.completed_questions > submission.total_questions:
            raise SubmissionValidationError(
                "completed_questions cannot exceed total_questions"
            )

        if submission.question_details:
            known = {question.id for question in submission.question_details}
            unknown = sorted(set(submission.answers) - known)
            if unknown:
                raise SubmissionValidationError(
                    f"Answers reference unknown questions: {', '.join(unknown)}"
                )

    def _check_client_score(self, submission: Submission, score: ScoreResult) -> None:
        if submission.score is not None and submission.score != score.percentage:
            logger.warning(
                "client_score_mismatch",
                email=submission.respondent.email,
                environment=submission.environment.unique_name,
                client_score=submission.score,
                server_score=score.percentage,
            )

    def _build_values(
        self,
        submission: Submission,
        score: ScoreResult,
        key: DuplicateKey,
    ) -> dict[str, Any]:
        now = self._clock()
        duration_ms = submission.metadata.duration_ms
        started_at = submission.metadata.started_at
        if started_at is not None:
            if started_at.tzinfo is None:
                started_at = started_at.replace(tzinfo=UTC)
            duration_ms = max(0, int((now - started_at).total_seconds() * 1000))

        return {
            "id": str(uuid4()),
            "submission_id": f"{key.email}-{key.environment_name}-{int(now.timestamp() * 1000)}",
            "email": key.email,
            "environment_name": key.environment_name,
            "score": score.percentage,
            "client_score": submission.score,
            "total_questions": submission.total_questions,
            "completed_questions": submission.completed_questions,
            "language": submission.language,
            "respondent": {
                "name": submission.respondent.name,
                "email": key.email,
                "role": submission.respondent.role,
                "country": submission.respondent.country,
                "market_sector": submission.respondent.market_sector,
                "date": submission.respondent.date,
            },
            "environment": {
                "unique_name": key.environment_name,
                "type": submission.environment.type,
                "size": submission.environment.size,
                "importance": submission.environment.importance,
                "maturity": submission.environment.maturity,
            },
            "answers": dict(submission.answers),
            "selected_categories": list(dict.fromkeys(submission.selected_categories)),
            "selected_areas": list(dict.fromkeys(submission.selected_areas)),
            "metadata_": metadata_document(submission, duration_ms),
            "question_details": [
                {
                    "id": q.id,
                    "text": q.text,
                    "category": q.category,
                    "area": q.area,
                    "topic": q.topic,
                    "options": [
                        {"value": o.value, "label": o.label, "score": o.score}
                        for o in q.options
                    ],
                }
                for q in submission.question_details
            ],
            "detailed_answers": build_detailed_answers(submission),
            "created_at": now,
            "updated_at": now,
        }

    @staticmethod
    def _outcome(status: SubmitStatus, record: AssessmentRecord) -> SubmitOutcome:
        return SubmitOutcome(status=status, assessment_id=record.id, record=record_to_dict(record))

    async def _notify(self, outcome: SubmitOutcome) -> None:
        if not outcome.created or self.notifications is None:
            return
        try:
            await self.notifications.enqueue(outcome.record)
        except Exception as exc:  # noqa: BLE001 - notifications must never fail a submission
            await logger.aerror(
                "notification_enqueue_failed",
                assessment_id=outcome.assessment_id,
                error=str(exc),
            )
