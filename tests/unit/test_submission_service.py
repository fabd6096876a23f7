"""
Unit tests for the submission coordinator.

Covers duplicate handling, the retry schedule and notification hand-off
using in-memory doubles for the store and the notification queue.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from src.domain.models import DuplicateKey, EnvironmentDescriptor, Respondent, SubmitStatus
from src.domain.services.submission import (
    PersistentStorageError,
    RetryPolicy,
    SubmissionService,
    SubmissionValidationError,
    TransientStorageError,
)
from src.infrastructure.repositories.submissions import StoreStatus

from tests.utils import FakeStore, RecordingQueue, build_submission


class SleepRecorder:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def _service(store, queue=None, sleep=None, **kwargs) -> SubmissionService:
    return SubmissionService(
        store,
        retry_policy=RetryPolicy(),
        notifications=queue,
        sleep=sleep or SleepRecorder(),
        **kwargs,
    )


class TestRetryPolicy:
    def test_default_schedule(self) -> None:
        policy = RetryPolicy()

        assert [policy.delay_after(n) for n in range(1, 5)] == [2, 4, 8, 10]

    def test_delay_is_capped(self) -> None:
        assert RetryPolicy(max_delay=5).delay_after(10) == 5


class TestSubmit:
    async def test_first_submission_is_created(self) -> None:
        store = FakeStore()

        outcome = await _service(store).submit(build_submission())

        assert outcome.status is SubmitStatus.CREATED
        assert outcome.record["score"] == 80
        assert outcome.record["respondent"]["email"] == "jane@example.com"
        assert len(store.records) == 1

    async def test_identical_resubmission_returns_existing_record(self) -> None:
        store = FakeStore()
        service = _service(store)

        first = await service.submit(build_submission())
        second = await service.submit(build_submission())

        assert second.status is SubmitStatus.ALREADY_EXISTS
        assert second.assessment_id == first.assessment_id
        assert len(store.records) == 1
        assert store.insert_calls == 1

    async def test_retake_with_new_outcome_is_stored(self) -> None:
        store = FakeStore()
        service = _service(store)

        await service.submit(build_submission())
        retake = await service.submit(
            build_submission(answers={"q1": "5", "q2": "5", "q3": "5", "q4": "5", "q5": "5"})
        )

        assert retake.status is SubmitStatus.CREATED
        assert retake.record["score"] == 100
        assert len(store.records) == 2

    async def test_server_score_wins_over_client_score(self) -> None:
        store = FakeStore()

        outcome = await _service(store).submit(build_submission(score=35))

        assert outcome.record["score"] == 80
        assert outcome.record["client_score"] == 35

    async def test_detailed_answers_carry_labels(self) -> None:
        answers = {"q1": "4", "q2": "4", "q3": "4", "q4": "dont_know"}
        outcome = await _service(FakeStore()).submit(
            build_submission(answers=answers, completed_questions=4)
        )

        detailed = {item["question_id"]: item for item in outcome.record["detailed_answers"]}
        assert detailed["q1"]["answer_label"] == "Fully implemented"
        assert detailed["q4"]["answer_label"] == "Don't know"
        assert detailed["q5"]["answer_value"] is None
        assert detailed["q5"]["answer_label"] == "Not answered"

    async def test_duration_is_derived_from_started_at(self) -> None:
        now = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)
        submission = build_submission()
        submission.metadata.started_at = now - timedelta(minutes=3)

        outcome = await _service(FakeStore(), clock=lambda: now).submit(submission)

        assert outcome.record["metadata"]["duration_ms"] == 180_000
        assert outcome.record["submission_id"] == (
            f"jane@example.com-Payments Platform-{int(now.timestamp() * 1000)}"
        )


class TestValidation:
    @pytest.mark.parametrize(
        "overrides",
        [
            {"respondent": Respondent(name="Jane", email="  ")},
            {"environment": EnvironmentDescriptor(unique_name="")},
            {"completed_questions": 6},
            {"total_questions": -1},
            {"answers": {"q1": "4", "unknown": "3"}},
        ],
    )
    async def test_invalid_submission_is_rejected_without_storage(self, overrides) -> None:
        store = FakeStore()
        sleep = SleepRecorder()

        with pytest.raises(SubmissionValidationError):
            await _service(store, sleep=sleep).submit(build_submission(**overrides))

        assert store.insert_calls == 0
        assert store.lookup_calls == 0
        assert sleep.delays == []


class TestRetries:
    async def test_transient_failures_are_retried_with_backoff(self) -> None:
        store = FakeStore(failures=[StoreStatus.TRANSIENT, StoreStatus.TRANSIENT])
        sleep = SleepRecorder()

        outcome = await _service(store, sleep=sleep).submit(build_submission())

        assert outcome.status is SubmitStatus.CREATED
        assert store.insert_calls == 3
        assert sleep.delays == [2, 4]
        assert len(store.records) == 1

    async def test_gives_up_after_five_attempts(self) -> None:
        store = FakeStore(failures=[StoreStatus.TRANSIENT] * 10)
        sleep = SleepRecorder()

        with pytest.raises(TransientStorageError) as exc_info:
            await _service(store, sleep=sleep).submit(build_submission())

        assert exc_info.value.attempts == 5
        assert store.insert_calls == 5
        assert sleep.delays == [2, 4, 8, 10]
        assert store.records == []

    async def test_fatal_failure_is_not_retried(self) -> None:
        store = FakeStore(failures=[StoreStatus.FATAL])
        sleep = SleepRecorder()

        with pytest.raises(PersistentStorageError):
            await _service(store, sleep=sleep).submit(build_submission())

        assert store.insert_calls == 1
        assert sleep.delays == []

    async def test_every_attempt_rechecks_for_duplicates(self) -> None:
        store = FakeStore(failures=[StoreStatus.TRANSIENT])

        await _service(store).submit(build_submission())

        assert store.lookup_calls == 2


class RacingStore(FakeStore):
    """Misses the first duplicate lookup, as if a concurrent insert had just landed."""

    async def find_by_key(self, key: DuplicateKey):
        if self.lookup_calls == 0:
            self.lookup_calls += 1
            return None
        return await super().find_by_key(key)


class TestConcurrentSubmissions:
    async def test_uniqueness_conflict_resolves_to_existing_record(self) -> None:
        store = RacingStore()
        queue = RecordingQueue()
        first = await _service(store).submit(build_submission())
        store.lookup_calls = 0
        store.failures = [StoreStatus.ALREADY_EXISTS]

        outcome = await _service(store, queue).submit(build_submission())

        assert outcome.status is SubmitStatus.ALREADY_EXISTS
        assert outcome.assessment_id == first.assessment_id
        assert len(store.records) == 1
        assert queue.records == []


class TestNotifications:
    async def test_created_record_is_queued_once(self) -> None:
        queue = RecordingQueue()
        service = _service(FakeStore(), queue)

        created = await service.submit(build_submission())
        await service.submit(build_submission())

        assert len(queue.records) == 1
        assert queue.records[0]["id"] == created.assessment_id

    async def test_dropped_notification_does_not_fail_submission(self) -> None:
        queue = RecordingQueue(accept=False)

        outcome = await _service(FakeStore(), queue).submit(build_submission())

        assert outcome.created

    async def test_enqueue_error_does_not_fail_submission(self) -> None:
        class UnreachableQueue:
            async def enqueue(self, record):
                raise RuntimeError("redis is gone")

        outcome = await _service(FakeStore(), UnreachableQueue()).submit(build_submission())

        assert outcome.created
