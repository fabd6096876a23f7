from __future__ import annotations

import copy
from dataclasses import replace
from datetime import UTC, datetime, timedelta
from typing import Any

from src.domain.models import (
    DuplicateKey,
    EnvironmentDescriptor,
    QuestionDetail,
    QuestionOption,
    Respondent,
    Submission,
)
from src.infrastructure.db.models import AssessmentRecord
from src.infrastructure.repositories.submissions import StoreResult, StoreStatus
from src.libs.resend_client import EmailMessage, SentEmail

# 4 + 4 + 4 + 4 + 4 = 20 of 25 -> 80%
EIGHTY_PERCENT_ANSWERS = {"q1": "4", "q2": "4", "q3": "4", "q4": "4", "q5": "4"}

OPTIONS = [
    {"value": "1", "label": "Not implemented"},
    {"value": "2", "label": "Partially implemented"},
    {"value": "3", "label": "Largely implemented"},
    {"value": "4", "label": "Fully implemented"},
    {"value": "5", "label": "Continuously improved"},
    {"value": "dont_know", "label": "Don't know"},
]


def build_submission_payload(**overrides: Any) -> dict[str, Any]:
    """JSON body for POST /assessments."""
    payload: dict[str, Any] = {
        "respondent": {
            "name": "Jane Doe",
            "email": "jane@example.com",
            "role": "CISO",
            "country": "Canada",
            "market_sector": "Finance",
            "date": "2026-10-19",
        },
        "environment": {
            "unique_name": "Payments Platform",
            "type": "Cloud",
            "size": "Medium",
            "importance": "Critical",
            "maturity": "Established",
        },
        "answers": dict(EIGHTY_PERCENT_ANSWERS),
        "selected_categories": ["Identify", "Protect"],
        "selected_areas": ["Asset Management", "Access Control", "Training"],
        "score": 80,
        "total_questions": 5,
        "completed_questions": 5,
        "metadata": {
            "language": "en",
            "user_agent": "pytest",
            "screen_resolution": "1920x1080",
        },
        "question_details": [
            {
                "id": f"q{index}",
                "text": f"Question {index}",
                "category": "Identify" if index <= 2 else "Protect",
                "area": "Asset Management",
                "topic": "Inventory",
                "options": copy.deepcopy(OPTIONS),
            }
            for index in range(1, 6)
        ],
        "language": "en",
    }
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(payload.get(key), dict):
            payload[key] = {**payload[key], **value}
        else:
            payload[key] = value
    return payload


def build_submission(**overrides: Any) -> Submission:
    submission = Submission(
        respondent=Respondent(name="Jane Doe", email="jane@example.com", role="CISO"),
        environment=EnvironmentDescriptor(unique_name="Payments Platform", type="Cloud"),
        answers=dict(EIGHTY_PERCENT_ANSWERS),
        selected_categories=["Identify", "Protect"],
        selected_areas=["Asset Management", "Access Control", "Training"],
        total_questions=5,
        completed_questions=5,
        score=80,
        question_details=[
            QuestionDetail(
                id=f"q{index}",
                text=f"Question {index}",
                category="Identify",
                options=[QuestionOption(**option) for option in OPTIONS],
            )
            for index in range(1, 6)
        ],
    )
    return replace(submission, **overrides)


def build_record_values(index: int, **overrides: Any) -> dict[str, Any]:
    """Column values for a stored assessment, created ``index`` minutes apart."""
    created_at = datetime(2026, 10, 1, 9, 0, tzinfo=UTC) + timedelta(minutes=index)
    values: dict[str, Any] = {
        "id": f"00000000-0000-4000-8000-{index:012d}",
        "submission_id": f"user{index}@example.com-Env {index}-{index}",
        "email": f"user{index}@example.com",
        "environment_name": f"Env {index}",
        "score": 40 + index,
        "client_score": None,
        "total_questions": 10,
        "completed_questions": 10,
        "language": "en",
        "respondent": {"name": f"User {index}", "email": f"user{index}@example.com"},
        "environment": {"unique_name": f"Env {index}"},
        "answers": {"q1": "3"},
        "selected_categories": ["Identify"],
        "selected_areas": ["Asset Management"],
        "metadata_": {"language": "en"},
        "question_details": [],
        "detailed_answers": [],
        "created_at": created_at,
        "updated_at": created_at,
    }
    values.update(overrides)
    return values


class FakeStore:
    """In-memory submission store with scripted insert failures."""

    def __init__(self, failures: list[StoreStatus] | None = None) -> None:
        self.records: list[AssessmentRecord] = []
        self.failures = list(failures or [])
        self.insert_calls = 0
        self.lookup_calls = 0

    async def find_by_key(self, key: DuplicateKey) -> AssessmentRecord | None:
        self.lookup_calls += 1
        for record in self.records:
            if (
                record.email == key.email
                and record.environment_name == key.environment_name
                and record.score == key.score
                and record.total_questions == key.total_questions
                and record.completed_questions == key.completed_questions
            ):
                return record
        return None

    async def find_latest_for_environment(
        self, email: str, environment_name: str
    ) -> AssessmentRecord | None:
        matches = [
            r for r in self.records if r.email == email and r.environment_name == environment_name
        ]
        return matches[-1] if matches else None

    async def insert(self, values: dict[str, Any]) -> StoreResult:
        self.insert_calls += 1
        if self.failures:
            status = self.failures.pop(0)
            return StoreResult(status=status, error=f"simulated {status.value} failure")
        record = AssessmentRecord(**values)
        self.records.append(record)
        return StoreResult(status=StoreStatus.OK, record=record)


class RecordingQueue:
    """Stands in for the RQ notification queue; remembers what was queued."""

    def __init__(self, accept: bool = True, reachable: bool = True) -> None:
        self.records: list[dict[str, Any]] = []
        self.accept = accept
        self.reachable = reachable

    async def enqueue(self, record: dict[str, Any]) -> bool:
        self.records.append(record)
        return self.accept

    async def ping(self) -> bool:
        return self.reachable


class FakeEmailClient:
    """Email transport double. Recipients listed in ``fail_for`` raise."""

    def __init__(self, fail_for: set[str] | None = None, error: Exception | None = None) -> None:
        self.sent: list[EmailMessage] = []
        self.fail_for = fail_for or set()
        self.error = error or RuntimeError("smtp exploded")

    async def send(self, message: EmailMessage) -> SentEmail:
        if self.fail_for.intersection(message.to_emails):
            raise self.error
        self.sent.append(message)
        return SentEmail(id=f"email-{len(self.sent)}")


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
