"""Conversions between submissions and stored assessment documents."""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Any

from src.domain.models import Submission
from src.infrastructure.db.models import AssessmentRecord

NOT_ANSWERED_LABEL = "Not answered"


def build_detailed_answers(submission: Submission) -> list[dict[str, Any]]:
    """Pair every listed question with the chosen answer and its label."""
    detailed: list[dict[str, Any]] = []
    for question in submission.question_details:
        answer_value = submission.answers.get(question.id)
        option = next((o for o in question.options if o.value == answer_value), None)
        detailed.append({
            "question_id": question.id,
            "question_text": question.text,
            "answer_value": answer_value,
            "answer_label": option.label if option else NOT_ANSWERED_LABEL,
            "category": question.category,
            "area": question.area,
            "topic": question.topic,
        })
    return detailed


def metadata_document(submission: Submission, duration_ms: int | None) -> dict[str, Any]:
    metadata = asdict(submission.metadata)
    metadata["duration_ms"] = duration_ms
    if submission.metadata.started_at is not None:
        metadata["started_at"] = submission.metadata.started_at.isoformat()
    return metadata


def record_to_dict(record: AssessmentRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "submission_id": record.submission_id,
        "respondent": record.respondent,
        "environment": record.environment,
        "answers": record.answers,
        "selected_categories": record.selected_categories,
        "selected_areas": record.selected_areas,
        "score": record.score,
        "client_score": record.client_score,
        "total_questions": record.total_questions,
        "completed_questions": record.completed_questions,
        "language": record.language,
        "metadata": record.metadata_ or {},
        "detailed_answers": record.detailed_answers or [],
        "created_at": _isoformat(record.created_at),
        "updated_at": _isoformat(record.updated_at),
    }


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None
