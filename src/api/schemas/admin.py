from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class AssessmentItem(BaseModel):
    id: str
    submission_id: str
    respondent: dict[str, Any]
    environment: dict[str, Any]
    answers: dict[str, str]
    selected_categories: list[str]
    selected_areas: list[str]
    score: int
    client_score: int | None = None
    total_questions: int
    completed_questions: int
    language: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    detailed_answers: list[dict[str, Any]] = Field(default_factory=list)
    created_at: str | None = None
    updated_at: str | None = None


class Pagination(BaseModel):
    total: int
    limit: int
    skip: int
    has_more: bool


class ScoreStatistics(BaseModel):
    total_assessments: int = 0
    average_score: float = 0.0
    min_score: int = 0
    max_score: int = 0


class AssessmentListResponse(BaseModel):
    assessments: list[AssessmentItem]
    pagination: Pagination
    statistics: ScoreStatistics


class DeleteAssessmentResponse(BaseModel):
    message: str
    deleted_count: int
