from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from src.domain.models import (
    EnvironmentDescriptor,
    QuestionDetail,
    QuestionOption,
    Respondent,
    Submission,
    SubmissionMetadata,
)


class RespondentPayload(BaseModel):
    name: str = Field("", max_length=256)
    email: str = Field("", max_length=255, description="Respondent email (required)")
    role: str = ""
    country: str = ""
    market_sector: str = ""
    date: str = ""


class EnvironmentPayload(BaseModel):
    unique_name: str = Field("", max_length=255, description="Identifies the assessed environment")
    type: str = ""
    size: str = ""
    importance: str = ""
    maturity: str = ""


class QuestionOptionPayload(BaseModel):
    value: str
    label: str
    score: int | None = None


class QuestionDetailPayload(BaseModel):
    id: str
    text: str = ""
    category: str = ""
    area: str = ""
    topic: str = ""
    options: list[QuestionOptionPayload] = Field(default_factory=list)


class MetadataPayload(BaseModel):
    language: str = "en"
    assessment_date: str | None = None
    duration_ms: int | None = Field(None, ge=0)
    user_agent: str = ""
    screen_resolution: str = ""
    started_at: datetime | None = Field(None, description="When the respondent started")


class AssessmentSubmitRequest(BaseModel):
    respondent: RespondentPayload
    environment: EnvironmentPayload
    answers: dict[str, str] = Field(default_factory=dict)
    selected_categories: list[str] = Field(default_factory=list)
    selected_areas: list[str] = Field(default_factory=list)
    score: int | None = Field(
        None, ge=0, le=100, description="Client-computed score, used only as a cross-check"
    )
    total_questions: int = Field(0, ge=0)
    completed_questions: int = Field(0, ge=0)
    metadata: MetadataPayload = Field(default_factory=MetadataPayload)
    question_details: list[QuestionDetailPayload] = Field(default_factory=list)
    language: Literal["en", "fr"] = "en"

    @field_validator("answers", mode="before")
    @classmethod
    def _stringify_answers(cls, value: object) -> object:
        if isinstance(value, dict):
            return {str(k): str(v) for k, v in value.items()}
        return value

    def to_domain(self) -> Submission:
        return Submission(
            respondent=Respondent(**self.respondent.model_dump()),
            environment=EnvironmentDescriptor(**self.environment.model_dump()),
            answers=dict(self.answers),
            selected_categories=list(self.selected_categories),
            selected_areas=list(self.selected_areas),
            total_questions=self.total_questions,
            completed_questions=self.completed_questions,
            score=self.score,
            metadata=SubmissionMetadata(**self.metadata.model_dump()),
            question_details=[
                QuestionDetail(
                    id=q.id,
                    text=q.text,
                    category=q.category,
                    area=q.area,
                    topic=q.topic,
                    options=[QuestionOption(**o.model_dump()) for o in q.options],
                )
                for q in self.question_details
            ],
            language=self.language,
        )


class AssessmentSubmitResponse(BaseModel):
    status: Literal["created", "already_exists"]
    message: str
    assessment_id: str
    score: int
    total_questions: int
    completed_questions: int
    selected_categories: int
    selected_areas: int


class ScorePreviewRequest(BaseModel):
    answers: dict[str, str] = Field(default_factory=dict)

    @field_validator("answers", mode="before")
    @classmethod
    def _stringify_answers(cls, value: object) -> object:
        if isinstance(value, dict):
            return {str(k): str(v) for k, v in value.items()}
        return value


class ResponseShare(BaseModel):
    code: str
    count: int
    percentage: float


class ScorePreviewResponse(BaseModel):
    total_answered: int
    scored_answers: int
    raw_score: int
    max_possible: int
    percentage: int
    maturity_band: str
    response_distribution: list[ResponseShare]
