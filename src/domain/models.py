from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(slots=True)
class AdminUser:
    """Represents an authenticated administrator."""

    user_id: str
    email: str = ""
    roles: list[str] = field(default_factory=list)


@dataclass(slots=True)
class Respondent:
    """The person who filled in the questionnaire."""

    name: str
    email: str
    role: str = ""
    country: str = ""
    market_sector: str = ""
    date: str = ""

    @property
    def first_name(self) -> str:
        parts = self.name.split()
        return parts[0] if parts else ""


@dataclass(slots=True)
class EnvironmentDescriptor:
    """The system or organisational unit being assessed."""

    unique_name: str
    type: str = ""
    size: str = ""
    importance: str = ""
    maturity: str = ""


@dataclass(slots=True)
class QuestionOption:
    value: str
    label: str
    score: int | None = None


@dataclass(slots=True)
class QuestionDetail:
    id: str
    text: str = ""
    category: str = ""
    area: str = ""
    topic: str = ""
    options: list[QuestionOption] = field(default_factory=list)


@dataclass(slots=True)
class SubmissionMetadata:
    """Client descriptors; informational only."""

    language: str = "en"
    assessment_date: str | None = None
    duration_ms: int | None = None
    user_agent: str = ""
    screen_resolution: str = ""
    started_at: datetime | None = None


@dataclass(slots=True)
class Submission:
    """One completed assessment attempt as sent by the questionnaire UI."""

    respondent: Respondent
    environment: EnvironmentDescriptor
    answers: dict[str, str] = field(default_factory=dict)
    selected_categories: list[str] = field(default_factory=list)
    selected_areas: list[str] = field(default_factory=list)
    total_questions: int = 0
    completed_questions: int = 0
    score: int | None = None
    metadata: SubmissionMetadata = field(default_factory=SubmissionMetadata)
    question_details: list[QuestionDetail] = field(default_factory=list)
    language: str = "en"


@dataclass(frozen=True, slots=True)
class DuplicateKey:
    """Identity + outcome tuple two submissions must share to be duplicates."""

    email: str
    environment_name: str
    score: int
    total_questions: int
    completed_questions: int


class SubmitStatus(str, enum.Enum):
    CREATED = "created"
    ALREADY_EXISTS = "already_exists"


@dataclass(slots=True)
class SubmitOutcome:
    status: SubmitStatus
    assessment_id: str
    record: dict[str, Any]

    @property
    def created(self) -> bool:
        return self.status is SubmitStatus.CREATED


class DeleteOutcome(str, enum.Enum):
    DELETED = "deleted"
    NOT_FOUND = "not_found"
