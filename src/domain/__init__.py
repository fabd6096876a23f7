"""Domain layer: submission models, scoring and services."""

from src.domain.models import (
    AdminUser,
    DeleteOutcome,
    DuplicateKey,
    EnvironmentDescriptor,
    QuestionDetail,
    QuestionOption,
    Respondent,
    Submission,
    SubmissionMetadata,
    SubmitOutcome,
    SubmitStatus,
)

__all__ = [
    "AdminUser",
    "DeleteOutcome",
    "DuplicateKey",
    "EnvironmentDescriptor",
    "QuestionDetail",
    "QuestionOption",
    "Respondent",
    "Submission",
    "SubmissionMetadata",
    "SubmitOutcome",
    "SubmitStatus",
]
