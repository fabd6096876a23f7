"""Domain services."""

from src.domain.services.admin import AdminAssessmentService
from src.domain.services.duplicates import DuplicateDetector
from src.domain.services.notifications import NotificationService
from src.domain.services.submission import (
    PersistentStorageError,
    RetryPolicy,
    SubmissionService,
    SubmissionValidationError,
    TransientStorageError,
)

__all__ = [
    "AdminAssessmentService",
    "DuplicateDetector",
    "NotificationService",
    "PersistentStorageError",
    "RetryPolicy",
    "SubmissionService",
    "SubmissionValidationError",
    "TransientStorageError",
]
