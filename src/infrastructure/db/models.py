from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import (
    JSON,
    DateTime,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


def _utcnow() -> datetime:
    return datetime.now(UTC)


class AssessmentRecord(Base):
    """A persisted submission.

    Nested parts of the submission are kept as JSON documents; the columns
    used for duplicate detection and admin filtering are flattened out.
    """

    __tablename__ = "assessments"
    __table_args__ = (
        UniqueConstraint(
            "email",
            "environment_name",
            "score",
            "total_questions",
            "completed_questions",
            name="uq_assessments_outcome",
        ),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    submission_id: Mapped[str] = mapped_column(String(512), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    environment_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    client_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    total_questions: Mapped[int] = mapped_column(Integer, nullable=False)
    completed_questions: Mapped[int] = mapped_column(Integer, nullable=False)
    language: Mapped[str] = mapped_column(String(8), nullable=False, default="en")

    respondent: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    environment: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    answers: Mapped[dict[str, str]] = mapped_column(JSON, nullable=False)
    selected_categories: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    selected_areas: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    metadata_: Mapped[dict[str, Any] | None] = mapped_column("metadata", JSON)
    question_details: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON)
    detailed_answers: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        server_default=func.now(),
        nullable=False,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return (
            f"<AssessmentRecord(id={self.id}, email={self.email}, "
            f"environment={self.environment_name}, score={self.score})>"
        )


class AdminUserModel(Base):
    """Administrator account allowed to browse and delete assessments."""

    __tablename__ = "admin_users"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<AdminUserModel(id={self.id}, email={self.email})>"
