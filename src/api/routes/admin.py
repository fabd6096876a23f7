from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from src.api.deps import get_current_admin, get_db_session
from src.api.schemas.admin import (
    AssessmentItem,
    AssessmentListResponse,
    DeleteAssessmentResponse,
)
from src.domain import AdminUser, DeleteOutcome
from src.domain.services.admin import (
    AdminAssessmentService,
    AssessmentNotFoundError,
    InvalidAssessmentIdError,
)
from src.infrastructure.repositories.submissions import (
    StorageError,
    StorageUnavailableError,
    SubmissionRepository,
)

router = APIRouter(prefix="/admin/assessments", tags=["Admin"])


def _service(session: AsyncSession) -> AdminAssessmentService:
    return AdminAssessmentService(SubmissionRepository(session))


def _storage_http_error(exc: StorageError) -> HTTPException:
    if isinstance(exc, StorageUnavailableError):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Database unavailable"
        )
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error retrieving assessments"
    )


@router.get("", response_model=AssessmentListResponse)
async def list_assessments(
    limit: int = Query(10, ge=1, le=100),
    skip: int = Query(0, ge=0),
    email: str | None = Query(None, description="Case-insensitive substring match"),
    environment_name: str | None = Query(None, description="Case-insensitive substring match"),
    date_from: datetime | None = Query(None),
    date_to: datetime | None = Query(None),
    session: AsyncSession = Depends(get_db_session),
    _: AdminUser = Depends(get_current_admin),
) -> AssessmentListResponse:
    """Page through stored assessments, newest first, with score statistics."""
    try:
        result = await _service(session).list_assessments(
            limit=limit,
            skip=skip,
            email=email,
            environment_name=environment_name,
            date_from=date_from,
            date_to=date_to,
        )
    except StorageError as exc:
        raise _storage_http_error(exc) from exc

    return AssessmentListResponse(**result)


@router.get("/{assessment_id}", response_model=AssessmentItem)
async def get_assessment(
    assessment_id: str,
    session: AsyncSession = Depends(get_db_session),
    _: AdminUser = Depends(get_current_admin),
) -> AssessmentItem:
    try:
        record = await _service(session).get_assessment(assessment_id)
    except InvalidAssessmentIdError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except AssessmentNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except StorageError as exc:
        raise _storage_http_error(exc) from exc

    return AssessmentItem(**record)


@router.delete(
    "/{assessment_id}",
    response_model=DeleteAssessmentResponse,
    responses={404: {"description": "Assessment not found"}},
)
async def delete_assessment(
    assessment_id: str,
    session: AsyncSession = Depends(get_db_session),
    _: AdminUser = Depends(get_current_admin),
) -> DeleteAssessmentResponse | JSONResponse:
    """Permanently delete an assessment. Deleting an absent id changes nothing."""
    try:
        outcome = await _service(session).delete_assessment(assessment_id)
    except InvalidAssessmentIdError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except StorageError as exc:
        raise _storage_http_error(exc) from exc

    if outcome is DeleteOutcome.NOT_FOUND:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"message": "Assessment not found", "deleted_count": 0},
        )

    return DeleteAssessmentResponse(message="Assessment deleted successfully", deleted_count=1)
