from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response, status
from src.api.deps import get_submission_service
from src.api.schemas.assessments import (
    AssessmentSubmitRequest,
    AssessmentSubmitResponse,
    ResponseShare,
    ScorePreviewRequest,
    ScorePreviewResponse,
)
from src.domain.scoring import calculate_score, maturity_band, response_distribution
from src.domain.services.submission import (
    PersistentStorageError,
    SubmissionService,
    SubmissionValidationError,
    TransientStorageError,
)

logger = structlog.get_logger()
router = APIRouter(prefix="/assessments", tags=["Assessments"])


@router.post(
    "",
    response_model=AssessmentSubmitResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        200: {"description": "Identical assessment already stored"},
        503: {"description": "Storage unavailable after retries"},
    },
)
async def submit_assessment(
    payload: AssessmentSubmitRequest,
    response: Response,
    service: SubmissionService = Depends(get_submission_service),
) -> AssessmentSubmitResponse:
    """
    Store a completed assessment.

    - The score is recomputed from the answers; the client value is a cross-check
    - An identical resubmission returns the existing record with 200
    - Notification emails are queued after the record is stored
    """
    try:
        outcome = await service.submit(payload.to_domain())
    except SubmissionValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc
    except TransientStorageError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=(
                "Your assessment could not be recorded because the database is "
                "temporarily unavailable. Please try submitting again."
            ),
        ) from exc
    except PersistentStorageError as exc:
        await logger.aerror("assessment_store_failed", error=str(exc))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to store assessment. Please contact support.",
        ) from exc

    record = outcome.record
    if outcome.created:
        message = "Assessment stored successfully"
    else:
        response.status_code = status.HTTP_200_OK
        message = "Assessment already submitted for this environment with identical data"

    return AssessmentSubmitResponse(
        status=outcome.status.value,
        message=message,
        assessment_id=outcome.assessment_id,
        score=record["score"],
        total_questions=record["total_questions"],
        completed_questions=record["completed_questions"],
        selected_categories=len(record["selected_categories"]),
        selected_areas=len(record["selected_areas"]),
    )


@router.post("/score", response_model=ScorePreviewResponse)
async def preview_score(payload: ScorePreviewRequest) -> ScorePreviewResponse:
    """Score an answer set without storing anything."""
    result = calculate_score(payload.answers)
    return ScorePreviewResponse(
        total_answered=result.total_answered,
        scored_answers=result.scored_answers,
        raw_score=result.raw_score,
        max_possible=result.max_possible,
        percentage=result.percentage,
        maturity_band=maturity_band(result.percentage),
        response_distribution=[
            ResponseShare(**item) for item in response_distribution(payload.answers)
        ],
    )
