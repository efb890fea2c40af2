"""
Application router - applications, evidence submission and bulk actions.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hiring_pipeline.core.config import settings
from hiring_pipeline.core.dependencies import get_db, get_session_factory, get_verification_service
from hiring_pipeline.errors import raise_app_error
from hiring_pipeline.schemas.application import (
    ApplicationCreate,
    ApplicationRead,
    EvidenceSubmission,
    SubmissionResult,
)
from hiring_pipeline.schemas.bulk import BulkMoveRequest, BulkOperationResult, BulkRejectRequest
from hiring_pipeline.services.application_service import ApplicationService
from hiring_pipeline.services.bulk_operations_service import BulkOperationsService
from hiring_pipeline.services.evidence_submission_service import EvidenceSubmissionService
from hiring_pipeline.services.verification_service import VerificationService

router = APIRouter(prefix="/applications", tags=["applications"])


def _check_bulk_size(application_ids: List[UUID]) -> None:
    if len(application_ids) > settings.BULK_MAX_ROWS:
        raise_app_error(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "bulk_too_large",
            "Too many applications in one bulk request",
            {"max_rows": settings.BULK_MAX_ROWS, "received": len(application_ids)},
        )


def _bulk_response(result: BulkOperationResult) -> JSONResponse:
    status_code = status.HTTP_200_OK if result.succeeded else status.HTTP_207_MULTI_STATUS
    return JSONResponse(status_code=status_code, content=result.summary())


@router.post("", response_model=ApplicationRead, status_code=status.HTTP_201_CREATED)
async def create_application(
    data: ApplicationCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create an application at the opportunity's entry stage."""
    application = await ApplicationService(db).create_application(data)
    await db.commit()
    return application


@router.get("/by-opportunity/{opportunity_id}", response_model=List[ApplicationRead])
async def list_applications(
    opportunity_id: UUID,
    db: AsyncSession = Depends(get_db),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    status: Optional[str] = None,
):
    """List applications for an opportunity with pagination and a status filter."""
    return await ApplicationService(db).list_for_opportunity(
        opportunity_id,
        limit=limit,
        offset=offset,
        status=status,
    )


@router.get("/{application_id}", response_model=ApplicationRead)
async def get_application(
    application_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Get an application by ID."""
    return await ApplicationService(db).get_application(application_id)


@router.post("/{application_id}/evidence", response_model=SubmissionResult)
async def submit_evidence(
    application_id: UUID,
    milestone: str = Form(..., min_length=1, max_length=100),
    student_id: UUID = Form(...),
    employer_name: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    verifier: VerificationService = Depends(get_verification_service),
):
    """
    Submit proof of reaching a milestone.

    Classifier failures come back as success=false with a generic message;
    a missing or empty file is a 400.
    """
    content = await file.read() if file is not None else b""
    submission = EvidenceSubmission(
        media_type=file.content_type if file is not None else None,
        evidence=content,
        milestone=milestone,
        employer_name=employer_name,
        application_id=application_id,
        student_id=student_id,
    )
    return await EvidenceSubmissionService(db, verifier).submit(submission)


@router.post("/bulk/move")
async def bulk_move(
    request: BulkMoveRequest,
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    """
    Move applications to a stage of their own pipeline.

    Rows are independent: 207 with per-row results when any row failed.
    """
    _check_bulk_size(request.application_ids)
    service = BulkOperationsService(session_factory)
    result = await service.bulk_move(request.application_ids, request.target_stage)
    return _bulk_response(result)


@router.post("/bulk/reject")
async def bulk_reject(
    request: BulkRejectRequest,
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    """Reject applications. Rows are independent, as for bulk move."""
    _check_bulk_size(request.application_ids)
    service = BulkOperationsService(session_factory)
    result = await service.bulk_reject(request.application_ids)
    return _bulk_response(result)
