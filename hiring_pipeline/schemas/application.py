"""
Pydantic schemas for applications, evidence submissions and transitions.
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from hiring_pipeline.models.enums import ApplicationStatus
from hiring_pipeline.schemas.base import TimestampedRead


class ApplicationCreate(BaseModel):
    student_id: UUID
    opportunity_id: UUID


class ApplicationRead(TimestampedRead):
    student_id: UUID
    opportunity_id: UUID
    status: ApplicationStatus
    current_stage: str
    current_stage_id: Optional[UUID] = None
    rejection_reason: Optional[str] = None


class EvidenceSubmission(BaseModel):
    """Everything a candidate sends when claiming a milestone."""

    media_type: Optional[str] = None
    evidence: bytes = b""
    milestone: str = Field(..., min_length=1, max_length=100)
    employer_name: Optional[str] = None
    application_id: UUID
    student_id: UUID


class TransitionResult(BaseModel):
    """Outcome of the stage transition engine for one call."""

    accepted: bool
    new_stage: Optional[str] = None
    new_status: Optional[ApplicationStatus] = None
    points_awarded: int = 0
    advanced: bool = False
    # Set when an accepted verification could not be applied to the record
    warning: Optional[str] = None


class SubmissionResult(BaseModel):
    """What the candidate sees after submitting evidence."""

    success: bool
    message: str
    new_stage: Optional[str] = None
    new_status: Optional[ApplicationStatus] = None
    points_awarded: int = 0
    warning: Optional[str] = None
    replayed: bool = False
