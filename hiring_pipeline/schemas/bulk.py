"""
Pydantic schemas for recruiter bulk actions.
"""

from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class BulkMoveRequest(BaseModel):
    application_ids: List[UUID] = Field(..., min_length=1)
    target_stage: str = Field(..., min_length=1, max_length=100)


class BulkRejectRequest(BaseModel):
    application_ids: List[UUID] = Field(..., min_length=1)


class BulkRowResult(BaseModel):
    application_id: UUID
    ok: bool
    status: Optional[str] = None
    current_stage: Optional[str] = None
    error_code: Optional[str] = None
    error: Optional[str] = None


class BulkOperationResult(BaseModel):
    """Per-row results; committed rows stay committed when others fail."""

    rows: List[BulkRowResult]

    @property
    def failed_count(self) -> int:
        return sum(1 for row in self.rows if not row.ok)

    @property
    def succeeded(self) -> bool:
        return self.failed_count == 0

    def summary(self) -> dict:
        return {
            "succeeded": self.succeeded,
            "total": len(self.rows),
            "failed_count": self.failed_count,
            "rows": [row.model_dump(mode="json") for row in self.rows],
        }
