"""
Pydantic schemas for reward accounts.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class RewardAccountRead(BaseModel):
    student_id: UUID
    total_points: int
    level: int

    model_config = ConfigDict(from_attributes=True)


class RewardCreditRead(BaseModel):
    points: int
    application_id: Optional[UUID] = None
    reason: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
