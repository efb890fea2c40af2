"""
Rewards router - read-only views of a student's reward account.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hiring_pipeline.core.dependencies import get_db
from hiring_pipeline.schemas.reward import RewardAccountRead, RewardCreditRead
from hiring_pipeline.services.reward_ledger import SqlRewardLedger

router = APIRouter(prefix="/rewards", tags=["rewards"])


@router.get("/{student_id}", response_model=RewardAccountRead)
async def get_reward_account(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Points and level; students without credits are at level 1 with 0 points."""
    account = await SqlRewardLedger(db).get_account(student_id)
    if account is None:
        return RewardAccountRead(student_id=student_id, total_points=0, level=1)
    return account


@router.get("/{student_id}/credits", response_model=List[RewardCreditRead])
async def list_reward_credits(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
    limit: int = Query(50, ge=1, le=200),
):
    """Credit journal, newest first."""
    return await SqlRewardLedger(db).list_credits(student_id, limit)
