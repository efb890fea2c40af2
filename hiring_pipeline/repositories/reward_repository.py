"""
Reward repository - accounts and the credit journal.
"""

from typing import List, Optional
from uuid import UUID
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hiring_pipeline.models.reward import RewardAccount, RewardCredit


class RewardRepository:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_account(self, student_id: UUID) -> Optional[RewardAccount]:
        result = await self.db.execute(
            select(RewardAccount).where(RewardAccount.student_id == student_id)
        )
        return result.scalar_one_or_none()

    async def get_or_create_account(self, student_id: UUID) -> RewardAccount:
        account = await self.get_account(student_id)
        if account is None:
            account = RewardAccount(
                id=uuid.uuid4(),
                student_id=student_id,
                total_points=0,
                level=1,
            )
            self.db.add(account)
            await self.db.flush()
        return account

    async def add_credit(
        self,
        student_id: UUID,
        points: int,
        application_id: Optional[UUID] = None,
        reason: Optional[str] = None,
    ) -> RewardCredit:
        credit = RewardCredit(
            id=uuid.uuid4(),
            student_id=student_id,
            points=points,
            application_id=application_id,
            reason=reason,
        )
        self.db.add(credit)
        await self.db.flush()
        return credit

    async def list_credits(self, student_id: UUID, limit: int = 50) -> List[RewardCredit]:
        result = await self.db.execute(
            select(RewardCredit)
            .where(RewardCredit.student_id == student_id)
            .order_by(RewardCredit.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
