"""
Reward ledger.

The transition engine only needs a one-way ``credit`` call. SqlRewardLedger
is the in-database implementation; it writes through the caller's session so
the credit commits or rolls back together with the stage change.
"""

import logging
from typing import List, Optional, Protocol
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from hiring_pipeline.core.config import settings
from hiring_pipeline.models.reward import RewardAccount, RewardCredit
from hiring_pipeline.repositories.reward_repository import RewardRepository

logger = logging.getLogger(__name__)


class RewardLedger(Protocol):
    async def credit(
        self,
        student_id: UUID,
        points: int,
        *,
        application_id: Optional[UUID] = None,
        reason: Optional[str] = None,
    ) -> None:
        ...


def level_for_points(total_points: int, points_per_level: Optional[int] = None) -> int:
    step = points_per_level or settings.REWARD_POINTS_PER_LEVEL
    return 1 + max(total_points, 0) // step


class SqlRewardLedger:
    """Point totals and levels stored in reward_account / reward_credit."""

    def __init__(self, db: AsyncSession):
        self.repository = RewardRepository(db)

    async def credit(
        self,
        student_id: UUID,
        points: int,
        *,
        application_id: Optional[UUID] = None,
        reason: Optional[str] = None,
    ) -> None:
        if points <= 0:
            raise ValueError("Reward credits must be positive")

        account = await self.repository.get_or_create_account(student_id)
        account.total_points += points
        account.level = level_for_points(account.total_points)
        await self.repository.add_credit(
            student_id=student_id,
            points=points,
            application_id=application_id,
            reason=reason,
        )
        logger.info(
            "Credited %d points to student %s (total=%d, level=%d)",
            points,
            student_id,
            account.total_points,
            account.level,
        )

    async def get_account(self, student_id: UUID) -> Optional[RewardAccount]:
        return await self.repository.get_account(student_id)

    async def list_credits(self, student_id: UUID, limit: int = 50) -> List[RewardCredit]:
        return await self.repository.list_credits(student_id, limit)
