"""
VerificationReceipt repository - lookups and inserts for processed submissions.
"""

from typing import Optional
from uuid import UUID
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hiring_pipeline.models.verification_receipt import VerificationReceipt


class VerificationReceiptRepository:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_key(self, submission_key: str) -> Optional[VerificationReceipt]:
        result = await self.db.execute(
            select(VerificationReceipt).where(VerificationReceipt.submission_key == submission_key)
        )
        return result.scalar_one_or_none()

    async def create(
        self,
        submission_key: str,
        application_id: UUID,
        milestone: str,
        accepted: bool,
        message: Optional[str],
        new_stage: Optional[str],
        points_awarded: int,
    ) -> VerificationReceipt:
        receipt = VerificationReceipt(
            id=uuid.uuid4(),
            submission_key=submission_key,
            application_id=application_id,
            milestone=milestone,
            accepted=accepted,
            message=message,
            new_stage=new_stage,
            points_awarded=points_awarded,
        )
        self.db.add(receipt)
        await self.db.flush()
        return receipt
