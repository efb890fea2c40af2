"""
Opportunity repository - database operations for opportunities and stages.
"""

from typing import Optional
from uuid import UUID
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hiring_pipeline.models.opportunity import Opportunity, PipelineStage


class OpportunityRepository:
    """Repository for Opportunity and PipelineStage database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, opportunity_id: UUID) -> Optional[Opportunity]:
        """Get an opportunity by ID (stages are eager-loaded)."""
        result = await self.db.execute(
            select(Opportunity).where(Opportunity.id == opportunity_id)
        )
        return result.scalar_one_or_none()

    async def create(self, title: str, employer_name: str) -> Opportunity:
        opportunity = Opportunity(
            id=uuid.uuid4(),
            title=title,
            employer_name=employer_name,
            stages=[],
        )
        self.db.add(opportunity)
        await self.db.flush()
        return opportunity

    async def add_stage(
        self,
        opportunity: Opportunity,
        label: str,
        kind: str,
        position: int,
    ) -> PipelineStage:
        stage = PipelineStage(
            id=uuid.uuid4(),
            opportunity_id=opportunity.id,
            label=label,
            kind=kind,
            position=position,
        )
        opportunity.stages.append(stage)
        await self.db.flush()
        return stage

    async def clear_stages(self, opportunity: Opportunity) -> None:
        """Remove every stage (only valid before publication)."""
        opportunity.stages.clear()
        await self.db.flush()
