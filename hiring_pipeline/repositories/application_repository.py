"""
Application repository - database operations for Application.
"""

from typing import Any, List, Optional
from uuid import UUID
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from hiring_pipeline.models.application import Application
from hiring_pipeline.models.enums import ApplicationStatus


class ApplicationRepository:
    """Repository for Application database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, application_id: UUID) -> Optional[Application]:
        """Get an application by ID."""
        result = await self.db.execute(
            select(Application).where(Application.id == application_id)
        )
        return result.scalar_one_or_none()

    async def list_by_opportunity(
        self,
        opportunity_id: UUID,
        limit: int = 50,
        offset: int = 0,
        status: Optional[str] = None,
    ) -> List[Application]:
        """List applications for an opportunity, newest first."""
        query = select(Application).where(Application.opportunity_id == opportunity_id)
        if status is not None:
            query = query.where(Application.status == status)
        query = query.order_by(Application.created_at.desc()).limit(limit).offset(offset)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def count_by_opportunity(self, opportunity_id: UUID) -> int:
        """Number of applications tracked against an opportunity."""
        result = await self.db.execute(
            select(func.count()).select_from(Application).where(Application.opportunity_id == opportunity_id)
        )
        return result.scalar_one()

    async def create(
        self,
        student_id: UUID,
        opportunity_id: UUID,
        current_stage: str,
        current_stage_id: Optional[UUID],
    ) -> Application:
        """Create a new application at the entry stage."""
        application = Application(
            id=uuid.uuid4(),
            student_id=student_id,
            opportunity_id=opportunity_id,
            status=ApplicationStatus.APPLIED.value,
            current_stage=current_stage,
            current_stage_id=current_stage_id,
        )
        self.db.add(application)
        await self.db.flush()
        await self.db.refresh(application)
        return application

    async def apply_changes(self, application: Application, **changes: Any) -> Application:
        """Write the given columns to an already-loaded application."""
        for field, value in changes.items():
            setattr(application, field, value)
        application.updated_at = func.now()
        await self.db.flush()
        await self.db.refresh(application)
        return application
