"""
Application business logic service.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from hiring_pipeline.errors import ApplicationNotFoundError
from hiring_pipeline.models.application import Application
from hiring_pipeline.repositories.application_repository import ApplicationRepository
from hiring_pipeline.schemas.application import ApplicationCreate
from hiring_pipeline.services.pipeline_service import PipelineService


class ApplicationService:
    """Service for application lifecycle entry points."""

    def __init__(self, db: AsyncSession):
        self.repository = ApplicationRepository(db)
        self.pipeline = PipelineService(db)

    async def create_application(self, data: ApplicationCreate) -> Application:
        """New applications start at the entry stage with status applied."""
        stages = await self.pipeline.resolve_stages(data.opportunity_id)
        entry = stages[0]
        return await self.repository.create(
            student_id=data.student_id,
            opportunity_id=data.opportunity_id,
            current_stage=entry.label,
            current_stage_id=entry.id,
        )

    async def get_application(self, application_id: UUID) -> Application:
        application = await self.repository.get_by_id(application_id)
        if application is None:
            raise ApplicationNotFoundError(application_id)
        return application

    async def list_for_opportunity(
        self,
        opportunity_id: UUID,
        limit: int = 50,
        offset: int = 0,
        status: Optional[str] = None,
    ) -> List[Application]:
        await self.pipeline.get_opportunity(opportunity_id)
        return await self.repository.list_by_opportunity(opportunity_id, limit, offset, status)
