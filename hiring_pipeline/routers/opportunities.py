"""
Opportunity router - pipeline configuration endpoints.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from hiring_pipeline.core.dependencies import get_db
from hiring_pipeline.models.opportunity import Opportunity
from hiring_pipeline.schemas.opportunity import (
    OpportunityCreate,
    OpportunityRead,
    PipelineStageRead,
    StageAppend,
    StagesReplace,
)
from hiring_pipeline.services.pipeline_service import PipelineService

router = APIRouter(prefix="/opportunities", tags=["opportunities"])


def _opportunity_read(opportunity: Opportunity, stages: List[PipelineStageRead]) -> OpportunityRead:
    return OpportunityRead(
        id=opportunity.id,
        created_at=opportunity.created_at,
        updated_at=opportunity.updated_at,
        title=opportunity.title,
        employer_name=opportunity.employer_name,
        published_at=opportunity.published_at,
        stages=stages,
    )


@router.post("", response_model=OpportunityRead, status_code=status.HTTP_201_CREATED)
async def create_opportunity(
    data: OpportunityCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    Create an opportunity.

    Without stages, the opportunity uses the default pipeline
    (Applied, Verification, Assessment, Interview, Offer).
    """
    service = PipelineService(db)
    opportunity = await service.create_opportunity(data)
    stages = await service.resolve_stages(opportunity.id)
    await db.commit()
    return _opportunity_read(opportunity, stages)


@router.get("/{opportunity_id}", response_model=OpportunityRead)
async def get_opportunity(
    opportunity_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Get an opportunity with its resolved stages."""
    service = PipelineService(db)
    opportunity = await service.get_opportunity(opportunity_id)
    stages = await service.resolve_stages(opportunity_id)
    return _opportunity_read(opportunity, stages)


@router.get("/{opportunity_id}/stages", response_model=List[PipelineStageRead])
async def list_stages(
    opportunity_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Ordered stages; the default pipeline when none are configured."""
    return await PipelineService(db).resolve_stages(opportunity_id)


@router.put("/{opportunity_id}/stages", response_model=List[PipelineStageRead])
async def replace_stages(
    opportunity_id: UUID,
    data: StagesReplace,
    db: AsyncSession = Depends(get_db),
):
    """Replace the stage list. Rejected with 409 once the opportunity is published."""
    stages = await PipelineService(db).replace_stages(opportunity_id, data.stages)
    await db.commit()
    return stages


@router.post(
    "/{opportunity_id}/stages",
    response_model=PipelineStageRead,
    status_code=status.HTTP_201_CREATED,
)
async def append_stage(
    opportunity_id: UUID,
    data: StageAppend,
    db: AsyncSession = Depends(get_db),
):
    """Append a stage at the end of the pipeline."""
    stage = await PipelineService(db).append_stage(opportunity_id, data)
    await db.commit()
    return stage


@router.post("/{opportunity_id}/publish", response_model=OpportunityRead)
async def publish_opportunity(
    opportunity_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Publish the opportunity. Stages become append-only afterwards."""
    service = PipelineService(db)
    opportunity = await service.publish(opportunity_id)
    stages = await service.resolve_stages(opportunity_id)
    await db.commit()
    return _opportunity_read(opportunity, stages)
