"""
Pipeline definition service.

Resolves an opportunity's ordered stages and maps stages to application
statuses. Stage kinds are stored next to each label; when a stage is
configured without one, the kind is inferred once from the label using the
keyword table below, so unconfigured pipelines keep the historical
label-driven statuses.

Keyword table (case-insensitive substring, first match wins):

    "offer"                      -> offer      -> offered
    "interview" / "assessment"   -> interview / assessment -> shortlisted
    "hired"                      -> terminal   -> hired
    anything else                -> intake     -> verified

Keyword inference misreads labels such as "Pre-Offer Screening" (offer).
Recruiters fix that by configuring an explicit kind for the stage.
"""

from datetime import datetime, timezone
from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from hiring_pipeline.errors import (
    DuplicateStageError,
    OpportunityNotFoundError,
    PipelineLockedError,
)
from hiring_pipeline.models.enums import ApplicationStatus, StageKind
from hiring_pipeline.models.opportunity import Opportunity
from hiring_pipeline.repositories.application_repository import ApplicationRepository
from hiring_pipeline.repositories.opportunity_repository import OpportunityRepository
from hiring_pipeline.schemas.opportunity import (
    OpportunityCreate,
    PipelineStageRead,
    StageInput,
    StageSpec,
    coerce_stage_specs,
)

DEFAULT_PIPELINE: tuple[str, ...] = ("Applied", "Verification", "Assessment", "Interview", "Offer")

_STATUS_BY_KIND = {
    StageKind.OFFER: ApplicationStatus.OFFERED,
    StageKind.INTERVIEW: ApplicationStatus.SHORTLISTED,
    StageKind.ASSESSMENT: ApplicationStatus.SHORTLISTED,
    StageKind.TERMINAL: ApplicationStatus.HIRED,
    StageKind.INTAKE: ApplicationStatus.VERIFIED,
}


def derive_stage_kind(label: str) -> StageKind:
    """Infer a stage kind from its label."""
    lowered = label.lower()
    if "offer" in lowered:
        return StageKind.OFFER
    if "interview" in lowered:
        return StageKind.INTERVIEW
    if "assessment" in lowered:
        return StageKind.ASSESSMENT
    if "hired" in lowered:
        return StageKind.TERMINAL
    return StageKind.INTAKE


def status_for_kind(kind: StageKind) -> ApplicationStatus:
    """Status an application takes on when it advances into a stage of this kind."""
    return _STATUS_BY_KIND[StageKind(kind)]


def bulk_status_for_kind(kind: StageKind) -> ApplicationStatus:
    """Recruiter moves default to shortlisted where verification would say verified."""
    status = status_for_kind(kind)
    if status == ApplicationStatus.VERIFIED:
        return ApplicationStatus.SHORTLISTED
    return status


def default_stages() -> List[PipelineStageRead]:
    return [
        PipelineStageRead(id=None, label=label, kind=derive_stage_kind(label), position=index)
        for index, label in enumerate(DEFAULT_PIPELINE)
    ]


def _normalize_label(label: str) -> str:
    return label.strip().lower()


def find_stage_index(stages: Sequence[PipelineStageRead], label: str) -> Optional[int]:
    """Case-insensitive exact label match; None when the label is not in the pipeline."""
    target = _normalize_label(label)
    for index, stage in enumerate(stages):
        if _normalize_label(stage.label) == target:
            return index
    return None


def _stage_reads(opportunity: Opportunity) -> List[PipelineStageRead]:
    return [
        PipelineStageRead(
            id=stage.id,
            label=stage.label,
            kind=StageKind(stage.kind),
            position=stage.position,
        )
        for stage in sorted(opportunity.stages, key=lambda s: s.position)
    ]


def _check_duplicates(labels: Sequence[str]) -> None:
    seen: set[str] = set()
    for label in labels:
        key = _normalize_label(label)
        if key in seen:
            raise DuplicateStageError(
                f"Stage '{label}' appears more than once",
                {"stage": label},
            )
        seen.add(key)


class PipelineService:
    """Read and append-only write access to opportunity pipelines."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repository = OpportunityRepository(db)

    async def get_opportunity(self, opportunity_id: UUID) -> Opportunity:
        opportunity = await self.repository.get_by_id(opportunity_id)
        if opportunity is None:
            raise OpportunityNotFoundError(opportunity_id)
        return opportunity

    async def resolve_stages(self, opportunity_id: UUID) -> List[PipelineStageRead]:
        """Ordered stages of the opportunity, or the default pipeline when none are set."""
        opportunity = await self.get_opportunity(opportunity_id)
        stages = _stage_reads(opportunity)
        return stages or default_stages()

    async def create_opportunity(self, data: OpportunityCreate) -> Opportunity:
        opportunity = await self.repository.create(data.title, data.employer_name)
        if data.stages:
            await self._write_stages(opportunity, coerce_stage_specs(data.stages), start=0)
        return opportunity

    async def replace_stages(self, opportunity_id: UUID, stages: List[StageInput]) -> List[PipelineStageRead]:
        """Swap the whole stage list. Only allowed before publication and before any application exists."""
        opportunity = await self.get_opportunity(opportunity_id)
        if opportunity.is_published:
            raise PipelineLockedError(
                "Stages of a published opportunity can only be appended",
                {"opportunity_id": str(opportunity_id)},
            )
        in_flight = await ApplicationRepository(self.db).count_by_opportunity(opportunity_id)
        if in_flight:
            # Existing applications point at the current labels
            raise PipelineLockedError(
                "Stages of an opportunity with applications can only be appended",
                {"opportunity_id": str(opportunity_id), "applications": in_flight},
            )
        specs = coerce_stage_specs(stages)
        _check_duplicates([spec.label for spec in specs])
        await self.repository.clear_stages(opportunity)
        await self._write_stages(opportunity, specs, start=0)
        return _stage_reads(opportunity)

    async def append_stage(self, opportunity_id: UUID, spec: StageSpec) -> PipelineStageRead:
        """Add a stage at the end of the pipeline. Allowed at any time."""
        opportunity = await self.get_opportunity(opportunity_id)
        existing = _stage_reads(opportunity)
        if not existing:
            # Materialize the implicit default list first so positions stay meaningful
            await self._write_stages(
                opportunity,
                [StageSpec(label=stage.label, kind=stage.kind) for stage in default_stages()],
                start=0,
            )
            existing = _stage_reads(opportunity)
        _check_duplicates([stage.label for stage in existing] + [spec.label])
        kind = spec.kind or derive_stage_kind(spec.label)
        stage = await self.repository.add_stage(
            opportunity,
            label=spec.label,
            kind=kind.value,
            position=len(existing),
        )
        return PipelineStageRead(id=stage.id, label=stage.label, kind=kind, position=stage.position)

    async def publish(self, opportunity_id: UUID) -> Opportunity:
        opportunity = await self.get_opportunity(opportunity_id)
        if opportunity.published_at is None:
            opportunity.published_at = datetime.now(timezone.utc)
            await self.db.flush()
            await self.db.refresh(opportunity)
        return opportunity

    async def _write_stages(self, opportunity: Opportunity, specs: List[StageSpec], start: int) -> None:
        _check_duplicates([spec.label for spec in specs])
        for offset, spec in enumerate(specs):
            kind = spec.kind or derive_stage_kind(spec.label)
            await self.repository.add_stage(
                opportunity,
                label=spec.label,
                kind=kind.value,
                position=start + offset,
            )
