"""
Stage transition engine.

Applies a verification decision to an application: a reject resets the
record to ``applied`` with the reason, an accept moves it to the stage after
the claimed milestone and credits reward points.

The stage write and the credit form one unit of work. If the ledger call
fails, the previous stage/status is written back before the error is raised,
and callers roll back their transaction.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hiring_pipeline.core.config import settings
from hiring_pipeline.errors import (
    ApplicationNotFoundError,
    OpportunityNotFoundError,
    RewardCreditError,
    TerminalStateError,
)
from hiring_pipeline.models.application import Application
from hiring_pipeline.models.enums import TERMINAL_STATUSES, ApplicationStatus
from hiring_pipeline.repositories.application_repository import ApplicationRepository
from hiring_pipeline.schemas.application import TransitionResult
from hiring_pipeline.services.pipeline_service import (
    PipelineService,
    find_stage_index,
    status_for_kind,
)
from hiring_pipeline.services.reward_ledger import RewardLedger, SqlRewardLedger
from hiring_pipeline.services.verification_service import DEFAULT_REJECT_MESSAGE

logger = logging.getLogger(__name__)

STAGE_LOOKUP_FAILED = "stage_lookup_failed"
MILESTONE_NOT_IN_PIPELINE = "milestone_not_in_pipeline"


def points_for_status(status: ApplicationStatus) -> int:
    if status == ApplicationStatus.OFFERED:
        return settings.REWARD_POINTS_OFFER
    return settings.REWARD_POINTS_STANDARD


def _snapshot(application: Application) -> dict:
    return {
        "status": application.status,
        "current_stage": application.current_stage,
        "current_stage_id": application.current_stage_id,
        "rejection_reason": application.rejection_reason,
    }


class StageTransitionService:
    """Moves applications along their pipeline after a verification decision."""

    def __init__(
        self,
        db: AsyncSession,
        ledger: Optional[RewardLedger] = None,
        *,
        enforce_terminal_states: Optional[bool] = None,
    ):
        self.db = db
        self.applications = ApplicationRepository(db)
        self.pipeline = PipelineService(db)
        self.ledger = ledger if ledger is not None else SqlRewardLedger(db)
        if enforce_terminal_states is None:
            enforce_terminal_states = settings.ENFORCE_TERMINAL_STATES
        self.enforce_terminal_states = enforce_terminal_states

    def ensure_mutable(self, application: Application) -> None:
        """Hired and rejected applications are closed to verification."""
        if not self.enforce_terminal_states:
            return
        if ApplicationStatus(application.status) in TERMINAL_STATUSES:
            raise TerminalStateError(application.id, application.status)

    async def advance(
        self,
        application_id: UUID,
        milestone: str,
        accepted: bool,
        message: Optional[str],
    ) -> TransitionResult:
        if not accepted:
            return await self._reject(application_id, message)
        return await self._accept(application_id, milestone)

    async def _reject(self, application_id: UUID, message: Optional[str]) -> TransitionResult:
        application = await self.applications.get_by_id(application_id)
        if application is None:
            raise ApplicationNotFoundError(application_id)
        self.ensure_mutable(application)

        await self.applications.apply_changes(
            application,
            status=ApplicationStatus.APPLIED.value,
            rejection_reason=message or DEFAULT_REJECT_MESSAGE,
        )
        logger.info("Application %s reset to applied: %s", application_id, application.rejection_reason)
        return TransitionResult(
            accepted=False,
            new_stage=application.current_stage,
            new_status=ApplicationStatus.APPLIED,
            points_awarded=0,
        )

    async def _accept(self, application_id: UUID, milestone: str) -> TransitionResult:
        try:
            application = await self.applications.get_by_id(application_id)
            if application is None:
                raise ApplicationNotFoundError(application_id)
            stages = await self.pipeline.resolve_stages(application.opportunity_id)
        except (ApplicationNotFoundError, OpportunityNotFoundError) as exc:
            logger.warning(
                "Accepted verification not applied (reconcile): application=%s milestone='%s' reason=%s",
                application_id,
                milestone,
                exc.code,
            )
            return TransitionResult(accepted=True, warning=STAGE_LOOKUP_FAILED)
        except SQLAlchemyError:
            logger.exception(
                "Accepted verification not applied (reconcile): application=%s milestone='%s' storage error",
                application_id,
                milestone,
            )
            await self.db.rollback()
            return TransitionResult(accepted=True, warning=STAGE_LOOKUP_FAILED)

        self.ensure_mutable(application)

        index = find_stage_index(stages, milestone)
        if index is None:
            logger.info(
                "Milestone '%s' is not in the pipeline of application %s; stage unchanged",
                milestone,
                application_id,
            )
            return TransitionResult(
                accepted=True,
                new_stage=application.current_stage,
                new_status=ApplicationStatus(application.status),
                warning=MILESTONE_NOT_IN_PIPELINE,
            )

        next_stage = stages[index + 1] if index + 1 < len(stages) else stages[index]
        new_status = status_for_kind(next_stage.kind)
        points = points_for_status(new_status)

        previous = _snapshot(application)
        await self.applications.apply_changes(
            application,
            status=new_status.value,
            current_stage=next_stage.label,
            current_stage_id=next_stage.id,
            rejection_reason=None,
        )

        try:
            await self.ledger.credit(
                application.student_id,
                points,
                application_id=application.id,
                reason=f"Advanced to {next_stage.label}",
            )
        except Exception as exc:
            logger.error(
                "Reward credit of %d points failed for application %s; reverting stage to '%s'",
                points,
                application_id,
                previous["current_stage"],
            )
            await self._compensate(application, previous)
            raise RewardCreditError(
                "Reward credit failed; the stage change was reverted",
                {"application_id": str(application_id), "points": points},
            ) from exc

        logger.info(
            "Application %s advanced to '%s' (%s), +%d points",
            application_id,
            next_stage.label,
            new_status.value,
            points,
        )
        return TransitionResult(
            accepted=True,
            new_stage=next_stage.label,
            new_status=new_status,
            points_awarded=points,
            advanced=True,
        )

    async def _compensate(self, application: Application, previous: dict) -> None:
        try:
            await self.applications.apply_changes(application, **previous)
        except SQLAlchemyError:
            # The session is unusable; the caller's rollback restores the row instead
            logger.exception("Compensation for application %s deferred to rollback", application.id)
