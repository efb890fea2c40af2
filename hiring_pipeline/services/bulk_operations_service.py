"""
Bulk operations for recruiters.

Every row is its own unit of work in its own session. Rows are dispatched
concurrently and are not linked by a transaction: a failing row leaves the
others committed and no compensation is attempted. Callers get one result
per row, including rows that failed with an unexpected error.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Sequence
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hiring_pipeline.core.config import settings
from hiring_pipeline.errors import AppError, ApplicationNotFoundError, UnknownStageError
from hiring_pipeline.models.application import Application
from hiring_pipeline.models.enums import ApplicationStatus
from hiring_pipeline.repositories.application_repository import ApplicationRepository
from hiring_pipeline.schemas.bulk import BulkOperationResult, BulkRowResult
from hiring_pipeline.services.pipeline_service import (
    PipelineService,
    bulk_status_for_kind,
    find_stage_index,
)

logger = logging.getLogger(__name__)

REJECTED_STAGE_LABEL = "Rejected"

RowAction = Callable[[AsyncSession, Application], Awaitable[None]]


class BulkOperationsService:
    """Multi-row stage/status updates outside the verification path."""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        *,
        max_concurrency: Optional[int] = None,
    ):
        self.session_factory = session_factory
        self.max_concurrency = max_concurrency or settings.BULK_MAX_CONCURRENCY

    async def bulk_move(self, application_ids: Sequence[UUID], target_stage: str) -> BulkOperationResult:
        async def move(db: AsyncSession, application: Application) -> None:
            stages = await PipelineService(db).resolve_stages(application.opportunity_id)
            index = find_stage_index(stages, target_stage)
            if index is None:
                raise UnknownStageError(target_stage, [stage.label for stage in stages])
            stage = stages[index]
            await ApplicationRepository(db).apply_changes(
                application,
                status=bulk_status_for_kind(stage.kind).value,
                current_stage=stage.label,
                current_stage_id=stage.id,
            )

        return await self._run(application_ids, move, action_name=f"move to '{target_stage}'")

    async def bulk_reject(self, application_ids: Sequence[UUID]) -> BulkOperationResult:
        async def reject(db: AsyncSession, application: Application) -> None:
            await ApplicationRepository(db).apply_changes(
                application,
                status=ApplicationStatus.REJECTED.value,
                current_stage=REJECTED_STAGE_LABEL,
                current_stage_id=None,
            )

        return await self._run(application_ids, reject, action_name="reject")

    async def _run(
        self,
        application_ids: Sequence[UUID],
        action: RowAction,
        action_name: str,
    ) -> BulkOperationResult:
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def run_row(application_id: UUID) -> BulkRowResult:
            async with semaphore:
                return await self._run_row(application_id, action)

        rows: List[BulkRowResult] = await asyncio.gather(
            *(run_row(application_id) for application_id in application_ids)
        )
        result = BulkOperationResult(rows=list(rows))
        if not result.succeeded:
            logger.warning(
                "Bulk %s: %d of %d rows failed (committed rows were kept)",
                action_name,
                result.failed_count,
                len(rows),
            )
        else:
            logger.info("Bulk %s: %d rows updated", action_name, len(rows))
        return result

    async def _run_row(self, application_id: UUID, action: RowAction) -> BulkRowResult:
        async with self.session_factory() as db:
            try:
                application = await ApplicationRepository(db).get_by_id(application_id)
                if application is None:
                    raise ApplicationNotFoundError(application_id)
                await action(db, application)
                row = BulkRowResult(
                    application_id=application_id,
                    ok=True,
                    status=application.status,
                    current_stage=application.current_stage,
                )
                await db.commit()
                return row
            except AppError as exc:
                await db.rollback()
                logger.warning("Bulk row %s failed: %s", application_id, exc.message)
                return BulkRowResult(
                    application_id=application_id,
                    ok=False,
                    error_code=exc.code,
                    error=exc.message,
                )
            except SQLAlchemyError as exc:
                await db.rollback()
                logger.exception("Bulk row %s failed with a storage error", application_id)
                return BulkRowResult(
                    application_id=application_id,
                    ok=False,
                    error_code="storage_error",
                    error=exc.__class__.__name__,
                )
            except Exception as exc:
                await db.rollback()
                logger.exception("Bulk row %s failed unexpectedly", application_id)
                return BulkRowResult(
                    application_id=application_id,
                    ok=False,
                    error_code="internal_error",
                    error=exc.__class__.__name__,
                )
