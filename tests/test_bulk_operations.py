import uuid

import pytest
from sqlalchemy import event
from sqlalchemy.exc import OperationalError

from hiring_pipeline.repositories.application_repository import ApplicationRepository
from hiring_pipeline.schemas.bulk import BulkOperationResult, BulkRowResult
from hiring_pipeline.services.bulk_operations_service import REJECTED_STAGE_LABEL, BulkOperationsService


async def _reload(session_factory, application_id):
    async with session_factory() as session:
        return await ApplicationRepository(session).get_by_id(application_id)


def _disk_failure_for(session_factory, failing_id):
    """Session factory whose sessions refuse to flush changes to one application."""

    def refuse(sync_session, flush_context, instances):
        for obj in sync_session.dirty:
            if getattr(obj, "id", None) == failing_id:
                raise OperationalError("UPDATE applications", {}, Exception("disk I/O error"))

    def factory():
        session = session_factory()
        event.listen(session.sync_session, "before_flush", refuse)
        return session

    return factory


@pytest.mark.asyncio
async def test_bulk_reject_keeps_committed_rows_when_one_fails(session_factory, make_opportunity, make_application):
    opportunity = await make_opportunity(stages=["Applied", "Interview", "Offer"])
    first = await make_application(opportunity)
    third = await make_application(opportunity)
    missing_id = uuid.uuid4()

    result = await BulkOperationsService(session_factory).bulk_reject([first.id, missing_id, third.id])

    assert result.succeeded is False
    assert result.failed_count == 1
    assert [row.application_id for row in result.rows] == [first.id, missing_id, third.id]
    assert [row.ok for row in result.rows] == [True, False, True]
    assert result.rows[1].error_code == "application_not_found"

    for application_id in (first.id, third.id):
        reloaded = await _reload(session_factory, application_id)
        assert reloaded.status == "rejected"
        assert reloaded.current_stage == REJECTED_STAGE_LABEL
        assert reloaded.current_stage_id is None


@pytest.mark.asyncio
async def test_bulk_move_derives_status_from_target_stage(session_factory, make_opportunity, make_application):
    opportunity = await make_opportunity(stages=["Applied", "Screening", "Technical Interview", "Offer"])
    applications = [await make_application(opportunity) for _ in range(3)]

    result = await BulkOperationsService(session_factory).bulk_move(
        [application.id for application in applications],
        "technical interview",
    )

    assert result.succeeded is True
    assert {row.status for row in result.rows} == {"shortlisted"}
    reloaded = await _reload(session_factory, applications[0].id)
    assert reloaded.current_stage == "Technical Interview"
    assert reloaded.current_stage_id == opportunity.stages[2].id


@pytest.mark.asyncio
async def test_bulk_move_to_intake_stage_shortlists(session_factory, make_opportunity, make_application):
    opportunity = await make_opportunity(stages=["Applied", "Screening", "Offer"])
    application = await make_application(opportunity)

    result = await BulkOperationsService(session_factory).bulk_move([application.id], "Screening")

    assert result.rows[0].status == "shortlisted"


@pytest.mark.asyncio
async def test_bulk_move_to_unknown_stage_fails_only_that_row(session_factory, make_opportunity, make_application):
    with_interview = await make_opportunity(stages=["Applied", "Interview"])
    without_interview = await make_opportunity(stages=["Applied", "Assessment"])
    moved = await make_application(with_interview)
    stuck = await make_application(without_interview)

    result = await BulkOperationsService(session_factory).bulk_move([moved.id, stuck.id], "Interview")

    assert result.failed_count == 1
    assert result.rows[0].ok is True
    assert result.rows[1].error_code == "unknown_stage"
    assert (await _reload(session_factory, moved.id)).current_stage == "Interview"
    assert (await _reload(session_factory, stuck.id)).current_stage == "Applied"

@pytest.mark.asyncio
async def test_storage_failure_on_one_row_keeps_the_others(session_factory, make_opportunity, make_application):
    opportunity = await make_opportunity(stages=["Applied", "Interview", "Offer"])
    applications = [await make_application(opportunity) for _ in range(3)]
    ids = [application.id for application in applications]

    service = BulkOperationsService(_disk_failure_for(session_factory, ids[1]))
    result = await service.bulk_reject(ids)

    assert [row.ok for row in result.rows] == [True, False, True]
    assert result.rows[1].error_code == "storage_error"
    assert result.rows[1].error == "OperationalError"
    for application_id in (ids[0], ids[2]):
        reloaded = await _reload(session_factory, application_id)
        assert reloaded.status == "rejected"
        assert reloaded.current_stage == REJECTED_STAGE_LABEL
    assert (await _reload(session_factory, ids[1])).status == "applied"


@pytest.mark.asyncio
async def test_unexpected_row_error_is_reported_as_a_failed_row(
    db, session_factory, make_opportunity, make_application
):
    broken = await make_opportunity(stages=["Applied", "Interview"])
    healthy = await make_opportunity(stages=["Applied", "Interview"])
    stuck = await make_application(broken)
    moved = await make_application(healthy)
    broken.stages[1].kind = "bogus"
    await db.commit()

    result = await BulkOperationsService(session_factory).bulk_move([stuck.id, moved.id], "Interview")

    assert [row.ok for row in result.rows] == [False, True]
    assert result.rows[0].error_code == "internal_error"
    assert (await _reload(session_factory, stuck.id)).current_stage == "Applied"
    assert (await _reload(session_factory, moved.id)).current_stage == "Interview"


def test_summary_shape():
    application_id = uuid.uuid4()
    result = BulkOperationResult(
        rows=[BulkRowResult(application_id=application_id, ok=False, error_code="x", error="boom")]
    )

    summary = result.summary()
    assert summary["succeeded"] is False
    assert summary["failed_count"] == 1
    assert summary["rows"][0]["application_id"] == str(application_id)
