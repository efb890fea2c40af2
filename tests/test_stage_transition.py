import uuid

import pytest

from hiring_pipeline.errors import ApplicationNotFoundError, RewardCreditError, TerminalStateError
from hiring_pipeline.models.enums import ApplicationStatus
from hiring_pipeline.repositories.application_repository import ApplicationRepository
from hiring_pipeline.services.reward_ledger import SqlRewardLedger, level_for_points
from hiring_pipeline.services.stage_transition_service import (
    MILESTONE_NOT_IN_PIPELINE,
    STAGE_LOOKUP_FAILED,
    StageTransitionService,
)

PIPELINE = ["Registration", "Assessment", "Interview", "Offer"]


class FailingLedger:
    def __init__(self):
        self.calls = 0

    async def credit(self, student_id, points, *, application_id=None, reason=None):
        self.calls += 1
        raise RuntimeError("ledger unavailable")


async def _place_at(db, application, stage_label, status=ApplicationStatus.VERIFIED):
    await ApplicationRepository(db).apply_changes(application, current_stage=stage_label, status=status.value)
    await db.commit()


async def _total_points(db, student_id):
    account = await SqlRewardLedger(db).get_account(student_id)
    return account.total_points if account else 0


@pytest.mark.asyncio
async def test_new_application_starts_at_entry_stage(make_opportunity, make_application):
    opportunity = await make_opportunity(stages=PIPELINE)
    application = await make_application(opportunity)

    assert application.current_stage == "Registration"
    assert application.current_stage_id == opportunity.stages[0].id
    assert application.status == ApplicationStatus.APPLIED.value


@pytest.mark.asyncio
async def test_accept_assessment_moves_to_interview_with_standard_credit(db, make_opportunity, make_application):
    opportunity = await make_opportunity(stages=PIPELINE)
    application = await make_application(opportunity)
    await _place_at(db, application, "Assessment")

    result = await StageTransitionService(db).advance(application.id, "Assessment", True, None)
    await db.commit()

    assert result.advanced is True
    assert result.new_stage == "Interview"
    assert result.new_status == ApplicationStatus.SHORTLISTED
    assert result.points_awarded == 20
    assert application.current_stage == "Interview"
    assert application.current_stage_id == opportunity.stages[2].id
    assert application.status == "shortlisted"
    assert await _total_points(db, application.student_id) == 20


@pytest.mark.asyncio
async def test_accept_interview_moves_to_offer_with_offer_credit(db, make_opportunity, make_application):
    opportunity = await make_opportunity(stages=PIPELINE)
    application = await make_application(opportunity)
    await _place_at(db, application, "Interview")

    result = await StageTransitionService(db).advance(application.id, "interview", True, None)
    await db.commit()

    assert result.new_stage == "Offer"
    assert result.new_status == ApplicationStatus.OFFERED
    assert result.points_awarded == 100
    assert application.status == "offered"
    assert await _total_points(db, application.student_id) == 100


@pytest.mark.asyncio
async def test_repeated_acceptance_at_final_stage_credits_every_time(db, make_opportunity, make_application):
    opportunity = await make_opportunity(stages=PIPELINE)
    application = await make_application(opportunity)
    await _place_at(db, application, "Offer", ApplicationStatus.OFFERED)
    service = StageTransitionService(db)

    first = await service.advance(application.id, "Offer", True, None)
    second = await service.advance(application.id, "Offer", True, None)
    await db.commit()

    assert first.new_stage == second.new_stage == "Offer"
    assert application.current_stage == "Offer"
    account = await SqlRewardLedger(db).get_account(application.student_id)
    assert account.total_points == 200
    assert account.level == level_for_points(200) == 3


@pytest.mark.asyncio
async def test_reject_resets_to_applied_with_reason(db, make_opportunity, make_application):
    opportunity = await make_opportunity(stages=PIPELINE)
    application = await make_application(opportunity)
    await _place_at(db, application, "Interview", ApplicationStatus.SHORTLISTED)

    result = await StageTransitionService(db).advance(application.id, "Interview", False, "Image unreadable")
    await db.commit()

    assert result.accepted is False
    assert result.points_awarded == 0
    assert application.status == "applied"
    assert application.rejection_reason == "Image unreadable"
    assert application.current_stage == "Interview"
    assert await _total_points(db, application.student_id) == 0


@pytest.mark.asyncio
async def test_reject_without_reason_uses_default(db, make_opportunity, make_application):
    opportunity = await make_opportunity(stages=PIPELINE)
    application = await make_application(opportunity)

    await StageTransitionService(db).advance(application.id, "Assessment", False, None)

    assert application.rejection_reason == "Invalid proof"


@pytest.mark.asyncio
async def test_accept_clears_previous_rejection_reason(db, make_opportunity, make_application):
    opportunity = await make_opportunity(stages=PIPELINE)
    application = await make_application(opportunity)
    service = StageTransitionService(db)

    await service.advance(application.id, "Registration", False, "Blurry")
    await service.advance(application.id, "Registration", True, None)

    assert application.rejection_reason is None
    assert application.current_stage == "Assessment"


@pytest.mark.asyncio
async def test_unmatched_milestone_succeeds_without_changes(db, make_opportunity, make_application):
    opportunity = await make_opportunity(stages=PIPELINE)
    application = await make_application(opportunity)

    result = await StageTransitionService(db).advance(application.id, "Phone Screen", True, None)

    assert result.accepted is True
    assert result.advanced is False
    assert result.warning == MILESTONE_NOT_IN_PIPELINE
    assert application.current_stage == "Registration"
    assert await _total_points(db, application.student_id) == 0


@pytest.mark.asyncio
async def test_default_pipeline_is_used_when_none_configured(db, make_opportunity, make_application):
    opportunity = await make_opportunity()
    application = await make_application(opportunity)

    result = await StageTransitionService(db).advance(application.id, "Applied", True, None)

    assert result.new_stage == "Verification"
    assert result.new_status == ApplicationStatus.VERIFIED
    assert application.current_stage_id is None


@pytest.mark.asyncio
async def test_missing_opportunity_soft_fails_with_warning(db):
    application = await ApplicationRepository(db).create(
        student_id=uuid.uuid4(),
        opportunity_id=uuid.uuid4(),
        current_stage="Applied",
        current_stage_id=None,
    )
    await db.commit()

    result = await StageTransitionService(db).advance(application.id, "Applied", True, None)

    assert result.accepted is True
    assert result.warning == STAGE_LOOKUP_FAILED
    assert result.points_awarded == 0
    assert application.current_stage == "Applied"


@pytest.mark.asyncio
async def test_reject_for_unknown_application_raises(db):
    with pytest.raises(ApplicationNotFoundError):
        await StageTransitionService(db).advance(uuid.uuid4(), "Offer", False, "nope")


@pytest.mark.asyncio
async def test_terminal_applications_are_closed(db, make_opportunity, make_application):
    opportunity = await make_opportunity(stages=PIPELINE)
    application = await make_application(opportunity)
    await _place_at(db, application, "Offer", ApplicationStatus.HIRED)

    with pytest.raises(TerminalStateError):
        await StageTransitionService(db).advance(application.id, "Offer", True, None)
    with pytest.raises(TerminalStateError):
        await StageTransitionService(db).advance(application.id, "Offer", False, "late")

    relaxed = StageTransitionService(db, enforce_terminal_states=False)
    result = await relaxed.advance(application.id, "Interview", True, None)
    assert result.new_status == ApplicationStatus.OFFERED


@pytest.mark.asyncio
async def test_ledger_failure_reverts_the_stage_change(db, make_opportunity, make_application):
    opportunity = await make_opportunity(stages=PIPELINE)
    application = await make_application(opportunity)
    await _place_at(db, application, "Assessment")
    application_id = application.id
    ledger = FailingLedger()

    with pytest.raises(RewardCreditError):
        await StageTransitionService(db, ledger).advance(application_id, "Assessment", True, None)

    assert ledger.calls == 1
    assert application.current_stage == "Assessment"
    assert application.status == "verified"
    await db.rollback()

    reloaded = await ApplicationRepository(db).get_by_id(application_id)
    assert reloaded.current_stage == "Assessment"
