"""
Evidence submission orchestrator.

One candidate action: validate the upload, skip replays of an already
processed submission, ask the classifier, then apply the decision through
the stage transition engine. Service failures are logged in detail and
reported to the candidate with a generic message.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from hiring_pipeline.errors import (
    AppError,
    ApplicationNotFoundError,
    OpportunityNotFoundError,
    RewardCreditError,
    StudentMismatchError,
    VerificationError,
)
from hiring_pipeline.models.application import Application
from hiring_pipeline.models.enums import ApplicationStatus
from hiring_pipeline.models.verification_receipt import VerificationReceipt
from hiring_pipeline.repositories.application_repository import ApplicationRepository
from hiring_pipeline.repositories.verification_receipt_repository import VerificationReceiptRepository
from hiring_pipeline.schemas.application import EvidenceSubmission, SubmissionResult, TransitionResult
from hiring_pipeline.services.pipeline_service import PipelineService
from hiring_pipeline.services.reward_ledger import RewardLedger
from hiring_pipeline.services.stage_transition_service import (
    STAGE_LOOKUP_FAILED,
    StageTransitionService,
)
from hiring_pipeline.services.verification_service import (
    Evidence,
    VerificationContext,
    VerificationDecision,
    VerificationService,
    validate_evidence,
)
from hiring_pipeline.utils.canonical_json import submission_key

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Verification could not be completed. Please try again later."


def success_message(transition: TransitionResult) -> str:
    if transition.advanced:
        return f"Proof validated! Advanced to {transition.new_stage}. (+{transition.points_awarded} points)"
    return "Proof validated."


class EvidenceSubmissionService:
    """Runs verification and stage transition for one evidence upload."""

    def __init__(
        self,
        db: AsyncSession,
        verifier: Optional[VerificationService] = None,
        ledger: Optional[RewardLedger] = None,
        *,
        enforce_terminal_states: Optional[bool] = None,
    ):
        self.db = db
        self.verifier = verifier or VerificationService()
        self.engine = StageTransitionService(db, ledger, enforce_terminal_states=enforce_terminal_states)
        self.applications = ApplicationRepository(db)
        self.receipts = VerificationReceiptRepository(db)
        self.pipeline = PipelineService(db)

    async def submit(self, submission: EvidenceSubmission) -> SubmissionResult:
        evidence = Evidence(content=submission.evidence, media_type=submission.media_type)
        validate_evidence(evidence)

        # Ownership and the terminal guard apply to replays as well
        application = await self._load_application(submission)
        self.engine.ensure_mutable(application)

        key = submission_key(submission.application_id, submission.milestone, submission.evidence)
        receipt = await self.receipts.get_by_key(key)
        if receipt is not None:
            logger.info("Replayed submission %s for application %s", key[:12], submission.application_id)
            return self._replay(receipt)

        application_id = application.id
        previous_status = application.status
        employer_name = submission.employer_name or await self._employer_name(application.opportunity_id)

        # Visible to observers while the classifier runs
        await self.applications.apply_changes(application, status=ApplicationStatus.VERIFYING.value)
        await self.db.commit()

        context = VerificationContext(
            employer_name=employer_name,
            application_id=application_id,
            student_id=submission.student_id,
        )
        try:
            decision = await self.verifier.verify(submission.milestone, evidence, context)
        except VerificationError as exc:
            logger.error(
                "Verification service error for application %s: [%s] %s %s",
                application_id,
                exc.code,
                exc.message,
                exc.details or {},
            )
            await self._abandon(application_id, previous_status)
            return SubmissionResult(success=False, message=GENERIC_FAILURE_MESSAGE)
        except Exception:
            logger.exception("Unexpected verification failure for application %s", application_id)
            await self._abandon(application_id, previous_status)
            raise

        try:
            return await self._apply_decision(key, submission, application_id, previous_status, decision)
        except RewardCreditError:
            await self._abandon(application_id, previous_status)
            return SubmissionResult(success=False, message=GENERIC_FAILURE_MESSAGE)
        except AppError:
            await self._abandon(application_id, previous_status)
            raise
        except Exception:
            logger.exception("Applying the verification decision failed for application %s", application_id)
            await self._abandon(application_id, previous_status)
            raise

    async def _apply_decision(
        self,
        key: str,
        submission: EvidenceSubmission,
        application_id: UUID,
        previous_status: str,
        decision: VerificationDecision,
    ) -> SubmissionResult:
        transition = await self.engine.advance(
            application_id,
            submission.milestone,
            decision.accepted,
            decision.message,
        )

        new_status = transition.new_status
        if transition.accepted and not transition.advanced:
            await self._restore_status(application_id, previous_status)
            new_status = ApplicationStatus(previous_status)

        message = success_message(transition) if transition.accepted else decision.message
        if transition.warning != STAGE_LOOKUP_FAILED:
            # Lookup failures stay retryable, so they get no receipt
            await self.receipts.create(
                submission_key=key,
                application_id=application_id,
                milestone=submission.milestone,
                accepted=transition.accepted,
                message=message,
                new_stage=transition.new_stage,
                points_awarded=transition.points_awarded,
            )
        await self.db.commit()

        return SubmissionResult(
            success=transition.accepted,
            message=message,
            new_stage=transition.new_stage,
            new_status=new_status,
            points_awarded=transition.points_awarded,
            warning=transition.warning,
        )

    async def _load_application(self, submission: EvidenceSubmission) -> Application:
        application = await self.applications.get_by_id(submission.application_id)
        if application is None:
            raise ApplicationNotFoundError(submission.application_id)
        if application.student_id != submission.student_id:
            raise StudentMismatchError(
                "Application does not belong to this student",
                {"application_id": str(submission.application_id)},
            )
        return application

    async def _employer_name(self, opportunity_id: UUID) -> Optional[str]:
        try:
            opportunity = await self.pipeline.get_opportunity(opportunity_id)
        except OpportunityNotFoundError:
            return None
        return opportunity.employer_name

    async def _restore_status(self, application_id: UUID, status: str) -> None:
        application = await self.applications.get_by_id(application_id)
        if application is not None and application.status == ApplicationStatus.VERIFYING.value:
            await self.applications.apply_changes(application, status=status)

    async def _abandon(self, application_id: UUID, status: str) -> None:
        """Drop pending writes and take the application out of verifying."""
        await self.db.rollback()
        await self._restore_status(application_id, status)
        await self.db.commit()

    @staticmethod
    def _replay(receipt: VerificationReceipt) -> SubmissionResult:
        return SubmissionResult(
            success=receipt.accepted,
            message=receipt.message or "",
            new_stage=receipt.new_stage,
            points_awarded=0,
            replayed=True,
        )
