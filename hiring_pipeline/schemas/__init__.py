"""
Schemas package.

Import all schemas here for easy access.
"""

from hiring_pipeline.schemas.opportunity import (
    OpportunityCreate,
    OpportunityRead,
    PipelineStageRead,
    StageSpec,
)
from hiring_pipeline.schemas.application import (
    ApplicationCreate,
    ApplicationRead,
    EvidenceSubmission,
    SubmissionResult,
    TransitionResult,
)
from hiring_pipeline.schemas.bulk import (
    BulkMoveRequest,
    BulkRejectRequest,
    BulkOperationResult,
    BulkRowResult,
)
from hiring_pipeline.schemas.reward import RewardAccountRead, RewardCreditRead
