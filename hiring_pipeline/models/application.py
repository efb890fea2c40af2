"""
Application model.

Tracks one candidate's progress through one opportunity's pipeline.
"""

import uuid
from typing import Optional

from sqlalchemy import ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from hiring_pipeline.models.base_model import TimestampedModel
from hiring_pipeline.models.enums import ApplicationStatus


class Application(TimestampedModel):
    """
    Application table - a candidate's tracked relationship to an opportunity.

    status is derived from the current stage by the transition engine or set
    by an explicit bulk action; nothing else writes it.
    """

    __tablename__ = "application"

    student_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
        index=True,
    )

    opportunity_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("opportunity.id"),
        nullable=False,
        index=True,
    )

    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=ApplicationStatus.APPLIED.value,
    )

    # Stage label as shown to users
    current_stage: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    # Stable reference; null for default-pipeline stages and bulk rejects
    current_stage_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("pipeline_stage.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Set only while status == applied after a failed verification
    rejection_reason: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
