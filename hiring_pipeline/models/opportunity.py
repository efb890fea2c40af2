"""
Opportunity and PipelineStage models.

An opportunity owns an ordered list of pipeline stages. Each stage has a
stable id so applications can keep pointing at it even if its label is
later corrected.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hiring_pipeline.models.base_model import TimestampedModel
from hiring_pipeline.models.enums import StageKind


class Opportunity(TimestampedModel):
    """
    Opportunity table - a posted role with a configurable hiring pipeline.
    """

    __tablename__ = "opportunity"

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # Shown to the classifier when verifying evidence
    employer_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # Once published, stages may only be appended
    published_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    stages: Mapped[List["PipelineStage"]] = relationship(
        "PipelineStage",
        back_populates="opportunity",
        order_by="PipelineStage.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def is_published(self) -> bool:
        return self.published_at is not None


class PipelineStage(TimestampedModel):
    """
    PipelineStage table - one step in an opportunity's hiring process.

    The position determines the order; index 0 is the entry stage.
    """

    __tablename__ = "pipeline_stage"
    __table_args__ = (
        UniqueConstraint("opportunity_id", "position", name="uq_pipeline_stage_position"),
    )

    opportunity_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("opportunity.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Human-readable name (e.g., "Assessment", "Final Interview")
    label: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    kind: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=StageKind.INTAKE.value,
    )

    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    opportunity: Mapped["Opportunity"] = relationship(
        "Opportunity",
        back_populates="stages",
    )
