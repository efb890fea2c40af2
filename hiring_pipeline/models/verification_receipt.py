"""
VerificationReceipt model.

One row per processed evidence submission, keyed by a digest of the
application, milestone and evidence bytes.
"""

import uuid
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from hiring_pipeline.models.base_model import TimestampedModel


class VerificationReceipt(TimestampedModel):
    """Stored outcome of a submission; replays return it instead of re-crediting."""

    __tablename__ = "verification_receipt"

    submission_key: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
    )

    application_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("application.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    milestone: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    accepted: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
    )

    message: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    new_stage: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )

    points_awarded: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )
