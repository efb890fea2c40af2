"""
Base model with common fields.

All tables inherit from this to get:
- id (UUID primary key)
- created_at (when the record was created)
- updated_at (when the record was last modified)
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from hiring_pipeline.db.base import Base


class TimestampedModel(Base):
    """
    Abstract base class for all persisted models.

    This is not a real table - it's a template that other models inherit from.
    """

    __abstract__ = True  # This means: don't create a table for this class

    # Load server-side timestamps right after INSERT/UPDATE (no lazy IO under asyncio)
    __mapper_args__ = {"eager_defaults": True}

    # Primary key - UUID (universally unique identifier)
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    # Timestamps - automatically set when records are created/updated
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
