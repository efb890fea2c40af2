"""
Pydantic schemas for opportunities and their pipeline stages.
"""

from datetime import datetime
from typing import List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from hiring_pipeline.models.enums import StageKind
from hiring_pipeline.schemas.base import TimestampedRead


class StageSpec(BaseModel):
    """A stage to configure. kind is inferred from the label when omitted."""

    label: str = Field(..., min_length=1, max_length=100)
    kind: Optional[StageKind] = None

    @field_validator("label")
    @classmethod
    def _strip_label(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("stage label must not be blank")
        return value


StageInput = Union[StageSpec, str]


def coerce_stage_specs(stages: List[StageInput]) -> List[StageSpec]:
    """Accept bare labels alongside full specs."""
    return [s if isinstance(s, StageSpec) else StageSpec(label=s) for s in stages]


class OpportunityCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    employer_name: str = Field(..., min_length=1, max_length=255)
    stages: List[StageInput] = Field(default_factory=list)


class StagesReplace(BaseModel):
    stages: List[StageInput] = Field(..., min_length=1)


class StageAppend(StageSpec):
    pass


class PipelineStageRead(BaseModel):
    """Resolved stage; id is None for the built-in default pipeline."""

    id: Optional[UUID] = None
    label: str
    kind: StageKind
    position: int


class OpportunityRead(TimestampedRead):
    title: str
    employer_name: str
    published_at: Optional[datetime] = None
    stages: List[PipelineStageRead] = Field(default_factory=list)
