"""
Base adapter interface for evidence classifier providers.
"""

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class ClassificationRequest:
    """Prompt plus the inline evidence payload sent to a classifier."""

    prompt: str
    media_type: str
    evidence: bytes


class ClassifierProvider(Protocol):
    """Interface for provider adapters. One instance per model identifier."""

    provider: str
    model: str

    async def classify(self, request: ClassificationRequest) -> str:
        """Return the raw text answer of the model."""
        ...
