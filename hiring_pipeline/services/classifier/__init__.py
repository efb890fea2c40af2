"""Evidence classifier provider adapters."""

from hiring_pipeline.services.classifier.base import ClassificationRequest, ClassifierProvider
from hiring_pipeline.services.classifier.deterministic import DeterministicClassifierProvider
from hiring_pipeline.services.classifier.gemini import GeminiClassifierProvider

__all__ = [
    "ClassificationRequest",
    "ClassifierProvider",
    "DeterministicClassifierProvider",
    "GeminiClassifierProvider",
]
