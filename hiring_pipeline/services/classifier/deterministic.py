"""
Deterministic classifier used when no external provider should be called.
"""

import json

from hiring_pipeline.services.classifier.base import ClassificationRequest


class DeterministicClassifierProvider:
    """Returns a fixed decision regardless of the evidence."""

    provider = "deterministic"

    def __init__(self, *, accept: bool = True, message: str = "Proof accepted by the offline classifier."):
        self.model = "deterministic_v1"
        self.accept = accept
        self.message = message

    async def classify(self, request: ClassificationRequest) -> str:
        return json.dumps({"success": self.accept, "message": self.message})
