"""
Verification service.

Sends milestone evidence to the external classifier, walking the configured
model list in order, and turns the answer into an accept/reject decision.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence
from uuid import UUID

from hiring_pipeline.core.config import settings
from hiring_pipeline.errors import (
    EvidenceRequiredError,
    ProviderConfigError,
    ProviderUnavailableError,
    VerificationDecodeError,
)
from hiring_pipeline.services.classifier import (
    ClassificationRequest,
    ClassifierProvider,
    DeterministicClassifierProvider,
    GeminiClassifierProvider,
)
from hiring_pipeline.utils.fallback import NoCandidatesError, run_sequential_fallback
from hiring_pipeline.utils.json_extraction import JsonExtractionError, extract_json_payload

logger = logging.getLogger(__name__)

DEFAULT_REJECT_MESSAGE = "Invalid proof"


@dataclass(frozen=True)
class Evidence:
    content: bytes
    media_type: Optional[str]


@dataclass(frozen=True)
class VerificationContext:
    employer_name: Optional[str]
    application_id: UUID
    student_id: UUID


@dataclass(frozen=True)
class VerificationDecision:
    accepted: bool
    message: str
    model: Optional[str] = None


def validate_evidence(evidence: Evidence, max_bytes: Optional[int] = None) -> None:
    """Input errors are rejected before any provider is contacted."""
    if not evidence.content:
        raise EvidenceRequiredError("No evidence file was provided")
    if not evidence.media_type or not evidence.media_type.strip():
        raise EvidenceRequiredError("Evidence must be tagged with a media type")
    limit = max_bytes if max_bytes is not None else settings.MAX_EVIDENCE_BYTES
    if len(evidence.content) > limit:
        raise EvidenceRequiredError(
            "Evidence file is too large",
            {"size": len(evidence.content), "max_bytes": limit},
        )


def build_prompt(milestone: str, employer_name: Optional[str]) -> str:
    employer = employer_name or "the employer"
    return (
        f'Verify whether this image is genuine proof that the candidate reached the "{milestone}" stage '
        f'of the hiring process at "{employer}". '
        'Return JSON only: { "success": boolean, "message": "string" }. '
        "When rejecting, the message must state the reason in one sentence."
    )


def parse_decision(text: str, model: Optional[str] = None) -> VerificationDecision:
    """Decode the classifier text; anything undecodable is a service error."""
    try:
        payload = extract_json_payload(text)
    except JsonExtractionError as exc:
        raise VerificationDecodeError(str(exc), {"model": model}) from exc

    if not isinstance(payload, dict) or not isinstance(payload.get("success"), bool):
        raise VerificationDecodeError(
            "Classifier response is missing a boolean 'success' field",
            {"model": model},
        )

    accepted = payload["success"]
    message = payload.get("message")
    message = str(message).strip() if message is not None else ""
    if not accepted and not message:
        message = DEFAULT_REJECT_MESSAGE
    return VerificationDecision(accepted=accepted, message=message, model=model)


def build_default_providers() -> List[ClassifierProvider]:
    if settings.VERIFICATION_MOCK_PROVIDER:
        return [DeterministicClassifierProvider()]
    return [GeminiClassifierProvider(model) for model in settings.VERIFICATION_MODELS]


class VerificationService:
    """Stateless accept/reject decisions backed by the classifier providers."""

    def __init__(self, providers: Optional[Sequence[ClassifierProvider]] = None):
        self.providers = list(providers) if providers is not None else build_default_providers()

    async def verify(
        self,
        milestone: str,
        evidence: Evidence,
        context: VerificationContext,
    ) -> VerificationDecision:
        validate_evidence(evidence)

        request = ClassificationRequest(
            prompt=build_prompt(milestone, context.employer_name),
            media_type=evidence.media_type,
            evidence=evidence.content,
        )

        async def attempt(provider: ClassifierProvider) -> VerificationDecision:
            text = await provider.classify(request)
            return parse_decision(text, model=provider.model)

        try:
            decision = await run_sequential_fallback(
                self.providers,
                attempt,
                should_skip=lambda exc: isinstance(exc, ProviderUnavailableError),
            )
        except NoCandidatesError as exc:
            raise ProviderConfigError("No classifier models configured") from exc

        logger.info(
            "Verification for application %s milestone '%s': accepted=%s (model=%s)",
            context.application_id,
            milestone,
            decision.accepted,
            decision.model,
        )
        return decision
