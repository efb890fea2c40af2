"""Structured error helpers and domain errors for API responses."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse


def build_error_payload(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    payload = {"error": {"code": code, "message": message}}
    if details is not None:
        payload["error"]["details"] = details
    return payload


class AppError(Exception):
    """Application-scoped error for standardized API responses."""

    status_code: int = 500
    code: str = "internal_error"

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        *,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
    ):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        self.message = message
        self.details = details
        self.payload = build_error_payload(self.code, message, details)


async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.payload)


def raise_app_error(status_code: int, code: str, message: str, details: Optional[Dict[str, Any]] = None) -> None:
    """Raise an AppError with a standardized error shape."""
    raise AppError(message, details, status_code=status_code, code=code)


# --- Input / lookup errors ---

class EvidenceRequiredError(AppError):
    status_code = 400
    code = "evidence_required"


class ApplicationNotFoundError(AppError):
    status_code = 404
    code = "application_not_found"

    def __init__(self, application_id: Any):
        super().__init__(
            f"Application {application_id} not found",
            {"application_id": str(application_id)},
        )
        self.application_id = application_id


class OpportunityNotFoundError(AppError):
    status_code = 404
    code = "opportunity_not_found"

    def __init__(self, opportunity_id: Any):
        super().__init__(
            f"Opportunity {opportunity_id} not found",
            {"opportunity_id": str(opportunity_id)},
        )
        self.opportunity_id = opportunity_id


class UnknownStageError(AppError):
    status_code = 422
    code = "unknown_stage"

    def __init__(self, label: str, available: Optional[list[str]] = None):
        super().__init__(
            f"Stage '{label}' is not part of this pipeline",
            {"stage": label, "available": available or []},
        )
        self.label = label


class DuplicateStageError(AppError):
    status_code = 409
    code = "duplicate_stage"


class PipelineLockedError(AppError):
    status_code = 409
    code = "pipeline_locked"


class TerminalStateError(AppError):
    status_code = 409
    code = "terminal_state"

    def __init__(self, application_id: Any, status: str):
        super().__init__(
            f"Application {application_id} is in terminal status '{status}'",
            {"application_id": str(application_id), "status": status},
        )
        self.status = status


# --- Verification service errors ---

class VerificationError(AppError):
    """Base class for classifier failures that are not a reject decision."""

    status_code = 502
    code = "verification_error"


class ProviderUnavailableError(VerificationError):
    """The requested model identifier is not offered; fallback may continue."""

    code = "provider_unavailable"

    def __init__(self, model: str, message: Optional[str] = None):
        super().__init__(message or f"Model {model} is not available", {"model": model})
        self.model = model


class ProviderError(VerificationError):
    """Terminal provider failure (auth, quota, malformed request, transport)."""

    code = "provider_error"

    def __init__(self, model: str, message: str, upstream_status: Optional[int] = None):
        super().__init__(message, {"model": model, "upstream_status": upstream_status})
        self.model = model
        self.upstream_status = upstream_status


class ProviderConfigError(VerificationError):
    status_code = 503
    code = "provider_config"


class VerificationDecodeError(VerificationError):
    """Provider answered but the payload could not be decoded into a decision."""

    code = "verification_decode"


# --- Reward ledger ---

class RewardCreditError(AppError):
    status_code = 502
    code = "reward_credit_failed"


class StudentMismatchError(AppError):
    status_code = 403
    code = "student_mismatch"
