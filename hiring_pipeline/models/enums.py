"""
Enumerations shared by models, schemas and services.

Values are stored as plain strings so external consumers reading the
tables directly see stable literals.
"""

from enum import Enum


class ApplicationStatus(str, Enum):
    APPLIED = "applied"
    PENDING_VERIFICATION = "pending_verification"
    VERIFYING = "verifying"
    VERIFIED = "verified"
    SHORTLISTED = "shortlisted"
    QUALIFIED = "qualified"
    INTERVIEWING = "interviewing"
    OFFERED = "offered"
    HIRED = "hired"
    REJECTED = "rejected"


TERMINAL_STATUSES = frozenset({ApplicationStatus.HIRED, ApplicationStatus.REJECTED})


class StageKind(str, Enum):
    """Explicit category of a pipeline stage; drives status derivation."""

    INTAKE = "intake"
    ASSESSMENT = "assessment"
    INTERVIEW = "interview"
    OFFER = "offer"
    TERMINAL = "terminal"
