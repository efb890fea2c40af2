"""
FastAPI dependencies shared by the routers.

Tests override these through ``app.dependency_overrides``.
"""

from hiring_pipeline.db.session import get_db, get_session_factory
from hiring_pipeline.services.verification_service import VerificationService

__all__ = ["get_db", "get_session_factory", "get_verification_service"]

_verification_service: VerificationService | None = None


def get_verification_service() -> VerificationService:
    """Process-wide verification service built from settings on first use."""
    global _verification_service
    if _verification_service is None:
        _verification_service = VerificationService()
    return _verification_service
