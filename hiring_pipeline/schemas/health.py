"""
Pydantic schema for the service health report.
"""

from typing import List, Optional

from pydantic import BaseModel


class HealthReport(BaseModel):
    status: str
    db_ok: bool
    schema_revision: Optional[str] = None
    latest_revision: Optional[str] = None
    schema_up_to_date: bool = False
    classifier_configured: bool
    classifier_models: List[str]
