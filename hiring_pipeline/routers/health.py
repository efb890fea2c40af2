"""
Service health report: database reachability, schema revision against the
latest migration, and whether a classifier is configured.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple

from alembic.config import Config
from alembic.script import ScriptDirectory
from alembic.util import CommandError
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hiring_pipeline.core.config import settings
from hiring_pipeline.core.dependencies import get_db
from hiring_pipeline.schemas.health import HealthReport

logger = logging.getLogger(__name__)

router = APIRouter()

PROJECT_ROOT = Path(__file__).resolve().parents[2]


@lru_cache(maxsize=1)
def latest_revision() -> Optional[str]:
    """Head of the migration scripts shipped with the service, if present."""
    ini_path = PROJECT_ROOT / "alembic.ini"
    if not ini_path.exists():
        return None
    config = Config(str(ini_path))
    config.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    try:
        return ScriptDirectory.from_config(config).get_current_head()
    except CommandError:
        logger.warning("Could not read migration scripts", exc_info=True)
        return None


async def _database_ok(db: AsyncSession) -> bool:
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.warning("Health check: database unreachable", exc_info=True)
        return False
    return True


async def _migration_state(db: AsyncSession) -> Tuple[Optional[str], Optional[str]]:
    """Revision stamped in the database and the latest shipped one."""
    try:
        stamped = (await db.execute(text("SELECT version_num FROM alembic_version"))).scalar_one_or_none()
    except SQLAlchemyError:
        # Schema built from model metadata, never stamped
        await db.rollback()
        stamped = None
    return stamped, latest_revision()


@router.get("/health", response_model=HealthReport)
async def health_check(response: Response, db: AsyncSession = Depends(get_db)):
    db_ok = await _database_ok(db)
    stamped, latest = await _migration_state(db) if db_ok else (None, latest_revision())
    if not db_ok:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthReport(
        status="ok" if db_ok else "unavailable",
        db_ok=db_ok,
        schema_revision=stamped,
        latest_revision=latest,
        schema_up_to_date=stamped is not None and stamped == latest,
        classifier_configured=bool(settings.GEMINI_API_KEY) or settings.VERIFICATION_MOCK_PROVIDER,
        classifier_models=settings.VERIFICATION_MODELS,
    )
