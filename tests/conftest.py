"""
Pytest configuration and shared fixtures.

Each test gets its own temporary SQLite database (aiosqlite), created from
the model metadata. Tests marked ``db`` target the configured DATABASE_URL
instead and are skipped unless RUN_DB_TESTS=1.
"""

import os
import uuid
from typing import List, Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from hiring_pipeline.core.config import settings
from hiring_pipeline.db.base import Base
import hiring_pipeline.models  # noqa: F401
from hiring_pipeline.models.application import Application
from hiring_pipeline.models.opportunity import Opportunity
from hiring_pipeline.schemas.application import ApplicationCreate
from hiring_pipeline.schemas.opportunity import OpportunityCreate
from hiring_pipeline.services.application_service import ApplicationService
from hiring_pipeline.services.pipeline_service import PipelineService


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests, no external deps")
    config.addinivalue_line("markers", "db: requires database")
    config.addinivalue_line("markers", "server: requires running HTTP server")


def pytest_collection_modifyitems(config, items):
    run_db = os.environ.get("RUN_DB_TESTS") == "1"
    run_server = os.environ.get("RUN_SERVER_TESTS") == "1"

    skip_db = pytest.mark.skip(reason="db tests skipped by default; set RUN_DB_TESTS=1 to enable")
    skip_server = pytest.mark.skip(reason="server tests skipped by default; set RUN_SERVER_TESTS=1 to enable")

    for item in items:
        if "db" in item.keywords and not run_db:
            item.add_marker(skip_db)
        if "server" in item.keywords and not run_server:
            item.add_marker(skip_server)


@pytest.fixture(autouse=True)
def single_writer(monkeypatch):
    """SQLite allows one writer at a time."""
    monkeypatch.setattr(settings, "BULK_MAX_CONCURRENCY", 1)


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'pipeline.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_opportunity(db):
    """Create and commit an opportunity; stages=None uses the default pipeline."""

    async def _make(stages: Optional[List] = None, employer_name: str = "Acme Corp") -> Opportunity:
        opportunity = await PipelineService(db).create_opportunity(
            OpportunityCreate(title="Backend Engineer", employer_name=employer_name, stages=stages or [])
        )
        await db.commit()
        return opportunity

    return _make


@pytest.fixture
def make_application(db):
    """Create and commit an application at the entry stage of the given opportunity."""

    async def _make(opportunity: Opportunity, student_id: Optional[uuid.UUID] = None) -> Application:
        application = await ApplicationService(db).create_application(
            ApplicationCreate(student_id=student_id or uuid.uuid4(), opportunity_id=opportunity.id)
        )
        await db.commit()
        return application

    return _make
