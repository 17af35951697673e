"""Shared pytest fixtures for all test suites."""

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from tripcraft.api.deps import get_repository
from tripcraft.config import Settings
from tripcraft.db.context import RequestContext
from tripcraft.db.engine import create_engine_from_settings, create_schema, create_session_factory
from tripcraft.db.inmemory import InMemoryTripRepository
from tripcraft.db.sql_repositories import SqlTripRepository
from tripcraft.main import app
from tripcraft.services.itinerary import ItineraryService
from tripcraft.services.share import ShareService

ORG_A = "org-a"
ORG_B = "org-b"


@pytest.fixture
def settings() -> Settings:
    """Settings with default thresholds and no database."""
    return Settings(database_url=None)


@pytest.fixture
def ctx() -> RequestContext:
    return RequestContext(org_id=ORG_A, user_id="advisor-1")


@pytest.fixture
def other_ctx() -> RequestContext:
    return RequestContext(org_id=ORG_B, user_id="advisor-2")


@pytest.fixture
def repo() -> InMemoryTripRepository:
    return InMemoryTripRepository()


@pytest.fixture
def sql_session() -> Generator[Session, None, None]:
    """Session on a fresh in-memory SQLite database."""
    engine = create_engine_from_settings(Settings(database_url="sqlite:///:memory:"))
    create_schema(engine)
    session_factory = create_session_factory(engine)

    with session_factory() as session:
        yield session

    engine.dispose()


@pytest.fixture
def sql_repo(sql_session: Session) -> SqlTripRepository:
    return SqlTripRepository(sql_session)


@pytest.fixture
def itinerary_service(repo: InMemoryTripRepository, settings: Settings) -> ItineraryService:
    return ItineraryService(repo, settings)


@pytest.fixture
def share_service(repo: InMemoryTripRepository, settings: Settings) -> ShareService:
    return ShareService(repo, settings)


@pytest.fixture
def client(repo: InMemoryTripRepository) -> Generator[TestClient, None, None]:
    """TestClient backed by a per-test in-memory repository."""
    app.dependency_overrides[get_repository] = lambda: repo
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
