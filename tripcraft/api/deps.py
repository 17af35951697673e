"""FastAPI dependencies wiring repositories and services."""

from collections.abc import Generator
from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session, sessionmaker

from tripcraft.adapters.flight_status import FlightStatusProvider, HttpFlightStatusProvider
from tripcraft.config import get_settings
from tripcraft.db.engine import create_engine_from_settings, create_schema, create_session_factory
from tripcraft.db.inmemory import InMemoryTripRepository
from tripcraft.db.repositories import TripRepository
from tripcraft.db.sql_repositories import SqlTripRepository
from tripcraft.services.itinerary import ItineraryService
from tripcraft.services.share import ShareService


@lru_cache
def get_inmemory_repository() -> InMemoryTripRepository:
    """Process-wide store used when DATABASE_URL is unset."""
    return InMemoryTripRepository()


@lru_cache
def get_session_factory() -> sessionmaker[Session]:
    """Session factory for the configured database, creating tables on first use."""
    engine = create_engine_from_settings(get_settings())
    create_schema(engine)
    return create_session_factory(engine)


def get_repository() -> Generator[TripRepository, None, None]:
    """Yield a repository for the current request."""
    if not get_settings().database_url:
        yield get_inmemory_repository()
        return

    with get_session_factory()() as session:
        yield SqlTripRepository(session)


def get_itinerary_service(
    repository: Annotated[TripRepository, Depends(get_repository)],
) -> ItineraryService:
    return ItineraryService(repository, get_settings())


def get_share_service(
    repository: Annotated[TripRepository, Depends(get_repository)],
) -> ShareService:
    return ShareService(repository, get_settings())


def get_flight_status_provider() -> FlightStatusProvider:
    """Flight status provider configured from settings."""
    settings = get_settings()
    return HttpFlightStatusProvider(
        settings.flight_status_base_url,
        settings.flight_status_api_key,
        delay_threshold_min=settings.flight_delay_threshold_min,
        timeout_sec=settings.flight_status_timeout_sec,
    )
