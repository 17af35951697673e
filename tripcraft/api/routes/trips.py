"""Trip endpoints - CRUD, itinerary view, share link and approval reset."""

import logging
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from tripcraft.api.auth import get_current_context
from tripcraft.api.deps import get_itinerary_service
from tripcraft.api.errors import http_error
from tripcraft.db.context import RequestContext
from tripcraft.errors import TripcraftError
from tripcraft.models.common import TripStatus
from tripcraft.models.itinerary import ItineraryView
from tripcraft.models.trip import Trip
from tripcraft.services.itinerary import ItineraryService

router = APIRouter(prefix="/trips", tags=["trips"])
logger = logging.getLogger(__name__)

Context = Annotated[RequestContext, Depends(get_current_context)]
Service = Annotated[ItineraryService, Depends(get_itinerary_service)]


class CreateTripRequest(BaseModel):
    """Request body for POST /trips."""

    title: str = Field(..., min_length=1)
    destination: str = ""
    destinations: list[str] = Field(default_factory=list)
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    status: TripStatus = TripStatus.draft
    budget: float | None = Field(None, ge=0)
    currency: str = "USD"
    client_id: str | None = None
    notes: str | None = None


class UpdateTripRequest(BaseModel):
    """Request body for PATCH /trips/{trip_id}; only sent fields change."""

    title: str | None = Field(None, min_length=1)
    destination: str | None = None
    destinations: list[str] | None = None
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    status: TripStatus | None = None
    budget: float | None = Field(None, ge=0)
    currency: str | None = None
    client_id: str | None = None
    notes: str | None = None


@router.get("", response_model=list[Trip])
async def list_trips(ctx: Context, service: Service) -> list[Trip]:
    """List the caller's trips, most recently updated first."""
    return service.list_trips(ctx)


@router.post("", response_model=Trip, status_code=status.HTTP_201_CREATED)
async def create_trip(request: CreateTripRequest, ctx: Context, service: Service) -> Trip:
    """Create a trip with a primary "Version 1"."""
    fields = request.model_dump(exclude={"title"})
    try:
        trip = service.create_trip(ctx, request.title, **fields)
    except TripcraftError as e:
        raise http_error(e) from e

    logger.info(f"[POST /trips] trip_id={trip.id}")
    return trip


@router.get("/{trip_id}", response_model=Trip)
async def get_trip(trip_id: str, ctx: Context, service: Service) -> Trip:
    try:
        return service.get_trip(ctx, trip_id)
    except TripcraftError as e:
        raise http_error(e) from e


@router.patch("/{trip_id}", response_model=Trip)
async def update_trip(
    trip_id: str, request: UpdateTripRequest, ctx: Context, service: Service
) -> Trip:
    try:
        return service.update_trip(ctx, trip_id, request.model_dump(exclude_unset=True))
    except TripcraftError as e:
        raise http_error(e) from e


@router.post("/{trip_id}/archive", response_model=Trip)
async def archive_trip(trip_id: str, ctx: Context, service: Service) -> Trip:
    try:
        return service.archive_trip(ctx, trip_id)
    except TripcraftError as e:
        raise http_error(e) from e


@router.delete("/{trip_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_trip(trip_id: str, ctx: Context, service: Service) -> None:
    try:
        service.delete_trip(ctx, trip_id)
    except TripcraftError as e:
        raise http_error(e) from e


@router.get("/{trip_id}/itinerary", response_model=ItineraryView)
async def get_itinerary(
    trip_id: str,
    ctx: Context,
    service: Service,
    version_id: Annotated[str | None, Query()] = None,
) -> ItineraryView:
    """Grouped, priced itinerary of a version (the primary by default)."""
    try:
        return service.get_itinerary(ctx, trip_id, version_id)
    except TripcraftError as e:
        raise http_error(e) from e


@router.post("/{trip_id}/share", response_model=Trip)
async def enable_share(trip_id: str, ctx: Context, service: Service) -> Trip:
    """Enable the client share link."""
    try:
        return service.enable_share(ctx, trip_id)
    except TripcraftError as e:
        raise http_error(e) from e


@router.post("/{trip_id}/share/rotate", response_model=Trip)
async def rotate_share_token(trip_id: str, ctx: Context, service: Service) -> Trip:
    try:
        return service.rotate_share_token(ctx, trip_id)
    except TripcraftError as e:
        raise http_error(e) from e


@router.delete("/{trip_id}/share", response_model=Trip)
async def disable_share(trip_id: str, ctx: Context, service: Service) -> Trip:
    try:
        return service.disable_share(ctx, trip_id)
    except TripcraftError as e:
        raise http_error(e) from e


@router.delete("/{trip_id}/approval", response_model=Trip)
async def invalidate_approval(trip_id: str, ctx: Context, service: Service) -> Trip:
    """Clear the client's approval."""
    try:
        return service.invalidate_approval(ctx, trip_id)
    except TripcraftError as e:
        raise http_error(e) from e
