"""Segment endpoints - add, edit, delete, reorder and flight status."""

import logging
from datetime import date
from typing import Annotated, Any

import httpx
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from tripcraft.adapters.flight_status import FlightStatusProvider
from tripcraft.api.auth import get_current_context
from tripcraft.api.deps import get_flight_status_provider, get_itinerary_service
from tripcraft.api.errors import http_error
from tripcraft.db.context import RequestContext
from tripcraft.errors import TripcraftError
from tripcraft.models.common import FlightStatusCode, Refundability, SegmentType
from tripcraft.models.flight_status import FlightStatusSnapshot
from tripcraft.models.segment import TripSegment
from tripcraft.services.itinerary import ItineraryService

version_router = APIRouter(
    prefix="/trips/{trip_id}/versions/{version_id}/segments", tags=["segments"]
)
router = APIRouter(prefix="/segments", tags=["segments"])
logger = logging.getLogger(__name__)

Context = Annotated[RequestContext, Depends(get_current_context)]
Service = Annotated[ItineraryService, Depends(get_itinerary_service)]


class CreateSegmentRequest(BaseModel):
    """Request body for POST .../segments."""

    type: SegmentType
    day_number: int = Field(..., ge=1)
    sort_order: int | None = None
    title: str = ""
    subtitle: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    confirmation_number: str | None = None
    cost: float | None = None
    currency: str = "USD"
    quantity: int = Field(1, ge=1)
    price_per_unit: float | None = None
    notes: str | None = None
    refundability: Refundability = Refundability.unknown
    refund_deadline: date | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    journey_id: str | None = None
    property_group_id: str | None = None


class UpdateSegmentRequest(BaseModel):
    """Request body for PATCH /segments/{segment_id}; only sent fields change."""

    type: SegmentType | None = None
    day_number: int | None = Field(None, ge=1)
    title: str | None = None
    subtitle: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    confirmation_number: str | None = None
    cost: float | None = None
    currency: str | None = None
    quantity: int | None = Field(None, ge=1)
    price_per_unit: float | None = None
    notes: str | None = None
    refundability: Refundability | None = None
    refund_deadline: date | None = None
    metadata: dict[str, Any] | None = None
    journey_id: str | None = None
    property_group_id: str | None = None


class ReorderDayRequest(BaseModel):
    """Request body for PUT .../segments/order."""

    day_number: int
    segment_ids: list[str]


class MoveSegmentRequest(BaseModel):
    """Request body for POST /segments/{segment_id}/move."""

    index: int = Field(..., ge=0)


class FlightStatusRequest(BaseModel):
    """Request body for PUT /segments/{segment_id}/flight-status."""

    status: FlightStatusCode
    departure_delay_min: int | None = None
    arrival_delay_min: int | None = None
    departure_gate: str | None = None
    departure_terminal: str | None = None
    arrival_gate: str | None = None
    arrival_terminal: str | None = None


@version_router.get("", response_model=list[TripSegment])
async def list_segments(
    trip_id: str, version_id: str, ctx: Context, service: Service
) -> list[TripSegment]:
    """List a version's segments by (day_number, sort_order)."""
    try:
        return service.list_segments(ctx, trip_id, version_id)
    except TripcraftError as e:
        raise http_error(e) from e


@version_router.post("", response_model=TripSegment, status_code=status.HTTP_201_CREATED)
async def add_segment(
    trip_id: str, version_id: str, request: CreateSegmentRequest, ctx: Context, service: Service
) -> TripSegment:
    """Add a segment; appended to the end of its day unless sort_order is given."""
    try:
        return service.add_segment(ctx, trip_id, version_id, **request.model_dump())
    except TripcraftError as e:
        raise http_error(e) from e


@version_router.put("/order", response_model=list[TripSegment])
async def reorder_day(
    trip_id: str, version_id: str, request: ReorderDayRequest, ctx: Context, service: Service
) -> list[TripSegment]:
    """Replace the order of one day's segments."""
    try:
        return service.reorder_day(
            ctx, trip_id, version_id, request.day_number, request.segment_ids
        )
    except TripcraftError as e:
        raise http_error(e) from e


@router.patch("/{segment_id}", response_model=TripSegment)
async def update_segment(
    segment_id: str, request: UpdateSegmentRequest, ctx: Context, service: Service
) -> TripSegment:
    try:
        return service.update_segment(ctx, segment_id, request.model_dump(exclude_unset=True))
    except TripcraftError as e:
        raise http_error(e) from e


@router.delete("/{segment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_segment(segment_id: str, ctx: Context, service: Service) -> None:
    try:
        service.delete_segment(ctx, segment_id)
    except TripcraftError as e:
        raise http_error(e) from e


@router.post("/{segment_id}/move", response_model=list[TripSegment])
async def move_segment(
    segment_id: str, request: MoveSegmentRequest, ctx: Context, service: Service
) -> list[TripSegment]:
    """Move a segment to a new 0-based position within its day."""
    try:
        return service.move_segment(ctx, segment_id, request.index)
    except TripcraftError as e:
        raise http_error(e) from e


@router.get("/{segment_id}/flight-status", response_model=FlightStatusSnapshot)
async def get_flight_status(segment_id: str, ctx: Context, service: Service) -> FlightStatusSnapshot:
    try:
        snapshot = service.get_flight_status(ctx, segment_id)
    except TripcraftError as e:
        raise http_error(e) from e

    if snapshot is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No flight status recorded",
        )
    return snapshot


@router.put("/{segment_id}/flight-status", response_model=FlightStatusSnapshot)
async def record_flight_status(
    segment_id: str, request: FlightStatusRequest, ctx: Context, service: Service
) -> FlightStatusSnapshot:
    """Store the latest status reported for a flight segment."""
    snapshot = FlightStatusSnapshot(segment_id=segment_id, **request.model_dump())
    try:
        return service.record_flight_status(ctx, snapshot)
    except TripcraftError as e:
        raise http_error(e) from e


@router.post("/{segment_id}/flight-status/refresh", response_model=FlightStatusSnapshot)
async def refresh_flight_status(
    segment_id: str,
    ctx: Context,
    service: Service,
    provider: Annotated[FlightStatusProvider, Depends(get_flight_status_provider)],
) -> FlightStatusSnapshot:
    """Fetch the flight's live status from the provider and store it."""
    try:
        snapshot = await service.refresh_flight_status(ctx, segment_id, provider)
    except TripcraftError as e:
        raise http_error(e) from e
    except httpx.HTTPError as e:
        logger.warning(f"[refresh_flight_status] segment_id={segment_id} error={e!r}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Flight status provider unavailable",
        ) from e

    if snapshot is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Provider has no status for this flight",
        )
    return snapshot
