"""Variant endpoints - alternatives offered on a segment."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from tripcraft.api.auth import get_current_context
from tripcraft.api.deps import get_itinerary_service
from tripcraft.api.errors import http_error
from tripcraft.db.context import RequestContext
from tripcraft.errors import TripcraftError
from tripcraft.models.common import Refundability, VariantType
from tripcraft.models.segment import SegmentVariant
from tripcraft.services.itinerary import ItineraryService

segment_router = APIRouter(prefix="/segments/{segment_id}/variants", tags=["variants"])
router = APIRouter(prefix="/variants", tags=["variants"])

Context = Annotated[RequestContext, Depends(get_current_context)]
Service = Annotated[ItineraryService, Depends(get_itinerary_service)]


class CreateVariantRequest(BaseModel):
    """Request body for POST /segments/{segment_id}/variants."""

    label: str = Field(..., min_length=1)
    variant_type: VariantType = VariantType.upgrade
    description: str | None = None
    cost: float | None = None
    currency: str = "USD"
    quantity: int = Field(1, ge=1)
    price_per_unit: float | None = None
    refundability: Refundability = Refundability.unknown
    refund_deadline: date | None = None
    sort_order: int = 0


class UpdateVariantRequest(BaseModel):
    """Request body for PATCH /variants/{variant_id}; only sent fields change."""

    label: str | None = Field(None, min_length=1)
    variant_type: VariantType | None = None
    description: str | None = None
    cost: float | None = None
    currency: str | None = None
    quantity: int | None = Field(None, ge=1)
    price_per_unit: float | None = None
    refundability: Refundability | None = None
    refund_deadline: date | None = None
    sort_order: int | None = None


@segment_router.get("", response_model=list[SegmentVariant])
async def list_variants(segment_id: str, ctx: Context, service: Service) -> list[SegmentVariant]:
    try:
        return service.list_variants(ctx, segment_id)
    except TripcraftError as e:
        raise http_error(e) from e


@segment_router.post("", response_model=SegmentVariant, status_code=status.HTTP_201_CREATED)
async def add_variant(
    segment_id: str, request: CreateVariantRequest, ctx: Context, service: Service
) -> SegmentVariant:
    """Offer an alternative; the segment becomes selectable by the client."""
    fields = request.model_dump(exclude={"label"})
    try:
        return service.add_variant(ctx, segment_id, request.label, **fields)
    except TripcraftError as e:
        raise http_error(e) from e


@router.patch("/{variant_id}", response_model=SegmentVariant)
async def update_variant(
    variant_id: str, request: UpdateVariantRequest, ctx: Context, service: Service
) -> SegmentVariant:
    try:
        return service.update_variant(ctx, variant_id, request.model_dump(exclude_unset=True))
    except TripcraftError as e:
        raise http_error(e) from e


@router.delete("/{variant_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_variant(variant_id: str, ctx: Context, service: Service) -> None:
    try:
        service.delete_variant(ctx, variant_id)
    except TripcraftError as e:
        raise http_error(e) from e
