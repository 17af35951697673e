"""Version endpoints - update, duplicate, set primary, delete, reopen choices."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from tripcraft.api.auth import get_current_context
from tripcraft.api.deps import get_itinerary_service
from tripcraft.api.errors import http_error
from tripcraft.db.context import RequestContext
from tripcraft.errors import TripcraftError
from tripcraft.models.common import DiscountType
from tripcraft.models.selection import ClientSelectionRecord
from tripcraft.models.trip import TripVersion
from tripcraft.services.itinerary import ItineraryService

router = APIRouter(prefix="/trips/{trip_id}/versions", tags=["versions"])
logger = logging.getLogger(__name__)

Context = Annotated[RequestContext, Depends(get_current_context)]
Service = Annotated[ItineraryService, Depends(get_itinerary_service)]


class UpdateVersionRequest(BaseModel):
    """Request body for PATCH .../versions/{version_id}."""

    name: str | None = Field(None, min_length=1)
    show_pricing: bool | None = None
    discount: float | None = Field(None, ge=0)
    discount_type: DiscountType | None = None
    discount_label: str | None = None


class DuplicateVersionRequest(BaseModel):
    """Request body for POST .../versions/{version_id}/duplicate."""

    name: str | None = Field(None, min_length=1)


@router.get("", response_model=list[TripVersion])
async def list_versions(trip_id: str, ctx: Context, service: Service) -> list[TripVersion]:
    try:
        return service.list_versions(ctx, trip_id)
    except TripcraftError as e:
        raise http_error(e) from e


@router.patch("/{version_id}", response_model=TripVersion)
async def update_version(
    trip_id: str, version_id: str, request: UpdateVersionRequest, ctx: Context, service: Service
) -> TripVersion:
    try:
        return service.update_version(
            ctx, trip_id, version_id, request.model_dump(exclude_unset=True)
        )
    except TripcraftError as e:
        raise http_error(e) from e


@router.post(
    "/{version_id}/duplicate", response_model=TripVersion, status_code=status.HTTP_201_CREATED
)
async def duplicate_version(
    trip_id: str,
    version_id: str,
    ctx: Context,
    service: Service,
    request: DuplicateVersionRequest | None = None,
) -> TripVersion:
    """Clone a version with its segments and variants."""
    name = request.name if request else None
    try:
        return service.duplicate_version(ctx, trip_id, version_id, name)
    except TripcraftError as e:
        raise http_error(e) from e


@router.post("/{version_id}/primary", response_model=list[TripVersion])
async def set_primary(
    trip_id: str, version_id: str, ctx: Context, service: Service
) -> list[TripVersion]:
    """Make this version the one clients see by default."""
    try:
        return service.set_primary(ctx, trip_id, version_id)
    except TripcraftError as e:
        raise http_error(e) from e


@router.delete("/{version_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_version(trip_id: str, version_id: str, ctx: Context, service: Service) -> None:
    try:
        service.delete_version(ctx, trip_id, version_id)
    except TripcraftError as e:
        raise http_error(e) from e


@router.post(
    "/{version_id}/selections/{segment_id}/reopen", response_model=ClientSelectionRecord
)
async def reopen_selection(
    trip_id: str, version_id: str, segment_id: str, ctx: Context, service: Service
) -> ClientSelectionRecord:
    """Unlock a submitted choice for a new selection round."""
    try:
        return service.reopen_selection(ctx, trip_id, version_id, segment_id)
    except TripcraftError as e:
        raise http_error(e) from e
