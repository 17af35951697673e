"""Client share endpoints - token-gated view, select, submit and approve.

Every request carries the trip's share token as the `token` query parameter.
A 403 response body includes `requiresToken` so a client can tell a broken
link from a deleted trip (404).
"""

import logging
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from tripcraft.api.deps import get_share_service
from tripcraft.api.errors import http_error
from tripcraft.errors import TripcraftError
from tripcraft.models.itinerary import ItineraryView
from tripcraft.models.selection import SubmissionResult, VariantView
from tripcraft.services.share import ShareService

router = APIRouter(prefix="/share/{trip_id}", tags=["share"])
logger = logging.getLogger(__name__)

Service = Annotated[ShareService, Depends(get_share_service)]
Token = Annotated[str | None, Query()]


class SelectRequest(BaseModel):
    """Request body for POST /share/{trip_id}/select."""

    segment_id: str
    option: str = Field(..., min_length=1, description='"primary" or a variant id')


class VersionRequest(BaseModel):
    """Request body for submit/approve; omitting version_id means the active version."""

    version_id: str | None = None


class ApprovalResponse(BaseModel):
    """Response for POST /share/{trip_id}/approve."""

    trip_id: str
    approved_version_id: str
    approved_at: datetime
    unresolved_segments: int
    replaced_version_id: str | None = None


@router.get("", response_model=ItineraryView)
async def view_trip(
    trip_id: str,
    service: Service,
    token: Token = None,
    version_id: Annotated[str | None, Query()] = None,
) -> ItineraryView:
    """Client view of the requested version, else the primary one."""
    try:
        return service.view(trip_id, token, version_id)
    except TripcraftError as e:
        raise http_error(e) from e


@router.post("/select", response_model=list[VariantView])
async def select_variant(
    trip_id: str, request: SelectRequest, service: Service, token: Token = None
) -> list[VariantView]:
    """Record a tentative choice; a no-op once the segment is submitted."""
    try:
        return service.select(trip_id, token, request.segment_id, request.option)
    except TripcraftError as e:
        raise http_error(e) from e


@router.post("/submit", response_model=SubmissionResult)
async def submit_selections(
    trip_id: str, service: Service, token: Token = None, request: VersionRequest | None = None
) -> SubmissionResult:
    """Lock every choice made so far."""
    version_id = request.version_id if request else None
    try:
        return service.submit(trip_id, token, version_id)
    except TripcraftError as e:
        raise http_error(e) from e


@router.post("/approve", response_model=ApprovalResponse)
async def approve_version(
    trip_id: str, service: Service, token: Token = None, request: VersionRequest | None = None
) -> ApprovalResponse:
    """Approve a version, even with unresolved choices."""
    version_id = request.version_id if request else None
    try:
        outcome = service.approve(trip_id, token, version_id)
    except TripcraftError as e:
        raise http_error(e) from e

    logger.info(
        f"[POST /share/{trip_id}/approve] version_id={outcome.approved_version_id}, "
        f"unresolved={outcome.unresolved_segments}"
    )

    return ApprovalResponse(
        trip_id=outcome.trip.id,
        approved_version_id=outcome.approved_version_id,
        approved_at=outcome.approved_at,
        unresolved_segments=outcome.unresolved_segments,
        replaced_version_id=outcome.replaced_version_id,
    )
