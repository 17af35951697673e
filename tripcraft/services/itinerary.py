"""Advisor-side itinerary service: trips, versions, segments, variants and sharing."""

import logging
import secrets
from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel

from tripcraft.adapters.flight_status import FlightStatusProvider
from tripcraft.approval import machine as approval
from tripcraft.config import Settings, get_settings
from tripcraft.db.context import RequestContext
from tripcraft.db.repositories import TripRepository
from tripcraft.errors import InvalidInputError, NotFoundError
from tripcraft.grouping.engine import move_within_day, splice_day_order
from tripcraft.models.common import TripStatus, utcnow
from tripcraft.models.flight_status import FlightStatusSnapshot
from tripcraft.models.itinerary import ItineraryView
from tripcraft.models.segment import SegmentVariant, TripSegment
from tripcraft.models.selection import ClientSelectionRecord
from tripcraft.models.trip import Trip, TripVersion
from tripcraft.services.views import (
    FLIGHT_TYPES,
    build_itinerary_view,
    clear_record_approval,
    load_selection_record,
)
from tripcraft.variants.engine import reopen_selection
from tripcraft.versions import manager as versions_manager

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Fields never writable through generic update calls
_TRIP_PROTECTED = {
    "id",
    "org_id",
    "approved_version_id",
    "approved_at",
    "share_token",
    "share_enabled",
    "created_at",
}
_VERSION_PROTECTED = {"id", "trip_id", "version_number", "is_primary", "created_at"}
_SEGMENT_PROTECTED = {"id", "trip_id", "version_id", "has_variants", "created_at"}
_VARIANT_PROTECTED = {"id", "segment_id", "created_at"}


def _apply(model: ModelT, changes: Mapping[str, Any], protected: set[str]) -> ModelT:
    """Return a re-validated copy of model with changes applied.

    Raises:
        InvalidInputError: If a protected field is targeted or validation fails
    """
    blocked = protected.intersection(changes)
    if blocked:
        raise InvalidInputError(f"Fields cannot be updated: {', '.join(sorted(blocked))}")

    data = model.model_dump()
    data.update(changes)
    if "updated_at" in type(model).model_fields:
        data["updated_at"] = utcnow()
    try:
        return type(model).model_validate(data)
    except ValueError as e:
        raise InvalidInputError(str(e)) from e


class ItineraryService:
    """Advisor operations, scoped to the caller's organization."""

    def __init__(self, repository: TripRepository, settings: Settings | None = None) -> None:
        self._repo = repository
        self._settings = settings or get_settings()

    # Lookups

    def get_trip(self, ctx: RequestContext, trip_id: str) -> Trip:
        """Get a trip of the caller's org.

        Raises:
            NotFoundError: If unknown or owned by another org
        """
        trip = self._repo.get_trip(trip_id, ctx)
        if trip is None:
            raise NotFoundError("trip", trip_id)
        return trip

    def get_version(self, ctx: RequestContext, trip_id: str, version_id: str) -> TripVersion:
        """Get a version that belongs to the given trip."""
        self.get_trip(ctx, trip_id)
        version = self._repo.get_version(version_id)
        if version is None or version.trip_id != trip_id:
            raise NotFoundError("version", version_id)
        return version

    def get_segment(self, ctx: RequestContext, segment_id: str) -> TripSegment:
        """Get a segment of one of the org's trips."""
        segment = self._repo.get_segment(segment_id)
        if segment is None or self._repo.get_trip(segment.trip_id, ctx) is None:
            raise NotFoundError("segment", segment_id)
        return segment

    def get_variant(self, ctx: RequestContext, variant_id: str) -> SegmentVariant:
        """Get a variant of one of the org's segments."""
        variant = self._repo.get_variant(variant_id)
        if variant is None:
            raise NotFoundError("variant", variant_id)
        try:
            self.get_segment(ctx, variant.segment_id)
        except NotFoundError as e:
            raise NotFoundError("variant", variant_id) from e
        return variant

    # Trips

    def list_trips(self, ctx: RequestContext) -> list[Trip]:
        return self._repo.list_trips(ctx)

    def create_trip(self, ctx: RequestContext, title: str, **fields: Any) -> Trip:
        """Create a trip with a primary "Version 1".

        Args:
            ctx: Request context
            title: Trip title
            **fields: Other Trip fields (destination, dates, budget, ...)

        Returns:
            Stored trip
        """
        blocked = _TRIP_PROTECTED.intersection(fields)
        if blocked:
            raise InvalidInputError(f"Fields cannot be set: {', '.join(sorted(blocked))}")
        fields.setdefault("advisor_id", ctx.user_id)
        try:
            trip = Trip(org_id=ctx.org_id, title=title, **fields)
        except ValueError as e:
            raise InvalidInputError(str(e)) from e

        self._repo.create_trip(trip)
        version = TripVersion(trip_id=trip.id, version_number=1, name="Version 1", is_primary=True)
        self._repo.add_version(version)

        logger.info(f"[create_trip] trip_id={trip.id} org_id={ctx.org_id}")
        return trip

    def update_trip(self, ctx: RequestContext, trip_id: str, changes: Mapping[str, Any]) -> Trip:
        """Update trip fields. Approval is left untouched."""
        trip = _apply(self.get_trip(ctx, trip_id), changes, _TRIP_PROTECTED)
        return self._repo.update_trip(trip)

    def archive_trip(self, ctx: RequestContext, trip_id: str) -> Trip:
        """Soft-delete a trip."""
        trip = self.get_trip(ctx, trip_id)
        archived = trip.model_copy(update={"status": TripStatus.archived, "updated_at": utcnow()})
        logger.info(f"[archive_trip] trip_id={trip_id}")
        return self._repo.update_trip(archived)

    def delete_trip(self, ctx: RequestContext, trip_id: str) -> None:
        """Hard-delete a trip with everything it owns."""
        if not self._repo.delete_trip(trip_id, ctx):
            raise NotFoundError("trip", trip_id)
        logger.info(f"[delete_trip] trip_id={trip_id}")

    # Versions

    def list_versions(self, ctx: RequestContext, trip_id: str) -> list[TripVersion]:
        self.get_trip(ctx, trip_id)
        return self._repo.list_versions(trip_id)

    def update_version(
        self, ctx: RequestContext, trip_id: str, version_id: str, changes: Mapping[str, Any]
    ) -> TripVersion:
        """Update name, pricing visibility or discount settings."""
        version = _apply(self.get_version(ctx, trip_id, version_id), changes, _VERSION_PROTECTED)
        self._repo.save_versions([version])
        return version

    def duplicate_version(
        self, ctx: RequestContext, trip_id: str, version_id: str, name: str | None = None
    ) -> TripVersion:
        """Clone a version with its segments and variants."""
        source = self.get_version(ctx, trip_id, version_id)
        duplicate = versions_manager.duplicate_version(
            source,
            self._repo.list_versions(trip_id),
            self._repo.list_segments(version_id),
            self._repo.list_variants(version_id),
            name=name,
        )

        self._repo.add_version(duplicate.version)
        for segment in duplicate.segments:
            self._repo.add_segment(segment)
        for variant in duplicate.variants:
            self._repo.add_variant(variant)

        logger.info(
            f"[duplicate_version] trip_id={trip_id} source={version_id} "
            f"new={duplicate.version.id} segments={len(duplicate.segments)}"
        )
        return duplicate.version

    def set_primary(self, ctx: RequestContext, trip_id: str, version_id: str) -> list[TripVersion]:
        """Make one version primary, demoting all others in one write."""
        self.get_trip(ctx, trip_id)
        versions = versions_manager.set_primary(self._repo.list_versions(trip_id), version_id)
        self._repo.save_versions(versions)
        return versions

    def delete_version(self, ctx: RequestContext, trip_id: str, version_id: str) -> None:
        """Delete a non-primary version that is not the trip's last."""
        self.get_trip(ctx, trip_id)
        versions_manager.check_deletable(self._repo.list_versions(trip_id), version_id)
        self._repo.delete_version(version_id)
        logger.info(f"[delete_version] trip_id={trip_id} version_id={version_id}")

    # Segments

    def list_segments(self, ctx: RequestContext, trip_id: str, version_id: str) -> list[TripSegment]:
        self.get_version(ctx, trip_id, version_id)
        return self._repo.list_segments(version_id)

    def add_segment(
        self, ctx: RequestContext, trip_id: str, version_id: str, **fields: Any
    ) -> TripSegment:
        """Append a segment to the end of its day unless sort_order is given."""
        self.get_version(ctx, trip_id, version_id)
        blocked = _SEGMENT_PROTECTED.intersection(fields)
        if blocked:
            raise InvalidInputError(f"Fields cannot be set: {', '.join(sorted(blocked))}")

        if fields.get("sort_order") is None:
            day_number = fields.get("day_number")
            same_day = [
                s.sort_order
                for s in self._repo.list_segments(version_id)
                if s.day_number == day_number
            ]
            fields["sort_order"] = max(same_day, default=-1) + 1

        try:
            segment = TripSegment(trip_id=trip_id, version_id=version_id, **fields)
        except ValueError as e:
            raise InvalidInputError(str(e)) from e

        return self._repo.add_segment(segment)

    def update_segment(
        self, ctx: RequestContext, segment_id: str, changes: Mapping[str, Any]
    ) -> TripSegment:
        segment = _apply(self.get_segment(ctx, segment_id), changes, _SEGMENT_PROTECTED)
        return self._repo.update_segment(segment)

    def delete_segment(self, ctx: RequestContext, segment_id: str) -> None:
        segment = self.get_segment(ctx, segment_id)
        self._repo.delete_segment(segment_id)

        record = self._repo.get_selection_record(segment.version_id)
        if record is not None and segment_id in record.selections:
            selections = {k: v for k, v in record.selections.items() if k != segment_id}
            self._repo.save_selection_record(record.model_copy(update={"selections": selections}))

    def reorder_day(
        self,
        ctx: RequestContext,
        trip_id: str,
        version_id: str,
        day_number: int,
        ordered_ids: list[str],
    ) -> list[TripSegment]:
        """Replace one day's order as a single version-wide reorder."""
        self.get_version(ctx, trip_id, version_id)
        order = splice_day_order(self._repo.list_segments(version_id), day_number, ordered_ids)
        self._repo.reorder_segments(version_id, order)
        return self._repo.list_segments(version_id)

    def move_segment(self, ctx: RequestContext, segment_id: str, new_index: int) -> list[TripSegment]:
        """Move a segment to a new position within its day."""
        segment = self.get_segment(ctx, segment_id)
        order = move_within_day(self._repo.list_segments(segment.version_id), segment_id, new_index)
        self._repo.reorder_segments(segment.version_id, order)
        return self._repo.list_segments(segment.version_id)

    # Variants

    def list_variants(self, ctx: RequestContext, segment_id: str) -> list[SegmentVariant]:
        segment = self.get_segment(ctx, segment_id)
        return [v for v in self._repo.list_variants(segment.version_id) if v.segment_id == segment_id]

    def add_variant(
        self, ctx: RequestContext, segment_id: str, label: str, **fields: Any
    ) -> SegmentVariant:
        """Attach a variant; the segment becomes selectable."""
        segment = self.get_segment(ctx, segment_id)
        blocked = _VARIANT_PROTECTED.intersection(fields)
        if blocked:
            raise InvalidInputError(f"Fields cannot be set: {', '.join(sorted(blocked))}")
        try:
            variant = SegmentVariant(segment_id=segment_id, label=label, **fields)
        except ValueError as e:
            raise InvalidInputError(str(e)) from e

        self._repo.add_variant(variant)
        if not segment.has_variants:
            self._repo.update_segment(
                segment.model_copy(update={"has_variants": True, "updated_at": utcnow()})
            )
        return variant

    def update_variant(
        self, ctx: RequestContext, variant_id: str, changes: Mapping[str, Any]
    ) -> SegmentVariant:
        variant = _apply(self.get_variant(ctx, variant_id), changes, _VARIANT_PROTECTED)
        return self._repo.update_variant(variant)

    def delete_variant(self, ctx: RequestContext, variant_id: str) -> None:
        """Delete a variant and drop the client's choice of it, submitted or not."""
        variant = self.get_variant(ctx, variant_id)
        segment = self.get_segment(ctx, variant.segment_id)
        self._repo.delete_variant(variant_id)

        remaining = [
            v for v in self._repo.list_variants(segment.version_id) if v.segment_id == segment.id
        ]
        if not remaining:
            self._repo.update_segment(
                segment.model_copy(update={"has_variants": False, "updated_at": utcnow()})
            )

        record = self._repo.get_selection_record(segment.version_id)
        if record is None:
            return
        entry = record.entry_for(segment.id)
        if entry is not None and entry.option == variant_id:
            selections = {k: v for k, v in record.selections.items() if k != segment.id}
            self._repo.save_selection_record(record.model_copy(update={"selections": selections}))

    # Views

    def get_itinerary(
        self, ctx: RequestContext, trip_id: str, version_id: str | None = None
    ) -> ItineraryView:
        """Grouped and priced view of a version (primary when not given)."""
        trip = self.get_trip(ctx, trip_id)
        versions = self._repo.list_versions(trip_id)
        version = versions_manager.resolve_active_version(versions, version_id)
        if version is None:
            raise NotFoundError("version", version_id or trip_id)
        return build_itinerary_view(self._repo, trip, version, self._settings)

    # Sharing

    def enable_share(self, ctx: RequestContext, trip_id: str) -> Trip:
        """Enable the share link, issuing a token if the trip has none."""
        trip = self.get_trip(ctx, trip_id)
        token = trip.share_token or secrets.token_urlsafe(self._settings.share_token_bytes)
        updated = trip.model_copy(
            update={"share_token": token, "share_enabled": True, "updated_at": utcnow()}
        )
        logger.info(f"[enable_share] trip_id={trip_id}")
        return self._repo.update_trip(updated)

    def rotate_share_token(self, ctx: RequestContext, trip_id: str) -> Trip:
        """Issue a fresh token; links carrying the old one stop working."""
        trip = self.get_trip(ctx, trip_id)
        updated = trip.model_copy(
            update={
                "share_token": secrets.token_urlsafe(self._settings.share_token_bytes),
                "updated_at": utcnow(),
            }
        )
        logger.info(f"[rotate_share_token] trip_id={trip_id}")
        return self._repo.update_trip(updated)

    def disable_share(self, ctx: RequestContext, trip_id: str) -> Trip:
        trip = self.get_trip(ctx, trip_id)
        updated = trip.model_copy(update={"share_enabled": False, "updated_at": utcnow()})
        logger.info(f"[disable_share] trip_id={trip_id}")
        return self._repo.update_trip(updated)

    # Approval and selections

    def invalidate_approval(self, ctx: RequestContext, trip_id: str) -> Trip:
        """Clear the trip's approval on the advisor's explicit request."""
        trip = self.get_trip(ctx, trip_id)
        updated = approval.invalidate_approval(trip)
        if updated is trip:
            return trip

        clear_record_approval(self._repo, trip.approved_version_id)
        logger.info(f"[invalidate_approval] trip_id={trip_id} was={trip.approved_version_id}")
        return self._repo.update_trip(updated)

    def reopen_selection(
        self, ctx: RequestContext, trip_id: str, version_id: str, segment_id: str
    ) -> ClientSelectionRecord:
        """Unlock a submitted choice so the client can choose again."""
        self.get_version(ctx, trip_id, version_id)
        segment = self.get_segment(ctx, segment_id)
        if segment.version_id != version_id:
            raise NotFoundError("segment", segment_id)

        record = load_selection_record(self._repo, trip_id, version_id)
        updated = reopen_selection(record, segment_id)
        if updated is not record:
            self._repo.save_selection_record(updated)
            logger.info(f"[reopen_selection] trip_id={trip_id} segment_id={segment_id}")
        return updated

    # Flight status

    def record_flight_status(
        self, ctx: RequestContext, snapshot: FlightStatusSnapshot
    ) -> FlightStatusSnapshot:
        """Store the latest status of a flight segment."""
        segment = self.get_segment(ctx, snapshot.segment_id)
        if segment.type not in FLIGHT_TYPES:
            raise InvalidInputError(f"Segment {segment.id} is not a flight")
        self._repo.save_flight_status(snapshot)
        return snapshot

    def get_flight_status(self, ctx: RequestContext, segment_id: str) -> FlightStatusSnapshot | None:
        self.get_segment(ctx, segment_id)
        return self._repo.get_flight_status(segment_id)

    async def refresh_flight_status(
        self, ctx: RequestContext, segment_id: str, provider: FlightStatusProvider
    ) -> FlightStatusSnapshot | None:
        """Fetch a flight's status from the provider and store it.

        The flight number comes from metadata.flightNumber and the date from
        the departure date in metadata.departureTimeLocal (or departureTime).

        Returns:
            Stored snapshot, or None when the provider has no data
        """
        segment = self.get_segment(ctx, segment_id)
        if segment.type not in FLIGHT_TYPES:
            raise InvalidInputError(f"Segment {segment.id} is not a flight")

        flight_number = segment.metadata.get("flightNumber")
        departure = segment.metadata.get("departureTimeLocal") or segment.metadata.get(
            "departureTime"
        )
        if not isinstance(flight_number, str) or not flight_number:
            raise InvalidInputError(f"Segment {segment.id} has no flight number")
        if not isinstance(departure, str) or len(departure) < 10:
            raise InvalidInputError(f"Segment {segment.id} has no departure date")

        snapshot = await provider.fetch_status(segment_id, flight_number, departure[:10])
        if snapshot is None:
            return None

        self._repo.save_flight_status(snapshot)
        logger.info(
            f"[refresh_flight_status] segment_id={segment_id} flight={flight_number} "
            f"status={snapshot.status.value}"
        )
        return snapshot
