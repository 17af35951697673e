"""Repository protocol interfaces for data access."""

from typing import Protocol

from tripcraft.db.context import RequestContext
from tripcraft.models.flight_status import FlightStatusSnapshot
from tripcraft.models.segment import SegmentVariant, TripSegment
from tripcraft.models.selection import ClientSelectionRecord
from tripcraft.models.trip import Trip, TripVersion


class TripRepository(Protocol):
    """Persistence for trips, versions, segments, variants and selections.

    Lookups taking a RequestContext enforce tenancy; passing None is reserved
    for the token-gated share channel, which authorizes by share token instead.
    """

    # Trips

    def create_trip(self, trip: Trip) -> Trip:
        """Insert a new trip."""
        ...

    def get_trip(self, trip_id: str, ctx: RequestContext | None) -> Trip | None:
        """Get trip by ID.

        Args:
            trip_id: Trip ID
            ctx: Request context (enforces tenancy), or None for share lookups

        Returns:
            Trip or None if not found / out of tenancy
        """
        ...

    def list_trips(self, ctx: RequestContext) -> list[Trip]:
        """List the org's trips, most recently updated first."""
        ...

    def update_trip(self, trip: Trip) -> Trip:
        """Replace a stored trip."""
        ...

    def delete_trip(self, trip_id: str, ctx: RequestContext) -> bool:
        """Delete a trip with all of its versions, segments and variants.

        Returns:
            True if a trip was deleted
        """
        ...

    # Versions

    def add_version(self, version: TripVersion) -> TripVersion:
        """Insert a version."""
        ...

    def get_version(self, version_id: str) -> TripVersion | None:
        """Get version by ID."""
        ...

    def list_versions(self, trip_id: str) -> list[TripVersion]:
        """List a trip's versions ordered by version number."""
        ...

    def save_versions(self, versions: list[TripVersion]) -> None:
        """Replace several versions in one transaction (e.g. primary flip)."""
        ...

    def delete_version(self, version_id: str) -> bool:
        """Delete a version with its segments, variants and selection record."""
        ...

    # Segments

    def add_segment(self, segment: TripSegment) -> TripSegment:
        """Insert a segment."""
        ...

    def get_segment(self, segment_id: str) -> TripSegment | None:
        """Get segment by ID."""
        ...

    def list_segments(self, version_id: str) -> list[TripSegment]:
        """List a version's segments ordered by (day_number, sort_order)."""
        ...

    def update_segment(self, segment: TripSegment) -> TripSegment:
        """Replace a stored segment."""
        ...

    def delete_segment(self, segment_id: str) -> bool:
        """Delete a segment with its variants and flight status."""
        ...

    def reorder_segments(self, version_id: str, segment_ids: list[str]) -> None:
        """Assign sort_order = position for every listed id, atomically.

        Args:
            version_id: Version being reordered
            segment_ids: Full ordered id list of the version
        """
        ...

    # Variants

    def add_variant(self, variant: SegmentVariant) -> SegmentVariant:
        """Insert a variant."""
        ...

    def get_variant(self, variant_id: str) -> SegmentVariant | None:
        """Get variant by ID."""
        ...

    def list_variants(self, version_id: str) -> list[SegmentVariant]:
        """List variants of all segments of a version."""
        ...

    def update_variant(self, variant: SegmentVariant) -> SegmentVariant:
        """Replace a stored variant."""
        ...

    def delete_variant(self, variant_id: str) -> bool:
        """Delete a variant."""
        ...

    # Client selections

    def get_selection_record(self, version_id: str) -> ClientSelectionRecord | None:
        """Get the selection ledger of a version."""
        ...

    def save_selection_record(self, record: ClientSelectionRecord) -> None:
        """Insert or replace the selection ledger of a version."""
        ...

    # Flight status

    def save_flight_status(self, snapshot: FlightStatusSnapshot) -> None:
        """Insert or replace the latest status snapshot of a flight segment."""
        ...

    def get_flight_status(self, segment_id: str) -> FlightStatusSnapshot | None:
        """Get the latest status snapshot of a flight segment."""
        ...
