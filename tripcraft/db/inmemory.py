"""In-memory implementation of the trip repository."""

from tripcraft.db.context import RequestContext
from tripcraft.models.flight_status import FlightStatusSnapshot
from tripcraft.models.segment import SegmentVariant, TripSegment
from tripcraft.models.selection import ClientSelectionRecord
from tripcraft.models.trip import Trip, TripVersion


class InMemoryTripRepository:
    """In-memory implementation of TripRepository."""

    def __init__(self) -> None:
        self._trips: dict[str, Trip] = {}
        self._versions: dict[str, TripVersion] = {}
        self._segments: dict[str, TripSegment] = {}
        self._variants: dict[str, SegmentVariant] = {}
        self._selections: dict[str, ClientSelectionRecord] = {}
        self._flight_status: dict[str, FlightStatusSnapshot] = {}

    # Trips

    def create_trip(self, trip: Trip) -> Trip:
        """Insert a new trip."""
        self._trips[trip.id] = trip
        return trip

    def get_trip(self, trip_id: str, ctx: RequestContext | None) -> Trip | None:
        """Get trip by ID."""
        trip = self._trips.get(trip_id)
        if trip is None:
            return None

        # Enforce tenancy
        if ctx is not None and trip.org_id != ctx.org_id:
            return None

        return trip

    def list_trips(self, ctx: RequestContext) -> list[Trip]:
        """List the org's trips."""
        trips = [t for t in self._trips.values() if t.org_id == ctx.org_id]
        trips.sort(key=lambda t: t.updated_at, reverse=True)
        return trips

    def update_trip(self, trip: Trip) -> Trip:
        """Replace a stored trip."""
        self._trips[trip.id] = trip
        return trip

    def delete_trip(self, trip_id: str, ctx: RequestContext) -> bool:
        """Delete a trip and everything it owns."""
        if self.get_trip(trip_id, ctx) is None:
            return False

        for version in self.list_versions(trip_id):
            self.delete_version(version.id)
        del self._trips[trip_id]
        return True

    # Versions

    def add_version(self, version: TripVersion) -> TripVersion:
        """Insert a version."""
        self._versions[version.id] = version
        return version

    def get_version(self, version_id: str) -> TripVersion | None:
        """Get version by ID."""
        return self._versions.get(version_id)

    def list_versions(self, trip_id: str) -> list[TripVersion]:
        """List a trip's versions."""
        versions = [v for v in self._versions.values() if v.trip_id == trip_id]
        versions.sort(key=lambda v: v.version_number)
        return versions

    def save_versions(self, versions: list[TripVersion]) -> None:
        """Replace several versions."""
        for version in versions:
            self._versions[version.id] = version

    def delete_version(self, version_id: str) -> bool:
        """Delete a version with its segments, variants and selections."""
        if version_id not in self._versions:
            return False

        for segment in self.list_segments(version_id):
            self.delete_segment(segment.id)
        self._selections.pop(version_id, None)
        del self._versions[version_id]
        return True

    # Segments

    def add_segment(self, segment: TripSegment) -> TripSegment:
        """Insert a segment."""
        self._segments[segment.id] = segment
        return segment

    def get_segment(self, segment_id: str) -> TripSegment | None:
        """Get segment by ID."""
        return self._segments.get(segment_id)

    def list_segments(self, version_id: str) -> list[TripSegment]:
        """List a version's segments in display order."""
        segments = [s for s in self._segments.values() if s.version_id == version_id]
        segments.sort(key=lambda s: (s.day_number, s.sort_order))
        return segments

    def update_segment(self, segment: TripSegment) -> TripSegment:
        """Replace a stored segment."""
        self._segments[segment.id] = segment
        return segment

    def delete_segment(self, segment_id: str) -> bool:
        """Delete a segment with its variants and flight status."""
        if segment_id not in self._segments:
            return False

        for variant_id in [v.id for v in self._variants.values() if v.segment_id == segment_id]:
            del self._variants[variant_id]
        self._flight_status.pop(segment_id, None)
        del self._segments[segment_id]
        return True

    def reorder_segments(self, version_id: str, segment_ids: list[str]) -> None:
        """Assign sort_order by position."""
        updated = dict(self._segments)
        for position, segment_id in enumerate(segment_ids):
            segment = updated.get(segment_id)
            if segment is None or segment.version_id != version_id:
                continue
            updated[segment_id] = segment.model_copy(update={"sort_order": position})
        # Swap in one step
        self._segments = updated

    # Variants

    def add_variant(self, variant: SegmentVariant) -> SegmentVariant:
        """Insert a variant."""
        self._variants[variant.id] = variant
        return variant

    def get_variant(self, variant_id: str) -> SegmentVariant | None:
        """Get variant by ID."""
        return self._variants.get(variant_id)

    def list_variants(self, version_id: str) -> list[SegmentVariant]:
        """List variants of a version's segments."""
        segment_ids = {s.id for s in self._segments.values() if s.version_id == version_id}
        variants = [v for v in self._variants.values() if v.segment_id in segment_ids]
        variants.sort(key=lambda v: (v.segment_id, v.sort_order))
        return variants

    def update_variant(self, variant: SegmentVariant) -> SegmentVariant:
        """Replace a stored variant."""
        self._variants[variant.id] = variant
        return variant

    def delete_variant(self, variant_id: str) -> bool:
        """Delete a variant."""
        return self._variants.pop(variant_id, None) is not None

    # Client selections

    def get_selection_record(self, version_id: str) -> ClientSelectionRecord | None:
        """Get the selection ledger of a version."""
        return self._selections.get(version_id)

    def save_selection_record(self, record: ClientSelectionRecord) -> None:
        """Insert or replace a selection ledger."""
        self._selections[record.version_id] = record

    # Flight status

    def save_flight_status(self, snapshot: FlightStatusSnapshot) -> None:
        """Insert or replace a status snapshot."""
        self._flight_status[snapshot.segment_id] = snapshot

    def get_flight_status(self, segment_id: str) -> FlightStatusSnapshot | None:
        """Get a status snapshot."""
        return self._flight_status.get(segment_id)
