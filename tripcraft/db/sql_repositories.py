"""SQL implementation of the trip repository."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from tripcraft.db import models as orm
from tripcraft.db.context import RequestContext
from tripcraft.db.queries import query_trips
from tripcraft.models.flight_status import FlightStatusSnapshot
from tripcraft.models.segment import SegmentVariant, TripSegment
from tripcraft.models.selection import ClientSelectionRecord
from tripcraft.models.trip import Trip, TripVersion


def _trip_values(trip: Trip) -> dict[str, Any]:
    data = trip.model_dump(exclude={"id"})
    data["trip_id"] = trip.id
    data["status"] = trip.status.value
    return data


def _trip_from_row(row: orm.Trip) -> Trip:
    return Trip(
        id=row.trip_id,
        org_id=row.org_id,
        title=row.title,
        destination=row.destination,
        destinations=list(row.destinations or []),
        description=row.description,
        start_date=row.start_date,
        end_date=row.end_date,
        status=row.status,
        budget=row.budget,
        currency=row.currency,
        client_id=row.client_id,
        advisor_id=row.advisor_id,
        notes=row.notes,
        approved_version_id=row.approved_version_id,
        approved_at=row.approved_at,
        share_token=row.share_token,
        share_enabled=row.share_enabled,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _version_values(version: TripVersion) -> dict[str, Any]:
    data = version.model_dump(exclude={"id"})
    data["version_id"] = version.id
    data["discount_type"] = version.discount_type.value
    return data


def _version_from_row(row: orm.TripVersion) -> TripVersion:
    return TripVersion(
        id=row.version_id,
        trip_id=row.trip_id,
        version_number=row.version_number,
        name=row.name,
        is_primary=row.is_primary,
        show_pricing=row.show_pricing,
        discount=row.discount,
        discount_type=row.discount_type,
        discount_label=row.discount_label,
        created_at=row.created_at,
    )


def _segment_values(segment: TripSegment) -> dict[str, Any]:
    data = segment.model_dump(exclude={"id", "metadata"})
    data["segment_id"] = segment.id
    data["type"] = segment.type.value
    data["refundability"] = segment.refundability.value
    data["segment_metadata"] = segment.model_dump(mode="json")["metadata"]
    return data


def _segment_from_row(row: orm.TripSegment) -> TripSegment:
    return TripSegment(
        id=row.segment_id,
        trip_id=row.trip_id,
        version_id=row.version_id,
        type=row.type,
        day_number=row.day_number,
        sort_order=row.sort_order,
        title=row.title,
        subtitle=row.subtitle,
        start_time=row.start_time,
        end_time=row.end_time,
        confirmation_number=row.confirmation_number,
        cost=row.cost,
        currency=row.currency,
        quantity=row.quantity,
        price_per_unit=row.price_per_unit,
        notes=row.notes,
        refundability=row.refundability,
        refund_deadline=row.refund_deadline,
        metadata=dict(row.segment_metadata or {}),
        has_variants=row.has_variants,
        journey_id=row.journey_id,
        property_group_id=row.property_group_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _variant_values(variant: SegmentVariant) -> dict[str, Any]:
    data = variant.model_dump(exclude={"id"})
    data["variant_id"] = variant.id
    data["variant_type"] = variant.variant_type.value
    data["refundability"] = variant.refundability.value
    return data


def _variant_from_row(row: orm.SegmentVariant) -> SegmentVariant:
    return SegmentVariant(
        id=row.variant_id,
        segment_id=row.segment_id,
        label=row.label,
        variant_type=row.variant_type,
        description=row.description,
        cost=row.cost,
        currency=row.currency,
        quantity=row.quantity,
        price_per_unit=row.price_per_unit,
        refundability=row.refundability,
        refund_deadline=row.refund_deadline,
        sort_order=row.sort_order,
        created_at=row.created_at,
    )


class SqlTripRepository:
    """SQL implementation of TripRepository."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def _upsert(self, model: type[orm.Base], key: str, values: dict[str, Any]) -> None:
        row = self._session.get(model, key)
        if row is None:
            self._session.add(model(**values))
        else:
            for field, value in values.items():
                setattr(row, field, value)

    # Trips

    def create_trip(self, trip: Trip) -> Trip:
        """Insert a new trip."""
        self._session.add(orm.Trip(**_trip_values(trip)))
        self._session.commit()
        return trip

    def get_trip(self, trip_id: str, ctx: RequestContext | None) -> Trip | None:
        """Get trip by ID."""
        if ctx is None:
            row = self._session.get(orm.Trip, trip_id)
        else:
            row = query_trips(self._session, ctx).filter(orm.Trip.trip_id == trip_id).first()

        if row is None:
            return None

        return _trip_from_row(row)

    def list_trips(self, ctx: RequestContext) -> list[Trip]:
        """List the org's trips."""
        rows = query_trips(self._session, ctx).order_by(orm.Trip.updated_at.desc()).all()
        return [_trip_from_row(row) for row in rows]

    def update_trip(self, trip: Trip) -> Trip:
        """Replace a stored trip."""
        self._upsert(orm.Trip, trip.id, _trip_values(trip))
        self._session.commit()
        return trip

    def delete_trip(self, trip_id: str, ctx: RequestContext) -> bool:
        """Delete a trip and everything it owns."""
        row = query_trips(self._session, ctx).filter(orm.Trip.trip_id == trip_id).first()
        if row is None:
            return False

        self._session.delete(row)
        self._session.commit()
        return True

    # Versions

    def add_version(self, version: TripVersion) -> TripVersion:
        """Insert a version."""
        self._session.add(orm.TripVersion(**_version_values(version)))
        self._session.commit()
        return version

    def get_version(self, version_id: str) -> TripVersion | None:
        """Get version by ID."""
        row = self._session.get(orm.TripVersion, version_id)
        return _version_from_row(row) if row is not None else None

    def list_versions(self, trip_id: str) -> list[TripVersion]:
        """List a trip's versions."""
        rows = self._session.scalars(
            select(orm.TripVersion)
            .where(orm.TripVersion.trip_id == trip_id)
            .order_by(orm.TripVersion.version_number)
        ).all()
        return [_version_from_row(row) for row in rows]

    def save_versions(self, versions: list[TripVersion]) -> None:
        """Replace several versions in one transaction."""
        for version in versions:
            self._upsert(orm.TripVersion, version.id, _version_values(version))
        self._session.commit()

    def delete_version(self, version_id: str) -> bool:
        """Delete a version with its segments, variants and selections."""
        row = self._session.get(orm.TripVersion, version_id)
        if row is None:
            return False

        self._session.delete(row)
        self._session.commit()
        return True

    # Segments

    def add_segment(self, segment: TripSegment) -> TripSegment:
        """Insert a segment."""
        self._session.add(orm.TripSegment(**_segment_values(segment)))
        self._session.commit()
        return segment

    def get_segment(self, segment_id: str) -> TripSegment | None:
        """Get segment by ID."""
        row = self._session.get(orm.TripSegment, segment_id)
        return _segment_from_row(row) if row is not None else None

    def list_segments(self, version_id: str) -> list[TripSegment]:
        """List a version's segments in display order."""
        rows = self._session.scalars(
            select(orm.TripSegment)
            .where(orm.TripSegment.version_id == version_id)
            .order_by(orm.TripSegment.day_number, orm.TripSegment.sort_order)
        ).all()
        return [_segment_from_row(row) for row in rows]

    def update_segment(self, segment: TripSegment) -> TripSegment:
        """Replace a stored segment."""
        self._upsert(orm.TripSegment, segment.id, _segment_values(segment))
        self._session.commit()
        return segment

    def delete_segment(self, segment_id: str) -> bool:
        """Delete a segment with its variants and flight status."""
        row = self._session.get(orm.TripSegment, segment_id)
        if row is None:
            return False

        self._session.delete(row)
        self._session.commit()
        return True

    def reorder_segments(self, version_id: str, segment_ids: list[str]) -> None:
        """Assign sort_order by position in a single commit."""
        rows = self._session.scalars(
            select(orm.TripSegment).where(
                orm.TripSegment.version_id == version_id,
                orm.TripSegment.segment_id.in_(segment_ids),
            )
        ).all()
        positions = {segment_id: i for i, segment_id in enumerate(segment_ids)}
        for row in rows:
            row.sort_order = positions[row.segment_id]
        self._session.commit()

    # Variants

    def add_variant(self, variant: SegmentVariant) -> SegmentVariant:
        """Insert a variant."""
        self._session.add(orm.SegmentVariant(**_variant_values(variant)))
        self._session.commit()
        return variant

    def get_variant(self, variant_id: str) -> SegmentVariant | None:
        """Get variant by ID."""
        row = self._session.get(orm.SegmentVariant, variant_id)
        return _variant_from_row(row) if row is not None else None

    def list_variants(self, version_id: str) -> list[SegmentVariant]:
        """List variants of a version's segments."""
        rows = self._session.scalars(
            select(orm.SegmentVariant)
            .join(orm.TripSegment)
            .where(orm.TripSegment.version_id == version_id)
            .order_by(orm.SegmentVariant.segment_id, orm.SegmentVariant.sort_order)
        ).all()
        return [_variant_from_row(row) for row in rows]

    def update_variant(self, variant: SegmentVariant) -> SegmentVariant:
        """Replace a stored variant."""
        self._upsert(orm.SegmentVariant, variant.id, _variant_values(variant))
        self._session.commit()
        return variant

    def delete_variant(self, variant_id: str) -> bool:
        """Delete a variant."""
        row = self._session.get(orm.SegmentVariant, variant_id)
        if row is None:
            return False

        self._session.delete(row)
        self._session.commit()
        return True

    # Client selections

    def get_selection_record(self, version_id: str) -> ClientSelectionRecord | None:
        """Get the selection ledger of a version."""
        row = self._session.get(orm.ClientSelection, version_id)
        if row is None:
            return None

        return ClientSelectionRecord(
            trip_id=row.trip_id,
            version_id=row.version_id,
            selections=row.selections or {},
            last_submitted_at=row.last_submitted_at,
            approved_at=row.approved_at,
        )

    def save_selection_record(self, record: ClientSelectionRecord) -> None:
        """Insert or replace a selection ledger."""
        values = {
            "version_id": record.version_id,
            "trip_id": record.trip_id,
            "selections": record.model_dump(mode="json")["selections"],
            "last_submitted_at": record.last_submitted_at,
            "approved_at": record.approved_at,
        }
        self._upsert(orm.ClientSelection, record.version_id, values)
        self._session.commit()

    # Flight status

    def save_flight_status(self, snapshot: FlightStatusSnapshot) -> None:
        """Insert or replace a status snapshot."""
        values = snapshot.model_dump()
        values["status"] = snapshot.status.value
        self._upsert(orm.FlightStatus, snapshot.segment_id, values)
        self._session.commit()

    def get_flight_status(self, segment_id: str) -> FlightStatusSnapshot | None:
        """Get a status snapshot."""
        row = self._session.get(orm.FlightStatus, segment_id)
        if row is None:
            return None

        return FlightStatusSnapshot(
            segment_id=row.segment_id,
            status=row.status,
            departure_delay_min=row.departure_delay_min,
            arrival_delay_min=row.arrival_delay_min,
            departure_gate=row.departure_gate,
            departure_terminal=row.departure_terminal,
            arrival_gate=row.arrival_gate,
            arrival_terminal=row.arrival_terminal,
            checked_at=row.checked_at,
        )
