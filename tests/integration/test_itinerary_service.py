"""Integration tests for the advisor-side itinerary service."""

from datetime import date, datetime

import pytest

from tripcraft.adapters.flight_status import FixtureFlightStatusProvider
from tripcraft.db.context import RequestContext
from tripcraft.db.inmemory import InMemoryTripRepository
from tripcraft.errors import InvalidInputError, NotFoundError
from tripcraft.models.common import (
    BudgetStatus,
    DiscountType,
    FlightStatusCode,
    SegmentType,
    TripStatus,
)
from tripcraft.models.flight_status import FlightStatusSnapshot
from tripcraft.models.itinerary import JourneyItem, PropertyGroupItem
from tripcraft.models.selection import ClientSelectionRecord, SelectionEntry
from tripcraft.services.itinerary import ItineraryService


def create_trip(service: ItineraryService, ctx: RequestContext, **fields):
    trip = service.create_trip(ctx, "Iceland", start_date=date(2025, 9, 1), **fields)
    version = service.list_versions(ctx, trip.id)[0]
    return trip, version


def test_create_trip_makes_primary_version_one(
    itinerary_service: ItineraryService, ctx: RequestContext
) -> None:
    trip, version = create_trip(itinerary_service, ctx)

    assert trip.org_id == ctx.org_id
    assert trip.advisor_id == ctx.user_id
    assert version.name == "Version 1"
    assert version.version_number == 1
    assert version.is_primary is True


def test_trips_are_org_scoped(
    itinerary_service: ItineraryService, ctx: RequestContext, other_ctx: RequestContext
) -> None:
    trip, _ = create_trip(itinerary_service, ctx)

    with pytest.raises(NotFoundError):
        itinerary_service.get_trip(other_ctx, trip.id)
    assert itinerary_service.list_trips(other_ctx) == []


def test_update_trip_rejects_protected_fields(
    itinerary_service: ItineraryService, ctx: RequestContext
) -> None:
    trip, _ = create_trip(itinerary_service, ctx)

    with pytest.raises(InvalidInputError):
        itinerary_service.update_trip(ctx, trip.id, {"approved_version_id": "v-x"})


def test_update_trip_validates_dates(
    itinerary_service: ItineraryService, ctx: RequestContext
) -> None:
    trip, _ = create_trip(itinerary_service, ctx)

    with pytest.raises(InvalidInputError):
        itinerary_service.update_trip(ctx, trip.id, {"end_date": date(2025, 8, 1)})

    updated = itinerary_service.update_trip(ctx, trip.id, {"title": "Iceland & Faroe"})
    assert updated.title == "Iceland & Faroe"


def test_archive_trip(itinerary_service: ItineraryService, ctx: RequestContext) -> None:
    trip, _ = create_trip(itinerary_service, ctx)

    assert itinerary_service.archive_trip(ctx, trip.id).status == TripStatus.archived


def test_segments_append_to_end_of_day(
    itinerary_service: ItineraryService, ctx: RequestContext
) -> None:
    trip, version = create_trip(itinerary_service, ctx)

    first = itinerary_service.add_segment(
        ctx, trip.id, version.id, type=SegmentType.activity, day_number=1, title="Glacier hike"
    )
    second = itinerary_service.add_segment(
        ctx, trip.id, version.id, type=SegmentType.restaurant, day_number=1, title="Dinner"
    )
    other_day = itinerary_service.add_segment(
        ctx, trip.id, version.id, type=SegmentType.activity, day_number=2, title="Lagoon"
    )

    assert (first.sort_order, second.sort_order, other_day.sort_order) == (0, 1, 0)


def test_add_segment_rejects_property_group_on_non_hotel(
    itinerary_service: ItineraryService, ctx: RequestContext
) -> None:
    trip, version = create_trip(itinerary_service, ctx)

    with pytest.raises(InvalidInputError):
        itinerary_service.add_segment(
            ctx,
            trip.id,
            version.id,
            type=SegmentType.activity,
            day_number=1,
            property_group_id="P1",
        )


def test_reorder_day(itinerary_service: ItineraryService, ctx: RequestContext) -> None:
    trip, version = create_trip(itinerary_service, ctx)
    ids = [
        itinerary_service.add_segment(
            ctx, trip.id, version.id, type=SegmentType.activity, day_number=1, title=f"s{i}"
        ).id
        for i in range(4)
    ]

    segments = itinerary_service.reorder_day(
        ctx, trip.id, version.id, 1, [ids[2], ids[0], ids[1], ids[3]]
    )
    assert [s.id for s in segments] == [ids[2], ids[0], ids[1], ids[3]]

    segments = itinerary_service.move_segment(ctx, ids[3], 0)
    assert [s.id for s in segments] == [ids[3], ids[2], ids[0], ids[1]]


def test_variant_lifecycle_toggles_has_variants(
    itinerary_service: ItineraryService, ctx: RequestContext
) -> None:
    trip, version = create_trip(itinerary_service, ctx)
    segment = itinerary_service.add_segment(
        ctx, trip.id, version.id, type=SegmentType.hotel, day_number=1, cost=400
    )

    variant = itinerary_service.add_variant(ctx, segment.id, "Sea view", cost=550)
    assert itinerary_service.get_segment(ctx, segment.id).has_variants is True
    assert [v.id for v in itinerary_service.list_variants(ctx, segment.id)] == [variant.id]

    itinerary_service.delete_variant(ctx, variant.id)
    assert itinerary_service.get_segment(ctx, segment.id).has_variants is False


def test_delete_variant_drops_tentative_choice(
    itinerary_service: ItineraryService, repo: InMemoryTripRepository, ctx: RequestContext
) -> None:
    trip, version = create_trip(itinerary_service, ctx)
    segment = itinerary_service.add_segment(
        ctx, trip.id, version.id, type=SegmentType.hotel, day_number=1, cost=400
    )
    variant = itinerary_service.add_variant(ctx, segment.id, "Sea view", cost=550)
    repo.save_selection_record(
        ClientSelectionRecord(
            trip_id=trip.id,
            version_id=version.id,
            selections={segment.id: SelectionEntry(option=variant.id)},
        )
    )

    itinerary_service.delete_variant(ctx, variant.id)

    record = repo.get_selection_record(version.id)
    assert record is not None
    assert segment.id not in record.selections


def test_delete_variant_releases_submitted_choice(
    itinerary_service: ItineraryService, repo: InMemoryTripRepository, ctx: RequestContext
) -> None:
    """Removing the variant a client locked in reopens the segment."""
    trip, version = create_trip(itinerary_service, ctx)
    segment = itinerary_service.add_segment(
        ctx, trip.id, version.id, type=SegmentType.hotel, day_number=1, cost=400
    )
    suite = itinerary_service.add_variant(ctx, segment.id, "Suite", cost=900)
    villa = itinerary_service.add_variant(ctx, segment.id, "Villa", cost=1400)
    repo.save_selection_record(
        ClientSelectionRecord(
            trip_id=trip.id,
            version_id=version.id,
            selections={
                segment.id: SelectionEntry(option=suite.id, submitted_at=datetime(2025, 5, 1))
            },
        )
    )

    itinerary_service.delete_variant(ctx, suite.id)

    view = itinerary_service.get_itinerary(ctx, trip.id)
    assert [(v.option, v.is_selected) for v in view.variants[segment.id]] == [
        ("primary", False),
        (villa.id, False),
    ]
    assert view.selection_progress.selected == 0
    assert view.selection_progress.submitted == 0


def test_delete_other_variant_keeps_submitted_choice(
    itinerary_service: ItineraryService, repo: InMemoryTripRepository, ctx: RequestContext
) -> None:
    trip, version = create_trip(itinerary_service, ctx)
    segment = itinerary_service.add_segment(
        ctx, trip.id, version.id, type=SegmentType.hotel, day_number=1, cost=400
    )
    suite = itinerary_service.add_variant(ctx, segment.id, "Suite", cost=900)
    villa = itinerary_service.add_variant(ctx, segment.id, "Villa", cost=1400)
    repo.save_selection_record(
        ClientSelectionRecord(
            trip_id=trip.id,
            version_id=version.id,
            selections={
                segment.id: SelectionEntry(option=suite.id, submitted_at=datetime(2025, 5, 1))
            },
        )
    )

    itinerary_service.delete_variant(ctx, villa.id)

    record = repo.get_selection_record(version.id)
    assert record is not None
    assert record.is_locked(segment.id)
    assert record.selections[segment.id].option == suite.id


def test_duplicate_version_copies_segments(
    itinerary_service: ItineraryService, ctx: RequestContext
) -> None:
    trip, version = create_trip(itinerary_service, ctx)
    segment = itinerary_service.add_segment(
        ctx, trip.id, version.id, type=SegmentType.hotel, day_number=1, cost=400
    )
    itinerary_service.add_variant(ctx, segment.id, "Suite", cost=900)

    duplicate = itinerary_service.duplicate_version(ctx, trip.id, version.id)

    assert duplicate.name == "Version 2"
    copied = itinerary_service.list_segments(ctx, trip.id, duplicate.id)
    assert len(copied) == 1
    assert copied[0].id != segment.id
    assert len(itinerary_service.list_variants(ctx, copied[0].id)) == 1


def test_delete_version_rules(itinerary_service: ItineraryService, ctx: RequestContext) -> None:
    trip, version = create_trip(itinerary_service, ctx)

    with pytest.raises(InvalidInputError):
        itinerary_service.delete_version(ctx, trip.id, version.id)

    duplicate = itinerary_service.duplicate_version(ctx, trip.id, version.id)
    itinerary_service.add_segment(
        ctx, trip.id, duplicate.id, type=SegmentType.note, day_number=1
    )

    with pytest.raises(InvalidInputError):
        itinerary_service.delete_version(ctx, trip.id, version.id)

    itinerary_service.delete_version(ctx, trip.id, duplicate.id)

    assert [v.id for v in itinerary_service.list_versions(ctx, trip.id)] == [version.id]
    with pytest.raises(NotFoundError):
        itinerary_service.list_segments(ctx, trip.id, duplicate.id)


def test_set_primary(itinerary_service: ItineraryService, ctx: RequestContext) -> None:
    trip, version = create_trip(itinerary_service, ctx)
    duplicate = itinerary_service.duplicate_version(ctx, trip.id, version.id)

    versions = itinerary_service.set_primary(ctx, trip.id, duplicate.id)

    assert [v.id for v in versions if v.is_primary] == [duplicate.id]


def test_itinerary_view_groups_and_prices(
    itinerary_service: ItineraryService, ctx: RequestContext
) -> None:
    trip, version = create_trip(itinerary_service, ctx, budget=3000)
    itinerary_service.update_version(
        ctx, trip.id, version.id, {"discount": 10, "discount_type": DiscountType.percent}
    )
    legs = [
        ("2025-09-01T08:00:00Z", "2025-09-01T11:00:00Z"),
        ("2025-09-01T12:30:00Z", "2025-09-01T17:00:00Z"),
    ]
    for leg, (depart, arrive) in enumerate(legs, start=1):
        itinerary_service.add_segment(
            ctx,
            trip.id,
            version.id,
            type=SegmentType.flight,
            day_number=1,
            cost=500,
            journey_id="J1",
            metadata={
                "legNumber": leg,
                "departureTimeUtc": depart,
                "arrivalTimeUtc": arrive,
                "departureAirport": "BOS" if leg == 1 else "JFK",
                "arrivalAirport": "JFK" if leg == 1 else "KEF",
            },
        )
    for _ in range(2):
        itinerary_service.add_segment(
            ctx,
            trip.id,
            version.id,
            type=SegmentType.hotel,
            day_number=1,
            cost=600,
            property_group_id="Hotel Borg",
        )

    view = itinerary_service.get_itinerary(ctx, trip.id)

    assert view.version.id == version.id
    assert len(view.days) == 1
    assert view.days[0].calendar_date == date(2025, 9, 1)
    items = view.days[0].items
    assert [item.kind for item in items] == ["journey", "propertyGroup"]
    assert isinstance(items[0], JourneyItem)
    assert isinstance(items[1], PropertyGroupItem)

    summary = view.journeys["J1"]
    assert summary.origin_iata == "BOS"
    assert summary.destination_iata == "KEF"
    assert summary.layovers[0] is not None
    assert summary.layovers[0].minutes == 90

    assert view.group_pricing["Hotel Borg"].subtotal == 1200
    assert view.pricing is not None
    assert view.pricing.subtotal == 2200
    assert view.pricing.discount_value == 220
    assert view.pricing.total == 1980
    assert view.budget is not None
    assert view.budget.status == BudgetStatus.normal


def test_itinerary_unknown_version(itinerary_service: ItineraryService, ctx: RequestContext) -> None:
    trip, _ = create_trip(itinerary_service, ctx)

    with pytest.raises(NotFoundError):
        itinerary_service.get_itinerary(ctx, trip.id, "missing")


def test_share_link_lifecycle(itinerary_service: ItineraryService, ctx: RequestContext) -> None:
    trip, _ = create_trip(itinerary_service, ctx)

    enabled = itinerary_service.enable_share(ctx, trip.id)
    assert enabled.share_enabled is True
    assert enabled.share_token

    rotated = itinerary_service.rotate_share_token(ctx, trip.id)
    assert rotated.share_token != enabled.share_token

    disabled = itinerary_service.disable_share(ctx, trip.id)
    assert disabled.share_enabled is False
    assert itinerary_service.enable_share(ctx, trip.id).share_token == rotated.share_token


def test_invalidate_approval(
    itinerary_service: ItineraryService, repo: InMemoryTripRepository, ctx: RequestContext
) -> None:
    trip, version = create_trip(itinerary_service, ctx)
    repo.update_trip(trip.model_copy(update={"approved_version_id": version.id}))

    cleared = itinerary_service.invalidate_approval(ctx, trip.id)

    assert cleared.approved_version_id is None
    assert itinerary_service.get_trip(ctx, trip.id).approved_version_id is None


def test_record_flight_status_only_for_flights(
    itinerary_service: ItineraryService, ctx: RequestContext
) -> None:
    trip, version = create_trip(itinerary_service, ctx)
    flight = itinerary_service.add_segment(
        ctx, trip.id, version.id, type=SegmentType.flight, day_number=1
    )
    hotel = itinerary_service.add_segment(
        ctx, trip.id, version.id, type=SegmentType.hotel, day_number=1
    )

    itinerary_service.record_flight_status(
        ctx, FlightStatusSnapshot(segment_id=flight.id, status=FlightStatusCode.on_time)
    )
    stored = itinerary_service.get_flight_status(ctx, flight.id)
    assert stored is not None
    assert stored.status == FlightStatusCode.on_time

    with pytest.raises(InvalidInputError):
        itinerary_service.record_flight_status(ctx, FlightStatusSnapshot(segment_id=hotel.id))


@pytest.mark.asyncio
async def test_refresh_flight_status_from_provider(
    itinerary_service: ItineraryService, ctx: RequestContext
) -> None:
    trip, version = create_trip(itinerary_service, ctx)
    flight = itinerary_service.add_segment(
        ctx,
        trip.id,
        version.id,
        type=SegmentType.flight,
        day_number=1,
        metadata={"flightNumber": "FI630", "departureTimeLocal": "2025-09-01 16:40"},
    )
    provider = FixtureFlightStatusProvider(
        {"FI630": {"flight_status": "scheduled", "departure": {"delay": 40}}}
    )

    snapshot = await itinerary_service.refresh_flight_status(ctx, flight.id, provider)

    assert snapshot is not None
    assert snapshot.status == FlightStatusCode.delayed
    view = itinerary_service.get_itinerary(ctx, trip.id)
    assert view.flight_status[flight.id].departure_delay_min == 40


@pytest.mark.asyncio
async def test_refresh_flight_status_requires_flight_number(
    itinerary_service: ItineraryService, ctx: RequestContext
) -> None:
    trip, version = create_trip(itinerary_service, ctx)
    flight = itinerary_service.add_segment(
        ctx, trip.id, version.id, type=SegmentType.flight, day_number=1
    )

    with pytest.raises(InvalidInputError):
        await itinerary_service.refresh_flight_status(
            ctx, flight.id, FixtureFlightStatusProvider({})
        )
