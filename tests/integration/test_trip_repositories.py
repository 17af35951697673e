"""Repository contract tests, run against the in-memory and SQLite stores."""

from datetime import date

import pytest

from tripcraft.db.context import RequestContext
from tripcraft.db.repositories import TripRepository
from tripcraft.models.common import FlightStatusCode, SegmentType, TripStatus
from tripcraft.models.flight_status import FlightStatusSnapshot
from tripcraft.models.segment import SegmentVariant, TripSegment
from tripcraft.models.selection import ClientSelectionRecord, SelectionEntry
from tripcraft.models.trip import Trip, TripVersion

CTX_A = RequestContext(org_id="org-a", user_id="u1")
CTX_B = RequestContext(org_id="org-b", user_id="u2")


@pytest.fixture(params=["memory", "sql"])
def store(request: pytest.FixtureRequest) -> TripRepository:
    if request.param == "memory":
        return request.getfixturevalue("repo")
    return request.getfixturevalue("sql_repo")


def seed(store: TripRepository) -> tuple[Trip, TripVersion, list[TripSegment]]:
    trip = store.create_trip(
        Trip(id="trip-1", org_id="org-a", title="Japan", start_date=date(2025, 4, 1), budget=9000)
    )
    version = store.add_version(TripVersion(id="v1", trip_id="trip-1", is_primary=True))
    segments = [
        store.add_segment(
            TripSegment(
                id=f"s{i}",
                trip_id="trip-1",
                version_id="v1",
                type=SegmentType.activity,
                day_number=1,
                sort_order=i,
                cost=100 * (i + 1),
                metadata={"index": i},
            )
        )
        for i in range(3)
    ]
    return trip, version, segments


def test_trip_round_trip_and_tenancy(store: TripRepository) -> None:
    seed(store)

    trip = store.get_trip("trip-1", CTX_A)
    assert trip is not None
    assert trip.title == "Japan"
    assert trip.start_date == date(2025, 4, 1)
    assert trip.budget == 9000

    assert store.get_trip("trip-1", CTX_B) is None
    assert store.get_trip("trip-1", None) is not None
    assert [t.id for t in store.list_trips(CTX_A)] == ["trip-1"]
    assert store.list_trips(CTX_B) == []


def test_update_trip(store: TripRepository) -> None:
    trip, _, _ = seed(store)

    store.update_trip(trip.model_copy(update={"status": TripStatus.confirmed, "share_token": "tok"}))

    stored = store.get_trip("trip-1", CTX_A)
    assert stored is not None
    assert stored.status == TripStatus.confirmed
    assert stored.share_token == "tok"


def test_segments_listed_in_display_order(store: TripRepository) -> None:
    seed(store)
    store.add_segment(
        TripSegment(
            id="day0", trip_id="trip-1", version_id="v1", type=SegmentType.note, day_number=2
        )
    )

    segments = store.list_segments("v1")

    assert [s.id for s in segments] == ["s0", "s1", "s2", "day0"]
    assert segments[1].metadata == {"index": 1}
    assert segments[1].cost == 200


def test_reorder_segments(store: TripRepository) -> None:
    seed(store)

    store.reorder_segments("v1", ["s2", "s0", "s1"])

    assert [s.id for s in store.list_segments("v1")] == ["s2", "s0", "s1"]


def test_variants_listed_per_version(store: TripRepository) -> None:
    seed(store)
    store.add_variant(SegmentVariant(id="var-b", segment_id="s0", label="B", sort_order=1))
    store.add_variant(SegmentVariant(id="var-a", segment_id="s0", label="A", sort_order=0))

    assert [v.id for v in store.list_variants("v1")] == ["var-a", "var-b"]

    store.update_variant(SegmentVariant(id="var-a", segment_id="s0", label="A+", cost=10))
    updated = store.get_variant("var-a")
    assert updated is not None
    assert updated.label == "A+"

    assert store.delete_variant("var-b") is True
    assert store.delete_variant("var-b") is False


def test_selection_record_round_trip(store: TripRepository) -> None:
    seed(store)
    record = ClientSelectionRecord(
        trip_id="trip-1", version_id="v1", selections={"s0": SelectionEntry(option="primary")}
    )

    store.save_selection_record(record)
    loaded = store.get_selection_record("v1")

    assert loaded is not None
    assert loaded.selections["s0"].option == "primary"
    assert loaded.selections["s0"].is_submitted is False
    assert store.get_selection_record("v2") is None


def test_flight_status_round_trip(store: TripRepository) -> None:
    seed(store)

    store.save_flight_status(
        FlightStatusSnapshot(segment_id="s0", status=FlightStatusCode.delayed, departure_delay_min=35)
    )
    store.save_flight_status(FlightStatusSnapshot(segment_id="s0", status=FlightStatusCode.departed))

    snapshot = store.get_flight_status("s0")
    assert snapshot is not None
    assert snapshot.status == FlightStatusCode.departed
    assert snapshot.departure_delay_min is None


def test_delete_version_cascades(store: TripRepository) -> None:
    seed(store)
    store.add_version(TripVersion(id="v2", trip_id="trip-1", version_number=2, name="Version 2"))
    store.add_variant(SegmentVariant(id="var", segment_id="s0", label="Upgrade"))
    store.save_selection_record(ClientSelectionRecord(trip_id="trip-1", version_id="v1"))

    assert store.delete_version("v1") is True

    assert store.get_version("v1") is None
    assert store.list_segments("v1") == []
    assert store.get_segment("s0") is None
    assert store.get_variant("var") is None
    assert store.get_selection_record("v1") is None
    assert [v.id for v in store.list_versions("trip-1")] == ["v2"]


def test_delete_trip_respects_tenancy(store: TripRepository) -> None:
    seed(store)

    assert store.delete_trip("trip-1", CTX_B) is False
    assert store.delete_trip("trip-1", CTX_A) is True
    assert store.get_trip("trip-1", None) is None
    assert store.get_version("v1") is None
    assert store.get_segment("s1") is None
