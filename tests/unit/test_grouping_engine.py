"""Tests for the grouping engine (journeys, property groups, day order)."""

from datetime import date
from typing import Any

import pytest

from tripcraft.errors import InvalidInputError
from tripcraft.grouping.engine import (
    build_day_items,
    group_by_day,
    leg_number,
    move_within_day,
    splice_day_order,
)
from tripcraft.models.common import SegmentType
from tripcraft.models.itinerary import JourneyItem, PropertyGroupItem, SegmentItem
from tripcraft.models.segment import TripSegment


def make_segment(
    segment_id: str,
    type: SegmentType = SegmentType.activity,
    day_number: int = 1,
    sort_order: int = 0,
    **fields: Any,
) -> TripSegment:
    return TripSegment(
        id=segment_id,
        trip_id="trip-1",
        version_id="v1",
        type=type,
        day_number=day_number,
        sort_order=sort_order,
        title=segment_id,
        **fields,
    )


def make_leg(segment_id: str, journey_id: str, leg: Any, sort_order: int = 0) -> TripSegment:
    return make_segment(
        segment_id,
        type=SegmentType.flight,
        sort_order=sort_order,
        journey_id=journey_id,
        metadata={"legNumber": leg},
    )


def test_journey_legs_grouped_and_ordered_by_leg_number() -> None:
    """Legs appear once, at the first leg's position, sorted by legNumber."""
    segments = [
        make_segment("breakfast", sort_order=0),
        make_leg("leg-2", "J1", 2, sort_order=1),
        make_segment("museum", sort_order=2),
        make_leg("leg-1", "J1", 1, sort_order=3),
    ]

    items = build_day_items(segments)

    assert [item.kind for item in items] == ["segment", "journey", "segment"]
    journey_item = items[1]
    assert isinstance(journey_item, JourneyItem)
    assert journey_item.journey.id == "J1"
    assert journey_item.journey.leg_segment_ids == ["leg-1", "leg-2"]
    assert [leg.id for leg in journey_item.legs] == ["leg-1", "leg-2"]


def test_single_member_journey_is_plain_segment() -> None:
    segments = [make_leg("solo", "J-solo", 1), make_segment("dinner", sort_order=1)]

    items = build_day_items(segments)

    assert all(isinstance(item, SegmentItem) for item in items)
    assert [item.segment.id for item in items] == ["solo", "dinner"]


def test_property_group_collects_hotel_rooms() -> None:
    segments = [
        make_segment("room-a", SegmentType.hotel, sort_order=0, property_group_id="P1"),
        make_segment("tour", sort_order=1),
        make_segment("room-b", SegmentType.hotel, sort_order=2, property_group_id="P1"),
    ]

    items = build_day_items(segments)

    assert [item.kind for item in items] == ["propertyGroup", "segment"]
    group = items[0]
    assert isinstance(group, PropertyGroupItem)
    assert group.property_group.room_segment_ids == ["room-a", "room-b"]


def test_blank_group_ids_mean_no_group() -> None:
    segments = [
        make_leg("a", "  ", 1),
        make_leg("b", "  ", 2, sort_order=1),
    ]

    items = build_day_items(segments)

    assert [item.kind for item in items] == ["segment", "segment"]


def test_missing_or_bad_leg_number_sorts_first_keeping_display_order() -> None:
    segments = [
        make_leg("x", "J1", 2, sort_order=0),
        make_leg("y", "J1", None, sort_order=1),
        make_leg("z", "J1", "not-a-number", sort_order=2),
    ]

    items = build_day_items(segments)

    assert len(items) == 1
    journey_item = items[0]
    assert isinstance(journey_item, JourneyItem)
    assert journey_item.journey.leg_segment_ids == ["y", "z", "x"]


def test_leg_number_parses_strings() -> None:
    assert leg_number(make_leg("a", "J", "3")) == 3
    assert leg_number(make_segment("b")) == 0


def test_grouping_is_idempotent() -> None:
    segments = [
        make_leg("leg-2", "J1", 2, sort_order=0),
        make_leg("leg-1", "J1", 1, sort_order=1),
        make_segment("room-a", SegmentType.hotel, sort_order=2, property_group_id="P1"),
        make_segment("room-b", SegmentType.hotel, sort_order=3, property_group_id="P1"),
    ]

    assert build_day_items(segments) == build_day_items(segments)


def test_group_by_day_assigns_calendar_dates() -> None:
    segments = [
        make_segment("d2", day_number=2),
        make_segment("d1-late", day_number=1, sort_order=5),
        make_segment("d1-early", day_number=1, sort_order=1),
    ]

    days = group_by_day(segments, date(2025, 6, 10))

    assert [d.day_number for d in days] == [1, 2]
    assert days[0].calendar_date == date(2025, 6, 10)
    assert days[1].calendar_date == date(2025, 6, 11)
    assert [item.segment.id for item in days[0].items] == ["d1-early", "d1-late"]


def test_group_by_day_without_start_date() -> None:
    days = group_by_day([make_segment("a", day_number=3)])

    assert days[0].day_number == 3
    assert days[0].calendar_date is None


def _four_segment_day() -> list[TripSegment]:
    return [
        make_segment("s1", sort_order=0),
        make_segment("s2", sort_order=1),
        make_segment("s3", sort_order=2),
        make_segment("s4", sort_order=3),
        make_segment("other-day", day_number=2, sort_order=0),
    ]


def test_move_third_to_first_preserves_relative_order() -> None:
    order = move_within_day(_four_segment_day(), "s3", 0)

    assert order == ["s3", "s1", "s2", "s4", "other-day"]


def test_splice_day_order_leaves_other_days_alone() -> None:
    order = splice_day_order(_four_segment_day(), 1, ["s4", "s3", "s2", "s1"])

    assert order == ["s4", "s3", "s2", "s1", "other-day"]


def test_splice_day_order_rejects_non_permutation() -> None:
    with pytest.raises(InvalidInputError):
        splice_day_order(_four_segment_day(), 1, ["s1", "s2", "s3"])

    with pytest.raises(InvalidInputError):
        splice_day_order(_four_segment_day(), 1, ["s1", "s1", "s2", "s3"])

    with pytest.raises(InvalidInputError):
        splice_day_order(_four_segment_day(), 1, ["s1", "s2", "s3", "other-day"])


def test_splice_day_order_rejects_bad_day_number() -> None:
    with pytest.raises(InvalidInputError):
        splice_day_order(_four_segment_day(), 0, [])


def test_move_within_day_rejects_out_of_range_index() -> None:
    with pytest.raises(InvalidInputError):
        move_within_day(_four_segment_day(), "s1", 4)

    with pytest.raises(InvalidInputError):
        move_within_day(_four_segment_day(), "missing", 0)
