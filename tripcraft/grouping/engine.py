"""Grouping engine: turns a flat day of segments into journeys and property groups."""

from collections.abc import Iterable, Sequence
from datetime import date, timedelta
from typing import Any

from tripcraft.errors import InvalidInputError
from tripcraft.models.common import SegmentType
from tripcraft.models.itinerary import (
    DayItem,
    DayPlan,
    Journey,
    JourneyItem,
    PropertyGroup,
    PropertyGroupItem,
    SegmentItem,
)
from tripcraft.models.segment import TripSegment


def _group_key(value: Any) -> str | None:
    """Normalize a group id; blank or non-string ids mean "no group"."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def leg_number(segment: TripSegment) -> int:
    """Leg position from metadata.legNumber, 0 when absent or unparseable."""
    raw = segment.metadata.get("legNumber") if segment.metadata else None
    if raw is None or isinstance(raw, bool):
        return 0
    try:
        return int(raw)
    except (TypeError, ValueError):
        return 0


def _journey_key(segment: TripSegment) -> str | None:
    return _group_key(segment.journey_id)


def _property_key(segment: TripSegment) -> str | None:
    if segment.type != SegmentType.hotel:
        return None
    return _group_key(segment.property_group_id)


def build_day_items(day_segments: Sequence[TripSegment]) -> list[DayItem]:
    """Build the render list for one day of one version.

    Segments sharing a journey id (>= 2 members) become one JourneyItem with
    legs ordered by legNumber; hotel segments sharing a property group id
    (>= 2 members) become one PropertyGroupItem. A group sits where its first
    member appears. Everything else is a plain SegmentItem.

    Args:
        day_segments: Segments of a single day, in display order

    Returns:
        Ordered render items
    """
    journeys: dict[str, list[TripSegment]] = {}
    properties: dict[str, list[TripSegment]] = {}

    for segment in day_segments:
        journey_key = _journey_key(segment)
        if journey_key is not None:
            journeys.setdefault(journey_key, []).append(segment)
            continue
        property_key = _property_key(segment)
        if property_key is not None:
            properties.setdefault(property_key, []).append(segment)

    items: list[DayItem] = []
    emitted: set[tuple[str, str]] = set()

    for segment in day_segments:
        journey_key = _journey_key(segment)
        if journey_key is not None and len(journeys[journey_key]) > 1:
            if ("journey", journey_key) not in emitted:
                emitted.add(("journey", journey_key))
                # sorted() is stable, so equal leg numbers keep display order
                legs = sorted(journeys[journey_key], key=leg_number)
                items.append(
                    JourneyItem(
                        journey=Journey(id=journey_key, leg_segment_ids=[s.id for s in legs]),
                        legs=legs,
                    )
                )
            continue

        property_key = _property_key(segment) if journey_key is None else None
        if property_key is not None and len(properties[property_key]) > 1:
            if ("property", property_key) not in emitted:
                emitted.add(("property", property_key))
                rooms = properties[property_key]
                items.append(
                    PropertyGroupItem(
                        property_group=PropertyGroup(
                            id=property_key, room_segment_ids=[s.id for s in rooms]
                        ),
                        rooms=list(rooms),
                    )
                )
            continue

        items.append(SegmentItem(segment=segment))

    return items


def order_segments(segments: Iterable[TripSegment]) -> list[TripSegment]:
    """Order a version's segments by (day_number, sort_order), stable."""
    return sorted(segments, key=lambda s: (s.day_number, s.sort_order))


def group_by_day(
    segments: Iterable[TripSegment], start_date: date | None = None
) -> list[DayPlan]:
    """Partition a version's segments into day plans.

    Args:
        segments: All segments of one version
        start_date: Trip start; when set, each day carries its calendar date

    Returns:
        Day plans ordered by day number
    """
    by_day: dict[int, list[TripSegment]] = {}
    for segment in order_segments(segments):
        by_day.setdefault(segment.day_number, []).append(segment)

    days: list[DayPlan] = []
    for day_number in sorted(by_day):
        calendar_date = start_date + timedelta(days=day_number - 1) if start_date else None
        days.append(
            DayPlan(
                day_number=day_number,
                calendar_date=calendar_date,
                items=build_day_items(by_day[day_number]),
            )
        )
    return days


def splice_day_order(
    segments: Sequence[TripSegment], day_number: int, ordered_ids: Sequence[str]
) -> list[str]:
    """Rebuild a version's full segment order with one day's order replaced.

    The result is meant to be applied as a single bulk reorder so a
    concurrent append cannot interleave with a partial update.

    Args:
        segments: All segments of the version
        day_number: Day being reordered
        ordered_ids: New order of that day's segment ids

    Returns:
        Version-wide ordered list of segment ids

    Raises:
        InvalidInputError: If ordered_ids is not a permutation of the day's ids
    """
    if day_number < 1:
        raise InvalidInputError(f"day_number must be >= 1, got {day_number}")

    ordered = order_segments(segments)
    day_ids = [s.id for s in ordered if s.day_number == day_number]

    if len(ordered_ids) != len(set(ordered_ids)):
        raise InvalidInputError("Reorder list contains duplicate segment ids")
    if set(ordered_ids) != set(day_ids):
        raise InvalidInputError(
            f"Reorder list must contain exactly the segments of day {day_number}"
        )

    replacement = iter(ordered_ids)
    return [
        next(replacement) if segment.day_number == day_number else segment.id
        for segment in ordered
    ]


def move_within_day(
    segments: Sequence[TripSegment], segment_id: str, new_index: int
) -> list[str]:
    """Move one segment to a new 0-based position within its day.

    Returns:
        Version-wide ordered list of segment ids

    Raises:
        InvalidInputError: If the segment is unknown or the index out of range
    """
    target = next((s for s in segments if s.id == segment_id), None)
    if target is None:
        raise InvalidInputError(f"Segment {segment_id} is not part of this version")

    day_ids = [s.id for s in order_segments(segments) if s.day_number == target.day_number]
    if not 0 <= new_index < len(day_ids):
        raise InvalidInputError(
            f"Position {new_index} is out of range for day {target.day_number}"
        )

    day_ids.remove(segment_id)
    day_ids.insert(new_index, segment_id)
    return splice_day_order(segments, target.day_number, day_ids)
