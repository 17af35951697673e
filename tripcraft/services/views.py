"""Assembles the itinerary read model shared by advisor and client views."""

from collections.abc import Mapping

from tripcraft.config import Settings
from tripcraft.db.repositories import TripRepository
from tripcraft.grouping.engine import group_by_day
from tripcraft.layover.analyzer import LayoverPolicy, summarize_journey
from tripcraft.models.common import SegmentType
from tripcraft.models.itinerary import (
    DayPlan,
    ItineraryView,
    JourneyItem,
    PropertyGroupItem,
    SegmentItem,
)
from tripcraft.models.segment import TripSegment
from tripcraft.models.selection import ClientSelectionRecord
from tripcraft.models.trip import SharedTrip, Trip, TripVersion
from tripcraft.pricing.calculator import (
    compare_budget,
    price_group,
    price_version,
    refundability_breakdown,
)
from tripcraft.variants.engine import selection_progress, variant_views

FLIGHT_TYPES = (SegmentType.flight, SegmentType.charter_flight)


def load_selection_record(
    repository: TripRepository, trip_id: str, version_id: str
) -> ClientSelectionRecord:
    """Stored ledger of a version, or an empty one."""
    record = repository.get_selection_record(version_id)
    if record is None:
        record = ClientSelectionRecord(trip_id=trip_id, version_id=version_id)
    return record


def clear_record_approval(repository: TripRepository, version_id: str | None) -> None:
    """Remove the approval stamp from a version's ledger, if it carries one."""
    if version_id is None:
        return
    record = repository.get_selection_record(version_id)
    if record is not None and record.approved_at is not None:
        repository.save_selection_record(record.model_copy(update={"approved_at": None}))


def _hide_cost(segment: TripSegment) -> TripSegment:
    return segment.model_copy(update={"cost": None, "price_per_unit": None})


def _hide_day_costs(day: DayPlan) -> DayPlan:
    items = []
    for item in day.items:
        if isinstance(item, JourneyItem):
            items.append(item.model_copy(update={"legs": [_hide_cost(s) for s in item.legs]}))
        elif isinstance(item, PropertyGroupItem):
            items.append(item.model_copy(update={"rooms": [_hide_cost(s) for s in item.rooms]}))
        else:
            items.append(SegmentItem(segment=_hide_cost(item.segment)))
    return day.model_copy(update={"items": items})


def build_itinerary_view(
    repository: TripRepository,
    trip: Trip,
    version: TripVersion,
    settings: Settings,
    *,
    client_view: bool = False,
    local_choices: Mapping[str, str] | None = None,
) -> ItineraryView:
    """Build the grouped, priced view of one version.

    Args:
        repository: Trip repository
        trip: Owning trip
        version: Version to render
        settings: Layover and budget thresholds
        client_view: Project the trip for clients and apply show_pricing
        local_choices: Viewer's unsubmitted choices, segment id -> option

    Returns:
        ItineraryView
    """
    local_choices = local_choices or {}
    policy = LayoverPolicy.from_settings(settings)
    segments = repository.list_segments(version.id)
    variants = repository.list_variants(version.id)
    record = load_selection_record(repository, trip.id, version.id)

    days = group_by_day(segments, trip.start_date)

    journeys = {}
    group_pricing = {}
    for day in days:
        for item in day.items:
            if isinstance(item, JourneyItem):
                journeys[item.journey.id] = summarize_journey(item.legs, policy)
                group_pricing[item.journey.id] = price_group(item.legs)
            elif isinstance(item, PropertyGroupItem):
                group_pricing[item.property_group.id] = price_group(item.rooms)

    views = {
        segment.id: variant_views(record, segment, variants, local_choices.get(segment.id))
        for segment in segments
        if segment.has_variants
    }

    flight_status = {}
    for segment in segments:
        if segment.type in FLIGHT_TYPES:
            snapshot = repository.get_flight_status(segment.id)
            if snapshot is not None:
                flight_status[segment.id] = snapshot

    pricing = price_version(
        version,
        segments,
        record=record,
        variants=variants,
        local_choices=local_choices,
        currency=trip.currency,
    )

    view = ItineraryView(
        trip=trip,
        version=version,
        versions=repository.list_versions(trip.id),
        days=days,
        journeys=journeys,
        group_pricing=group_pricing,
        variants=views,
        selection_progress=selection_progress(record, segments),
        pricing=pricing,
        budget=compare_budget(pricing.total, trip.budget, settings.budget_warning_pct),
        refundability=refundability_breakdown(segments),
        flight_status=flight_status,
        is_approved_version=trip.approved_version_id == version.id,
    )

    if not client_view:
        return view

    shared = SharedTrip.from_trip(trip)
    view = view.model_copy(update={"trip": shared})

    if not version.show_pricing:
        view = view.model_copy(
            update={
                "trip": shared.model_copy(update={"budget": None}),
                "days": [_hide_day_costs(day) for day in days],
                "group_pricing": {},
                "variants": {
                    segment_id: [
                        v.model_copy(update={"cost": None, "price_per_unit": None})
                        for v in candidates
                    ]
                    for segment_id, candidates in views.items()
                },
                "pricing": None,
                "budget": None,
                "refundability": None,
            }
        )

    return view
