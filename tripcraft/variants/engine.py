"""Variant & selection engine: client choices over per-segment alternatives.

All functions are pure: they take a ClientSelectionRecord and return a new
one, leaving persistence to the caller.
"""

from collections.abc import Iterable, Sequence
from datetime import datetime

from tripcraft.errors import InvalidInputError, NotFoundError
from tripcraft.models.common import utcnow
from tripcraft.models.segment import SegmentVariant, TripSegment
from tripcraft.models.selection import (
    PRIMARY_OPTION,
    ClientSelectionRecord,
    SelectionEntry,
    SelectionProgress,
    VariantView,
)


def _own_variants(segment: TripSegment, variants: Iterable[SegmentVariant]) -> list[SegmentVariant]:
    return sorted(
        (v for v in variants if v.segment_id == segment.id), key=lambda v: v.sort_order
    )


def candidates(segment: TripSegment, variants: Iterable[SegmentVariant]) -> list[str]:
    """Selectable options: the primary baseline followed by the segment's variants."""
    return [PRIMARY_OPTION] + [v.id for v in _own_variants(segment, variants)]


def current_option(
    record: ClientSelectionRecord, segment_id: str, local_choice: str | None = None
) -> str | None:
    """The option a viewer should see as chosen.

    A submitted choice always wins; otherwise the viewer's in-progress local
    choice, then the server's tentative choice, else None.
    """
    entry = record.entry_for(segment_id)
    if entry is not None and entry.is_submitted:
        return entry.option
    if local_choice is not None:
        return local_choice
    return entry.option if entry is not None else None


def select_variant(
    record: ClientSelectionRecord,
    segment: TripSegment,
    variants: Iterable[SegmentVariant],
    option: str,
    *,
    now: datetime | None = None,
) -> ClientSelectionRecord:
    """Record a tentative choice for a segment.

    Idempotent. Once the segment's choice is submitted this is a no-op.

    Raises:
        InvalidInputError: If the segment offers no variants
        NotFoundError: If option is neither PRIMARY_OPTION nor one of its variants
    """
    if not segment.has_variants:
        raise InvalidInputError(f"Segment {segment.id} has no variants to choose from")

    if record.is_locked(segment.id):
        return record

    if option not in candidates(segment, variants):
        raise NotFoundError("variant", option)

    existing = record.entry_for(segment.id)
    if existing is not None and existing.option == option:
        return record

    selections = dict(record.selections)
    selections[segment.id] = SelectionEntry(option=option, selected_at=now or utcnow())
    return record.model_copy(update={"selections": selections})


def submit_selections(
    record: ClientSelectionRecord,
    segment_ids: Iterable[str],
    *,
    now: datetime | None = None,
) -> tuple[ClientSelectionRecord, list[str]]:
    """Lock every listed segment that currently has a choice.

    Segments without a choice stay open for a later round; already-submitted
    segments are left untouched.

    Returns:
        (updated record, ids locked by this call)
    """
    now = now or utcnow()
    selections = dict(record.selections)
    newly_locked: list[str] = []

    for segment_id in segment_ids:
        entry = selections.get(segment_id)
        if entry is None or entry.is_submitted:
            continue
        selections[segment_id] = entry.model_copy(update={"submitted_at": now})
        newly_locked.append(segment_id)

    if not newly_locked:
        return record, []

    updated = record.model_copy(update={"selections": selections, "last_submitted_at": now})
    return updated, newly_locked


def reopen_selection(record: ClientSelectionRecord, segment_id: str) -> ClientSelectionRecord:
    """Advisor intervention: unlock a submitted segment for a new round."""
    entry = record.entry_for(segment_id)
    if entry is None or not entry.is_submitted:
        return record
    selections = dict(record.selections)
    selections[segment_id] = entry.model_copy(update={"submitted_at": None})
    return record.model_copy(update={"selections": selections})


def variant_views(
    record: ClientSelectionRecord,
    segment: TripSegment,
    variants: Iterable[SegmentVariant],
    local_choice: str | None = None,
) -> list[VariantView]:
    """Candidates of a segment with derived is_selected / is_submitted flags."""
    chosen = current_option(record, segment.id, local_choice)
    locked = record.is_locked(segment.id)

    views = [
        VariantView(
            option=PRIMARY_OPTION,
            label=segment.title or "Original",
            cost=segment.cost,
            currency=segment.currency,
            quantity=segment.quantity,
            price_per_unit=segment.price_per_unit,
            is_primary=True,
            is_selected=chosen == PRIMARY_OPTION,
            is_submitted=locked and chosen == PRIMARY_OPTION,
        )
    ]
    for variant in _own_variants(segment, variants):
        views.append(
            VariantView(
                option=variant.id,
                label=variant.label,
                cost=variant.cost,
                currency=variant.currency,
                quantity=variant.quantity,
                price_per_unit=variant.price_per_unit,
                is_primary=False,
                is_selected=chosen == variant.id,
                is_submitted=locked and chosen == variant.id,
            )
        )
    return views


def selection_progress(
    record: ClientSelectionRecord, segments: Sequence[TripSegment]
) -> SelectionProgress:
    """Count variant segments, and how many have a choice or are locked."""
    variant_segments = [s for s in segments if s.has_variants]
    selected = sum(1 for s in variant_segments if record.entry_for(s.id) is not None)
    submitted = sum(1 for s in variant_segments if record.is_locked(s.id))
    return SelectionProgress(total=len(variant_segments), selected=selected, submitted=submitted)
