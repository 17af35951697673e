"""Tests for variant selection, submission and derived views."""

from datetime import datetime, timezone

import pytest

from tripcraft.errors import InvalidInputError, NotFoundError
from tripcraft.models.common import SegmentType
from tripcraft.models.segment import SegmentVariant, TripSegment
from tripcraft.models.selection import PRIMARY_OPTION, ClientSelectionRecord
from tripcraft.variants.engine import (
    candidates,
    current_option,
    reopen_selection,
    select_variant,
    selection_progress,
    submit_selections,
    variant_views,
)

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_segment(segment_id: str, has_variants: bool = True) -> TripSegment:
    return TripSegment(
        id=segment_id,
        trip_id="trip-1",
        version_id="v1",
        type=SegmentType.flight,
        day_number=1,
        title="Economy",
        cost=800,
        has_variants=has_variants,
    )


def make_variant(variant_id: str, segment_id: str = "seg-1", sort_order: int = 0) -> SegmentVariant:
    return SegmentVariant(
        id=variant_id, segment_id=segment_id, label=variant_id, cost=1500, sort_order=sort_order
    )


def empty_record() -> ClientSelectionRecord:
    return ClientSelectionRecord(trip_id="trip-1", version_id="v1")


SEGMENT = make_segment("seg-1")
VARIANTS = [make_variant("business", sort_order=1), make_variant("premium", sort_order=0)]


def test_candidates_primary_first_then_variants_by_sort_order() -> None:
    assert candidates(SEGMENT, VARIANTS + [make_variant("x", "other")]) == [
        PRIMARY_OPTION,
        "premium",
        "business",
    ]


def test_select_records_tentative_choice() -> None:
    record = select_variant(empty_record(), SEGMENT, VARIANTS, "business", now=NOW)

    entry = record.entry_for("seg-1")
    assert entry is not None
    assert entry.option == "business"
    assert entry.selected_at == NOW
    assert entry.is_submitted is False


def test_select_is_idempotent() -> None:
    record = select_variant(empty_record(), SEGMENT, VARIANTS, "business")

    assert select_variant(record, SEGMENT, VARIANTS, "business") is record


def test_select_unknown_option_raises() -> None:
    with pytest.raises(NotFoundError):
        select_variant(empty_record(), SEGMENT, VARIANTS, "first-class")


def test_select_on_segment_without_variants_raises() -> None:
    with pytest.raises(InvalidInputError):
        select_variant(empty_record(), make_segment("plain", has_variants=False), [], PRIMARY_OPTION)


def test_submitted_choice_cannot_change() -> None:
    record = select_variant(empty_record(), SEGMENT, VARIANTS, "business")
    record, locked = submit_selections(record, ["seg-1"], now=NOW)

    after = select_variant(record, SEGMENT, VARIANTS, PRIMARY_OPTION)

    assert locked == ["seg-1"]
    assert after is record
    assert after.selections["seg-1"].option == "business"


def test_submit_skips_segments_without_choice() -> None:
    other = make_segment("seg-2")
    record = select_variant(empty_record(), SEGMENT, VARIANTS, PRIMARY_OPTION)

    record, locked = submit_selections(record, ["seg-1", "seg-2"], now=NOW)

    assert locked == ["seg-1"]
    assert record.last_submitted_at == NOW
    assert record.is_locked("seg-1")
    assert not record.is_locked(other.id)


def test_submit_is_idempotent() -> None:
    record = select_variant(empty_record(), SEGMENT, VARIANTS, "premium")
    record, _ = submit_selections(record, ["seg-1"], now=NOW)

    again, locked = submit_selections(record, ["seg-1"])

    assert locked == []
    assert again is record


def test_current_option_precedence() -> None:
    record = select_variant(empty_record(), SEGMENT, VARIANTS, "premium")

    assert current_option(empty_record(), "seg-1") is None
    assert current_option(record, "seg-1") == "premium"
    assert current_option(record, "seg-1", local_choice="business") == "business"

    submitted, _ = submit_selections(record, ["seg-1"])
    assert current_option(submitted, "seg-1", local_choice="business") == "premium"


def test_variant_views_flags() -> None:
    record = select_variant(empty_record(), SEGMENT, VARIANTS, "business")
    record, _ = submit_selections(record, ["seg-1"])

    views = variant_views(record, SEGMENT, VARIANTS)

    assert [v.option for v in views] == [PRIMARY_OPTION, "premium", "business"]
    assert views[0].is_primary is True
    assert views[0].label == "Economy"
    assert views[0].cost == 800
    selected = [v.option for v in views if v.is_selected]
    submitted = [v.option for v in views if v.is_submitted]
    assert selected == ["business"]
    assert submitted == ["business"]


def test_variant_views_local_choice_not_submitted() -> None:
    views = variant_views(empty_record(), SEGMENT, VARIANTS, local_choice="premium")

    assert [v.option for v in views if v.is_selected] == ["premium"]
    assert not any(v.is_submitted for v in views)


def test_reopen_unlocks_submitted_choice() -> None:
    record = select_variant(empty_record(), SEGMENT, VARIANTS, "business")
    record, _ = submit_selections(record, ["seg-1"])

    reopened = reopen_selection(record, "seg-1")
    changed = select_variant(reopened, SEGMENT, VARIANTS, "premium")

    assert not reopened.is_locked("seg-1")
    assert changed.selections["seg-1"].option == "premium"
    assert reopen_selection(empty_record(), "seg-1").selections == {}


def test_selection_progress() -> None:
    plain = make_segment("plain", has_variants=False)
    second = make_segment("seg-2")
    record = select_variant(empty_record(), SEGMENT, VARIANTS, "premium")
    record, _ = submit_selections(record, ["seg-1"])

    progress = selection_progress(record, [SEGMENT, second, plain])

    assert progress.total == 2
    assert progress.selected == 1
    assert progress.submitted == 1
    assert progress.unresolved == 1
    assert progress.all_resolved is False
