"""Pricing calculator: segment, group and version totals, discounts and budget."""

import math
from collections.abc import Iterable, Mapping, Sequence

from tripcraft.models.common import BudgetStatus, DiscountType, Refundability
from tripcraft.models.itinerary import BudgetComparison, GroupPricing, PricingSummary
from tripcraft.models.segment import SegmentVariant, TripSegment
from tripcraft.models.selection import PRIMARY_OPTION, ClientSelectionRecord
from tripcraft.models.trip import TripVersion
from tripcraft.variants.engine import current_option


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def segment_cost(segment: TripSegment) -> float:
    """Segment cost with a missing cost counted as 0."""
    return segment.cost or 0


def unit_price(segment: TripSegment) -> float | None:
    """Per-unit price: explicit price_per_unit, else cost / quantity when quantity > 1."""
    if segment.price_per_unit is not None:
        return segment.price_per_unit
    if segment.quantity > 1 and segment.cost is not None:
        return segment.cost / segment.quantity
    return None


def price_group(segments: Sequence[TripSegment]) -> GroupPricing:
    """Aggregate price of a journey or property group.

    The unit price is the members' shared price_per_unit when they all carry
    the same one, else subtotal / total quantity when more than one unit was
    booked, else omitted.
    """
    subtotal = sum(segment_cost(s) for s in segments)
    quantity = sum(s.quantity for s in segments)

    explicit = {s.price_per_unit for s in segments}
    if segments and len(explicit) == 1 and None not in explicit:
        unit: float | None = explicit.pop()
    elif quantity > 1:
        unit = subtotal / quantity
    else:
        unit = None

    return GroupPricing(subtotal=subtotal, quantity=quantity, unit_price=unit)


def discount_value(subtotal: float, version: TripVersion) -> float:
    """Discount amount for a version.

    fixed: the discount itself. percent: round(subtotal * discount / 100),
    rounding halves up.
    """
    discount = version.discount or 0
    if discount <= 0:
        return 0
    if version.discount_type == DiscountType.percent:
        return max(0, _round_half_up(subtotal * discount / 100))
    return discount


def effective_cost(
    segment: TripSegment,
    option: str | None,
    variants_by_id: Mapping[str, SegmentVariant],
) -> float:
    """Cost of the segment when priced at the given option."""
    if not segment.has_variants or option is None or option == PRIMARY_OPTION:
        return segment_cost(segment)
    variant = variants_by_id.get(option)
    if variant is None or variant.segment_id != segment.id:
        return segment_cost(segment)
    return variant.cost or 0


def price_version(
    version: TripVersion,
    segments: Iterable[TripSegment],
    *,
    record: ClientSelectionRecord | None = None,
    variants: Iterable[SegmentVariant] = (),
    local_choices: Mapping[str, str] | None = None,
    currency: str = "USD",
) -> PricingSummary:
    """Compute subtotal, discount and total for a version.

    subtotal and total always sum the segments' own costs. When a ledger is
    given, selected_subtotal and selected_total also price each variant
    segment at its current choice.

    Args:
        version: Version carrying the discount settings
        segments: Segments of the version
        record: Optional selection ledger
        variants: Variants referenced by the ledger
        local_choices: Viewer's unsubmitted choices, segment id -> option
        currency: Display currency (the trip's)

    Returns:
        PricingSummary with total = max(0, subtotal - discount_value)
    """
    segment_list = list(segments)
    subtotal = sum(segment_cost(s) for s in segment_list)
    discount = discount_value(subtotal, version)

    selected_subtotal: float | None = None
    selected_total: float | None = None
    if record is not None:
        local_choices = local_choices or {}
        variants_by_id = {v.id: v for v in variants}
        selected_subtotal = sum(
            effective_cost(
                s, current_option(record, s.id, local_choices.get(s.id)), variants_by_id
            )
            for s in segment_list
        )
        selected_total = max(
            0, selected_subtotal - discount_value(selected_subtotal, version)
        )

    return PricingSummary(
        subtotal=subtotal,
        discount_value=discount,
        total=max(0, subtotal - discount),
        discount_label=version.discount_label,
        currency=currency,
        show_pricing=version.show_pricing,
        selected_subtotal=selected_subtotal,
        selected_total=selected_total,
    )


def compare_budget(
    total: float, budget: float | None, warning_threshold_pct: float = 80.0
) -> BudgetComparison | None:
    """Measure a total against the trip budget.

    Returns:
        BudgetComparison, or None when budget is unset or 0
    """
    if not budget or budget <= 0:
        return None

    percentage = total / budget * 100
    if total > budget:
        status = BudgetStatus.over
    elif percentage >= warning_threshold_pct:
        status = BudgetStatus.warning
    else:
        status = BudgetStatus.normal

    return BudgetComparison(
        budget=budget,
        total=total,
        percentage=percentage,
        remaining=budget - total,
        status=status,
    )


def refundability_breakdown(segments: Iterable[TripSegment]) -> dict[Refundability, float]:
    """Sum of segment costs per refundability class."""
    breakdown = {r: 0.0 for r in Refundability}
    for segment in segments:
        breakdown[segment.refundability] += segment_cost(segment)
    return breakdown
