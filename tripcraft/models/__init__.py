"""Models package - re-exports for convenience."""

from tripcraft.models.common import (
    BudgetStatus,
    DiscountType,
    FlightStatusCode,
    LayoverFlag,
    Refundability,
    SegmentType,
    TripStatus,
    VariantType,
)
from tripcraft.models.flight_status import FlightStatusSnapshot
from tripcraft.models.itinerary import (
    BudgetComparison,
    DayItem,
    DayPlan,
    GroupPricing,
    ItineraryView,
    Journey,
    JourneyItem,
    JourneySummary,
    LayoverInfo,
    PricingSummary,
    PropertyGroup,
    PropertyGroupItem,
    SegmentItem,
)
from tripcraft.models.segment import SegmentVariant, TripSegment
from tripcraft.models.selection import (
    PRIMARY_OPTION,
    ClientSelectionRecord,
    SelectionEntry,
    SelectionProgress,
    SubmissionResult,
    VariantView,
)
from tripcraft.models.trip import SharedTrip, Trip, TripVersion

__all__ = [
    # Common
    "TripStatus",
    "SegmentType",
    "Refundability",
    "DiscountType",
    "VariantType",
    "LayoverFlag",
    "BudgetStatus",
    "FlightStatusCode",
    # Trip
    "Trip",
    "TripVersion",
    "SharedTrip",
    # Segments
    "TripSegment",
    "SegmentVariant",
    # Selection
    "PRIMARY_OPTION",
    "ClientSelectionRecord",
    "SelectionEntry",
    "SelectionProgress",
    "SubmissionResult",
    "VariantView",
    # Itinerary
    "Journey",
    "PropertyGroup",
    "SegmentItem",
    "JourneyItem",
    "PropertyGroupItem",
    "DayItem",
    "DayPlan",
    "LayoverInfo",
    "JourneySummary",
    "GroupPricing",
    "PricingSummary",
    "BudgetComparison",
    "ItineraryView",
    # Flight status
    "FlightStatusSnapshot",
]
