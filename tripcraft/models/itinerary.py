"""Itinerary read models - grouped days, journeys, pricing and layovers."""

from datetime import date
from typing import Annotated, Literal

from pydantic import BaseModel, Field

from tripcraft.models.common import BudgetStatus, LayoverFlag, Refundability
from tripcraft.models.flight_status import FlightStatusSnapshot
from tripcraft.models.segment import TripSegment
from tripcraft.models.selection import SelectionProgress, VariantView
from tripcraft.models.trip import SharedTrip, Trip, TripVersion


class Journey(BaseModel):
    """An ordered chain of flight legs sharing a journey id."""

    id: str
    leg_segment_ids: list[str]


class PropertyGroup(BaseModel):
    """Hotel rooms booked for the same stay."""

    id: str
    room_segment_ids: list[str]


class SegmentItem(BaseModel):
    """A standalone segment in a day's render list."""

    kind: Literal["segment"] = "segment"
    segment: TripSegment


class JourneyItem(BaseModel):
    """A multi-leg journey in a day's render list."""

    kind: Literal["journey"] = "journey"
    journey: Journey
    legs: list[TripSegment]


class PropertyGroupItem(BaseModel):
    """A multi-room hotel stay in a day's render list."""

    kind: Literal["propertyGroup"] = "propertyGroup"
    property_group: PropertyGroup
    rooms: list[TripSegment]


DayItem = Annotated[
    SegmentItem | JourneyItem | PropertyGroupItem, Field(discriminator="kind")
]


class DayPlan(BaseModel):
    """All render items for one day of a version."""

    day_number: int
    calendar_date: date | None = None
    items: list[DayItem]


class LayoverInfo(BaseModel):
    """Connection between two adjacent flight legs."""

    minutes: int
    display: str
    flag: LayoverFlag
    airport_change: bool
    arrival_iata: str
    departure_iata: str


class JourneySummary(BaseModel):
    """Headline facts for a multi-leg journey."""

    origin_iata: str
    destination_iata: str
    stops: int
    total_time: str | None
    red_eye: bool
    layovers: list[LayoverInfo | None]


class GroupPricing(BaseModel):
    """Aggregate price of a journey or property group."""

    subtotal: float
    quantity: int
    unit_price: float | None = None


class PricingSummary(BaseModel):
    """Version-level totals after discount."""

    subtotal: float
    discount_value: float
    total: float
    discount_label: str | None = None
    currency: str = "USD"
    show_pricing: bool = True
    selected_subtotal: float | None = None
    selected_total: float | None = None


class BudgetComparison(BaseModel):
    """Version total measured against the trip budget."""

    budget: float
    total: float
    percentage: float
    remaining: float
    status: BudgetStatus


class ItineraryView(BaseModel):
    """Everything a viewer needs to render one version of a trip.

    Client views carry a SharedTrip; pricing fields are None (and costs
    blanked) when the version hides pricing from clients.
    """

    trip: Trip | SharedTrip
    version: TripVersion
    versions: list[TripVersion]
    days: list[DayPlan]
    journeys: dict[str, JourneySummary] = Field(default_factory=dict)
    group_pricing: dict[str, GroupPricing] = Field(default_factory=dict)
    variants: dict[str, list[VariantView]] = Field(default_factory=dict)
    selection_progress: SelectionProgress
    pricing: PricingSummary | None = None
    budget: BudgetComparison | None = None
    refundability: dict[Refundability, float] | None = None
    flight_status: dict[str, FlightStatusSnapshot] = Field(default_factory=dict)
    is_approved_version: bool = False
