"""Segment and variant models - the bookable units of an itinerary."""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field, model_validator

from tripcraft.models.common import Refundability, SegmentType, VariantType, new_id, utcnow


class TripSegment(BaseModel):
    """One bookable unit (flight leg, hotel room, dinner, ...).

    Segments only carry their group ids; journeys and property groups are
    derived at read time by the grouping engine.
    """

    id: str = Field(default_factory=new_id)
    trip_id: str
    version_id: str
    type: SegmentType
    day_number: int = Field(..., ge=1)
    sort_order: int = 0
    title: str = ""
    subtitle: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    confirmation_number: str | None = None
    cost: float | None = None
    currency: str = "USD"
    quantity: int = Field(1, ge=1)
    price_per_unit: float | None = None
    notes: str | None = None
    refundability: Refundability = Refundability.unknown
    refund_deadline: date | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    has_variants: bool = False
    journey_id: str | None = None
    property_group_id: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode="after")
    def validate_property_group_is_hotel(self) -> "TripSegment":
        """Only hotel rooms may share a property group."""
        if self.property_group_id and self.type != SegmentType.hotel:
            raise ValueError(
                f"property_group_id is only valid on hotel segments, got {self.type.value}"
            )
        return self


class SegmentVariant(BaseModel):
    """An alternative priced option attached to a segment.

    Selection state is not stored here; see ClientSelectionRecord.
    """

    id: str = Field(default_factory=new_id)
    segment_id: str
    label: str = Field(..., min_length=1)
    variant_type: VariantType = VariantType.upgrade
    description: str | None = None
    cost: float | None = None
    currency: str = "USD"
    quantity: int = Field(1, ge=1)
    price_per_unit: float | None = None
    refundability: Refundability = Refundability.unknown
    refund_deadline: date | None = None
    sort_order: int = 0
    created_at: datetime = Field(default_factory=utcnow)
