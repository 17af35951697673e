"""Trip and version models."""

from datetime import date, datetime

from pydantic import BaseModel, Field, model_validator

from tripcraft.models.common import DiscountType, TripStatus, new_id, utcnow


class Trip(BaseModel):
    """A client engagement with a date range, budget and approval state."""

    id: str = Field(default_factory=new_id)
    org_id: str
    title: str = Field(..., min_length=1)
    destination: str = ""
    destinations: list[str] = Field(default_factory=list)
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    status: TripStatus = TripStatus.draft
    budget: float | None = Field(None, ge=0)
    currency: str = "USD"
    client_id: str | None = None
    advisor_id: str | None = None
    notes: str | None = None
    approved_version_id: str | None = None
    approved_at: datetime | None = None
    share_token: str | None = None
    share_enabled: bool = False
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode="after")
    def validate_date_range(self) -> "Trip":
        """Ensure the trip does not end before it starts."""
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError(f"end_date {self.end_date} precedes start_date {self.start_date}")
        return self

    @property
    def is_approved(self) -> bool:
        return self.approved_version_id is not None


class SharedTrip(BaseModel):
    """The part of a trip a client sees through the share link."""

    id: str
    title: str
    destination: str = ""
    destinations: list[str] = Field(default_factory=list)
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    status: TripStatus = TripStatus.draft
    budget: float | None = None
    currency: str = "USD"
    approved_version_id: str | None = None
    approved_at: datetime | None = None

    @classmethod
    def from_trip(cls, trip: Trip) -> "SharedTrip":
        return cls.model_validate(trip.model_dump(include=set(cls.model_fields)))


class TripVersion(BaseModel):
    """One itinerary proposal belonging to a trip."""

    id: str = Field(default_factory=new_id)
    trip_id: str
    version_number: int = Field(1, ge=1)
    name: str = "Version 1"
    is_primary: bool = False
    show_pricing: bool = True
    discount: float | None = Field(None, ge=0)
    discount_type: DiscountType = DiscountType.fixed
    discount_label: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
