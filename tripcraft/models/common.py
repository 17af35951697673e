"""Common types and enums shared across all models."""

import uuid
from datetime import datetime, timezone
from enum import Enum


def new_id() -> str:
    """Generate a fresh opaque identifier."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(timezone.utc)


class TripStatus(str, Enum):
    """Lifecycle status of a trip."""

    draft = "draft"
    planning = "planning"
    confirmed = "confirmed"
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"
    archived = "archived"


class SegmentType(str, Enum):
    """Kind of bookable unit."""

    flight = "flight"
    charter_flight = "charter_flight"
    hotel = "hotel"
    transport = "transport"
    restaurant = "restaurant"
    activity = "activity"
    note = "note"


class Refundability(str, Enum):
    """Refund terms of a booking."""

    unknown = "unknown"
    non_refundable = "non_refundable"
    partially_refundable = "partially_refundable"
    fully_refundable = "fully_refundable"


class DiscountType(str, Enum):
    """How a version discount is applied."""

    fixed = "fixed"
    percent = "percent"


class VariantType(str, Enum):
    """Relationship of a variant to its segment's baseline."""

    upgrade = "upgrade"
    downgrade = "downgrade"
    alternative = "alternative"


class LayoverFlag(str, Enum):
    """Connection risk classification."""

    tight = "tight"
    normal = "normal"
    long = "long"


class BudgetStatus(str, Enum):
    """Budget comparison outcome."""

    normal = "normal"
    warning = "warning"
    over = "over"


class FlightStatusCode(str, Enum):
    """Normalized flight status reported by the flight-status collaborator."""

    scheduled = "scheduled"
    on_time = "on_time"
    delayed = "delayed"
    cancelled = "cancelled"
    departed = "departed"
    landed = "landed"
    unknown = "unknown"
