"""Flight status snapshot stored for flight segments."""

from datetime import datetime

from pydantic import BaseModel, Field

from tripcraft.models.common import FlightStatusCode, utcnow


class FlightStatusSnapshot(BaseModel):
    """Latest status reported by the flight-status collaborator."""

    segment_id: str
    status: FlightStatusCode = FlightStatusCode.unknown
    departure_delay_min: int | None = None
    arrival_delay_min: int | None = None
    departure_gate: str | None = None
    departure_terminal: str | None = None
    arrival_gate: str | None = None
    arrival_terminal: str | None = None
    checked_at: datetime = Field(default_factory=utcnow)
