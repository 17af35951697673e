"""Flight-status collaborator: fetches and normalizes live flight status.

The engine only stores and displays these snapshots; it never derives them.
"""

import logging
from collections.abc import Mapping
from typing import Any, Protocol

import httpx

from tripcraft.models.common import FlightStatusCode
from tripcraft.models.flight_status import FlightStatusSnapshot

logger = logging.getLogger(__name__)


class FlightStatusProvider(Protocol):
    """Source of flight status snapshots."""

    async def fetch_status(
        self, segment_id: str, flight_number: str, flight_date: str
    ) -> FlightStatusSnapshot | None:
        """Fetch the current status of a flight.

        Args:
            segment_id: Flight segment the snapshot belongs to
            flight_number: IATA flight number, e.g. "BA117"
            flight_date: Local departure date, YYYY-MM-DD

        Returns:
            Snapshot, or None when the provider has no data
        """
        ...


def _int_or_none(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_flight_status(
    payload: Mapping[str, Any], segment_id: str, delay_threshold_min: int = 20
) -> FlightStatusSnapshot:
    """Normalize a raw provider record into a snapshot.

    Keyword match on the provider's status string; a scheduled flight whose
    departure delay reaches delay_threshold_min is reported as delayed, a
    scheduled flight with a known schedule and smaller delay as on time.
    """
    raw_status = str(payload.get("flight_status") or "").lower()
    departure = payload.get("departure") or {}
    arrival = payload.get("arrival") or {}
    departure_delay = _int_or_none(departure.get("delay"))
    delay = departure_delay or 0

    if "cancel" in raw_status:
        status = FlightStatusCode.cancelled
    elif "landed" in raw_status or "arrived" in raw_status:
        status = FlightStatusCode.landed
    elif "active" in raw_status or "en-route" in raw_status or "en route" in raw_status:
        status = FlightStatusCode.departed
    elif "delay" in raw_status:
        status = FlightStatusCode.delayed
    elif "scheduled" in raw_status:
        if delay >= delay_threshold_min:
            status = FlightStatusCode.delayed
        elif delay > 0 or departure.get("scheduled"):
            status = FlightStatusCode.on_time
        else:
            status = FlightStatusCode.scheduled
    elif "on time" in raw_status:
        status = FlightStatusCode.on_time
    else:
        status = FlightStatusCode.unknown

    return FlightStatusSnapshot(
        segment_id=segment_id,
        status=status,
        departure_delay_min=departure_delay,
        arrival_delay_min=_int_or_none(arrival.get("delay")),
        departure_gate=departure.get("gate"),
        departure_terminal=departure.get("terminal"),
        arrival_gate=arrival.get("gate"),
        arrival_terminal=arrival.get("terminal"),
    )


class HttpFlightStatusProvider:
    """Flight status over HTTP (FlightLabs-compatible API)."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        delay_threshold_min: int = 20,
        timeout_sec: float = 4.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize provider.

        Args:
            base_url: API base URL
            api_key: Access key sent as a query parameter
            delay_threshold_min: Delay reported as "delayed"
            timeout_sec: Request timeout when no client is supplied
            client: Optional httpx client (for testing with mocks)
        """
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._delay_threshold_min = delay_threshold_min
        self._timeout_sec = timeout_sec
        self._client = client

    async def fetch_status(
        self, segment_id: str, flight_number: str, flight_date: str
    ) -> FlightStatusSnapshot | None:
        """Fetch and normalize a flight's status.

        Raises:
            httpx.HTTPError: On network or HTTP errors
        """
        params = {"access_key": self._api_key, "flight_iata": flight_number, "date": flight_date}

        close_client = False
        client = self._client
        if client is None:
            client = httpx.AsyncClient(timeout=self._timeout_sec)
            close_client = True

        try:
            response = await client.get(f"{self._base_url}/flights", params=params)
            response.raise_for_status()
            flights = response.json().get("data") or []
        finally:
            if close_client:
                await client.aclose()

        if not flights:
            logger.warning(f"[flight_status] no data for {flight_number} on {flight_date}")
            return None

        return parse_flight_status(flights[0], segment_id, self._delay_threshold_min)


class FixtureFlightStatusProvider:
    """Canned provider keyed by flight number, for tests and local development."""

    def __init__(
        self, payloads: Mapping[str, Mapping[str, Any]], delay_threshold_min: int = 20
    ) -> None:
        self._payloads = dict(payloads)
        self._delay_threshold_min = delay_threshold_min

    async def fetch_status(
        self, segment_id: str, flight_number: str, flight_date: str
    ) -> FlightStatusSnapshot | None:
        """Return the canned payload for flight_number, normalized."""
        payload = self._payloads.get(flight_number)
        if payload is None:
            return None
        return parse_flight_status(payload, segment_id, self._delay_threshold_min)
