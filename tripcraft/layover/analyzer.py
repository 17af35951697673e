"""Layover analyzer: connection timing and risk flags between flight legs."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from tripcraft.config import Settings, get_settings
from tripcraft.models.common import LayoverFlag
from tripcraft.models.itinerary import JourneySummary, LayoverInfo
from tripcraft.models.segment import TripSegment


@dataclass(frozen=True)
class LayoverPolicy:
    """Connection thresholds.

    tight: minutes < tight_min
    long: minutes > long_min
    red-eye: local departure hour >= red_eye_start_hour or < red_eye_end_hour
    """

    tight_min: int = 60
    long_min: int = 240
    red_eye_start_hour: int = 20
    red_eye_end_hour: int = 5

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "LayoverPolicy":
        settings = settings or get_settings()
        return cls(
            tight_min=settings.tight_connection_min,
            long_min=settings.long_connection_min,
            red_eye_start_hour=settings.red_eye_start_hour,
            red_eye_end_hour=settings.red_eye_end_hour,
        )


DEFAULT_POLICY = LayoverPolicy()


def _parse_utc(value: Any) -> datetime | None:
    """Parse an ISO timestamp; naive values are taken as UTC."""
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_duration(minutes: int) -> str:
    """Render minutes as "Xh Ym" (or "Ym" under an hour)."""
    hours, mins = divmod(minutes, 60)
    return f"{hours}h {mins}m" if hours > 0 else f"{mins}m"


def _iata(meta: Mapping[str, Any], side: str) -> str:
    """Airport code for "arrival"/"departure", flat key first then nested."""
    flat = meta.get(f"{side}Airport")
    if isinstance(flat, str) and flat:
        return flat
    nested = meta.get(side)
    if isinstance(nested, Mapping):
        code = nested.get("iata")
        if isinstance(code, str):
            return code
    return ""


def calculate_layover(
    leg_a_meta: Mapping[str, Any] | None,
    leg_b_meta: Mapping[str, Any] | None,
    policy: LayoverPolicy = DEFAULT_POLICY,
) -> LayoverInfo | None:
    """Describe the connection between leg A's arrival and leg B's departure.

    Args:
        leg_a_meta: Metadata of the earlier leg (arrivalTimeUtc, arrivalAirport)
        leg_b_meta: Metadata of the later leg (departureTimeUtc, departureAirport)
        policy: Tight/long thresholds

    Returns:
        LayoverInfo, or None when either timestamp is missing or the gap is negative
    """
    leg_a_meta = leg_a_meta or {}
    leg_b_meta = leg_b_meta or {}

    arrival = _parse_utc(leg_a_meta.get("arrivalTimeUtc"))
    departure = _parse_utc(leg_b_meta.get("departureTimeUtc"))
    if arrival is None or departure is None:
        return None

    minutes = int((departure - arrival).total_seconds() // 60)
    if minutes < 0:
        return None

    if minutes < policy.tight_min:
        flag = LayoverFlag.tight
    elif minutes > policy.long_min:
        flag = LayoverFlag.long
    else:
        flag = LayoverFlag.normal

    arrival_iata = _iata(leg_a_meta, "arrival")
    departure_iata = _iata(leg_b_meta, "departure")

    return LayoverInfo(
        minutes=minutes,
        display=format_duration(minutes),
        flag=flag,
        airport_change=bool(arrival_iata and departure_iata and arrival_iata != departure_iata),
        arrival_iata=arrival_iata,
        departure_iata=departure_iata,
    )


def journey_total_time(
    first_leg_meta: Mapping[str, Any] | None, last_leg_meta: Mapping[str, Any] | None
) -> str | None:
    """Elapsed time from first departure to last arrival, None if unknown."""
    departure = _parse_utc((first_leg_meta or {}).get("departureTimeUtc"))
    arrival = _parse_utc((last_leg_meta or {}).get("arrivalTimeUtc"))
    if departure is None or arrival is None:
        return None
    minutes = int((arrival - departure).total_seconds() // 60)
    if minutes <= 0:
        return None
    return format_duration(minutes)


def is_red_eye(local_time: str | None, policy: LayoverPolicy = DEFAULT_POLICY) -> bool:
    """Whether a local departure time falls in the red-eye window.

    Accepts "HH:MM", "YYYY-MM-DD HH:MM" or "YYYY-MM-DDTHH:MM[:SS]".
    """
    if not local_time:
        return False
    time_part = local_time
    for separator in (" ", "T"):
        if separator in local_time:
            time_part = local_time.split(separator, 1)[1]
            break
    try:
        hour = int(time_part[:5].split(":")[0])
    except ValueError:
        return False
    return hour >= policy.red_eye_start_hour or hour < policy.red_eye_end_hour


def summarize_journey(
    legs: Sequence[TripSegment], policy: LayoverPolicy = DEFAULT_POLICY
) -> JourneySummary:
    """Summarize an ordered list of journey legs.

    Args:
        legs: Legs ordered by leg number
        policy: Layover and red-eye thresholds

    Returns:
        Origin/destination, stops, layovers, total time and red-eye flag
    """
    if not legs:
        return JourneySummary(
            origin_iata="", destination_iata="", stops=0, total_time=None, red_eye=False, layovers=[]
        )

    metas = [leg.metadata or {} for leg in legs]
    first, last = metas[0], metas[-1]

    layovers = [calculate_layover(metas[i], metas[i + 1], policy) for i in range(len(metas) - 1)]
    departure_local = first.get("departureTimeLocal") or first.get("departureTime")

    return JourneySummary(
        origin_iata=_iata(first, "departure"),
        destination_iata=_iata(last, "arrival"),
        stops=len(legs) - 1,
        total_time=journey_total_time(first, last),
        red_eye=is_red_eye(departure_local if isinstance(departure_local, str) else None, policy),
        layovers=layovers,
    )
