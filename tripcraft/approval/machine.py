"""Approval state machine: NotApproved -> Approved, one approved version per trip."""

from dataclasses import dataclass
from datetime import datetime

from tripcraft.models.common import utcnow
from tripcraft.models.selection import SelectionProgress
from tripcraft.models.trip import Trip


@dataclass
class ApprovalOutcome:
    """Result of an approval.

    unresolved_segments is an advisor-facing signal only; approval never
    fails because of it.
    """

    trip: Trip
    approved_version_id: str
    approved_at: datetime
    unresolved_segments: int
    replaced_version_id: str | None


def approve(
    trip: Trip,
    version_id: str,
    progress: SelectionProgress | None = None,
    *,
    now: datetime | None = None,
) -> ApprovalOutcome:
    """Approve a version of the trip, overwriting any prior approval."""
    now = now or utcnow()
    previous = trip.approved_version_id
    updated = trip.model_copy(
        update={"approved_version_id": version_id, "approved_at": now, "updated_at": now}
    )
    return ApprovalOutcome(
        trip=updated,
        approved_version_id=version_id,
        approved_at=now,
        unresolved_segments=progress.unresolved if progress else 0,
        replaced_version_id=previous if previous and previous != version_id else None,
    )


def invalidate_approval(trip: Trip, *, now: datetime | None = None) -> Trip:
    """Clear the trip's approval. Never invoked implicitly by edits."""
    if trip.approved_version_id is None:
        return trip
    return trip.model_copy(
        update={"approved_version_id": None, "approved_at": None, "updated_at": now or utcnow()}
    )
