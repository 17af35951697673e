"""Client share channel: token-gated view, selection, submission and approval."""

import logging
import secrets
from collections.abc import Mapping

from tripcraft.approval import machine as approval
from tripcraft.approval.machine import ApprovalOutcome
from tripcraft.config import Settings, get_settings
from tripcraft.db.repositories import TripRepository
from tripcraft.errors import AccessDeniedError, NotFoundError
from tripcraft.models.itinerary import ItineraryView
from tripcraft.models.selection import SubmissionResult, VariantView
from tripcraft.models.trip import Trip, TripVersion
from tripcraft.services.views import (
    build_itinerary_view,
    clear_record_approval,
    load_selection_record,
)
from tripcraft.utils.logging import StructuredShareLogger
from tripcraft.utils.metrics import PrometheusShareMetrics
from tripcraft.variants.engine import (
    select_variant,
    selection_progress,
    submit_selections,
    variant_views,
)
from tripcraft.versions.manager import resolve_active_version

logger = logging.getLogger(__name__)


class ShareService:
    """Client-side operations authorized by a trip's share token."""

    def __init__(
        self,
        repository: TripRepository,
        settings: Settings | None = None,
        action_logger: StructuredShareLogger | None = None,
        metrics: PrometheusShareMetrics | None = None,
    ) -> None:
        self._repo = repository
        self._settings = settings or get_settings()
        self._log = action_logger or StructuredShareLogger()
        self._metrics = metrics or PrometheusShareMetrics()

    def _authorize(self, trip_id: str, token: str | None, action: str) -> Trip:
        """Resolve the trip and check the share token.

        Raises:
            NotFoundError: If the trip does not exist
            AccessDeniedError: If sharing is off or the token is missing or wrong
        """
        trip = self._repo.get_trip(trip_id, None)
        if trip is None:
            raise NotFoundError("trip", trip_id)

        if not trip.share_enabled or not trip.share_token:
            self._deny(trip_id, action, "sharing_disabled")
            raise AccessDeniedError("Sharing is disabled for this trip", requires_token=False)

        if not token or not secrets.compare_digest(token.encode(), trip.share_token.encode()):
            self._deny(trip_id, action, "missing_token" if not token else "invalid_token")
            raise AccessDeniedError("A valid share token is required", requires_token=True)

        return trip

    def _deny(self, trip_id: str, action: str, reason: str) -> None:
        self._metrics.inc_denied(action)
        self._log.log_action(trip_id, None, action, "denied", reason=reason)

    def _active_version(self, trip: Trip, version_id: str | None) -> TripVersion:
        version = resolve_active_version(self._repo.list_versions(trip.id), version_id)
        if version is None:
            raise NotFoundError("version", version_id or trip.id)
        return version

    def view(
        self,
        trip_id: str,
        token: str | None,
        version_id: str | None = None,
        local_choices: Mapping[str, str] | None = None,
    ) -> ItineraryView:
        """Client view of the requested version, else the primary one.

        Args:
            trip_id: Trip ID
            token: Share token
            version_id: Optional version to show
            local_choices: Viewer's unsubmitted choices, segment id -> option

        Returns:
            ItineraryView with costs hidden when the version hides pricing
        """
        trip = self._authorize(trip_id, token, "view")
        version = self._active_version(trip, version_id)
        return build_itinerary_view(
            self._repo,
            trip,
            version,
            self._settings,
            client_view=True,
            local_choices=local_choices,
        )

    def select(
        self, trip_id: str, token: str | None, segment_id: str, option: str
    ) -> list[VariantView]:
        """Record a tentative choice for a segment.

        Returns:
            The segment's candidates with updated flags
        """
        trip = self._authorize(trip_id, token, "select")
        segment = self._repo.get_segment(segment_id)
        if segment is None or segment.trip_id != trip.id:
            raise NotFoundError("segment", segment_id)

        variants = self._repo.list_variants(segment.version_id)
        record = load_selection_record(self._repo, trip.id, segment.version_id)
        updated = select_variant(record, segment, variants, option)

        if record.is_locked(segment_id):
            outcome = "locked"
        else:
            outcome = "recorded"
            if updated is not record:
                self._repo.save_selection_record(updated)

        self._metrics.inc_selection(outcome)
        self._log.log_action(
            trip.id, segment.version_id, "select", outcome, segment_id=segment_id, option=option
        )
        return variant_views(updated, segment, variants)

    def submit(
        self, trip_id: str, token: str | None, version_id: str | None = None
    ) -> SubmissionResult:
        """Lock every choice made so far in the active version."""
        trip = self._authorize(trip_id, token, "submit")
        version = self._active_version(trip, version_id)
        segments = self._repo.list_segments(version.id)

        record = load_selection_record(self._repo, trip.id, version.id)
        updated, locked = submit_selections(
            record, [s.id for s in segments if s.has_variants]
        )
        if locked:
            self._repo.save_selection_record(updated)

        self._metrics.inc_submitted(len(locked))
        self._log.log_action(trip.id, version.id, "submit", "submitted", count=len(locked))
        return SubmissionResult(
            locked_segment_ids=locked, progress=selection_progress(updated, segments)
        )

    def approve(
        self, trip_id: str, token: str | None, version_id: str | None = None
    ) -> ApprovalOutcome:
        """Approve a version, whether or not every choice is resolved."""
        trip = self._authorize(trip_id, token, "approve")
        version = self._active_version(trip, version_id)
        segments = self._repo.list_segments(version.id)

        record = load_selection_record(self._repo, trip.id, version.id)
        outcome = approval.approve(trip, version.id, selection_progress(record, segments))

        self._repo.update_trip(outcome.trip)
        self._repo.save_selection_record(
            record.model_copy(update={"approved_at": outcome.trip.approved_at})
        )
        clear_record_approval(self._repo, outcome.replaced_version_id)

        self._metrics.inc_approval(outcome.replaced_version_id is not None)
        self._log.log_action(
            trip.id, version.id, "approve", "approved", count=outcome.unresolved_segments
        )
        if outcome.unresolved_segments:
            logger.info(
                f"[approve] trip_id={trip.id} version_id={version.id} "
                f"approved with {outcome.unresolved_segments} unresolved segments"
            )
        return outcome
