"""Prometheus metrics for client selections, approvals and share access."""

from prometheus_client import Counter

selections_total = Counter(
    "tripcraft_selections_total",
    "Total tentative variant selections",
    ["outcome"],
)

submitted_segments_total = Counter(
    "tripcraft_submitted_segments_total",
    "Total segments locked by a client submission",
)

approvals_total = Counter(
    "tripcraft_approvals_total",
    "Total version approvals",
    ["replaced"],
)

share_denials_total = Counter(
    "tripcraft_share_denials_total",
    "Total share requests rejected for a missing or invalid token",
    ["action"],
)


class PrometheusShareMetrics:
    """Prometheus-based share metrics implementation."""

    def inc_selection(self, outcome: str) -> None:
        """Increment selection counter (outcome: recorded or locked)."""
        selections_total.labels(outcome=outcome).inc()

    def inc_submitted(self, count: int) -> None:
        """Add newly locked segments."""
        if count > 0:
            submitted_segments_total.inc(count)

    def inc_approval(self, replaced: bool) -> None:
        """Increment approval counter."""
        approvals_total.labels(replaced=str(replaced).lower()).inc()

    def inc_denied(self, action: str) -> None:
        """Increment access-denied counter."""
        share_denials_total.labels(action=action).inc()
