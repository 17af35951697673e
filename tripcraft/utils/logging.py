"""Structured logging for client-facing share actions."""

import logging
from typing import Any

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the application."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


class StructuredShareLogger:
    """Structured logger for actions taken through a share link."""

    def log_action(
        self,
        trip_id: str,
        version_id: str | None,
        action: str,
        outcome: str,
        segment_id: str | None = None,
        option: str | None = None,
        count: int | None = None,
        reason: str | None = None,
    ) -> None:
        """Log a share action with structured data."""
        log_data: dict[str, Any] = {
            "trip_id": trip_id,
            "version_id": version_id,
            "action": action,
            "outcome": outcome,
        }

        if segment_id:
            log_data["segment_id"] = segment_id
        if option:
            log_data["option"] = option
        if count is not None:
            log_data["count"] = count
        if reason:
            log_data["reason"] = reason

        log_msg = f"Share action: {action} - {outcome}"

        if outcome == "denied":
            logger.warning(log_msg, extra={"structured": log_data})
        else:
            logger.info(log_msg, extra={"structured": log_data})
