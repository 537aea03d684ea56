"""Notifier — decides whether a result warrants a threshold notification."""

from typing import Optional

import structlog

from compliance_engine.models.events import NotificationEvent
from compliance_engine.validators.models import AggregatedResult, NotificationPolicy

logger = structlog.get_logger()


class Notifier:
    """Stateless threshold check. Delivery is left to event bus listeners."""

    def evaluate(self, result: AggregatedResult, policy: NotificationPolicy) -> Optional[NotificationEvent]:
        """Return an event when notifications are enabled and a threshold is met.

        A threshold is met when total errors >= thresholds.error or total
        warnings >= thresholds.warning.
        """
        if not policy.enabled:
            return None

        errors_hit = result.total_errors >= policy.thresholds.error
        warnings_hit = result.total_warnings >= policy.thresholds.warning
        if not (errors_hit or warnings_hit):
            return None

        logger.info(
            "notification_threshold_met",
            file_path=result.metadata.file_path,
            error_count=result.total_errors,
            warning_count=result.total_warnings,
            channels=policy.channels,
        )
        return NotificationEvent(
            error_count=result.total_errors,
            warning_count=result.total_warnings,
            file_path=result.metadata.file_path,
            overall_score=result.overall_score,
            overall_compliant=result.overall_compliant,
        )
