"""Event models published on the event bus."""

from pydantic import BaseModel
from typing import Optional, Literal
from datetime import datetime, timezone


class BaseEvent(BaseModel):
    """Base event model for all bus events."""

    type: str
    timestamp: datetime = None

    def model_post_init(self, __context):
        if self.timestamp is None:
            self.timestamp = datetime.now(timezone.utc)

    def model_dump(self, **kwargs):
        """Override to always serialize datetimes as ISO strings for JSON safety."""
        kwargs.setdefault("mode", "json")
        return super().model_dump(**kwargs)


class NotificationEvent(BaseEvent):
    """Emitted when a result crosses the configured error/warning thresholds."""

    type: Literal["compliance_threshold_exceeded"] = "compliance_threshold_exceeded"
    error_count: int
    warning_count: int
    file_path: str
    overall_score: int
    overall_compliant: bool


class ValidationCompletedEvent(BaseEvent):
    """Emitted after every executed (non-cached) validation run."""

    type: Literal["validation_completed"] = "validation_completed"
    file_path: str
    overall_score: int
    overall_compliant: bool
    total_issues: int
    retry_count: int
    execution_time_ms: float


class ScheduledRunFailedEvent(BaseEvent):
    """Emitted when a scheduled validation run raises."""

    type: Literal["scheduled_run_failed"] = "scheduled_run_failed"
    message: str
    file_path: Optional[str] = None
    retry_count: Optional[int] = None
