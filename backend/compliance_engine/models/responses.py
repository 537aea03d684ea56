"""API response models."""

from pydantic import BaseModel
from typing import Any, Optional, Literal

from compliance_engine.validators.models import ExportFormat


class ExportResponse(BaseModel):
    """Serialized report in the requested format."""

    format: ExportFormat
    media_type: str
    content: str


class DashboardResponse(BaseModel):
    """Dashboard view over the validation history."""

    overall_score: int
    compliant: bool
    total_validations: int
    frameworks: list[dict[str, Any]]
    trends: dict[str, float]
    top_issues: list[str]
    timeline: list[dict[str, Any]]


class HealthDependency(BaseModel):
    """Health status of a single dependency."""

    status: Literal["healthy", "unhealthy", "degraded"]
    latency_ms: Optional[float] = None
    message: Optional[str] = None


class HealthResponse(BaseModel):
    """System health check response."""

    status: Literal["healthy", "unhealthy", "degraded"]
    version: str = "1.0.0"
    uptime_seconds: float
    dependencies: dict[str, HealthDependency]
