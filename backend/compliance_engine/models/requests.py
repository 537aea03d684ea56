"""API request models."""

from pydantic import BaseModel, Field
from typing import Any, Optional

from compliance_engine.validators.models import AggregatedResult, ExportFormat


class ValidateRequest(BaseModel):
    """Request to validate one unit of source text."""

    code: str = Field(
        ...,
        max_length=2_000_000,
        description="Source text to validate",
        examples=['export const Avatar = () => <img src="/me.png" />;'],
    )
    file_path: str = Field(default="unknown", max_length=1024)
    config: Optional[dict[str, Any]] = Field(
        default=None,
        description="Per-call overrides merged onto the engine configuration (camelCase or snake_case keys)",
        examples=[{"validators": ["gdpr", "wcag"], "mode": "sequential", "timeoutMs": 5000}],
    )


class ExportRequest(BaseModel):
    """Request to export a result. Without a result, the latest history entry is exported."""

    format: ExportFormat = ExportFormat.JSON
    result: Optional[AggregatedResult] = None
