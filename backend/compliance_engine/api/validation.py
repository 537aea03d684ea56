"""Validation API — validate source, read history/metrics, export reports."""

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse

import structlog

from compliance_engine.models.requests import ExportRequest, ValidateRequest
from compliance_engine.models.responses import DashboardResponse, ExportResponse
from compliance_engine.validators.engine import ValidationEngine
from compliance_engine.validators.models import AggregatedResult, ExportFormat, ValidationMetrics
from compliance_engine.validators.registry import PluginInfo

logger = structlog.get_logger()

router = APIRouter()

MEDIA_TYPES = {
    ExportFormat.JSON: "application/json",
    ExportFormat.PDF: "application/json",
    ExportFormat.CSV: "text/csv",
    ExportFormat.HTML: "text/html",
}


def _engine(request: Request) -> ValidationEngine:
    return request.app.state.engine


@router.post("/validate", response_model=AggregatedResult)
async def validate_code(request_body: ValidateRequest, request: Request):
    """Validate source text with the configured validators and all plugins.

    Orchestration failures surface as 503 via the global exception handlers.
    """
    engine = _engine(request)
    result = await engine.validate(
        request_body.code,
        request_body.file_path,
        request_body.config,
    )

    logger.info(
        "validate_request_served",
        file_path=request_body.file_path,
        cache_hit=result.metadata.cache_hit,
        score=result.overall_score,
    )
    return result


@router.get("/history", response_model=list[AggregatedResult])
async def get_history(request: Request, limit: int = Query(default=50, ge=1, le=500)):
    """Most recent results, oldest first."""
    return _engine(request).get_validation_history()[-limit:]


@router.get("/metrics", response_model=ValidationMetrics)
async def get_metrics(request: Request):
    return _engine(request).get_validation_metrics()


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(request: Request):
    return _engine(request).build_dashboard()


@router.get("/report", response_class=PlainTextResponse)
async def get_compliance_report(request: Request):
    """Markdown compliance report for the latest result."""
    return _engine(request).render_compliance_report()


@router.post("/export", response_model=ExportResponse)
async def export_result(request_body: ExportRequest, request: Request):
    """Export a supplied result, or the latest one in history."""
    engine = _engine(request)

    result = request_body.result
    if result is None:
        result = engine.history.latest()
    if result is None:
        raise HTTPException(status_code=404, detail="No validation results to export")

    return ExportResponse(
        format=request_body.format,
        media_type=MEDIA_TYPES[request_body.format],
        content=engine.export_results(result, request_body.format),
    )


@router.get("/plugins", response_model=list[PluginInfo])
async def list_plugins(request: Request):
    return _engine(request).list_plugins()
