"""Report exporter — serializes aggregated results and renders reports.

Formats:
    - json: full result serialization
    - csv:  metric/value table with seven fixed rows
    - html: standalone Jinja2 document (inline CSS, no JavaScript)
    - pdf:  no renderer is bundled; falls back to the JSON serialization

Example:
    >>> export_results(result, "csv").splitlines()[0]
    'Metric,Value'
"""

import csv
import io
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Union

import structlog
from jinja2 import Environment, PackageLoader, select_autoescape

from compliance_engine.validators.errors import UnsupportedExportFormatError
from compliance_engine.validators.models import (
    AggregatedResult,
    ExportFormat,
    ReportingPolicy,
    ValidationMetrics,
)

logger = structlog.get_logger()

DEFAULT_OUTPUT_DIR = "reports"
TOP_RECOMMENDATIONS = 5
DASHBOARD_TIMELINE = 10
DASHBOARD_TOP_ISSUES = 10

# File suffix per format; pdf content is JSON until a renderer exists
_SUFFIXES = {
    ExportFormat.JSON: "json",
    ExportFormat.CSV: "csv",
    ExportFormat.HTML: "html",
    ExportFormat.PDF: "pdf.json",
}

_template_env: Optional[Environment] = None


def _get_template_env() -> Environment:
    global _template_env
    if _template_env is None:
        _template_env = Environment(
            loader=PackageLoader("compliance_engine.reporting", "templates"),
            autoescape=select_autoescape(["html", "html.j2"], default_for_string=False),
            trim_blocks=True,
            lstrip_blocks=True,
        )
    return _template_env


def _coerce_format(format: Union[ExportFormat, str]) -> ExportFormat:
    try:
        return ExportFormat(format)
    except ValueError as e:
        raise UnsupportedExportFormatError(f"Unsupported export format: {format}") from e


def export_results(
    result: AggregatedResult,
    format: Union[ExportFormat, str] = ExportFormat.JSON,
    include_metrics: bool = True,
) -> str:
    """Serialize one result.

    Args:
        result: Aggregated result to export
        format: json, csv, html or pdf
        include_metrics: When False, the metrics block is left out of JSON output

    Raises:
        UnsupportedExportFormatError: For any other format
    """
    export_format = _coerce_format(format)

    if export_format == ExportFormat.CSV:
        return _to_csv(result)
    if export_format == ExportFormat.HTML:
        return _to_html(result)
    if export_format == ExportFormat.PDF:
        logger.info("pdf_export_fallback", file_path=result.metadata.file_path)
    return _to_json(result, include_metrics)


def _to_json(result: AggregatedResult, include_metrics: bool = True) -> str:
    exclude = None if include_metrics else {"metrics"}
    return json.dumps(result.model_dump(mode="json", exclude=exclude), indent=2)


def _to_csv(result: AggregatedResult) -> str:
    rows = [
        ("Overall Score", result.overall_score),
        ("Compliant", str(result.overall_compliant).lower()),
        ("Total Issues", result.total_issues),
        ("Total Warnings", result.total_warnings),
        ("Total Errors", result.total_errors),
        ("Execution Time", result.execution_time),
        ("Compliance Level", result.summary.compliance_level),
    ]
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(("Metric", "Value"))
    writer.writerows(rows)
    return buffer.getvalue().rstrip("\n")


def _to_html(result: AggregatedResult) -> str:
    template = _get_template_env().get_template("report.html.j2")
    return template.render(
        result=result,
        generated=result.timestamp.strftime("%Y-%m-%d %H:%M:%S UTC"),
        recommendations=result.recommendations[:TOP_RECOMMENDATIONS],
    )


def write_reports(result: AggregatedResult, policy: ReportingPolicy) -> list[Path]:
    """Write one report file per configured format.

    Files go to ``policy.output_path`` (default ``./reports``), named after
    the result timestamp. Parent directories are created as needed.

    Returns:
        Paths written, in format order
    """
    output_dir = Path(policy.output_path or DEFAULT_OUTPUT_DIR)
    output_dir.mkdir(parents=True, exist_ok=True)
    stamp = result.timestamp.strftime("%Y%m%dT%H%M%S%f")

    log = logger.bind(component="exporter", output_dir=str(output_dir))
    written: list[Path] = []
    for export_format in dict.fromkeys(policy.formats):
        path = output_dir / f"compliance-report-{stamp}.{_SUFFIXES[export_format]}"
        path.write_text(export_results(result, export_format, policy.include_metrics), encoding="utf-8")
        written.append(path)

    log.info("reports_written", files=[p.name for p in written])
    return written


def render_compliance_report(results: list[AggregatedResult], metrics: ValidationMetrics) -> str:
    """Markdown compliance report for the latest result in ``results``."""
    if not results:
        return "No validation results available for reporting."

    latest = results[-1]
    template = _get_template_env().get_template("compliance_report.md.j2")
    return template.render(
        latest=latest,
        metrics=metrics,
        validators=latest.validation_results,
        memory_mb=latest.metrics.performance.memory_usage / 1024 / 1024,
        recommendations=latest.recommendations[:TOP_RECOMMENDATIONS],
        common_issues=metrics.common_issues[:TOP_RECOMMENDATIONS],
        report_date=datetime.now(timezone.utc),
    )


def build_dashboard(results: list[AggregatedResult], metrics: ValidationMetrics) -> dict[str, Any]:
    """Dashboard view over the history: latest status, per-validator scores, timeline."""
    if not results:
        return {
            "overall_score": 0,
            "compliant": False,
            "total_validations": 0,
            "frameworks": [],
            "trends": {"score_improvement": 0, "issue_reduction": 0, "compliance_progress": 0.0},
            "top_issues": [],
            "timeline": [],
        }

    latest = results[-1]
    return {
        "overall_score": latest.overall_score,
        "compliant": latest.overall_compliant,
        "total_validations": metrics.total_validations,
        "frameworks": [
            {
                "name": name,
                "score": data.get("score", 0),
                "compliant": data.get("compliant", False),
            }
            for name, data in latest.validation_results.items()
        ],
        "trends": latest.metrics.trends.model_dump(),
        "top_issues": metrics.common_issues[:DASHBOARD_TOP_ISSUES],
        "timeline": [
            {
                "timestamp": r.timestamp.isoformat(),
                "score": r.overall_score,
                "issues": r.total_issues,
            }
            for r in results[-DASHBOARD_TIMELINE:]
        ],
    }
