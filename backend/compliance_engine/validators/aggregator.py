"""Aggregator — turns per-validator outcomes into one scored, ranked report.

Scoring rules:
    - overall score  = mean of contributing validator scores rounded half up, 0 if none
    - errors         = issues with severity error or critical
    - compliant      = no errors and overall score >= 85
"""

import math
import re
import resource
import sys
import time
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

import structlog
from pydantic import BaseModel, TypeAdapter, ValidationError

from compliance_engine.validators.models import (
    AggregatedResult,
    CategoryResult,
    CoverageMetrics,
    IssueSeverity,
    PerformanceMetrics,
    Recommendation,
    ResultMetadata,
    ResultMetrics,
    ResultSummary,
    TrendMetrics,
    ValidationType,
    ValidatorResult,
)
from compliance_engine.validators.reference_data import (
    COMPLIANCE_LEVELS,
    NEXT_STEPS,
    OVERALL_COMPLIANT_SCORE,
    RECOMMENDATION_ACTIONS,
    RECOMMENDATION_RULES,
)

logger = structlog.get_logger()

FUNCTION_PATTERN = re.compile(r"\bfunction\b|=>|\bclass\s|\bdef\s")
COMPONENT_PATTERN = re.compile(r"export\s+(default\s+)?(const|function|class)\b")

_CATEGORY_ADAPTER = TypeAdapter(CategoryResult)
_BUILTIN_CATEGORIES = {t.value for t in ValidationType}

_ERROR_SEVERITIES = (IssueSeverity.ERROR, IssueSeverity.CRITICAL)


def round_half_up(value: float) -> int:
    """Round halves up (84.5 -> 85). Inputs are never negative."""
    return math.floor(value + 0.5)


def read_validator_result(validator_id: str, raw: Any) -> Optional[ValidatorResult]:
    """Read a raw validator/plugin result through the generic contract.

    Returns None (and logs) when the result does not satisfy the contract; the
    validator then counts as not having contributed.
    """
    if isinstance(raw, ValidatorResult):
        return raw
    if isinstance(raw, BaseModel):
        raw = raw.model_dump()
    try:
        if isinstance(raw, dict) and raw.get("category") in _BUILTIN_CATEGORIES:
            return _CATEGORY_ADAPTER.validate_python(raw)
        return ValidatorResult.model_validate(raw)
    except ValidationError as e:
        logger.warning(
            "validator_result_malformed",
            validator=validator_id,
            errors=e.error_count(),
            error=str(e),
        )
        return None


def aggregate_results(
    outcomes: Mapping[str, Any],
    code: str,
    file_path: str,
    *,
    started_at: float,
    retry_count: int = 0,
    validation_times: Optional[dict[str, float]] = None,
    cpu_time_ms: float = 0.0,
    previous: Optional[AggregatedResult] = None,
) -> AggregatedResult:
    """Build the aggregated report for one validation run.

    Args:
        outcomes: Validator id → raw result; failed or timed-out validators are absent
        code: Source text that was validated
        file_path: Reported path of the source text
        started_at: time.perf_counter() value when the run started
        retry_count: Number of retries the execution phase needed
        validation_times: Measured milliseconds per validator
        cpu_time_ms: CPU time consumed by the run
        previous: Most recent history entry, for trend computation

    Returns:
        Frozen AggregatedResult
    """
    results: dict[str, ValidatorResult] = {}
    for validator_id, raw in outcomes.items():
        result = read_validator_result(validator_id, raw)
        if result is not None:
            results[validator_id] = result

    total_issues = sum(len(r.issues) for r in results.values())
    total_warnings = sum(r.count(IssueSeverity.WARNING) for r in results.values())
    total_errors = sum(r.count(*_ERROR_SEVERITIES) for r in results.values())

    if results:
        overall_score = round_half_up(sum(r.score for r in results.values()) / len(results))
    else:
        overall_score = 0
    overall_score = max(0, min(100, overall_score))
    overall_compliant = total_errors == 0 and overall_score >= OVERALL_COMPLIANT_SCORE

    execution_time = round((time.perf_counter() - started_at) * 1000, 2)
    lines = code.count("\n") + 1 if code else 0
    times = validation_times or {}

    metadata = ResultMetadata(
        file_path=file_path,
        file_size=len(code.encode("utf-8")),
        lines_of_code=lines,
        validators_run=list(results.keys()),
        cache_hit=False,
        retry_count=retry_count,
    )

    metrics = ResultMetrics(
        performance=PerformanceMetrics(
            total_time=execution_time,
            validation_times={vid: times[vid] for vid in results if vid in times},
            memory_usage=_peak_memory_bytes(),
            cpu_usage=round(cpu_time_ms, 2),
        ),
        coverage=CoverageMetrics(
            lines_analyzed=lines,
            functions_analyzed=len(FUNCTION_PATTERN.findall(code)),
            components_analyzed=len(COMPONENT_PATTERN.findall(code)),
        ),
        trends=calculate_trends(overall_score, total_issues, previous),
    )

    summary = ResultSummary(
        passed=len(results),
        failed=total_errors,
        warnings=total_warnings,
        critical_issues=total_errors,
        compliance_level=determine_compliance_level(overall_score, total_errors),
        next_steps=generate_next_steps(results, total_errors),
    )

    return AggregatedResult(
        timestamp=datetime.now(timezone.utc),
        execution_time=execution_time,
        overall_compliant=overall_compliant,
        overall_score=overall_score,
        total_issues=total_issues,
        total_warnings=total_warnings,
        total_errors=total_errors,
        validation_results={vid: r.model_dump(mode="json") for vid, r in results.items()},
        metadata=metadata,
        metrics=metrics,
        recommendations=generate_recommendations(results),
        summary=summary,
    )


def calculate_trends(
    current_score: int,
    current_issues: int,
    previous: Optional[AggregatedResult],
) -> TrendMetrics:
    """Deltas against the most recent history entry; all zero without one."""
    if previous is None:
        return TrendMetrics()

    return TrendMetrics(
        score_improvement=current_score - previous.overall_score,
        issue_reduction=previous.total_issues - current_issues,
        compliance_progress=round((current_score - 50) / 50 * 100, 2),
    )


def generate_recommendations(results: Mapping[str, ValidatorResult]) -> list[Recommendation]:
    """One recommendation per issue, most urgent first (stable within a priority)."""
    recommendations: list[Recommendation] = []

    for validator_id, result in results.items():
        prefix = RECOMMENDATION_ACTIONS.get(validator_id, f"Resolve {validator_id} finding")
        for issue in result.issues:
            severity, priority, effort = RECOMMENDATION_RULES[IssueSeverity(issue.severity)]
            recommendations.append(Recommendation(
                type=validator_id,
                severity=severity,
                message=issue.message,
                action=f"{prefix}: {issue.suggestion or issue.message}",
                estimated_effort=effort,
                priority=priority,
            ))

    return sorted(recommendations, key=lambda r: r.priority)


def determine_compliance_level(score: int, total_errors: int) -> str:
    if total_errors > 0:
        return "Non-compliant"
    for floor, label in COMPLIANCE_LEVELS:
        if score >= floor:
            return label
    return "Poor"


def generate_next_steps(results: Mapping[str, ValidatorResult], total_errors: int) -> list[str]:
    steps: list[str] = []

    if total_errors > 0:
        steps.append("Address critical compliance issues immediately")

    for validator_id, result in results.items():
        if result.compliant and not result.issues:
            continue
        if validator_id == ValidationType.NSM.value and not result.issues:
            continue
        step = NEXT_STEPS.get(validator_id, f"Review {validator_id} findings")
        if step not in steps:
            steps.append(step)

    if not steps:
        steps.append("Maintain current compliance levels")
        steps.append("Consider additional security hardening")

    return steps


def _peak_memory_bytes() -> int:
    peak = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # Linux reports kilobytes, macOS bytes
    return peak if sys.platform == "darwin" else peak * 1024
