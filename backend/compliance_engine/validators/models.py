"""Validation models — validator ids, severities, run configuration, per-validator
results, and the aggregated report structure.

Everything the engine hands back to a caller is a frozen pydantic model: a result
is built once by the aggregator and never mutated afterwards.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator


class ValidationType(str, Enum):
    """Built-in validator identifiers."""

    GDPR = "gdpr"            # Data protection
    NSM = "nsm"              # Security (Norwegian NSM guidelines)
    WCAG = "wcag"            # Accessibility
    NORWEGIAN = "norwegian"  # Locale / language requirements


class IssueSeverity(str, Enum):
    """Severity reported by a validator for a single issue."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class RecommendationSeverity(str, Enum):
    """Severity of an aggregated recommendation."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ValidationMode(str, Enum):
    SEQUENTIAL = "sequential"
    PARALLEL = "parallel"


class CacheStrategy(str, Enum):
    NONE = "none"
    MEMORY = "memory"


class ExportFormat(str, Enum):
    JSON = "json"
    HTML = "html"
    PDF = "pdf"
    CSV = "csv"


# ──────────────────────────────────────────────────────────────────────
# CONFIGURATION
# ──────────────────────────────────────────────────────────────────────


def camel_alias(name: str) -> str:
    """snake_case field name → camelCase alias used on the configuration surface."""
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


class _ConfigModel(BaseModel):
    """Frozen config section accepting both snake_case and camelCase keys."""

    model_config = {
        "alias_generator": camel_alias,
        "populate_by_name": True,
        "frozen": True,
    }


class CachePolicy(_ConfigModel):
    strategy: CacheStrategy = CacheStrategy.MEMORY
    ttl: float = Field(default=3600, ge=0, description="Entry lifetime in seconds")
    max_size: int = Field(default=100, ge=0)


class NotificationThresholds(_ConfigModel):
    error: int = Field(default=1, ge=0)
    warning: int = Field(default=5, ge=0)


class NotificationPolicy(_ConfigModel):
    enabled: bool = False
    channels: list[str] = Field(default_factory=list)
    thresholds: NotificationThresholds = Field(default_factory=NotificationThresholds)


class SchedulingPolicy(_ConfigModel):
    enabled: bool = False
    interval: int = Field(default=86_400_000, gt=0, description="Milliseconds between runs")
    immediate: bool = True


class ReportingPolicy(_ConfigModel):
    formats: list[ExportFormat] = Field(default_factory=lambda: [ExportFormat.JSON])
    output_path: Optional[str] = None
    include_metrics: bool = True


# Legacy keys accepted on the configuration surface
_KEY_ALIASES = {"timeout": "timeoutMs"}


def _normalize_keys(data: dict) -> dict:
    normalized = {}
    for key, value in data.items():
        key = _KEY_ALIASES.get(key, camel_alias(key))
        if isinstance(value, BaseModel):
            value = value.model_dump(by_alias=True, exclude_unset=True)
        normalized[key] = _normalize_keys(value) if isinstance(value, dict) else value
    return normalized


def _deep_merge(base: dict, override: dict) -> dict:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ValidationConfig(_ConfigModel):
    """Configuration for one validation run.

    Built once per call by merging the engine's base config with an optional
    override, then discarded.
    """

    enabled: bool = True
    validators: list[ValidationType] = Field(
        default_factory=lambda: [
            ValidationType.GDPR,
            ValidationType.NSM,
            ValidationType.WCAG,
            ValidationType.NORWEGIAN,
        ]
    )
    mode: ValidationMode = ValidationMode.PARALLEL
    timeout_ms: int = Field(default=30_000, gt=0, description="Per-validator timeout")
    retries: int = Field(default=2, ge=0)
    cache: CachePolicy = Field(default_factory=CachePolicy)
    notifications: NotificationPolicy = Field(default_factory=NotificationPolicy)
    scheduling: SchedulingPolicy = Field(default_factory=SchedulingPolicy)
    reporting: ReportingPolicy = Field(default_factory=ReportingPolicy)

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    def merged(self, override: Union["ValidationConfig", dict, None] = None) -> "ValidationConfig":
        """Return a new config with ``override`` applied key-by-key.

        Nested sections merge recursively, so ``{"cache": {"ttl": 5}}`` keeps the
        base strategy and size. ``self`` is never modified.
        """
        if override is None:
            return self
        if isinstance(override, ValidationConfig):
            override = override.model_dump(by_alias=True, exclude_unset=True)
        merged = _deep_merge(self.model_dump(by_alias=True), _normalize_keys(override))
        return ValidationConfig.model_validate(merged)


# ──────────────────────────────────────────────────────────────────────
# PER-VALIDATOR RESULTS
# ──────────────────────────────────────────────────────────────────────


# Severity spellings used by third-party analyzers
SEVERITY_ALIASES = {
    "high": "error",
    "medium": "warning",
    "moderate": "warning",
    "low": "info",
}


class Issue(BaseModel):
    """A single finding. Validator-specific extras are kept as-is."""

    severity: IssueSeverity
    message: str
    rule: Optional[str] = None
    line: Optional[int] = None
    suggestion: Optional[str] = None

    model_config = {"extra": "allow", "frozen": True}

    @field_validator("severity", mode="before")
    @classmethod
    def _map_severity_aliases(cls, value):
        if isinstance(value, str):
            value = value.lower()
            return SEVERITY_ALIASES.get(value, value)
        return value


class ValidatorResult(BaseModel):
    """Generic contract every validator and plugin result is read through."""

    category: str = "custom"
    score: float = Field(ge=0, le=100)
    compliant: bool
    issues: list[Issue] = Field(default_factory=list)

    model_config = {"extra": "allow", "frozen": True}

    def count(self, *severities: IssueSeverity) -> int:
        return sum(1 for issue in self.issues if issue.severity in severities)


class GDPRResult(ValidatorResult):
    category: Literal["gdpr"] = "gdpr"
    personal_data_fields: list[str] = Field(default_factory=list)
    data_protection: dict[str, bool] = Field(default_factory=dict)


class NSMResult(ValidatorResult):
    category: Literal["nsm"] = "nsm"
    classification: str = "OPEN"
    vulnerability_types: list[str] = Field(default_factory=list)


class WCAGResult(ValidatorResult):
    category: Literal["wcag"] = "wcag"
    level: Literal["A", "AA", "AAA"] = "AA"
    principles: dict[str, int] = Field(
        default_factory=dict, description="Issue count per WCAG principle"
    )


class NorwegianResult(ValidatorResult):
    category: Literal["norwegian"] = "norwegian"
    locale: str = "nb-NO"
    checks: dict[str, bool] = Field(default_factory=dict)


CategoryResult = Annotated[
    Union[GDPRResult, NSMResult, WCAGResult, NorwegianResult],
    Field(discriminator="category"),
]


# ──────────────────────────────────────────────────────────────────────
# AGGREGATED RESULT
# ──────────────────────────────────────────────────────────────────────


class _Frozen(BaseModel):
    model_config = {"frozen": True}


class ResultMetadata(_Frozen):
    file_path: str
    file_size: int
    lines_of_code: int
    validators_run: list[str]
    cache_hit: bool = False
    retry_count: int = 0


class PerformanceMetrics(_Frozen):
    total_time: float = Field(description="Milliseconds")
    validation_times: dict[str, float] = Field(description="Measured milliseconds per validator")
    memory_usage: int = Field(description="Peak resident set size in bytes")
    cpu_usage: float = Field(description="CPU milliseconds consumed by the run")


class CoverageMetrics(_Frozen):
    lines_analyzed: int
    functions_analyzed: int
    components_analyzed: int


class TrendMetrics(_Frozen):
    score_improvement: int = 0
    issue_reduction: int = 0
    compliance_progress: float = 0.0


class ResultMetrics(_Frozen):
    performance: PerformanceMetrics
    coverage: CoverageMetrics
    trends: TrendMetrics


class Recommendation(_Frozen):
    type: str
    severity: RecommendationSeverity
    message: str
    action: str
    estimated_effort: str
    priority: int = Field(ge=1, description="1 = most urgent")


class ResultSummary(_Frozen):
    passed: int = Field(description="Validators that contributed a result")
    failed: int = Field(description="Error and critical issues")
    warnings: int
    critical_issues: int = Field(description="Error and critical issues")
    compliance_level: str
    next_steps: list[str]


class AggregatedResult(_Frozen):
    """Unified, scored output of one validation run."""

    timestamp: datetime
    execution_time: float = Field(description="Milliseconds")
    overall_compliant: bool
    overall_score: int = Field(ge=0, le=100)
    total_issues: int
    total_warnings: int
    total_errors: int
    validation_results: dict[str, dict[str, Any]]
    metadata: ResultMetadata
    metrics: ResultMetrics
    recommendations: list[Recommendation] = Field(default_factory=list)
    summary: ResultSummary

    def as_cache_hit(self) -> "AggregatedResult":
        """Copy of this result as served from cache."""
        metadata = self.metadata.model_copy(update={"cache_hit": True, "retry_count": 0})
        return self.model_copy(update={"metadata": metadata})


class ValidationMetrics(BaseModel):
    """Summary statistics over the validation history."""

    total_validations: int = 0
    average_score: int = 0
    compliance_rate: int = 0
    common_issues: list[str] = Field(default_factory=list)
