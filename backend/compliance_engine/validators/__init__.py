"""Compliance validators — built-in GDPR, NSM, WCAG and Norwegian checks plus
the shared models, registry, cache, history and aggregation they run through.

Usage:
    from compliance_engine.validators.engine import ValidationEngine

    async with ValidationEngine({"validators": ["gdpr", "wcag"]}) as engine:
        result = await engine.validate(code, "src/Profile.tsx")
"""

from compliance_engine.validators.errors import (
    ComplianceEngineError,
    PluginContractError,
    UnsupportedExportFormatError,
    ValidationOrchestrationError,
)
from compliance_engine.validators.models import (
    AggregatedResult,
    IssueSeverity,
    ValidationConfig,
    ValidationMetrics,
    ValidationMode,
    ValidationType,
    ValidatorResult,
)
from compliance_engine.validators.registry import ValidatorPlugin, ValidatorRegistry

__all__ = [
    "AggregatedResult",
    "ComplianceEngineError",
    "IssueSeverity",
    "PluginContractError",
    "UnsupportedExportFormatError",
    "ValidationConfig",
    "ValidationMetrics",
    "ValidationMode",
    "ValidationOrchestrationError",
    "ValidationType",
    "ValidatorPlugin",
    "ValidatorRegistry",
    "ValidatorResult",
]
