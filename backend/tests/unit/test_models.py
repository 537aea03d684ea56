"""Tests for validators/models.py — configuration merging and result contracts."""

import pytest
from pydantic import ValidationError

from compliance_engine.validators.models import (
    CacheStrategy,
    Issue,
    IssueSeverity,
    ValidationConfig,
    ValidationMode,
    ValidationType,
    ValidatorResult,
)


class TestValidationConfig:
    def test_defaults(self):
        config = ValidationConfig()
        assert config.enabled is True
        assert config.validators == list(ValidationType)
        assert config.mode == ValidationMode.PARALLEL
        assert config.timeout_ms == 30_000
        assert config.retries == 2
        assert config.cache.strategy == CacheStrategy.MEMORY
        assert config.cache.ttl == 3600
        assert config.cache.max_size == 100
        assert config.notifications.thresholds.error == 1
        assert config.notifications.thresholds.warning == 5
        assert config.scheduling.interval == 86_400_000

    def test_camel_case_keys_accepted(self):
        config = ValidationConfig.model_validate(
            {"timeoutMs": 5000, "cache": {"maxSize": 10}, "reporting": {"outputPath": "out"}}
        )
        assert config.timeout_ms == 5000
        assert config.cache.max_size == 10
        assert config.reporting.output_path == "out"

    def test_merge_overrides_key_by_key(self):
        base = ValidationConfig()
        merged = base.merged({"timeout": 5000, "cache": {"ttl": 60}})
        assert merged.timeout_ms == 5000
        assert merged.cache.ttl == 60
        # untouched nested keys survive
        assert merged.cache.max_size == 100
        assert merged.cache.strategy == CacheStrategy.MEMORY

    def test_merge_accepts_snake_case(self):
        merged = ValidationConfig().merged({"timeout_ms": 250, "cache": {"max_size": 3}})
        assert merged.timeout_ms == 250
        assert merged.cache.max_size == 3

    def test_merge_never_mutates_base(self):
        base = ValidationConfig()
        base.merged({"validators": ["gdpr"], "retries": 0})
        assert base.validators == list(ValidationType)
        assert base.retries == 2

    def test_merge_with_model_only_applies_set_fields(self):
        base = ValidationConfig(retries=5)
        merged = base.merged(ValidationConfig(mode=ValidationMode.SEQUENTIAL))
        assert merged.mode == ValidationMode.SEQUENTIAL
        assert merged.retries == 5

    def test_merge_none_returns_base(self):
        base = ValidationConfig()
        assert base.merged(None) is base

    def test_invalid_values_rejected(self):
        with pytest.raises(ValidationError):
            ValidationConfig().merged({"mode": "eventually"})
        with pytest.raises(ValidationError):
            ValidationConfig().merged({"validators": ["sox"]})
        with pytest.raises(ValidationError):
            ValidationConfig().merged({"retries": -1})

    def test_frozen(self):
        with pytest.raises(ValidationError):
            ValidationConfig().retries = 3

    def test_timeout_seconds(self):
        assert ValidationConfig(timeout_ms=1500).timeout_seconds == 1.5


class TestResultContract:
    def test_severity_aliases(self):
        assert Issue(severity="high", message="x").severity == IssueSeverity.ERROR
        assert Issue(severity="Medium", message="x").severity == IssueSeverity.WARNING
        assert Issue(severity="low", message="x").severity == IssueSeverity.INFO
        assert Issue(severity="critical", message="x").severity == IssueSeverity.CRITICAL

    def test_issue_keeps_extra_fields(self):
        issue = Issue(severity="error", message="x", principle="perceivable")
        assert issue.model_dump()["principle"] == "perceivable"

    def test_result_score_bounds(self):
        with pytest.raises(ValidationError):
            ValidatorResult(score=101, compliant=True)
        with pytest.raises(ValidationError):
            ValidatorResult(score=-1, compliant=True)

    def test_count(self):
        result = ValidatorResult(
            score=50,
            compliant=False,
            issues=[
                {"severity": "error", "message": "a"},
                {"severity": "critical", "message": "b"},
                {"severity": "warning", "message": "c"},
            ],
        )
        assert result.count(IssueSeverity.ERROR, IssueSeverity.CRITICAL) == 2
        assert result.count(IssueSeverity.WARNING) == 1
