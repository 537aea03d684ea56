"""Shared test fixtures. Everything runs in-process; validators never touch
the network or filesystem."""

import pytest

from compliance_engine.validators.engine import ValidationEngine
from compliance_engine.validators.models import AggregatedResult

from doubles import StaticPlugin, build_result, issue


@pytest.fixture
def engine() -> ValidationEngine:
    """Engine with default validators and no retry delay."""
    return ValidationEngine(retry_base_delay=0)


@pytest.fixture
def static_plugin() -> StaticPlugin:
    return StaticPlugin()


@pytest.fixture
def failing_result() -> AggregatedResult:
    return build_result({
        "gdpr": {
            "category": "gdpr",
            "score": 70,
            "compliant": False,
            "issues": [issue("error", "Personal data field 'email' is handled without encryption")],
        },
        "wcag": {
            "category": "wcag",
            "score": 90,
            "compliant": True,
            "issues": [issue("warning", "Form input without an associated label")],
        },
    })
