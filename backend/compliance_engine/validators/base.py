"""Base validator — abstract class implementing the Strategy Pattern.

Built-in validators scan source text with regexes and score themselves by
subtracting a severity penalty per issue. Custom checks do not subclass this;
they are plugins (see registry.py).
"""

from abc import ABC, abstractmethod
import re
from typing import Iterator, Optional

from compliance_engine.validators.models import (
    Issue,
    IssueSeverity,
    ValidationType,
    ValidatorResult,
)
from compliance_engine.validators.reference_data import COMPLIANT_SCORE_FLOOR, PENALTY_WEIGHTS


class BaseValidator(ABC):
    """Abstract base for all built-in compliance validators.

    Contract:
        - validate() is deterministic: same input → same output
        - validate() returns a category result whose score is 0-100
        - No network calls, no randomness, no shared state
    """

    validation_type: ValidationType

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for logging."""
        ...

    @abstractmethod
    def validate(self, code: str, file_path: str = "unknown") -> ValidatorResult:
        """Run compliance checks against a unit of source text.

        Args:
            code: Source text to analyze
            file_path: Path the text was read from (used for file-type checks)

        Returns:
            Category result with score, compliant flag and issue list
        """
        ...

    # ── Helper Methods ──

    def _issue(
        self,
        severity: IssueSeverity,
        rule: str,
        message: str,
        line: Optional[int] = None,
        suggestion: Optional[str] = None,
        **extra,
    ) -> Issue:
        """Convenience method to create an Issue."""
        return Issue(
            severity=severity,
            rule=rule,
            message=message,
            line=line,
            suggestion=suggestion,
            **extra,
        )

    def _score(self, issues: list[Issue]) -> int:
        """Start at 100 and subtract a penalty per issue severity."""
        penalty = sum(PENALTY_WEIGHTS[IssueSeverity(i.severity)] for i in issues)
        return max(0, min(100, 100 - penalty))

    def _is_compliant(self, score: int, issues: list[Issue]) -> bool:
        blocking = {IssueSeverity.ERROR, IssueSeverity.CRITICAL}
        return score >= COMPLIANT_SCORE_FLOOR and not any(i.severity in blocking for i in issues)

    @staticmethod
    def _line_of(code: str, index: int) -> int:
        """1-based line number of a character offset."""
        return code.count("\n", 0, index) + 1

    @staticmethod
    def _matches(pattern: re.Pattern, code: str) -> Iterator[re.Match]:
        return pattern.finditer(code)

    def _contains_any(self, text: str, keywords: list[str]) -> bool:
        """Check if text contains any of the keywords (case-insensitive)."""
        text_lower = text.lower()
        return any(kw.lower() in text_lower for kw in keywords)
