"""NSM Validator — security baseline checks inspired by the Norwegian NSM guidelines."""

from compliance_engine.validators.base import BaseValidator
from compliance_engine.validators.models import Issue, NSMResult, ValidationType
from compliance_engine.validators.reference_data import CLASSIFICATION_MARKING, SECURITY_RULES


class NSMValidator(BaseValidator):
    """Flags injection points, leaked credentials, and weak transport or randomness."""

    validation_type = ValidationType.NSM

    @property
    def name(self) -> str:
        return "NSMValidator"

    def validate(self, code: str, file_path: str = "unknown") -> NSMResult:
        issues: list[Issue] = []
        vulnerability_types: list[str] = []

        for rule, (pattern, severity, message, suggestion) in SECURITY_RULES.items():
            for match in self._matches(pattern, code):
                issues.append(self._issue(
                    severity,
                    rule,
                    message,
                    line=self._line_of(code, match.start()),
                    suggestion=suggestion,
                ))
                if rule not in vulnerability_types:
                    vulnerability_types.append(rule)

        marking = CLASSIFICATION_MARKING.search(code)
        classification = marking.group(1).upper() if marking else "OPEN"

        score = self._score(issues)
        return NSMResult(
            score=score,
            compliant=self._is_compliant(score, issues),
            issues=issues,
            classification=classification,
            vulnerability_types=vulnerability_types,
        )
