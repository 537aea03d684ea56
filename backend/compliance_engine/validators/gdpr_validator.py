"""GDPR Validator — personal data handling, encryption, consent, and leakage checks.

If the code declares a personal data field, something in the same unit must
encrypt it. Hardcoded personal numbers, personal data in logs, and personal data
written to browser storage are flagged regardless.
"""

from compliance_engine.validators.base import BaseValidator
from compliance_engine.validators.models import GDPRResult, Issue, IssueSeverity, ValidationType
from compliance_engine.validators.reference_data import (
    ANONYMIZATION_PATTERN,
    BIOMETRIC_FIELDS,
    BROWSER_STORAGE_WRITE,
    CONSENT_PATTERN,
    EMAIL_LITERAL,
    ENCRYPTION_PATTERN,
    FIELD_DECLARATION,
    LOG_CALL,
    NORWEGIAN_PERSONAL_NUMBER,
    PERSONAL_FIELDS,
    RETENTION_PATTERN,
    SENSITIVE_FIELDS,
)


class GDPRValidator(BaseValidator):
    """Detects personal data processed without the protections GDPR requires."""

    validation_type = ValidationType.GDPR

    @property
    def name(self) -> str:
        return "GDPRValidator"

    def validate(self, code: str, file_path: str = "unknown") -> GDPRResult:
        issues: list[Issue] = []

        data_protection = {
            "encryption": bool(ENCRYPTION_PATTERN.search(code)),
            "consent": bool(CONSENT_PATTERN.search(code)),
            "anonymization": bool(ANONYMIZATION_PATTERN.search(code)),
            "retention": bool(RETENTION_PATTERN.search(code)),
        }

        # 1. Declared personal / special-category fields
        personal_fields: list[str] = []
        for match in self._matches(FIELD_DECLARATION, code):
            field = match.group(1)
            key = field.lower()
            if field in personal_fields:
                continue
            line = self._line_of(code, match.start())

            if self._contains_any(key, BIOMETRIC_FIELDS):
                personal_fields.append(field)
                issues.append(self._issue(
                    IssueSeverity.ERROR,
                    "biometric_data",
                    f"Biometric data field '{field}' requires explicit consent and a DPIA",
                    line=line,
                    suggestion="Document a legal basis under Article 9 and run a DPIA",
                    field=field,
                ))
            elif self._contains_any(key, SENSITIVE_FIELDS):
                personal_fields.append(field)
                issues.append(self._issue(
                    IssueSeverity.WARNING,
                    "special_category_data",
                    f"Sensitive personal data field '{field}' detected",
                    line=line,
                    suggestion="Apply enhanced protection for special-category data",
                    field=field,
                ))
            elif self._contains_any(key, PERSONAL_FIELDS):
                personal_fields.append(field)

            if field in personal_fields and not data_protection["encryption"]:
                issues.append(self._issue(
                    IssueSeverity.ERROR,
                    "unencrypted_personal_data",
                    f"Personal data field '{field}' is handled without encryption",
                    line=line,
                    suggestion="Encrypt personal data at rest and in transit",
                    field=field,
                ))

        # 2. Hardcoded personal data in literals
        for match in self._matches(NORWEGIAN_PERSONAL_NUMBER, code):
            issues.append(self._issue(
                IssueSeverity.ERROR,
                "hardcoded_personal_data",
                "Hardcoded Norwegian personal number detected",
                line=self._line_of(code, match.start()),
                suggestion="Never hardcode personal data - use test data or environment variables",
            ))
        for match in self._matches(EMAIL_LITERAL, code):
            if "@example" in match.group(0):
                continue
            issues.append(self._issue(
                IssueSeverity.WARNING,
                "hardcoded_email",
                "Hardcoded email address detected",
                line=self._line_of(code, match.start()),
                suggestion="Use example.com addresses in code and fixtures",
            ))

        # 3. Personal data leaving through storage or logs
        for match in self._matches(BROWSER_STORAGE_WRITE, code):
            if self._contains_any(match.group(2), PERSONAL_FIELDS) and not data_protection["encryption"]:
                issues.append(self._issue(
                    IssueSeverity.ERROR,
                    "unencrypted_storage",
                    f"Personal data stored in {match.group(1)} without encryption",
                    line=self._line_of(code, match.start()),
                    suggestion="Encrypt personal data before storing in browser storage",
                ))
        for match in self._matches(LOG_CALL, code):
            if self._contains_any(match.group(3), PERSONAL_FIELDS):
                issues.append(self._issue(
                    IssueSeverity.WARNING,
                    "personal_data_logging",
                    "Potential logging of personal data",
                    line=self._line_of(code, match.start()),
                    suggestion="Avoid logging personal data or mask it before logging",
                ))

        # 4. Processing personal data without a consent mechanism
        if personal_fields and not data_protection["consent"]:
            issues.append(self._issue(
                IssueSeverity.INFO,
                "missing_consent",
                "Personal data is processed but no consent mechanism was found",
                suggestion="Record a legal basis or user consent for the processing",
            ))

        score = self._score(issues)
        return GDPRResult(
            score=score,
            compliant=self._is_compliant(score, issues),
            issues=issues,
            personal_data_fields=personal_fields,
            data_protection=data_protection,
        )
