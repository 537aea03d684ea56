"""Norwegian Validator — locale, formatting, and translation checks for nb-NO/nn-NO."""

from compliance_engine.validators.base import BaseValidator
from compliance_engine.validators.models import Issue, IssueSeverity, NorwegianResult, ValidationType
from compliance_engine.validators.reference_data import (
    ANY_LANG,
    BARE_DATE_FORMAT,
    FOREIGN_CURRENCY,
    HARDCODED_UI_TEXT,
    I18N_USAGE,
    MOD11_CHECK,
    NOK_CURRENCY,
    NORWEGIAN_LANG,
    PERSONAL_NUMBER_MENTION,
    US_DATE_LITERAL,
)


class NorwegianValidator(BaseValidator):
    """Checks that user-facing code is prepared for Norwegian users."""

    validation_type = ValidationType.NORWEGIAN

    @property
    def name(self) -> str:
        return "NorwegianValidator"

    def validate(self, code: str, file_path: str = "unknown") -> NorwegianResult:
        issues: list[Issue] = []
        checks = {
            "locale_declared": bool(NORWEGIAN_LANG.search(code)),
            "date_locale": True,
            "currency_nok": True,
            "translations": bool(I18N_USAGE.search(code)),
        }

        if ANY_LANG.search(code) and not checks["locale_declared"]:
            issues.append(self._issue(
                IssueSeverity.WARNING,
                "non_norwegian_locale",
                "Document language is not Norwegian (nb/nn)",
                suggestion='Use lang="nb" or lang="nn" for Norwegian interfaces',
            ))

        for pattern in (BARE_DATE_FORMAT, US_DATE_LITERAL):
            for match in self._matches(pattern, code):
                checks["date_locale"] = False
                issues.append(self._issue(
                    IssueSeverity.WARNING,
                    "date_format",
                    "Date formatted without the nb-NO locale",
                    line=self._line_of(code, match.start()),
                    suggestion="Format dates as DD.MM.YYYY using the nb-NO locale",
                ))

        if FOREIGN_CURRENCY.search(code) and not NOK_CURRENCY.search(code):
            checks["currency_nok"] = False
            issues.append(self._issue(
                IssueSeverity.INFO,
                "currency",
                "Prices are shown in a foreign currency only",
                suggestion="Display amounts in NOK (kr) for Norwegian users",
            ))

        if not checks["translations"]:
            for match in self._matches(HARDCODED_UI_TEXT, code):
                issues.append(self._issue(
                    IssueSeverity.INFO,
                    "hardcoded_text",
                    f"Hardcoded UI text '{match.group(1)}' is not translatable",
                    line=self._line_of(code, match.start()),
                    suggestion="Move user-facing text to translation keys",
                ))

        if PERSONAL_NUMBER_MENTION.search(code) and not MOD11_CHECK.search(code):
            issues.append(self._issue(
                IssueSeverity.WARNING,
                "personal_number_validation",
                "Fødselsnummer handled without MOD11 checksum validation",
                suggestion="Validate both control digits with the MOD11 algorithm",
            ))

        score = self._score(issues)
        return NorwegianResult(
            score=score,
            compliant=self._is_compliant(score, issues),
            issues=issues,
            checks=checks,
        )
