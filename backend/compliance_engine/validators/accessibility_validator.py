"""Accessibility Validator — WCAG 2.1 AA checks over HTML/JSX markup.

Findings are grouped by the four WCAG principles so reports can show where an
interface falls short.
"""

from collections import Counter
from typing import Optional

from compliance_engine.validators.base import BaseValidator
from compliance_engine.validators.models import Issue, IssueSeverity, ValidationType, WCAGResult
from compliance_engine.validators.reference_data import (
    ALT_ATTRIBUTE,
    ARIA_NAME,
    CANVAS_TAG,
    CLICKABLE_STATIC,
    EMPTY_BUTTON,
    HTML_TAG,
    IMG_TAG,
    INPUT_TAG,
    POSITIVE_TABINDEX,
    WCAG_PRINCIPLES,
)


class AccessibilityValidator(BaseValidator):
    """Detects markup that screen readers and keyboard users cannot work with."""

    validation_type = ValidationType.WCAG

    @property
    def name(self) -> str:
        return "AccessibilityValidator"

    def validate(self, code: str, file_path: str = "unknown") -> WCAGResult:
        issues: list[Issue] = []

        # Perceivable
        for match in self._matches(IMG_TAG, code):
            alt = ALT_ATTRIBUTE.search(match.group(0))
            line = self._line_of(code, match.start())
            if alt is None:
                issues.append(self._wcag_issue(
                    IssueSeverity.ERROR, "missing_alt_text", "perceivable", "1.1.1",
                    "Image missing alt attribute", line,
                    'Add descriptive alt text or alt="" for decorative images',
                ))
            elif alt.group(1) in ('""', "''"):
                issues.append(self._wcag_issue(
                    IssueSeverity.INFO, "empty_alt_text", "perceivable", "1.1.1",
                    "Image has empty alt text; ensure it is decorative", line,
                ))
        for match in self._matches(CANVAS_TAG, code):
            if not ARIA_NAME.search(match.group(0)):
                issues.append(self._wcag_issue(
                    IssueSeverity.WARNING, "canvas_without_alternative", "perceivable", "1.1.1",
                    "Canvas element should have accessible alternative content",
                    self._line_of(code, match.start()),
                    "Provide alternative text content or an ARIA label for the canvas",
                ))
        for match in self._matches(INPUT_TAG, code):
            tag = match.group(0)
            if 'type="hidden"' in tag:
                continue
            if not (ARIA_NAME.search(tag) or " id=" in tag):
                issues.append(self._wcag_issue(
                    IssueSeverity.WARNING, "unlabelled_input", "perceivable", "1.3.1",
                    "Form input without an associated label",
                    self._line_of(code, match.start()),
                    "Associate a <label> via id or add aria-label",
                ))

        # Operable
        for match in self._matches(CLICKABLE_STATIC, code):
            attrs = match.group(2)
            if "role=" not in attrs or "onKeyDown" not in attrs:
                issues.append(self._wcag_issue(
                    IssueSeverity.WARNING, "non_interactive_click_handler", "operable", "2.1.1",
                    f"Click handler on non-interactive <{match.group(1)}> element",
                    self._line_of(code, match.start()),
                    "Use a <button> or add role and keyboard handlers",
                ))
        for match in self._matches(POSITIVE_TABINDEX, code):
            issues.append(self._wcag_issue(
                IssueSeverity.WARNING, "positive_tabindex", "operable", "2.4.3",
                f"Positive tabIndex ({match.group(1)}) breaks natural focus order",
                self._line_of(code, match.start()),
                "Use tabIndex 0 or -1 and rely on DOM order",
            ))

        # Understandable
        html = HTML_TAG.search(code)
        if html and "lang=" not in html.group(1):
            issues.append(self._wcag_issue(
                IssueSeverity.ERROR, "missing_document_language", "understandable", "3.1.1",
                "Document has no lang attribute",
                self._line_of(code, html.start()),
                'Declare the page language, e.g. <html lang="nb">',
            ))

        # Robust
        for match in self._matches(EMPTY_BUTTON, code):
            if not ARIA_NAME.search(match.group(1)):
                issues.append(self._wcag_issue(
                    IssueSeverity.ERROR, "button_without_name", "robust", "4.1.2",
                    "Button has no accessible name",
                    self._line_of(code, match.start()),
                    "Add visible text or aria-label to the button",
                ))

        per_principle = Counter(issue.principle for issue in issues)
        score = self._score(issues)
        return WCAGResult(
            score=score,
            compliant=self._is_compliant(score, issues),
            issues=issues,
            principles={principle: per_principle.get(principle, 0) for principle in WCAG_PRINCIPLES},
        )

    def _wcag_issue(
        self,
        severity: IssueSeverity,
        rule: str,
        principle: str,
        criterion: str,
        message: str,
        line: int,
        suggestion: Optional[str] = None,
    ) -> Issue:
        return self._issue(
            severity,
            rule,
            message,
            line=line,
            suggestion=suggestion,
            principle=principle,
            criterion=criterion,
        )
