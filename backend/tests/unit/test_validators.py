"""Tests for the built-in GDPR, NSM, WCAG and Norwegian validators."""

import pytest

from compliance_engine.validators.accessibility_validator import AccessibilityValidator
from compliance_engine.validators.base import BaseValidator
from compliance_engine.validators.gdpr_validator import GDPRValidator
from compliance_engine.validators.models import (
    GDPRResult,
    IssueSeverity,
    NorwegianResult,
    NSMResult,
    WCAGResult,
)
from compliance_engine.validators.norwegian_validator import NorwegianValidator
from compliance_engine.validators.nsm_validator import NSMValidator

from doubles import CLEAN_CODE, NON_COMPLIANT_CODE


def _rules(result) -> list[str]:
    return [i.rule for i in result.issues]


class TestBaseValidator:
    def test_cannot_instantiate(self):
        with pytest.raises(TypeError):
            BaseValidator()  # type: ignore[abstract]

    @pytest.mark.parametrize(
        "validator", [GDPRValidator(), NSMValidator(), AccessibilityValidator(), NorwegianValidator()]
    )
    def test_clean_code_is_compliant(self, validator):
        result = validator.validate(CLEAN_CODE, "src/math.ts")
        assert result.issues == []
        assert result.score == 100
        assert result.compliant is True
        assert result.category == validator.validation_type.value

    @pytest.mark.parametrize(
        "validator", [GDPRValidator(), NSMValidator(), AccessibilityValidator(), NorwegianValidator()]
    )
    def test_deterministic(self, validator):
        assert validator.validate(NON_COMPLIANT_CODE) == validator.validate(NON_COMPLIANT_CODE)


class TestGDPRValidator:
    def test_unencrypted_personal_field(self):
        result = GDPRValidator().validate(NON_COMPLIANT_CODE)
        assert isinstance(result, GDPRResult)
        assert "unencrypted_personal_data" in _rules(result)
        assert result.personal_data_fields == ["personalData"]
        assert result.compliant is False
        error = next(i for i in result.issues if i.rule == "unencrypted_personal_data")
        assert error.severity == IssueSeverity.ERROR
        assert error.line == 2

    def test_encrypted_personal_field_passes_encryption_check(self):
        code = "const email = encrypt(input.email);\nconst consent = true;\n"
        result = GDPRValidator().validate(code)
        assert "unencrypted_personal_data" not in _rules(result)
        assert result.data_protection["encryption"] is True
        assert result.data_protection["consent"] is True

    def test_missing_consent_is_informational(self):
        result = GDPRValidator().validate("const phone = encrypt(raw);")
        consent = next(i for i in result.issues if i.rule == "missing_consent")
        assert consent.severity == IssueSeverity.INFO

    def test_hardcoded_personal_number(self):
        result = GDPRValidator().validate('const id = "01019912345";')
        assert "hardcoded_personal_data" in _rules(result)

    def test_example_email_is_allowed(self):
        assert GDPRValidator().validate('const to = "ola@example.com";').issues == []
        assert "hardcoded_email" in _rules(GDPRValidator().validate('const to = "ola@nordmann.no";'))

    def test_personal_data_in_browser_storage(self):
        result = GDPRValidator().validate('localStorage.setItem("email", value);')
        assert "unencrypted_storage" in _rules(result)

    def test_special_category_and_biometric_fields(self):
        result = GDPRValidator().validate("const healthRecord = x;\nconst fingerprintHash = y;\n")
        rules = _rules(result)
        assert "special_category_data" in rules
        assert "biometric_data" in rules


class TestNSMValidator:
    def test_hardcoded_secret_is_critical(self):
        result = NSMValidator().validate('const apiKey = "sk_live_123456";')
        assert isinstance(result, NSMResult)
        assert result.issues[0].severity == IssueSeverity.CRITICAL
        assert result.vulnerability_types == ["hardcoded_secret"]
        assert result.compliant is False

    def test_injection_points(self):
        code = 'db.query("SELECT * FROM users WHERE id = " + id);\neval(input);\nel.innerHTML = html;\n'
        rules = _rules(NSMValidator().validate(code))
        assert {"sql_injection", "code_injection", "xss"} <= set(rules)

    def test_insecure_transport_allows_localhost(self):
        assert NSMValidator().validate('fetch("http://localhost:3000")').issues == []
        assert _rules(NSMValidator().validate('fetch("http://api.example.no")')) == ["insecure_transport"]

    def test_classification_marking(self):
        result = NSMValidator().validate('const classification = "restricted";')
        assert result.classification == "RESTRICTED"
        assert NSMValidator().validate(CLEAN_CODE).classification == "OPEN"


class TestAccessibilityValidator:
    def test_missing_alt_text(self):
        result = AccessibilityValidator().validate(NON_COMPLIANT_CODE)
        assert isinstance(result, WCAGResult)
        missing = next(i for i in result.issues if i.rule == "missing_alt_text")
        assert missing.severity == IssueSeverity.ERROR
        assert missing.principle == "perceivable"
        assert result.principles == {"perceivable": 1, "operable": 0, "understandable": 0, "robust": 0}

    def test_alt_variants(self):
        assert AccessibilityValidator().validate('<img src="a.png" alt="Logo" />').issues == []
        assert AccessibilityValidator().validate("<img src={src} alt={label} />").issues == []
        decorative = AccessibilityValidator().validate('<img src="a.png" alt="" />')
        assert _rules(decorative) == ["empty_alt_text"]

    def test_data_alt_is_not_alt_text(self):
        result = AccessibilityValidator().validate('<img src="a.png" data-alt="Logo" />')
        assert _rules(result) == ["missing_alt_text"]

    def test_operable_checks(self):
        code = '<div onClick={open}>Open</div>\n<a tabIndex="3" href="/x">x</a>\n'
        rules = _rules(AccessibilityValidator().validate(code))
        assert "non_interactive_click_handler" in rules
        assert "positive_tabindex" in rules

    def test_document_language_and_button_name(self):
        code = "<html><body><button></button></body></html>"
        rules = _rules(AccessibilityValidator().validate(code))
        assert "missing_document_language" in rules
        assert "button_without_name" in rules
        labelled = '<html lang="nb"><button aria-label="Lukk"></button></html>'
        assert AccessibilityValidator().validate(labelled).issues == []


class TestNorwegianValidator:
    def test_norwegian_locale_declared(self):
        result = NorwegianValidator().validate('<html lang="nb"></html>')
        assert isinstance(result, NorwegianResult)
        assert result.checks["locale_declared"] is True
        assert result.issues == []

    def test_foreign_locale(self):
        result = NorwegianValidator().validate('<html lang="en"></html>')
        assert _rules(result) == ["non_norwegian_locale"]

    def test_date_and_currency(self):
        code = 'const d = date.toLocaleDateString();\nconst price = "$10";\n'
        result = NorwegianValidator().validate(code)
        assert {"date_format", "currency"} <= set(_rules(result))
        assert result.checks["date_locale"] is False
        assert result.checks["currency_nok"] is False

    def test_personal_number_needs_mod11(self):
        assert "personal_number_validation" in _rules(
            NorwegianValidator().validate("function checkFodselsnummer(value) {}")
        )
        assert NorwegianValidator().validate(
            "function checkFodselsnummer(value) { return mod11(value); }"
        ).issues == []

    def test_hardcoded_ui_text_without_i18n(self):
        code = "<p>Welcome to your account</p>"
        assert _rules(NorwegianValidator().validate(code)) == ["hardcoded_text"]
        assert NorwegianValidator().validate("const { t } = useTranslation();\n" + code).issues == []
