"""Reference data — rule patterns, scoring weights, and recommendation tables.

This is the encoded compliance knowledge that keeps validation deterministic.
Patterns are intentionally conservative: they flag likely problems for a human
to review rather than trying to prove a violation.
"""

import re

from compliance_engine.validators.models import (
    IssueSeverity,
    RecommendationSeverity,
    ValidationType,
)

# ──────────────────────────────────────────────────────────────────────
# SCORING
# ──────────────────────────────────────────────────────────────────────

# Points subtracted from a validator's 100-point score per issue
PENALTY_WEIGHTS: dict[IssueSeverity, int] = {
    IssueSeverity.CRITICAL: 20,
    IssueSeverity.ERROR: 10,
    IssueSeverity.WARNING: 5,
    IssueSeverity.INFO: 2,
}

# A single validator is compliant at or above this score with no blocking issues
COMPLIANT_SCORE_FLOOR = 80

# The aggregate is compliant at or above this score with zero errors
OVERALL_COMPLIANT_SCORE = 85

# (minimum score, label) checked top-down; any error overrides to Non-compliant
COMPLIANCE_LEVELS: list[tuple[int, str]] = [
    (95, "Excellent"),
    (85, "Good"),
    (70, "Fair"),
]


# ──────────────────────────────────────────────────────────────────────
# RECOMMENDATIONS
# ──────────────────────────────────────────────────────────────────────

# Issue severity → (recommendation severity, priority, effort estimate)
RECOMMENDATION_RULES: dict[IssueSeverity, tuple[RecommendationSeverity, int, str]] = {
    IssueSeverity.CRITICAL: (RecommendationSeverity.CRITICAL, 1, "4-8 hours"),
    IssueSeverity.ERROR: (RecommendationSeverity.HIGH, 1, "2-4 hours"),
    IssueSeverity.WARNING: (RecommendationSeverity.MEDIUM, 3, "1-2 hours"),
    IssueSeverity.INFO: (RecommendationSeverity.LOW, 4, "< 1 hour"),
}

# Validator id → action prefix used in recommendations
RECOMMENDATION_ACTIONS: dict[str, str] = {
    ValidationType.GDPR.value: "Fix GDPR compliance issue",
    ValidationType.NSM.value: "Address security vulnerability",
    ValidationType.WCAG.value: "Fix accessibility issue",
    ValidationType.NORWEGIAN.value: "Fix Norwegian locale issue",
}

# Validator id → next step suggested when that validator reports problems
NEXT_STEPS: dict[str, str] = {
    ValidationType.GDPR.value: "Review and fix GDPR compliance issues",
    ValidationType.NSM.value: "Implement security improvements",
    ValidationType.WCAG.value: "Improve accessibility compliance",
    ValidationType.NORWEGIAN.value: "Review Norwegian locale and language requirements",
}


# ──────────────────────────────────────────────────────────────────────
# DATA PROTECTION (GDPR)
# ──────────────────────────────────────────────────────────────────────

PERSONAL_FIELDS = [
    "personaldata", "personalnumber", "personnummer", "fodselsnummer", "fødselsnummer",
    "socialsecuritynumber", "firstname", "lastname", "fullname",
    "email", "phone", "mobile", "address", "birthdate", "dateofbirth",
]

SENSITIVE_FIELDS = [
    "health", "diagnosis", "religion", "ethnicity", "ethnic", "sexualorientation",
    "political", "tradeunion", "criminal", "genetic",
]

BIOMETRIC_FIELDS = ["fingerprint", "faceid", "biometric", "retina", "voiceprint"]

ENCRYPTION_PATTERN = re.compile(r"encrypt|crypto|bcrypt|argon2|pbkdf2|scrypt|cipher", re.IGNORECASE)
CONSENT_PATTERN = re.compile(r"consent|opt[-_ ]?in|samtykke", re.IGNORECASE)
ANONYMIZATION_PATTERN = re.compile(r"anonymi[sz]|pseudonymi[sz]|mask(ed|ing)?\b|redact", re.IGNORECASE)
RETENTION_PATTERN = re.compile(r"retention|expire|ttl|purge", re.IGNORECASE)

# Declared fields: `personalData: string`, `"email": value`, `phone = ...`
FIELD_DECLARATION = re.compile(r"[\"']?([A-Za-z_][\w]*)[\"']?\s*\??\s*[:=](?!=)")

NORWEGIAN_PERSONAL_NUMBER = re.compile(r"\b\d{6}\s?\d{5}\b")
EMAIL_LITERAL = re.compile(r"[\w.+-]+@[\w-]+\.[\w.]+")
BROWSER_STORAGE_WRITE = re.compile(r"(localStorage|sessionStorage)\.setItem\(\s*[\"'`]?([\w-]+)")
LOG_CALL = re.compile(r"(console\.(log|info|debug)|print|logger\.\w+|logging\.\w+)\((.*)\)")


# ──────────────────────────────────────────────────────────────────────
# SECURITY (NSM)
# ──────────────────────────────────────────────────────────────────────

# rule → (pattern, severity, message, suggestion)
SECURITY_RULES: dict[str, tuple[re.Pattern, IssueSeverity, str, str]] = {
    "hardcoded_secret": (
        re.compile(
            r"(password|passwd|secret|api[_-]?key|access[_-]?token)\s*[:=]\s*[\"'][^\"']{4,}[\"']",
            re.IGNORECASE,
        ),
        IssueSeverity.CRITICAL,
        "Hardcoded credential detected",
        "Load secrets from environment variables or a secret manager",
    ),
    "sql_injection": (
        re.compile(r"(SELECT|INSERT|UPDATE|DELETE)\b[^;\n]*[\"'`]\s*\+", re.IGNORECASE),
        IssueSeverity.CRITICAL,
        "SQL statement built by string concatenation",
        "Use parameterized queries",
    ),
    "code_injection": (
        re.compile(r"\beval\s*\(|new\s+Function\s*\("),
        IssueSeverity.ERROR,
        "Dynamic code evaluation",
        "Avoid eval and the Function constructor",
    ),
    "xss": (
        re.compile(r"\.innerHTML\s*=|dangerouslySetInnerHTML"),
        IssueSeverity.ERROR,
        "Unsanitized HTML injection point",
        "Sanitize markup or render text content instead",
    ),
    "tls_verification_disabled": (
        re.compile(r"verify\s*=\s*False|rejectUnauthorized\s*:\s*false|NODE_TLS_REJECT_UNAUTHORIZED"),
        IssueSeverity.ERROR,
        "TLS certificate verification disabled",
        "Keep certificate verification enabled",
    ),
    "insecure_transport": (
        re.compile(r"http://(?!localhost|127\.0\.0\.1)[\w.-]+"),
        IssueSeverity.WARNING,
        "Unencrypted HTTP endpoint",
        "Use HTTPS for all external endpoints",
    ),
    "weak_randomness": (
        re.compile(r"Math\.random\(\)|random\.random\(\)"),
        IssueSeverity.WARNING,
        "Non-cryptographic random number generator",
        "Use crypto.getRandomValues or the secrets module for security tokens",
    ),
}

CLASSIFICATION_MARKING = re.compile(
    r"classification\s*[:=]\s*[\"'](OPEN|RESTRICTED|CONFIDENTIAL|SECRET)[\"']", re.IGNORECASE
)


# ──────────────────────────────────────────────────────────────────────
# ACCESSIBILITY (WCAG 2.1)
# ──────────────────────────────────────────────────────────────────────

WCAG_PRINCIPLES = ["perceivable", "operable", "understandable", "robust"]

IMG_TAG = re.compile(r"<img\b[^>]*>", re.IGNORECASE)
ALT_ATTRIBUTE = re.compile(r"(?<![\w-])alt\s*=\s*(\"([^\"]*)\"|'([^']*)'|\{)", re.IGNORECASE)
CANVAS_TAG = re.compile(r"<canvas\b[^>]*>", re.IGNORECASE)
INPUT_TAG = re.compile(r"<input\b[^>]*>", re.IGNORECASE)
EMPTY_BUTTON = re.compile(r"<button\b([^>]*)>\s*</button>", re.IGNORECASE)
CLICKABLE_STATIC = re.compile(r"<(div|span)\b([^>]*\bonClick\b[^>]*)>", re.IGNORECASE)
HTML_TAG = re.compile(r"<html\b([^>]*)>", re.IGNORECASE)
POSITIVE_TABINDEX = re.compile(r"tab[iI]ndex\s*=\s*[\"{]?\s*([1-9]\d*)")
ARIA_NAME = re.compile(r"aria-label(ledby)?\s*=", re.IGNORECASE)


# ──────────────────────────────────────────────────────────────────────
# NORWEGIAN LOCALE
# ──────────────────────────────────────────────────────────────────────

NORWEGIAN_LANG = re.compile(r"lang\s*=\s*[\"'](nb|nn|no)(-NO)?[\"']|nb-NO|nn-NO", re.IGNORECASE)
ANY_LANG = re.compile(r"<html\b[^>]*\blang\s*=", re.IGNORECASE)
BARE_DATE_FORMAT = re.compile(r"toLocale(Date|Time)?String\(\s*\)|strftime\([\"']%m/%d/%Y")
US_DATE_LITERAL = re.compile(r"MM/DD/YYYY")
FOREIGN_CURRENCY = re.compile(r"\bUSD\b|\$\s?\d")
NOK_CURRENCY = re.compile(r"\bNOK\b|\bkr\b")
HARDCODED_UI_TEXT = re.compile(r">\s*([A-Z][a-z]+(?:\s+[a-z]+){2,})\s*<")
I18N_USAGE = re.compile(r"\bt\(\s*[\"']|i18n|useTranslation|gettext|_\(\s*[\"']")
PERSONAL_NUMBER_MENTION = re.compile(r"f(o|ø)dselsnummer|personnummer", re.IGNORECASE)
MOD11_CHECK = re.compile(r"mod(ulo)?\s*11|checksum|kontrollsiffer", re.IGNORECASE)
