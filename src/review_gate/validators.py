"""Field validators for KYC and bank details."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)


PAN_PATTERN = re.compile(r"^[A-Z]{5}[0-9]{4}[A-Z]$")
AADHAAR_PATTERN = re.compile(r"^[0-9]{12}$")
IFSC_PATTERN = re.compile(r"^[A-Z]{4}0[A-Z0-9]{6}$")
ACCOUNT_PATTERN = re.compile(r"^[0-9]+$")
MIN_LENGTH_RULE = re.compile(r"^MIN_LENGTH\((\d+)\)$")

ACCOUNT_MIN_DIGITS = 9
ACCOUNT_MAX_DIGITS = 18

PAN_ERROR = "Invalid PAN format (e.g., ABCDE1234F)"
AADHAAR_ERROR = "Invalid Aadhaar format (12 digits)"
PAN_OR_AADHAAR_ERROR = "Enter valid PAN (10 chars) or Aadhaar (12 digits)"
IFSC_ERROR = "Invalid IFSC format (e.g., SBIN0001234)"
ACCOUNT_ERROR = f"Account number should be {ACCOUNT_MIN_DIGITS}-{ACCOUNT_MAX_DIGITS} digits"


# ---------------------------------------------------------------------------
# Result dataclass
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of checking one raw value against one rule."""

    valid: bool
    normalized_value: str | None = None
    error: str | None = None


def _ok(value: str) -> ValidationResult:
    return ValidationResult(valid=True, normalized_value=value)


def _fail(message: str) -> ValidationResult:
    return ValidationResult(valid=False, error=message)


def _strip_all(raw: str | None) -> str:
    return re.sub(r"\s", "", raw or "")


# ---------------------------------------------------------------------------
# Validators
# ---------------------------------------------------------------------------


def validate_pan(raw: str | None) -> ValidationResult:
    """PAN: 5 letters, 4 digits, 1 letter; whitespace ignored."""
    value = _strip_all(raw).upper()
    if len(value) == 10 and PAN_PATTERN.match(value):
        return _ok(value)
    return _fail(PAN_ERROR)


def validate_aadhaar(raw: str | None) -> ValidationResult:
    """Aadhaar: exactly 12 digits; whitespace ignored."""
    value = _strip_all(raw)
    if AADHAAR_PATTERN.match(value):
        return _ok(value)
    return _fail(AADHAAR_ERROR)


def validate_pan_or_aadhaar(raw: str | None) -> ValidationResult:
    """Pick the PAN or Aadhaar rule by stripped length.

    A 10-character value is judged as a PAN and a 12-character value as an
    Aadhaar number, so a malformed value gets that rule's message. Any other
    length fails with the combined message.
    """
    value = _strip_all(raw)
    if len(value) == 10:
        return validate_pan(value)
    if len(value) == 12:
        return validate_aadhaar(value)
    return _fail(PAN_OR_AADHAAR_ERROR)


def validate_ifsc(raw: str | None) -> ValidationResult:
    """IFSC: 4 letters, a literal 0, then 6 alphanumerics."""
    value = (raw or "").strip().upper()
    if IFSC_PATTERN.match(value):
        return _ok(value)
    return _fail(IFSC_ERROR)


def validate_account_number(raw: str | None) -> ValidationResult:
    value = (raw or "").strip()
    if (
        ACCOUNT_PATTERN.match(value)
        and ACCOUNT_MIN_DIGITS <= len(value) <= ACCOUNT_MAX_DIGITS
    ):
        return _ok(value)
    return _fail(ACCOUNT_ERROR)


def validate_min_length(raw: str | None, min_length: int) -> ValidationResult:
    value = (raw or "").strip()
    if len(value) >= min_length:
        return _ok(value)
    return _fail(f"Must be at least {min_length} characters")


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


_RULES = {
    "PAN": validate_pan,
    "AADHAAR": validate_aadhaar,
    "PAN_OR_AADHAAR": validate_pan_or_aadhaar,
    "IFSC": validate_ifsc,
    "ACCOUNT_NUMBER": validate_account_number,
}


def is_known_rule(rule_name: str) -> bool:
    """Return True if ``rule_name`` names a registered rule."""
    return rule_name in _RULES or MIN_LENGTH_RULE.match(rule_name) is not None


def validate(rule_name: str, raw_value: str | None) -> ValidationResult:
    """Check ``raw_value`` against the named rule.

    Rule names: PAN, AADHAAR, PAN_OR_AADHAAR, IFSC, ACCOUNT_NUMBER and
    MIN_LENGTH(n). Failures are returned, never raised.
    """
    rule = _RULES.get(rule_name)
    if rule is not None:
        return rule(raw_value)

    match = MIN_LENGTH_RULE.match(rule_name)
    if match:
        return validate_min_length(raw_value, int(match.group(1)))

    logger.warning("Unknown validation rule: %s", rule_name)
    return _fail(f"Unknown validation rule: {rule_name}")
