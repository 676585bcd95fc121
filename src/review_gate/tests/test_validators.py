"""Unit tests for review gate field validators."""

from __future__ import annotations

import logging

import pytest

from review_gate.validators import (
    ACCOUNT_ERROR,
    AADHAAR_ERROR,
    IFSC_ERROR,
    PAN_ERROR,
    PAN_OR_AADHAAR_ERROR,
    ValidationResult,
    is_known_rule,
    validate,
    validate_account_number,
    validate_min_length,
)


# ---------------------------------------------------------------------------
# test_pan / test_aadhaar
# ---------------------------------------------------------------------------


class TestPan:
    """Tests for the PAN rule."""

    def test_valid_uppercase(self):
        result = validate("PAN", "ABCDE1234F")
        assert result == ValidationResult(valid=True, normalized_value="ABCDE1234F")

    def test_lowercase_normalized(self):
        result = validate("PAN", "abcde1234f")
        assert result.valid is True
        assert result.normalized_value == "ABCDE1234F"

    def test_whitespace_ignored(self):
        result = validate("PAN", " ABCDE 1234 F ")
        assert result.valid is True
        assert result.normalized_value == "ABCDE1234F"

    @pytest.mark.parametrize("raw", ["ABCDE12345", "ABCD1234FG", "ABCDE1234", "", None])
    def test_invalid(self, raw):
        result = validate("PAN", raw)
        assert result.valid is False
        assert result.normalized_value is None
        assert result.error == PAN_ERROR
        assert result.error.startswith("Invalid PAN format")


class TestAadhaar:
    """Tests for the AADHAAR rule."""

    def test_valid(self):
        assert validate("AADHAAR", "123456789012").valid is True

    def test_spaced_groups(self):
        result = validate("AADHAAR", "1234 5678 9012")
        assert result.valid is True
        assert result.normalized_value == "123456789012"

    @pytest.mark.parametrize("raw", ["12345678901", "1234567890123", "12345678901A"])
    def test_invalid(self, raw):
        result = validate("AADHAAR", raw)
        assert result.valid is False
        assert result.error == AADHAAR_ERROR
        assert result.error.startswith("Invalid Aadhaar format")


# ---------------------------------------------------------------------------
# test_pan_or_aadhaar
# ---------------------------------------------------------------------------


class TestPanOrAadhaar:
    """Disambiguation by stripped length."""

    def test_ten_chars_valid_pan(self):
        result = validate("PAN_OR_AADHAAR", "ABCDE1234F")
        assert result.valid is True
        assert result.normalized_value == "ABCDE1234F"

    def test_twelve_digits_valid_aadhaar(self):
        result = validate("PAN_OR_AADHAAR", "123456789012")
        assert result.valid is True
        assert result.normalized_value == "123456789012"

    def test_ten_chars_wrong_pattern_gets_pan_message(self):
        result = validate("PAN_OR_AADHAAR", "ABCDE12345")
        assert result.valid is False
        assert result.error == PAN_ERROR

    def test_twelve_chars_wrong_pattern_gets_aadhaar_message(self):
        result = validate("PAN_OR_AADHAAR", "12345678901X")
        assert result.valid is False
        assert result.error == AADHAAR_ERROR

    @pytest.mark.parametrize("raw", ["", "ABC", "12345678901", "1234567890123"])
    def test_other_lengths_get_combined_message(self, raw):
        result = validate("PAN_OR_AADHAAR", raw)
        assert result.valid is False
        assert result.error == PAN_OR_AADHAAR_ERROR

    def test_spaced_aadhaar(self):
        assert validate("PAN_OR_AADHAAR", "1234 5678 9012").valid is True


# ---------------------------------------------------------------------------
# test_ifsc
# ---------------------------------------------------------------------------


class TestIfsc:
    """Tests for the IFSC rule."""

    def test_lowercase_round_trip(self):
        result = validate("IFSC", "sbin0001234")
        assert result.valid is True
        assert result.normalized_value == "SBIN0001234"

    def test_fifth_char_must_be_zero(self):
        result = validate("IFSC", "SBIN1001234")
        assert result.valid is False
        assert result.error == IFSC_ERROR

    def test_alphanumeric_branch_code(self):
        assert validate("IFSC", "HDFC0AB12C3").valid is True

    @pytest.mark.parametrize("raw", ["SBIN000123", "SBIN00012345", "SB1N0001234", ""])
    def test_invalid(self, raw):
        assert validate("IFSC", raw).valid is False


# ---------------------------------------------------------------------------
# test_account_number / test_min_length
# ---------------------------------------------------------------------------


class TestAccountNumber:
    """Digits only, 9 to 18 inclusive."""

    @pytest.mark.parametrize("raw", ["123456789", "123456789012345678", "  1234567890  "])
    def test_valid(self, raw):
        result = validate_account_number(raw)
        assert result.valid is True
        assert result.normalized_value == raw.strip()

    @pytest.mark.parametrize("raw", ["12345678", "1234567890123456789", "12345678A", "1234 56789"])
    def test_invalid(self, raw):
        result = validate("ACCOUNT_NUMBER", raw)
        assert result.valid is False
        assert result.error == ACCOUNT_ERROR


class TestMinLength:
    """MIN_LENGTH(n) on the trimmed value."""

    def test_exact_length(self):
        result = validate("MIN_LENGTH(3)", "  abc  ")
        assert result.valid is True
        assert result.normalized_value == "abc"

    def test_too_short_after_trim(self):
        result = validate("MIN_LENGTH(3)", "  ab   ")
        assert result.valid is False
        assert result.error == "Must be at least 3 characters"

    def test_zero_accepts_empty(self):
        assert validate_min_length("", 0).valid is True


# ---------------------------------------------------------------------------
# test_registry
# ---------------------------------------------------------------------------


class TestRegistry:
    """Rule name lookup."""

    @pytest.mark.parametrize(
        "name", ["PAN", "AADHAAR", "PAN_OR_AADHAAR", "IFSC", "ACCOUNT_NUMBER", "MIN_LENGTH(10)"],
    )
    def test_known_rules(self, name):
        assert is_known_rule(name) is True

    @pytest.mark.parametrize("name", ["GSTIN", "MIN_LENGTH", "MIN_LENGTH(x)", "pan"])
    def test_unknown_rules(self, name):
        assert is_known_rule(name) is False

    def test_unknown_rule_fails_and_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="review_gate.validators"):
            result = validate("GSTIN", "22AAAAA0000A1Z5")
        assert result.valid is False
        assert "Unknown validation rule" in result.error
        assert "GSTIN" in caplog.text

    def test_never_raises_on_none(self):
        for name in ("PAN", "AADHAAR", "PAN_OR_AADHAAR", "IFSC", "ACCOUNT_NUMBER", "MIN_LENGTH(1)"):
            assert validate(name, None).valid is False
