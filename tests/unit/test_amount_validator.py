"""Unit tests for amount extraction and validation."""

import math

import pytest

from payguard.config import Config
from payguard.validation.amount import AmountValidator

pytestmark = [pytest.mark.unit, pytest.mark.validation]


@pytest.fixture
def validator(config):
    return AmountValidator(config)


class TestAmountExtraction:
    """Test the supported amount formats."""

    @pytest.mark.parametrize("text,expected", [
        ("KES 1,234.50 received", 1234.50),
        ("You got Ksh5000 from", 5000.0),
        ("Kshs. 20 paid", 20.0),
        ("KSH 10,000 sent", 10000.0),
        ("received 100 shillings", 100.0),
        ("5,000 KES credited", 5000.0),
    ])
    def test_formats(self, validator, text, expected):
        assert validator.extract(text) == expected

    def test_prefix_form_wins_over_suffix(self, validator):
        assert validator.extract("200 shillings, total KES 700") == 700.0

    def test_no_amount(self, validator):
        assert validator.extract("Hello there") is None
        assert validator.extract("") is None

    @pytest.mark.parametrize("text", [
        "KES 12,3456 received",
        "KES 1000.555 received",
        "12,3456 KES received",
        "1000.555 KES received",
    ])
    def test_malformed_token_is_not_truncated(self, validator, text):
        assert validator.extract(text) is None
        result = validator.validate(text)
        assert not result.valid
        assert result.amount is None

    def test_trailing_punctuation(self, validator):
        assert validator.extract("Paid KES 5,000. Thank you") == 5000.0
        assert validator.extract("Ksh.750 received") == 750.0


class TestAmountValidation:
    """Test range checks and warnings."""

    def test_valid_amount(self, validator):
        result = validator.validate("Confirmed. KES 5,000 from John")
        assert result.valid
        assert result.amount == 5000.0
        assert result.error is None
        assert result.warnings == []
        assert not result.is_unusual

    def test_missing_amount(self, validator):
        result = validator.validate("Payment confirmed")
        assert not result.valid
        assert result.error == "No amount found in message"

    def test_amount_too_small(self, validator):
        result = validator.validate("KES 0.50 received")
        assert not result.valid
        assert result.amount == 0.5
        assert result.error == "Amount too small: KES 0.50 (minimum: KES 1)"

    def test_amount_too_large(self, validator):
        result = validator.validate("KES 600,000 received")
        assert not result.valid
        assert result.error == "Amount too large: KES 600,000 (maximum: KES 500,000)"

    def test_bounds_are_inclusive(self, validator):
        assert validator.check_value(1).valid
        assert validator.check_value(500000).valid

    def test_high_amount_is_unusual_but_valid(self, validator):
        result = validator.validate("KES 150,000 received")
        assert result.valid
        assert result.is_unusual
        assert result.warnings[0].startswith("High amount: KES 150,000")

    def test_repeated_digits_warning(self, validator):
        result = validator.validate("KES 55555 received")
        assert result.valid
        assert "Suspicious: Repeated digits pattern detected" in result.warnings

    def test_sequential_digits_warning(self, validator):
        result = validator.validate("KES 12345 received")
        assert result.valid
        assert "Suspicious: Sequential digits pattern detected" in result.warnings

    def test_custom_limits(self):
        validator = AmountValidator(Config(_env_file=None, max_amount=1000, reasonable_amount=500))
        assert not validator.validate("KES 2,000").valid
        assert validator.validate("KES 800").is_unusual


class TestCheckValue:
    """Test validation of already-parsed amounts."""

    def test_numeric_string(self, validator):
        result = validator.check_value("250.75")
        assert result.valid
        assert result.amount == 250.75

    def test_garbage_string(self, validator):
        result = validator.check_value("abc")
        assert not result.valid
        assert result.error.startswith("Invalid amount format")

    def test_nan(self, validator):
        result = validator.check_value(math.nan)
        assert not result.valid

    def test_infinity_is_too_large(self, validator):
        result = validator.check_value(math.inf)
        assert not result.valid
        assert result.error.startswith("Amount too large")
