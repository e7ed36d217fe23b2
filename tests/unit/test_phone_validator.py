"""Unit tests for phone normalization and validation."""

import pytest

from payguard.validation.phone import PhoneValidator, extract_phone, normalize_phone, provider_for

pytestmark = [pytest.mark.unit, pytest.mark.validation]


class TestNormalizePhone:
    """Test canonicalization of the accepted phone formats."""

    @pytest.mark.parametrize("raw", [
        "0712345678",
        "712345678",
        "254712345678",
        "+254712345678",
        "+254 712 345 678",
        "0712-345-678",
    ])
    def test_equivalent_forms(self, raw):
        assert normalize_phone(raw) == "254712345678"

    def test_new_prefix_range(self):
        assert normalize_phone("0110123456") == "254110123456"

    def test_empty(self):
        assert normalize_phone("") == ""
        assert normalize_phone(None) == ""
        assert normalize_phone("abc") == ""

    def test_unrecognized_returns_digits(self):
        assert normalize_phone("+1 (555) 010-9999") == "15550109999"

    @pytest.mark.parametrize("raw", [
        "0712345678",
        "712345678",
        "+254 712 345 678",
        "0110123456",
        "+1 (555) 010-9999",
        "0722",
        "",
    ])
    def test_normalization_is_idempotent(self, raw):
        once = normalize_phone(raw)
        assert normalize_phone(once) == once


class TestExtractPhone:
    """Test finding phone numbers inside message text."""

    def test_local_form(self):
        assert extract_phone("from John 0712345678 on 01/01") == "0712345678"

    def test_international_form(self):
        assert extract_phone("sent to +254722918264.") == "+254722918264"

    def test_no_phone(self):
        assert extract_phone("KES 5,000 received") is None

    def test_longer_digit_runs_ignored(self):
        assert extract_phone("account 07123456789012") is None


class TestProvider:
    """Test provider lookup by network prefix."""

    @pytest.mark.parametrize("phone,provider", [
        ("254712345678", "M-PESA"),
        ("254110123456", "M-PESA"),
        ("254733123456", "Airtel"),
        ("254771234560", "Telkom"),
        ("254763123456", "Equitel"),
        ("254760123456", "Unknown"),
    ])
    def test_prefixes(self, phone, provider):
        assert provider_for(phone) == provider


class TestPhoneValidator:
    """Test phone validation results."""

    @pytest.fixture
    def validator(self, config):
        return PhoneValidator(config)

    def test_valid_phone(self, validator):
        result = validator.validate("0722918264")
        assert result.valid
        assert result.phone == "254722918264"
        assert result.provider == "M-PESA"
        assert result.warnings == []

    def test_empty_phone(self, validator):
        result = validator.validate("  ")
        assert not result.valid
        assert result.error == "Phone number is empty or invalid"

    def test_wrong_length(self, validator):
        result = validator.validate("07123")
        assert not result.valid
        assert result.error == "Invalid phone length: 5 digits (expected 12)"

    def test_foreign_number(self, validator):
        result = validator.validate("+44 20 7946 0958")
        assert not result.valid
        assert result.error == "Not a Kenya phone number (must start with 254)"

    def test_unknown_provider_warning(self, validator):
        result = validator.validate("0760918273")
        assert result.valid
        assert result.provider == "Unknown"
        assert result.warnings == ["Unknown provider for number: 254760918273"]

    def test_sequential_digits_warning(self, validator):
        result = validator.validate("0712345678")
        assert result.valid
        assert "Suspicious: Sequential digits in phone number" in result.warnings

    def test_repeated_digits_warning(self, validator):
        result = validator.validate("0722222221")
        assert result.valid
        assert "Suspicious: Repeated digits in phone number" in result.warnings
