"""Phone number normalization and validation."""

from __future__ import annotations

import re
from typing import List, Optional

from payguard.config import Config, get_config
from payguard.validation.patterns import (
    NATIONAL_NUMBER_LENGTH,
    PHONE_IN_TEXT,
    PROVIDER_PREFIXES,
    REPEATED_DIGITS,
    SEQUENTIAL_DIGITS,
    UNKNOWN_PROVIDER,
)
from payguard.validation.result import PhoneValidationResult

_RE_NON_DIGIT = re.compile(r"\D")


def normalize_phone(phone: Optional[str], country_code: str = "254") -> str:
    """Return the canonical ``<country code><national number>`` form.

    ``"0712345678"``, ``"712345678"``, ``"254712345678"`` and
    ``"+254 712 345 678"`` all become ``"254712345678"``.  Input that does
    not look like a number of the target region is returned as bare digits
    so it can still be compared, but it will fail validation.
    """
    if not phone:
        return ""
    digits = _RE_NON_DIGIT.sub("", str(phone))
    if not digits:
        return ""

    if digits.startswith(country_code) and len(digits) == len(country_code) + NATIONAL_NUMBER_LENGTH:
        return digits
    if digits.startswith("0") and len(digits) == NATIONAL_NUMBER_LENGTH + 1:
        return country_code + digits[1:]
    if len(digits) == NATIONAL_NUMBER_LENGTH and digits[0] in "17":
        return country_code + digits
    return digits


def extract_phone(text: str) -> Optional[str]:
    """Return the first phone-like token in ``text``, unnormalized."""
    if not text:
        return None
    match = PHONE_IN_TEXT.search(text)
    return match.group(0) if match else None


def provider_for(normalized: str, country_code: str = "254") -> str:
    """Map a normalized number to its mobile-money provider label."""
    prefix = normalized[len(country_code):len(country_code) + 3]
    for provider, prefixes in PROVIDER_PREFIXES.items():
        if prefix in prefixes:
            return provider
    return UNKNOWN_PROVIDER


class PhoneValidator:
    """Validate phone numbers against the configured region."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or get_config()

    def normalize(self, phone: Optional[str]) -> str:
        return normalize_phone(phone, self.config.country_code)

    def validate(self, phone: Optional[str]) -> PhoneValidationResult:
        country_code = self.config.country_code
        expected_length = len(country_code) + NATIONAL_NUMBER_LENGTH

        if not phone or not isinstance(phone, str) or not phone.strip():
            return PhoneValidationResult(valid=False, error="Phone number is empty or invalid")

        normalized = self.normalize(phone)
        if not normalized:
            return PhoneValidationResult(valid=False, error=f'Cannot normalize phone: "{phone}"')

        if len(normalized) != expected_length:
            return PhoneValidationResult(
                valid=False,
                phone=normalized,
                error=f"Invalid phone length: {len(normalized)} digits (expected {expected_length})",
            )

        if not normalized.startswith(country_code):
            return PhoneValidationResult(
                valid=False,
                phone=normalized,
                error=f"Not a Kenya phone number (must start with {country_code})",
            )

        warnings: List[str] = []
        provider = provider_for(normalized, country_code)
        if provider == UNKNOWN_PROVIDER:
            warnings.append(f"Unknown provider for number: {normalized}")

        subscriber = normalized[len(country_code):]
        if REPEATED_DIGITS.search(subscriber):
            warnings.append("Suspicious: Repeated digits in phone number")
        if SEQUENTIAL_DIGITS.search(subscriber):
            warnings.append("Suspicious: Sequential digits in phone number")

        return PhoneValidationResult(
            valid=True,
            phone=normalized,
            warnings=warnings,
            provider=provider,
        )
