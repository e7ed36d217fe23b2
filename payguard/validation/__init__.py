"""Validation of inbound payment notification text.

Leaf validators (amount, phone) feed the authenticity scorer, and the
``TransactionValidator`` composes all three into one result.
"""

from payguard.validation.result import (
    AmountValidationResult,
    AuthenticityIndicators,
    AuthenticityResult,
    PhoneValidationResult,
    ValidationFlag,
    ValidationResult,
)
from payguard.validation.amount import AmountValidator
from payguard.validation.phone import PhoneValidator, extract_phone, normalize_phone, provider_for
from payguard.validation.authenticity import AuthenticityScorer
from payguard.validation.transaction import TransactionValidator

__all__ = [
    "AmountValidationResult",
    "AuthenticityIndicators",
    "AuthenticityResult",
    "PhoneValidationResult",
    "ValidationFlag",
    "ValidationResult",
    "AmountValidator",
    "PhoneValidator",
    "extract_phone",
    "normalize_phone",
    "provider_for",
    "AuthenticityScorer",
    "TransactionValidator",
]
