"""Data classes for validation results."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ValidationFlag(str, Enum):
    """Categorical tags attached to a valid-but-questionable transaction."""

    UNUSUAL_AMOUNT = "unusual_amount"
    SUSPICIOUS_PHONE = "suspicious_phone"
    UNKNOWN_PROVIDER = "unknown_provider"
    LOW_AUTHENTICITY = "low_authenticity"


@dataclass
class AmountValidationResult:
    """Outcome of extracting and range-checking an amount.

    Attributes:
        valid: Amount was found and lies within the configured bounds.
        amount: Parsed amount, also set for out-of-range values.
        error: Reason the amount was rejected.
        warnings: Non-fatal observations (high amount, digit patterns).
        is_unusual: True when any warning was raised.
    """

    valid: bool
    amount: Optional[float] = None
    error: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    is_unusual: bool = False


@dataclass
class PhoneValidationResult:
    """Outcome of normalizing and checking a phone number."""

    valid: bool
    phone: Optional[str] = None
    error: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    provider: Optional[str] = None


@dataclass
class AuthenticityIndicators:
    has_valid_sender: bool = False
    has_valid_keywords: bool = False
    has_valid_structure: bool = False
    amount_valid: bool = False
    phone_valid: bool = False


@dataclass
class AuthenticityResult:
    """Heuristic confidence that a text is a genuine payment notification."""

    authentic: bool
    score: int
    indicators: AuthenticityIndicators
    issues: List[str] = field(default_factory=list)


@dataclass
class ValidationResult:
    """Combined outcome of amount, phone and authenticity checks.

    ``valid`` only depends on amount and phone; everything else is carried
    as warnings and ``flags`` so flagged transactions can still be stored.
    """

    valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    flags: List[ValidationFlag] = field(default_factory=list)
    amount: Optional[float] = None
    phone: Optional[str] = None
    provider: Optional[str] = None
    authenticity: Optional[AuthenticityResult] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["flags"] = [f.value for f in self.flags]
        return data
