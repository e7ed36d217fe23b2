"""Error taxonomy shared by the validation, dedup and retry layers.

Every fault that crosses a caller-visible boundary is an ``AppError``.  Its
severity and retriability come from ``ERROR_PROFILES`` so that the same
``ErrorType`` always behaves the same way, whoever raised it.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class ErrorType(str, Enum):
    """Closed set of error categories."""

    # Parse / format
    INVALID_FORMAT = "INVALID_FORMAT"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_PHONE = "INVALID_PHONE"
    MISSING_DATA = "MISSING_DATA"

    # Data-quality outcomes
    SUSPICIOUS_PATTERN = "SUSPICIOUS_PATTERN"
    DUPLICATE_MESSAGE = "DUPLICATE_MESSAGE"
    DUPLICATE_TRANSACTION = "DUPLICATE_TRANSACTION"
    CONFLICT_DETECTED = "CONFLICT_DETECTED"

    # Persistence
    DATABASE_ERROR = "DATABASE_ERROR"
    DATABASE_LOCKED = "DATABASE_LOCKED"
    STORAGE_FAILED = "STORAGE_FAILED"
    STORAGE_FULL = "STORAGE_FULL"
    SYNC_FAILED = "SYNC_FAILED"
    DATA_CORRUPT = "DATA_CORRUPT"

    # Trust
    UNTRUSTED_SENDER = "UNTRUSTED_SENDER"
    FAILED_VALIDATION = "FAILED_VALIDATION"

    # Transient / system
    TIMEOUT = "TIMEOUT"
    NETWORK_ERROR = "NETWORK_ERROR"
    PERMISSION_DENIED = "PERMISSION_DENIED"

    UNKNOWN = "UNKNOWN"


class Severity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


@dataclass(frozen=True)
class ErrorProfile:
    """Static behaviour of one ``ErrorType``."""

    severity: Severity
    retriable: bool
    user_message: str


ERROR_PROFILES: Dict[ErrorType, ErrorProfile] = {
    ErrorType.INVALID_FORMAT: ErrorProfile(
        Severity.MEDIUM, False, "Could not parse payment message. Please check format."
    ),
    ErrorType.INVALID_AMOUNT: ErrorProfile(
        Severity.MEDIUM, False, "Amount is invalid or out of acceptable range."
    ),
    ErrorType.INVALID_PHONE: ErrorProfile(
        Severity.MEDIUM, False, "Phone number is invalid or not recognized."
    ),
    ErrorType.MISSING_DATA: ErrorProfile(
        Severity.MEDIUM, False, "Payment message is incomplete (missing required fields)."
    ),
    ErrorType.SUSPICIOUS_PATTERN: ErrorProfile(
        Severity.LOW, False, "Message pattern looks suspicious. Check for typos."
    ),
    ErrorType.DUPLICATE_MESSAGE: ErrorProfile(
        Severity.LOW, False, "This message was already processed."
    ),
    ErrorType.DUPLICATE_TRANSACTION: ErrorProfile(
        Severity.LOW, False, "Similar transaction already recorded."
    ),
    ErrorType.CONFLICT_DETECTED: ErrorProfile(
        Severity.LOW, False, "Payment conflicts with existing record."
    ),
    ErrorType.DATABASE_ERROR: ErrorProfile(
        Severity.HIGH, True, "Database error. Will retry automatically."
    ),
    ErrorType.DATABASE_LOCKED: ErrorProfile(
        Severity.MEDIUM, True, "Database is busy. Retrying..."
    ),
    ErrorType.STORAGE_FAILED: ErrorProfile(
        Severity.HIGH, True, "Failed to store transaction. Retrying..."
    ),
    ErrorType.STORAGE_FULL: ErrorProfile(
        Severity.HIGH, False, "Device storage is full. Free up space to continue."
    ),
    ErrorType.SYNC_FAILED: ErrorProfile(
        Severity.MEDIUM, True, "Server sync failed. Will retry when online."
    ),
    ErrorType.DATA_CORRUPT: ErrorProfile(
        Severity.CRITICAL, False, "Stored data is damaged and needs to be reset."
    ),
    ErrorType.UNTRUSTED_SENDER: ErrorProfile(
        Severity.MEDIUM, False, "Message from unknown sender. Not recorded."
    ),
    ErrorType.FAILED_VALIDATION: ErrorProfile(
        Severity.MEDIUM, False, "Validation failed. Transaction not recorded."
    ),
    ErrorType.TIMEOUT: ErrorProfile(
        Severity.MEDIUM, True, "Operation timed out. Will retry."
    ),
    ErrorType.NETWORK_ERROR: ErrorProfile(
        Severity.MEDIUM, True, "Network error. Will retry when connected."
    ),
    ErrorType.PERMISSION_DENIED: ErrorProfile(
        Severity.CRITICAL, False, "A required permission was denied."
    ),
    ErrorType.UNKNOWN: ErrorProfile(
        Severity.HIGH, False, "Unexpected error occurred. Please try again."
    ),
}


def get_user_friendly_message(error_type: ErrorType) -> str:
    profile = ERROR_PROFILES.get(error_type)
    return profile.user_message if profile else "An error occurred"


class AppError(Exception):
    """A classified fault.

    Attributes:
        type: Category from the closed ``ErrorType`` taxonomy
        message: Technical description (kept for logs)
        severity: Defaults to the type's profile severity
        retriable: Defaults to the type's profile retriability
        context: Free-form details (phone, operation name, ...)
        timestamp: Creation time in epoch milliseconds
        original: The wrapped exception, if any
    """

    def __init__(
        self,
        type: ErrorType,
        message: str = "",
        severity: Optional[Severity] = None,
        retriable: Optional[bool] = None,
        context: Optional[Dict[str, Any]] = None,
        original: Optional[BaseException] = None,
        timestamp: Optional[int] = None,
    ):
        profile = ERROR_PROFILES[type]
        self.type = type
        self.message = message or profile.user_message
        self.severity = severity if severity is not None else profile.severity
        self.retriable = retriable if retriable is not None else profile.retriable
        self.context = dict(context or {})
        self.original = original
        self.timestamp = timestamp if timestamp is not None else int(time.time() * 1000)
        super().__init__(self.message)

    @property
    def user_message(self) -> str:
        return get_user_friendly_message(self.type)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "message": self.message,
            "severity": self.severity.value,
            "retriable": self.retriable,
            "context": self.context,
            "timestamp": self.timestamp,
            "user_message": self.user_message,
            "original": type(self.original).__name__ if self.original else None,
        }

    def __repr__(self) -> str:
        return f"AppError(type={self.type.value}, severity={self.severity.value}, message={self.message!r})"


class RetryTimeoutError(AppError):
    """Raised when a retry run exceeds its overall time budget."""

    def __init__(self, operation: str, timeout_ms: int, original: Optional[BaseException] = None):
        super().__init__(
            ErrorType.TIMEOUT,
            f"Operation '{operation}' timed out after {timeout_ms}ms",
            retriable=False,
            context={"operation": operation, "timeout_ms": timeout_ms},
            original=original,
        )
