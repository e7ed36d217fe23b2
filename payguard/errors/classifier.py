"""Map arbitrary exceptions onto the ``ErrorType`` taxonomy."""

from __future__ import annotations

import asyncio
import re
from typing import Any, Dict, List, Optional, Pattern, Tuple

from payguard.errors.types import AppError, ErrorType
from payguard.utils.logger import log_debug

# Explicit caller hints win over anything inferred from the exception.
CONTEXT_TYPES: Dict[str, ErrorType] = {
    "duplicate": ErrorType.DUPLICATE_MESSAGE,
    "duplicate_transaction": ErrorType.DUPLICATE_TRANSACTION,
    "conflict": ErrorType.CONFLICT_DETECTED,
    "suspicious": ErrorType.SUSPICIOUS_PATTERN,
    "validation": ErrorType.FAILED_VALIDATION,
    "untrusted_sender": ErrorType.UNTRUSTED_SENDER,
    "invalid_amount": ErrorType.INVALID_AMOUNT,
    "invalid_phone": ErrorType.INVALID_PHONE,
    "missing_data": ErrorType.MISSING_DATA,
}

EXCEPTION_TYPES: Tuple[Tuple[type, ErrorType], ...] = (
    (TimeoutError, ErrorType.TIMEOUT),
    (asyncio.TimeoutError, ErrorType.TIMEOUT),
    (PermissionError, ErrorType.PERMISSION_DENIED),
    (ConnectionError, ErrorType.NETWORK_ERROR),
)

# Order matters: more specific patterns first.
KEYWORD_PATTERNS: List[Tuple[Pattern[str], ErrorType]] = [
    (re.compile(r"TIME[SD]? ?OUT"), ErrorType.TIMEOUT),
    (re.compile(r"NETWORK|FETCH|CONNECTION|NO INTERNET|OFFLINE"), ErrorType.NETWORK_ERROR),
    (re.compile(r"\bLOCKED\b|\bBUSY\b"), ErrorType.DATABASE_LOCKED),
    (re.compile(r"CORRUPT|MALFORMED"), ErrorType.DATA_CORRUPT),
    (re.compile(r"DATABASE|SQLITE|QUERY"), ErrorType.DATABASE_ERROR),
    (re.compile(r"STORAGE FULL|DISK FULL|NO SPACE"), ErrorType.STORAGE_FULL),
    (re.compile(r"STORAGE|WRITE FAILED|SAVE FAILED"), ErrorType.STORAGE_FAILED),
    (re.compile(r"\bSYNC"), ErrorType.SYNC_FAILED),
    (re.compile(r"PERMISSION|ACCESS DENIED"), ErrorType.PERMISSION_DENIED),
    (re.compile(r"UNTRUSTED|UNKNOWN SENDER"), ErrorType.UNTRUSTED_SENDER),
    (re.compile(r"INVALID AMOUNT|AMOUNT TOO|NO AMOUNT"), ErrorType.INVALID_AMOUNT),
    (re.compile(r"INVALID PHONE|PHONE NUMBER"), ErrorType.INVALID_PHONE),
    (re.compile(r"MISSING|INCOMPLETE|REQUIRED FIELD"), ErrorType.MISSING_DATA),
    (re.compile(r"PARSE|INVALID|FORMAT"), ErrorType.INVALID_FORMAT),
]


class ErrorClassifier:
    """Turn any raised value into an ``AppError``.

    Resolution order:
      1. ``AppError`` instances pass through untouched
      2. ``context["type"]`` hint, an ``ErrorType`` or a context name
      3. exception class (timeouts, permissions, connections)
      4. keyword patterns over the upper-cased message
      5. ``UNKNOWN``
    """

    def classify(self, error: Any, context: Optional[Dict[str, Any]] = None) -> AppError:
        if isinstance(error, AppError):
            return error

        context = dict(context or {})
        hint = context.pop("type", None)
        message = context.pop("message", None) or self._message_of(error)
        original = error if isinstance(error, BaseException) else None

        if isinstance(hint, ErrorType):
            error_type = hint
        else:
            error_type = CONTEXT_TYPES.get(str(hint).lower()) if hint else None
        if error_type is None:
            error_type = self._by_exception(error)
        if error_type is None:
            error_type = self._by_keywords(message)

        log_debug(
            "Error classified",
            error_type=error_type.value,
            source=type(error).__name__,
            hint=hint.value if isinstance(hint, ErrorType) else hint,
        )
        return AppError(error_type, message, context=context, original=original)

    @staticmethod
    def _message_of(error: Any) -> str:
        if isinstance(error, BaseException):
            return str(error) or type(error).__name__
        return str(error)

    @staticmethod
    def _by_exception(error: Any) -> Optional[ErrorType]:
        for exc_class, error_type in EXCEPTION_TYPES:
            if isinstance(error, exc_class):
                return error_type
        return None

    @staticmethod
    def _by_keywords(message: str) -> ErrorType:
        upper = message.upper()
        for pattern, error_type in KEYWORD_PATTERNS:
            if pattern.search(upper):
                return error_type
        return ErrorType.UNKNOWN


_default_classifier = ErrorClassifier()


def classify_error(error: Any, context: Optional[Dict[str, Any]] = None) -> AppError:
    """Classify with the module-level classifier."""
    return _default_classifier.classify(error, context)
