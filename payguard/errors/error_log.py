"""Bounded in-memory log of classified errors."""

from __future__ import annotations

from collections import deque
from typing import Any, Deque, Dict, List, Optional

from payguard.errors.types import AppError, ErrorType, Severity
from payguard.utils.logger import log_error, log_warning


class ErrorLog:
    """Keeps the most recent ``max_size`` errors for diagnostics."""

    def __init__(self, max_size: int = 1000):
        self.max_size = max_size
        self._errors: Deque[AppError] = deque(maxlen=max_size)

    def __len__(self) -> int:
        return len(self._errors)

    @property
    def errors(self) -> List[AppError]:
        return list(self._errors)

    def add(self, error: AppError) -> None:
        self._errors.append(error)
        log = log_error if error.severity in (Severity.HIGH, Severity.CRITICAL) else log_warning
        log(
            "Error recorded",
            error_type=error.type.value,
            severity=error.severity.value,
            retriable=error.retriable,
            error=error.message,
        )

    def by_type(self, error_type: ErrorType) -> List[AppError]:
        return [e for e in self._errors if e.type == error_type]

    def by_time_range(self, start: int, end: int) -> List[AppError]:
        """Errors with ``start <= timestamp <= end`` (epoch milliseconds)."""
        return [e for e in self._errors if start <= e.timestamp <= end]

    def latest(self) -> Optional[AppError]:
        return self._errors[-1] if self._errors else None

    def summary(self) -> Dict[str, Any]:
        by_severity = {severity.value: 0 for severity in Severity}
        by_type: Dict[str, int] = {}
        for error in self._errors:
            by_severity[error.severity.value] += 1
            by_type[error.type.value] = by_type.get(error.type.value, 0) + 1
        return {"total": len(self._errors), "by_severity": by_severity, "by_type": by_type}

    def clear(self) -> None:
        self._errors.clear()
