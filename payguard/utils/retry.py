"""Retry with exponential backoff for transaction and startup operations.

Any zero-argument callable (sync or async) can be wrapped.  Failures are
classified through ``ErrorClassifier`` and retried only when the classified
error is retriable and its recovery strategy allows automatic retries.  The
whole run is bounded by an overall timeout that takes precedence over the
attempt count.
"""

import asyncio
import inspect
import random
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Deque, Dict, Optional

from payguard.config import Config, get_config
from payguard.errors.classifier import ErrorClassifier
from payguard.errors.error_log import ErrorLog
from payguard.errors.recovery import RecoveryStrategyResolver
from payguard.errors.types import AppError, RetryTimeoutError
from payguard.utils.logger import log_debug, log_error, log_info, log_retry_attempt


MAX_STATE_CHANGES = 100


class RetryState(Enum):
    """Retry executor states."""

    IDLE = "idle"
    ATTEMPTING = "attempting"
    WAITING = "waiting"  # Backing off before the next attempt
    SUCCEEDED = "succeeded"
    FAILED_PERMANENT = "failed_permanent"
    TIMED_OUT = "timed_out"


@dataclass
class RetryContext:
    """Passed to ``on_retry`` before each backoff wait."""

    attempt: int
    next_delay_ms: int
    total_elapsed_ms: float
    error: Optional[AppError] = None


@dataclass
class RetryStats:
    """Retry executor statistics."""

    total_runs: int = 0
    successful_runs: int = 0
    failed_runs: int = 0
    timed_out_runs: int = 0
    total_attempts: int = 0
    total_retries: int = 0
    state_changes: Deque[str] = field(default_factory=lambda: deque(maxlen=MAX_STATE_CHANGES))
    last_failure_time: Optional[datetime] = None
    last_success_time: Optional[datetime] = None

    @property
    def success_rate(self) -> float:
        finished = self.successful_runs + self.failed_runs + self.timed_out_runs
        return (self.successful_runs / finished * 100) if finished > 0 else 0.0


class RetryConfig:
    """Retry executor configuration."""

    def __init__(
        self,
        max_attempts: int = 3,
        initial_delay_ms: int = 1000,
        max_delay_ms: int = 30000,
        backoff_multiplier: float = 2.0,
        jitter: float = 0.1,
        timeout_ms: Optional[int] = 60000,
        name: str = "retry",
    ):
        self.max_attempts = max_attempts
        self.initial_delay_ms = initial_delay_ms
        self.max_delay_ms = max_delay_ms
        self.backoff_multiplier = backoff_multiplier
        self.jitter = jitter
        self.timeout_ms = timeout_ms
        self.name = name

    @classmethod
    def from_config(cls, config: Optional[Config] = None, name: str = "retry", **overrides) -> "RetryConfig":
        config = config or get_config()
        values = dict(
            max_attempts=config.retry_max_attempts,
            initial_delay_ms=config.retry_initial_delay_ms,
            max_delay_ms=config.retry_max_delay_ms,
            backoff_multiplier=config.retry_backoff_multiplier,
            jitter=config.retry_jitter,
            timeout_ms=config.retry_timeout_ms,
        )
        values.update(overrides)
        return cls(name=name, **values)


class RetryExecutor:
    """Run operations with classified, exponentially backed-off retries.

    ``sleep``, ``clock`` and ``rng`` are injectable so tests can run without
    real waits.  An executor tracks one run at a time; use separate
    executors for concurrent runs.
    """

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        classifier: Optional[ErrorClassifier] = None,
        resolver: Optional[RecoveryStrategyResolver] = None,
        error_log: Optional[ErrorLog] = None,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
        clock: Optional[Callable[[], float]] = None,
        rng: Optional[random.Random] = None,
    ):
        self.config = config or RetryConfig.from_config()
        self.classifier = classifier or ErrorClassifier()
        self.resolver = resolver or RecoveryStrategyResolver()
        self.error_log = error_log
        self._sleep = sleep or asyncio.sleep
        self._clock = clock or time.monotonic
        self._rng = rng or random.Random()
        self.state = RetryState.IDLE
        self.stats = RetryStats()

    def compute_delay(self, attempt: int) -> int:
        """Backoff before retrying after ``attempt`` (1-based), in milliseconds."""
        cfg = self.config
        base = min(cfg.initial_delay_ms * cfg.backoff_multiplier ** (attempt - 1), cfg.max_delay_ms)
        if cfg.jitter:
            base *= 1 + self._rng.uniform(-cfg.jitter, cfg.jitter)
        return max(0, int(round(base)))

    async def run(
        self,
        operation: Callable[[], Any],
        name: Optional[str] = None,
        on_retry: Optional[Callable[[RetryContext], Any]] = None,
    ) -> Any:
        """Execute ``operation`` until it succeeds or retries are exhausted.

        Raises:
            AppError: the classified error of the last failed attempt
            RetryTimeoutError: when the overall timeout fires first
        """
        name = name or self.config.name
        self.stats.total_runs += 1
        if self.state != RetryState.IDLE:
            self._transition(RetryState.IDLE, name)
        started = self._clock()

        attempts = self._run_attempts(operation, name, on_retry, started)
        timeout_ms = self.config.timeout_ms
        if not timeout_ms:
            return await attempts

        try:
            return await asyncio.wait_for(attempts, timeout=timeout_ms / 1000)
        except asyncio.TimeoutError as exc:
            self._transition(RetryState.TIMED_OUT, name)
            self.stats.timed_out_runs += 1
            self.stats.last_failure_time = datetime.now()
            error = RetryTimeoutError(name, timeout_ms, original=exc)
            log_error(
                "Retry run timed out",
                operation=name,
                timeout_ms=timeout_ms,
                elapsed_ms=self._elapsed_ms(started),
            )
            if self.error_log is not None:
                self.error_log.add(error)
            raise error from exc

    async def _run_attempts(
        self,
        operation: Callable[[], Any],
        name: str,
        on_retry: Optional[Callable[[RetryContext], Any]],
        started: float,
    ) -> Any:
        attempt = 0
        while True:
            attempt += 1
            self._transition(RetryState.ATTEMPTING, name)
            self.stats.total_attempts += 1

            try:
                result = operation()
                if inspect.isawaitable(result):
                    result = await result
            except Exception as exc:
                error = self.classifier.classify(exc, {"operation": name, "attempt": attempt})
                strategy = self.resolver.resolve(error)

                if not (error.retriable and strategy.auto_retry and attempt < self.config.max_attempts):
                    self._fail(error, name, attempt)
                    if error is exc:
                        raise
                    raise error from exc

                delay_ms = self.compute_delay(attempt)
                context = RetryContext(
                    attempt=attempt,
                    next_delay_ms=delay_ms,
                    total_elapsed_ms=self._elapsed_ms(started),
                    error=error,
                )
                log_retry_attempt(
                    name,
                    attempt,
                    delay_ms,
                    max_attempts=self.config.max_attempts,
                    error_type=error.type.value,
                    error=error.message,
                )
                if on_retry is not None:
                    callback_result = on_retry(context)
                    if inspect.isawaitable(callback_result):
                        await callback_result

                self.stats.total_retries += 1
                self._transition(RetryState.WAITING, name)
                await self._sleep(delay_ms / 1000)
            else:
                self._transition(RetryState.SUCCEEDED, name)
                self.stats.successful_runs += 1
                self.stats.last_success_time = datetime.now()
                if attempt > 1:
                    log_info("Operation succeeded after retry", operation=name, attempts=attempt)
                return result

    def _fail(self, error: AppError, name: str, attempt: int) -> None:
        self._transition(RetryState.FAILED_PERMANENT, name)
        self.stats.failed_runs += 1
        self.stats.last_failure_time = datetime.now()
        log_error(
            "Operation failed permanently",
            operation=name,
            attempts=attempt,
            error_type=error.type.value,
            retriable=error.retriable,
            error=error.message,
        )
        if self.error_log is not None:
            self.error_log.add(error)

    def _transition(self, new_state: RetryState, name: str) -> None:
        old_state = self.state
        self.state = new_state
        self.stats.state_changes.append(f"{old_state.value} -> {new_state.value}")
        log_debug("Retry state changed", operation=name, old=old_state.value, new=new_state.value)

    def _elapsed_ms(self, started: float) -> float:
        return round((self._clock() - started) * 1000, 2)

    def get_stats(self) -> Dict[str, Any]:
        """Get retry executor statistics."""
        return {
            "name": self.config.name,
            "state": self.state.value,
            "stats": {
                "total_runs": self.stats.total_runs,
                "successful_runs": self.stats.successful_runs,
                "failed_runs": self.stats.failed_runs,
                "timed_out_runs": self.stats.timed_out_runs,
                "total_attempts": self.stats.total_attempts,
                "total_retries": self.stats.total_retries,
                "success_rate_percent": round(self.stats.success_rate, 2),
                "last_failure_time": (
                    self.stats.last_failure_time.isoformat()
                    if self.stats.last_failure_time
                    else None
                ),
                "last_success_time": (
                    self.stats.last_success_time.isoformat()
                    if self.stats.last_success_time
                    else None
                ),
                "state_changes": list(self.stats.state_changes)[-10:],  # Last 10 changes
            },
            "config": {
                "max_attempts": self.config.max_attempts,
                "initial_delay_ms": self.config.initial_delay_ms,
                "max_delay_ms": self.config.max_delay_ms,
                "backoff_multiplier": self.config.backoff_multiplier,
                "jitter": self.config.jitter,
                "timeout_ms": self.config.timeout_ms,
            },
        }


# Convenience functions for common use cases
def create_transaction_retry_executor(config: Optional[Config] = None, **kwargs) -> RetryExecutor:
    """Create a retry executor for persisting transactions."""
    return RetryExecutor(RetryConfig.from_config(config, name="transaction"), **kwargs)


def create_startup_retry_executor(config: Optional[Config] = None, **kwargs) -> RetryExecutor:
    """Create a retry executor for startup work (database init, migrations)."""
    retry_config = RetryConfig.from_config(config, name="startup", max_attempts=5, timeout_ms=60000)
    return RetryExecutor(retry_config, **kwargs)
