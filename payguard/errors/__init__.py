"""Error taxonomy, classification and recovery policy."""

from payguard.errors.types import (
    ERROR_PROFILES,
    AppError,
    ErrorType,
    RetryTimeoutError,
    Severity,
    get_user_friendly_message,
)
from payguard.errors.classifier import ErrorClassifier, classify_error
from payguard.errors.recovery import (
    PromptMode,
    RecoveryAction,
    RecoveryStrategy,
    RecoveryStrategyResolver,
    UserPrompt,
    action_label,
)
from payguard.errors.error_log import ErrorLog

__all__ = [
    "ERROR_PROFILES",
    "AppError",
    "ErrorType",
    "RetryTimeoutError",
    "Severity",
    "get_user_friendly_message",
    "ErrorClassifier",
    "classify_error",
    "PromptMode",
    "RecoveryAction",
    "RecoveryStrategy",
    "RecoveryStrategyResolver",
    "UserPrompt",
    "action_label",
    "ErrorLog",
]
