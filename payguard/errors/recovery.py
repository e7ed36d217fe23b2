"""Recovery strategies and user prompts for classified errors."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from payguard.errors.types import AppError, ErrorType, Severity

MAX_SECONDARY_ACTIONS = 2


class RecoveryAction(str, Enum):
    RETRY = "RETRY"
    SKIP = "SKIP"
    MANUAL_REVIEW = "MANUAL_REVIEW"
    NOTIFY_USER = "NOTIFY_USER"
    OPEN_SETTINGS = "OPEN_SETTINGS"
    REQUEST_PERMISSION = "REQUEST_PERMISSION"
    CLEAR_CACHE = "CLEAR_CACHE"
    RESET_STATE = "RESET_STATE"
    RELOAD = "RELOAD"
    CONTACT_SUPPORT = "CONTACT_SUPPORT"
    DISMISS = "DISMISS"


ACTION_LABELS: Dict[RecoveryAction, str] = {
    RecoveryAction.RETRY: "Try Again",
    RecoveryAction.SKIP: "Skip",
    RecoveryAction.MANUAL_REVIEW: "Review",
    RecoveryAction.NOTIFY_USER: "OK",
    RecoveryAction.OPEN_SETTINGS: "Open Settings",
    RecoveryAction.REQUEST_PERMISSION: "Grant Permission",
    RecoveryAction.CLEAR_CACHE: "Clear Cache",
    RecoveryAction.RESET_STATE: "Reset App Data",
    RecoveryAction.RELOAD: "Restart App",
    RecoveryAction.CONTACT_SUPPORT: "Contact Support",
    RecoveryAction.DISMISS: "Dismiss",
}


def action_label(action: RecoveryAction) -> str:
    return ACTION_LABELS.get(action, "Continue")


@dataclass(frozen=True)
class RecoveryStrategy:
    """What to do about a classified error.

    Attributes:
        primary_action: The recommended action
        secondary_actions: Up to two alternatives
        auto_retry: Whether the retry executor may retry without asking
        retry_delay_ms: Suggested wait before a manual retry (0 when not applicable)
        description: Short human-readable explanation
    """

    primary_action: RecoveryAction
    secondary_actions: tuple = ()
    auto_retry: bool = False
    retry_delay_ms: int = 0
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "primary_action": self.primary_action.value,
            "secondary_actions": [a.value for a in self.secondary_actions],
            "auto_retry": self.auto_retry,
            "retry_delay_ms": self.retry_delay_ms,
            "description": self.description,
        }


def _strategy(primary, secondary=(), auto_retry=False, retry_delay_ms=0, description=""):
    return RecoveryStrategy(
        primary_action=primary,
        secondary_actions=tuple(secondary)[:MAX_SECONDARY_ACTIONS],
        auto_retry=auto_retry,
        retry_delay_ms=retry_delay_ms,
        description=description,
    )


_NOTIFY = _strategy(
    RecoveryAction.NOTIFY_USER, [RecoveryAction.DISMISS],
    description="User intervention required",
)
_SKIP = _strategy(
    RecoveryAction.SKIP,
    description="Message already processed, skipping",
)

RECOVERY_STRATEGIES: Dict[ErrorType, RecoveryStrategy] = {
    ErrorType.INVALID_FORMAT: _NOTIFY,
    ErrorType.INVALID_AMOUNT: _NOTIFY,
    ErrorType.INVALID_PHONE: _NOTIFY,
    ErrorType.MISSING_DATA: _NOTIFY,
    ErrorType.SUSPICIOUS_PATTERN: _strategy(
        RecoveryAction.MANUAL_REVIEW, [RecoveryAction.DISMISS],
        description="Review manually before processing",
    ),
    ErrorType.DUPLICATE_MESSAGE: _SKIP,
    ErrorType.DUPLICATE_TRANSACTION: _SKIP,
    ErrorType.CONFLICT_DETECTED: _strategy(
        RecoveryAction.MANUAL_REVIEW, [RecoveryAction.SKIP],
        description="Payment matches an existing record, review before recording",
    ),
    ErrorType.DATABASE_ERROR: _strategy(
        RecoveryAction.RETRY, [RecoveryAction.CLEAR_CACHE, RecoveryAction.CONTACT_SUPPORT],
        auto_retry=True, retry_delay_ms=1000,
        description="Automatic retry with backoff",
    ),
    ErrorType.DATABASE_LOCKED: _strategy(
        RecoveryAction.RETRY,
        auto_retry=True, retry_delay_ms=2000,
        description="Database is busy, retrying...",
    ),
    ErrorType.STORAGE_FAILED: _strategy(
        RecoveryAction.RETRY, [RecoveryAction.CLEAR_CACHE],
        auto_retry=True, retry_delay_ms=1000,
        description="Automatic retry with backoff",
    ),
    ErrorType.STORAGE_FULL: _strategy(
        RecoveryAction.CLEAR_CACHE, [RecoveryAction.OPEN_SETTINGS],
        description="Free up device storage to continue",
    ),
    ErrorType.SYNC_FAILED: _strategy(
        RecoveryAction.RETRY, [RecoveryAction.DISMISS],
        auto_retry=True, retry_delay_ms=3000,
        description="Will retry sync with backoff",
    ),
    ErrorType.DATA_CORRUPT: _strategy(
        RecoveryAction.RESET_STATE, [RecoveryAction.CONTACT_SUPPORT],
        description="Reset local data to recover (local data will be lost)",
    ),
    ErrorType.UNTRUSTED_SENDER: _strategy(
        RecoveryAction.MANUAL_REVIEW, [RecoveryAction.DISMISS],
        description="Sender not recognised, review manually",
    ),
    ErrorType.FAILED_VALIDATION: _strategy(
        RecoveryAction.MANUAL_REVIEW, [RecoveryAction.DISMISS],
        description="Validation failed, review manually",
    ),
    ErrorType.TIMEOUT: _strategy(
        RecoveryAction.RETRY, [RecoveryAction.RELOAD],
        auto_retry=True, retry_delay_ms=3000,
        description="Retrying with exponential backoff...",
    ),
    ErrorType.NETWORK_ERROR: _strategy(
        RecoveryAction.RETRY, [RecoveryAction.CLEAR_CACHE],
        auto_retry=True, retry_delay_ms=5000,
        description="Waiting for network connection...",
    ),
    ErrorType.PERMISSION_DENIED: _strategy(
        RecoveryAction.OPEN_SETTINGS, [RecoveryAction.REQUEST_PERMISSION, RecoveryAction.DISMISS],
        description="Grant required permissions in Settings",
    ),
    ErrorType.UNKNOWN: _strategy(
        RecoveryAction.CONTACT_SUPPORT, [RecoveryAction.RETRY, RecoveryAction.RELOAD],
        description="Unknown error, needs investigation",
    ),
}


class PromptMode(str, Enum):
    SILENT = "silent"
    PROMPT = "prompt"
    BLOCKING = "blocking"


@dataclass
class UserPrompt:
    """How a classified error should be surfaced to the user."""

    mode: PromptMode
    title: str
    message: str
    primary_label: Optional[str] = None
    secondary_labels: List[str] = field(default_factory=list)

    @property
    def blocking(self) -> bool:
        return self.mode == PromptMode.BLOCKING

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "title": self.title,
            "message": self.message,
            "primary_label": self.primary_label,
            "secondary_labels": list(self.secondary_labels),
        }


SEVERITY_MODES: Dict[Severity, PromptMode] = {
    Severity.LOW: PromptMode.SILENT,
    Severity.MEDIUM: PromptMode.PROMPT,
    Severity.HIGH: PromptMode.PROMPT,
    Severity.CRITICAL: PromptMode.BLOCKING,
}


class RecoveryStrategyResolver:
    """Look up recovery strategies and build user prompts."""

    def __init__(self, strategies: Optional[Dict[ErrorType, RecoveryStrategy]] = None):
        self.strategies = dict(RECOVERY_STRATEGIES)
        if strategies:
            self.strategies.update(strategies)

    def resolve(self, error: AppError) -> RecoveryStrategy:
        return self.strategies.get(error.type, self.strategies[ErrorType.UNKNOWN])

    def prompt_for(self, error: AppError) -> UserPrompt:
        """Severity decides presentation: LOW is silent, CRITICAL blocks."""
        mode = SEVERITY_MODES[error.severity]
        if mode == PromptMode.SILENT:
            return UserPrompt(mode=mode, title="", message=error.user_message)

        strategy = self.resolve(error)
        title = "Action required" if mode == PromptMode.BLOCKING else "Something went wrong"
        return UserPrompt(
            mode=mode,
            title=title,
            message=error.user_message,
            primary_label=action_label(strategy.primary_action),
            secondary_labels=[action_label(a) for a in strategy.secondary_actions],
        )
