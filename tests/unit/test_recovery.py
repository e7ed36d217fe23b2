"""Unit tests for recovery strategies and user prompts."""

import pytest

from payguard.errors import (
    AppError,
    ErrorType,
    PromptMode,
    RecoveryAction,
    RecoveryStrategy,
    RecoveryStrategyResolver,
    Severity,
    action_label,
)

pytestmark = [pytest.mark.unit, pytest.mark.errors]


@pytest.fixture
def resolver():
    return RecoveryStrategyResolver()


class TestRecoveryStrategies:
    """Test the static strategy table."""

    def test_every_type_resolves(self, resolver):
        for error_type in ErrorType:
            strategy = resolver.resolve(AppError(error_type))
            assert isinstance(strategy.primary_action, RecoveryAction)
            assert len(strategy.secondary_actions) <= 2
            assert strategy.description

    @pytest.mark.parametrize("error_type", [
        ErrorType.DATABASE_ERROR,
        ErrorType.DATABASE_LOCKED,
        ErrorType.STORAGE_FAILED,
        ErrorType.SYNC_FAILED,
        ErrorType.TIMEOUT,
        ErrorType.NETWORK_ERROR,
    ])
    def test_transient_faults_auto_retry(self, resolver, error_type):
        strategy = resolver.resolve(AppError(error_type))
        assert strategy.primary_action == RecoveryAction.RETRY
        assert strategy.auto_retry
        assert strategy.retry_delay_ms > 0

    @pytest.mark.parametrize("error_type", [ErrorType.DUPLICATE_MESSAGE, ErrorType.DUPLICATE_TRANSACTION])
    def test_duplicates_are_skipped(self, resolver, error_type):
        assert resolver.resolve(AppError(error_type)).primary_action == RecoveryAction.SKIP

    @pytest.mark.parametrize("error_type", [
        ErrorType.SUSPICIOUS_PATTERN,
        ErrorType.CONFLICT_DETECTED,
        ErrorType.UNTRUSTED_SENDER,
        ErrorType.FAILED_VALIDATION,
    ])
    def test_trust_issues_need_review(self, resolver, error_type):
        strategy = resolver.resolve(AppError(error_type))
        assert strategy.primary_action == RecoveryAction.MANUAL_REVIEW
        assert not strategy.auto_retry

    def test_parse_errors_notify_user(self, resolver):
        for error_type in (ErrorType.INVALID_FORMAT, ErrorType.INVALID_AMOUNT, ErrorType.INVALID_PHONE):
            assert resolver.resolve(AppError(error_type)).primary_action == RecoveryAction.NOTIFY_USER

    def test_special_cases(self, resolver):
        assert resolver.resolve(AppError(ErrorType.PERMISSION_DENIED)).primary_action == RecoveryAction.OPEN_SETTINGS
        assert resolver.resolve(AppError(ErrorType.DATA_CORRUPT)).primary_action == RecoveryAction.RESET_STATE
        assert resolver.resolve(AppError(ErrorType.STORAGE_FULL)).primary_action == RecoveryAction.CLEAR_CACHE
        assert resolver.resolve(AppError(ErrorType.UNKNOWN)).primary_action == RecoveryAction.CONTACT_SUPPORT

    def test_overrides(self):
        custom = RecoveryStrategy(RecoveryAction.DISMISS, description="ignore")
        resolver = RecoveryStrategyResolver({ErrorType.SYNC_FAILED: custom})
        assert resolver.resolve(AppError(ErrorType.SYNC_FAILED)) is custom
        assert resolver.resolve(AppError(ErrorType.TIMEOUT)).primary_action == RecoveryAction.RETRY


class TestUserPrompt:
    """Test severity-driven presentation."""

    def test_low_severity_is_silent(self, resolver):
        prompt = resolver.prompt_for(AppError(ErrorType.DUPLICATE_MESSAGE))
        assert prompt.mode == PromptMode.SILENT
        assert prompt.primary_label is None
        assert not prompt.blocking

    def test_medium_severity_prompts(self, resolver):
        prompt = resolver.prompt_for(AppError(ErrorType.NETWORK_ERROR))
        assert prompt.mode == PromptMode.PROMPT
        assert prompt.primary_label == "Try Again"
        assert prompt.secondary_labels == ["Clear Cache"]
        assert prompt.message == "Network error. Will retry when connected."

    def test_critical_severity_blocks(self, resolver):
        prompt = resolver.prompt_for(AppError(ErrorType.PERMISSION_DENIED))
        assert prompt.blocking
        assert prompt.primary_label == "Open Settings"
        assert prompt.secondary_labels == ["Grant Permission", "Dismiss"]

    def test_severity_override_changes_mode(self, resolver):
        error = AppError(ErrorType.DUPLICATE_MESSAGE, severity=Severity.CRITICAL)
        assert resolver.prompt_for(error).mode == PromptMode.BLOCKING

    def test_action_labels(self):
        for action in RecoveryAction:
            assert action_label(action)
        assert action_label(RecoveryAction.RESET_STATE) == "Reset App Data"
