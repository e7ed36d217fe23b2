"""Unit tests for configuration schema."""

import pytest
from pydantic import ValidationError

from payguard.config import Config, get_config, reload_config

pytestmark = pytest.mark.unit


class TestConfigDefaults:
    """Test default configuration values."""

    def test_amount_limits(self, config):
        assert config.min_amount == 1
        assert config.max_amount == 500000
        assert config.reasonable_amount == 100000

    def test_detection_windows(self, config):
        assert config.exact_window_ms == 60000
        assert config.similar_window_ms == 300000
        assert config.burst_window_ms == 300000
        assert config.burst_threshold == 3
        assert config.similarity_threshold == 0.85
        assert config.history_retention_ms == 3600000
        assert config.max_history_entries == 1000

    def test_retry_defaults(self, config):
        assert config.retry_max_attempts == 3
        assert config.retry_initial_delay_ms == 1000
        assert config.retry_max_delay_ms == 30000
        assert config.retry_backoff_multiplier == 2.0
        assert config.retry_jitter == 0.1
        assert config.retry_timeout_ms == 60000

    def test_defaults_are_consistent(self, config):
        assert config.validate_configuration() == []


class TestConfigValidation:
    """Test field and cross-field validation."""

    def test_log_level_is_uppercased(self):
        config = Config(_env_file=None, log_level="debug")
        assert config.log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Config(_env_file=None, log_level="LOUD")

    def test_country_code_plus_is_stripped(self):
        config = Config(_env_file=None, country_code="+254")
        assert config.country_code == "254"

    def test_invalid_country_code(self):
        with pytest.raises(ValidationError):
            Config(_env_file=None, country_code="25a")

    def test_similarity_threshold_range(self):
        with pytest.raises(ValidationError):
            Config(_env_file=None, similarity_threshold=1.5)

    def test_inverted_amount_limits_reported(self):
        config = Config(_env_file=None, min_amount=1000, max_amount=500)
        issues = config.validate_configuration()
        assert any("MIN_AMOUNT" in issue for issue in issues)

    def test_exact_window_larger_than_similar_reported(self):
        config = Config(_env_file=None, exact_window_ms=600000, similar_window_ms=300000)
        issues = config.validate_configuration()
        assert any("EXACT_WINDOW_MS" in issue for issue in issues)

    def test_retention_must_cover_windows(self):
        config = Config(_env_file=None, history_retention_ms=120000)
        issues = config.validate_configuration()
        assert any("SIMILAR_WINDOW_MS" in issue for issue in issues)
        assert any("BURST_WINDOW_MS" in issue for issue in issues)

    def test_retry_delays_reported(self):
        config = Config(_env_file=None, retry_initial_delay_ms=5000, retry_max_delay_ms=1000)
        issues = config.validate_configuration()
        assert any("RETRY_INITIAL_DELAY_MS" in issue for issue in issues)


class TestConfigEnvironment:
    """Test loading from environment variables."""

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("MAX_AMOUNT", "250000")
        monkeypatch.setenv("burst_threshold", "5")
        config = Config(_env_file=None)
        assert config.max_amount == 250000
        assert config.burst_threshold == 5

    def test_get_config_is_cached(self):
        assert get_config() is get_config()

    def test_reload_config_picks_up_changes(self, monkeypatch):
        first = get_config()
        monkeypatch.setenv("SIMILARITY_THRESHOLD", "0.9")
        reloaded = reload_config()
        assert reloaded is not first
        assert reloaded.similarity_threshold == 0.9
        assert get_config() is reloaded
