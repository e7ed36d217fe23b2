"""Configuration management using Pydantic BaseSettings.

This module provides centralized configuration with validation, type safety
and sensible defaults for amount limits, duplicate-detection windows,
authenticity scoring and the retry engine.
"""
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Main configuration class combining all settings.

    Every field is read from the environment variable of the same name
    (case-insensitive), e.g. ``MAX_AMOUNT=250000``.
    """

    # Amount limits (currency-agnostic)
    min_amount: float = Field(1.0, ge=0.0, description="Smallest accepted amount")
    max_amount: float = Field(500000.0, gt=0.0, description="Largest accepted amount")
    reasonable_amount: float = Field(100000.0, gt=0.0, description="Amounts above this are flagged unusual")

    # Phone normalization
    country_code: str = Field("254", description="Canonical country code for phone numbers")

    # Duplicate detection windows
    exact_window_ms: int = Field(60000, ge=1000, le=3600000, description="Exact duplicate window")
    similar_window_ms: int = Field(300000, ge=1000, le=86400000, description="Similar message window")
    burst_window_ms: int = Field(300000, ge=1000, le=86400000, description="Burst detection window")
    burst_threshold: int = Field(3, ge=2, le=100, description="Messages within the burst window that make a burst")
    similarity_threshold: float = Field(0.85, ge=0.0, le=1.0, description="Text similarity cutoff")
    history_retention_ms: int = Field(3600000, ge=60000, le=604800000, description="Detector history horizon")
    max_history_entries: int = Field(1000, ge=10, le=1000000, description="Hard cap on detector history size")

    # Authenticity scoring
    authenticity_threshold: int = Field(70, ge=0, le=100, description="Minimum authenticity score")

    # Retry engine
    retry_max_attempts: int = Field(3, ge=1, le=20, description="Attempts before giving up")
    retry_initial_delay_ms: int = Field(1000, ge=0, le=600000, description="First backoff delay")
    retry_max_delay_ms: int = Field(30000, ge=0, le=3600000, description="Backoff delay cap")
    retry_backoff_multiplier: float = Field(2.0, ge=1.0, le=10.0, description="Backoff growth factor")
    retry_jitter: float = Field(0.1, ge=0.0, le=0.5, description="Relative jitter applied to each delay")
    retry_timeout_ms: int = Field(60000, ge=100, le=3600000, description="Hard timeout for a whole retry run")

    # Error log
    error_log_max_size: int = Field(1000, ge=10, le=100000, description="Max retained error entries")

    # Logging Configuration
    log_level: str = Field("INFO", description="Logging level")
    log_format: str = Field("%(asctime)s - %(name)s - %(levelname)s - %(message)s", description="Log format")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore"
    }

    @field_validator('log_level')
    @classmethod
    def validate_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'Invalid log level: {v}. Valid options: {valid_levels}')
        return v.upper()

    @field_validator('country_code')
    @classmethod
    def validate_country_code(cls, v):
        v = v.strip().lstrip('+')
        if not v.isdigit() or not 1 <= len(v) <= 3:
            raise ValueError('country_code must be 1-3 digits')
        return v

    def validate_configuration(self) -> List[str]:
        """Validate the complete configuration and return any issues."""
        issues = []

        if self.min_amount >= self.max_amount:
            issues.append("MIN_AMOUNT must be lower than MAX_AMOUNT")
        if not self.min_amount <= self.reasonable_amount <= self.max_amount:
            issues.append("REASONABLE_AMOUNT must lie between MIN_AMOUNT and MAX_AMOUNT")

        if self.exact_window_ms > self.similar_window_ms:
            issues.append("EXACT_WINDOW_MS must not exceed SIMILAR_WINDOW_MS")
        if self.similar_window_ms > self.history_retention_ms:
            issues.append("HISTORY_RETENTION_MS must cover SIMILAR_WINDOW_MS")
        if self.burst_window_ms > self.history_retention_ms:
            issues.append("HISTORY_RETENTION_MS must cover BURST_WINDOW_MS")

        if self.similarity_threshold < 0.5:
            issues.append("SIMILARITY_THRESHOLD is very low, may flag many distinct payments as similar")

        if self.retry_initial_delay_ms > self.retry_max_delay_ms:
            issues.append("RETRY_INITIAL_DELAY_MS must not exceed RETRY_MAX_DELAY_MS")
        if self.retry_timeout_ms <= self.retry_initial_delay_ms:
            issues.append("RETRY_TIMEOUT_MS leaves no room for a single retry")

        return issues

    def log_configuration(self) -> None:
        """Log the current configuration."""
        from payguard.utils.logger import log_info

        log_info("Configuration loaded",
                 min_amount=self.min_amount,
                 max_amount=self.max_amount,
                 reasonable_amount=self.reasonable_amount,
                 exact_window_ms=self.exact_window_ms,
                 similar_window_ms=self.similar_window_ms,
                 burst_window_ms=self.burst_window_ms,
                 similarity_threshold=self.similarity_threshold,
                 authenticity_threshold=self.authenticity_threshold,
                 retry_max_attempts=self.retry_max_attempts,
                 retry_timeout_ms=self.retry_timeout_ms,
                 log_level=self.log_level)


# Global configuration instance (lazy loading)
_config = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reload_config() -> Config:
    """Reload configuration from environment variables."""
    global _config
    _config = Config()
    return _config
