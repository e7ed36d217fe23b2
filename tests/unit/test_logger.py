"""Unit tests for sanitized logging helpers."""

import logging

import pytest

from payguard.utils.logger import (
    configure_logging,
    log_duplicate_detection,
    log_info,
    log_retry_attempt,
    mask_phone,
    safe_json,
    sanitize_text,
)

pytestmark = pytest.mark.unit


class TestMasking:
    """Test removal of sensitive data."""

    def test_mask_phone(self):
        assert mask_phone("254712345678") == "254******678"
        assert mask_phone("+254 712 345 678") == "254******678"
        assert mask_phone("") == ""

    def test_sanitize_phone_numbers(self):
        text = sanitize_text("from John 0712345678 and +254722918264")
        assert "0712345678" not in text
        assert "722918264" not in text
        assert "0******678" in text
        assert "+254******264" in text

    def test_sanitize_email_and_url(self):
        text = sanitize_text("mail jane@example.com see https://pay.example.com/x?token=1")
        assert "<email>" in text
        assert "<url>" in text

    def test_safe_json_sanitizes_and_truncates(self):
        assert "0712345678" not in safe_json({"phone": "0712345678"})
        assert safe_json({"text": "x" * 50}, max_length=10).endswith("... [truncated]")

    def test_safe_json_handles_unserializable(self):
        assert safe_json({"value": object()}).startswith("{")


class TestLogHelpers:
    """Test log output."""

    def test_log_info_includes_context(self, caplog):
        with caplog.at_level(logging.INFO, logger="payguard"):
            log_info("Saved", phone="0712345678", amount=5000)
        assert "Saved | Context:" in caplog.text
        assert "0712345678" not in caplog.text
        assert "5000" in caplog.text

    def test_duplicate_detection_masks_phone(self, caplog):
        with caplog.at_level(logging.INFO, logger="payguard"):
            log_duplicate_detection("EXACT", "254722918264", elapsed_ms=1000)
        assert "254722918264" not in caplog.text
        assert "EXACT" in caplog.text

    def test_retry_attempt(self, caplog):
        with caplog.at_level(logging.WARNING, logger="payguard"):
            log_retry_attempt("persist", 2, 2000.0)
        assert "persist failed, retrying in 2000ms" in caplog.text

    def test_configure_logging_level(self):
        configure_logging("ERROR")
        assert logging.getLogger("payguard").level == logging.ERROR
        configure_logging("INFO")
