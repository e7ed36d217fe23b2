"""Secure logging utilities for payguard.

Provides sanitized logging that masks phone numbers, emails and tokens
before anything from an inbound payment message reaches the logs.
"""
import json
import logging
import re
from typing import Any, Optional

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

logger = logging.getLogger('payguard')

_RE_PHONE = re.compile(r'(?<!\d)(\+?254|0)(\d{6})(\d{3})(?!\d)')


def configure_logging(level: str = "INFO", fmt: Optional[str] = None) -> None:
    """Apply level and format from configuration to the payguard logger."""
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    if fmt:
        for handler in logging.getLogger().handlers:
            handler.setFormatter(logging.Formatter(fmt, datefmt='%Y-%m-%d %H:%M:%S'))


def mask_phone(phone: str) -> str:
    """Keep the prefix and the last three digits of a phone number."""
    if not phone:
        return phone
    digits = re.sub(r'\D', '', phone)
    if len(digits) < 6:
        return '*' * len(digits)
    return digits[:3] + '*' * (len(digits) - 6) + digits[-3:]


def sanitize_text(text: str) -> str:
    """Remove sensitive information from text.

    Args:
        text: Input text that may contain sensitive data

    Returns:
        Sanitized text with sensitive patterns replaced
    """
    if not text:
        return text

    # Phone numbers (Kenyan local and international forms)
    text = _RE_PHONE.sub(lambda m: m.group(1) + '*' * 6 + m.group(3), text)

    # Email addresses
    text = re.sub(r'[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}', '<email>', text)

    # API keys and tokens
    text = re.sub(r'sk-[a-zA-Z0-9]{20,}', '<api-key>', text)
    text = re.sub(r'[a-zA-Z0-9]{32,}', '<token>', text)

    # URLs with potential sensitive data
    text = re.sub(r'https?://[^\s]+', '<url>', text)

    return text


def safe_json(obj: Any, max_length: int = 1000) -> str:
    """Safely serialize object to JSON with sensitive data sanitized.

    Args:
        obj: Object to serialize
        max_length: Maximum length of output string

    Returns:
        Sanitized JSON string
    """
    try:
        json_str = json.dumps(obj, indent=2, ensure_ascii=False, default=str)
        sanitized = sanitize_text(json_str)

        if len(sanitized) > max_length:
            sanitized = sanitized[:max_length] + "... [truncated]"

        return sanitized
    except (TypeError, ValueError):
        return "<unable to serialize>"


def log_info(message: str, **kwargs) -> None:
    """Log info message with optional sanitized context."""
    if kwargs:
        context = safe_json(kwargs)
        logger.info(f"{message} | Context: {context}")
    else:
        logger.info(message)


def log_warning(message: str, **kwargs) -> None:
    """Log warning message with optional sanitized context."""
    if kwargs:
        context = safe_json(kwargs)
        logger.warning(f"{message} | Context: {context}")
    else:
        logger.warning(message)


def log_error(message: str, **kwargs) -> None:
    """Log error message with optional sanitized context."""
    if kwargs:
        context = safe_json(kwargs)
        logger.error(f"{message} | Context: {context}")
    else:
        logger.error(message)


def log_debug(message: str, **kwargs) -> None:
    """Log debug message with optional sanitized context."""
    if kwargs:
        context = safe_json(kwargs)
        logger.debug(f"{message} | Context: {context}")
    else:
        logger.debug(message)


def log_duplicate_detection(kind: str, phone: str, **kwargs) -> None:
    """Log duplicate detection results.

    Args:
        kind: Duplicate classification (EXACT, SIMILAR, BURST, ...)
        phone: Normalized phone the message belongs to
        **kwargs: Additional context
    """
    log_warning("Duplicate detected",
                duplicate_type=kind,
                phone=mask_phone(phone),
                **kwargs)


def log_retry_attempt(operation: str, attempt: int, delay_ms: float, **kwargs) -> None:
    """Log a scheduled retry of a failing operation."""
    log_warning(f"{operation} failed, retrying in {int(delay_ms)}ms",
                attempt=attempt,
                **kwargs)


def log_pipeline_decision(decision: str, **kwargs) -> None:
    """Log the final decision taken for an inbound message."""
    log_info(f"Pipeline decision: {decision}", **kwargs)
