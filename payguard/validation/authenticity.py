"""Heuristic authenticity scoring for payment notifications.

Five independent indicators each contribute a fixed weight to a 0-100
score.  Amount and phone results computed upstream are reused so the
message is not parsed twice.
"""

from __future__ import annotations

from typing import List, Optional

from payguard.config import Config, get_config
from payguard.validation.amount import AmountValidator
from payguard.validation.patterns import (
    AUTHENTIC_SENDERS,
    DATE,
    INDICATOR_WEIGHT,
    MIN_KEYWORD_MATCHES,
    PAYMENT_KEYWORDS,
    REFERENCE_CODE,
    UNUSUAL_AMOUNT_PENALTY,
)
from payguard.validation.phone import PhoneValidator, extract_phone
from payguard.validation.result import (
    AmountValidationResult,
    AuthenticityIndicators,
    AuthenticityResult,
    PhoneValidationResult,
)


class AuthenticityScorer:
    """Score how much a text looks like a genuine mobile-money notification."""

    def __init__(
        self,
        config: Optional[Config] = None,
        amount_validator: Optional[AmountValidator] = None,
        phone_validator: Optional[PhoneValidator] = None,
    ):
        self.config = config or get_config()
        self.amount_validator = amount_validator or AmountValidator(self.config)
        self.phone_validator = phone_validator or PhoneValidator(self.config)

    def assess(
        self,
        text: str,
        amount_result: Optional[AmountValidationResult] = None,
        phone_result: Optional[PhoneValidationResult] = None,
        sender_address: Optional[str] = None,
    ) -> AuthenticityResult:
        text = text or ""
        upper = text.upper().strip()
        issues: List[str] = []
        indicators = AuthenticityIndicators()
        score = 0

        sender = (sender_address or "").upper()
        indicators.has_valid_sender = any(s in sender or s in upper for s in AUTHENTIC_SENDERS)
        if indicators.has_valid_sender:
            score += INDICATOR_WEIGHT
        else:
            issues.append("Unknown sender - not a recognized mobile money provider")

        keyword_matches = sum(1 for pattern in PAYMENT_KEYWORDS if pattern.search(text))
        indicators.has_valid_keywords = keyword_matches >= MIN_KEYWORD_MATCHES
        if indicators.has_valid_keywords:
            score += INDICATOR_WEIGHT
        else:
            issues.append(
                f"Missing payment keywords (found {keyword_matches}/{MIN_KEYWORD_MATCHES} minimum required)"
            )

        indicators.has_valid_structure = bool(REFERENCE_CODE.search(upper) or DATE.search(upper))
        if indicators.has_valid_structure:
            score += INDICATOR_WEIGHT
        else:
            issues.append("Missing reference code or date")

        if amount_result is None:
            amount_result = self.amount_validator.validate(text)
        indicators.amount_valid = amount_result.valid
        if amount_result.valid:
            score += INDICATOR_WEIGHT
            if amount_result.is_unusual:
                score -= UNUSUAL_AMOUNT_PENALTY
        else:
            issues.append(f"Invalid amount: {amount_result.error}")

        if phone_result is None:
            phone_result = self.phone_validator.validate(extract_phone(text))
        indicators.phone_valid = phone_result.valid
        if phone_result.valid:
            score += INDICATOR_WEIGHT
        else:
            issues.append(f"Invalid phone: {phone_result.error}")

        score = max(0, min(100, score))

        return AuthenticityResult(
            authentic=score >= self.config.authenticity_threshold,
            score=score,
            indicators=indicators,
            issues=issues,
        )
