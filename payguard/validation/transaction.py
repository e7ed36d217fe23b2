"""Composite validation of a captured transaction message."""

from __future__ import annotations

from typing import Optional, Union

from payguard.config import Config, get_config
from payguard.utils.logger import log_debug
from payguard.validation.amount import AmountValidator
from payguard.validation.authenticity import AuthenticityScorer
from payguard.validation.patterns import UNKNOWN_PROVIDER
from payguard.validation.phone import PhoneValidator
from payguard.validation.result import ValidationFlag, ValidationResult


class TransactionValidator:
    """Run amount, phone and authenticity checks on one message.

    Only amount and phone decide ``valid``.  Authenticity, unusual amounts
    and suspicious numbers are reported as warnings and flags so that a
    valid-but-flagged transaction can still be persisted for review.

    Usage::

        validator = TransactionValidator()
        result = validator.validate(text, "0712345678", sender_address="MPESA")
        if result.valid:
            ...
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        amount_validator: Optional[AmountValidator] = None,
        phone_validator: Optional[PhoneValidator] = None,
        authenticity_scorer: Optional[AuthenticityScorer] = None,
    ):
        self.config = config or get_config()
        self.amount_validator = amount_validator or AmountValidator(self.config)
        self.phone_validator = phone_validator or PhoneValidator(self.config)
        self.authenticity_scorer = authenticity_scorer or AuthenticityScorer(
            self.config, self.amount_validator, self.phone_validator
        )

    def validate(
        self,
        message: str,
        phone: Optional[str],
        amount: Optional[Union[float, int, str]] = None,
        sender_address: Optional[str] = None,
    ) -> ValidationResult:
        """Validate a message.

        Args:
            message: Raw notification text.
            phone: Counterparty phone in any supported format.
            amount: Amount already parsed by the caller; when given it is
                checked instead of the amount found in ``message``.
            sender_address: Originating address of the message.

        Returns:
            ``ValidationResult`` with errors, warnings and flags.
        """
        result = ValidationResult(valid=False)

        if amount is None:
            amount_result = self.amount_validator.validate(message)
        elif isinstance(amount, str):
            amount_result = self.amount_validator.validate(amount)
            if amount_result.error == "No amount found in message":
                amount_result = self.amount_validator.check_value(amount.replace(",", ""))
        else:
            amount_result = self.amount_validator.check_value(amount)

        if not amount_result.valid:
            result.errors.append(amount_result.error or "Invalid amount")
        result.warnings.extend(amount_result.warnings)
        if amount_result.valid and amount_result.is_unusual:
            result.flags.append(ValidationFlag.UNUSUAL_AMOUNT)

        phone_result = self.phone_validator.validate(phone)
        if not phone_result.valid:
            result.errors.append(phone_result.error or "Invalid phone number")
        result.warnings.extend(phone_result.warnings)
        if phone_result.valid:
            if any(w.startswith("Suspicious") for w in phone_result.warnings):
                result.flags.append(ValidationFlag.SUSPICIOUS_PHONE)
            if phone_result.provider == UNKNOWN_PROVIDER:
                result.flags.append(ValidationFlag.UNKNOWN_PROVIDER)

        authenticity = self.authenticity_scorer.assess(
            message, amount_result, phone_result, sender_address=sender_address
        )
        if not authenticity.authentic:
            result.warnings.extend(authenticity.issues)
            result.flags.append(ValidationFlag.LOW_AUTHENTICITY)

        result.valid = amount_result.valid and phone_result.valid
        result.amount = amount_result.amount
        result.phone = phone_result.phone
        result.provider = phone_result.provider
        result.authenticity = authenticity

        log_debug(
            "Transaction validated",
            valid=result.valid,
            errors=len(result.errors),
            flags=[f.value for f in result.flags],
            authenticity_score=authenticity.score,
        )
        return result
