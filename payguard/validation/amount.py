"""Amount extraction and range validation."""

from __future__ import annotations

from typing import List, Optional

from payguard.config import Config, get_config
from payguard.validation.patterns import AMOUNT_PATTERNS, REPEATED_DIGITS, SEQUENTIAL_DIGITS
from payguard.validation.result import AmountValidationResult


def _format_amount(amount: float) -> str:
    if float(amount).is_integer():
        return f"{int(amount):,}"
    return f"{amount:,.2f}"


class AmountValidator:
    """Extract a currency amount from message text and check it against limits.

    Handles ``"KES 1,234.50"``, ``"Ksh 5000"``, ``"Kshs. 20"`` and the suffix
    forms ``"100 shillings"`` / ``"5,000 KES"``.
    """

    def __init__(self, config: Optional[Config] = None):
        self.config = config or get_config()

    def find_token(self, text: str) -> Optional[str]:
        """Return the raw numeric token of the first amount in ``text``."""
        if not text:
            return None
        for pattern in AMOUNT_PATTERNS:
            match = pattern.search(text)
            if match:
                return match.group(1)
        return None

    def extract(self, text: str) -> Optional[float]:
        """Return the first parseable amount in ``text`` or ``None``."""
        token = self.find_token(text)
        if token is None:
            return None
        try:
            return float(token.replace(",", ""))
        except ValueError:
            return None

    def validate(self, text: str) -> AmountValidationResult:
        token = self.find_token(text)
        if token is None:
            return AmountValidationResult(valid=False, error="No amount found in message")

        clean = token.replace(",", "").strip()
        try:
            amount = float(clean)
        except ValueError:
            return AmountValidationResult(valid=False, error=f'Invalid amount format: "{token}"')

        return self._check(amount, clean)

    def check_value(self, amount: float) -> AmountValidationResult:
        """Apply range and pattern checks to an already-parsed amount."""
        try:
            amount = float(amount)
        except (TypeError, ValueError):
            return AmountValidationResult(valid=False, error=f'Invalid amount format: "{amount}"')
        if amount != amount:  # NaN
            return AmountValidationResult(valid=False, error="Invalid amount format: NaN")
        clean = f"{amount:.2f}".rstrip("0").rstrip(".")
        return self._check(amount, clean)

    def _check(self, amount: float, digits: str) -> AmountValidationResult:
        cfg = self.config

        if amount < cfg.min_amount:
            return AmountValidationResult(
                valid=False,
                amount=amount,
                error=(
                    f"Amount too small: KES {_format_amount(amount)} "
                    f"(minimum: KES {_format_amount(cfg.min_amount)})"
                ),
                is_unusual=True,
            )

        if amount > cfg.max_amount:
            return AmountValidationResult(
                valid=False,
                amount=amount,
                error=(
                    f"Amount too large: KES {_format_amount(amount)} "
                    f"(maximum: KES {_format_amount(cfg.max_amount)})"
                ),
                is_unusual=True,
            )

        warnings: List[str] = []
        if amount > cfg.reasonable_amount:
            warnings.append(
                f"High amount: KES {_format_amount(amount)} (unusual for typical transaction)"
            )

        if REPEATED_DIGITS.search(digits):
            warnings.append("Suspicious: Repeated digits pattern detected")

        if SEQUENTIAL_DIGITS.search(digits):
            warnings.append("Suspicious: Sequential digits pattern detected")

        return AmountValidationResult(
            valid=True,
            amount=amount,
            warnings=warnings,
            is_unusual=bool(warnings),
        )
