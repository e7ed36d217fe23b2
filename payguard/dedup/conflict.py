"""Stateless conflict detection against stored transaction records."""

from __future__ import annotations

import math
from typing import Iterable, Optional

from payguard.config import Config, get_config
from payguard.dedup.result import ConflictResult, ConflictType
from payguard.models import TransactionRecord
from payguard.utils.logger import log_debug, log_info, mask_phone
from payguard.validation.amount import AmountValidator
from payguard.validation.phone import normalize_phone

EXACT_CONFIDENCE_MAX = 100.0
EXACT_CONFIDENCE_MIN = 90.0
SIMILAR_CONFIDENCE_MAX = 90.0
SIMILAR_CONFIDENCE_MIN = 75.0


class ConflictDetector:
    """Decide whether a candidate transaction repeats a stored one.

    Only records with the same normalized phone and the same amount are
    candidates; the nearest one in time decides the outcome:

      * ``elapsed <= exact_window_ms``   -> ``EXACT_DUPLICATE`` (100 down to 90)
      * ``elapsed <= similar_window_ms`` -> ``SIMILAR_TRANSACTION`` (90 down to 75)
      * otherwise                        -> ``NONE``
    """

    def __init__(self, config: Optional[Config] = None, amount_validator: Optional[AmountValidator] = None):
        self.config = config or get_config()
        self.amount_validator = amount_validator or AmountValidator(self.config)

    def detect(
        self,
        phone: str,
        amount: Optional[float],
        timestamp: int,
        existing_records: Iterable[TransactionRecord],
    ) -> ConflictResult:
        if amount is None:
            return ConflictResult(has_conflict=False)

        country_code = self.config.country_code
        target_phone = normalize_phone(phone, country_code)
        nearest: Optional[TransactionRecord] = None
        nearest_elapsed = math.inf

        for record in existing_records:
            if normalize_phone(record.phone, country_code) != target_phone:
                continue
            record_amount = record.amount
            if record_amount is None:
                record_amount = self.amount_validator.extract(record.raw_message)
            if record_amount is None or not math.isclose(record_amount, amount, abs_tol=0.005):
                continue

            elapsed = abs(timestamp - record.timestamp)
            if elapsed < nearest_elapsed:
                nearest, nearest_elapsed = record, elapsed

        if nearest is None or nearest_elapsed > self.config.similar_window_ms:
            log_debug("No conflicting record", phone=mask_phone(target_phone), amount=amount)
            return ConflictResult(has_conflict=False)

        if nearest_elapsed <= self.config.exact_window_ms:
            conflict_type = ConflictType.EXACT_DUPLICATE
            confidence = self._decay(
                nearest_elapsed, 0, self.config.exact_window_ms,
                EXACT_CONFIDENCE_MAX, EXACT_CONFIDENCE_MIN,
            )
        else:
            conflict_type = ConflictType.SIMILAR_TRANSACTION
            confidence = self._decay(
                nearest_elapsed, self.config.exact_window_ms, self.config.similar_window_ms,
                SIMILAR_CONFIDENCE_MAX, SIMILAR_CONFIDENCE_MIN,
            )

        log_info(
            "Conflicting record found",
            conflict_type=conflict_type.value,
            phone=mask_phone(target_phone),
            elapsed_ms=nearest_elapsed,
            confidence=confidence,
        )
        return ConflictResult(
            has_conflict=True,
            type=conflict_type,
            matched_record=nearest,
            confidence_score=confidence,
        )

    @staticmethod
    def _decay(elapsed: float, start: float, end: float, high: float, low: float) -> float:
        """Linear interpolation from ``high`` at ``start`` to ``low`` at ``end``."""
        span = end - start
        fraction = (elapsed - start) / span if span > 0 else 1.0
        fraction = max(0.0, min(1.0, fraction))
        return round(max(0.0, min(100.0, high - (high - low) * fraction)), 2)
