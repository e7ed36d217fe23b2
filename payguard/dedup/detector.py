"""Stateful duplicate detection over a session's recent messages.

The ``TransactionDuplicateDetector`` runs its checks in order from the
strongest signal to the weakest, short-circuiting on the first match:

  1. EXACT   - same normalized content for the same phone within the exact window
  2. SIMILAR - near-identical text (or a shared reference code) within the similar window
  3. BURST   - too many messages from the same phone within the burst window
"""

from __future__ import annotations

from typing import Dict, Optional

from payguard.config import Config, get_config
from payguard.dedup.hashing import ContentHasher, SignatureExtractor
from payguard.dedup.history import HistoryEntry, MessageHistory
from payguard.dedup.result import DuplicateCheckResult, DuplicateType
from payguard.dedup.similarity import SimilarityScorer
from payguard.utils.logger import log_debug, log_duplicate_detection, log_info
from payguard.validation.phone import normalize_phone


class TransactionDuplicateDetector:
    """Classify messages as exact, similar or burst duplicates.

    One instance is created per session and owns its history exclusively.
    It performs no locking: callers must feed a given phone's messages in
    arrival order, one at a time.

    Usage::

        detector = TransactionDuplicateDetector()
        result = detector.is_duplicate(text, phone, timestamp)
        if not result.is_duplicate:
            detector.register_message(text, phone, timestamp)
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        hasher: Optional[ContentHasher] = None,
        signature_extractor: Optional[SignatureExtractor] = None,
        similarity_scorer: Optional[SimilarityScorer] = None,
    ):
        self.config = config or get_config()
        self.hasher = hasher or ContentHasher()
        self.signature_extractor = signature_extractor or SignatureExtractor()
        self.similarity_scorer = similarity_scorer or SimilarityScorer(self.config)
        self.history = MessageHistory(
            retention_ms=self.config.history_retention_ms,
            max_entries=self.config.max_history_entries,
        )

    def _normalize(self, phone: str) -> str:
        return normalize_phone(phone, self.config.country_code) or (phone or "")

    def is_duplicate(self, message: str, phone: str, timestamp: int) -> DuplicateCheckResult:
        """Check ``message`` against the history without registering it."""
        cfg = self.config
        phone = self._normalize(phone)
        content_hash = self.hasher.hash(message)

        existing = self.history.lookup(phone, content_hash)
        if existing is not None:
            elapsed = abs(timestamp - existing.timestamp)
            if elapsed <= cfg.exact_window_ms:
                log_duplicate_detection(DuplicateType.EXACT.value, phone, elapsed_ms=elapsed)
                return DuplicateCheckResult(
                    is_duplicate=True,
                    type=DuplicateType.EXACT,
                    previous_message=existing.text,
                    time_since_last_ms=elapsed,
                    similarity_score=1.0,
                )

        signature = self.signature_extractor.extract(message)
        for entry in self.history.recent(phone, timestamp, cfg.similar_window_ms):
            score = self.similarity_scorer.compare(message, entry.text)
            shared = self.similarity_scorer.shared_references(signature, entry.signature)
            if score >= cfg.similarity_threshold or shared:
                elapsed = abs(timestamp - entry.timestamp)
                log_duplicate_detection(
                    DuplicateType.SIMILAR.value,
                    phone,
                    elapsed_ms=elapsed,
                    similarity=round(score, 3),
                    shared_references=sorted(shared),
                )
                return DuplicateCheckResult(
                    is_duplicate=True,
                    type=DuplicateType.SIMILAR,
                    previous_message=entry.text,
                    time_since_last_ms=elapsed,
                    similarity_score=score,
                )

        burst = self.history.recent(phone, timestamp, cfg.burst_window_ms)
        if len(burst) + 1 >= cfg.burst_threshold:
            elapsed = abs(timestamp - burst[0].timestamp)
            log_duplicate_detection(
                DuplicateType.BURST.value,
                phone,
                messages_in_window=len(burst) + 1,
                window_ms=cfg.burst_window_ms,
            )
            return DuplicateCheckResult(
                is_duplicate=True,
                type=DuplicateType.BURST,
                time_since_last_ms=elapsed,
            )

        log_debug("No duplicates found", phone_history=len(burst))
        return DuplicateCheckResult(is_duplicate=False)

    def register_message(self, message: str, phone: str, timestamp: int) -> None:
        """Record a processed message; prunes expired history."""
        phone = self._normalize(phone)
        self.history.add(
            HistoryEntry(
                hash=self.hasher.hash(message),
                phone=phone,
                timestamp=timestamp,
                text=message,
                signature=self.signature_extractor.extract(message),
            )
        )

    def check_and_register(self, message: str, phone: str, timestamp: int) -> DuplicateCheckResult:
        """Check a message, then register it unless it was an exact repeat.

        Exact repeats are not re-registered so a message replayed every few
        seconds cannot keep its own exact window open forever.
        """
        result = self.is_duplicate(message, phone, timestamp)
        if result.type != DuplicateType.EXACT:
            self.register_message(message, phone, timestamp)
        return result

    def get_stats(self) -> Dict[str, float]:
        return self.history.stats()

    def clear(self) -> None:
        self.history.clear()
        log_info("Duplicate detector history cleared")
