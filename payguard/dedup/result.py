"""Data classes for duplicate and conflict detection results."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from payguard.models import TransactionRecord


class ConflictType(str, Enum):
    NONE = "NONE"
    SIMILAR_TRANSACTION = "SIMILAR_TRANSACTION"
    EXACT_DUPLICATE = "EXACT_DUPLICATE"


class DuplicateType(str, Enum):
    NONE = "NONE"
    EXACT = "EXACT"
    SIMILAR = "SIMILAR"
    BURST = "BURST"


@dataclass(frozen=True)
class MessageSignature:
    """Tokens extracted from a message for similarity comparison.

    Attributes:
        amounts: Currency amounts found in the text.
        references: Transaction reference codes (e.g. ``QAB123ABC``).
        phones: Digit runs of seven or more digits.
    """

    amounts: FrozenSet[float] = field(default_factory=frozenset)
    references: FrozenSet[str] = field(default_factory=frozenset)
    phones: FrozenSet[str] = field(default_factory=frozenset)

    def is_empty(self) -> bool:
        return not (self.amounts or self.references or self.phones)


@dataclass
class ConflictResult:
    """Result of comparing a candidate transaction with stored records.

    Attributes:
        has_conflict: Whether a stored record represents the same event.
        type: Conflict classification.
        matched_record: The nearest-in-time conflicting record.
        confidence_score: Confidence in the conflict, 0-100.
    """

    has_conflict: bool
    type: ConflictType = ConflictType.NONE
    matched_record: Optional[TransactionRecord] = None
    confidence_score: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["type"] = self.type.value
        return data


@dataclass
class DuplicateCheckResult:
    """Result of a duplicate detection check.

    Attributes:
        is_duplicate: Whether the message was identified as a duplicate.
        type: ``EXACT``, ``SIMILAR``, ``BURST`` or ``NONE``.
        previous_message: Text of the earlier message that matched.
        time_since_last_ms: Milliseconds since the matched (or latest)
            message for the same phone.
        similarity_score: Text similarity (0.0-1.0) for ``SIMILAR`` and
            ``EXACT`` matches.
    """

    is_duplicate: bool
    type: DuplicateType = DuplicateType.NONE
    previous_message: Optional[str] = None
    time_since_last_ms: Optional[int] = None
    similarity_score: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["type"] = self.type.value
        return data
