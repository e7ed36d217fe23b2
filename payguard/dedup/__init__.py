"""Duplicate and conflict detection for payment notifications.

Stateless pieces (hashing, signatures, similarity, conflict detection and
batch helpers) are composed by the stateful ``TransactionDuplicateDetector``.
"""

from payguard.dedup.result import (
    ConflictResult,
    ConflictType,
    DuplicateCheckResult,
    DuplicateType,
    MessageSignature,
)
from payguard.dedup.hashing import ContentHasher, SignatureExtractor, hash_message_content
from payguard.dedup.similarity import SimilarityScorer
from payguard.dedup.conflict import ConflictDetector
from payguard.dedup.batch import (
    deduplicate_messages,
    find_duplicate_groups,
    find_repeats,
    group_messages_by_phone,
)
from payguard.dedup.history import HistoryEntry, MessageHistory
from payguard.dedup.detector import TransactionDuplicateDetector

__all__ = [
    "ConflictResult",
    "ConflictType",
    "DuplicateCheckResult",
    "DuplicateType",
    "MessageSignature",
    "ContentHasher",
    "SignatureExtractor",
    "hash_message_content",
    "SimilarityScorer",
    "ConflictDetector",
    "deduplicate_messages",
    "find_duplicate_groups",
    "find_repeats",
    "group_messages_by_phone",
    "HistoryEntry",
    "MessageHistory",
    "TransactionDuplicateDetector",
]
