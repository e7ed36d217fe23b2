"""Edit-distance similarity between notification texts."""

from __future__ import annotations

from typing import FrozenSet, Optional

from rapidfuzz.distance import Levenshtein

from payguard.config import Config, get_config
from payguard.dedup.hashing import ContentHasher
from payguard.dedup.result import MessageSignature


class SimilarityScorer:
    """Normalized Levenshtein similarity, ``1 - distance / max(len)``.

    Symmetric and reflexive; always within [0, 1].
    """

    def __init__(self, config: Optional[Config] = None):
        self.config = config or get_config()

    @property
    def threshold(self) -> float:
        return self.config.similarity_threshold

    def compare(self, a: str, b: str) -> float:
        s1 = ContentHasher.normalize(a)
        s2 = ContentHasher.normalize(b)
        if s1 == s2:
            return 1.0
        score = Levenshtein.normalized_similarity(s1, s2)
        return max(0.0, min(1.0, score))

    def is_similar(self, a: str, b: str) -> bool:
        return self.compare(a, b) >= self.threshold

    @staticmethod
    def shared_references(a: MessageSignature, b: MessageSignature) -> FrozenSet[str]:
        """Reference codes present in both signatures."""
        return a.references & b.references
