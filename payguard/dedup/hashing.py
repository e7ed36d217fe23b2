"""Content hashing and signature extraction for messages."""

from __future__ import annotations

import hashlib
import re

from payguard.dedup.result import MessageSignature
from payguard.validation.patterns import AMOUNT_PATTERNS, REFERENCE_CODE

_RE_WS = re.compile(r"\s+")
_RE_DIGIT_RUN = re.compile(r"(?<!\d)\d{7,}(?!\d)")


class ContentHasher:
    """Stable digest of case- and whitespace-normalized message text."""

    @staticmethod
    def normalize(text: str) -> str:
        if not text:
            return ""
        return _RE_WS.sub(" ", text.lower()).strip()

    def hash(self, text: str) -> str:
        normalized = self.normalize(text)
        return hashlib.sha256(normalized.encode("utf-8")).hexdigest()


class SignatureExtractor:
    """Pull amount, phone and reference tokens out of a message."""

    def extract(self, text: str) -> MessageSignature:
        if not text:
            return MessageSignature()

        amounts = set()
        for pattern in AMOUNT_PATTERNS:
            for match in pattern.finditer(text):
                try:
                    amounts.add(float(match.group(1).replace(",", "")))
                except ValueError:
                    continue

        return MessageSignature(
            amounts=frozenset(amounts),
            references=frozenset(REFERENCE_CODE.findall(text)),
            phones=frozenset(_RE_DIGIT_RUN.findall(text)),
        )


_default_hasher = ContentHasher()


def hash_message_content(text: str) -> str:
    """Module-level shortcut for ``ContentHasher().hash``."""
    return _default_hasher.hash(text)
