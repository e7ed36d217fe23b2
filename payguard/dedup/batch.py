"""Batch helpers for de-duplicating and clustering captured messages."""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence, Set

from payguard.dedup.hashing import ContentHasher
from payguard.models import Message
from payguard.validation.phone import extract_phone, normalize_phone

DEFAULT_GROUP_WINDOW_MS = 300000
DEFAULT_GROUP_MIN_SIZE = 3


def phone_key(message: Message, country_code: str = "254") -> str:
    """Phone a message belongs to: explicit phone, then text, then sender."""
    raw = message.phone or extract_phone(message.raw_text)
    normalized = normalize_phone(raw, country_code) if raw else ""
    return normalized or message.sender_address


def find_repeats(messages: Sequence[Message]) -> List[int]:
    """Indices of messages whose content already appeared earlier in ``messages``.

    Two messages are the same when their normalized content hashes match.
    """
    hasher = ContentHasher()
    seen: Set[str] = set()
    repeats: List[int] = []

    for index, message in enumerate(messages):
        digest = hasher.hash(message.raw_text)
        if digest in seen:
            repeats.append(index)
        else:
            seen.add(digest)

    return repeats


def deduplicate_messages(messages: Iterable[Message]) -> List[Message]:
    """Remove repeated messages, keeping the first occurrence of each in order."""
    messages = list(messages)
    repeats = set(find_repeats(messages))
    return [m for index, m in enumerate(messages) if index not in repeats]


def group_messages_by_phone(messages: Iterable[Message], country_code: str = "254") -> Dict[str, List[Message]]:
    """Partition messages into ``{phone: [messages in input order]}``."""
    grouped: Dict[str, List[Message]] = {}
    for message in messages:
        grouped.setdefault(phone_key(message, country_code), []).append(message)
    return grouped


def find_duplicate_groups(
    messages: Sequence[Message],
    window_ms: int = DEFAULT_GROUP_WINDOW_MS,
    min_size: int = DEFAULT_GROUP_MIN_SIZE,
    country_code: str = "254",
) -> List[List[Message]]:
    """Find bursts: per phone, runs of ``min_size`` or more messages in a window.

    A window slides over each phone's messages in arrival order and every
    maximal run whose timestamp span fits ``window_ms`` is returned.  Runs
    from the same phone may overlap.
    """
    duplicate_groups: List[List[Message]] = []

    for group in group_messages_by_phone(messages, country_code).values():
        if len(group) < min_size:
            continue

        ordered = sorted(group, key=lambda m: m.arrival_timestamp)
        start = 0
        for end, message in enumerate(ordered):
            while message.arrival_timestamp - ordered[start].arrival_timestamp > window_ms:
                start += 1
            is_last = end + 1 == len(ordered)
            # Maximal when the next message would push the run's first one out.
            if is_last or ordered[end + 1].arrival_timestamp - ordered[start].arrival_timestamp > window_ms:
                if end - start + 1 >= min_size:
                    duplicate_groups.append(ordered[start:end + 1])

    return duplicate_groups
