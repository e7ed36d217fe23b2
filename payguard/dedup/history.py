"""Bounded, time-pruned message history owned by the duplicate detector."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, List, Optional, Tuple

from payguard.dedup.result import MessageSignature


@dataclass(frozen=True)
class HistoryEntry:
    """One registered message."""

    hash: str
    phone: str
    timestamp: int
    text: str
    signature: MessageSignature


class MessageHistory:
    """Per-phone message history with time-based eviction.

    Two views over the same entries are kept:

      * ``(phone, hash) -> entry`` for O(1) exact-match lookups
      * ``phone -> deque[entry]`` ordered by timestamp for window scans

    Every write prunes entries older than ``retention_ms`` relative to the
    newest timestamp seen, then drops the oldest entries while more than
    ``max_entries`` remain.  Not safe for concurrent writers.
    """

    def __init__(self, retention_ms: int = 3600000, max_entries: int = 1000):
        self.retention_ms = retention_ms
        self.max_entries = max_entries
        self._by_hash: Dict[Tuple[str, str], HistoryEntry] = {}
        self._by_phone: Dict[str, Deque[HistoryEntry]] = {}
        self._newest_timestamp: Optional[int] = None

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._by_phone.values())

    def add(self, entry: HistoryEntry) -> None:
        self._by_hash[(entry.phone, entry.hash)] = entry

        entries = self._by_phone.setdefault(entry.phone, deque())
        if not entries or entries[-1].timestamp <= entry.timestamp:
            entries.append(entry)
        else:
            # Late arrival: keep the deque ordered by timestamp.
            index = len(entries)
            while index > 0 and entries[index - 1].timestamp > entry.timestamp:
                index -= 1
            entries.insert(index, entry)

        if self._newest_timestamp is None or entry.timestamp > self._newest_timestamp:
            self._newest_timestamp = entry.timestamp

        self.prune()

    def lookup(self, phone: str, content_hash: str) -> Optional[HistoryEntry]:
        return self._by_hash.get((phone, content_hash))

    def recent(self, phone: str, timestamp: int, window_ms: int) -> List[HistoryEntry]:
        """Entries for ``phone`` within ``window_ms`` of ``timestamp``, newest first."""
        return [
            entry
            for entry in reversed(self._by_phone.get(phone, ()))
            if abs(timestamp - entry.timestamp) <= window_ms
        ]

    def prune(self, now: Optional[int] = None) -> int:
        """Evict expired and excess entries.  Returns the number removed."""
        now = self._newest_timestamp if now is None else now
        if now is None:
            return 0
        cutoff = now - self.retention_ms
        removed = 0

        for phone in list(self._by_phone):
            entries = self._by_phone[phone]
            while entries and entries[0].timestamp < cutoff:
                self._forget(entries.popleft())
                removed += 1
            if not entries:
                del self._by_phone[phone]

        excess = len(self) - self.max_entries
        if excess > 0:
            oldest = sorted(
                (entry for entries in self._by_phone.values() for entry in entries),
                key=lambda e: e.timestamp,
            )[:excess]
            for entry in oldest:
                entries = self._by_phone[entry.phone]
                entries.remove(entry)
                self._forget(entry)
                if not entries:
                    del self._by_phone[entry.phone]
            removed += len(oldest)

        return removed

    def _forget(self, entry: HistoryEntry) -> None:
        key = (entry.phone, entry.hash)
        if self._by_hash.get(key) is entry:
            del self._by_hash[key]

    def stats(self) -> Dict[str, float]:
        phones = len(self._by_phone)
        return {
            "total_hashes": len(self._by_hash),
            "phones_tracked": phones,
            "avg_per_phone": (len(self) / phones) if phones else 0.0,
        }

    def clear(self) -> None:
        self._by_hash.clear()
        self._by_phone.clear()
        self._newest_timestamp = None
