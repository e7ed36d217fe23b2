"""Inbound message and stored-record shapes shared across payguard."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Message:
    """A captured notification message.

    Attributes:
        raw_text: Message body exactly as delivered by the carrier.
        sender_address: Originating address (short code or number).
        arrival_timestamp: Arrival time in epoch milliseconds.
        phone: Counterparty phone number when the listener already
            extracted it.  ``None`` means "extract from the text".
    """

    raw_text: str
    sender_address: str = ""
    arrival_timestamp: int = 0
    phone: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class TransactionRecord:
    """A stored transaction as exposed by the external record store.

    ``amount`` may be missing for records written before amounts were
    stored separately; it is then re-extracted from ``raw_message``.
    """

    phone: str
    raw_message: str
    timestamp: int
    amount: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
