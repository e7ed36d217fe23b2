"""Declarative pattern tables used by the validators.

Every documented input format lives here as data so validators stay
free of inline regexes.
"""

from __future__ import annotations

import re
from typing import Dict, Pattern, Tuple

# ---------------------------------------------------------------------------
# Amounts
# ---------------------------------------------------------------------------

# A malformed token such as "12,3456" or "1000.555" must not match a shorter prefix.
_NUMBER = r"(?<!\d)(?<!\d[,.])(\d{1,3}(?:,\d{3})+(?:\.\d{1,2})?|\d+(?:\.\d{1,2})?)(?![\d,.]*\d)"

# Ordered: currency prefix first, suffix forms only as a fallback.
AMOUNT_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"\b(?:KES|KSHS?)\.?\s?" + _NUMBER, re.IGNORECASE),  # KES 1,234.50 / Ksh5000 / Kshs. 20
    re.compile(_NUMBER + r"\s?(?:shillings?|KES|KSHS?)\b", re.IGNORECASE),  # 5000 shillings / 5,000 KES
)

# ---------------------------------------------------------------------------
# Phones
# ---------------------------------------------------------------------------

NATIONAL_NUMBER_LENGTH = 9

# Phone-like tokens inside free text: +254..., 254..., 07.../01..., bare 7...
PHONE_IN_TEXT = re.compile(r"(?<![\d+])(?:\+?254|0)?[17]\d{8}(?!\d)")

# Three-digit network prefix (after the country code) -> provider label.
PROVIDER_PREFIXES: Dict[str, Tuple[str, ...]] = {
    "M-PESA": (
        "700", "701", "702", "703", "704", "705", "706", "707", "708", "709",
        "710", "711", "712", "713", "714", "715", "716", "717", "718", "719",
        "720", "721", "722", "723", "724", "725", "726", "727", "728", "729",
        "740", "741", "742", "743", "745", "746", "748",
        "757", "758", "759", "768", "769",
        "790", "791", "792", "793", "794", "795", "796", "797", "798", "799",
        "110", "111", "112", "113", "114", "115",
    ),
    "Airtel": (
        "730", "731", "732", "733", "734", "735", "736", "737", "738", "739",
        "750", "751", "752", "753", "754", "755", "756", "762",
        "780", "781", "782", "783", "784", "785", "786", "787", "788", "789",
        "100", "101", "102",
    ),
    "Telkom": (
        "770", "771", "772", "773", "774", "775", "776", "777", "778", "779",
    ),
    "Equitel": ("763", "764", "765", "766"),
}

UNKNOWN_PROVIDER = "Unknown"

# ---------------------------------------------------------------------------
# Suspicious digit runs
# ---------------------------------------------------------------------------

REPEATED_DIGITS = re.compile(r"(\d)\1{4,}")  # 55555
SEQUENTIAL_DIGITS = re.compile(r"01234|12345|23456|34567|45678|56789")

# ---------------------------------------------------------------------------
# Authenticity heuristics
# ---------------------------------------------------------------------------

AUTHENTIC_SENDERS: Tuple[str, ...] = (
    "M-PESA",
    "MPESA",
    "SAFARICOM",
    "EQUITEL",
    "AIRTEL",
    "T-KASH",
    "BANK",
)

PAYMENT_KEYWORDS: Tuple[Pattern[str], ...] = tuple(
    re.compile(rf"\b{keyword}(?![a-z])", re.IGNORECASE)
    for keyword in (
        "confirmed",
        "received",
        "sent",
        "paid",
        "payment",
        "deposit",
        "withdrawal",
        "transferred",
        "kshs?",
        "kes",
    )
)

MIN_KEYWORD_MATCHES = 2

# 8-12 uppercase alphanumerics with at least one letter and one digit.
REFERENCE_CODE = re.compile(r"\b(?=[A-Z0-9]*\d)(?=[A-Z0-9]*[A-Z])[A-Z0-9]{8,12}\b")
DATE = re.compile(r"\b\d{1,2}[/\-]\d{1,2}[/\-]\d{2,4}\b")
TIME = re.compile(r"\b\d{1,2}:\d{2}(?:\s?[AP]M)?\b", re.IGNORECASE)

INDICATOR_WEIGHT = 20
UNUSUAL_AMOUNT_PENALTY = 5
