"""Unit tests for stateless conflict detection."""

import pytest

from payguard.dedup import ConflictDetector, ConflictType
from payguard.models import TransactionRecord

pytestmark = [pytest.mark.unit, pytest.mark.dedup]

PHONE = "254722918264"


@pytest.fixture
def detector(config):
    return ConflictDetector(config)


def record(timestamp, amount=5000.0, phone=PHONE, raw="KES 5,000 received"):
    return TransactionRecord(phone=phone, raw_message=raw, timestamp=timestamp, amount=amount)


class TestConflictDetector:
    """Test time-window conflict classification."""

    def test_no_records(self, detector, base_ts):
        result = detector.detect(PHONE, 5000, base_ts, [])
        assert not result.has_conflict
        assert result.type == ConflictType.NONE
        assert result.confidence_score == 0.0

    def test_exact_duplicate_within_minute(self, detector, base_ts):
        existing = record(base_ts)
        result = detector.detect("0722918264", 5000, base_ts + 10000, [existing])
        assert result.has_conflict
        assert result.type == ConflictType.EXACT_DUPLICATE
        assert result.matched_record is existing
        assert 90 <= result.confidence_score <= 100

    def test_exact_confidence_decays(self, detector, base_ts):
        existing = [record(base_ts)]
        at_zero = detector.detect(PHONE, 5000, base_ts, existing)
        at_edge = detector.detect(PHONE, 5000, base_ts + 60000, existing)
        assert at_zero.confidence_score == 100.0
        assert at_edge.confidence_score == 90.0

    def test_similar_transaction_within_five_minutes(self, detector, base_ts):
        result = detector.detect(PHONE, 5000, base_ts + 120000, [record(base_ts)])
        assert result.type == ConflictType.SIMILAR_TRANSACTION
        assert 75 <= result.confidence_score <= 90

    def test_outside_windows(self, detector, base_ts):
        result = detector.detect(PHONE, 5000, base_ts + 300001, [record(base_ts)])
        assert not result.has_conflict

    def test_different_amount(self, detector, base_ts):
        result = detector.detect(PHONE, 5001, base_ts + 1000, [record(base_ts)])
        assert not result.has_conflict

    def test_different_phone(self, detector, base_ts):
        result = detector.detect("254733123456", 5000, base_ts + 1000, [record(base_ts)])
        assert not result.has_conflict

    def test_amount_extracted_from_stored_message(self, detector, base_ts):
        legacy = record(base_ts, amount=None, raw="Confirmed. Ksh 5,000.00 from 0722918264")
        result = detector.detect(PHONE, 5000, base_ts + 5000, [legacy])
        assert result.type == ConflictType.EXACT_DUPLICATE

    def test_nearest_record_wins(self, detector, base_ts):
        old = record(base_ts)
        recent = record(base_ts + 200000)
        result = detector.detect(PHONE, 5000, base_ts + 230000, [old, recent])
        assert result.matched_record is recent
        assert result.type == ConflictType.EXACT_DUPLICATE

    def test_out_of_order_record(self, detector, base_ts):
        later = record(base_ts + 30000)
        result = detector.detect(PHONE, 5000, base_ts, [later])
        assert result.type == ConflictType.EXACT_DUPLICATE

    def test_missing_amount(self, detector, base_ts):
        result = detector.detect(PHONE, None, base_ts, [record(base_ts)])
        assert not result.has_conflict
