"""
Tests for the daily transaction digest.
"""

import hashlib
from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace

from donation_tracker.security.integrity import (
    canonical_line,
    generate_daily_hash,
    verify_daily_hash,
)


def tx(id, amount, campaign_id=1, ts=None):
    return {
        "id": id,
        "amount": Decimal(amount),
        "timestamp": ts or datetime(2024, 3, 1, 10, 0, id),
        "campaign_id": campaign_id,
    }


TRANSACTIONS = [tx(1, "100.00"), tx(2, "250.50", campaign_id=2), tx(3, "1000.00")]


class TestGenerateDailyHash:

    def test_matches_hand_computed_digest(self):
        transactions = [
            tx(1, "100.00", ts=datetime(2024, 3, 1, 10, 0, 0)),
            tx(2, "5.50", campaign_id=7, ts=datetime(2024, 3, 1, 11, 30, 0)),
        ]
        payload = "1|100.00|2024-03-01T10:00:00|1\n2|5.50|2024-03-01T11:30:00|7"
        expected = hashlib.sha256(payload.encode("utf-8")).hexdigest()

        assert generate_daily_hash(transactions) == expected

    def test_is_deterministic(self):
        assert generate_daily_hash(TRANSACTIONS) == generate_daily_hash(list(TRANSACTIONS))

    def test_is_64_lowercase_hex(self):
        digest = generate_daily_hash(TRANSACTIONS)
        assert len(digest) == 64
        assert digest == digest.lower()

    def test_empty_is_none(self):
        assert generate_daily_hash([]) is None
        assert generate_daily_hash(None) is None

    def test_order_matters(self):
        reordered = [TRANSACTIONS[1], TRANSACTIONS[0], TRANSACTIONS[2]]
        assert generate_daily_hash(reordered) != generate_daily_hash(TRANSACTIONS)

    def test_accepts_objects(self):
        as_objects = [SimpleNamespace(**t) for t in TRANSACTIONS]
        assert generate_daily_hash(as_objects) == generate_daily_hash(TRANSACTIONS)

    def test_canonical_line(self):
        line = canonical_line(tx(42, "12.30", campaign_id=3, ts=datetime(2024, 1, 2, 3, 4, 5)))
        assert line == "42|12.30|2024-01-02T03:04:05|3"


class TestVerifyDailyHash:

    def test_valid_digest(self):
        digest = generate_daily_hash(TRANSACTIONS)
        assert verify_daily_hash(TRANSACTIONS, digest) is True

    def test_uppercase_digest_accepted(self):
        digest = generate_daily_hash(TRANSACTIONS)
        assert verify_daily_hash(TRANSACTIONS, digest.upper()) is True

    def test_tampered_amount_fails(self):
        digest = generate_daily_hash(TRANSACTIONS)
        tampered = [dict(t) for t in TRANSACTIONS]
        tampered[1]["amount"] = Decimal("250.51")
        assert verify_daily_hash(tampered, digest) is False

    def test_removed_transaction_fails(self):
        digest = generate_daily_hash(TRANSACTIONS)
        assert verify_daily_hash(TRANSACTIONS[:-1], digest) is False

    def test_nothing_to_verify_fails(self):
        assert verify_daily_hash([], "0" * 64) is False
        assert verify_daily_hash(TRANSACTIONS, None) is False
