"""
Tests for publishing and verifying daily digests.
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from donation_tracker.errors import FeatureDisabledError, NotFoundError
from donation_tracker.models import DailyHash, Donation, DonationStatus
from donation_tracker.security.integrity import generate_daily_hash
from donation_tracker.services.verification_service import VerificationService

DAY = date(2024, 3, 1)


@pytest.fixture
def day_of_donations(db_session, make_campaign):
    """Three completed donations on DAY, plus noise on other days and statuses."""
    campaign = make_campaign()
    rows = [
        Donation(campaign_id=campaign.id, amount=Decimal("100.00"), created_at=datetime(2024, 3, 1, 9, 0, 0)),
        Donation(campaign_id=campaign.id, amount=Decimal("250.50"), created_at=datetime(2024, 3, 1, 12, 30, 0)),
        Donation(campaign_id=campaign.id, amount=Decimal("75.25"), created_at=datetime(2024, 3, 1, 23, 59, 59)),
        Donation(campaign_id=campaign.id, amount=Decimal("999.00"), created_at=datetime(2024, 3, 2, 0, 0, 0)),
        Donation(
            campaign_id=campaign.id, amount=Decimal("500.00"),
            created_at=datetime(2024, 3, 1, 15, 0, 0), status=DonationStatus.PENDING,
        ),
    ]
    db_session.add_all(rows)
    db_session.commit()
    return campaign, rows[:3]


class TestFeatureFlag:

    def test_disabled_by_default(self, db_session):
        service = VerificationService(db_session)
        assert service.is_enabled() is False
        with pytest.raises(FeatureDisabledError):
            service.require_enabled()

    def test_toggle(self, db_session):
        service = VerificationService(db_session)
        service.set_enabled(True)
        db_session.commit()
        assert service.is_enabled() is True

        service.set_enabled(False)
        db_session.commit()
        assert service.is_enabled() is False


class TestTransactionsForDate:

    def test_selects_completed_donations_of_the_day(self, db_session, day_of_donations):
        _, expected = day_of_donations
        transactions = VerificationService(db_session).transactions_for_date(DAY)

        assert [t["id"] for t in transactions] == [d.id for d in expected]
        assert transactions[1]["amount"] == Decimal("250.50")


class TestGenerateAndVerify:

    def test_generate_then_verify(self, db_session, day_of_donations):
        """Publish a digest, then recompute it from stored data."""
        service = VerificationService(db_session)
        published = service.generate_for_date(DAY)
        db_session.commit()

        assert published.transactions_count == 3
        result = service.verify_date(DAY)
        assert result["valid"] is True
        assert result["calculated_hash"] == result["published_hash"] == published.hash

    def test_digest_matches_canonical_lines(self, db_session, day_of_donations):
        campaign, donations = day_of_donations
        expected = generate_daily_hash([
            {"id": donations[0].id, "amount": "100.00", "timestamp": "2024-03-01T09:00:00", "campaign_id": campaign.id},
            {"id": donations[1].id, "amount": "250.50", "timestamp": "2024-03-01T12:30:00", "campaign_id": campaign.id},
            {"id": donations[2].id, "amount": "75.25", "timestamp": "2024-03-01T23:59:59", "campaign_id": campaign.id},
        ])

        assert VerificationService(db_session).generate_for_date(DAY).hash == expected

    def test_tampering_is_detected(self, db_session, day_of_donations):
        _, donations = day_of_donations
        service = VerificationService(db_session)
        service.generate_for_date(DAY)
        db_session.commit()

        donations[1].amount = Decimal("25.05")
        db_session.commit()

        result = service.verify_date(DAY)
        assert result["valid"] is False
        assert result["calculated_hash"] != result["published_hash"]

    def test_regenerate_overwrites(self, db_session, day_of_donations):
        _, donations = day_of_donations
        service = VerificationService(db_session)
        first = service.generate_for_date(DAY).hash
        db_session.commit()

        donations[0].amount = Decimal("101.00")
        db_session.commit()
        second = service.generate_for_date(DAY).hash
        db_session.commit()

        assert first != second
        assert db_session.query(DailyHash).count() == 1

    def test_no_transactions(self, db_session):
        with pytest.raises(NotFoundError):
            VerificationService(db_session).generate_for_date(DAY)

    def test_verify_unpublished_date(self, db_session, day_of_donations):
        with pytest.raises(NotFoundError):
            VerificationService(db_session).verify_date(DAY)


class TestReadSide:

    def test_export_csv(self, db_session, day_of_donations):
        campaign, donations = day_of_donations
        body = VerificationService(db_session).export_csv(DAY)
        lines = body.strip().split("\n")

        assert lines[0] == "ID,Campaign ID,Amount,Timestamp"
        assert lines[1] == f"{donations[0].id},{campaign.id},100.00,2024-03-01T09:00:00"
        assert len(lines) == 4

    def test_export_empty_day(self, db_session):
        with pytest.raises(NotFoundError):
            VerificationService(db_session).export_csv(DAY)

    def test_list_hashes_newest_first(self, db_session):
        db_session.add_all([
            DailyHash(date=date(2024, 3, 1), hash="a" * 64, transactions_count=1),
            DailyHash(date=date(2024, 3, 3), hash="c" * 64, transactions_count=1),
            DailyHash(date=date(2024, 3, 2), hash="b" * 64, transactions_count=1),
        ])
        db_session.commit()

        hashes = VerificationService(db_session).list_hashes()
        assert [h.date.day for h in hashes] == [3, 2, 1]

    def test_get_missing_hash(self, db_session):
        with pytest.raises(NotFoundError):
            VerificationService(db_session).get_hash(DAY)
