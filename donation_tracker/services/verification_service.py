"""
Verification service: publishing and checking daily digests.

A day's transactions are the completed donations whose created_at
falls on that calendar date (UTC), in ascending id order. Anyone
can download the day's data, recompute the digest with
security.integrity and compare it to the published one.

Everything except status and toggling sits behind the
verification_enabled setting.
"""

import csv
import io
import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from donation_tracker.errors import FeatureDisabledError, NotFoundError
from donation_tracker.models.daily_hash import DailyHash, Setting
from donation_tracker.models.donation import Donation
from donation_tracker.models.enums import DonationStatus
from donation_tracker.security.integrity import generate_daily_hash, verify_daily_hash

logger = logging.getLogger(__name__)

VERIFICATION_SETTING = "verification_enabled"
CSV_HEADER = ["ID", "Campaign ID", "Amount", "Timestamp"]
FEATURE_DISABLED = "verification is not enabled"
CENTS = Decimal("0.01")


class VerificationService:

    def __init__(self, db: Session):
        self.db = db

    # --- Feature flag ---

    def is_enabled(self) -> bool:
        setting = self.db.get(Setting, VERIFICATION_SETTING)
        return setting is not None and setting.value.lower() == "true"

    def set_enabled(self, enabled: bool) -> bool:
        """Upsert the flag. The caller controls the commit."""
        setting = self.db.get(Setting, VERIFICATION_SETTING)
        value = "true" if enabled else "false"
        if setting is None:
            self.db.add(Setting(key=VERIFICATION_SETTING, value=value))
        else:
            setting.value = value
        self.db.flush()
        logger.info("Public verification %s", "enabled" if enabled else "disabled")
        return enabled

    def require_enabled(self) -> None:
        if not self.is_enabled():
            raise FeatureDisabledError(FEATURE_DISABLED)

    # --- Digests ---

    def transactions_for_date(self, day: date) -> list[dict]:
        start = datetime.combine(day, time.min)
        end = start + timedelta(days=1)
        donations = self.db.execute(
            select(Donation)
            .where(
                Donation.status == DonationStatus.COMPLETED,
                Donation.created_at >= start,
                Donation.created_at < end,
            )
            .order_by(Donation.id.asc())
        ).scalars().all()
        return [
            {
                "id": d.id,
                "amount": d.amount.quantize(CENTS),
                "timestamp": d.created_at,
                "campaign_id": d.campaign_id,
            }
            for d in donations
        ]

    def generate_for_date(self, day: date) -> DailyHash:
        """
        Compute and publish the digest for a date.

        Regenerating overwrites the stored row. Raises NotFoundError
        when the date has no transactions.
        """
        transactions = self.transactions_for_date(day)
        digest = generate_daily_hash(transactions)
        if digest is None:
            raise NotFoundError(f"No transactions found for {day.isoformat()}")

        daily = self.db.execute(
            select(DailyHash).where(DailyHash.date == day)
        ).scalar_one_or_none()
        if daily is None:
            daily = DailyHash(date=day, hash=digest, transactions_count=len(transactions))
            self.db.add(daily)
        else:
            daily.hash = digest
            daily.transactions_count = len(transactions)
            daily.created_at = datetime.utcnow()
        self.db.flush()

        logger.info(
            "Published digest for %s over %d transactions", day, len(transactions)
        )
        return daily

    def get_hash(self, day: date) -> DailyHash:
        daily = self.db.execute(
            select(DailyHash).where(DailyHash.date == day)
        ).scalar_one_or_none()
        if daily is None:
            raise NotFoundError(f"No hash published for {day.isoformat()}")
        return daily

    def list_hashes(self, limit: int = 30) -> list[DailyHash]:
        limit = min(max(limit, 1), 365)
        return list(self.db.execute(
            select(DailyHash).order_by(DailyHash.date.desc()).limit(limit)
        ).scalars().all())

    def export_csv(self, day: date) -> str:
        """The day's transactions as CSV, in hashing order."""
        transactions = self.transactions_for_date(day)
        if not transactions:
            raise NotFoundError(f"No transactions found for {day.isoformat()}")

        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for t in transactions:
            writer.writerow([
                t["id"],
                t["campaign_id"],
                format(t["amount"], "f"),
                t["timestamp"].isoformat(),
            ])
        return buffer.getvalue()

    def verify_date(self, day: date) -> dict:
        """Recompute the digest for a date and compare it to the published one."""
        published = self.get_hash(day)
        transactions = self.transactions_for_date(day)
        return {
            "date": day,
            "published_hash": published.hash,
            "calculated_hash": generate_daily_hash(transactions),
            "transactions_count": len(transactions),
            "valid": verify_daily_hash(transactions, published.hash),
        }
