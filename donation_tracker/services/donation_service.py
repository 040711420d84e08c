"""
Donation service: recording donations and the public live feed.

Anonymity is decided when the donation is written: an anonymous
donation never reaches the email cipher and stores no PII at all.
Non-anonymous donations store the email encrypted, and it is
decrypted only for display.

Recording a completed donation also raises the campaign's
current_amount. The caller controls the commit.
"""

import math

from sqlalchemy import select, func, update, case
from sqlalchemy.orm import Session

from donation_tracker.errors import NotFoundError
from donation_tracker.models.campaign import Campaign
from donation_tracker.models.donation import Donation
from donation_tracker.models.enums import DonationStatus
from donation_tracker.schemas.donation import DonationCreate, PublicDonationCreate
from donation_tracker.security.email_cipher import encrypt_email, decrypt_email
from donation_tracker.services import cache as cache_keys
from donation_tracker.services.cache import ReadCache

ANONYMOUS_DONOR = "Anonymous donor"
MAX_RECENT = 100
MAX_PAGE_SIZE = 100


class DonationService:

    def __init__(self, db: Session, cache: ReadCache | None = None):
        self.db = db
        self.cache = cache or ReadCache()

    def _record(
        self,
        campaign: Campaign,
        amount,
        donor_email: str | None,
        is_anonymous: bool,
        payment_method: str,
    ) -> Donation:
        encrypted = None
        if donor_email and not is_anonymous:
            encrypted = encrypt_email(donor_email)

        donation = Donation(
            campaign_id=campaign.id,
            amount=amount,
            donor_email_encrypted=encrypted,
            is_anonymous=is_anonymous,
            payment_method=payment_method,
            status=DonationStatus.COMPLETED,
        )
        self.db.add(donation)

        # Atomic increment, no read-modify-write
        self.db.execute(
            update(Campaign)
            .where(Campaign.id == campaign.id)
            .values(current_amount=Campaign.current_amount + amount)
            .execution_options(synchronize_session=False)
        )
        self.db.flush()
        self.db.expire(campaign, ["current_amount"])
        return donation

    def create_donation(self, request: DonationCreate) -> Donation:
        """Record a donation on behalf of an admin."""
        campaign = self.db.get(Campaign, request.campaign_id)
        if not campaign:
            raise NotFoundError(f"Campaign {request.campaign_id} not found")

        return self._record(
            campaign,
            request.amount,
            request.donor_email,
            request.is_anonymous,
            request.payment_method,
        )

    def create_public_donation(self, request: PublicDonationCreate) -> Donation:
        """Record a donation made through the public site."""
        campaign = self.db.get(Campaign, request.campaign_id)
        if not campaign or not campaign.is_active:
            raise NotFoundError("Campaign not found or inactive")

        return self._record(
            campaign,
            request.amount,
            request.donor_email,
            request.is_anonymous,
            "card",
        )

    def _donor_label(self, donation: Donation) -> str:
        if donation.is_anonymous or not donation.donor_email_encrypted:
            return ANONYMOUS_DONOR
        return decrypt_email(donation.donor_email_encrypted) or ANONYMOUS_DONOR

    def _load_recent(self, limit: int) -> list[dict]:
        rows = self.db.execute(
            select(Donation, Campaign.title)
            .join(Campaign, Donation.campaign_id == Campaign.id)
            .where(Donation.status == DonationStatus.COMPLETED)
            .order_by(Donation.created_at.desc(), Donation.id.desc())
            .limit(limit)
        ).all()
        return [
            {
                "id": donation.id,
                "amount": float(donation.amount),
                "donor": self._donor_label(donation),
                "campaign": title,
                "campaign_id": donation.campaign_id,
                "payment_method": donation.payment_method,
                "timestamp": donation.created_at.isoformat(),
            }
            for donation, title in rows
        ]

    def recent_donations(self, limit: int = 20) -> list[dict]:
        """Latest completed donations for the live feed."""
        limit = min(max(limit, 1), MAX_RECENT)
        return self.cache.get_or_set(
            cache_keys.recent_donations_key(limit),
            lambda: self._load_recent(limit),
            cache_keys.TTL_RECENT_DONATIONS,
        )

    def _load_statistics(self) -> dict:
        row = self.db.execute(
            select(
                func.coalesce(func.sum(Donation.amount), 0).label("total_amount"),
                func.count(func.distinct(
                    case(
                        (Donation.is_anonymous.is_(False), Donation.donor_email_encrypted),
                    )
                )).label("unique_donors"),
                func.count(Donation.id).label("total_donations"),
            ).where(Donation.status == DonationStatus.COMPLETED)
        ).one()
        return {
            "total_amount": float(row.total_amount),
            "unique_donors": int(row.unique_donors),
            "total_donations": int(row.total_donations),
        }

    def statistics(self) -> dict:
        """
        Totals across completed donations.

        unique_donors counts distinct ciphertexts. Because every
        encryption uses a fresh IV, the same donor giving twice is
        counted twice; the number is an upper bound.
        """
        return self.cache.get_or_set(
            cache_keys.STATISTICS_KEY,
            self._load_statistics,
            cache_keys.TTL_STATISTICS,
        )

    def list_donations(self, page: int = 1, limit: int = 50) -> dict:
        """Admin listing with decrypted donor emails."""
        page = max(page, 1)
        limit = min(max(limit, 1), MAX_PAGE_SIZE)

        rows = self.db.execute(
            select(Donation, Campaign.title)
            .join(Campaign, Donation.campaign_id == Campaign.id)
            .order_by(Donation.created_at.desc(), Donation.id.desc())
            .limit(limit)
            .offset((page - 1) * limit)
        ).all()
        total = self.db.execute(select(func.count(Donation.id))).scalar_one()

        donations = [
            {
                "id": donation.id,
                "amount": float(donation.amount),
                "donor_email": (
                    None
                    if donation.is_anonymous or not donation.donor_email_encrypted
                    else decrypt_email(donation.donor_email_encrypted)
                ),
                "is_anonymous": donation.is_anonymous,
                "campaign": title,
                "campaign_id": donation.campaign_id,
                "payment_method": donation.payment_method,
                "status": donation.status,
                "created_at": donation.created_at,
            }
            for donation, title in rows
        ]
        return {
            "donations": donations,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": math.ceil(total / limit),
            },
        }
