"""
Pydantic schemas for donations.

Donor emails arrive in plaintext and leave decrypted only in
admin listings; the database only ever sees ciphertext.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, EmailStr

from donation_tracker.models.enums import DonationStatus

MIN_PUBLIC_DONATION = Decimal("100")


class DonationCreate(BaseModel):
    """Donation recorded by an admin (e.g. a bank transfer)."""
    campaign_id: int
    amount: Decimal = Field(ge=1, decimal_places=2)
    donor_email: EmailStr | None = None
    is_anonymous: bool = False
    payment_method: str = Field(default="manual", min_length=1, max_length=50)


class PublicDonationCreate(BaseModel):
    campaign_id: int
    amount: Decimal = Field(ge=MIN_PUBLIC_DONATION, decimal_places=2)
    # Sent by the donation form. Accepted for client compatibility, never stored.
    donor_name: str | None = Field(default=None, max_length=100)
    donor_email: EmailStr | None = None
    is_anonymous: bool = False


class DonationCreated(BaseModel):
    id: int
    amount: float
    campaign_id: int
    campaign: str | None = None
    created_at: datetime


class DonationMutationResponse(BaseModel):
    success: bool = True
    message: str | None = None
    donation: DonationCreated


class RecentDonation(BaseModel):
    id: int
    amount: float
    donor: str
    campaign: str
    campaign_id: int
    payment_method: str
    timestamp: datetime


class AdminDonation(BaseModel):
    id: int
    amount: float
    donor_email: str | None
    is_anonymous: bool
    campaign: str
    campaign_id: int
    payment_method: str
    status: DonationStatus
    created_at: datetime


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class DonationPage(BaseModel):
    donations: list[AdminDonation]
    pagination: Pagination


class DonationStatistics(BaseModel):
    total_amount: float
    unique_donors: int
    total_donations: int
