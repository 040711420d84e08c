"""
Donation model.

Donations are recorded, not processed: there is no payment
gateway. Completed donations are the transactions that feed
the daily integrity hash.

The donor email is only ever stored encrypted, and only for
non-anonymous donations.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String, Boolean, DateTime, Numeric, ForeignKey,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from donation_tracker.models.base import Base
from donation_tracker.models.enums import DonationStatus


class Donation(Base):
    __tablename__ = "donations"

    id: Mapped[int] = mapped_column(primary_key=True)
    campaign_id: Mapped[int] = mapped_column(
        ForeignKey("campaigns.id"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    donor_email_encrypted: Mapped[str | None] = mapped_column(
        String(512), nullable=True
    )
    is_anonymous: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    payment_method: Mapped[str] = mapped_column(
        String(50), nullable=False, default="manual"
    )
    status: Mapped[DonationStatus] = mapped_column(
        SAEnum(
            DonationStatus,
            name="donation_status_enum",
            create_constraint=True,
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        nullable=False,
        default=DonationStatus.COMPLETED,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, index=True
    )

    campaign: Mapped["Campaign"] = relationship(back_populates="donations")

    def __repr__(self) -> str:
        return f"<Donation {self.id} {self.amount} ({self.status.value})>"
