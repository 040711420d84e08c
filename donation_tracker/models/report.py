"""
Expense report model.

A report documents how campaign money was spent. The receipt
itself lives in external object storage; only its URL is kept.
"""

from datetime import datetime, date
from decimal import Decimal

from sqlalchemy import String, Text, Date, DateTime, Numeric, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from donation_tracker.models.base import Base


class Report(Base):
    __tablename__ = "reports"

    id: Mapped[int] = mapped_column(primary_key=True)
    campaign_id: Mapped[int] = mapped_column(
        ForeignKey("campaigns.id"), nullable=False, index=True
    )
    expense_date: Mapped[date] = mapped_column(Date, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    receipt_url: Mapped[str | None] = mapped_column(
        String(500), nullable=True
    )
    vendor_name: Mapped[str | None] = mapped_column(
        String(200), nullable=True
    )
    created_by: Mapped[int | None] = mapped_column(
        ForeignKey("admins.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    campaign: Mapped["Campaign"] = relationship(back_populates="reports")

    def __repr__(self) -> str:
        return f"<Report {self.id} {self.amount} for campaign {self.campaign_id}>"
