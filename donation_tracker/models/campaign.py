"""
Fundraising campaign model.

current_amount is a running total maintained by the donation
service when a completed donation is recorded.
"""

from datetime import datetime, date
from decimal import Decimal

from sqlalchemy import String, Text, Boolean, Date, DateTime, Numeric
from sqlalchemy.orm import Mapped, mapped_column, relationship

from donation_tracker.models.base import Base


class Campaign(Base):
    __tablename__ = "campaigns"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    goal_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False
    )
    current_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    image_url: Mapped[str | None] = mapped_column(
        String(500), nullable=True
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    donations: Mapped[list["Donation"]] = relationship(
        back_populates="campaign"
    )
    reports: Mapped[list["Report"]] = relationship(
        back_populates="campaign"
    )

    @property
    def progress_percentage(self) -> int:
        if not self.goal_amount or self.goal_amount <= 0:
            return 0
        return round(self.current_amount * 100 / self.goal_amount)

    def __repr__(self) -> str:
        return f"<Campaign {self.id} {self.title!r}>"
