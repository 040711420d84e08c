"""
Published daily digests and feature settings.

A DailyHash row is keyed by calendar date. Regenerating a
date overwrites the previous digest so it can be corrected
before the date is considered closed.
"""

from datetime import datetime, date

from sqlalchemy import String, Date, DateTime, Integer
from sqlalchemy.orm import Mapped, mapped_column

from donation_tracker.models.base import Base


class DailyHash(Base):
    __tablename__ = "daily_hashes"

    id: Mapped[int] = mapped_column(primary_key=True)
    date: Mapped[date] = mapped_column(Date, unique=True, nullable=False)
    hash: Mapped[str] = mapped_column(String(64), nullable=False)
    transactions_count: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    def __repr__(self) -> str:
        return f"<DailyHash {self.date} {self.hash[:12]}>"


class Setting(Base):
    """Simple key/value runtime settings (e.g. verification_enabled)."""

    __tablename__ = "settings"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[str] = mapped_column(String(255), nullable=False)
