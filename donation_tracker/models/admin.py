"""
Administrator account model.

Admins are never hard-deleted. Deactivation flips is_active,
which is reversible by a super-admin.

Lockout state lives on the row itself: failed_login_attempts
counts consecutive failures and locked_until, when set and in
the future, rejects every login attempt.
"""

from datetime import datetime

from sqlalchemy import (
    String, Boolean, DateTime, Integer, ForeignKey,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column

from donation_tracker.models.base import Base
from donation_tracker.models.enums import AdminRole


class Admin(Base):
    __tablename__ = "admins"

    id: Mapped[int] = mapped_column(primary_key=True)
    # Always stored lower-case so lookups are case-insensitive
    email: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[AdminRole] = mapped_column(
        SAEnum(
            AdminRole,
            name="admin_role_enum",
            create_constraint=True,
            values_callable=lambda roles: [r.value for r in roles],
        ),
        nullable=False,
        default=AdminRole.ADMIN,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
    failed_login_attempts: Mapped[int | None] = mapped_column(
        Integer, nullable=True, default=0
    )
    locked_until: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True, default=None
    )
    last_login: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True, default=None
    )
    last_login_ip: Mapped[str | None] = mapped_column(
        String(64), nullable=True, default=None
    )
    created_by: Mapped[int | None] = mapped_column(
        ForeignKey("admins.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def is_locked(self, now: datetime | None = None) -> bool:
        """True while the lockout window is open."""
        now = now or datetime.utcnow()
        return self.locked_until is not None and self.locked_until > now

    def __repr__(self) -> str:
        return f"<Admin {self.email} ({self.role.value})>"
