"""
Audit log model.

Records every security-relevant or data-mutating action.
Every important action must be traceable to an actor, a
resource and a network origin.
"""

from datetime import datetime

from sqlalchemy import (
    String, DateTime, Integer, ForeignKey, JSON,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from donation_tracker.models.base import Base
from donation_tracker.models.enums import AuditAction


class AuditLog(Base):
    """
    Immutable record of a system event.

    Audit logs are append-only. The application never updates
    or deletes an audit record. admin_id is null for events
    without an authenticated actor (e.g. a failed login for an
    unknown email).
    """

    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(primary_key=True)
    admin_id: Mapped[int | None] = mapped_column(
        ForeignKey("admins.id"), nullable=True, index=True
    )
    action: Mapped[AuditAction] = mapped_column(
        SAEnum(AuditAction, name="audit_action_enum", create_constraint=True),
        nullable=False,
        index=True,
    )
    resource_type: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )
    resource_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    old_values: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    new_values: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False, index=True
    )

    admin: Mapped["Admin | None"] = relationship()

    def __repr__(self) -> str:
        return f"<AuditLog {self.action.value} by {self.admin_id}>"
