"""
Audit service: the append-only trail of security-relevant and
data-mutating actions, plus the read side used by the admin panel.

Recording is best-effort observability: AuditRecorder.record never
raises. A failure to persist an entry is rolled back, logged to the
operational log and reported as None. The primary operation has
already been committed by the time record() is called, so an audit
failure can never undo it.

Redaction is the caller's job: pass snapshots through
sanitize_for_log before handing them to the recorder.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from fastapi.encoders import jsonable_encoder
from sqlalchemy import select, func
from sqlalchemy.orm import Session, joinedload

from donation_tracker.errors import NotFoundError
from donation_tracker.models.admin import Admin
from donation_tracker.models.audit_log import AuditLog
from donation_tracker.models.enums import AuditAction

logger = logging.getLogger(__name__)

REDACTED = "[REDACTED]"
SENSITIVE_FIELDS = frozenset({
    "password",
    "password_hash",
    "token",
    "old_password",
    "new_password",
    "current_password",
})

MAX_PAGE_SIZE = 100
MIN_STATS_DAYS = 1
MAX_STATS_DAYS = 365
DEFAULT_STATS_DAYS = 30


def clamp_stats_days(days: Any) -> int:
    """Parse a stats window; missing, zero or unparseable means 30, then clamp to 1..365."""
    try:
        days = int(days)
    except (TypeError, ValueError):
        days = 0
    return min(max(days or DEFAULT_STATS_DAYS, MIN_STATS_DAYS), MAX_STATS_DAYS)


def sanitize_for_log(obj: Any, sensitive_fields=SENSITIVE_FIELDS) -> Any:
    """Return a copy of obj with sensitive keys replaced by REDACTED."""
    if not isinstance(obj, dict):
        return obj
    return {
        key: REDACTED if key in sensitive_fields else value
        for key, value in obj.items()
    }


@dataclass(frozen=True)
class RequestContext:
    """Network provenance of the request that triggered an action."""
    ip_address: str | None = None
    user_agent: str | None = None

    @classmethod
    def from_request(cls, request) -> "RequestContext":
        return cls(
            ip_address=client_ip(request),
            user_agent=request.headers.get("user-agent"),
        )


def client_ip(request) -> str | None:
    """
    Resolve the caller's IP behind a proxy.

    First X-Forwarded-For entry, else X-Real-IP, else the
    socket address.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    if request.client is not None:
        return request.client.host
    return None


class AuditRecorder:
    """Appends audit entries on behalf of any service."""

    def __init__(self, db: Session):
        self.db = db

    def record(
        self,
        action: AuditAction,
        actor_id: int | None = None,
        resource_type: str | None = None,
        resource_id: int | None = None,
        before: dict | None = None,
        after: dict | None = None,
        context: RequestContext | None = None,
    ) -> AuditLog | None:
        context = context or RequestContext()
        try:
            entry = AuditLog(
                admin_id=actor_id,
                action=action,
                resource_type=resource_type,
                resource_id=resource_id,
                old_values=jsonable_encoder(before) if before is not None else None,
                new_values=jsonable_encoder(after) if after is not None else None,
                ip_address=context.ip_address,
                user_agent=context.user_agent,
            )
            self.db.add(entry)
            self.db.commit()
            return entry
        except Exception:
            logger.exception(
                "Failed to write audit entry %s for actor %s", action, actor_id
            )
            try:
                self.db.rollback()
            except Exception:
                logger.exception("Rollback after audit failure also failed")
            return None


class AuditLogService:
    """Read side of the audit trail."""

    def __init__(self, db: Session):
        self.db = db

    def _filters(
        self,
        action: AuditAction | None,
        admin_id: int | None,
        resource_type: str | None,
        date_from: datetime | None,
        date_to: datetime | None,
    ) -> list:
        conditions = []
        if action is not None:
            conditions.append(AuditLog.action == action)
        if admin_id is not None:
            conditions.append(AuditLog.admin_id == admin_id)
        if resource_type:
            conditions.append(AuditLog.resource_type == resource_type)
        if date_from is not None:
            conditions.append(AuditLog.created_at >= date_from)
        if date_to is not None:
            conditions.append(AuditLog.created_at <= date_to)
        return conditions

    def list_logs(
        self,
        page: int = 1,
        limit: int = 50,
        action: AuditAction | None = None,
        admin_id: int | None = None,
        resource_type: str | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
    ) -> dict:
        """Return one page of entries, newest first, with pagination info."""
        page = max(page, 1)
        limit = min(max(limit, 1), MAX_PAGE_SIZE)
        conditions = self._filters(action, admin_id, resource_type, date_from, date_to)

        logs = self.db.execute(
            select(AuditLog)
            .options(joinedload(AuditLog.admin))
            .where(*conditions)
            .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
            .limit(limit)
            .offset((page - 1) * limit)
        ).scalars().all()

        total = self.db.execute(
            select(func.count(AuditLog.id)).where(*conditions)
        ).scalar_one()

        return {
            "logs": list(logs),
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": math.ceil(total / limit),
            },
        }

    def get_log(self, log_id: int) -> AuditLog:
        entry = self.db.get(AuditLog, log_id)
        if not entry:
            raise NotFoundError(f"Audit log entry {log_id} not found")
        return entry

    def stats(self, days: int | None = None) -> dict:
        """
        Aggregate activity over the last `days` days.

        days goes through clamp_stats_days, so callers can pass the
        raw query value.
        """
        days = clamp_stats_days(days)
        since = datetime.utcnow() - timedelta(days=days)

        count = func.count(AuditLog.id).label("count")
        by_action = self.db.execute(
            select(AuditLog.action, count)
            .where(AuditLog.created_at >= since)
            .group_by(AuditLog.action)
            .order_by(count.desc())
        ).all()

        actions_count = func.count(AuditLog.id).label("actions_count")
        by_admin = self.db.execute(
            select(Admin.email, Admin.full_name, actions_count)
            .join(Admin, AuditLog.admin_id == Admin.id)
            .where(AuditLog.created_at >= since)
            .group_by(Admin.id, Admin.email, Admin.full_name)
            .order_by(actions_count.desc())
            .limit(10)
        ).all()

        day = func.date(AuditLog.created_at).label("date")
        daily = self.db.execute(
            select(day, func.count(AuditLog.id).label("count"))
            .where(AuditLog.created_at >= since)
            .group_by(day)
            .order_by(day.desc())
        ).all()

        return {
            "period_days": days,
            "by_action": [
                {"action": row.action.value, "count": row.count}
                for row in by_action
            ],
            "by_admin": [
                {
                    "email": row.email,
                    "full_name": row.full_name,
                    "actions_count": row.actions_count,
                }
                for row in by_admin
            ],
            "daily_activity": [
                {"date": str(row.date), "count": row.count} for row in daily
            ],
        }
