"""
Read access to the audit trail for any authenticated admin.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from donation_tracker.api.deps import http_error, require_admin
from donation_tracker.api.rate_limit import admin_limit
from donation_tracker.errors import DomainError
from donation_tracker.models.base import get_db
from donation_tracker.models.enums import AuditAction
from donation_tracker.schemas.audit_log import AuditLogResponse, AuditLogPage, AuditStats
from donation_tracker.security.guard import CurrentAdmin
from donation_tracker.services.audit_service import AuditLogService, clamp_stats_days
from donation_tracker.services.cache import ReadCache, get_cache, audit_stats_key, TTL_AUDIT_STATS

router = APIRouter(prefix="/api/admin", tags=["Audit Logs"])


@router.get("/audit-logs", response_model=AuditLogPage)
@admin_limit
def list_audit_logs(
    request: Request,
    page: int = Query(default=1),
    limit: int = Query(default=50),
    action: AuditAction | None = Query(default=None),
    admin_id: int | None = Query(default=None),
    resource_type: str | None = Query(default=None),
    date_from: datetime | None = Query(default=None),
    date_to: datetime | None = Query(default=None),
    admin: CurrentAdmin = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Filterable, paginated trail, newest first."""
    result = AuditLogService(db).list_logs(
        page=page,
        limit=limit,
        action=action,
        admin_id=admin_id,
        resource_type=resource_type,
        date_from=date_from,
        date_to=date_to,
    )
    return AuditLogPage(
        logs=[AuditLogResponse.from_entry(entry) for entry in result["logs"]],
        pagination=result["pagination"],
    )


# Declared before /audit-logs/{log_id} so "stats" is not parsed as an id
@router.get("/audit-logs/stats", response_model=AuditStats)
@admin_limit
def audit_stats(
    request: Request,
    days: str | None = Query(default=None),
    admin: CurrentAdmin = Depends(require_admin),
    db: Session = Depends(get_db),
    cache: ReadCache = Depends(get_cache),
):
    """Activity summary. days is clamped to 1..365, default 30."""
    period = clamp_stats_days(days)
    service = AuditLogService(db)
    return cache.get_or_set(
        audit_stats_key(period),
        lambda: service.stats(period),
        TTL_AUDIT_STATS,
    )


@router.get("/audit-logs/{log_id}", response_model=AuditLogResponse)
@admin_limit
def get_audit_log(
    request: Request,
    log_id: int,
    admin: CurrentAdmin = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        return AuditLogResponse.from_entry(AuditLogService(db).get_log(log_id))
    except DomainError as e:
        raise http_error(e)
