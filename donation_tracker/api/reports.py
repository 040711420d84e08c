"""
Admin expense report management.
"""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from donation_tracker.api.deps import get_request_context, http_error, require_admin
from donation_tracker.api.rate_limit import admin_limit
from donation_tracker.errors import DomainError
from donation_tracker.models.base import get_db
from donation_tracker.models.enums import AuditAction, ResourceType
from donation_tracker.schemas.auth import MessageResponse
from donation_tracker.schemas.report import (
    ReportCreate,
    ReportUpdate,
    ReportResponse,
    ReportMutationResponse,
)
from donation_tracker.security.guard import CurrentAdmin
from donation_tracker.services.audit_service import AuditRecorder, RequestContext
from donation_tracker.services.cache import ReadCache, get_cache, invalidate_on_report
from donation_tracker.services.report_service import ReportService, report_snapshot

router = APIRouter(prefix="/api/admin", tags=["Admin Reports"])


@router.get("/reports", response_model=list[ReportResponse])
@admin_limit
def list_reports(
    request: Request,
    campaign_id: int | None = Query(default=None),
    admin: CurrentAdmin = Depends(require_admin),
    db: Session = Depends(get_db),
    cache: ReadCache = Depends(get_cache),
):
    return ReportService(db, cache).list_reports(campaign_id)


@router.post("/reports", response_model=ReportMutationResponse, status_code=201)
@admin_limit
def create_report(
    request: Request,
    report_data: ReportCreate,
    admin: CurrentAdmin = Depends(require_admin),
    db: Session = Depends(get_db),
    cache: ReadCache = Depends(get_cache),
    context: RequestContext = Depends(get_request_context),
):
    service = ReportService(db, cache)
    try:
        report = service.create_report(report_data, created_by=admin.id)
        db.commit()
    except DomainError as e:
        db.rollback()
        raise http_error(e)
    invalidate_on_report(cache, report.campaign_id)

    response = ReportMutationResponse(report=report)
    AuditRecorder(db).record(
        AuditAction.CREATE_REPORT,
        actor_id=admin.id,
        resource_type=ResourceType.REPORT.value,
        resource_id=response.report.id,
        after=report_snapshot(report),
        context=context,
    )
    return response


@router.put("/reports/{report_id}", response_model=ReportMutationResponse)
@admin_limit
def update_report(
    request: Request,
    report_id: int,
    report_data: ReportUpdate,
    admin: CurrentAdmin = Depends(require_admin),
    db: Session = Depends(get_db),
    cache: ReadCache = Depends(get_cache),
    context: RequestContext = Depends(get_request_context),
):
    service = ReportService(db, cache)
    try:
        report, before = service.update_report(report_id, report_data)
        db.commit()
    except DomainError as e:
        db.rollback()
        raise http_error(e)
    invalidate_on_report(cache, report.campaign_id)

    response = ReportMutationResponse(report=report)
    AuditRecorder(db).record(
        AuditAction.UPDATE_REPORT,
        actor_id=admin.id,
        resource_type=ResourceType.REPORT.value,
        resource_id=report_id,
        before=before,
        after=report_snapshot(report),
        context=context,
    )
    return response


@router.delete("/reports/{report_id}", response_model=MessageResponse)
@admin_limit
def delete_report(
    request: Request,
    report_id: int,
    admin: CurrentAdmin = Depends(require_admin),
    db: Session = Depends(get_db),
    cache: ReadCache = Depends(get_cache),
    context: RequestContext = Depends(get_request_context),
):
    service = ReportService(db, cache)
    try:
        before = service.delete_report(report_id)
        db.commit()
    except DomainError as e:
        db.rollback()
        raise http_error(e)
    invalidate_on_report(cache, before["campaign_id"])

    AuditRecorder(db).record(
        AuditAction.DELETE_REPORT,
        actor_id=admin.id,
        resource_type=ResourceType.REPORT.value,
        resource_id=report_id,
        before=before,
        context=context,
    )
    return MessageResponse(message="report deleted")
