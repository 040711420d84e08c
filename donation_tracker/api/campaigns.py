"""
Admin campaign management.

Every successful mutation is committed, then the cached campaign
views are dropped, then the change is audited.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from donation_tracker.api.deps import get_request_context, http_error, require_admin
from donation_tracker.api.rate_limit import admin_limit
from donation_tracker.errors import DomainError
from donation_tracker.models.base import get_db
from donation_tracker.models.enums import AuditAction, ResourceType
from donation_tracker.schemas.auth import MessageResponse
from donation_tracker.schemas.campaign import (
    CampaignCreate,
    CampaignUpdate,
    CampaignResponse,
    CampaignMutationResponse,
)
from donation_tracker.security.guard import CurrentAdmin
from donation_tracker.services.audit_service import AuditRecorder, RequestContext
from donation_tracker.services.cache import ReadCache, get_cache, invalidate_on_campaign
from donation_tracker.services.campaign_service import CampaignService, campaign_snapshot

router = APIRouter(prefix="/api/admin", tags=["Admin Campaigns"])


@router.get("/campaigns", response_model=list[CampaignResponse])
@admin_limit
def list_campaigns(
    request: Request,
    admin: CurrentAdmin = Depends(require_admin),
    db: Session = Depends(get_db),
    cache: ReadCache = Depends(get_cache),
):
    """All campaigns, active or not."""
    return CampaignService(db, cache).list_all()


@router.post("/campaigns", response_model=CampaignMutationResponse, status_code=201)
@admin_limit
def create_campaign(
    request: Request,
    campaign_data: CampaignCreate,
    admin: CurrentAdmin = Depends(require_admin),
    db: Session = Depends(get_db),
    cache: ReadCache = Depends(get_cache),
    context: RequestContext = Depends(get_request_context),
):
    service = CampaignService(db, cache)
    try:
        campaign = service.create_campaign(campaign_data)
        db.commit()
    except DomainError as e:
        db.rollback()
        raise http_error(e)
    invalidate_on_campaign(cache, campaign.id)

    response = CampaignMutationResponse(campaign=campaign)
    AuditRecorder(db).record(
        AuditAction.CREATE_CAMPAIGN,
        actor_id=admin.id,
        resource_type=ResourceType.CAMPAIGN.value,
        resource_id=campaign.id,
        after=campaign_snapshot(campaign),
        context=context,
    )
    return response


@router.put("/campaigns/{campaign_id}", response_model=CampaignMutationResponse)
@admin_limit
def update_campaign(
    request: Request,
    campaign_id: int,
    campaign_data: CampaignUpdate,
    admin: CurrentAdmin = Depends(require_admin),
    db: Session = Depends(get_db),
    cache: ReadCache = Depends(get_cache),
    context: RequestContext = Depends(get_request_context),
):
    """Partial update: only the fields sent are changed."""
    service = CampaignService(db, cache)
    try:
        campaign, before = service.update_campaign(campaign_id, campaign_data)
        db.commit()
    except DomainError as e:
        db.rollback()
        raise http_error(e)
    invalidate_on_campaign(cache, campaign_id)

    response = CampaignMutationResponse(campaign=campaign)
    AuditRecorder(db).record(
        AuditAction.UPDATE_CAMPAIGN,
        actor_id=admin.id,
        resource_type=ResourceType.CAMPAIGN.value,
        resource_id=campaign_id,
        before=before,
        after=campaign_snapshot(campaign),
        context=context,
    )
    return response


@router.delete("/campaigns/{campaign_id}", response_model=MessageResponse)
@admin_limit
def delete_campaign(
    request: Request,
    campaign_id: int,
    admin: CurrentAdmin = Depends(require_admin),
    db: Session = Depends(get_db),
    cache: ReadCache = Depends(get_cache),
    context: RequestContext = Depends(get_request_context),
):
    service = CampaignService(db, cache)
    try:
        before = service.delete_campaign(campaign_id)
        db.commit()
    except DomainError as e:
        db.rollback()
        raise http_error(e)
    invalidate_on_campaign(cache, campaign_id)

    AuditRecorder(db).record(
        AuditAction.DELETE_CAMPAIGN,
        actor_id=admin.id,
        resource_type=ResourceType.CAMPAIGN.value,
        resource_id=campaign_id,
        before=before,
        context=context,
    )
    return MessageResponse(message="campaign deleted")
