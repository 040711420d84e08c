"""
Admin donation endpoints: paginated listing with decrypted donor
emails, and manual recording of offline donations.
"""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from donation_tracker.api.deps import get_request_context, http_error, require_admin
from donation_tracker.api.rate_limit import admin_limit
from donation_tracker.errors import DomainError
from donation_tracker.models.base import get_db
from donation_tracker.models.enums import AuditAction, ResourceType
from donation_tracker.schemas.donation import (
    DonationCreate,
    DonationCreated,
    DonationMutationResponse,
    DonationPage,
)
from donation_tracker.security.guard import CurrentAdmin
from donation_tracker.services.audit_service import AuditRecorder, RequestContext
from donation_tracker.services.cache import ReadCache, get_cache, invalidate_on_donation
from donation_tracker.services.donation_service import DonationService

router = APIRouter(prefix="/api/admin", tags=["Admin Donations"])


@router.get("/donations", response_model=DonationPage)
@admin_limit
def list_donations(
    request: Request,
    page: int = Query(default=1),
    limit: int = Query(default=50),
    admin: CurrentAdmin = Depends(require_admin),
    db: Session = Depends(get_db),
    cache: ReadCache = Depends(get_cache),
):
    return DonationService(db, cache).list_donations(page, limit)


@router.post("/donations", response_model=DonationMutationResponse, status_code=201)
@admin_limit
def create_donation(
    request: Request,
    donation_data: DonationCreate,
    admin: CurrentAdmin = Depends(require_admin),
    db: Session = Depends(get_db),
    cache: ReadCache = Depends(get_cache),
    context: RequestContext = Depends(get_request_context),
):
    """
    Record a donation received outside the site.

    The audit snapshot never contains the donor email, only
    whether one was supplied.
    """
    service = DonationService(db, cache)
    try:
        donation = service.create_donation(donation_data)
        db.commit()
    except DomainError as e:
        db.rollback()
        raise http_error(e)
    invalidate_on_donation(cache)

    created = DonationCreated(
        id=donation.id,
        amount=float(donation.amount),
        campaign_id=donation.campaign_id,
        campaign=donation.campaign.title,
        created_at=donation.created_at,
    )
    AuditRecorder(db).record(
        AuditAction.CREATE_DONATION,
        actor_id=admin.id,
        resource_type=ResourceType.DONATION.value,
        resource_id=created.id,
        after={
            "campaign_id": created.campaign_id,
            "amount": donation_data.amount,
            "is_anonymous": donation_data.is_anonymous,
            "has_email": bool(donation_data.donor_email) and not donation_data.is_anonymous,
            "payment_method": donation_data.payment_method,
        },
        context=context,
    )
    return DonationMutationResponse(message="donation recorded", donation=created)
