"""
Public endpoints: campaigns, the live donation feed, statistics
and expense transparency reports. No authentication.
"""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from donation_tracker.api.deps import http_error
from donation_tracker.api.rate_limit import public_limit
from donation_tracker.errors import DomainError
from donation_tracker.models.base import get_db
from donation_tracker.schemas.campaign import CampaignResponse
from donation_tracker.schemas.donation import (
    PublicDonationCreate,
    DonationCreated,
    DonationMutationResponse,
    RecentDonation,
    DonationStatistics,
)
from donation_tracker.schemas.report import CampaignReports
from donation_tracker.services.cache import ReadCache, get_cache, invalidate_on_donation
from donation_tracker.services.campaign_service import CampaignService
from donation_tracker.services.donation_service import DonationService
from donation_tracker.services.report_service import ReportService

router = APIRouter(prefix="/api", tags=["Public"])


@router.get("/campaigns", response_model=list[CampaignResponse])
@public_limit
def list_campaigns(
    request: Request,
    db: Session = Depends(get_db),
    cache: ReadCache = Depends(get_cache),
):
    """Active campaigns, newest first."""
    return CampaignService(db, cache).list_active()


@router.get("/campaigns/{campaign_id}", response_model=CampaignResponse)
@public_limit
def get_campaign(
    request: Request,
    campaign_id: int,
    db: Session = Depends(get_db),
    cache: ReadCache = Depends(get_cache),
):
    try:
        return CampaignService(db, cache).get_campaign_detail(campaign_id)
    except DomainError as e:
        raise http_error(e)


@router.get("/donations/recent", response_model=list[RecentDonation])
@public_limit
def recent_donations(
    request: Request,
    limit: int = Query(default=20),
    db: Session = Depends(get_db),
    cache: ReadCache = Depends(get_cache),
):
    """Live feed. limit is clamped to 1..100."""
    return DonationService(db, cache).recent_donations(limit)


@router.get("/donations/statistics", response_model=DonationStatistics)
@public_limit
def donation_statistics(
    request: Request,
    db: Session = Depends(get_db),
    cache: ReadCache = Depends(get_cache),
):
    return DonationService(db, cache).statistics()


@router.post("/donations", response_model=DonationMutationResponse, status_code=201)
@public_limit
def create_donation(
    request: Request,
    donation_data: PublicDonationCreate,
    db: Session = Depends(get_db),
    cache: ReadCache = Depends(get_cache),
):
    """Record a donation from the public site."""
    service = DonationService(db, cache)
    try:
        donation = service.create_public_donation(donation_data)
        db.commit()
    except DomainError as e:
        db.rollback()
        raise http_error(e)
    invalidate_on_donation(cache)

    return DonationMutationResponse(
        message="Thank you for your donation",
        donation=DonationCreated(
            id=donation.id,
            amount=float(donation.amount),
            campaign_id=donation.campaign_id,
            campaign=donation.campaign.title,
            created_at=donation.created_at,
        ),
    )


@router.get("/reports/{campaign_id}", response_model=CampaignReports)
@public_limit
def campaign_reports(
    request: Request,
    campaign_id: int,
    db: Session = Depends(get_db),
    cache: ReadCache = Depends(get_cache),
):
    """Expense reports of a campaign with their total."""
    try:
        return ReportService(db, cache).campaign_reports(campaign_id)
    except DomainError as e:
        raise http_error(e)
