"""
Campaign service: public campaign listings and admin CRUD.

Read paths go through the injected cache. The caller controls the
commit and invalidates the affected keys once it has committed.
"""

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from donation_tracker.errors import ConflictError, NotFoundError
from donation_tracker.models.campaign import Campaign
from donation_tracker.models.donation import Donation
from donation_tracker.models.report import Report
from donation_tracker.schemas.campaign import (
    CampaignCreate,
    CampaignUpdate,
    CampaignResponse,
)
from donation_tracker.services import cache as cache_keys
from donation_tracker.services.cache import ReadCache


def campaign_snapshot(campaign: Campaign) -> dict:
    return {
        "title": campaign.title,
        "description": campaign.description,
        "goal_amount": campaign.goal_amount,
        "image_url": campaign.image_url,
        "is_active": campaign.is_active,
        "end_date": campaign.end_date,
    }


class CampaignService:

    def __init__(self, db: Session, cache: ReadCache | None = None):
        self.db = db
        self.cache = cache or ReadCache()

    def _load_active(self) -> list[dict]:
        campaigns = self.db.execute(
            select(Campaign)
            .where(Campaign.is_active.is_(True))
            .order_by(Campaign.created_at.desc(), Campaign.id.desc())
        ).scalars().all()
        return [
            CampaignResponse.model_validate(c).model_dump(mode="json")
            for c in campaigns
        ]

    def list_active(self) -> list[dict]:
        """Active campaigns, newest first, with progress."""
        return self.cache.get_or_set(
            cache_keys.ACTIVE_CAMPAIGNS_KEY,
            self._load_active,
            cache_keys.TTL_CAMPAIGNS,
        )

    def list_all(self) -> list[Campaign]:
        return list(self.db.execute(
            select(Campaign).order_by(Campaign.created_at.desc(), Campaign.id.desc())
        ).scalars().all())

    def get_campaign(self, campaign_id: int) -> Campaign:
        campaign = self.db.get(Campaign, campaign_id)
        if not campaign:
            raise NotFoundError(f"Campaign {campaign_id} not found")
        return campaign

    def get_campaign_detail(self, campaign_id: int) -> dict:
        def load():
            return CampaignResponse.model_validate(
                self.get_campaign(campaign_id)
            ).model_dump(mode="json")

        return self.cache.get_or_set(
            cache_keys.campaign_key(campaign_id),
            load,
            cache_keys.TTL_CAMPAIGN_DETAIL,
        )

    def create_campaign(self, request: CampaignCreate) -> Campaign:
        campaign = Campaign(
            title=request.title.strip(),
            description=request.description.strip(),
            goal_amount=request.goal_amount,
            image_url=request.image_url or None,
            is_active=request.is_active,
            end_date=request.end_date,
        )
        self.db.add(campaign)
        self.db.flush()
        return campaign

    def update_campaign(
        self, campaign_id: int, request: CampaignUpdate
    ) -> tuple[Campaign, dict]:
        """Apply the fields that were sent. Returns (campaign, before)."""
        campaign = self.get_campaign(campaign_id)
        before = campaign_snapshot(campaign)

        for field, value in request.model_dump(exclude_unset=True).items():
            if field == "image_url":
                campaign.image_url = value or None
            elif value is not None:
                setattr(campaign, field, value)

        self.db.flush()
        return campaign, before

    def delete_campaign(self, campaign_id: int) -> dict:
        """
        Delete a campaign with no money attached to it.

        Campaigns that already have donations or expense reports
        are part of the public ledger; deactivate them instead.
        """
        campaign = self.get_campaign(campaign_id)
        donations = self.db.execute(
            select(func.count(Donation.id)).where(Donation.campaign_id == campaign_id)
        ).scalar_one()
        reports = self.db.execute(
            select(func.count(Report.id)).where(Report.campaign_id == campaign_id)
        ).scalar_one()
        if donations or reports:
            raise ConflictError(
                "campaign has donations or reports; deactivate it instead"
            )

        before = campaign_snapshot(campaign)
        self.db.delete(campaign)
        self.db.flush()
        return before
