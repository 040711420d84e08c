"""
Pydantic schemas for fundraising campaigns.

image_url is whatever the external upload service returned;
it is stored as-is.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

MIN_GOAL_AMOUNT = Decimal("100")


class CampaignCreate(BaseModel):
    title: str = Field(min_length=5, max_length=200)
    description: str = Field(min_length=20, max_length=5000)
    goal_amount: Decimal = Field(ge=MIN_GOAL_AMOUNT, decimal_places=2)
    is_active: bool = True
    end_date: date | None = None
    image_url: str | None = Field(default=None, max_length=500)


class CampaignUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=5, max_length=200)
    description: str | None = Field(default=None, min_length=20, max_length=5000)
    goal_amount: Decimal | None = Field(
        default=None, ge=MIN_GOAL_AMOUNT, decimal_places=2
    )
    is_active: bool | None = None
    end_date: date | None = None
    # An empty string removes the image
    image_url: str | None = Field(default=None, max_length=500)


class CampaignResponse(BaseModel):
    id: int
    title: str
    description: str
    goal_amount: float
    current_amount: float
    image_url: str | None
    is_active: bool
    end_date: date | None
    progress_percentage: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CampaignMutationResponse(BaseModel):
    success: bool = True
    campaign: CampaignResponse
