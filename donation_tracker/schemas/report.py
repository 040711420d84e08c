"""
Pydantic schemas for expense reports.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class ReportCreate(BaseModel):
    campaign_id: int
    expense_date: date
    amount: Decimal = Field(ge=1, decimal_places=2)
    description: str = Field(min_length=10, max_length=1000)
    receipt_url: str | None = Field(default=None, max_length=500)
    vendor_name: str | None = Field(default=None, max_length=200)


class ReportUpdate(BaseModel):
    expense_date: date | None = None
    amount: Decimal | None = Field(default=None, ge=1, decimal_places=2)
    description: str | None = Field(default=None, min_length=10, max_length=1000)
    receipt_url: str | None = Field(default=None, max_length=500)
    vendor_name: str | None = Field(default=None, max_length=200)


class ReportResponse(BaseModel):
    id: int
    campaign_id: int
    expense_date: date
    amount: float
    description: str
    receipt_url: str | None
    vendor_name: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class ReportMutationResponse(BaseModel):
    success: bool = True
    report: ReportResponse


class CampaignRef(BaseModel):
    id: int
    title: str


class CampaignReports(BaseModel):
    campaign: CampaignRef
    reports: list[ReportResponse]
    total_expenses: float
