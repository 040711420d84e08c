"""
Pydantic schemas for public ledger verification.
"""

import datetime as dt

from pydantic import BaseModel


class GenerateHashRequest(BaseModel):
    date: dt.date


class ToggleVerificationRequest(BaseModel):
    enabled: bool


class DailyHashResponse(BaseModel):
    date: dt.date
    hash: str
    transactions_count: int
    created_at: dt.datetime

    model_config = {"from_attributes": True}


class GenerateHashResponse(BaseModel):
    success: bool = True
    date: dt.date
    hash: str
    transactions_count: int


class VerificationStatus(BaseModel):
    verification_enabled: bool


class ToggleVerificationResponse(BaseModel):
    success: bool = True
    verification_enabled: bool


class VerifyDateResponse(BaseModel):
    date: dt.date
    published_hash: str
    calculated_hash: str | None
    transactions_count: int
    valid: bool
