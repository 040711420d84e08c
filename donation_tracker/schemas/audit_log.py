"""
Pydantic schemas for reading the audit trail.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel

from donation_tracker.models.enums import AuditAction


class AuditLogResponse(BaseModel):
    id: int
    admin_id: int | None
    admin_email: str | None = None
    admin_name: str | None = None
    action: AuditAction
    resource_type: str | None
    resource_id: int | None
    old_values: Any | None
    new_values: Any | None
    ip_address: str | None
    user_agent: str | None
    created_at: datetime

    model_config = {"from_attributes": True}

    @classmethod
    def from_entry(cls, entry) -> "AuditLogResponse":
        response = cls.model_validate(entry)
        if entry.admin is not None:
            response.admin_email = entry.admin.email
            response.admin_name = entry.admin.full_name
        return response


class AuditPagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class AuditLogPage(BaseModel):
    logs: list[AuditLogResponse]
    pagination: AuditPagination


class ActionCount(BaseModel):
    action: AuditAction
    count: int


class AdminActivity(BaseModel):
    email: str
    full_name: str | None
    actions_count: int


class DailyActivity(BaseModel):
    date: str
    count: int


class AuditStats(BaseModel):
    period_days: int
    by_action: list[ActionCount]
    by_admin: list[AdminActivity]
    daily_activity: list[DailyActivity]
