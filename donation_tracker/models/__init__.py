"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from donation_tracker.models.base import Base
from donation_tracker.models.enums import (
    AdminRole,
    AuditAction,
    DonationStatus,
    ResourceType,
)
from donation_tracker.models.admin import Admin
from donation_tracker.models.campaign import Campaign
from donation_tracker.models.donation import Donation
from donation_tracker.models.report import Report
from donation_tracker.models.audit_log import AuditLog
from donation_tracker.models.daily_hash import DailyHash, Setting

__all__ = [
    "Base",
    "AdminRole",
    "AuditAction",
    "DonationStatus",
    "ResourceType",
    "Admin",
    "Campaign",
    "Donation",
    "Report",
    "AuditLog",
    "DailyHash",
    "Setting",
]
