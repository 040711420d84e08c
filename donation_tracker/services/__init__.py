"""Business logic services."""

from donation_tracker.services.audit_service import AuditRecorder, AuditLogService
from donation_tracker.services.auth_service import AuthService
from donation_tracker.services.admin_user_service import AdminUserService
from donation_tracker.services.campaign_service import CampaignService
from donation_tracker.services.donation_service import DonationService
from donation_tracker.services.report_service import ReportService
from donation_tracker.services.verification_service import VerificationService

__all__ = [
    "AuditRecorder",
    "AuditLogService",
    "AuthService",
    "AdminUserService",
    "CampaignService",
    "DonationService",
    "ReportService",
    "VerificationService",
]
