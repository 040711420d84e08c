"""
Shared enumerations for database models.

Using Python enums mapped to database enums ensures that
only valid values can be stored.
"""

import enum


class AdminRole(str, enum.Enum):
    """The two administrator roles."""
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class DonationStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class AuditAction(str, enum.Enum):
    """Closed set of audited action kinds."""
    # Auth
    LOGIN_SUCCESS = "LOGIN_SUCCESS"
    LOGIN_FAILED = "LOGIN_FAILED"
    PASSWORD_CHANGE = "PASSWORD_CHANGE"

    # Campaigns
    CREATE_CAMPAIGN = "CREATE_CAMPAIGN"
    UPDATE_CAMPAIGN = "UPDATE_CAMPAIGN"
    DELETE_CAMPAIGN = "DELETE_CAMPAIGN"

    # Donations
    CREATE_DONATION = "CREATE_DONATION"

    # Expense reports
    CREATE_REPORT = "CREATE_REPORT"
    UPDATE_REPORT = "UPDATE_REPORT"
    DELETE_REPORT = "DELETE_REPORT"

    # Admin management
    CREATE_ADMIN = "CREATE_ADMIN"
    UPDATE_ADMIN = "UPDATE_ADMIN"
    DEACTIVATE_ADMIN = "DEACTIVATE_ADMIN"


class ResourceType(str, enum.Enum):
    CAMPAIGN = "campaign"
    DONATION = "donation"
    REPORT = "report"
    ADMIN = "admin"
