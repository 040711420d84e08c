"""
Tests for admin login, lockout and password changes.
"""

from datetime import datetime, timedelta

import pytest
from sqlalchemy import select

from donation_tracker.errors import (
    AccountLockedError,
    AuthenticationError,
    ConflictError,
)
from donation_tracker.models import AuditLog, AuditAction
from donation_tracker.security.passwords import verify_password
from donation_tracker.security.tokens import decode_access_token
from donation_tracker.services.audit_service import RequestContext
from donation_tracker.services.auth_service import (
    AuthService,
    INVALID_CREDENTIALS,
    ACCOUNT_DEACTIVATED,
)

DEFAULT_PASSWORD = "Str0ng!Passw0rd"

CONTEXT = RequestContext(ip_address="203.0.113.9", user_agent="pytest")


def audit_entries(db_session, action=None):
    query = select(AuditLog).order_by(AuditLog.id)
    if action is not None:
        query = query.where(AuditLog.action == action)
    return db_session.execute(query).scalars().all()


class TestLogin:

    def test_success_issues_token(self, db_session, admin):
        result = AuthService(db_session).login("admin@example.com", DEFAULT_PASSWORD, CONTEXT)

        claims = decode_access_token(result.token)
        assert claims["id"] == admin.id
        assert claims["email"] == "admin@example.com"
        assert claims["role"] == "admin"

    def test_success_stamps_last_login(self, db_session, admin):
        AuthService(db_session).login("admin@example.com", DEFAULT_PASSWORD, CONTEXT)
        db_session.refresh(admin)

        assert admin.last_login is not None
        assert admin.last_login_ip == "203.0.113.9"

    def test_success_is_audited_with_actor(self, db_session, admin):
        AuthService(db_session).login("admin@example.com", DEFAULT_PASSWORD, CONTEXT)

        [entry] = audit_entries(db_session, AuditAction.LOGIN_SUCCESS)
        assert entry.admin_id == admin.id
        assert entry.ip_address == "203.0.113.9"

    def test_email_is_case_insensitive(self, db_session, admin):
        result = AuthService(db_session).login("  ADMIN@Example.com ", DEFAULT_PASSWORD)
        assert result.admin.id == admin.id

    def test_unknown_email(self, db_session):
        with pytest.raises(AuthenticationError) as exc:
            AuthService(db_session).login("nobody@example.com", "whatever1", CONTEXT)

        assert exc.value.payload() == {"error": INVALID_CREDENTIALS}
        [entry] = audit_entries(db_session)
        assert entry.action == AuditAction.LOGIN_FAILED
        assert entry.admin_id is None
        assert entry.new_values["reason"] == "unknown_email"

    def test_wrong_password_reports_attempts_remaining(self, db_session, admin):
        with pytest.raises(AuthenticationError) as exc:
            AuthService(db_session).login("admin@example.com", "Wrong!Pass1", CONTEXT)

        assert exc.value.extra["attempts_remaining"] == 4
        db_session.refresh(admin)
        assert admin.failed_login_attempts == 1

    def test_failed_login_audit_never_has_actor(self, db_session, admin):
        with pytest.raises(AuthenticationError):
            AuthService(db_session).login("admin@example.com", "Wrong!Pass1", CONTEXT)

        [entry] = audit_entries(db_session, AuditAction.LOGIN_FAILED)
        assert entry.admin_id is None
        assert entry.resource_id == admin.id
        assert entry.new_values["failed_attempts"] == 1
        assert entry.new_values["locked"] is False
        assert "Wrong!Pass1" not in str(entry.new_values)

    def test_null_counter_counts_as_zero(self, db_session, admin):
        admin.failed_login_attempts = None
        db_session.commit()

        with pytest.raises(AuthenticationError):
            AuthService(db_session).login("admin@example.com", "Wrong!Pass1")

        db_session.refresh(admin)
        assert admin.failed_login_attempts == 1

    def test_deactivated_account(self, db_session, make_admin):
        make_admin(email="gone@example.com", is_active=False)

        with pytest.raises(AuthenticationError) as exc:
            AuthService(db_session).login("gone@example.com", DEFAULT_PASSWORD)

        assert exc.value.message == ACCOUNT_DEACTIVATED

    def test_success_resets_counter(self, db_session, admin):
        service = AuthService(db_session)
        for _ in range(3):
            with pytest.raises(AuthenticationError):
                service.login("admin@example.com", "Wrong!Pass1")

        service.login("admin@example.com", DEFAULT_PASSWORD)
        db_session.refresh(admin)
        assert admin.failed_login_attempts == 0


class TestLockout:

    def test_fifth_failure_locks(self, db_session, admin):
        service = AuthService(db_session)
        for _ in range(4):
            with pytest.raises(AuthenticationError):
                service.login("admin@example.com", "Wrong!Pass1")

        with pytest.raises(AccountLockedError) as exc:
            service.login("admin@example.com", "Wrong!Pass1")

        assert exc.value.status_code == 423
        assert exc.value.minutes_remaining == 30

    def test_correct_password_during_lockout_is_rejected(self, db_session, admin):
        service = AuthService(db_session)
        for _ in range(5):
            with pytest.raises((AuthenticationError, AccountLockedError)):
                service.login("admin@example.com", "Wrong!Pass1")

        with pytest.raises(AccountLockedError):
            service.login("admin@example.com", DEFAULT_PASSWORD)

        db_session.refresh(admin)
        window = admin.locked_until - datetime.utcnow()
        assert timedelta(minutes=29) < window <= timedelta(minutes=30)

    def test_locked_attempt_does_not_consume_attempt(self, db_session, admin):
        admin.failed_login_attempts = 5
        admin.locked_until = datetime.utcnow() + timedelta(minutes=10)
        db_session.commit()

        with pytest.raises(AccountLockedError) as exc:
            AuthService(db_session).login("admin@example.com", "Wrong!Pass1")

        assert exc.value.minutes_remaining == 10
        db_session.refresh(admin)
        assert admin.failed_login_attempts == 5
        [entry] = audit_entries(db_session, AuditAction.LOGIN_FAILED)
        assert entry.new_values["reason"] == "account_locked"

    def test_expired_lock_is_released(self, db_session, admin):
        admin.failed_login_attempts = 5
        admin.locked_until = datetime.utcnow() - timedelta(minutes=1)
        db_session.commit()

        result = AuthService(db_session).login("admin@example.com", DEFAULT_PASSWORD)

        assert result.admin.id == admin.id
        db_session.refresh(admin)
        assert admin.locked_until is None
        assert admin.failed_login_attempts == 0

    def test_failure_after_expired_lock_starts_fresh(self, db_session, admin):
        admin.failed_login_attempts = 5
        admin.locked_until = datetime.utcnow() - timedelta(minutes=1)
        db_session.commit()

        with pytest.raises(AuthenticationError) as exc:
            AuthService(db_session).login("admin@example.com", "Wrong!Pass1")

        assert exc.value.extra["attempts_remaining"] == 4


class TestChangePassword:

    def test_changes_password(self, db_session, admin):
        AuthService(db_session).change_password(
            admin.id, DEFAULT_PASSWORD, "N3w!Password", CONTEXT
        )
        db_session.refresh(admin)

        assert verify_password("N3w!Password", admin.password_hash)
        [entry] = audit_entries(db_session, AuditAction.PASSWORD_CHANGE)
        assert entry.old_values == {"password": "[REDACTED]"}
        assert entry.new_values == {"password": "[REDACTED]"}

    def test_wrong_current_password(self, db_session, admin):
        with pytest.raises(AuthenticationError):
            AuthService(db_session).change_password(
                admin.id, "Wrong!Pass1", "N3w!Password"
            )

    def test_same_password_rejected(self, db_session, admin):
        with pytest.raises(ConflictError):
            AuthService(db_session).change_password(
                admin.id, DEFAULT_PASSWORD, DEFAULT_PASSWORD
            )
