"""
Auth service: admin login with brute-force lockout, and
password changes.

Login is a small state machine per account:

    UNLOCKED --(5th consecutive failure)--> LOCKED(until)
    LOCKED   --(window elapses)-----------> UNLOCKED
    any      --(successful login)---------> UNLOCKED, counter = 0

The lockout check runs before the password is verified, so a
correct password during the window still gets 423.

Unlike the other services, this one commits: the failure counter
and lock must be persisted before the response goes out, even
though the request itself is rejected.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import select, update, func
from sqlalchemy.orm import Session

from donation_tracker.config import get_settings
from donation_tracker.errors import (
    AccountLockedError,
    AuthenticationError,
    ConflictError,
    NotFoundError,
)
from donation_tracker.models.admin import Admin
from donation_tracker.models.enums import AuditAction, ResourceType
from donation_tracker.security.passwords import hash_password, verify_password
from donation_tracker.security.tokens import create_access_token
from donation_tracker.services.audit_service import (
    AuditRecorder,
    RequestContext,
    sanitize_for_log,
)

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "invalid credentials"
ACCOUNT_DEACTIVATED = "account deactivated"
INVALID_CURRENT_PASSWORD = "invalid current password"


@dataclass
class LoginResult:
    token: str
    admin: Admin


def minutes_until(moment: datetime, now: datetime) -> int:
    """Whole minutes left until moment, never less than 1."""
    return max(1, math.ceil((moment - now).total_seconds() / 60))


class AuthService:

    def __init__(self, db: Session, audit: AuditRecorder | None = None):
        self.db = db
        self.audit = audit or AuditRecorder(db)
        self.settings = get_settings()

    def _find_by_email(self, email: str) -> Admin | None:
        return self.db.execute(
            select(Admin).where(func.lower(Admin.email) == email.strip().lower())
        ).scalar_one_or_none()

    def _login_failed(
        self,
        context: RequestContext,
        reason: str,
        admin: Admin | None = None,
        email: str | None = None,
        **details,
    ) -> None:
        """Audit a failed attempt. There is never an actor: nobody logged in."""
        logger.warning(
            "Login failed (%s) for admin %s",
            reason, admin.id if admin else "<unknown>",
        )
        self.audit.record(
            AuditAction.LOGIN_FAILED,
            actor_id=None,
            resource_type=ResourceType.ADMIN.value,
            resource_id=admin.id if admin else None,
            after={"email": email, "reason": reason, **details},
            context=context,
        )

    def _release_expired_lock(self, admin: Admin, now: datetime) -> None:
        """LOCKED -> UNLOCKED once the window has passed."""
        if admin.locked_until is not None and admin.locked_until <= now:
            admin.locked_until = None
            admin.failed_login_attempts = 0
            self.db.commit()

    def _register_failure(self, admin: Admin, now: datetime) -> tuple[int, bool]:
        """
        Count a failed attempt and lock the account at the threshold.

        The increment is a single UPDATE so concurrent failures are
        not lost. A null counter counts as zero.
        """
        self.db.execute(
            update(Admin)
            .where(Admin.id == admin.id)
            .values(
                failed_login_attempts=func.coalesce(Admin.failed_login_attempts, 0) + 1
            )
            .execution_options(synchronize_session=False)
        )
        attempts = self.db.execute(
            select(Admin.failed_login_attempts).where(Admin.id == admin.id)
        ).scalar_one()

        locked = attempts >= self.settings.MAX_FAILED_LOGIN_ATTEMPTS
        if locked:
            self.db.execute(
                update(Admin)
                .where(Admin.id == admin.id)
                .values(
                    locked_until=now + timedelta(minutes=self.settings.LOCKOUT_MINUTES)
                )
                .execution_options(synchronize_session=False)
            )
        self.db.commit()
        return attempts, locked

    def login(
        self, email: str, password: str, context: RequestContext | None = None
    ) -> LoginResult:
        """
        Authenticate an admin and issue a session token.

        Raises AuthenticationError (401), AccountLockedError (423).
        """
        context = context or RequestContext()
        now = datetime.utcnow()
        normalized = email.strip().lower()

        admin = self._find_by_email(normalized)
        if admin is None:
            self._login_failed(context, "unknown_email", email=normalized)
            raise AuthenticationError(INVALID_CREDENTIALS)

        if admin.is_locked(now):
            minutes = minutes_until(admin.locked_until, now)
            self._login_failed(
                context, "account_locked", admin=admin, email=normalized,
                minutes_remaining=minutes,
            )
            raise AccountLockedError(minutes)

        self._release_expired_lock(admin, now)

        if not admin.is_active:
            self._login_failed(context, "deactivated", admin=admin, email=normalized)
            raise AuthenticationError(ACCOUNT_DEACTIVATED)

        if not verify_password(password, admin.password_hash):
            attempts, locked = self._register_failure(admin, now)
            self._login_failed(
                context, "invalid_password", admin=admin, email=normalized,
                failed_attempts=attempts, locked=locked,
            )
            if locked:
                raise AccountLockedError(self.settings.LOCKOUT_MINUTES)
            remaining = self.settings.MAX_FAILED_LOGIN_ATTEMPTS - attempts
            raise AuthenticationError(
                INVALID_CREDENTIALS, attempts_remaining=remaining
            )

        admin.failed_login_attempts = 0
        admin.locked_until = None
        admin.last_login = now
        admin.last_login_ip = context.ip_address
        self.db.commit()

        token = create_access_token({
            "id": admin.id,
            "email": admin.email,
            "full_name": admin.full_name,
            "role": admin.role.value,
        })

        logger.info("Admin %s logged in", admin.id)
        self.audit.record(
            AuditAction.LOGIN_SUCCESS,
            actor_id=admin.id,
            resource_type=ResourceType.ADMIN.value,
            resource_id=admin.id,
            context=context,
        )
        return LoginResult(token=token, admin=admin)

    def change_password(
        self,
        admin_id: int,
        old_password: str,
        new_password: str,
        context: RequestContext | None = None,
    ) -> Admin:
        """Replace an admin's password after checking the current one."""
        admin = self.db.get(Admin, admin_id)
        if not admin:
            raise NotFoundError("admin not found")

        if not verify_password(old_password, admin.password_hash):
            raise AuthenticationError(INVALID_CURRENT_PASSWORD)

        if verify_password(new_password, admin.password_hash):
            raise ConflictError("new password must differ from the current one")

        admin.password_hash = hash_password(new_password)
        self.db.commit()

        self.audit.record(
            AuditAction.PASSWORD_CHANGE,
            actor_id=admin.id,
            resource_type=ResourceType.ADMIN.value,
            resource_id=admin.id,
            before=sanitize_for_log({"password": old_password}),
            after=sanitize_for_log({"password": new_password}),
            context=context,
        )
        return admin
