"""
Admin user service: super-admin management of administrator
accounts.

Accounts are never deleted. Deactivation is a reversible flip of
is_active, guarded by two rules:
- nobody may deactivate their own account;
- the last active super-admin can never be deactivated or demoted.

The last-super-admin rule is enforced inside a single conditional
UPDATE (the WHERE clause counts the other active super-admins), so
two concurrent requests cannot both slip past a separate count.
Email uniqueness is enforced by the unique constraint and surfaced
as a ConflictError.
"""

import logging

from sqlalchemy import select, update, func, and_, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, aliased

from donation_tracker.errors import ConflictError, NotFoundError
from donation_tracker.models.admin import Admin
from donation_tracker.models.enums import AdminRole
from donation_tracker.schemas.admin_user import AdminCreate, AdminUpdate
from donation_tracker.security.passwords import hash_password

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL = "an admin with this email already exists"
LAST_SUPER_ADMIN = "cannot deactivate the last super-admin"
LAST_SUPER_ADMIN_DEMOTE = "cannot demote the last super-admin"
SELF_DEACTIVATION = "you cannot deactivate your own account"


def admin_snapshot(admin: Admin) -> dict:
    """Public fields of an account, for audit snapshots."""
    return {
        "email": admin.email,
        "full_name": admin.full_name,
        "role": admin.role.value,
        "is_active": admin.is_active,
    }


class AdminUserService:

    def __init__(self, db: Session):
        self.db = db

    def list_admins(self, include_inactive: bool = False) -> list[Admin]:
        query = select(Admin).order_by(Admin.created_at.desc(), Admin.id.desc())
        if not include_inactive:
            query = query.where(Admin.is_active.is_(True))
        return list(self.db.execute(query).scalars().all())

    def get_admin(self, admin_id: int) -> Admin:
        admin = self.db.get(Admin, admin_id)
        if not admin:
            raise NotFoundError(f"Admin {admin_id} not found")
        return admin

    def _flush_unique(self) -> None:
        try:
            self.db.flush()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(DUPLICATE_EMAIL)

    def create_admin(self, request: AdminCreate, created_by: int | None) -> Admin:
        email = request.email.lower()
        existing = self.db.execute(
            select(Admin.id).where(func.lower(Admin.email) == email)
        ).scalar_one_or_none()
        if existing:
            raise ConflictError(DUPLICATE_EMAIL)

        admin = Admin(
            email=email,
            password_hash=hash_password(request.password),
            full_name=request.full_name,
            role=request.role,
            created_by=created_by,
        )
        self.db.add(admin)
        self._flush_unique()
        logger.info("Admin %s created by %s", admin.id, created_by)
        return admin

    def _other_active_super_admins(self, admin_id: int):
        other = aliased(Admin)
        return (
            select(func.count(other.id))
            .where(
                other.role == AdminRole.SUPER_ADMIN,
                other.is_active.is_(True),
                other.id != admin_id,
            )
            .scalar_subquery()
        )

    def _guarded_update(self, admin: Admin, values: dict, message: str) -> None:
        """
        Apply values to a super-admin only if another active
        super-admin remains. Raises ConflictError otherwise.
        """
        result = self.db.execute(
            update(Admin)
            .where(
                Admin.id == admin.id,
                or_(
                    Admin.role != AdminRole.SUPER_ADMIN,
                    Admin.is_active.is_(False),
                    self._other_active_super_admins(admin.id) > 0,
                ),
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise ConflictError(message)
        self.db.refresh(admin)

    def deactivate_admin(self, admin_id: int, actor_id: int) -> Admin:
        """Soft-delete an account."""
        if admin_id == actor_id:
            raise ConflictError(SELF_DEACTIVATION)

        admin = self.get_admin(admin_id)
        self._guarded_update(admin, {"is_active": False}, LAST_SUPER_ADMIN)
        logger.info("Admin %s deactivated by %s", admin_id, actor_id)
        return admin

    def update_admin(
        self, admin_id: int, request: AdminUpdate, actor_id: int
    ) -> tuple[Admin, dict]:
        """
        Partially update an account.

        Returns the admin and the snapshot of its state before the
        change, for auditing.
        """
        admin = self.get_admin(admin_id)
        before = admin_snapshot(admin)
        fields = request.model_dump(exclude_unset=True)

        if not fields:
            raise ConflictError("no data to update")

        if "email" in fields and fields["email"] is not None:
            new_email = fields["email"].lower()
            if new_email != admin.email:
                taken = self.db.execute(
                    select(Admin.id).where(
                        and_(func.lower(Admin.email) == new_email, Admin.id != admin_id)
                    )
                ).scalar_one_or_none()
                if taken:
                    raise ConflictError(DUPLICATE_EMAIL)
            admin.email = new_email

        if fields.get("password"):
            admin.password_hash = hash_password(fields["password"])

        if "full_name" in fields:
            admin.full_name = fields["full_name"] or None

        self._flush_unique()

        deactivating = fields.get("is_active") is False and admin.is_active
        demoting = (
            fields.get("role") == AdminRole.ADMIN
            and admin.role == AdminRole.SUPER_ADMIN
        )

        if deactivating and admin_id == actor_id:
            raise ConflictError(SELF_DEACTIVATION)

        if deactivating:
            self._guarded_update(admin, {"is_active": False}, LAST_SUPER_ADMIN)
        elif fields.get("is_active") is True:
            admin.is_active = True

        if demoting:
            self._guarded_update(admin, {"role": AdminRole.ADMIN}, LAST_SUPER_ADMIN_DEMOTE)
        elif fields.get("role") is not None:
            admin.role = fields["role"]

        self.db.flush()
        return admin, before
