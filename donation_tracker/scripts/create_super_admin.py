"""
Create or reset the bootstrap super-admin.

Environment variables:
- ADMIN_EMAIL: super-admin email (default admin@example.com)
- ADMIN_PASSWORD: password (optional; a strong one is generated
  when missing or a known placeholder)

Usage:
    python -m donation_tracker.scripts.create_super_admin

Creates the tables if they do not exist, upserts the super-admin
(an existing account with the same email gets the new password,
the super_admin role and is reactivated) and seeds the
verification_enabled setting. In production a weak password
aborts the script instead of being accepted with a warning.
"""

import logging
import os
import secrets
import string
import sys

from sqlalchemy import select

from donation_tracker.config import get_settings
from donation_tracker.models import Base, Admin, AdminRole, Setting
from donation_tracker.models.base import SessionLocal, engine
from donation_tracker.security.passwords import hash_password, password_strength_errors
from donation_tracker.services.verification_service import VERIFICATION_SETTING

logger = logging.getLogger(__name__)

DEFAULT_EMAIL = "admin@example.com"
DEFAULT_FULL_NAME = "Administrator"
PASSWORD_ALPHABET = string.ascii_letters + string.digits + "!@#$%^&*"
PLACEHOLDER_PASSWORDS = ("admin123", "password", "123456", "admin", "qwerty", "change_this")


def generate_secure_password(length: int = 16) -> str:
    """Random password that always satisfies the strength policy."""
    while True:
        password = "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))
        if not password_strength_errors(password):
            return password


def is_placeholder(password: str) -> bool:
    lowered = password.lower()
    return any(weak in lowered for weak in PLACEHOLDER_PASSWORDS)


def resolve_password(raw: str | None, production: bool) -> tuple[str, bool]:
    """
    Return (password, generated).

    Raises SystemExit when a weak password is supplied in production.
    """
    if not raw or is_placeholder(raw):
        return generate_secure_password(), True

    problems = password_strength_errors(raw)
    if problems:
        for problem in problems:
            logger.warning("Weak admin password: %s", problem)
        if production:
            raise SystemExit("A strong ADMIN_PASSWORD is required in production")
    return raw, False


def upsert_super_admin(db, email: str, password: str) -> Admin:
    email = email.strip().lower()
    admin = db.execute(
        select(Admin).where(Admin.email == email)
    ).scalar_one_or_none()

    if admin is None:
        admin = Admin(email=email, full_name=DEFAULT_FULL_NAME)
        db.add(admin)

    admin.password_hash = hash_password(password)
    admin.role = AdminRole.SUPER_ADMIN
    admin.is_active = True
    admin.failed_login_attempts = 0
    admin.locked_until = None
    return admin


def seed_settings(db) -> None:
    if db.get(Setting, VERIFICATION_SETTING) is None:
        db.add(Setting(key=VERIFICATION_SETTING, value="false"))


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    settings = get_settings()

    email = os.getenv("ADMIN_EMAIL", DEFAULT_EMAIL)
    password, generated = resolve_password(
        os.getenv("ADMIN_PASSWORD"), settings.is_production
    )

    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        admin = upsert_super_admin(db, email, password)
        seed_settings(db)
        db.commit()
        logger.info("Super-admin %s ready (id %s)", admin.email, admin.id)
    except Exception:
        db.rollback()
        logger.exception("Could not create the super-admin")
        return 1
    finally:
        db.close()

    print(f"Email:    {email.strip().lower()}")
    print(f"Password: {password}")
    if generated:
        print("This password was generated and will not be shown again.")
    print("Change the password after the first login.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
