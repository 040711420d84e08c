"""
Password hashing and strength policy.

Passwords are stored as bcrypt hashes. The salt is embedded in
the hash string and the work factor comes from BCRYPT_ROUNDS.
The plaintext is never logged or persisted.
"""

import re

import bcrypt

from donation_tracker.config import get_settings

# bcrypt only looks at the first 72 bytes of its input
BCRYPT_MAX_BYTES = 72

MIN_PASSWORD_LENGTH = 8
SPECIAL_CHARACTERS = r"""!@#$%^&*()_+\-=\[\]{};':"\\|,.<>/?`~"""


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """Hash a password with the configured work factor."""
    rounds = get_settings().BCRYPT_ROUNDS
    hashed = bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    """
    Check a password against a stored hash.

    bcrypt.checkpw compares in constant time. A missing or
    malformed hash is a negative result, not an error.
    """
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
    except ValueError:
        return False


def password_strength_errors(password: str | None) -> list[str]:
    """Return the list of unmet strength rules (empty when strong)."""
    password = password or ""
    errors = []
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"at least {MIN_PASSWORD_LENGTH} characters")
    if not re.search(r"[A-Z]", password):
        errors.append("at least one upper-case letter")
    if not re.search(r"[a-z]", password):
        errors.append("at least one lower-case letter")
    if not re.search(r"[0-9]", password):
        errors.append("at least one digit")
    if not re.search(f"[{SPECIAL_CHARACTERS}]", password):
        errors.append("at least one special character")
    return errors


def validate_password_strength(password: str) -> str:
    """
    Raise ValueError listing the unmet rules.

    Used from pydantic field validators, so the failure surfaces
    as a 400 validation error.
    """
    errors = password_strength_errors(password)
    if errors:
        raise ValueError("password must contain " + ", ".join(errors))
    return password
