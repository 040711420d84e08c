"""
Tests for password hashing, the strength policy, session tokens
and the role guard.
"""

from datetime import timedelta

import pytest

from donation_tracker.models.enums import AdminRole
from donation_tracker.security.guard import (
    ANY_ADMIN,
    SUPER_ADMIN_ONLY,
    AccessDenied,
    CurrentAdmin,
    check_role,
    role_from_claim,
)
from donation_tracker.security.passwords import (
    hash_password,
    verify_password,
    password_strength_errors,
    validate_password_strength,
)
from donation_tracker.security.tokens import (
    InvalidTokenError,
    create_access_token,
    decode_access_token,
)


class TestPasswords:

    def test_hash_then_verify(self):
        hashed = hash_password("Str0ng!Passw0rd")
        assert hashed != "Str0ng!Passw0rd"
        assert verify_password("Str0ng!Passw0rd", hashed) is True
        assert verify_password("wrong", hashed) is False

    def test_hashes_are_salted(self):
        assert hash_password("Str0ng!Passw0rd") != hash_password("Str0ng!Passw0rd")

    @pytest.mark.parametrize("password, stored", [
        ("", "$2b$04$abc"),
        ("Str0ng!Passw0rd", None),
        ("Str0ng!Passw0rd", "not-a-bcrypt-hash"),
    ])
    def test_verify_failures_are_negative_results(self, password, stored):
        assert verify_password(password, stored) is False

    def test_strong_password_has_no_errors(self):
        assert password_strength_errors("Str0ng!Passw0rd") == []

    @pytest.mark.parametrize("weak, rule", [
        ("Sh0rt!", "at least 8 characters"),
        ("nouppercase1!", "upper-case"),
        ("NOLOWERCASE1!", "lower-case"),
        ("NoDigitsHere!", "digit"),
        ("NoSpecial123", "special"),
    ])
    def test_each_rule_is_reported(self, weak, rule):
        errors = password_strength_errors(weak)
        assert any(rule in e for e in errors)

    def test_validate_raises_value_error(self):
        with pytest.raises(ValueError, match="password must contain"):
            validate_password_strength("weak")


class TestTokens:

    def test_round_trip(self):
        token = create_access_token({"id": 7, "email": "a@example.com", "role": "admin"})
        claims = decode_access_token(token)
        assert claims["id"] == 7
        assert claims["sub"] == "7"
        assert claims["role"] == "admin"

    def test_expired_token_rejected(self):
        token = create_access_token({"id": 7}, expires_delta=timedelta(seconds=-1))
        with pytest.raises(InvalidTokenError):
            decode_access_token(token)

    def test_garbage_rejected(self):
        with pytest.raises(InvalidTokenError):
            decode_access_token("not.a.token")


class TestGuard:

    def test_no_identity_is_401(self):
        with pytest.raises(AccessDenied) as exc:
            check_role(None, ANY_ADMIN)
        assert exc.value.status_code == 401

    def test_admin_passes_any_admin(self):
        check_role(AdminRole.ADMIN, ANY_ADMIN)
        check_role(AdminRole.SUPER_ADMIN, ANY_ADMIN)

    def test_admin_rejected_from_super_admin_only(self):
        with pytest.raises(AccessDenied) as exc:
            check_role(AdminRole.ADMIN, SUPER_ADMIN_ONLY)
        assert exc.value.status_code == 403
        assert "super" not in exc.value.message

    def test_raw_string_role(self):
        check_role("super_admin", SUPER_ADMIN_ONLY)

    @pytest.mark.parametrize("raw", [None, "root", "SUPER_ADMIN"])
    def test_missing_or_unknown_role_is_admin(self, raw):
        assert role_from_claim(raw) == AdminRole.ADMIN

    def test_current_admin_without_role_claim(self):
        current = CurrentAdmin.from_claims({"id": 3, "email": "a@example.com"})
        assert current.role == AdminRole.ADMIN
        with pytest.raises(AccessDenied):
            check_role(current.role, SUPER_ADMIN_ONLY)
