"""
Pydantic schemas for login, token verification and password changes.
"""

from pydantic import BaseModel, Field, EmailStr, field_validator

from donation_tracker.models.enums import AdminRole
from donation_tracker.security.passwords import validate_password_strength


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6, max_length=256)


class AdminIdentity(BaseModel):
    """Public account fields. Never includes the password hash."""
    id: int
    email: str
    full_name: str | None
    role: AdminRole

    model_config = {"from_attributes": True}


class LoginResponse(BaseModel):
    success: bool = True
    token: str
    admin: AdminIdentity


class VerifyResponse(BaseModel):
    success: bool = True
    user: AdminIdentity


class ChangePasswordRequest(BaseModel):
    old_password: str = Field(min_length=1, max_length=256)
    new_password: str = Field(max_length=256)

    @field_validator("new_password")
    @classmethod
    def new_password_must_be_strong(cls, v: str) -> str:
        return validate_password_strength(v)


class MessageResponse(BaseModel):
    success: bool = True
    message: str
