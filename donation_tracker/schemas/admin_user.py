"""
Pydantic schemas for administrator account management.
"""

from datetime import datetime

from pydantic import BaseModel, Field, EmailStr, field_validator

from donation_tracker.models.enums import AdminRole
from donation_tracker.security.passwords import validate_password_strength


class AdminCreate(BaseModel):
    email: EmailStr
    password: str = Field(max_length=256)
    full_name: str | None = Field(default=None, max_length=255)
    role: AdminRole = AdminRole.ADMIN

    @field_validator("password")
    @classmethod
    def password_must_be_strong(cls, v: str) -> str:
        return validate_password_strength(v)


class AdminUpdate(BaseModel):
    """Partial update: only the fields sent are applied."""
    email: EmailStr | None = None
    password: str | None = Field(default=None, max_length=256)
    full_name: str | None = Field(default=None, max_length=255)
    role: AdminRole | None = None
    is_active: bool | None = None

    @field_validator("password")
    @classmethod
    def password_must_be_strong(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return validate_password_strength(v)


class AdminResponse(BaseModel):
    id: int
    email: str
    full_name: str | None
    role: AdminRole
    is_active: bool
    last_login: datetime | None
    last_login_ip: str | None
    created_by: int | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AdminMutationResponse(BaseModel):
    success: bool = True
    admin: AdminResponse
