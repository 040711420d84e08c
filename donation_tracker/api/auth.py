"""
Admin authentication endpoints.

Login failures are persisted (counter, lock, audit entry) by the
auth service before the error response is raised here.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from donation_tracker.api.deps import (
    get_request_context,
    http_error,
    require_admin,
)
from donation_tracker.api.rate_limit import admin_limit, login_limit
from donation_tracker.errors import DomainError
from donation_tracker.models.base import get_db
from donation_tracker.schemas.auth import (
    LoginRequest,
    LoginResponse,
    VerifyResponse,
    ChangePasswordRequest,
    MessageResponse,
)
from donation_tracker.security.guard import CurrentAdmin
from donation_tracker.services.audit_service import RequestContext
from donation_tracker.services.auth_service import AuthService

router = APIRouter(prefix="/api/admin", tags=["Admin Auth"])


@router.post("/login", response_model=LoginResponse)
@login_limit
def login(
    request: Request,
    credentials: LoginRequest,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    """Exchange email and password for a 24h session token."""
    service = AuthService(db)
    try:
        result = service.login(credentials.email, credentials.password, context)
    except DomainError as e:
        db.rollback()
        raise http_error(e)
    return LoginResponse(token=result.token, admin=result.admin)


@router.get("/verify", response_model=VerifyResponse)
@admin_limit
def verify(request: Request, admin: CurrentAdmin = Depends(require_admin)):
    """Return the identity carried by the caller's token."""
    return VerifyResponse(user=admin.as_dict())


@router.post("/change-password", response_model=MessageResponse)
@admin_limit
def change_password(
    request: Request,
    passwords: ChangePasswordRequest,
    admin: CurrentAdmin = Depends(require_admin),
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    service = AuthService(db)
    try:
        service.change_password(
            admin.id, passwords.old_password, passwords.new_password, context
        )
    except DomainError as e:
        db.rollback()
        raise http_error(e)
    return MessageResponse(message="password changed")
