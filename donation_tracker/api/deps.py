"""
Shared FastAPI dependencies: bearer authentication, role checks
and request provenance.
"""

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from donation_tracker.errors import DomainError
from donation_tracker.security.guard import (
    ANY_ADMIN,
    AUTHORIZATION_REQUIRED,
    SUPER_ADMIN_ONLY,
    AccessDenied,
    CurrentAdmin,
    check_role,
)
from donation_tracker.security.tokens import InvalidTokenError, decode_access_token
from donation_tracker.services.audit_service import RequestContext

INVALID_TOKEN = "invalid token"

bearer_scheme = HTTPBearer(auto_error=False)


def http_error(e: DomainError) -> HTTPException:
    """Translate a service error into the HTTP response it maps to."""
    return HTTPException(status_code=e.status_code, detail=e.payload())


def get_current_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> CurrentAdmin:
    """
    Resolve the caller from the Authorization header.

    No header is 401. A header whose token fails verification is
    403, not 401.
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=401, detail=AUTHORIZATION_REQUIRED)
    try:
        claims = decode_access_token(credentials.credentials)
    except InvalidTokenError:
        raise HTTPException(status_code=403, detail=INVALID_TOKEN)
    return CurrentAdmin.from_claims(claims)


def _require(allowed: frozenset):
    def dependency(admin: CurrentAdmin = Depends(get_current_admin)) -> CurrentAdmin:
        try:
            check_role(admin.role, allowed)
        except AccessDenied as e:
            raise HTTPException(status_code=e.status_code, detail=e.message)
        return admin

    return dependency


require_admin = _require(ANY_ADMIN)
require_super_admin = _require(SUPER_ADMIN_ONLY)


def get_request_context(request: Request) -> RequestContext:
    return RequestContext.from_request(request)
