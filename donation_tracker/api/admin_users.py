"""
Administrator account management. Super-admin only.

Accounts are never deleted: DELETE deactivates.
"""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from donation_tracker.api.deps import (
    get_request_context,
    http_error,
    require_super_admin,
)
from donation_tracker.api.rate_limit import admin_limit
from donation_tracker.errors import DomainError
from donation_tracker.models.base import get_db
from donation_tracker.models.enums import AuditAction, ResourceType
from donation_tracker.schemas.admin_user import (
    AdminCreate,
    AdminUpdate,
    AdminResponse,
    AdminMutationResponse,
)
from donation_tracker.security.guard import CurrentAdmin
from donation_tracker.services.admin_user_service import AdminUserService, admin_snapshot
from donation_tracker.services.audit_service import (
    AuditRecorder,
    RequestContext,
    sanitize_for_log,
)

router = APIRouter(prefix="/api/admin", tags=["Admin Users"])


@router.get("/users", response_model=list[AdminResponse])
@admin_limit
def list_admins(
    request: Request,
    include_inactive: bool = Query(default=False),
    admin: CurrentAdmin = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    return AdminUserService(db).list_admins(include_inactive)


@router.get("/users/{admin_id}", response_model=AdminResponse)
@admin_limit
def get_admin(
    request: Request,
    admin_id: int,
    admin: CurrentAdmin = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    try:
        return AdminUserService(db).get_admin(admin_id)
    except DomainError as e:
        raise http_error(e)


@router.post("/users", response_model=AdminMutationResponse, status_code=201)
@admin_limit
def create_admin(
    request: Request,
    user_data: AdminCreate,
    admin: CurrentAdmin = Depends(require_super_admin),
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    service = AdminUserService(db)
    try:
        created = service.create_admin(user_data, created_by=admin.id)
        db.commit()
    except DomainError as e:
        db.rollback()
        raise http_error(e)

    response = AdminMutationResponse(admin=created)
    AuditRecorder(db).record(
        AuditAction.CREATE_ADMIN,
        actor_id=admin.id,
        resource_type=ResourceType.ADMIN.value,
        resource_id=response.admin.id,
        after=sanitize_for_log(user_data.model_dump(mode="json")),
        context=context,
    )
    return response


@router.put("/users/{admin_id}", response_model=AdminMutationResponse)
@admin_limit
def update_admin(
    request: Request,
    admin_id: int,
    user_data: AdminUpdate,
    admin: CurrentAdmin = Depends(require_super_admin),
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    service = AdminUserService(db)
    try:
        updated, before = service.update_admin(admin_id, user_data, actor_id=admin.id)
        db.commit()
    except DomainError as e:
        db.rollback()
        raise http_error(e)

    response = AdminMutationResponse(admin=updated)
    AuditRecorder(db).record(
        AuditAction.UPDATE_ADMIN,
        actor_id=admin.id,
        resource_type=ResourceType.ADMIN.value,
        resource_id=admin_id,
        before=before,
        after=sanitize_for_log(user_data.model_dump(mode="json", exclude_unset=True)),
        context=context,
    )
    return response


@router.delete("/users/{admin_id}", response_model=AdminMutationResponse)
@admin_limit
def deactivate_admin(
    request: Request,
    admin_id: int,
    admin: CurrentAdmin = Depends(require_super_admin),
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    """Deactivate an account. The last active super-admin is protected."""
    service = AdminUserService(db)
    try:
        target = service.get_admin(admin_id)
        before = admin_snapshot(target)
        deactivated = service.deactivate_admin(admin_id, actor_id=admin.id)
        db.commit()
    except DomainError as e:
        db.rollback()
        raise http_error(e)

    response = AdminMutationResponse(admin=deactivated)
    AuditRecorder(db).record(
        AuditAction.DEACTIVATE_ADMIN,
        actor_id=admin.id,
        resource_type=ResourceType.ADMIN.value,
        resource_id=admin_id,
        before=before,
        after={"is_active": False},
        context=context,
    )
    return response
