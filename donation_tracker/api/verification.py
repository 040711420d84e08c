"""
Public ledger verification.

/status and /toggle are always reachable. Everything else answers
404 while the verification_enabled setting is off.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from donation_tracker.api.deps import http_error, require_admin
from donation_tracker.api.rate_limit import public_limit
from donation_tracker.errors import DomainError
from donation_tracker.models.base import get_db
from donation_tracker.schemas.verification import (
    GenerateHashRequest,
    GenerateHashResponse,
    DailyHashResponse,
    ToggleVerificationRequest,
    ToggleVerificationResponse,
    VerificationStatus,
    VerifyDateResponse,
)
from donation_tracker.security.guard import CurrentAdmin
from donation_tracker.services.verification_service import VerificationService

router = APIRouter(prefix="/api/verification", tags=["Verification"])


def enabled_service(db: Session = Depends(get_db)) -> VerificationService:
    """Dependency that 404s unless public verification is switched on."""
    service = VerificationService(db)
    try:
        service.require_enabled()
    except DomainError as e:
        raise http_error(e)
    return service


@router.get("/status", response_model=VerificationStatus)
@public_limit
def verification_status(request: Request, db: Session = Depends(get_db)):
    return VerificationStatus(verification_enabled=VerificationService(db).is_enabled())


@router.get("/hash/{day}", response_model=DailyHashResponse)
@public_limit
def get_daily_hash(
    request: Request,
    day: date,
    service: VerificationService = Depends(enabled_service),
):
    try:
        return service.get_hash(day)
    except DomainError as e:
        raise http_error(e)


@router.get("/data/{day}", response_class=PlainTextResponse)
@public_limit
def export_daily_data(
    request: Request,
    day: date,
    service: VerificationService = Depends(enabled_service),
):
    """The day's transactions as CSV, in the order they were hashed."""
    try:
        body = service.export_csv(day)
    except DomainError as e:
        raise http_error(e)
    return PlainTextResponse(
        body,
        media_type="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="transactions-{day.isoformat()}.csv"'
        },
    )


@router.get("/hashes", response_model=list[DailyHashResponse])
@public_limit
def list_daily_hashes(
    request: Request,
    limit: int = Query(default=30),
    service: VerificationService = Depends(enabled_service),
):
    """Published digests, newest date first."""
    return service.list_hashes(limit)


@router.get("/verify/{day}", response_model=VerifyDateResponse)
@public_limit
def verify_day(
    request: Request,
    day: date,
    service: VerificationService = Depends(enabled_service),
):
    try:
        return service.verify_date(day)
    except DomainError as e:
        raise http_error(e)


@router.post("/generate", response_model=GenerateHashResponse)
@public_limit
def generate_daily_hash(
    request: Request,
    hash_request: GenerateHashRequest,
    admin: CurrentAdmin = Depends(require_admin),
    service: VerificationService = Depends(enabled_service),
    db: Session = Depends(get_db),
):
    """Compute and publish (or republish) the digest for a date."""
    try:
        daily = service.generate_for_date(hash_request.date)
        db.commit()
    except DomainError as e:
        db.rollback()
        raise http_error(e)
    return GenerateHashResponse(
        date=daily.date,
        hash=daily.hash,
        transactions_count=daily.transactions_count,
    )


@router.post("/toggle", response_model=ToggleVerificationResponse)
@public_limit
def toggle_verification(
    request: Request,
    toggle: ToggleVerificationRequest,
    admin: CurrentAdmin = Depends(require_admin),
    db: Session = Depends(get_db),
):
    enabled = VerificationService(db).set_enabled(toggle.enabled)
    db.commit()
    return ToggleVerificationResponse(verification_enabled=enabled)
