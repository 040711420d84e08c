"""
Donation Tracker: FastAPI application.

This is the entry point for the application.
All routers and error handlers are registered here.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from donation_tracker.config import get_settings
from donation_tracker.api.rate_limit import limiter, rate_limit_exceeded_handler
from donation_tracker.api.health import router as health_router
from donation_tracker.api.auth import router as auth_router
from donation_tracker.api.public import router as public_router
from donation_tracker.api.campaigns import router as campaigns_router
from donation_tracker.api.donations import router as donations_router
from donation_tracker.api.reports import router as reports_router
from donation_tracker.api.admin_users import router as admin_users_router
from donation_tracker.api.audit_logs import router as audit_logs_router
from donation_tracker.api.verification import router as verification_router

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


settings = get_settings()
configure_logging(settings.LOG_LEVEL)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Transparent donation tracking with a publicly verifiable ledger",
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


# --- Error handlers ---

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if isinstance(exc.detail, dict):
        body = exc.detail
    else:
        body = {"error": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=body, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "msg": error["msg"],
            "loc": [str(part) for part in error["loc"]],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"errors": errors})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return JSONResponse(status_code=500, content={"error": "internal server error"})


# Register routers
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(public_router)
app.include_router(campaigns_router)
app.include_router(donations_router)
app.include_router(reports_router)
app.include_router(admin_users_router)
app.include_router(audit_logs_router)
app.include_router(verification_router)
