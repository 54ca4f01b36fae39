# app/api/v1/errors.py
"""Map computation and storage errors to HTTP responses in the v1 envelope."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from app.api.v1.envelope import error
from app.domain.errors import (
    AggregationError,
    AlreadyCancelledError,
    BillingCoreError,
)
from app.infrastructure.db.gateway import ConstraintError, GatewayError, NotFoundError
from app.infrastructure.external.email_client import EmailDeliveryError

logger = logging.getLogger("api.v1.errors")

# anything else derived from BillingCoreError is a 422
STATUS_BY_ERROR: list[tuple[type[Exception], int]] = [
    (AlreadyCancelledError, status.HTTP_409_CONFLICT),
    (AggregationError, status.HTTP_502_BAD_GATEWAY),
    (BillingCoreError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConstraintError, status.HTTP_409_CONFLICT),
    (GatewayError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (EmailDeliveryError, status.HTTP_502_BAD_GATEWAY),
]


def status_for(exc: Exception) -> int:
    for error_type, code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _body(exc: Exception) -> dict:
    if isinstance(exc, BillingCoreError):
        return error(exc.message, errors=[exc.to_dict()])
    if isinstance(exc, NotFoundError):
        return error(str(exc), errors=[{"code": "not_found", "message": str(exc)}])
    if isinstance(exc, ConstraintError):
        return error(str(exc), errors=[{"code": "conflict", "message": str(exc)}])
    return error(str(exc) or exc.__class__.__name__)


async def handle_domain_error(request: Request, exc: Exception) -> JSONResponse:
    code = status_for(exc)
    if code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        logger.info("%s %s rejected (%d): %s", request.method, request.url.path, code, exc)
    return JSONResponse(status_code=code, content=_body(exc))


def register_error_handlers(app: FastAPI) -> None:
    for error_type in (BillingCoreError, GatewayError, EmailDeliveryError):
        app.add_exception_handler(error_type, handle_domain_error)
