"""Maps domain errors to HTTP responses."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from strain_api.core.exceptions import (
    AppError,
    AuthError,
    ConflictError,
    InvalidInputError,
    NotFoundError,
    ServiceUnavailable,
    SubmissionConflictError,
    UpstreamError,
)

logger = logging.getLogger(__name__)


def http_status_for(exc: AppError) -> int:
    if isinstance(exc, AuthError):
        return status.HTTP_401_UNAUTHORIZED
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, ConflictError):
        return status.HTTP_409_CONFLICT
    if isinstance(exc, InvalidInputError):
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    if isinstance(exc, UpstreamError):
        # Cromwell answers 403 for malformed ids and already-finished workflows.
        if exc.status_code == status.HTTP_403_FORBIDDEN:
            return status.HTTP_403_FORBIDDEN
        return status.HTTP_502_BAD_GATEWAY
    if isinstance(exc, ServiceUnavailable):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    code = http_status_for(exc)
    if code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    content: dict = {"detail": exc.message or exc.__class__.__name__}
    if isinstance(exc, SubmissionConflictError):
        content["workflowId"] = exc.workflow_id
    return JSONResponse(status_code=code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
