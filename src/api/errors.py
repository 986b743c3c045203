"""
AppError translation - turns domain errors into HTTP responses.

Client-caused errors (400/403/404/409) are returned with their message and
are not logged. Internal errors are logged with their full causal chain and
answered with a generic message that leaks nothing about the cause.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from src.domain.exceptions import AppError

logger = logging.getLogger(__name__)

INTERNAL_ERROR_DETAIL = "internal server error"


def log_app_error(error: AppError) -> None:
    """Log every node of the causal chain at ERROR level."""
    for line in error.describe():
        logger.error(line)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.loggable:
        logger.error("%s %s failed with status %d", request.method, request.url.path, exc.status_code)
        log_app_error(exc)

    detail = INTERNAL_ERROR_DETAIL if exc.status_code >= 500 else exc.message
    return JSONResponse(status_code=exc.status_code, content={"detail": detail})
