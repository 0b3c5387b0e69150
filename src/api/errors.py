"""
HTTP mapping for the service error family.

The only place error types become status codes. Unexpected errors are
logged with their full cause chain and answered with a bare 500.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from src.core.errors import (
    AuthError,
    NotFoundError,
    ServiceError,
    ValidationError,
)

logger = logging.getLogger(__name__)

PUBLISH_CHALLENGE = 'Basic realm="publish"'


async def service_error_handler(request: Request, exc: Exception) -> Response:
    if isinstance(exc, ValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": exc.reason},
        )

    if isinstance(exc, AuthError):
        # Same response for every auth failure; the reason is only logged
        logger.warning("Authentication failed: %s", exc.message)
        return Response(
            status_code=status.HTTP_401_UNAUTHORIZED,
            headers={"WWW-Authenticate": PUBLISH_CHALLENGE},
        )

    if isinstance(exc, NotFoundError):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": exc.message},
        )

    chain = exc.cause_chain() if isinstance(exc, ServiceError) else [repr(exc)]
    logger.error(
        "%s %s failed:\n%s",
        request.method,
        request.url.path,
        "\nCaused by: ".join(chain),
        exc_info=exc,
    )
    return Response(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


def describe_validation_errors(errors: Sequence[Any]) -> str:
    """Join errors as `field: message`; the body/form/query prefix of each location is dropped."""
    parts = []
    for err in errors:
        field = ".".join(str(p) for p in err.get("loc", ())[1:])
        message = str(err.get("msg", "invalid"))
        parts.append(f"{field}: {message}" if field else message)
    return "; ".join(parts)


async def request_validation_handler(request: Request, exc: Exception) -> Response:
    """Missing/ill-typed form, query or JSON fields are a plain 400."""
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": describe_validation_errors(errors) or "Invalid request"},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
