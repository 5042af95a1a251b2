"""
core.domain.exception_handler — Turns CaseTrack domain errors into API responses.

The case repository, the notification dispatcher and the account
services raise the framework-free errors in ``core.domain.exceptions``.
This handler gives every one of them a JSON body of the form
``{"detail": "<message>"}`` and the status listed in ``_STATUS_MAP``,
so views call services without wrapping them in try/except.

Wired up through ``REST_FRAMEWORK["EXCEPTION_HANDLER"]`` in
``casetrack/settings.py``.
"""

from __future__ import annotations

import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_default_handler

from core.domain.exceptions import (
    Conflict,
    DomainError,
    InvalidTransition,
    NotFound,
    PermissionDenied,
    Unauthorized,
    ValidationFailed,
)

logger = logging.getLogger(__name__)

# Checked in insertion order; subclasses before their bases.
_STATUS_MAP: dict[type[DomainError], int] = {
    Unauthorized:      401,
    PermissionDenied:  403,
    NotFound:          404,
    InvalidTransition: 409,
    Conflict:          409,
    ValidationFailed:  400,
    DomainError:       400,
}

# Sent with 401 so clients know to retry with a JWT access token.
_AUTH_CHALLENGE = 'Bearer realm="casetrack"'


def _status_for(exc: DomainError) -> int:
    for exc_class, status_code in _STATUS_MAP.items():
        if isinstance(exc, exc_class):
            return status_code
    return 400


def domain_exception_handler(exc: Exception, context: dict) -> Response | None:
    """
    Handle DRF's own exceptions as usual, then CaseTrack domain errors.

    Returns ``None`` for anything else so DRF re-raises it as a 500.
    """
    response = drf_default_handler(exc, context)
    if response is not None or not isinstance(exc, DomainError):
        return response

    status_code = _status_for(exc)
    view = context.get("view")
    logger.warning(
        "%s -> %s in %s: %s",
        type(exc).__name__,
        status_code,
        type(view).__name__ if view is not None else "unknown view",
        exc,
    )

    response = Response({"detail": str(exc)}, status=status_code)
    if status_code == 401:
        response["WWW-Authenticate"] = _AUTH_CHALLENGE
    return response
