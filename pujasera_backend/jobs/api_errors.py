# jobs/api_errors.py

"""
API ERROR NORMALIZATION

Canonical error body: {"error": {"code": ..., "message": ...}}
Domain errors (the jobs taxonomy and its subclasses) map to a status code
by their base class.
"""

from __future__ import annotations

import re

from rest_framework import status
from rest_framework.response import Response

from jobs.exceptions import (
    GatewayError,
    InsufficientBalance,
    JobError,
    JobValidationError,
    NotFound,
)

_STATUS_BY_ERROR = (
    (JobValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFound, status.HTTP_404_NOT_FOUND),
    (InsufficientBalance, status.HTTP_409_CONFLICT),
    (GatewayError, status.HTTP_502_BAD_GATEWAY),
)


def error_response(*, code: str, message: str, http_status: int):
    """
    Canonical API error response.
    """
    return Response(
        {"error": {"code": code, "message": message}},
        status=http_status,
    )


def _error_code(exc: Exception) -> str:
    name = exc.__class__.__name__
    if name.endswith("Error"):
        name = name[: -len("Error")]
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).upper()


def job_error_response(exc: JobError):
    http_status = status.HTTP_400_BAD_REQUEST
    for error_class, mapped in _STATUS_BY_ERROR:
        if isinstance(exc, error_class):
            http_status = mapped
            break
    return error_response(code=_error_code(exc), message=str(exc), http_status=http_status)
