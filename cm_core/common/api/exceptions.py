# cm_core/common/api/exceptions.py

from __future__ import annotations

import logging
import uuid
from typing import Any

from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import (
    APIException,
    AuthenticationFailed,
    NotAuthenticated,
    PermissionDenied,
    ValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


def ensure_request_id(request) -> str:
    """
    Ensures request has a stable request_id attribute and returns it.
    Safe to call from middleware and DRF exception handler.
    """
    rid = getattr(request, "request_id", None) if request is not None else None
    if not rid:
        rid = uuid.uuid4().hex
        if request is not None:
            setattr(request, "request_id", rid)
    return rid


def build_error_envelope(
    *,
    request=None,
    status_code: int,
    code: str,
    message: str,
    details: Any = None,
) -> dict[str, Any]:
    """
    Canonical error envelope for the claims API.
    Reusable from Django views (JsonResponse) and DRF (Response).
    """
    rid = ensure_request_id(request)
    return {
        "error": {
            "statusCode": status_code,
            "code": code,
            "message": message,
            "details": details,
            "requestId": rid,
        }
    }


# -------------------------------------------------------------------
# Domain error taxonomy
# -------------------------------------------------------------------

class DomainError(APIException):
    """
    Typed business failure with a stable machine-readable code.
    Raised by services/selectors and rendered verbatim by api_exception_handler.
    """
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Request failed."
    default_code = "VALIDATION_ERROR"

    def __init__(self, message: str | None = None, code: str | None = None):
        self.error_code = code or self.default_code
        super().__init__(detail=message or self.default_detail, code=self.error_code)


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "NOT_FOUND"


class PermissionDeniedError(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Insufficient permissions"
    default_code = "PERMISSION_DENIED"


class BusinessRuleError(DomainError):
    """
    422: the request is well-formed but breaks a business precondition
    (inactive/mismatched references, state-machine rules).
    """
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = "Business rule violated."
    default_code = "UNPROCESSABLE"


class ConflictError(DomainError):
    """
    409 Conflict that still flows through the global exception handler.
    Use for unique-identifier clashes and lost concurrent updates.
    """
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict."
    default_code = "CONFLICT"


class InternalError(DomainError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"
    default_code = "INTERNAL_ERROR"


def _code_for(exc: Exception, http_status: int) -> str:
    if isinstance(exc, DomainError):
        return exc.error_code
    if isinstance(exc, ValidationError):
        return "VALIDATION_ERROR"
    if isinstance(exc, (NotAuthenticated, AuthenticationFailed)):
        return "NOT_AUTHENTICATED"
    if isinstance(exc, PermissionDenied):
        return "PERMISSION_DENIED"
    if isinstance(exc, Http404):
        return "NOT_FOUND"
    if http_status == status.HTTP_405_METHOD_NOT_ALLOWED:
        return "METHOD_NOT_ALLOWED"
    if http_status >= 500:
        return "INTERNAL_ERROR"
    return "VALIDATION_ERROR" if http_status == 400 else "ERROR"


def api_exception_handler(exc: Exception, context: dict[str, Any]):
    request = context.get("request")
    response = drf_exception_handler(exc, context)

    # Truly unhandled error
    if response is None:
        logger.error("Unhandled error", exc_info=exc, extra={"request_id": ensure_request_id(request)})
        return Response(
            build_error_envelope(
                request=request,
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                code="INTERNAL_ERROR",
                message="Internal server error",
            ),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    http_status = response.status_code
    code = _code_for(exc, http_status)
    data = response.data

    # 1) {"detail": "..."} -> message=detail, details=None
    # 2) {"detail": "...", ...} -> message=detail, details=rest
    # 3) field errors -> message="Validation failed", details=data
    if isinstance(data, dict) and "detail" in data:
        message = str(data.get("detail"))
        rest = {k: v for k, v in data.items() if k != "detail"}
        details = rest or None
    elif isinstance(data, list) and len(data) == 1:
        message = str(data[0])
        details = None
    else:
        message = "Validation failed" if code == "VALIDATION_ERROR" else "Request failed."
        details = data

    if http_status >= 500:
        logger.error("Request failed with %s", code, extra={"request_id": ensure_request_id(request)})

    return Response(
        build_error_envelope(
            request=request,
            status_code=http_status,
            code=code,
            message=message,
            details=details,
        ),
        status=http_status,
        headers=response.headers,
    )
