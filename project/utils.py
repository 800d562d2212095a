"""
Response envelope shared by every API endpoint.

Success: {"success": true, "data": ..., "message": ...}
Failure: {"success": false, "error": ..., "code": ..., "errors": {field: [...]}}
"""
import logging

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from django_ratelimit.exceptions import Ratelimited
from rest_framework import exceptions, status
from rest_framework.response import Response
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

FieldErrors = Dict[str, List[str]]


def build_envelope(success: bool, **parts) -> Dict[str, Any]:
    """Drop empty parts so clients can test for key presence"""
    envelope = {"success": success}
    for key in ('data', 'message', 'error', 'code', 'errors'):
        value = parts.get(key)
        if key == 'data' and value is not None:
            envelope[key] = value
        elif key != 'data' and value:
            envelope[key] = value
    return envelope


def success_response(
    data: Optional[Any] = None,
    message: Optional[str] = None,
    status_code: int = status.HTTP_200_OK
) -> Response:
    return Response(build_envelope(True, data=data, message=message), status=status_code)


def error_response(
    error: str,
    status_code: int = status.HTTP_400_BAD_REQUEST,
    errors: Optional[FieldErrors] = None,
    code: Optional[str] = None
) -> Response:
    return Response(build_envelope(False, error=error, code=code, errors=errors), status=status_code)


def validation_error_response(errors: FieldErrors, status_code: int = status.HTTP_400_BAD_REQUEST) -> Response:
    """Serializer or validator errors, keyed by field"""
    return error_response("Validation failed", status_code=status_code, errors=errors, code='validation_error')


def _error_code(exc: exceptions.APIException) -> str:
    return getattr(exc.detail, 'code', None) or exc.default_code


def api_exception_handler(exc, context):
    """
    DRF exception handler rendering every error in the envelope.

    Ledger exceptions carry an optional ``errors`` mapping with field-level
    detail; DRF validation errors are flattened into the same shape.
    Anything that is not an ``APIException`` is left to Django (500).
    """
    if isinstance(exc, Ratelimited):
        return error_response(
            "Too many requests, slow down",
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            code='rate_limited'
        )
    if isinstance(exc, Http404):
        exc = exceptions.NotFound()
    elif isinstance(exc, DjangoPermissionDenied):
        exc = exceptions.PermissionDenied()

    if not isinstance(exc, exceptions.APIException):
        return None

    if isinstance(exc, exceptions.ValidationError):
        detail = exc.detail if isinstance(exc.detail, dict) else {'non_field_errors': exc.detail}
        return validation_error_response(detail, status_code=exc.status_code)

    if exc.status_code >= 500:
        logger.error("API error %s: %s", exc.status_code, exc.detail)

    response = error_response(
        str(exc.detail),
        status_code=exc.status_code,
        errors=getattr(exc, 'errors', None),
        code=_error_code(exc)
    )
    auth_header = getattr(exc, 'auth_header', None)
    if auth_header:
        response['WWW-Authenticate'] = auth_header
    return response


class StandardizedResponseMixin:
    """Envelope for the read actions of DRF generic views"""
    list_message = "Retrieved {count} items"

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        serializer = self.get_serializer(queryset, many=True)
        return success_response(
            data=serializer.data,
            message=self.list_message.format(count=len(serializer.data))
        )

    def retrieve(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_object())
        return success_response(data=serializer.data, message="Retrieved successfully")
