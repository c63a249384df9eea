"""
API error envelope and shared API exceptions.

Every error leaves the API as:
    {"success": false, "error": {"code", "message", "details", "request_id"}}
"""
import logging
import uuid
from typing import Any, Dict

from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import (
    APIException,
    NotAuthenticated,
    PermissionDenied,
    ValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from apps.core.observability import metrics

logger = logging.getLogger(__name__)


class ConflictError(APIException):
    """409 Conflict for business rules that block an action."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Conflict.'
    default_code = 'conflict'


class PermissionCheckFailed(APIException):
    """
    The permission store could not be read. The gate fails closed, but this
    is reported as a server error so that "broken" stays distinct from "denied".
    """
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Permission check failed'
    default_code = 'permission_check_failed'


def ensure_request_id(request) -> str:
    """Return the request's correlation id, assigning one if missing."""
    rid = getattr(request, 'request_id', None) if request is not None else None
    if not rid:
        rid = str(uuid.uuid4())
        if request is not None:
            setattr(request, 'request_id', rid)
    return rid


def build_error_envelope(*, request=None, code: str, message: str, details: Any = None) -> Dict[str, Any]:
    return {
        'success': False,
        'error': {
            'code': code,
            'message': message,
            'details': details,
            'request_id': ensure_request_id(request),
        },
    }


def _code_for(exc: Exception, http_status: int) -> str:
    if isinstance(exc, ValidationError):
        return 'validation_error'
    if isinstance(exc, NotAuthenticated):
        return 'not_authenticated'
    if isinstance(exc, PermissionDenied):
        return 'permission_denied'
    if isinstance(exc, Http404):
        return 'not_found'
    if isinstance(exc, APIException):
        return getattr(exc, 'default_code', 'api_error') or 'api_error'
    if http_status >= 500:
        return 'server_error'
    return 'error'


def _first_message(data):
    """First non-empty message in DRF error data (nested lists/dicts), or None."""
    if isinstance(data, dict):
        data = list(data.values())
    if isinstance(data, (list, tuple)):
        for item in data:
            message = _first_message(item)
            if message:
                return message
        return None
    return str(data) if data else None


def api_exception_handler(exc: Exception, context: Dict[str, Any]):
    request = context.get('request')
    response = drf_exception_handler(exc, context)

    # Unhandled error
    if response is None:
        metrics.exceptions_total.labels(
            exception_type=exc.__class__.__name__,
            location='api',
        ).inc()
        logger.exception(
            'Unhandled API exception',
            exc_info=exc,
            extra={'event': 'api_unhandled_exception', 'exception_type': exc.__class__.__name__},
        )
        return Response(
            build_error_envelope(
                request=request,
                code='server_error',
                message='Unexpected server error.',
            ),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    http_status = response.status_code
    code = _code_for(exc, http_status)
    data = response.data

    # {"detail": ...} -> message, remaining keys -> details
    # field errors -> first field message, all errors -> details
    if isinstance(data, dict) and 'detail' in data:
        message = str(data['detail'])
        details = {k: v for k, v in data.items() if k != 'detail'} or None
    else:
        message = _first_message(data) or 'Request failed.'
        details = data

    headers = {
        name: response[name]
        for name in ('WWW-Authenticate', 'Retry-After')
        if response.has_header(name)
    }

    return Response(
        build_error_envelope(
            request=request,
            code=code,
            message=message,
            details=details,
        ),
        status=http_status,
        headers=headers,
    )
