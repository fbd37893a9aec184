"""
Error taxonomy shared by the REST views, the service layer and the realtime
channel, plus the DRF exception handler that renders it.

Every error response has the shape::

    {"error": "<kind>", "message": "<text>", "errors": [{"field": ..., "message": ...}]}
"""

import logging

from django.conf import settings
from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class CampusDealsError(exceptions.APIException):
    """Base class for errors raised by CampusDeals services."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    kind = 'internal'
    default_detail = 'An unexpected error occurred.'
    default_code = 'internal'

    def __init__(self, message=None, errors=None):
        super().__init__(detail=message or self.default_detail, code=self.default_code)
        self.message = str(self.detail)
        self.errors = errors or []

    def to_dict(self):
        payload = {'error': self.kind, 'message': self.message}
        if self.errors:
            payload['errors'] = self.errors
        return payload


class InvalidArgument(CampusDealsError):
    status_code = status.HTTP_400_BAD_REQUEST
    kind = 'invalid_argument'
    default_detail = 'Invalid request parameters.'
    default_code = 'invalid_argument'

    def __init__(self, message=None, errors=None, field=None):
        if field and not errors:
            errors = [{'field': field, 'message': message or self.default_detail}]
        super().__init__(message, errors)


class InvalidOperation(CampusDealsError):
    status_code = status.HTTP_400_BAD_REQUEST
    kind = 'invalid_operation'
    default_detail = 'Operation not allowed.'
    default_code = 'invalid_operation'


class Unauthenticated(CampusDealsError):
    status_code = status.HTTP_401_UNAUTHORIZED
    kind = 'unauthenticated'
    default_detail = 'Authentication required.'
    default_code = 'unauthenticated'


class Forbidden(CampusDealsError):
    status_code = status.HTTP_403_FORBIDDEN
    kind = 'forbidden'
    default_detail = 'You do not have access to this resource.'
    default_code = 'forbidden'


class NotFound(CampusDealsError):
    status_code = status.HTTP_404_NOT_FOUND
    kind = 'not_found'
    default_detail = 'Resource not found.'
    default_code = 'not_found'


class Conflict(CampusDealsError):
    status_code = status.HTTP_409_CONFLICT
    kind = 'conflict'
    default_detail = 'Resource already exists.'
    default_code = 'conflict'


class Internal(CampusDealsError):
    pass


def format_validation_errors(detail, prefix=''):
    """Flatten a DRF ValidationError detail into a list of per-field problems."""
    errors = []
    if isinstance(detail, dict):
        for field, value in detail.items():
            name = f'{prefix}.{field}' if prefix else str(field)
            errors.extend(format_validation_errors(value, name))
    elif isinstance(detail, list):
        for value in detail:
            errors.extend(format_validation_errors(value, prefix))
    else:
        errors.append({'field': prefix or None, 'message': str(detail)})
    return errors


def _translate(exc):
    if isinstance(exc, CampusDealsError):
        return exc
    if isinstance(exc, exceptions.ValidationError):
        return InvalidArgument('Invalid request data', errors=format_validation_errors(exc.detail))
    if isinstance(exc, (exceptions.NotAuthenticated, exceptions.AuthenticationFailed)):
        return Unauthenticated(str(exc.detail))
    if isinstance(exc, exceptions.PermissionDenied):
        return Forbidden(str(exc.detail))
    if isinstance(exc, DjangoPermissionDenied):
        return Forbidden()
    if isinstance(exc, (exceptions.NotFound, Http404)):
        return NotFound()
    if isinstance(exc, exceptions.ParseError):
        return InvalidArgument(str(exc.detail))
    return None


def exception_handler(exc, context):
    """DRF exception handler rendering every error in the CampusDeals shape."""
    error = _translate(exc)

    if error is None and isinstance(exc, exceptions.APIException):
        # Remaining DRF errors (throttling, method not allowed, ...) keep their status
        return Response(
            {'error': exc.default_code, 'message': str(exc.detail)},
            status=exc.status_code,
            headers=_auth_headers(exc),
        )

    if error is None:
        view = context.get('view')
        logger.exception(f"Unhandled error in {view.__class__.__name__ if view else 'view'}: {exc}")
        error = Internal(str(exc) if settings.DEBUG else None)
    elif isinstance(error, Internal):
        logger.error(f"Internal error: {error.message}")
        if not settings.DEBUG:
            error = Internal()

    return Response(error.to_dict(), status=error.status_code, headers=_auth_headers(exc))


def _auth_headers(exc):
    headers = {}
    if getattr(exc, 'auth_header', None):
        headers['WWW-Authenticate'] = exc.auth_header
    if getattr(exc, 'wait', None):
        headers['Retry-After'] = '%d' % exc.wait
    return headers
