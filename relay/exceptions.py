"""
Error types raised while talking to the upstream API, and the DRF
exception handler that turns every failure into the same JSON shape::

    {"ok": false, "message": "...", "error": {"code": "...", "message": "..."}}
"""
from __future__ import annotations

from typing import Optional

from rest_framework import exceptions as drf_exceptions
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

MISSING_TOKEN_MESSAGE = 'Authorization token is missing.'


class RelayError(Exception):
    """Base class for failures surfaced to dashboard clients."""

    status_code = 500
    code = 'relay_error'
    default_message = 'Internal server error.'

    def __init__(self, message: Optional[str] = None, *, status_code: Optional[int] = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def as_payload(self) -> dict:
        return {'ok': False, 'message': self.message, 'error': {'code': self.code, 'message': self.message}}


class ConfigurationError(RelayError):
    code = 'configuration_error'
    default_message = 'Server configuration error.'


class InvalidCredentials(RelayError):
    status_code = 401
    code = 'invalid_credentials'
    default_message = 'Invalid credentials'


class UpstreamHTTPError(RelayError):
    """Upstream answered with a non-2xx status; the status is relayed as-is."""

    status_code = 502
    code = 'upstream_error'
    default_message = 'External API error.'


class MalformedResponse(RelayError):
    status_code = 502
    code = 'bad_gateway'
    default_message = 'Malformed response from external API.'


class UpstreamUnavailable(RelayError):
    status_code = 503
    code = 'upstream_unavailable'
    default_message = 'Network error or external API unreachable.'


def _detail_message(detail) -> str:
    if isinstance(detail, dict):
        if 'detail' in detail:
            return _detail_message(detail['detail'])
        parts = [f"{k}: {_detail_message(v)}" for k, v in detail.items()]
        return '; '.join(parts)
    if isinstance(detail, (list, tuple)):
        return ' '.join(_detail_message(d) for d in detail)
    return str(detail)


def api_exception_handler(exc, context):
    if isinstance(exc, RelayError):
        return Response(exc.as_payload(), status=exc.status_code)
    resp = drf_exception_handler(exc, context)
    if resp is None:
        return Response({'ok': False, 'message': str(exc), 'error': {'code': 'server_error', 'message': str(exc)}}, status=500)
    # normalize response, keeping headers such as WWW-Authenticate
    if isinstance(exc, drf_exceptions.NotAuthenticated):
        message = MISSING_TOKEN_MESSAGE
    else:
        message = _detail_message(resp.data)
    code = 'validation_error' if isinstance(exc, drf_exceptions.ValidationError) else 'api_error'
    resp.data = {'ok': False, 'message': message, 'error': {'code': code, 'message': message, 'detail': resp.data}}
    return resp
