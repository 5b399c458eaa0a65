"""
Bearer token authentication for the relay endpoints.

The relay does not issue or verify tokens itself: the token handed out by
the upstream login is simply carried on each request and forwarded.  This
class only extracts it from the ``Authorization`` header and exposes it as
``request.auth``.
"""
from __future__ import annotations

import hashlib

from rest_framework import authentication, exceptions


class UpstreamUser:
    """Request principal holding the upstream bearer token."""

    is_authenticated = True
    is_anonymous = False

    def __init__(self, token: str):
        self.token = token
        # Stable per-token identity for DRF throttling
        self.pk = hashlib.sha256(token.encode()).hexdigest()[:16]

    def __str__(self) -> str:
        return f"UpstreamUser({self.token[:10]}...)"


class BearerTokenAuthentication(authentication.BaseAuthentication):
    keyword = 'Bearer'

    def authenticate(self, request):
        auth = authentication.get_authorization_header(request).split()
        if not auth or auth[0].lower() != self.keyword.lower().encode():
            return None
        if len(auth) != 2:
            raise exceptions.AuthenticationFailed('Invalid Authorization header. Expected "Bearer <token>".')
        try:
            token = auth[1].decode()
        except UnicodeError:
            raise exceptions.AuthenticationFailed('Invalid token header. Token string should not contain invalid characters.')
        return UpstreamUser(token), token

    def authenticate_header(self, request):
        return self.keyword
