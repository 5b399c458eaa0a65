"""
Login relay.

Exchanges the dashboard login for an upstream bearer token using the
server-side MediBill credentials.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, authentication_classes, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle

from relay.config import UpstreamConfig
from relay.serializers.auth import LoginSerializer
from relay.services import auth as auth_service


class LoginRateThrottle(AnonRateThrottle):
    scope = 'login'


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def login_view(request):
    """
    Accepts fields:
      - password (optional; checked only when a dashboard password is configured)
    Returns ``{token, expiresAt}`` with ``expiresAt`` in epoch milliseconds.
    """
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)

    result = auth_service.login(UpstreamConfig.from_settings(), s.validated_data.get('password'))
    if not result.success:
        return Response(result.error_payload(), status=result.status_code)
    return Response(result.value.as_dict(), status=200)
