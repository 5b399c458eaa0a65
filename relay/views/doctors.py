from django.utils.cache import patch_cache_control
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from relay.services.doctors import list_doctors
from relay.services.upstream import UpstreamClient


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def doctors_list(request):
    """Return the upstream doctor list without test practices.

    The response is a bare JSON array; CDN caching is allowed for 5 minutes.
    """
    with UpstreamClient.from_settings(token=request.auth) as client:
        result = list_doctors(client)
    if not result.success:
        return Response(result.error_payload(), status=result.status_code)

    resp = Response(result.value)
    patch_cache_control(resp, public=True, s_maxage=300, stale_while_revalidate=3600)
    return resp
