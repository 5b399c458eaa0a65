from django.http import JsonResponse

from relay.config import UpstreamConfig


def healthz(request):
    config = UpstreamConfig.from_settings()
    return JsonResponse({'ok': True, 'upstreamConfigured': config.is_configured})
