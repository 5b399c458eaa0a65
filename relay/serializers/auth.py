from rest_framework import serializers


class LoginSerializer(serializers.Serializer):
    # Upstream credentials are server-side; the form password is only
    # checked when MEDIBILL_DASHBOARD_PASSWORD is set.
    password = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)
