from rest_framework import serializers

from relay.services.normalize import CASE_STATUSES


class CaseListSerializer(serializers.Serializer):
    doctorAccNos = serializers.ListField(
        child=serializers.CharField(max_length=64, allow_blank=True), required=False, default=list, allow_empty=True
    )

    def validate_doctorAccNos(self, v):
        return [acc_no.strip() for acc_no in v if acc_no and acc_no.strip()]


class CaseListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=CASE_STATUSES, required=False)
    q = serializers.CharField(max_length=64, required=False, allow_blank=True)
    ordering = serializers.RegexField(r'^-?[A-Za-z_][A-Za-z0-9_]*$', max_length=64, required=False)


class CaseStatusSerializer(serializers.Serializer):
    case_status = serializers.ChoiceField(
        choices=CASE_STATUSES,
        error_messages={'invalid_choice': 'Invalid case_status provided in request body. Must be NEW or PROCESSED.'},
    )
