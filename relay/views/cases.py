import logging

from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ParseError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from relay.serializers.cases import CaseListQuerySerializer, CaseListSerializer, CaseStatusSerializer
from relay.services import cases as case_service
from relay.services.upstream import UpstreamClient

logger = logging.getLogger(__name__)


def _update_response(result):
    if result.success:
        return Response(result.value, status=200)
    return Response({'success': False, **result.error_payload()}, status=result.status_code)


def _invalid_update_body():
    msg = 'Invalid request body. Expected JSON with case data.'
    return Response({'success': False, 'ok': False, 'message': msg,
                     'error': {'code': 'validation_error', 'message': msg}}, status=400)


def _case_list_body(request) -> dict:
    # Anything but an array of account numbers falls back to every case
    try:
        data = request.data
    except ParseError:
        logger.warning("Case list body is not JSON; fetching all cases")
        return {}
    if not isinstance(data, dict) or 'doctorAccNos' not in data:
        return {}
    if not isinstance(data['doctorAccNos'], list):
        logger.warning("doctorAccNos is not an array; fetching all cases")
        return {}
    return data


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def case_list(request):
    """Aggregate cases for the given doctors.

    Body: ``{"doctorAccNos": ["A1", ...]}``; empty, omitted or not an array
    fetches every case.
    Query params:
      - status: NEW|PROCESSED
      - q: search patient name / surgeon / doctor account number
      - ordering: field name, prefix with ``-`` for descending
    """
    query = CaseListQuerySerializer(data=request.query_params)
    query.is_valid(raise_exception=True)
    params = query.validated_data
    body = CaseListSerializer(data=_case_list_body(request))
    body.is_valid(raise_exception=True)

    with UpstreamClient.from_settings(token=request.auth) as client:
        result = case_service.fetch_cases(client, body.validated_data['doctorAccNos'])
    if not result.success:
        return Response(result.error_payload(), status=result.status_code)

    cases = case_service.filter_cases(result.value, status=params.get('status'), q=params.get('q'))
    cases = case_service.sort_cases(cases, params.get('ordering'))
    return Response(cases)


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def case_status_update(request, case_id: str):
    s = CaseStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    with UpstreamClient.from_settings(token=request.auth) as client:
        result = case_service.update_case_status(client, case_id, s.validated_data['case_status'])
    return _update_response(result)


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def case_update(request, case_id: str):
    try:
        data = request.data
    except ParseError:
        return _invalid_update_body()
    if not isinstance(data, dict) or not data:
        return _invalid_update_body()
    with UpstreamClient.from_settings(token=request.auth) as client:
        result = case_service.update_case(client, case_id, dict(data))
    return _update_response(result)
