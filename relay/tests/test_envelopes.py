import pytest

from relay.exceptions import MalformedResponse
from relay.services.envelopes import unwrap_case, unwrap_cases, unwrap_doctors, unwrap_token

CASE = {'id': 1, 'patient_name': 'Liam', 'case_status': ''}


def test_doctors_from_status_envelope_and_bare_array():
    docs = [{'user_id': 1}, {'user_id': 2}]
    assert unwrap_doctors({'status': 'success', 'doctors': docs}) == docs
    assert unwrap_doctors(docs) == docs


@pytest.mark.parametrize('payload', [
    {'status': 'error', 'doctors': []},
    {'status': 'success'},
    'doctors',
    None,
])
def test_doctors_malformed(payload):
    with pytest.raises(MalformedResponse) as exc:
        unwrap_doctors(payload)
    assert exc.value.status_code == 502


@pytest.mark.parametrize('payload,expected', [
    ([CASE], [CASE]),
    ({'status': 'success', 'case_submissions': [CASE]}, [CASE]),
    ({'case_submission': CASE}, [CASE]),
    ({'case_submission': [CASE, CASE]}, [CASE, CASE]),
    ({'cases': []}, []),
    ({'data': [CASE, 'junk']}, [CASE]),
    (CASE, [CASE]),
])
def test_case_list_shapes(payload, expected):
    assert unwrap_cases(payload) == expected


@pytest.mark.parametrize('payload', [{'message': 'ok'}, {'status': 'fail', 'cases': [CASE]}, 42])
def test_case_list_malformed(payload):
    with pytest.raises(MalformedResponse):
        unwrap_cases(payload)


@pytest.mark.parametrize('payload', [
    CASE,
    {'status': 'success', 'case_submission': CASE},
    {'updated_case': CASE},
    {'data': [CASE]},
])
def test_single_case_shapes(payload):
    assert unwrap_case(payload) == CASE


def test_single_case_without_echo_is_malformed():
    with pytest.raises(MalformedResponse):
        unwrap_case({'status': 'success', 'message': 'Case updated'})


@pytest.mark.parametrize('payload,expected', [
    ({'status': 'success', 'token': 'abc'}, ('abc', None)),
    ({'token': 'abc', 'expires_in': 7200}, ('abc', 7200.0)),
    ({'access_token': 'abc', 'expires_in': '60'}, ('abc', 60.0)),
    ({'data': {'token': 'abc', 'expires_in': 'soon'}}, ('abc', None)),
    ({'token': 'abc', 'expires_in': 0}, ('abc', None)),
])
def test_token_shapes(payload, expected):
    assert unwrap_token(payload) == expected


@pytest.mark.parametrize('payload', [{}, {'token': ''}, {'status': 'error', 'token': 'abc'}, ['abc']])
def test_token_missing(payload):
    with pytest.raises(MalformedResponse):
        unwrap_token(payload)
