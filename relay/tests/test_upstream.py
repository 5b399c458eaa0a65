import pytest
import requests

from relay.config import UpstreamConfig
from relay.exceptions import (
    ConfigurationError,
    MalformedResponse,
    UpstreamHTTPError,
    UpstreamUnavailable,
)
from relay.services.upstream import UpstreamClient

from conftest import BASE_URL


@pytest.fixture
def client():
    return UpstreamClient(UpstreamConfig(base_url=BASE_URL + '/'), token='tok-abc')


def test_bearer_token_and_timeout_are_forwarded(upstream, client):
    upstream.add('GET', '/doctors', {'status': 'success', 'doctors': []})
    assert client.get_doctors() == {'status': 'success', 'doctors': []}
    call = upstream.calls[0]
    assert call['url'] == BASE_URL + '/doctors'
    assert call['headers']['Authorization'] == 'Bearer tok-abc'
    assert call['timeout'] == 15.0


def test_login_is_sent_without_bearer(upstream):
    upstream.add('POST', '/auth/login', {'token': 't'})
    client = UpstreamClient(UpstreamConfig(base_url=BASE_URL))
    client.login('a@b.c', 'pw')
    call = upstream.calls[0]
    assert 'Authorization' not in call['headers']
    assert call['json'] == {'email': 'a@b.c', 'password': 'pw'}


def test_path_parameters_are_quoted(upstream, client):
    upstream.add('GET', '/cases/submissions/doctors/A%201%2F2', [])
    assert client.get_doctor_cases('A 1/2') == []
    assert upstream.calls[0]['url'] == BASE_URL + '/cases/submissions/doctors/A%201%2F2'


def test_custom_paths_from_config(upstream):
    config = UpstreamConfig(base_url=BASE_URL, case_status_path='/cases/submissions/{case_id}/status')
    upstream.add('PUT', '/cases/submissions/9/status', {'id': 9, 'case_status': 'PROCESSED'})
    UpstreamClient(config, token='t').put_case_status('9', 'PROCESSED')
    assert upstream.calls[0]['json'] == {'case_status': 'PROCESSED'}


def test_non_2xx_relays_status_and_message(upstream, client):
    upstream.add('GET', '/doctors', {'detail': 'Token expired'}, status=401)
    with pytest.raises(UpstreamHTTPError) as exc:
        client.get_doctors()
    assert exc.value.status_code == 401
    assert exc.value.message == 'Token expired'


def test_non_2xx_short_text_body_is_used_as_message(upstream, client):
    upstream.add('GET', '/doctors', status=500, text='Gateway exploded')
    with pytest.raises(UpstreamHTTPError) as exc:
        client.get_doctors()
    assert exc.value.status_code == 500
    assert exc.value.message == 'Gateway exploded'


def test_non_2xx_long_html_gets_generic_message(upstream, client):
    upstream.add('GET', '/doctors', status=500, text='<html>' + 'x' * 500 + '</html>')
    with pytest.raises(UpstreamHTTPError) as exc:
        client.get_doctors()
    assert exc.value.message == 'External API error for doctors: 500'


def test_non_json_success_is_malformed(upstream, client):
    upstream.add('GET', '/cases', text='<html>maintenance</html>')
    with pytest.raises(MalformedResponse) as exc:
        client.get_cases()
    assert exc.value.status_code == 502


def test_network_failure(upstream, client):
    upstream.add('GET', '/doctors', exc=requests.ConnectionError('dns failure'))
    with pytest.raises(UpstreamUnavailable) as exc:
        client.get_doctors()
    assert exc.value.status_code == 503
    assert 'unreachable' in exc.value.message


def test_timeout_is_network_failure(upstream, client):
    upstream.add('GET', '/doctors', exc=requests.Timeout('slow'))
    with pytest.raises(UpstreamUnavailable):
        client.get_doctors()


@pytest.mark.parametrize('base_url', ['', 'api.medibill.test/api/v1', 'ftp://x'])
def test_unconfigured_base_url(upstream, base_url):
    with pytest.raises(ConfigurationError) as exc:
        UpstreamClient(UpstreamConfig(base_url=base_url), token='t').get_doctors()
    assert exc.value.status_code == 500
    assert upstream.calls == []


@pytest.mark.parametrize('template', ['/cases/doctor/{id}', '/cases/{0}', '/cases/{acc_no'])
def test_bad_path_template_is_configuration_error(upstream, template):
    client = UpstreamClient(UpstreamConfig(base_url=BASE_URL, doctor_cases_path=template), token='t')
    with pytest.raises(ConfigurationError) as exc:
        client.get_doctor_cases('A1')
    assert exc.value.status_code == 500
    assert template in exc.value.message
    assert upstream.calls == []


def test_close_only_closes_owned_session(monkeypatch):
    closed = []
    monkeypatch.setattr(requests.Session, 'close', lambda session: closed.append(session))

    shared = requests.Session()
    with UpstreamClient(UpstreamConfig(base_url=BASE_URL), session=shared):
        pass
    assert closed == []

    with UpstreamClient(UpstreamConfig(base_url=BASE_URL)) as client:
        owned = client.session
    assert closed == [owned]


def test_clone_uses_a_new_session(client):
    copy = client.clone()
    assert copy.session is not client.session
    assert copy.token == client.token
    assert copy.config is client.config


def test_missing_token_is_not_sent(upstream):
    with pytest.raises(ConfigurationError):
        UpstreamClient(UpstreamConfig(base_url=BASE_URL)).get_doctors()
    assert upstream.calls == []


def test_config_from_settings(settings):
    settings.MEDIBILL_DOCTOR_CASES_PATH = '/doctors/{acc_no}/cases'
    config = UpstreamConfig.from_settings({'timeout': 3})
    assert config.base_url == BASE_URL
    assert config.email == 'relay@example.com'
    assert config.doctor_cases_path == '/doctors/{acc_no}/cases'
    assert config.timeout == 3
