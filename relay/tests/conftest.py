"""
Shared fixtures: a fake upstream MediBill API.

``requests.Session.request`` is replaced by a router that answers from
registered routes with real ``requests.Response`` objects, so the relay
code under test runs unmodified.
"""
import json

import pytest
import requests
from django.core.cache import cache
from rest_framework.test import APIClient

BASE_URL = 'https://upstream.test/api/v1'


class FakeUpstream:
    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, method, path, json_body=None, status=200, text=None, exc=None):
        self.routes[(method.upper(), BASE_URL + path)] = (json_body, status, text, exc)

    def handle(self, method, url, **kwargs):
        self.calls.append({'method': method.upper(), 'url': url, **kwargs})
        json_body, status, text, exc = self.routes.get(
            (method.upper(), url), ({'message': 'Not found'}, 404, None, None)
        )
        if exc is not None:
            raise exc
        resp = requests.Response()
        resp.status_code = status
        resp.url = url
        resp.encoding = 'utf-8'
        if text is not None:
            resp._content = text.encode()
            resp.headers['Content-Type'] = 'text/html'
        else:
            resp._content = json.dumps(json_body).encode()
            resp.headers['Content-Type'] = 'application/json'
        return resp

    def paths(self, method=None):
        return [c['url'][len(BASE_URL):] for c in self.calls if method is None or c['method'] == method]


@pytest.fixture(autouse=True)
def upstream_settings(settings):
    settings.MEDIBILL_API_BASE_URL = BASE_URL
    settings.MEDIBILL_APP_EMAIL = 'relay@example.com'
    settings.MEDIBILL_API_PASSWORD = 'upstream-secret'
    settings.MEDIBILL_DASHBOARD_PASSWORD = ''
    settings.MEDIBILL_CASE_FETCH_WORKERS = 1
    cache.clear()
    return settings


@pytest.fixture
def upstream(monkeypatch):
    fake = FakeUpstream()

    def request(session, method, url, **kwargs):
        return fake.handle(method, url, **kwargs)

    monkeypatch.setattr(requests.Session, 'request', request)
    return fake


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def auth_client():
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION='Bearer tok-123456789abc')
    return client


def make_case(case_id, acc_no='A1', **extra):
    case = {
        'id': case_id,
        'doctor_acc_no': acc_no,
        'patient_name': f'Patient {case_id}',
        'treating_surgeon': 'Dr. Surgeon',
        'service_date': '2024-05-01',
        'start_time': '10:30',
        'case_status': '',
    }
    case.update(extra)
    return case


@pytest.fixture
def case_factory():
    return make_case
