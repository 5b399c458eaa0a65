"""
HTTP client for the upstream MediBill API.

Each public method performs exactly one request and returns the decoded
JSON body.  Transport failures, non-2xx statuses and non-JSON bodies are
raised as :mod:`relay.exceptions` errors; envelope shapes are left to
:mod:`relay.services.envelopes`.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from relay.config import UpstreamConfig
from relay.exceptions import ConfigurationError, MalformedResponse, UpstreamHTTPError, UpstreamUnavailable
from relay.services.envelopes import error_message

logger = logging.getLogger(__name__)


class UpstreamClient:
    """Thin wrapper over ``requests.Session`` bound to one bearer token."""

    def __init__(self, config: UpstreamConfig, token: Optional[str] = None,
                 session: Optional[requests.Session] = None):
        self.config = config
        self.token = token
        self._owns_session = session is None
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, token: Optional[str] = None) -> 'UpstreamClient':
        return cls(UpstreamConfig.from_settings(), token=token)

    def clone(self) -> 'UpstreamClient':
        """Same config and token on a fresh session."""
        return type(self)(self.config, token=self.token)

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> 'UpstreamClient':
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _request(self, method: str, url: str, *, what: str, json_body: Any = None, auth: bool = True) -> Any:
        headers = {'Accept': 'application/json'}
        if auth:
            if not self.token:
                raise ConfigurationError('Upstream client used without a bearer token.')
            headers['Authorization'] = f'Bearer {self.token}'
        logger.info("%s %s", method, url)
        try:
            r = self.session.request(method, url, json=json_body, headers=headers, timeout=self.config.timeout)
        except requests.RequestException as e:
            logger.error("Network error calling %s %s: %s", method, url, e)
            raise UpstreamUnavailable(f'Network error or external API unreachable for {what}.') from e

        if not r.ok:
            message = error_message(r, f'External API error for {what}: {r.status_code}')
            logger.error("Upstream %s %s failed with status %s: %s", method, url, r.status_code, (r.text or '')[:200])
            raise UpstreamHTTPError(message, status_code=r.status_code)
        try:
            return r.json()
        except ValueError as e:
            logger.error("Non-JSON response from %s %s (status %s): %s", method, url, r.status_code, (r.text or '')[:200])
            raise MalformedResponse(f'Malformed JSON response from external API for {what}.') from e

    # -- auth ---------------------------------------------------------------

    def login(self, email: str, password: str) -> Any:
        url = self.config.url(self.config.login_path)
        return self._request('POST', url, what='login', json_body={'email': email, 'password': password}, auth=False)

    # -- doctors ------------------------------------------------------------

    def get_doctors(self) -> Any:
        return self._request('GET', self.config.url(self.config.doctors_path), what='doctors')

    # -- cases --------------------------------------------------------------

    def get_cases(self) -> Any:
        return self._request('GET', self.config.url(self.config.cases_path), what='cases')

    def get_doctor_cases(self, acc_no: str) -> Any:
        url = self.config.url(self.config.doctor_cases_path, acc_no=acc_no)
        return self._request('GET', url, what=f'cases of doctor {acc_no}')

    def put_case_status(self, case_id: str, case_status: str) -> Any:
        url = self.config.url(self.config.case_status_path, case_id=case_id)
        return self._request('PUT', url, what=f'case status update (case {case_id})',
                             json_body={'case_status': case_status})

    def put_case(self, case_id: str, payload: dict) -> Any:
        url = self.config.url(self.config.case_update_path, case_id=case_id)
        return self._request('PUT', url, what=f'case update (case {case_id})', json_body=payload)
