"""
Upstream API configuration.

Every value comes from Django settings (and thus from the environment);
the relay layer receives an :class:`UpstreamConfig` instance instead of
reading module-level constants, so tests can build one directly.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

from django.conf import settings

from relay.exceptions import ConfigurationError


@dataclass(frozen=True)
class UpstreamConfig:
    base_url: str
    email: str = ''
    password: str = ''
    dashboard_password: str = ''
    timeout: float = 15.0
    case_fetch_workers: int = 1
    login_path: str = '/auth/login'
    doctors_path: str = '/doctors'
    cases_path: str = '/cases'
    doctor_cases_path: str = '/cases/submissions/doctors/{acc_no}'
    case_status_path: str = '/cases/{case_id}/status'
    case_update_path: str = '/cases/submissions/update/{case_id}'

    @classmethod
    def from_settings(cls, overrides: Optional[dict] = None) -> 'UpstreamConfig':
        values = {
            'base_url': settings.MEDIBILL_API_BASE_URL,
            'email': settings.MEDIBILL_APP_EMAIL,
            'password': settings.MEDIBILL_API_PASSWORD,
            'dashboard_password': settings.MEDIBILL_DASHBOARD_PASSWORD,
            'timeout': settings.MEDIBILL_TIMEOUT,
            'case_fetch_workers': settings.MEDIBILL_CASE_FETCH_WORKERS,
            'login_path': settings.MEDIBILL_LOGIN_PATH,
            'doctors_path': settings.MEDIBILL_DOCTORS_PATH,
            'cases_path': settings.MEDIBILL_CASES_PATH,
            'doctor_cases_path': settings.MEDIBILL_DOCTOR_CASES_PATH,
            'case_status_path': settings.MEDIBILL_CASE_STATUS_PATH,
            'case_update_path': settings.MEDIBILL_CASE_UPDATE_PATH,
        }
        values.update(overrides or {})
        return cls(**values)

    @property
    def is_configured(self) -> bool:
        return (self.base_url or '').startswith(('http://', 'https://'))

    def validate(self) -> None:
        if not self.is_configured:
            raise ConfigurationError('Server configuration error: API base URL not set.')

    def require_credentials(self) -> None:
        self.validate()
        if not self.email or not self.password:
            raise ConfigurationError('Server configuration error: API credentials not set.')

    def url(self, path_template: str, **params) -> str:
        """Join ``path_template`` onto the base URL, quoting path parameters."""
        self.validate()
        try:
            path = path_template.format(**{k: quote(str(v), safe='') for k, v in params.items()})
        except (KeyError, IndexError, ValueError) as e:
            raise ConfigurationError(
                f'Server configuration error: invalid upstream path template {path_template!r}.'
            ) from e
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"
