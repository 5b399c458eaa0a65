"""
Normalization of loosely-typed upstream records.

Pure functions only: no I/O, no settings access, never raise on bad input.
"""
from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Iterable, Optional

STATUS_NEW = 'NEW'
STATUS_PROCESSED = 'PROCESSED'
CASE_STATUSES = (STATUS_NEW, STATUS_PROCESSED)

# Keys the normalizer adds on top of the upstream record
DERIVED_CASE_FIELDS = ('status', 'submittedDateTime', 'original_case_status')

SENTINEL_DATE = '1970-01-01'
SENTINEL_TIME = '00:00:00'

_DATE_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')
_TIME_RE = re.compile(r'^\d{2}:\d{2}(:\d{2})?$')


def normalize_status(value: Any) -> str:
    """Only the literal ``"PROCESSED"`` is processed; anything else is NEW."""
    return STATUS_PROCESSED if value == STATUS_PROCESSED else STATUS_NEW


def _valid_date(value: Any) -> Optional[str]:
    if not isinstance(value, str) or not _DATE_RE.match(value):
        return None
    try:
        datetime.strptime(value, '%Y-%m-%d')
    except ValueError:
        return None
    return value


def _valid_time(value: Any) -> Optional[str]:
    if not isinstance(value, str) or not _TIME_RE.match(value):
        return None
    if len(value) == 5:
        value = f"{value}:00"
    try:
        datetime.strptime(value, '%H:%M:%S')
    except ValueError:
        return None
    return value


def combine_service_datetime(service_date: Any, start_time: Any) -> str:
    """Combine ``YYYY-MM-DD`` and ``HH:MM[:SS]`` into a UTC ISO-8601 string.

    Each half falls back to its sentinel independently, so a good date with a
    missing time still yields that date at midnight.
    """
    date_part = _valid_date(service_date) or SENTINEL_DATE
    time_part = _valid_time(start_time) or SENTINEL_TIME
    return f"{date_part}T{time_part}Z"


def normalize_case(raw: dict) -> dict:
    case = dict(raw)
    raw_status = raw.get('case_status')
    case['status'] = normalize_status(raw_status)
    case['submittedDateTime'] = combine_service_datetime(raw.get('service_date'), raw.get('start_time'))
    case['original_case_status'] = raw_status if isinstance(raw_status, str) else ''
    return case


def normalize_cases(raws: Iterable[dict]) -> list[dict]:
    return [normalize_case(r) for r in raws]


def _first(raw: dict, *keys: str) -> Any:
    for key in keys:
        value = raw.get(key)
        if value not in (None, ''):
            return value
    return None


def normalize_doctor(raw: dict) -> dict:
    """Map the upstream doctor record onto ``{id, name, practiceName, specialty}``.

    ``id`` is the account number used to fetch that doctor's cases.
    """
    name = _first(raw, 'name', 'full_name', 'doctor_name')
    if name is None:
        name = ' '.join(p for p in (raw.get('first_name'), raw.get('last_name')) if p) or None
    ident = _first(raw, 'user_id', 'doctor_acc_no', 'id')
    return {
        'id': str(ident) if ident is not None else '',
        'name': name or '',
        'practiceName': _first(raw, 'practiceName', 'practice_name') or '',
        'specialty': _first(raw, 'specialty', 'speciality') or '',
    }


def is_test_practice(doctor: dict) -> bool:
    return 'TEST' in str(doctor.get('practiceName') or '').upper()


def exclude_test_practices(doctors: Iterable[dict]) -> list[dict]:
    return [d for d in doctors if not is_test_practice(d)]
