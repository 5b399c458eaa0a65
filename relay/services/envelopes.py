"""
Adapters for the upstream response envelopes.

The upstream contract has changed shape several times (``{status, doctors}``,
bare arrays, ``{case_submission}``, ``{case_submissions}`` ...).  All shape
detection lives here: each ``unwrap_*`` function sniffs the payload against
the known shapes in order and raises :class:`MalformedResponse` when none
matches.
"""
from __future__ import annotations

import json
from typing import Any, Optional

import requests

from relay.exceptions import MalformedResponse

# Envelope keys, in the order they are tried
DOCTOR_LIST_KEYS = ('doctors', 'data', 'results')
CASE_LIST_KEYS = ('case_submissions', 'case_submission', 'cases', 'data', 'results')
CASE_OBJECT_KEYS = ('case_submission', 'updated_case', 'case', 'data')
TOKEN_KEYS = ('token', 'access_token')


def _failed_status(payload: dict) -> bool:
    status = payload.get('status')
    return isinstance(status, str) and status.lower() not in ('success', 'ok')


def _dicts(items: list) -> list[dict]:
    return [i for i in items if isinstance(i, dict)]


def _looks_like_case(payload: dict) -> bool:
    return 'id' in payload and ('patient_name' in payload or 'case_status' in payload or 'doctor_acc_no' in payload)


def unwrap_doctors(payload: Any, message: Optional[str] = None) -> list[dict]:
    if isinstance(payload, list):
        return _dicts(payload)
    if isinstance(payload, dict) and not _failed_status(payload):
        for key in DOCTOR_LIST_KEYS:
            if isinstance(payload.get(key), list):
                return _dicts(payload[key])
    raise MalformedResponse(message or 'Received malformed doctor data structure from external API.')


def unwrap_cases(payload: Any, message: Optional[str] = None) -> list[dict]:
    if isinstance(payload, list):
        return _dicts(payload)
    if isinstance(payload, dict) and not _failed_status(payload):
        for key in CASE_LIST_KEYS:
            value = payload.get(key)
            if isinstance(value, list):
                return _dicts(value)
            if isinstance(value, dict):
                return [value]
        if _looks_like_case(payload):
            return [payload]
    raise MalformedResponse(message or 'Received malformed case data from external API.')


def unwrap_case(payload: Any, message: Optional[str] = None) -> dict:
    if isinstance(payload, dict) and not _failed_status(payload):
        if _looks_like_case(payload):
            return payload
        for key in CASE_OBJECT_KEYS:
            value = payload.get(key)
            if isinstance(value, dict):
                return value
            if isinstance(value, list) and len(value) == 1 and isinstance(value[0], dict):
                return value[0]
    raise MalformedResponse(message or 'Received malformed case data from external API.')


def unwrap_token(payload: Any) -> tuple[str, Optional[float]]:
    """Return ``(token, expires_in_seconds)`` from a login envelope."""
    if isinstance(payload, dict) and not _failed_status(payload):
        for source in (payload, payload.get('data')):
            if not isinstance(source, dict):
                continue
            for key in TOKEN_KEYS:
                token = source.get(key)
                if isinstance(token, str) and token:
                    return token, _expires_in(source.get('expires_in'))
    raise MalformedResponse('Authentication failed: Malformed response from authentication server.')


def _expires_in(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return None
    return seconds if seconds > 0 else None


def error_message(response: requests.Response, fallback: str) -> str:
    """Best-effort message extraction from an upstream error response."""
    text = response.text or ''
    try:
        body = json.loads(text)
    except ValueError:
        return text if 0 < len(text) < 100 else fallback
    if isinstance(body, dict):
        for key in ('message', 'detail', 'error'):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
            if value:
                return json.dumps(value)
    return fallback
