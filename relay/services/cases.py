"""
Case aggregation and update relays.

``fetch_cases`` issues one upstream request per doctor account number and
concatenates whatever succeeds; a failing doctor is logged and skipped, while
a configuration error fails the whole batch.  The update
functions return a :class:`RelayResult` carrying the re-normalized case
echoed by upstream.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Optional, Sequence

from relay.exceptions import ConfigurationError, RelayError
from relay.services.envelopes import unwrap_case, unwrap_cases
from relay.services.normalize import DERIVED_CASE_FIELDS, normalize_case, normalize_cases
from relay.services.result import RelayResult
from relay.services.upstream import UpstreamClient

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ('patient_name', 'treating_surgeon', 'doctor_acc_no')


def _fetch_for_doctor(client: UpstreamClient, acc_no: str) -> list[dict]:
    try:
        return unwrap_cases(client.get_doctor_cases(acc_no))
    except ConfigurationError:
        raise
    except RelayError as e:
        logger.warning("Skipping cases for doctor %s: %s (status %s)", acc_no, e.message, e.status_code)
        return []


def _fetch_in_worker(client: UpstreamClient, acc_no: str) -> list[dict]:
    # Sessions are not shared across threads
    with client.clone() as worker_client:
        return _fetch_for_doctor(worker_client, acc_no)


def fetch_cases(client: UpstreamClient, doctor_acc_nos: Sequence[str], *, workers: Optional[int] = None) -> RelayResult:
    """Aggregate normalized cases for ``doctor_acc_nos``.

    With no account numbers, the whole upstream case list is fetched in a
    single request and any error there is returned as a failure.  With
    ``workers`` > 1 the per-doctor requests run in a bounded thread pool;
    results keep the input order either way.
    """
    try:
        client.config.validate()
    except RelayError as e:
        return RelayResult.fail(e)

    if not doctor_acc_nos:
        try:
            raw = unwrap_cases(client.get_cases(), 'Received malformed case data (expected an array) from external API.')
        except RelayError as e:
            return RelayResult.fail(e)
        return RelayResult.ok(normalize_cases(raw))

    workers = max(1, workers if workers is not None else client.config.case_fetch_workers)
    try:
        if workers == 1:
            batches = [_fetch_for_doctor(client, acc_no) for acc_no in doctor_acc_nos]
        else:
            with ThreadPoolExecutor(max_workers=min(workers, len(doctor_acc_nos))) as pool:
                batches = list(pool.map(lambda acc_no: _fetch_in_worker(client, acc_no), doctor_acc_nos))
    except ConfigurationError as e:
        return RelayResult.fail(e)

    cases = [case for batch in batches for case in batch]
    logger.info("Fetched %d cases for %d doctors", len(cases), len(doctor_acc_nos))
    return RelayResult.ok(normalize_cases(cases))


def _updated(payload) -> dict:
    return {'success': True, 'updatedCase': normalize_case(unwrap_case(payload))}


def update_case_status(client: UpstreamClient, case_id: str, case_status: str) -> RelayResult:
    try:
        payload = client.put_case_status(case_id, case_status)
        return RelayResult.ok(_updated(payload))
    except RelayError as e:
        return RelayResult.fail(e)


def upstream_case_payload(data: dict) -> dict:
    """Strip locally derived keys before sending a case back upstream."""
    payload = {k: v for k, v in data.items() if k not in DERIVED_CASE_FIELDS}
    if 'case_status' not in payload and data.get('status') is not None:
        payload['case_status'] = data['status']
    return payload


def update_case(client: UpstreamClient, case_id: str, data: dict) -> RelayResult:
    try:
        payload = client.put_case(case_id, upstream_case_payload(data))
        return RelayResult.ok(_updated(payload))
    except RelayError as e:
        return RelayResult.fail(e)


# -- dashboard filtering ----------------------------------------------------

def filter_cases(cases: Iterable[dict], *, status: Optional[str] = None, q: Optional[str] = None) -> list[dict]:
    needle = (q or '').strip().lower()
    out = []
    for case in cases:
        if status and case.get('status') != status:
            continue
        if needle and not any(needle in str(case.get(f) or '').lower() for f in SEARCH_FIELDS):
            continue
        out.append(case)
    return out


def _sort_key(value):
    if isinstance(value, bool):
        return (0, int(value), '')
    if isinstance(value, (int, float)):
        return (0, value, '')
    return (1, 0, str(value).lower())


def sort_cases(cases: Iterable[dict], ordering: Optional[str]) -> list[dict]:
    """Stable sort on one field (``-field`` for descending); missing values last."""
    cases = list(cases)
    if not ordering:
        return cases
    field = ordering.lstrip('-')
    descending = ordering.startswith('-')
    present = [c for c in cases if c.get(field) not in (None, '')]
    missing = [c for c in cases if c.get(field) in (None, '')]
    present.sort(key=lambda c: _sort_key(c[field]), reverse=descending)
    return present + missing
