import logging

from relay.exceptions import RelayError
from relay.services.envelopes import unwrap_doctors
from relay.services.normalize import exclude_test_practices, normalize_doctor
from relay.services.result import RelayResult
from relay.services.upstream import UpstreamClient

logger = logging.getLogger(__name__)


def list_doctors(client: UpstreamClient) -> RelayResult:
    """Fetch doctors from upstream, dropping test practices (order kept)."""
    try:
        raw = unwrap_doctors(client.get_doctors())
    except RelayError as e:
        return RelayResult.fail(e)
    doctors = exclude_test_practices(normalize_doctor(d) for d in raw)
    logger.info("Returning %d of %d doctors after filtering test practices", len(doctors), len(raw))
    return RelayResult.ok(doctors)
