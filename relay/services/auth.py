import hmac
import logging
import time
from dataclasses import dataclass
from typing import Optional

from relay.config import UpstreamConfig
from relay.exceptions import InvalidCredentials, RelayError
from relay.services.envelopes import unwrap_token
from relay.services.result import RelayResult
from relay.services.upstream import UpstreamClient

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_TTL_MS = 3600 * 1000


@dataclass
class AuthToken:
    token: str
    expires_at: int  # epoch milliseconds

    def as_dict(self) -> dict:
        return {'token': self.token, 'expiresAt': self.expires_at}


def _now_ms() -> int:
    return int(time.time() * 1000)


def login(config: UpstreamConfig, password: Optional[str] = None, *, client: Optional[UpstreamClient] = None) -> RelayResult:
    """Log in to upstream with the server-side credentials.

    The dashboard password is only checked when a gate password is
    configured; otherwise it is ignored.
    """
    try:
        if config.dashboard_password and not hmac.compare_digest(
                (password or '').encode(), config.dashboard_password.encode()):
            raise InvalidCredentials()
        config.require_credentials()
        logger.info("Attempting upstream login with email %s", config.email)
        if client is None:
            with UpstreamClient(config) as own_client:
                payload = own_client.login(config.email, config.password)
        else:
            payload = client.login(config.email, config.password)
        token, expires_in = unwrap_token(payload)
    except RelayError as e:
        logger.warning("Login failed: %s", e.message)
        return RelayResult.fail(e)

    ttl_ms = int(expires_in * 1000) if expires_in else DEFAULT_TOKEN_TTL_MS
    logger.info("Upstream login successful, token %s...", token[:10])
    return RelayResult.ok(AuthToken(token=token, expires_at=_now_ms() + ttl_ms))
