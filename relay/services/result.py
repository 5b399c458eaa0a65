from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from relay.exceptions import RelayError


@dataclass
class RelayResult:
    """Outcome of a relay operation: either ``value`` or ``error``, never both.

    Service functions return this instead of raising, so every caller checks
    ``success`` the same way.
    """

    success: bool
    value: Any = None
    error: Optional[RelayError] = None

    @classmethod
    def ok(cls, value: Any) -> 'RelayResult':
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: RelayError) -> 'RelayResult':
        return cls(success=False, error=error)

    @property
    def status_code(self) -> int:
        return 200 if self.success else self.error.status_code

    def error_payload(self) -> dict:
        return self.error.as_payload()
