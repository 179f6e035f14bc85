# ABOUTME: Principal model derived from a verified token
# ABOUTME: Immutable identity and granted scopes owned by the request that validated the token

import time
from dataclasses import dataclass, field
from typing import Iterable


@dataclass(frozen=True)
class Principal:
    """
    The authenticated caller of a request.

    Built by the token validator from verified claims and discarded at the end
    of the request. Only ``subject`` and ``scopes`` take part in equality; the
    timestamps and token id are informational.
    """

    subject: str
    scopes: frozenset[str]
    issued_at: float | None = field(default=None, compare=False)
    expires_at: float | None = field(default=None, compare=False)
    token_id: str | None = field(default=None, compare=False)

    def has_scope(self, scope: str) -> bool:
        """Check if the principal was granted ``scope``."""
        return scope in self.scopes

    def missing_scopes(self, required: Iterable[str]) -> frozenset[str]:
        """Return the subset of ``required`` the principal was not granted."""
        return frozenset(required) - self.scopes

    def time_until_expiry(self, now: float | None = None) -> float | None:
        """Seconds left before the underlying token expires."""
        if self.expires_at is None:
            return None
        current = time.time() if now is None else now
        return max(0.0, self.expires_at - current)

    def __str__(self) -> str:
        return f"Principal(subject={self.subject})"
