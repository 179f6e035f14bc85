# ABOUTME: In-memory implementation of AbstractRevocationStore
# ABOUTME: Keeps revoked token ids until their own expiry, thread-safe

import threading
import time
from typing import Dict, Optional

from gatehouse.interfaces.auth.revocation_store import AbstractRevocationStore
from gatehouse.models.types import Clock


class InMemoryRevocationStore(AbstractRevocationStore):
    """
    Process-local set of revoked token ids.

    Entries expire with the token they revoke, so the store never grows
    beyond the tokens issued within one lifetime.
    """

    def __init__(self, clock: Optional[Clock] = None):
        self._clock = clock if clock is not None else time.time
        self._revoked: Dict[str, float] = {}
        self._lock = threading.RLock()

    def revoke(self, token_id: str, expires_at: float) -> None:
        if not token_id:
            raise ValueError("token_id must not be empty")
        with self._lock:
            self._revoked[token_id] = max(expires_at, self._revoked.get(token_id, expires_at))

    def is_revoked(self, token_id: str) -> bool:
        with self._lock:
            return token_id in self._revoked

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [token_id for token_id, expires_at in self._revoked.items() if expires_at < now]
            for token_id in expired:
                del self._revoked[token_id]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._revoked)
