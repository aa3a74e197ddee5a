"""
One-time tokens for handing a signed-in session to another client.

The OAuth callback always lands on the server, in whatever browser the user
signed in with. The client that actually needs the session (the web SPA or
the desktop app woken through a custom URI scheme) receives a short-lived
token instead and trades it for the session via ``POST /api/auth/exchange``.

Token lifecycle:

    ISSUED -> REDEEMED   (first successful redeem)
    ISSUED -> EXPIRED    (TTL elapsed; removed on redeem or by the sweep)

Both end states are terminal.
"""

import logging
import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Generic, Optional, TypeVar

from commandstack.config import get_settings
from commandstack.time_utils import utcnow

logger = logging.getLogger(__name__)

P = TypeVar("P")


@dataclass(frozen=True)
class _Entry(Generic[P]):
    principal: P
    expires_at: datetime


class OneTimeTokenStore(Generic[P]):
    """
    Process-wide map of token -> (principal, expiry).

    A single lock guards the map, so ``redeem`` is an atomic take-and-delete:
    concurrent redeems of the same token produce exactly one winner.
    """

    def __init__(
        self,
        ttl: timedelta = timedelta(seconds=60),
        clock: Callable[[], datetime] = utcnow,
    ):
        self._ttl = ttl
        self._clock = clock
        self._entries: dict[str, _Entry[P]] = {}
        self._lock = threading.Lock()

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def issue(self, principal: P) -> str:
        """
        Store ``principal`` under a fresh token and return the token.

        Expired entries are swept on every call.
        """
        token = secrets.token_urlsafe(32)
        now = self._clock()

        with self._lock:
            self._entries[token] = _Entry(principal=principal, expires_at=now + self._ttl)
            swept = self._sweep(now)

        if swept:
            logger.debug(f"Swept {swept} expired one-time tokens")
        return token

    def redeem(self, token: Optional[str]) -> Optional[P]:
        """
        Remove ``token`` and return its principal.

        Returns:
            The principal, or None if the token is unknown, already
            redeemed, or expired
        """
        if not token:
            return None

        with self._lock:
            entry = self._entries.pop(token, None)

        if entry is None:
            return None

        if self._clock() >= entry.expires_at:
            logger.info("Rejected expired one-time token")
            return None

        return entry.principal

    def _sweep(self, now: datetime) -> int:
        expired = [token for token, entry in self._entries.items() if entry.expires_at <= now]
        for token in expired:
            del self._entries[token]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


_store: Optional[OneTimeTokenStore] = None
_store_lock = threading.Lock()


def get_token_store() -> OneTimeTokenStore:
    """Get or create the process-wide token store."""
    global _store
    if _store is None:
        with _store_lock:
            if _store is None:
                ttl = timedelta(seconds=get_settings().one_time_token_ttl_seconds)
                _store = OneTimeTokenStore(ttl=ttl)
    return _store
