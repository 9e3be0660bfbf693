"""Explicitly scoped cache for a market mortgage rate.

The cache is a plain object owned by whoever needs it (the web app keeps
one per application); nothing here is process-global. Fetching the rate is
left to a callable supplied by the owner.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from .logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_TTL = timedelta(hours=1)


@dataclass(frozen=True)
class CachedRate:
    value: float
    fetched_at: datetime
    source: str = "unknown"

    def is_expired(self, now: datetime, ttl: timedelta = DEFAULT_TTL) -> bool:
        return now - self.fetched_at >= ttl


class RateCache:
    """Holds at most one fetched rate together with its fetch time."""

    def __init__(self, ttl: timedelta = DEFAULT_TTL) -> None:
        self.ttl = ttl
        self._entry: Optional[CachedRate] = None

    @property
    def entry(self) -> Optional[CachedRate]:
        return self._entry

    def get(self, fetch: Callable[[], float], now: datetime, *, source: str = "unknown") -> CachedRate:
        """Return the cached rate, calling ``fetch`` first if it is missing or stale.

        A freshly fetched value is stamped with ``now``.
        """
        if self._entry is not None and not self._entry.is_expired(now, self.ttl):
            return self._entry
        logger.info("Rate cache empty or expired; fetching a fresh rate")
        self._entry = CachedRate(value=fetch(), fetched_at=now, source=source)
        return self._entry

    def clear(self) -> None:
        self._entry = None
