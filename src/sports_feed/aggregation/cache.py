from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from sports_feed.domain.enums import SportEnum
from sports_feed.domain.event import Event

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheKey:
    sport: SportEnum | None
    is_live: bool | None

    def label(self) -> str:
        sport = self.sport.value if self.sport is not None else "all"
        live = "all" if self.is_live is None else str(self.is_live).lower()
        return f"{sport}|{live}"


@dataclass(frozen=True)
class CacheTtlPolicy:
    """Live odds go stale quickly, schedules do not."""

    live_ttl_s: float = 30.0
    upcoming_ttl_s: float = 300.0

    def ttl_for(self, key: CacheKey) -> float:
        # Anything that may contain live events uses the short TTL.
        if key.is_live is False:
            return self.upcoming_ttl_s
        return self.live_ttl_s


@dataclass(frozen=True)
class _Entry:
    events: tuple[Event, ...]
    expires_at: float
    cycle_id: int
    authentic: bool
    # Last moment the events may be served as last-known-good.
    retain_until: float


class EventCache:
    """
    The only shared mutable structure in the aggregator.

    Entries are written per cycle id: a write from an older cycle never
    replaces a newer cycle's entry. Expired authentic entries are kept for
    `stale_grace_s` so the facade can fall back to last-known-good data.
    """

    def __init__(
        self,
        *,
        stale_grace_s: float = 600.0,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._stale_grace_s = stale_grace_s
        self._monotonic = monotonic
        self._entries: dict[CacheKey, _Entry] = {}
        # Writes from cycles at or below this id predate the last invalidation.
        self._cycle_floor = 0
        self._lock = threading.Lock()

    def get(self, key: CacheKey) -> list[Event] | None:
        """Fresh entry or None (miss)."""
        now = self._monotonic()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or now >= entry.expires_at:
                logger.debug("cache miss %s", key.label())
                return None
        logger.debug("cache hit %s (%d events)", key.label(), len(entry.events))
        return list(entry.events)

    def get_last_known_good(self, key: CacheKey) -> list[Event] | None:
        """Authentic entry that may have expired but is still within the grace window."""
        now = self._monotonic()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or not entry.authentic:
                return None
            if now >= entry.retain_until:
                return None
        return list(entry.events)

    def serve_last_known_good(
        self, key: CacheKey, ttl_s: float, *, cycle_id: int
    ) -> list[Event] | None:
        """
        Re-cache the last-known-good events as a fresh entry for `ttl_s`.

        Used when a cycle produced nothing authentic, so callers inside the TTL
        hit the cache instead of re-running a cycle against failing providers.
        The fresh entry never outlives the original grace window.
        """
        now = self._monotonic()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or not entry.authentic or now >= entry.retain_until:
                return None
            if cycle_id > self._cycle_floor and cycle_id > entry.cycle_id:
                self._entries[key] = _Entry(
                    events=entry.events,
                    expires_at=min(now + ttl_s, entry.retain_until),
                    cycle_id=cycle_id,
                    authentic=True,
                    retain_until=entry.retain_until,
                )
        return list(entry.events)

    def put(
        self,
        key: CacheKey,
        events: Sequence[Event],
        ttl_s: float,
        *,
        cycle_id: int,
        authentic: bool = True,
    ) -> bool:
        """Store a copy; returns False when a newer cycle already wrote this key."""
        if ttl_s <= 0:
            raise ValueError("ttl_s must be positive")

        now = self._monotonic()
        entry = _Entry(
            events=tuple(events),
            expires_at=now + ttl_s,
            cycle_id=cycle_id,
            authentic=authentic,
            retain_until=now + ttl_s + (self._stale_grace_s if authentic else 0.0),
        )
        with self._lock:
            if cycle_id <= self._cycle_floor:
                logger.debug(
                    "dropping write for %s from pre-invalidation cycle %d", key.label(), cycle_id
                )
                return False
            current = self._entries.get(key)
            if current is not None and current.cycle_id > cycle_id:
                logger.debug(
                    "dropping late write for %s: cycle %d < %d",
                    key.label(),
                    cycle_id,
                    current.cycle_id,
                )
                return False
            self._entries[key] = entry
            self._purge_locked(now)
        return True

    def invalidate_all(self, *, through_cycle: int | None = None) -> None:
        """Drop every entry; with `through_cycle`, also reject later writes from cycles <= it."""
        with self._lock:
            self._entries.clear()
            if through_cycle is not None:
                self._cycle_floor = max(self._cycle_floor, through_cycle)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _purge_locked(self, now: float) -> None:
        dead = [k for k, e in self._entries.items() if now >= e.retain_until]
        for k in dead:
            del self._entries[k]
