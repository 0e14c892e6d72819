from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Sequence

from sports_feed.core.config import Settings
from sports_feed.domain.enums import SportEnum
from sports_feed.domain.event import Event
from sports_feed.providers.base.adapter import SourceAdapter
from sports_feed.providers.base.types import FetchQuery
from sports_feed.providers.defaults import build_default_registry

from .cache import CacheKey, CacheTtlPolicy, EventCache
from .cascade import CascadeController, CascadePolicy, CycleResult
from .errors import AggregatorConfigError
from .synthetic import SyntheticGenerator

logger = logging.getLogger(__name__)

# Process-wide so cycles from different aggregators never share an id.
_cycle_ids = itertools.count(1)


class EventAggregator:
    """
    Entry point for callers: cache first, a cascade cycle on miss.

    Never raises for "no data". A cycle that produced nothing authentic does
    not overwrite a retained authentic entry; that entry is served instead,
    and cached again for one TTL so an outage does not trigger a cycle per call.
    """

    def __init__(
        self,
        cascade: CascadeController,
        cache: EventCache,
        *,
        ttl: CacheTtlPolicy,
    ) -> None:
        deadline = cascade.policy.cycle_deadline_s
        if deadline >= min(ttl.live_ttl_s, ttl.upcoming_ttl_s):
            raise AggregatorConfigError(
                f"cycle_deadline_s ({deadline}) must be below both cache TTLs "
                f"(live={ttl.live_ttl_s}, upcoming={ttl.upcoming_ttl_s})"
            )
        self._cascade = cascade
        self._cache = cache
        self._ttl = ttl
        self._last_cycle_id = 0
        self._lock = threading.Lock()
        self.last_result: CycleResult | None = None

    @property
    def adapters(self) -> list[SourceAdapter]:
        return self._cascade.adapters

    def get_events(
        self, sport: SportEnum | None = None, is_live: bool | None = None
    ) -> list[Event]:
        key = CacheKey(sport=sport, is_live=is_live)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        cycle_id = self._next_cycle_id()
        result = self._cascade.run(FetchQuery(sport=sport, is_live=is_live), cycle_id=cycle_id)
        self.last_result = result

        if result.authentic_count == 0:
            retained = self._cache.serve_last_known_good(
                key, self._ttl.ttl_for(key), cycle_id=cycle_id
            )
            if retained is not None:
                logger.warning(
                    "cycle %d for %s produced no authentic events; serving %d last-known-good",
                    cycle_id,
                    key.label(),
                    len(retained),
                )
                return retained

        self._cache.put(
            key,
            result.events,
            self._ttl.ttl_for(key),
            cycle_id=cycle_id,
            authentic=result.authentic_count > 0,
        )
        return list(result.events)

    def invalidate_cache(self) -> None:
        with self._lock:
            through = self._last_cycle_id
        self._cache.invalidate_all(through_cycle=through)

    def close(self) -> None:
        for adapter in self._cascade.adapters:
            close = getattr(adapter, "close", None)
            if callable(close):
                close()

    def __enter__(self) -> EventAggregator:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def _next_cycle_id(self) -> int:
        with self._lock:
            self._last_cycle_id = next(_cycle_ids)
            return self._last_cycle_id


def build_aggregator(
    adapters: Sequence[SourceAdapter],
    settings: Settings,
    *,
    synthetic: SyntheticGenerator | None = None,
) -> EventAggregator:
    if synthetic is None:
        synthetic = SyntheticGenerator(
            target_per_sport=settings.synthetic_target_per_sport,
            seed=settings.synthetic_seed,
        )
    cascade = CascadeController(
        adapters,
        policy=CascadePolicy.from_settings(settings),
        synthetic=synthetic,
    )
    return EventAggregator(
        cascade,
        EventCache(stale_grace_s=settings.stale_grace_s),
        ttl=CacheTtlPolicy(live_ttl_s=settings.live_ttl_s, upcoming_ttl_s=settings.upcoming_ttl_s),
    )


def build_default_aggregator(settings: Settings) -> EventAggregator:
    """Aggregator over every provider the settings enable."""

    registry = build_default_registry(settings)
    return build_aggregator(registry.build_all(), settings)
